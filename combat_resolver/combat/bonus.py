"""
Bonus calculation module for the combat resolver.

Combines the ability's own bonus entries, the participant's live stats, the
weapon's bonuses and the matching modifiers into the single signed bonus
added to a roll.
"""

from collections.abc import Iterable

from pydantic import BaseModel, Field

from ..character.models import Ability, InjuryRule, Item, Participant
from ..character.stats import DEFAULT_INJURY_RULES, live_stat
from ..core.constants import DICE_POOL_BY_LEVEL, StatKind
from ..core.logging import log_debug
from ..core.tags import (
    infer_stat_kinds,
    is_any_stat,
    is_clean_bonus,
    merge_tags,
    stat_kind_of,
)
from .modifiers import Factor, matching_factors, visible_factor_names


class BonusBreakdown(BaseModel):
    """The result of a bonus calculation, with the parts that produced it."""

    total: int = Field(description="The signed bonus added to the roll.")
    dice: str = Field(description="The dice pool label, e.g. '2d100'.")
    inferred_stats: set[StatKind] = Field(
        default_factory=set,
        description="Stat kinds named by the merged tags.",
    )
    used_stats: set[StatKind] = Field(
        default_factory=set,
        description="Stat kinds injected by the ability's bonus entries.",
    )
    factors: list[Factor] = Field(
        default_factory=list,
        description="Modifiers that were added to the total.",
    )

    @property
    def signed_total(self) -> str:
        return f"+{self.total}" if self.total >= 0 else str(self.total)

    @property
    def visible_modifiers(self) -> list[str]:
        return visible_factor_names(self.factors)


def dice_pool(level: int) -> str:
    """
    Returns the dice pool label for a character level.

    Args:
        level (int): The level of the acting character.

    Returns:
        str: "3d100" from level 5, "2d100" from level 3, "1d100" otherwise.

    """
    for threshold, pool in DICE_POOL_BY_LEVEL:
        if level >= threshold:
            return pool
    return DICE_POOL_BY_LEVEL[-1][1]


def action_tags(ability: Ability, weapon: Item | None) -> list[str]:
    """The merged tags of an action: ability tags united with weapon tags."""
    return merge_tags(ability.tags, weapon.tags if weapon else None)


def _weapon_bonus_applies(stat: str, used: set[StatKind]) -> bool:
    if is_clean_bonus(stat) or is_any_stat(stat):
        return True
    kind = stat_kind_of(stat)
    return kind is not None and kind in used


def calculate_bonus(
    participant: Participant,
    ability: Ability,
    weapon: Item | None = None,
    rules: Iterable[InjuryRule] = DEFAULT_INJURY_RULES,
    excluded_names: Iterable[str] = (),
    opponent_tags: Iterable[str] | None = None,
    merged_tags: Iterable[str] | None = None,
) -> BonusBreakdown:
    """
    Computes the bonus of an action together with its breakdown.

    Steps:
        1. Infer the stat kinds the action uses from its merged tags.
        2. For each ability bonus entry, add the raw value; a recognised stat
           token also injects the live stat (once per stat kind) and marks
           the stat as used. A ``cleanb`` token only adds its raw value.
        3. Add weapon bonus entries whose token is ``cleanb``, empty, ``any``
           or a stat the action uses.
        4. Add every matching modifier that was not excluded.

    Args:
        participant (Participant):
            The acting participant.
        ability (Ability):
            The ability being used.
        weapon (Item | None):
            The weapon the ability is used with, if any.
        rules (Iterable[InjuryRule]):
            The injury rule table used for live stats.
        excluded_names (Iterable[str]):
            Names of modifiers the user switched off for this action.
        opponent_tags (Iterable[str] | None):
            The tag context of the opposing action, if known.
        merged_tags (Iterable[str] | None):
            Precomputed merged tags; derived from ability and weapon if None.

    Returns:
        BonusBreakdown:
            The total, the dice pool and the contributing parts.

    """
    rules = list(rules)
    tags = list(merged_tags) if merged_tags is not None else action_tags(ability, weapon)
    excluded = set(excluded_names)

    inferred = infer_stat_kinds(tags)
    used: set[StatKind] = set()
    total = 0

    for entry in ability.bonuses:
        if not is_clean_bonus(entry.stat):
            kind = stat_kind_of(entry.stat)
            if kind is not None and kind not in used:
                total += live_stat(participant, kind, rules)
                used.add(kind)
        total += entry.val

    if weapon is not None:
        usable_stats = used | inferred
        for entry in weapon.bonuses:
            if _weapon_bonus_applies(entry.stat, usable_stats):
                total += entry.val

    factors = [
        factor
        for factor in matching_factors(participant, tags, ability.name, opponent_tags)
        if factor.name not in excluded
    ]
    total += sum(factor.bonus for factor in factors)

    log_debug(
        f"Bonus for {participant.name}: {ability.name} = {total}",
        {"used": sorted(str(k) for k in used), "factors": len(factors)},
    )
    return BonusBreakdown(
        total=total,
        dice=dice_pool(participant.level),
        inferred_stats=inferred,
        used_stats=used,
        factors=factors,
    )


def total_bonus(
    participant: Participant,
    ability: Ability,
    weapon: Item | None = None,
    rules: Iterable[InjuryRule] = DEFAULT_INJURY_RULES,
    excluded_names: Iterable[str] = (),
    opponent_tags: Iterable[str] | None = None,
    merged_tags: Iterable[str] | None = None,
) -> int:
    """Returns only the signed total of :func:`calculate_bonus`."""
    return calculate_bonus(
        participant,
        ability,
        weapon,
        rules,
        excluded_names,
        opponent_tags,
        merged_tags,
    ).total
