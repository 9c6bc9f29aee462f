"""
Modifier aggregation module for the combat resolver.

Collects the bonus contributions that apply to one action: passives whose
trigger matches the action, active effects and equipped wearables whose tags
overlap the action's merged tags.
"""

from collections.abc import Iterable

from pydantic import BaseModel, Field

from ..character.models import Participant, Passive, sum_bonuses
from ..core.constants import FactorType, PassiveTrigger
from ..core.logging import log_debug
from ..core.tags import has_overlap, is_defensive, is_offensive, normalize_tags


class Factor(BaseModel):
    """A named bonus contribution to an action's roll."""

    name: str = Field(description="Name of the passive, effect or item.")
    bonus: int = Field(description="Summed bonus value of the source.")
    type: FactorType = Field(description="Kind of source.")
    tags: list[str] = Field(default_factory=list, description="Source tags.")
    visible: bool = Field(
        False,
        description="Whether the factor is printed in the narration.",
    )
    trigger: PassiveTrigger | None = Field(
        None,
        description="Trigger of the passive, for passive factors.",
    )
    mechanics: str = Field("", description="Mechanical description of the source.")


def passive_applies(
    passive: Passive,
    action_tags: list[str],
    ability_name: str,
    opponent_tags: list[str] | None,
) -> bool:
    """
    Checks whether a passive contributes to an action.

    Args:
        passive (Passive):
            The passive to check.
        action_tags (list[str]):
            The merged tags of the action (ability and weapon).
        ability_name (str):
            The name of the acting ability.
        opponent_tags (list[str] | None):
            The tags of the opposing action, or None when unknown.

    Returns:
        bool:
            True if the passive's trigger condition matches the action.

    """
    trigger = passive.trigger
    if trigger == PassiveTrigger.ABILITY:
        return bool(passive.trigger_ability_id) and passive.trigger_ability_id == ability_name
    if trigger in (PassiveTrigger.WEAKNESS, PassiveTrigger.RESISTANCE):
        if opponent_tags is None:
            return False
        return has_overlap(passive.tags, opponent_tags)
    if trigger == PassiveTrigger.ON_HIT:
        return is_offensive(action_tags)
    if trigger == PassiveTrigger.ON_DEFENSE:
        return is_defensive(action_tags)
    if trigger == PassiveTrigger.ALWAYS:
        return has_overlap(passive.tags, action_tags)
    # Combat-start passives act through their startup effect; other event
    # triggers never match by tags.
    return False


def matching_factors(
    participant: Participant,
    action_tags: Iterable[str],
    ability_name: str,
    opponent_tags: Iterable[str] | None = None,
) -> list[Factor]:
    """
    Returns every modifier that applies to an action of a participant.

    Passives are filtered by trigger, active effects by tag overlap, and
    wearables by tag overlap when equipped. Weakness and resistance passives
    apply to the total but stay hidden from the narration; factors from
    ability, on-hit and on-defense triggers are visible.

    Args:
        participant (Participant):
            The acting participant.
        action_tags (Iterable[str]):
            The merged tags of the action.
        ability_name (str):
            The name of the acting ability.
        opponent_tags (Iterable[str] | None):
            The tag context of the opposing action, if any.

    Returns:
        list[Factor]:
            The matching factors: passives first, then effects, then items.

    """
    tags = normalize_tags(action_tags)
    opponent = normalize_tags(opponent_tags) if opponent_tags is not None else None
    factors: list[Factor] = []

    for passive in participant.flat_passives:
        if not passive_applies(passive, tags, ability_name, opponent):
            continue
        factors.append(
            Factor(
                name=passive.name,
                bonus=sum_bonuses(passive.bonuses),
                type=FactorType.PASSIVE,
                tags=passive.tags,
                visible=passive.trigger.is_visible,
                trigger=passive.trigger,
                mechanics=passive.desc_mech,
            )
        )

    for effect in participant.active_effects:
        if not has_overlap(effect.tags, tags):
            continue
        source = participant.find_ability(effect.original_ability_id)
        factors.append(
            Factor(
                name=effect.name,
                bonus=sum_bonuses(effect.bonuses),
                type=FactorType.EFFECT,
                tags=effect.tags,
                mechanics=source.desc_mech if source else "",
            )
        )

    for item in participant.equipment.wearable:
        if not item.is_equipped or not has_overlap(item.tags, tags):
            continue
        factors.append(
            Factor(
                name=item.name,
                bonus=sum_bonuses(item.bonuses),
                type=FactorType.ITEM,
                tags=item.tags,
                mechanics=item.desc_mech,
            )
        )

    log_debug(
        f"{len(factors)} modifier(s) match '{ability_name}' for {participant.name}.",
        {"tags": tags, "opponent_tags": opponent},
    )
    return factors


def visible_factor_names(factors: Iterable[Factor]) -> list[str]:
    """Names of the factors printed in the narration, without duplicates."""
    names: list[str] = []
    for factor in factors:
        if factor.visible and factor.name not in names:
            names.append(factor.name)
    return names
