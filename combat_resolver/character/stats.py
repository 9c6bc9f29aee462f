"""
Character stats module for the combat resolver.

Handles the live stat values of a participant: the base stat adjusted by the
penalties of stacked injuries, plus the per-stat trauma breakdown shown on
sheets and round summaries.
"""

from collections import defaultdict
from collections.abc import Iterable

from pydantic import BaseModel, Field

from ..core.constants import DEFAULT_INJURY_TABLE, StatKind
from .models import Injury, InjuryRule, Participant

DEFAULT_INJURY_RULES: list[InjuryRule] = [
    InjuryRule(tag=tag, label=label, value=value, stack=stack)
    for tag, label, value, stack in DEFAULT_INJURY_TABLE
]


class TraumaTotals(BaseModel):
    """Injury penalties of a character, split by stat."""

    phys: int = Field(0, description="Penalty to the physical stat.")
    magic: int = Field(0, description="Penalty to the magical stat.")
    unique: int = Field(0, description="Penalty to the unique stat.")
    total: int = Field(0, description="Sum of every injury penalty.")

    def get(self, kind: StatKind) -> int:
        return getattr(self, kind.value)


def count_injuries(injuries: Iterable[Injury]) -> dict[str, int]:
    """
    Groups injuries by tag.

    Args:
        injuries (Iterable[Injury]): The injuries of a character.

    Returns:
        dict[str, int]: The number of instances per injury tag.

    """
    counts: dict[str, int] = defaultdict(int)
    for injury in injuries:
        counts[injury.template_id] += injury.count
    return dict(counts)


def _rules_by_tag(rules: Iterable[InjuryRule]) -> dict[str, InjuryRule]:
    return {rule.tag: rule for rule in rules}


def injury_penalty(
    participant: Participant,
    stat_kind: StatKind,
    rules: Iterable[InjuryRule] = DEFAULT_INJURY_RULES,
) -> int:
    """
    Computes the penalty the injuries of a participant apply to one stat.

    Only injury tags ending with the stat's suffix are counted; tags without
    a matching rule contribute nothing.

    Args:
        participant (Participant): The injured participant.
        stat_kind (StatKind): The stat to compute the penalty for.
        rules (Iterable[InjuryRule]): The injury rule table.

    Returns:
        int: The summed penalty (usually zero or negative).

    """
    by_tag = _rules_by_tag(rules)
    total = 0
    for tag, count in count_injuries(participant.medcard.injuries).items():
        if not tag.endswith(stat_kind.injury_suffix):
            continue
        rule = by_tag.get(tag)
        if rule is None:
            continue
        total += rule.penalty(count)
    return total


def live_stat(
    participant: Participant,
    stat_kind: StatKind,
    rules: Iterable[InjuryRule] = DEFAULT_INJURY_RULES,
) -> int:
    """
    Returns the current value of a stat after injury penalties.

    Args:
        participant (Participant): The participant whose stat is read.
        stat_kind (StatKind): The stat to read.
        rules (Iterable[InjuryRule]): The injury rule table.

    Returns:
        int: The base stat plus the (negative) injury penalty.

    """
    return participant.stats.get(stat_kind) + injury_penalty(
        participant, stat_kind, rules
    )


def trauma_totals(
    injuries: Iterable[Injury],
    rules: Iterable[InjuryRule] = DEFAULT_INJURY_RULES,
) -> TraumaTotals:
    """
    Computes the injury penalties of a medical card for every stat.

    Args:
        injuries (Iterable[Injury]): The injuries to evaluate.
        rules (Iterable[InjuryRule]): The injury rule table.

    Returns:
        TraumaTotals: The per-stat and total penalties.

    """
    by_tag = _rules_by_tag(rules)
    totals = {kind: 0 for kind in StatKind}
    grand_total = 0
    for tag, count in count_injuries(injuries).items():
        rule = by_tag.get(tag)
        if rule is None:
            continue
        penalty = rule.penalty(count)
        grand_total += penalty
        for kind in StatKind:
            if tag.endswith(kind.injury_suffix):
                totals[kind] += penalty
                break
    return TraumaTotals(
        phys=totals[StatKind.PHYS],
        magic=totals[StatKind.MAGIC],
        unique=totals[StatKind.UNIQUE],
        total=grand_total,
    )
