"""
Summary module for the combat resolver.

Builds the plain-text reports posted between rounds: the round summary (the
condition of every participant, running effects and cooldowns) and the stat
sheet of every participant.
"""

import math
import re
from collections.abc import Iterable

from ..character.models import ActiveEffect, Participant
from ..core.constants import BATTLE_TIME_UNIT, STATUS_PHRASES, PassiveTrigger
from ..core.tags import SemanticTag, has_meaning

_DIGITS = re.compile(r"(\d+)")


def _natural_key(name: str) -> list:
    return [int(part) if part.isdigit() else part.lower() for part in _DIGITS.split(name)]


def sort_participants(participants: Iterable[Participant]) -> list[Participant]:
    """Sorts participants by template, then by name in natural order."""
    return sorted(participants, key=lambda p: (p.id, _natural_key(p.name)))


def format_duration(value: int, unit: str) -> str:
    """Formats a remaining duration, e.g. ``"2 turn"`` or ``"until the end of battle"``."""
    if (unit or "").lower() == BATTLE_TIME_UNIT:
        return "until the end of battle"
    return f"{value} {unit}"


def status_phrase(participant: Participant, round_number: int) -> str:
    """
    Picks the condition phrase of a participant.

    The tier follows the physical trauma, rounded up to a multiple of five;
    the phrase within the tier is chosen deterministically from the instance
    id, the trauma and the round.

    Args:
        participant (Participant): The participant to describe.
        round_number (int): The current round.

    Returns:
        str: A short condition phrase.

    """
    trauma = participant.battle_stats.trauma_phys
    seed = abs(sum(ord(c) for c in participant.instance_id) + trauma + round_number)
    if trauma == 0:
        phrases = STATUS_PHRASES[0]
    else:
        level = math.ceil(abs(trauma) / 5) * 5
        tier = next(
            (bound for bound in sorted(STATUS_PHRASES) if bound and level <= bound),
            max(STATUS_PHRASES),
        )
        phrases = STATUS_PHRASES[tier]
    return phrases[seed % len(phrases)]


def _trauma_parts(participant: Participant) -> list[str]:
    stats = participant.battle_stats
    parts = []
    if stats.trauma_phys:
        parts.append(f"Phys: {stats.trauma_phys}")
    if stats.trauma_mag:
        parts.append(f"Mag: {stats.trauma_mag}")
    if stats.trauma_uniq:
        parts.append(f"Uniq: {stats.trauma_uniq}")
    return parts


def classify_effect(effect: ActiveEffect) -> str:
    """Returns ``"form"``, ``"debuff"`` (any negative bonus) or ``"buff"``."""
    if has_meaning(effect.tags, SemanticTag.FORM):
        return "form"
    if any(bonus.val < 0 for bonus in effect.bonuses):
        return "debuff"
    return "buff"


def generate_summary(participants: Iterable[Participant], round_number: int) -> str:
    """
    Builds the end-of-round summary.

    Args:
        participants (Iterable[Participant]): The participants of the battle.
        round_number (int): The round that just ended.

    Returns:
        str: The summary text.

    """
    ordered = sort_participants(participants)
    text = ""
    for participant in ordered:
        parts = _trauma_parts(participant)
        injuries = f" ({', '.join(parts)})" if parts else ""
        text += f"{participant.name}: {status_phrase(participant, round_number)}{injuries}\n\n"

    groups: dict[str, list[str]] = {"form": [], "buff": [], "debuff": []}
    for participant in ordered:
        for effect in participant.active_effects:
            groups[classify_effect(effect)].append(
                f"{effect.name} ({participant.name}): "
                f"{format_duration(effect.duration_left, effect.unit)}"
            )
    for key, title in (
        ("form", "Active forms"),
        ("buff", "Active buffs"),
        ("debuff", "Active debuffs"),
    ):
        if groups[key]:
            text += f"{title}:\n" + "\n".join(groups[key]) + "\n\n"
    if not any(groups.values()):
        text += "(No active effects)\n\n"

    text += "Cooldowns:\n"
    cooldowns = [
        f"{cd.name} ({participant.name}): {cd.val} {cd.unit}"
        for participant in ordered
        for cd in participant.cooldowns
    ]
    if cooldowns:
        text += "\n".join(cooldowns) + "\n"
    return text


def participant_stats_text(participant: Participant) -> str:
    """Builds the stat block of a single participant."""
    stats = participant.battle_stats
    lines = [f"{participant.name} (level {participant.level})"]
    for label, base, trauma in (
        ("Physical", participant.stats.phys, stats.trauma_phys),
        ("Magical", participant.stats.magic, stats.trauma_mag),
        ("Unique", participant.stats.unique, stats.trauma_uniq),
    ):
        lines.append(f"{label} stat: {base}" + (f" ({trauma})" if trauma else ""))

    permanent = [p for p in participant.flat_passives if p.trigger == PassiveTrigger.ALWAYS]
    if permanent:
        lines.append("> Passives:")
        lines.extend(f"{p.name} ({p.desc_mech or 'no description'})" for p in permanent)

    groups: dict[str, list[str]] = {"form": [], "buff": [], "debuff": []}
    for effect in participant.active_effects:
        groups[classify_effect(effect)].append(
            f"{effect.name} (left: {format_duration(effect.duration_left, effect.unit)})"
        )
    for key, title in (("form", "Forms"), ("buff", "Buffs"), ("debuff", "Debuffs")):
        if groups[key]:
            lines.append(f"> {title}:")
            lines.extend(groups[key])
    return "\n".join(lines)


def generate_stats_text(participants: Iterable[Participant]) -> str:
    """Builds the stat blocks of every participant, separated by blank lines."""
    return "\n\n\n".join(
        participant_stats_text(p) for p in sort_participants(participants)
    )
