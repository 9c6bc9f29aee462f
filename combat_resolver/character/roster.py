"""
Roster module for the combat resolver.

Turns stored character templates into battle participants: flattens the
grouped abilities and passives, numbers duplicates of the same template and
applies the passives that trigger when combat starts.
"""

import re
from collections.abc import Iterable

from ..core.constants import (
    BATTLE_DURATION,
    BATTLE_TIME_UNIT,
    DEFAULT_TIME_UNIT,
    NO_WAR_TAG,
    PassiveTrigger,
)
from ..core.logging import log_debug
from ..core.tags import merge_tags
from ..core.utils import generate_id
from .models import (
    Ability,
    ActiveEffect,
    BattleStats,
    CharacterTemplate,
    Participant,
    Passive,
)
from .stats import trauma_totals

_NUMBER_SUFFIX = re.compile(r" #(\d+)$")


def find_participant(
    participants: Iterable[Participant],
    ref: str | None,
) -> Participant | None:
    """
    Finds a participant by instance id, falling back to the template id.

    Args:
        participants (Iterable[Participant]): The participants to search.
        ref (str | None): The instance id or template id.

    Returns:
        Participant | None: The first match, or None.

    """
    if not ref:
        return None
    participants = list(participants)
    for participant in participants:
        if participant.instance_id == ref:
            return participant
    for participant in participants:
        if participant.id == ref:
            return participant
    return None


def flatten_template(template: CharacterTemplate) -> CharacterTemplate:
    """
    Fills the flat ability and passive lists of a template.

    Abilities inherit the tags of their group; abilities tagged ``no_war``
    stay in their group but are left out of the flat list. Passives take the
    flaw flag of their group. A template without groups keeps the flat lists
    it already has.

    Args:
        template (CharacterTemplate): The stored character.

    Returns:
        CharacterTemplate: A copy with flattened lists.

    """
    update: dict = {}
    if template.ability_groups:
        groups = []
        flat_abilities: list[Ability] = []
        for group in template.ability_groups:
            abilities = [
                ability.model_copy(update={"tags": merge_tags(group.tags, ability.tags)})
                for ability in group.abilities
            ]
            flat_abilities.extend(a for a in abilities if NO_WAR_TAG not in a.tags)
            groups.append(group.model_copy(update={"abilities": abilities}))
        update["ability_groups"] = groups
        update["flat_abilities"] = flat_abilities

    if template.passives:
        flat_passives: list[Passive] = []
        for group in template.passives:
            for passive in group.items:
                flat_passives.append(
                    passive.model_copy(
                        update={"is_flaw": passive.is_flaw or group.is_flaw_group}
                    )
                )
        update["flat_passives"] = flat_passives

    return template.model_copy(update=update) if update else template


def _base_name(name: str) -> str:
    return _NUMBER_SUFFIX.sub("", name)


def _next_name(
    template: CharacterTemplate,
    participants: list[Participant],
) -> tuple[str, list[Participant]]:
    base = template.name
    same_type = [p for p in participants if p.id == template.id]
    if not same_type:
        return base, participants

    participants = [
        _renamed(p, f"{base} #1") if p.id == template.id and p.name == base else p
        for p in participants
    ]
    pattern = re.compile(rf"^{re.escape(base)} #(\d+)$")
    used = [0]
    for participant in participants:
        if participant.id != template.id:
            continue
        match = pattern.match(participant.name)
        used.append(int(match.group(1)) if match else 0)
    return f"{base} #{max(used) + 1}", participants


def _renamed(participant: Participant, name: str) -> Participant:
    return participant.model_copy(
        update={"profile": participant.profile.model_copy(update={"name": name})}
    )


def startup_effect(passive: Passive) -> ActiveEffect:
    """
    Builds the effect of a passive that triggers when combat starts.

    A passive without a duration lasts the whole battle.

    Args:
        passive (Passive): The combat-start passive.

    Returns:
        ActiveEffect: The effect applied to the new participant.

    """
    has_duration = passive.dur > 0
    return ActiveEffect(
        id=generate_id("start"),
        name=passive.name,
        tags=[*passive.tags, "debuff" if passive.is_flaw else "buff"],
        bonuses=list(passive.bonuses),
        duration_left=passive.dur if has_duration else BATTLE_DURATION,
        unit=(passive.dur_unit or DEFAULT_TIME_UNIT) if has_duration else BATTLE_TIME_UNIT,
        original_ability_id=passive.uid,
    )


def instantiate_participant(
    template: CharacterTemplate,
    participants: Iterable[Participant],
) -> tuple[list[Participant], str]:
    """
    Adds a battle instance of a template to the participants.

    When the template is already in battle, every instance is numbered
    (``Rat #1``, ``Rat #2``). Passives triggering on combat start become
    active effects and are narrated, one line each.

    Args:
        template (CharacterTemplate):
            The stored character to add.
        participants (Iterable[Participant]):
            The current participants.

    Returns:
        tuple[list[Participant], str]:
            The participants with the new one appended, and the startup
            narration (empty when no passive triggered).

    """
    template = flatten_template(template)
    name, current = _next_name(template, list(participants))

    effects: list[ActiveEffect] = []
    lines: list[str] = []
    seen: set[str] = set()
    for passive in template.flat_passives:
        if passive.uid in seen:
            continue
        seen.add(passive.uid)
        if passive.trigger != PassiveTrigger.COMBAT_START:
            continue
        mechanics = f" ({passive.desc_mech})" if passive.desc_mech else ""
        lines.append(f"> ({name}: {passive.name}{mechanics})")
        effects.append(startup_effect(passive))

    trauma = trauma_totals(template.medcard.injuries)
    data = template.model_dump(by_alias=False)
    data["profile"]["name"] = name
    participant = Participant.model_validate(
        {
            **data,
            "instance_id": generate_id(f"char_{template.id}"),
            "battle_stats": BattleStats(
                hp_penalty_current=trauma.total,
                trauma_phys=trauma.phys,
                trauma_mag=trauma.magic,
                trauma_uniq=trauma.unique,
            ),
            "active_effects": effects,
        }
    )
    log_debug(
        f"{name} joined the battle.",
        {"instance_id": participant.instance_id, "startup_effects": len(effects)},
    )
    return [*current, participant], "\n".join(lines)


def renumber_participants(participants: Iterable[Participant]) -> list[Participant]:
    """
    Renumbers same-template participants after one of them left.

    Participants sharing a template and a base name are numbered ``#1..#n`` in
    order; a lone participant keeps its number only if it already had one.

    Args:
        participants (Iterable[Participant]): The remaining participants.

    Returns:
        list[Participant]: The participants with consistent numbering.

    """
    result = list(participants)
    groups: dict[tuple[str, str], list[int]] = {}
    for index, participant in enumerate(result):
        key = (participant.id, _base_name(participant.name))
        groups.setdefault(key, []).append(index)

    for (_, base), indices in groups.items():
        first = result[indices[0]]
        if len(indices) == 1 and not _NUMBER_SUFFIX.search(first.name):
            continue
        for number, index in enumerate(indices, start=1):
            name = f"{base} #{number}"
            if result[index].name != name:
                result[index] = _renamed(result[index], name)
    return result


def remove_participant(
    participants: Iterable[Participant],
    instance_id: str,
) -> list[Participant]:
    """Removes a participant by instance id and renumbers the others."""
    return renumber_participants(p for p in participants if p.instance_id != instance_id)
