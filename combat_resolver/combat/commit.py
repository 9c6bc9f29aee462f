"""
Commit module for the combat resolver.

Applies the consequences of a resolved sequence to the participants (new
effects, cooldowns, usage counters and action ticks) and provides the manual
lifecycle edits available between commits.
"""

from collections import Counter, defaultdict
from collections.abc import Iterable

from catchery import log_warning

from ..character.models import (
    Ability,
    ActiveEffect,
    Bonus,
    Cooldown,
    Injury,
    InjuryRule,
    Participant,
)
from ..character.roster import find_participant
from ..character.stats import DEFAULT_INJURY_RULES, trauma_totals
from ..core.constants import DEFAULT_TIME_UNIT, PassiveTrigger
from ..core.logging import log_debug
from ..core.utils import generate_id
from .sequence import SequenceNode, iter_actions
from .timeline import add_cooldown, spawn_expiry_cooldowns, tick_action_timers

LINKED_TAG = "linked"


def _effect_from_ability(ability: Ability) -> ActiveEffect:
    return ActiveEffect(
        name=ability.name,
        tags=list(ability.tags),
        bonuses=list(ability.bonuses),
        duration_left=ability.dur,
        unit=ability.dur_unit or DEFAULT_TIME_UNIT,
        original_ability_id=ability.uid,
    )


def linked_effects(participant: Participant, ability: Ability) -> list[ActiveEffect]:
    """
    Builds the effects of the passives linked to an ability.

    A passive is linked when its trigger is ``ABILITY`` and it names the
    ability. The effect lasts as long as the ability's own effect.

    Args:
        participant (Participant): The owner of the passives.
        ability (Ability): The ability that was just used.

    Returns:
        list[ActiveEffect]: One effect per linked passive.

    """
    effects = []
    for passive in participant.flat_passives:
        if passive.trigger != PassiveTrigger.ABILITY:
            continue
        if passive.trigger_ability_id != ability.name:
            continue
        effects.append(
            ActiveEffect(
                name=passive.name,
                tags=[*passive.tags, "debuff" if passive.is_flaw else "buff", LINKED_TAG],
                bonuses=list(passive.bonuses),
                duration_left=ability.dur,
                unit=ability.dur_unit or DEFAULT_TIME_UNIT,
                original_ability_id=ability.uid,
            )
        )
    return effects


def commit_sequence(
    tree: Iterable[SequenceNode],
    participants: Iterable[Participant],
) -> list[Participant]:
    """
    Applies the consequences of a resolved sequence to the participants.

    For every action of the tree (depth-first), the used ability:
        - creates an active effect when it has a duration, together with the
          effects of the passives linked to it;
        - goes on cooldown when it has a cooldown, no duration and no usage
          limit.
    Each actor's action timers are then ticked by the number of actions it
    performed, its usage counters are incremented, and a usage-limited
    ability that reaches its limit goes on cooldown. Cooldowns are never
    duplicated by name.

    Args:
        tree (Iterable[SequenceNode]): The committed sequence.
        participants (Iterable[Participant]): The participants of the battle.

    Returns:
        list[Participant]: Updated copies, in the same order.

    """
    participants = list(participants)
    actions_per_actor: Counter[str] = Counter()
    used_abilities: dict[str, list[str]] = defaultdict(list)
    new_effects: dict[str, list[ActiveEffect]] = defaultdict(list)
    new_cooldowns: dict[str, list[Cooldown]] = defaultdict(list)

    for node in iter_actions(tree):
        actor = find_participant(participants, node.char_id)
        if actor is None:
            if node.char_id:
                log_warning(
                    "Committed action references an unknown participant.",
                    {"node": node.id, "char_id": node.char_id},
                )
            continue
        key = actor.instance_id
        actions_per_actor[key] += 1
        ability = actor.find_ability(node.ability_id)
        if ability is None:
            continue
        used_abilities[key].append(ability.uid)
        if ability.dur > 0:
            new_effects[key].append(_effect_from_ability(ability))
            new_effects[key].extend(linked_effects(actor, ability))
        elif ability.cd > 0 and not ability.is_usage_limited:
            new_cooldowns[key].append(Cooldown.for_ability(ability))

    result = []
    for participant in participants:
        key = participant.instance_id
        if key not in actions_per_actor:
            result.append(participant)
            continue
        updated = tick_action_timers(participant, actions_per_actor[key])

        usage_counts = dict(updated.usage_counts)
        limit_cooldowns: list[Cooldown] = []
        for uid in used_abilities[key]:
            ability = updated.find_ability(uid)
            if ability is None:
                continue
            usage_counts[ability.uid] = usage_counts.get(ability.uid, 0) + 1
            if (
                ability.is_usage_limited
                and usage_counts[ability.uid] >= ability.limit
                and ability.cd > 0
            ):
                limit_cooldowns.append(Cooldown.for_ability(ability))

        cooldowns = list(updated.cooldowns)
        for cooldown in [*new_cooldowns[key], *limit_cooldowns]:
            add_cooldown(cooldowns, cooldown)

        log_debug(
            f"Committed {actions_per_actor[key]} action(s) for {participant.name}.",
            {
                "effects": len(new_effects[key]),
                "cooldowns": len(cooldowns) - len(updated.cooldowns),
            },
        )
        result.append(
            updated.model_copy(
                update={
                    "usage_counts": usage_counts,
                    "active_effects": [*updated.active_effects, *new_effects[key]],
                    "cooldowns": cooldowns,
                }
            )
        )
    return result


# =============================================================================
# MANUAL EDITS
# =============================================================================


def _update_one(participants, participant_id, update_fn) -> list[Participant]:
    return [
        update_fn(p) if p.instance_id == participant_id else p for p in participants
    ]


def remove_effect(
    participants: Iterable[Participant],
    participant_id: str,
    effect_id: str,
) -> list[Participant]:
    """
    Removes an active effect by hand, putting its source ability on cooldown.

    Args:
        participants (Iterable[Participant]): The participants of the battle.
        participant_id (str): Instance id of the effect's owner.
        effect_id (str): Id of the effect to remove.

    Returns:
        list[Participant]: The updated participants.

    """

    def _remove(participant: Participant) -> Participant:
        removed = [e for e in participant.active_effects if e.id == effect_id]
        effects = [e for e in participant.active_effects if e.id != effect_id]
        cooldowns = list(participant.cooldowns)
        spawn_expiry_cooldowns(participant, removed, cooldowns)
        return participant.model_copy(
            update={"active_effects": effects, "cooldowns": cooldowns}
        )

    return _update_one(participants, participant_id, _remove)


def remove_cooldown(
    participants: Iterable[Participant],
    participant_id: str,
    cooldown_id: str,
) -> list[Participant]:
    """Removes a cooldown by hand."""
    return _update_one(
        participants,
        participant_id,
        lambda p: p.model_copy(
            update={"cooldowns": [cd for cd in p.cooldowns if cd.id != cooldown_id]}
        ),
    )


def add_custom_effect(
    participants: Iterable[Participant],
    participant_id: str,
    name: str,
    tag: str,
    value: int,
    duration: int,
    unit: str = DEFAULT_TIME_UNIT,
    extra_tag: str | None = None,
) -> list[Participant]:
    """
    Adds a hand-made effect (usually a debuff) to a participant.

    Args:
        participants (Iterable[Participant]):
            The participants of the battle.
        participant_id (str):
            Instance id of the target.
        name (str):
            Name of the effect.
        tag (str):
            Main tag, also used as the stat token of its single bonus.
            ``"none"`` or an empty string adds no tag.
        value (int):
            The bonus value (negative for a debuff).
        duration (int):
            The duration of the effect.
        unit (str):
            The unit the duration ticks in.
        extra_tag (str | None):
            An additional tag to match actions against.

    Returns:
        list[Participant]: The updated participants.

    """
    tags = []
    if tag and tag != "none":
        tags.append(tag)
    if extra_tag:
        tags.append(extra_tag.lower().strip())
    effect = ActiveEffect(
        id=generate_id("custom"),
        name=name,
        tags=tags,
        bonuses=[Bonus(stat=tag, val=value)],
        duration_left=duration,
        unit=unit or DEFAULT_TIME_UNIT,
    )
    return _update_one(
        participants,
        participant_id,
        lambda p: p.model_copy(update={"active_effects": [*p.active_effects, effect]}),
    )


def _with_injuries(
    participant: Participant,
    injuries: list[Injury],
    rules: Iterable[InjuryRule],
) -> Participant:
    trauma = trauma_totals(injuries, rules)
    return participant.model_copy(
        update={
            "medcard": participant.medcard.model_copy(update={"injuries": injuries}),
            "battle_stats": participant.battle_stats.model_copy(
                update={
                    "hp_penalty_current": trauma.total,
                    "trauma_phys": trauma.phys,
                    "trauma_mag": trauma.magic,
                    "trauma_uniq": trauma.unique,
                }
            ),
        }
    )


def add_injury(
    participants: Iterable[Participant],
    participant_id: str,
    template_id: str,
    rules: Iterable[InjuryRule] = DEFAULT_INJURY_RULES,
) -> list[Participant]:
    """
    Records one instance of an injury and refreshes the trauma counters.

    Args:
        participants (Iterable[Participant]): The participants of the battle.
        participant_id (str): Instance id of the injured participant.
        template_id (str): Tag of the injury rule.
        rules (Iterable[InjuryRule]): The injury rule table.

    Returns:
        list[Participant]: The updated participants.

    """
    rules = list(rules)
    return _update_one(
        participants,
        participant_id,
        lambda p: _with_injuries(
            p, [*p.medcard.injuries, Injury(template_id=template_id)], rules
        ),
    )


def remove_injury(
    participants: Iterable[Participant],
    participant_id: str,
    index: int,
    rules: Iterable[InjuryRule] = DEFAULT_INJURY_RULES,
) -> list[Participant]:
    """Removes the injury at ``index`` and refreshes the trauma counters."""
    rules = list(rules)

    def _remove(participant: Participant) -> Participant:
        injuries = list(participant.medcard.injuries)
        if 0 <= index < len(injuries):
            del injuries[index]
        else:
            log_warning(
                "Injury index out of range.",
                {"participant": participant.name, "index": index},
            )
        return _with_injuries(participant, injuries, rules)

    return _update_one(participants, participant_id, _remove)
