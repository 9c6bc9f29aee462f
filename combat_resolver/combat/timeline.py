"""
Timeline module for the combat resolver.

Advances the timers of the battle: round ticks for cooldowns, effects and
usage limits measured in rounds, and action ticks for the ones measured in
actions. Expired effects linked to an ability put that ability on cooldown.
"""

from collections.abc import Iterable

from catchery import log_warning

from ..character.models import ActiveEffect, Cooldown, Participant
from ..core.constants import ACTION_UNITS, ROUND_UNITS
from ..core.logging import log_debug


def add_cooldown(cooldowns: list[Cooldown], cooldown: Cooldown) -> bool:
    """
    Appends a cooldown unless one with the same name already exists.

    Args:
        cooldowns (list[Cooldown]): The list to extend in place.
        cooldown (Cooldown): The cooldown to add.

    Returns:
        bool: True if the cooldown was added.

    """
    if any(existing.name == cooldown.name for existing in cooldowns):
        return False
    cooldowns.append(cooldown)
    return True


def spawn_expiry_cooldowns(
    participant: Participant,
    expired: Iterable[ActiveEffect],
    cooldowns: list[Cooldown],
) -> None:
    """
    Puts the source abilities of expired effects on cooldown.

    Effects without a source ability, or whose source has no cooldown, are
    dropped silently.

    Args:
        participant (Participant): The owner of the effects.
        expired (Iterable[ActiveEffect]): The effects that just ended.
        cooldowns (list[Cooldown]): The cooldown list to extend in place.

    """
    for effect in expired:
        log_debug(f"{participant.name}: effect '{effect.name}' expired.")
        if not effect.original_ability_id:
            continue
        source = participant.find_ability(effect.original_ability_id)
        if source is None or source.cd <= 0:
            continue
        if add_cooldown(cooldowns, Cooldown.for_ability(source)):
            log_debug(
                f"{participant.name}: '{source.name}' goes on cooldown.",
                {"val": source.cd, "unit": source.cooldown_unit},
            )


def _reset_round_limits(
    participant: Participant,
    cooldowns: list[Cooldown],
) -> dict[str, int]:
    usage_counts = dict(participant.usage_counts)
    for ability in participant.flat_abilities:
        if not ability.has_round_limit:
            continue
        count = usage_counts.get(ability.uid, 0)
        if 0 < count < ability.limit:
            if ability.cd > 0:
                add_cooldown(cooldowns, Cooldown.for_ability(ability))
        elif count >= ability.limit and ability.cd > 0:
            if not any(cd.name == ability.name for cd in cooldowns):
                log_warning(
                    "Ability reached its usage limit without a cooldown.",
                    {"participant": participant.name, "ability": ability.name},
                )
        usage_counts[ability.uid] = 0
    return usage_counts


def advance_participant(participant: Participant) -> Participant:
    """
    Advances the round-based timers of a single participant.

    Args:
        participant (Participant): The participant to advance.

    Returns:
        Participant: An updated copy of the participant.

    """
    cooldowns = list(participant.cooldowns)
    usage_counts = _reset_round_limits(participant, cooldowns)

    cooldowns = [
        cd.model_copy(update={"val": cd.val - 1})
        if cd.normalized_unit in ROUND_UNITS
        else cd
        for cd in cooldowns
    ]
    cooldowns = [cd for cd in cooldowns if cd.val > 0]

    effects: list[ActiveEffect] = []
    expired: list[ActiveEffect] = []
    for effect in participant.active_effects:
        if effect.normalized_unit not in ROUND_UNITS:
            effects.append(effect)
        elif effect.duration_left > 1:
            effects.append(
                effect.model_copy(update={"duration_left": effect.duration_left - 1})
            )
        else:
            expired.append(effect)
    spawn_expiry_cooldowns(participant, expired, cooldowns)

    return participant.model_copy(
        update={
            "active_effects": effects,
            "cooldowns": cooldowns,
            "usage_counts": usage_counts,
        }
    )


def advance_round(participants: Iterable[Participant]) -> list[Participant]:
    """
    Advances every participant by one combat round.

    For each participant, in order:
        1. Round-limited abilities used fewer times than their limit go on
           cooldown, and every round-limited usage counter is zeroed.
        2. Round-unit cooldowns lose one point and are dropped at zero.
        3. Round-unit effects lose one point; effects at their last point
           expire and put their source ability on cooldown.

    Args:
        participants (Iterable[Participant]): The participants of the battle.

    Returns:
        list[Participant]: Updated copies, in the same order.

    """
    result = [advance_participant(participant) for participant in participants]
    log_debug("Round advanced.", {"participants": len(result)})
    return result


def tick_action_timers(participant: Participant, cost: int) -> Participant:
    """
    Advances the action-based timers of a participant.

    Args:
        participant (Participant): The acting participant.
        cost (int): The number of actions spent.

    Returns:
        Participant: An updated copy of the participant.

    """
    cooldowns = [
        cd.model_copy(update={"val": max(0, cd.val - cost)})
        if cd.normalized_unit in ACTION_UNITS
        else cd
        for cd in participant.cooldowns
    ]
    cooldowns = [cd for cd in cooldowns if cd.val > 0]

    effects: list[ActiveEffect] = []
    expired: list[ActiveEffect] = []
    for effect in participant.active_effects:
        if effect.normalized_unit not in ACTION_UNITS:
            effects.append(effect)
            continue
        remaining = effect.duration_left - cost
        if remaining > 0:
            effects.append(effect.model_copy(update={"duration_left": remaining}))
        else:
            expired.append(effect)
    spawn_expiry_cooldowns(participant, expired, cooldowns)

    return participant.model_copy(
        update={"active_effects": effects, "cooldowns": cooldowns}
    )


def commit_action_cost(
    participants: Iterable[Participant],
    actor_id: str,
    cost: int,
) -> list[Participant]:
    """
    Applies an action cost to the participant with the given instance id.

    Args:
        participants (Iterable[Participant]): The participants of the battle.
        actor_id (str): The instance id of the acting participant.
        cost (int): The number of actions spent.

    Returns:
        list[Participant]: The participants, with the actor's timers ticked.

    """
    return [
        tick_action_timers(p, cost) if p.instance_id == actor_id else p
        for p in participants
    ]
