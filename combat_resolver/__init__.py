"""
Combat resolver for a tabletop role-playing battle tracker.

Resolves queued action sequences into narrative text with computed dice
bonuses, and advances the cooldowns, effects and usage limits of every
participant between actions and rounds.
"""

from .character import (
    CharacterTemplate,
    InjuryRule,
    Participant,
    instantiate_participant,
    live_stat,
    renumber_participants,
)
from .combat import (
    add_custom_effect,
    add_injury,
    advance_round,
    commit_action_cost,
    commit_sequence,
    generate_stats_text,
    generate_summary,
    matching_factors,
    parse_tree,
    remove_cooldown,
    remove_effect,
    remove_injury,
    resolve,
    tick_action_timers,
    total_bonus,
)

__all__ = [
    "CharacterTemplate",
    "InjuryRule",
    "Participant",
    "add_custom_effect",
    "add_injury",
    "advance_round",
    "commit_action_cost",
    "commit_sequence",
    "generate_stats_text",
    "generate_summary",
    "instantiate_participant",
    "live_stat",
    "matching_factors",
    "parse_tree",
    "remove_cooldown",
    "remove_effect",
    "remove_injury",
    "renumber_participants",
    "resolve",
    "tick_action_timers",
    "total_bonus",
]
