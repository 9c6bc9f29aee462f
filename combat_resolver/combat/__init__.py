"""
Combat module for the combat resolver.

This module handles the resolution of queued action sequences: modifier
aggregation, bonus calculation, narration, commit-time bookkeeping and the
round and action timers.
"""

from .bonus import BonusBreakdown, calculate_bonus, dice_pool, total_bonus
from .commit import (
    add_custom_effect,
    add_injury,
    commit_sequence,
    remove_cooldown,
    remove_effect,
    remove_injury,
)
from .evaluator import SequenceEvaluator, resolve
from .modifiers import Factor, matching_factors
from .sequence import (
    ActionNode,
    ComboNode,
    ConditionNode,
    DividerNode,
    LogicChainNode,
    SequenceNode,
    iter_actions,
    parse_tree,
)
from .summary import generate_stats_text, generate_summary
from .timeline import advance_round, commit_action_cost, tick_action_timers

__all__ = [
    # Import from bonus.py
    "BonusBreakdown",
    "calculate_bonus",
    "dice_pool",
    "total_bonus",
    # Import from commit.py
    "add_custom_effect",
    "add_injury",
    "commit_sequence",
    "remove_cooldown",
    "remove_effect",
    "remove_injury",
    # Import from evaluator.py
    "SequenceEvaluator",
    "resolve",
    # Import from modifiers.py
    "Factor",
    "matching_factors",
    # Import from sequence.py
    "ActionNode",
    "ComboNode",
    "ConditionNode",
    "DividerNode",
    "LogicChainNode",
    "SequenceNode",
    "iter_actions",
    "parse_tree",
    # Import from summary.py
    "generate_stats_text",
    "generate_summary",
    # Import from timeline.py
    "advance_round",
    "commit_action_cost",
    "tick_action_timers",
]
