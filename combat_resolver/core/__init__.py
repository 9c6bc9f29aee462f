"""
Core module for the combat resolver.

This module contains the fundamental components shared by the engine,
including the ruleset constants, the semantic tag lookup, logging and console
utilities. Content loading and sheet printing live in ``core.content`` and
``core.sheets``.
"""

from .constants import (
    ACTION_UNITS,
    ROUND_UNITS,
    FactorType,
    LogicType,
    PassiveTrigger,
    StatKind,
)
from .logging import get_logger, setup_logging
from .tags import SemanticTag, has_meaning, has_overlap, merge_tags

__all__ = [
    # Import from constants.py
    "ACTION_UNITS",
    "ROUND_UNITS",
    "FactorType",
    "LogicType",
    "PassiveTrigger",
    "StatKind",
    # Import from logging.py
    "get_logger",
    "setup_logging",
    # Import from tags.py
    "SemanticTag",
    "has_meaning",
    "has_overlap",
    "merge_tags",
]
