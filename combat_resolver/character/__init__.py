"""
Character module for the combat resolver.

This module handles the data carried by battle participants (abilities,
passives, items, injuries, effects and cooldowns), their live stats and the
creation of participants from stored characters.
"""

from .models import (
    Ability,
    AbilityGroup,
    ActiveEffect,
    BattleStats,
    Bonus,
    CharacterTemplate,
    Cooldown,
    Equipment,
    Injury,
    InjuryRule,
    Item,
    MedCard,
    Participant,
    Passive,
    PassiveGroup,
    Profile,
    StatBlock,
)
from .roster import (
    find_participant,
    flatten_template,
    instantiate_participant,
    remove_participant,
    renumber_participants,
)
from .stats import (
    DEFAULT_INJURY_RULES,
    TraumaTotals,
    injury_penalty,
    live_stat,
    trauma_totals,
)

__all__ = [
    # Import from models.py
    "Ability",
    "AbilityGroup",
    "ActiveEffect",
    "BattleStats",
    "Bonus",
    "CharacterTemplate",
    "Cooldown",
    "Equipment",
    "Injury",
    "InjuryRule",
    "Item",
    "MedCard",
    "Participant",
    "Passive",
    "PassiveGroup",
    "Profile",
    "StatBlock",
    # Import from roster.py
    "find_participant",
    "flatten_template",
    "instantiate_participant",
    "remove_participant",
    "renumber_participants",
    # Import from stats.py
    "DEFAULT_INJURY_RULES",
    "TraumaTotals",
    "injury_penalty",
    "live_stat",
    "trauma_totals",
]
