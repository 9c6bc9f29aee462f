"""
Constants and enumerations for the combat resolver.

Defines the fixed vocabulary of the ruleset: stat kinds, passive triggers,
sequence node types, time units and the default injury table used by the
stat resolver.
"""

from enum import Enum


class NiceEnum(Enum):
    """An enumeration that provides a nicer string representation."""

    def __str__(self) -> str:
        return self.name

    @property
    def display_name(self) -> str:
        return self.name.lower().capitalize()


class StatKind(NiceEnum):
    """Defines the three base stats of a character."""

    PHYS = "phys"
    MAGIC = "magic"
    UNIQUE = "unique"

    @property
    def injury_suffix(self) -> str:
        """Returns the suffix that injury template ids carry for this stat."""
        return {
            StatKind.PHYS: "_phys",
            StatKind.MAGIC: "_mag",
            StatKind.UNIQUE: "_uniq",
        }[self]

    @property
    def color(self) -> str:
        """Returns the color string associated with this stat."""
        return {
            StatKind.PHYS: "bold red",
            StatKind.MAGIC: "bold blue",
            StatKind.UNIQUE: "bold magenta",
        }.get(self, "dim white")

    def colorize(self, message: str) -> str:
        """Applies stat color formatting to a message."""
        return f"[{self.color}]{message}[/]"


class PassiveTrigger(NiceEnum):
    """Defines when a passive trait contributes its bonus."""

    ALWAYS = "ALWAYS"
    ABILITY = "ABILITY"
    WEAKNESS = "WEAKNESS"
    RESISTANCE = "RESISTANCE"
    ON_HIT = "ON_HIT"
    ON_DEFENSE = "ON_DEFENSE"
    ON_KILL = "ON_KILL"
    COMBAT_START = "COMBAT_START"
    LOW_HP = "LOW_HP"
    ACTIVATED = "ACTIVATED"

    @staticmethod
    def normalize(trigger: str | None) -> "PassiveTrigger":
        """
        Maps a free-form trigger string coming from storage to a trigger.

        Args:
            trigger (str | None):
                The raw trigger string, in English or Russian.

        Returns:
            PassiveTrigger:
                The matching trigger, ALWAYS when nothing matches.

        """
        if not trigger:
            return PassiveTrigger.ALWAYS
        t = trigger.upper().strip()
        for member in PassiveTrigger:
            if t == member.value:
                return member
        if "START" in t or "НАЧАЛО" in t:
            return PassiveTrigger.COMBAT_START
        if "WEAK" in t or "СЛАБОСТ" in t:
            return PassiveTrigger.WEAKNESS
        if "RESIST" in t or "СОПРОТИВ" in t or "УСТОЙЧИВ" in t:
            return PassiveTrigger.RESISTANCE
        if "HIT" in t or "ПОПАДАН" in t or "УДАР" in t:
            return PassiveTrigger.ON_HIT
        if "KILL" in t or "УБИЙСТВ" in t:
            return PassiveTrigger.ON_KILL
        if "DEFENSE" in t or "ЗАЩИТ" in t:
            return PassiveTrigger.ON_DEFENSE
        if "ABILITY" in t or "СПОСОБН" in t:
            return PassiveTrigger.ABILITY
        if "LOW HP" in t or "НИЗКОЕ" in t:
            return PassiveTrigger.LOW_HP
        if "ACTIVAT" in t or "АКТИВАЦ" in t:
            return PassiveTrigger.ACTIVATED
        return PassiveTrigger.ALWAYS

    @property
    def is_visible(self) -> bool:
        """Whether factors from this trigger are printed in the narration."""
        return self in (
            PassiveTrigger.ABILITY,
            PassiveTrigger.ON_HIT,
            PassiveTrigger.ON_DEFENSE,
        )


class FactorType(NiceEnum):
    """Defines the source of a modifier factor."""

    PASSIVE = "passive"
    EFFECT = "effect"
    ITEM = "item"


class LogicType(NiceEnum):
    """Defines the branch keyword of a condition inside a logic chain."""

    IF = "IF"
    ELIF = "ELIF"
    ELSE = "ELSE"


# Units that count as one combat round.
ROUND_UNITS: frozenset[str] = frozenset(
    {"turn", "round", "round(s)", "post", "ходы", "посты", "раунд"}
)
# Units that count as action-point cost.
ACTION_UNITS: frozenset[str] = frozenset({"action", "действие", "act"})

# Unit used when an ability leaves its cooldown or duration unit empty.
DEFAULT_TIME_UNIT = "turn"
# Unit and duration given to startup effects that last the whole battle.
BATTLE_TIME_UNIT = "battle"
BATTLE_DURATION = 999

# Bonus-entry stat tokens with special meaning.
CLEAN_BONUS_TOKEN = "cleanb"
ANY_STAT_TOKENS: frozenset[str] = frozenset({"", "any"})

# Tag that keeps an ability out of the battle lists.
NO_WAR_TAG = "no_war"

# Level thresholds for the dice pool, highest first.
DICE_POOL_BY_LEVEL: tuple[tuple[int, str], ...] = (
    (5, "3d100"),
    (3, "2d100"),
    (0, "1d100"),
)

# Placeholder rendered for an action whose references cannot be resolved.
UNKNOWN_ACTION = "[Unknown Action]"

# (tag, label, value, stack)
DEFAULT_INJURY_TABLE: tuple[tuple[str, str, int, int | None], ...] = (
    ("light_phys", "Light wound", -10, 3),
    ("mid_phys", "Medium wound", -10, None),
    ("heavy_phys", "Heavy wound", -15, None),
    ("crit_phys", "Critical damage", -20, None),
    ("light_mag", "Light exhaustion", -5, None),
    ("mid_mag", "Medium exhaustion", -10, None),
    ("crit_mag", "Severe exhaustion", -15, None),
)

# Condition phrases by physical trauma, keyed by the upper bound of the tier.
STATUS_PHRASES: dict[int, tuple[str, ...]] = {
    0: ("Unharmed", "In fighting shape", "Fresh and ready"),
    15: ("Scratched", "Lightly bruised", "Shaken but steady"),
    30: ("Wounded", "Bleeding", "Visibly hurt"),
    45: ("Badly wounded", "Staggering", "Struggling to stand"),
    60: ("Barely alive", "On the brink", "Held together by will"),
}
