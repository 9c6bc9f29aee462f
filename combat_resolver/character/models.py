"""
Character models for the combat resolver.

Defines the pydantic models for everything a battle participant carries:
bonuses, items, abilities, passives, injuries, active effects and cooldowns.
Field aliases match the JSON names used by the storage layer so snapshots load
without translation.
"""

from typing import Any

from catchery import log_warning
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from ..core.constants import (
    DEFAULT_TIME_UNIT,
    ROUND_UNITS,
    PassiveTrigger,
    StatKind,
)
from ..core.utils import coerce_int, generate_id, is_numeric


class EngineModel(BaseModel):
    """Base model accepting both field names and storage aliases."""

    model_config = ConfigDict(populate_by_name=True)


def _lenient_int(value: Any, field_name: str) -> int:
    if not is_numeric(value):
        if value not in (None, ""):
            log_warning(
                f"Non-numeric {field_name} coerced to 0.",
                {"field": field_name, "value": value},
            )
        return 0
    return coerce_int(value)


# =============================================================================
# BONUSES AND ITEMS
# =============================================================================


class Bonus(EngineModel):
    """A single (stat, value) bonus entry."""

    stat: str = Field(
        "",
        description="The stat token the bonus scales with ('phys', 'cleanb', '' ...).",
    )
    val: int = Field(
        0,
        validation_alias=AliasChoices("val", "value"),
        description="The raw bonus value.",
    )

    @field_validator("stat", mode="before")
    @classmethod
    def _normalize_stat(cls, value: Any) -> str:
        if value is None:
            return ""
        return str(value).lower().strip()

    @field_validator("val", mode="before")
    @classmethod
    def _coerce_val(cls, value: Any) -> int:
        return _lenient_int(value, "bonus value")


def sum_bonuses(bonuses: list[Bonus]) -> int:
    """Returns the sum of the raw values of a list of bonuses."""
    return sum(bonus.val for bonus in bonuses)


class Item(EngineModel):
    """
    Represents a piece of equipment: a usable weapon, a wearable or a
    backpack item.
    """

    uid: str = Field(
        default_factory=lambda: generate_id("item"),
        alias="_id",
        description="Identifier generated when the character was loaded.",
    )
    id: str | None = Field(
        None,
        description="Identifier from the character sheet, if any.",
    )
    name: str = Field(
        description="The name of the item.",
    )
    tags: list[str] = Field(
        default_factory=list,
        description="Tags used to match the item against actions.",
    )
    bonuses: list[Bonus] = Field(
        default_factory=list,
        description="Bonuses granted by the item.",
    )
    desc_lore: str = Field("", description="Flavour description.")
    desc_mech: str = Field("", description="Mechanical description.")
    is_equipped: bool = Field(
        False,
        description="Whether a wearable is currently worn.",
    )
    qty: int | None = Field(None, description="Quantity, for backpack items.")

    def matches(self, ref: str) -> bool:
        """Whether the item is the one referenced by id, sheet id or name."""
        return ref in (self.uid, self.id, self.name)


class Equipment(EngineModel):
    """The equipment slots of a character."""

    usable: list[Item] = Field(default_factory=list, description="Weapons.")
    wearable: list[Item] = Field(default_factory=list, description="Worn items.")
    inventory: list[Item] = Field(default_factory=list, description="Backpack.")


# =============================================================================
# ABILITIES AND PASSIVES
# =============================================================================


class Ability(EngineModel):
    """
    Represents a tagged capability with stat-scaling bonuses, cooldown,
    duration and an optional usage limit.

    An ability with a duration creates an active effect when used; one with a
    cooldown and no duration goes on cooldown straight away unless it is
    usage-limited.
    """

    uid: str = Field(
        default_factory=lambda: generate_id("ab"),
        alias="_id",
        description="Identifier generated when the character was loaded.",
    )
    id: str | None = Field(None, description="Identifier from the sheet.")
    name: str = Field(description="The name of the ability.")
    tags: list[str] = Field(
        default_factory=list,
        description="Tags, including the ones inherited from its group.",
    )
    bonuses: list[Bonus] = Field(
        default_factory=list,
        description="Bonus entries, each scaling with a stat token.",
    )
    scaling: list[str] = Field(default_factory=list, description="Scaling notes.")
    cd: int = Field(0, description="Cooldown value.")
    cd_unit: str = Field("", description="Cooldown unit.")
    dur: int = Field(0, description="Duration value.")
    dur_unit: str = Field("", description="Duration unit.")
    limit: int = Field(0, description="Number of uses allowed per limit unit.")
    limit_unit: str = Field("", description="Unit the usage limit resets on.")
    desc_lore: str = Field("", description="Flavour description.")
    desc_mech: str = Field("", description="Mechanical description.")

    @field_validator("cd", "dur", "limit", mode="before")
    @classmethod
    def _coerce_counts(cls, value: Any) -> int:
        return _lenient_int(value, "ability timer")

    @property
    def cooldown_unit(self) -> str:
        return (self.cd_unit or DEFAULT_TIME_UNIT).lower().strip()

    @property
    def duration_unit(self) -> str:
        return (self.dur_unit or DEFAULT_TIME_UNIT).lower().strip()

    @property
    def is_usage_limited(self) -> bool:
        return self.limit > 0

    @property
    def has_round_limit(self) -> bool:
        """Whether the usage counter resets every round."""
        return self.is_usage_limited and self.limit_unit.lower().strip() in ROUND_UNITS

    def matches(self, ref: str) -> bool:
        """Whether the ability is the one referenced by id, sheet id or name."""
        return ref in (self.uid, self.id, self.name)


class AbilityGroup(EngineModel):
    """A school of abilities sharing inherited tags."""

    name: str = Field("", description="The name of the group.")
    tags: list[str] = Field(default_factory=list, description="Inherited tags.")
    abilities: list[Ability] = Field(default_factory=list)


class Passive(EngineModel):
    """
    Represents a passive trait that contributes its bonuses when its trigger
    condition matches the current action.
    """

    uid: str = Field(
        default_factory=lambda: generate_id("pas"),
        alias="_id",
        description="Identifier generated when the character was loaded.",
    )
    name: str = Field(description="The name of the passive.")
    tags: list[str] = Field(default_factory=list, description="Matching tags.")
    bonuses: list[Bonus] = Field(default_factory=list)
    trigger: PassiveTrigger = Field(
        PassiveTrigger.ALWAYS,
        description="When the passive applies.",
    )
    trigger_ability_id: str | None = Field(
        None,
        description="Name of the ability an ABILITY-triggered passive is linked to.",
    )
    is_flaw: bool = Field(False, description="Whether the passive is a flaw.")
    desc_mech: str = Field("", description="Mechanical description.")
    desc_lore: str = Field("", description="Flavour description.")
    dur: int = Field(0, description="Duration of a combat-start effect.")
    dur_unit: str = Field("", description="Unit of the combat-start duration.")

    @field_validator("trigger", mode="before")
    @classmethod
    def _normalize_trigger(cls, value: Any) -> PassiveTrigger:
        if isinstance(value, PassiveTrigger):
            return value
        return PassiveTrigger.normalize(value)

    @field_validator("dur", mode="before")
    @classmethod
    def _coerce_dur(cls, value: Any) -> int:
        return _lenient_int(value, "passive duration")


class PassiveGroup(EngineModel):
    """A named group of passives, possibly a group of flaws."""

    group_name: str = Field("", description="The name of the group.")
    is_flaw_group: bool = Field(False)
    items: list[Passive] = Field(default_factory=list)


# =============================================================================
# TIMERS
# =============================================================================


class ActiveEffect(EngineModel):
    """A temporary timed modifier, usually created by a duration-bearing ability."""

    id: str = Field(
        default_factory=lambda: generate_id("eff"),
        description="Identifier of the effect instance.",
    )
    name: str = Field(description="The name of the effect.")
    tags: list[str] = Field(default_factory=list, description="Matching tags.")
    bonuses: list[Bonus] = Field(default_factory=list)
    duration_left: int = Field(description="Remaining duration.")
    unit: str = Field(DEFAULT_TIME_UNIT, description="Unit the duration ticks in.")
    original_ability_id: str | None = Field(
        None,
        description="Id of the ability (or passive) that created the effect.",
    )

    @field_validator("tags", mode="before")
    @classmethod
    def _default_tags(cls, value: Any) -> Any:
        return value or []

    @property
    def normalized_unit(self) -> str:
        return (self.unit or "").lower().strip()


class Cooldown(EngineModel):
    """A timed restriction preventing re-use of a named ability."""

    id: str = Field(
        default_factory=lambda: generate_id("cd"),
        description="Identifier of the cooldown instance.",
    )
    name: str = Field(description="Name of the ability on cooldown.")
    val: int = Field(description="Current remaining value.")
    max: int = Field(description="Original value.")
    unit: str = Field(DEFAULT_TIME_UNIT, description="Unit the cooldown ticks in.")

    @property
    def normalized_unit(self) -> str:
        return (self.unit or "").lower().strip()

    @classmethod
    def for_ability(cls, ability: Ability) -> "Cooldown":
        """Builds a fresh cooldown for the given ability."""
        return cls(
            name=ability.name,
            val=ability.cd,
            max=ability.cd,
            unit=ability.cd_unit or DEFAULT_TIME_UNIT,
        )


# =============================================================================
# INJURIES
# =============================================================================


class Injury(EngineModel):
    """An injury instance recorded on a character's medical card."""

    template_id: str = Field(description="Tag of the injury rule.")
    count: int = Field(1, description="Number of instances.")
    custom_name: str = Field("", description="Optional display name.")

    @field_validator("count", mode="before")
    @classmethod
    def _coerce_count(cls, value: Any) -> int:
        return coerce_int(value) or 1


class InjuryRule(EngineModel):
    """
    Defines the stat penalty of an injury tag.

    Below the stack threshold an injury contributes nothing; once stacked the
    penalty applies once per full stack.
    """

    tag: str = Field(description="Injury tag, ending with the stat suffix.")
    label: str = Field("", description="Display label.")
    value: int = Field(description="Penalty per instance or per stack.")
    stack: int | None = Field(
        None,
        description="Number of instances needed before the penalty applies.",
    )

    def penalty(self, count: int) -> int:
        """
        Computes the penalty for a number of instances of this injury.

        Args:
            count (int): The number of instances.

        Returns:
            int: ``floor(count / stack) * value`` when stacked, else
            ``count * value``.

        """
        if self.stack and self.stack > 0:
            return (count // self.stack) * self.value
        return count * self.value


class MedCard(EngineModel):
    """The medical card of a character."""

    injuries: list[Injury] = Field(default_factory=list)
    conditions: list[Any] = Field(default_factory=list)


# =============================================================================
# CHARACTERS
# =============================================================================


class StatBlock(EngineModel):
    """The three base stats of a character."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    phys: int = Field(0, description="Physical stat.")
    magic: int = Field(0, description="Magical stat.")
    unique: int = Field(0, description="Unique stat.")

    @field_validator("phys", "magic", "unique", mode="before")
    @classmethod
    def _coerce_stat(cls, value: Any) -> int:
        return _lenient_int(value, "stat")

    def get(self, kind: StatKind) -> int:
        return getattr(self, kind.value)


class Profile(EngineModel):
    """Identity of a character."""

    name: str = Field("Unknown", description="Display name.")
    faction: str = Field("", description="Faction name.")
    level: int = Field(1, description="Character level.")
    npc_volume: str = Field("", description="Bestiary volume, for NPCs.")
    bio: str = Field("")

    @field_validator("level", mode="before")
    @classmethod
    def _coerce_level(cls, value: Any) -> int:
        return coerce_int(value, default=1)


class BattleStats(EngineModel):
    """Per-battle counters derived from the medical card."""

    hp_penalty_current: int = Field(0, description="Total injury penalty.")
    trauma_phys: int = Field(0)
    trauma_mag: int = Field(0)
    trauma_uniq: int = Field(0)
    actions_max: int = Field(4)
    actions_left: int = Field(4)


class CharacterTemplate(EngineModel):
    """A character as stored in the roster, before joining a battle."""

    id: str = Field(description="Template id; repeats across battle instances.")
    profile: Profile = Field(default_factory=Profile)
    stats: StatBlock = Field(default_factory=StatBlock)
    equipment: Equipment = Field(default_factory=Equipment)
    ability_groups: list[AbilityGroup] = Field(default_factory=list)
    passives: list[PassiveGroup] = Field(default_factory=list)
    medcard: MedCard = Field(default_factory=MedCard)
    flat_abilities: list[Ability] = Field(
        default_factory=list,
        description="Abilities flattened from the groups, with inherited tags.",
    )
    flat_passives: list[Passive] = Field(
        default_factory=list,
        description="Passives flattened from the groups.",
    )

    @property
    def name(self) -> str:
        return self.profile.name

    @property
    def level(self) -> int:
        return self.profile.level


class Participant(CharacterTemplate):
    """
    A battle instance of a character.

    Engine operations never mutate a participant; they return updated copies
    built with ``model_copy(update=...)``.
    """

    instance_id: str = Field(description="Unique id within the battle.")
    is_player: bool = Field(False)
    battle_stats: BattleStats = Field(default_factory=BattleStats)
    active_effects: list[ActiveEffect] = Field(default_factory=list)
    cooldowns: list[Cooldown] = Field(default_factory=list)
    usage_counts: dict[str, int] = Field(
        default_factory=dict,
        description="Uses of each ability (by uid) within its limit window.",
    )

    def find_ability(self, ref: str | None) -> Ability | None:
        """
        Looks up an ability by uid, falling back to the grouped abilities.

        Args:
            ref (str | None): The uid, sheet id or name of the ability.

        Returns:
            Ability | None: The ability, or None if nothing matches.

        """
        if not ref:
            return None
        for ability in self.flat_abilities:
            if ability.uid == ref:
                return ability
        for group in self.ability_groups:
            for ability in group.abilities:
                if ability.matches(ref):
                    return ability
        for ability in self.flat_abilities:
            if ability.matches(ref):
                return ability
        return None

    def find_weapon(self, ref: str | None) -> Item | None:
        """Looks up a usable item by uid, sheet id or name."""
        if not ref:
            return None
        for item in self.equipment.usable:
            if item.matches(ref):
                return item
        return None
