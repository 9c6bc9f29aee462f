"""
Tests for modifier aggregation.
"""

import pytest

from combat_resolver.character.models import (
    Ability,
    ActiveEffect,
    Bonus,
    Equipment,
    Item,
    Participant,
    Passive,
)
from combat_resolver.combat.modifiers import matching_factors, visible_factor_names
from combat_resolver.core.constants import FactorType, PassiveTrigger


@pytest.fixture
def duelist():
    return Participant(
        id="duelist",
        instance_id="duelist_1",
        flat_abilities=[Ability(uid="ab_haste", name="Haste", desc_mech="Moves twice")],
        flat_passives=[
            Passive(
                name="Fire Ward",
                tags=["fire"],
                trigger=PassiveTrigger.RESISTANCE,
                bonuses=[Bonus(val=4)],
            ),
            Passive(
                name="Ice Fear",
                tags=["ice"],
                trigger=PassiveTrigger.WEAKNESS,
                bonuses=[Bonus(val=-3)],
            ),
            Passive(
                name="Killer Instinct",
                trigger=PassiveTrigger.ON_HIT,
                bonuses=[Bonus(val=2)],
            ),
            Passive(
                name="Guard Stance",
                trigger=PassiveTrigger.ON_DEFENSE,
                bonuses=[Bonus(val=3)],
            ),
            Passive(
                name="Riposte Master",
                trigger=PassiveTrigger.ABILITY,
                trigger_ability_id="Riposte",
                bonuses=[Bonus(val=6)],
            ),
            Passive(name="Blade Training", tags=["sword"], bonuses=[Bonus(val=1)]),
        ],
        active_effects=[
            ActiveEffect(
                name="Haste",
                tags=["melee"],
                bonuses=[Bonus(val=5)],
                duration_left=2,
                original_ability_id="ab_haste",
            )
        ],
        equipment=Equipment(
            wearable=[
                Item(
                    name="Gauntlets",
                    tags=["melee"],
                    bonuses=[Bonus(val=1)],
                    is_equipped=True,
                ),
                Item(name="Spare Ring", tags=["melee"], bonuses=[Bonus(val=9)]),
            ]
        ),
    )


def names(factors):
    return [factor.name for factor in factors]


def test_offensive_action_factors(duelist):
    """An offensive action collects on-hit passives, effects and worn items."""
    factors = matching_factors(duelist, ["melee", "sword"], "Slash")
    assert names(factors) == ["Killer Instinct", "Blade Training", "Haste", "Gauntlets"]
    assert [f.type for f in factors] == [
        FactorType.PASSIVE,
        FactorType.PASSIVE,
        FactorType.EFFECT,
        FactorType.ITEM,
    ]


def test_unequipped_wearables_never_apply(duelist):
    """Unequipped wearables are excluded even when their tags overlap."""
    assert "Spare Ring" not in names(matching_factors(duelist, ["melee"], "Slash"))


def test_weakness_and_resistance_need_opponent_tags(duelist):
    """Weakness and resistance are skipped without an opponent context."""
    factors = matching_factors(duelist, ["dodge"], "Dodge")
    assert "Fire Ward" not in names(factors)
    assert "Ice Fear" not in names(factors)


def test_resistance_matches_opponent_tags(duelist):
    """Resistance applies when the opponent's tags overlap its own."""
    factors = matching_factors(duelist, ["dodge"], "Dodge", ["Fire", "melee"])
    assert names(factors) == ["Fire Ward", "Guard Stance"]


def test_ability_trigger_matches_name(duelist):
    """An ability-triggered passive applies to the named ability only."""
    assert "Riposte Master" in names(matching_factors(duelist, ["parry"], "Riposte"))
    assert "Riposte Master" not in names(matching_factors(duelist, ["parry"], "Parry"))


def test_effect_carries_source_mechanics(duelist):
    """An effect factor reports the mechanics of its source ability."""
    haste = next(f for f in matching_factors(duelist, ["melee"], "Slash") if f.name == "Haste")
    assert haste.mechanics == "Moves twice"
    assert haste.bonus == 5


def test_visible_factor_names(duelist):
    """Only ability, on-hit and on-defense passives are printed."""
    factors = matching_factors(duelist, ["melee", "block"], "Riposte", ["fire"])
    assert visible_factor_names(factors) == [
        "Killer Instinct",
        "Guard Stance",
        "Riposte Master",
    ]


@pytest.mark.parametrize(
    "trigger",
    [
        PassiveTrigger.COMBAT_START,
        PassiveTrigger.ON_KILL,
        PassiveTrigger.LOW_HP,
        PassiveTrigger.ACTIVATED,
    ],
)
def test_event_passives_do_not_match_by_tags(trigger):
    """Only always-on passives match an action by tag overlap."""
    fighter = Participant(
        id="fighter",
        instance_id="fighter_1",
        flat_passives=[Passive(name="Trait", tags=["melee"], trigger=trigger)],
    )
    assert matching_factors(fighter, ["melee"], "Slash") == []
