"""
Tests for committing sequences and manual lifecycle edits.
"""

import pytest

from combat_resolver.character.models import (
    Ability,
    Bonus,
    Cooldown,
    Participant,
    Passive,
)
from combat_resolver.combat.commit import (
    add_custom_effect,
    add_injury,
    commit_sequence,
    remove_cooldown,
    remove_effect,
    remove_injury,
)
from combat_resolver.combat.sequence import ActionNode, ComboNode, ConditionNode
from combat_resolver.combat.timeline import advance_round
from combat_resolver.core.constants import PassiveTrigger


@pytest.fixture
def knight():
    return Participant(
        id="knight",
        instance_id="knight_1",
        flat_abilities=[
            Ability(
                uid="ab_rage",
                name="Rage",
                tags=["buff"],
                bonuses=[Bonus(stat="cleanb", val=2)],
                cd=3,
                dur=2,
                dur_unit="round",
            ),
            Ability(uid="ab_bash", name="Bash", cd=2),
            Ability(uid="ab_volley", name="Volley", cd=3, limit=2, limit_unit="round"),
            Ability(uid="ab_jab", name="Jab"),
        ],
        flat_passives=[
            Passive(
                name="Bloodlust",
                tags=["phys"],
                trigger=PassiveTrigger.ABILITY,
                trigger_ability_id="Rage",
                bonuses=[Bonus(stat="phys", val=3)],
            ),
            Passive(
                name="Reckless",
                trigger=PassiveTrigger.ABILITY,
                trigger_ability_id="Rage",
                is_flaw=True,
            ),
        ],
        cooldowns=[Cooldown(id="cd_quick", name="Quick", val=2, max=2, unit="action")],
    )


@pytest.fixture
def squire():
    return Participant(id="squire", instance_id="squire_1")


def act(ability):
    return ActionNode(char_id="knight_1", ability_id=ability)


def test_duration_ability_creates_effect_and_linked_effects(knight):
    """An ability with a duration creates its effect plus linked passives."""
    [after] = commit_sequence([act("Rage")], [knight])
    rage, bloodlust, reckless = after.active_effects
    assert (rage.name, rage.duration_left, rage.unit) == ("Rage", 2, "round")
    assert rage.original_ability_id == "ab_rage"
    assert bloodlust.tags == ["phys", "buff", "linked"]
    assert (bloodlust.duration_left, bloodlust.unit) == (2, "round")
    assert reckless.tags == ["debuff", "linked"]
    assert not any(cd.name == "Rage" for cd in after.cooldowns)


def test_cooldown_ability_goes_on_cooldown_once(knight):
    """Using a cooldown ability twice still leaves one cooldown."""
    [after] = commit_sequence([act("Bash"), act("Bash")], [knight])
    assert [cd.name for cd in after.cooldowns].count("Bash") == 1


def test_action_timers_tick_by_action_count(knight):
    """Each actor's action timers tick by the number of its actions."""
    [one] = commit_sequence([act("Jab")], [knight])
    [two] = commit_sequence([act("Jab"), act("Jab")], [knight])
    assert {cd.name: cd.val for cd in one.cooldowns}["Quick"] == 1
    assert "Quick" not in {cd.name for cd in two.cooldowns}


def test_nested_actions_are_committed(knight):
    """Actions inside combos and conditions are committed too."""
    tree = [
        ComboNode(children=[act("Jab"), act("Bash")]),
        ConditionNode(condition_text="If missed", children=[act("Jab")]),
    ]
    [after] = commit_sequence(tree, [knight])
    assert after.usage_counts == {"ab_jab": 2, "ab_bash": 1}
    assert "Bash" in {cd.name for cd in after.cooldowns}


def test_usage_limit_reached_spawns_cooldown(knight):
    """Reaching a usage limit puts the ability on cooldown."""
    [once] = commit_sequence([act("Volley")], [knight])
    assert once.usage_counts["ab_volley"] == 1
    assert "Volley" not in {cd.name for cd in once.cooldowns}
    [twice] = commit_sequence([act("Volley")], [once])
    assert twice.usage_counts["ab_volley"] == 2
    assert "Volley" in {cd.name for cd in twice.cooldowns}


def test_bystanders_are_untouched(knight, squire):
    """Participants without actions are returned as they were."""
    _, after = commit_sequence([act("Jab")], [knight, squire])
    assert after is squire


def test_unknown_actor_is_skipped(knight, mocker):
    """Actions by unknown participants change nothing."""
    warn = mocker.patch("combat_resolver.combat.commit.log_warning")
    [after] = commit_sequence([ActionNode(char_id="ghost", ability_id="Jab")], [knight])
    assert after is knight
    warn.assert_called_once()


def test_effect_expiry_after_commit(knight):
    """A committed effect expires after its rounds and starts the cooldown."""
    participants = commit_sequence([act("Rage")], [knight])
    participants = advance_round(participants)
    assert {e.name for e in participants[0].active_effects} == {"Rage", "Bloodlust", "Reckless"}
    participants = advance_round(participants)
    assert participants[0].active_effects == []
    assert [cd.name for cd in participants[0].cooldowns].count("Rage") == 1


def test_remove_effect_spawns_source_cooldown(knight):
    """Removing an effect by hand puts its source ability on cooldown."""
    [after] = commit_sequence([act("Rage")], [knight])
    rage = after.active_effects[0]
    [removed] = remove_effect([after], "knight_1", rage.id)
    assert rage.id not in {e.id for e in removed.active_effects}
    assert {cd.name: cd.val for cd in removed.cooldowns}["Rage"] == 3
    linked = removed.active_effects[0]
    [again] = remove_effect([removed], "knight_1", linked.id)
    assert [cd.name for cd in again.cooldowns].count("Rage") == 1


def test_remove_cooldown(knight):
    """A cooldown can be removed by id."""
    [after] = remove_cooldown([knight], "knight_1", "cd_quick")
    assert after.cooldowns == []


def test_add_custom_effect(knight):
    """A hand-made debuff carries its tags and a single bonus."""
    [after] = add_custom_effect(
        [knight], "knight_1", "Poisoned", "phys", -5, 2, "round", extra_tag=" Melee "
    )
    effect = after.active_effects[-1]
    assert effect.name == "Poisoned"
    assert effect.tags == ["phys", "melee"]
    assert [(b.stat, b.val) for b in effect.bonuses] == [("phys", -5)]
    assert (effect.duration_left, effect.unit) == (2, "round")


def test_add_custom_effect_without_tag(knight):
    """The 'none' tag adds no tag to the effect."""
    [after] = add_custom_effect([knight], "knight_1", "Dazed", "none", -2, 1)
    assert after.active_effects[-1].tags == []
    assert after.active_effects[-1].unit == "turn"


def test_injuries_update_trauma(knight):
    """Adding and removing injuries refreshes the trauma counters."""
    [hurt] = add_injury([knight], "knight_1", "mid_phys")
    assert hurt.battle_stats.trauma_phys == -10
    assert hurt.battle_stats.hp_penalty_current == -10
    [healed] = remove_injury([hurt], "knight_1", 0)
    assert healed.medcard.injuries == []
    assert healed.battle_stats.trauma_phys == 0


def test_remove_injury_out_of_range(knight, mocker):
    """Removing a missing injury is reported and changes nothing."""
    warn = mocker.patch("combat_resolver.combat.commit.log_warning")
    [after] = remove_injury([knight], "knight_1", 3)
    warn.assert_called_once()
    assert after.medcard.injuries == []
