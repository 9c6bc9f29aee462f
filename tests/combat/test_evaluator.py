"""
Tests for sequence resolution and narration.
"""

import pytest

from combat_resolver.character.models import (
    Ability,
    Bonus,
    Equipment,
    Item,
    Participant,
    Passive,
    Profile,
)
from combat_resolver.combat.evaluator import resolve
from combat_resolver.combat.sequence import (
    ActionNode,
    ComboNode,
    ConditionNode,
    DividerNode,
    LogicChainNode,
    parse_tree,
)
from combat_resolver.core.constants import PassiveTrigger


@pytest.fixture
def hero():
    return Participant(
        id="hero",
        instance_id="hero_1",
        profile=Profile(name="Hero", level=4),
        flat_abilities=[
            Ability(name="Strike", tags=["fire", "melee"], bonuses=[Bonus(stat="cleanb", val=7)]),
            Ability(name="Flame Form", tags=["form"], desc_mech="+5 fire"),
            Ability(name="Bless", tags=["buff"], desc_mech="+2 all"),
        ],
        equipment=Equipment(usable=[Item(name="Sword", tags=["sword"])]),
    )


@pytest.fixture
def goblin():
    return Participant(
        id="goblin",
        instance_id="goblin_1",
        profile=Profile(name="Goblin", level=1),
        flat_abilities=[
            Ability(name="Dodge", tags=["dodge"], bonuses=[Bonus(stat="cleanb", val=2)]),
            Ability(name="Counter", tags=["melee"], bonuses=[Bonus(stat="cleanb", val=1)]),
        ],
        flat_passives=[
            Passive(
                name="Fire Fear",
                tags=["fire"],
                trigger=PassiveTrigger.WEAKNESS,
                bonuses=[Bonus(val=-3)],
            ),
            Passive(
                name="Nimble",
                trigger=PassiveTrigger.ON_DEFENSE,
                bonuses=[Bonus(val=1)],
            ),
        ],
    )


@pytest.fixture
def participants(hero, goblin):
    return [hero, goblin]


def strike():
    return ActionNode(char_id="hero_1", ability_id="Strike")


def dodge():
    return ActionNode(char_id="goblin_1", ability_id="Dodge")


def counter():
    return ActionNode(char_id="goblin_1", ability_id="Counter")


def test_plain_action(participants):
    """A single action renders as one paragraph with its roll."""
    assert resolve([strike()], participants) == "> Hero: Strike(2d100+7)"


def test_actions_on_one_line_are_joined(participants):
    """Consecutive actions share a paragraph."""
    text = resolve([strike(), counter()], participants)
    assert text == "> Hero: Strike(2d100+7) - Goblin: Counter(1d100-2)"


def test_divider_starts_new_paragraph(participants):
    """A divider separates two paragraphs with a blank line."""
    text = resolve([strike(), DividerNode(), strike()], participants)
    assert text == "> Hero: Strike(2d100+7)\n\n> Hero: Strike(2d100+7)"


def test_dodge_keeps_attack_context(participants):
    """A dodge does not reset the context seen by the next reaction."""
    text = resolve([strike(), dodge(), counter()], participants)
    assert text == (
        "> Hero: Strike(2d100+7) - Goblin: Dodge(1d100+0) - Nimble"
        " - Goblin: Counter(1d100-2)"
    )


def test_no_weakness_without_context(participants):
    """Without a previous attack, weakness passives stay out."""
    assert resolve([dodge()], participants) == "> Goblin: Dodge(1d100+3) - Nimble"


def test_form_and_buff_render_mechanics(participants):
    """Forms and buffs show their mechanics instead of a roll."""
    text = resolve(
        [
            ActionNode(char_id="hero_1", ability_id="Flame Form"),
            ActionNode(char_id="hero_1", ability_id="Bless"),
        ],
        participants,
    )
    assert text == "> <Hero: Flame Form (+5 fire)> - (Hero: Bless (+2 all))"


def test_weapon_name_is_appended(participants):
    """The weapon's name follows the ability's name."""
    node = ActionNode(char_id="hero_1", ability_id="Strike", weapon_id="Sword")
    assert resolve([node], participants) == "> Hero: Strike [Sword](2d100+7)"


def test_actor_found_by_template_id(participants):
    """An action may reference its actor by template id."""
    node = ActionNode(char_id="hero", ability_id="Strike")
    assert resolve([node], participants) == "> Hero: Strike(2d100+7)"


def test_combo_renders_joint_roll(participants):
    """A combo shows both names and both rolls in one bracket."""
    text = resolve([ComboNode(children=[strike(), counter()])], participants)
    assert text == "> [Hero: Strike + Goblin: Counter(2d100+7/1d100-2)]"


def test_combo_with_form_uses_dash(participants):
    """A form inside a combo shows a dash instead of a roll."""
    form = ActionNode(char_id="hero_1", ability_id="Flame Form")
    text = resolve([ComboNode(children=[form, strike()])], participants)
    assert text == "> [Hero: Flame Form + Hero: Strike(-/2d100+7)]"


def test_combo_with_extra_actions_warns(participants, mocker):
    """Only the first two actions of a combo are resolved."""
    warn = mocker.patch("combat_resolver.combat.evaluator.log_warning")
    text = resolve([ComboNode(children=[strike(), strike(), counter()])], participants)
    assert text == "> [Hero: Strike + Hero: Strike(2d100+7/2d100+7)]"
    warn.assert_called_once()


def test_condition_with_label(participants):
    """A condition prefixes its actions with its label."""
    node = ConditionNode(condition_text="If hit", children=[dodge()])
    assert resolve([node], participants) == "> If hit: Goblin: Dodge(1d100+3) - Nimble"


def test_condition_without_label(participants):
    """A condition without label uses an ellipsis."""
    node = ConditionNode(children=[counter()])
    assert resolve([node], participants) == "> ...: Goblin: Counter(1d100+1)"


def test_logic_chain_threads_context(participants):
    """Branches of a logic chain render in braces and share the context."""
    chain = LogicChainNode(
        children=[
            ConditionNode(condition_text="If hit", logic_type="IF", children=[strike()]),
            ConditionNode(condition_text="Else", logic_type="ELSE", children=[dodge()]),
        ]
    )
    assert resolve([chain], participants) == (
        "> { If hit: Hero: Strike(2d100+7) | Else: Goblin: Dodge(1d100+0) - Nimble }"
    )


def test_unknown_ability_renders_placeholder(participants, mocker):
    """An action that cannot be resolved renders a placeholder."""
    warn = mocker.patch("combat_resolver.combat.evaluator.log_warning")
    node = ActionNode(char_id="hero_1", ability_id="Meteor")
    assert resolve([node, strike()], participants) == (
        "> [Unknown Action] - Hero: Strike(2d100+7)"
    )
    warn.assert_called_once()


def test_unknown_actor_renders_placeholder(participants, mocker):
    """An action by a missing participant renders a placeholder."""
    mocker.patch("combat_resolver.combat.evaluator.log_warning")
    node = ActionNode(char_id="ghost", ability_id="Strike")
    assert resolve([node], participants) == "> [Unknown Action]"


def test_empty_tree(participants):
    """An empty tree narrates nothing."""
    assert resolve([], participants) == ""


def test_stored_tree_shape(participants):
    """Trees stored as plain dicts resolve the same way."""
    tree = parse_tree(
        [
            {"id": "n1", "type": "action", "data": {"charId": "hero_1", "abilityId": "Strike"}},
            {"id": "n2", "type": "divider"},
            {
                "id": "n3",
                "type": "condition",
                "data": {"conditionText": "If hit"},
                "children": [
                    {"id": "n4", "type": "action", "data": {"charId": "goblin_1", "abilityId": "Dodge"}}
                ],
            },
        ]
    )
    assert resolve(tree, participants) == (
        "> Hero: Strike(2d100+7)\n\n> If hit: Goblin: Dodge(1d100+0) - Nimble"
    )
