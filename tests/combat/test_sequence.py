"""
Tests for the sequence tree models.
"""

import pytest
from pydantic import ValidationError

from combat_resolver.combat.sequence import (
    ActionNode,
    ComboNode,
    ConditionNode,
    DividerNode,
    LogicChainNode,
    iter_actions,
    parse_tree,
)
from combat_resolver.core.constants import LogicType


@pytest.fixture
def stored_tree():
    return [
        {
            "id": "c1",
            "type": "combo",
            "children": [
                {"id": "a1", "type": "action", "data": {"charId": "p1", "abilityId": "x"}},
                {"id": "a2", "type": "action", "data": {"charId": "p2", "abilityId": "y"}},
            ],
        },
        {"id": "d1", "type": "divider"},
        {
            "id": "l1",
            "type": "logic_chain",
            "children": [
                {
                    "id": "k1",
                    "type": "condition",
                    "data": {"conditionText": "If", "logicType": "IF"},
                    "children": [
                        {
                            "id": "a3",
                            "type": "action",
                            "data": {
                                "charId": "p1",
                                "abilityId": "z",
                                "weaponId": "w",
                                "excludedModifiers": ["Rage"],
                            },
                        }
                    ],
                }
            ],
        },
    ]


def test_parse_stored_tree(stored_tree):
    """Stored node payloads are lifted onto typed nodes."""
    combo, divider, chain = parse_tree(stored_tree)
    assert isinstance(combo, ComboNode)
    assert isinstance(divider, DividerNode)
    assert isinstance(chain, LogicChainNode)
    condition = chain.children[0]
    assert condition.condition_text == "If"
    assert condition.logic_type == LogicType.IF
    action = condition.children[0]
    assert (action.char_id, action.ability_id, action.weapon_id) == ("p1", "z", "w")
    assert action.excluded_modifiers == ["Rage"]


def test_iter_actions_depth_first(stored_tree):
    """Actions are collected depth-first, left to right."""
    assert [a.id for a in iter_actions(parse_tree(stored_tree))] == ["a1", "a2", "a3"]


def test_combo_actions_ignore_other_nodes():
    """A combo only counts its action children as actions."""
    combo = ComboNode(children=[ActionNode(id="a"), DividerNode(), ActionNode(id="b")])
    assert [a.id for a in combo.actions] == ["a", "b"]


def test_nodes_get_generated_ids():
    """Nodes built in code get unique ids."""
    assert ConditionNode().id != ConditionNode().id


def test_unknown_node_type_is_rejected():
    """An unknown node type is a structural error."""
    with pytest.raises(ValidationError):
        parse_tree([{"type": "teleport"}])


def test_logic_chain_only_holds_conditions():
    """A logic chain rejects children that are not conditions."""
    with pytest.raises(ValidationError):
        parse_tree([{"type": "logic_chain", "children": [{"type": "action"}]}])
