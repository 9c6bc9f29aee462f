"""
Sequence node module for the combat resolver.

Defines the queued-action tree as a closed, discriminated union of node
models. Stored trees use the ``{"type": ..., "data": {...}, "children": [...]}``
shape; the ``data`` payload is lifted onto the node fields on validation.
"""

from collections.abc import Iterable, Iterator
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, model_validator

from ..core.constants import LogicType
from ..core.utils import generate_id


class _Node(BaseModel):
    """Fields and loading rules shared by every node."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(
        default_factory=lambda: generate_id("node"),
        description="Identifier of the node within the tree.",
    )

    @model_validator(mode="before")
    @classmethod
    def _lift_data(cls, value: Any) -> Any:
        if isinstance(value, dict) and isinstance(value.get("data"), dict):
            lifted = {k: v for k, v in value.items() if k != "data"}
            for key, item in value["data"].items():
                lifted.setdefault(key, item)
            return lifted
        return value


class ActionNode(_Node):
    """A single ability used by one participant."""

    type: Literal["action"] = "action"
    char_id: str | None = Field(
        None,
        alias="charId",
        description="Instance id (or template id) of the acting participant.",
    )
    ability_id: str | None = Field(
        None,
        alias="abilityId",
        description="Id of the ability being used.",
    )
    weapon_id: str | None = Field(
        None,
        alias="weaponId",
        description="Id or name of the usable item the ability is used with.",
    )
    excluded_modifiers: list[str] = Field(
        default_factory=list,
        alias="excludedModifiers",
        description="Names of modifiers switched off for this action.",
    )


class DividerNode(_Node):
    """A paragraph break in the narration."""

    type: Literal["divider"] = "divider"


class ComboNode(_Node):
    """Up to two actions performed together."""

    type: Literal["combo"] = "combo"
    children: list["SequenceNode"] = Field(default_factory=list)

    @property
    def actions(self) -> list[ActionNode]:
        return [child for child in self.children if isinstance(child, ActionNode)]


class ConditionNode(_Node):
    """A labelled branch of actions."""

    type: Literal["condition"] = "condition"
    condition_text: str = Field(
        "",
        alias="conditionText",
        description="The label of the condition.",
    )
    logic_type: LogicType | None = Field(
        None,
        alias="logicType",
        description="Branch keyword when the condition belongs to a logic chain.",
    )
    children: list["SequenceNode"] = Field(default_factory=list)


class LogicChainNode(_Node):
    """Alternative conditions, only one of which happens."""

    type: Literal["logic_chain"] = "logic_chain"
    children: list[ConditionNode] = Field(default_factory=list)


SequenceNode = Annotated[
    Union[ActionNode, ComboNode, ConditionNode, LogicChainNode, DividerNode],
    Field(discriminator="type"),
]

ComboNode.model_rebuild()
ConditionNode.model_rebuild()
LogicChainNode.model_rebuild()

_TREE_ADAPTER = TypeAdapter(list[SequenceNode])


def parse_tree(data: Iterable[dict[str, Any]]) -> list[SequenceNode]:
    """
    Validates a stored tree into node models.

    Args:
        data (Iterable[dict[str, Any]]): The top-level nodes as plain dicts.

    Returns:
        list[SequenceNode]: The validated nodes.

    """
    return _TREE_ADAPTER.validate_python(list(data))


def iter_actions(nodes: Iterable[SequenceNode]) -> Iterator[ActionNode]:
    """Yields every action node of a tree, depth-first, left to right."""
    for node in nodes:
        if isinstance(node, ActionNode):
            yield node
        elif isinstance(node, (ComboNode, ConditionNode, LogicChainNode)):
            yield from iter_actions(node.children)
