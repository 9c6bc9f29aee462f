"""
Sequence evaluation module for the combat resolver.

Walks a queued-action tree depth-first, computes every action's bonus and
assembles the narration line by line. The merged tags of the latest
offensive action are threaded between siblings so that reactions (dodges,
blocks, resistances) see the tags of the attack they answer.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field

from catchery import log_warning

from ..character.models import InjuryRule, Participant
from ..character.roster import find_participant
from ..character.stats import DEFAULT_INJURY_RULES
from ..core.constants import UNKNOWN_ACTION
from ..core.logging import log_debug
from ..core.tags import SemanticTag, has_meaning, preserves_context
from .bonus import action_tags, calculate_bonus
from .sequence import (
    ActionNode,
    ComboNode,
    ConditionNode,
    DividerNode,
    LogicChainNode,
    SequenceNode,
)

MAX_COMBO_ACTIONS = 2


@dataclass
class ActionOutcome:
    """The resolved data of one action node."""

    actor_name: str
    name: str
    dice: str
    bonus: str
    is_form: bool
    is_buff: bool
    mechanics: str
    tags: list[str]
    modifiers: list[str] = field(default_factory=list)

    @property
    def roll(self) -> str:
        return f"{self.dice}{self.bonus}"

    def render(self) -> str:
        if self.is_form:
            text = f"<{self.actor_name}: {self.name} ({self.mechanics})>"
        elif self.is_buff:
            text = f"({self.actor_name}: {self.name} ({self.mechanics}))"
        else:
            text = f"{self.actor_name}: {self.name}({self.roll})"
        return _with_modifiers(text, self.modifiers)


class _Divider:
    """Marks a paragraph break among the rendered top-level parts."""


DIVIDER = _Divider()


def _with_modifiers(text: str, modifiers: list[str]) -> str:
    return "".join([text, *(f" - {name}" for name in modifiers)])


def _next_context(outcome: ActionOutcome, last_tags: list[str] | None) -> list[str] | None:
    if preserves_context(outcome.tags):
        return last_tags
    return outcome.tags


class SequenceEvaluator:
    """
    Resolves a sequence tree against a list of participants.

    Attributes:
        participants (list[Participant]):
            The participants of the battle.
        rules (list[InjuryRule]):
            The injury rule table used for live stats.

    """

    def __init__(
        self,
        participants: Iterable[Participant],
        rules: Iterable[InjuryRule] = DEFAULT_INJURY_RULES,
    ) -> None:
        self.participants: list[Participant] = list(participants)
        self.rules: list[InjuryRule] = list(rules)

    # ==========================================================================
    # LOOKUPS
    # ==========================================================================

    def find_actor(self, char_id: str | None) -> Participant | None:
        """Finds a participant by instance id, falling back to template id."""
        return find_participant(self.participants, char_id)

    def resolve_action(
        self,
        node: ActionNode,
        last_tags: list[str] | None,
    ) -> ActionOutcome | None:
        """
        Computes the outcome of an action node.

        Args:
            node (ActionNode):
                The action to resolve.
            last_tags (list[str] | None):
                The running tag context, used as the opponent's tags.

        Returns:
            ActionOutcome | None:
                The outcome, or None when the actor or ability is unknown.

        """
        actor = self.find_actor(node.char_id)
        if actor is None:
            log_warning(
                "Action references an unknown participant.",
                {"node": node.id, "char_id": node.char_id},
            )
            return None
        ability = actor.find_ability(node.ability_id)
        if ability is None:
            log_warning(
                "Action references an unknown ability.",
                {"node": node.id, "actor": actor.name, "ability_id": node.ability_id},
            )
            return None
        weapon = actor.find_weapon(node.weapon_id)
        if node.weapon_id and weapon is None:
            log_warning(
                "Action references an unknown weapon, ignoring it.",
                {"node": node.id, "actor": actor.name, "weapon_id": node.weapon_id},
            )

        tags = action_tags(ability, weapon)
        breakdown = calculate_bonus(
            actor,
            ability,
            weapon,
            self.rules,
            node.excluded_modifiers,
            last_tags,
            tags,
        )
        name = f"{ability.name} [{weapon.name}]" if weapon and weapon.name else ability.name
        return ActionOutcome(
            actor_name=actor.name,
            name=name,
            dice=breakdown.dice,
            bonus=breakdown.signed_total,
            is_form=has_meaning(ability.tags, SemanticTag.FORM),
            is_buff=has_meaning(ability.tags, SemanticTag.BUFF),
            mechanics=ability.desc_mech,
            tags=tags,
            modifiers=breakdown.visible_modifiers,
        )

    # ==========================================================================
    # NODE RENDERING
    # ==========================================================================

    def render_node(
        self,
        node: SequenceNode,
        last_tags: list[str] | None,
    ) -> tuple[str | _Divider, list[str] | None]:
        """
        Renders one node and returns it with the updated tag context.

        Args:
            node (SequenceNode):
                The node to render.
            last_tags (list[str] | None):
                The tag context before the node.

        Returns:
            tuple[str | _Divider, list[str] | None]:
                The rendered text (or the divider marker) and the tag context
                after the node.

        """
        if isinstance(node, DividerNode):
            return DIVIDER, last_tags
        if isinstance(node, ActionNode):
            return self._render_action(node, last_tags)
        if isinstance(node, ComboNode):
            return self._render_combo(node, last_tags)
        if isinstance(node, ConditionNode):
            return self._render_condition(node, last_tags)
        if isinstance(node, LogicChainNode):
            return self._render_logic_chain(node, last_tags)
        raise TypeError(f"Unsupported sequence node: {type(node).__name__}")

    def _render_action(
        self, node: ActionNode, last_tags: list[str] | None
    ) -> tuple[str, list[str] | None]:
        outcome = self.resolve_action(node, last_tags)
        if outcome is None:
            return UNKNOWN_ACTION, last_tags
        return outcome.render(), _next_context(outcome, last_tags)

    def _render_combo(
        self, node: ComboNode, last_tags: list[str] | None
    ) -> tuple[str, list[str] | None]:
        actions = node.actions
        if len(actions) > MAX_COMBO_ACTIONS:
            log_warning(
                "Combo holds more than two actions, extra ones are ignored.",
                {"node": node.id, "actions": len(actions)},
            )
            actions = actions[:MAX_COMBO_ACTIONS]

        outcomes: list[ActionOutcome] = []
        for child in actions:
            outcome = self.resolve_action(child, last_tags)
            if outcome is None:
                continue
            outcomes.append(outcome)
            last_tags = _next_context(outcome, last_tags)
        if not outcomes:
            return "", last_tags

        names = " + ".join(f"{o.actor_name}: {o.name}" for o in outcomes)
        rolls = "/".join("-" if o.is_form or o.is_buff else o.roll for o in outcomes)
        modifiers: list[str] = []
        for outcome in outcomes:
            for name in outcome.modifiers:
                if name not in modifiers:
                    modifiers.append(name)
        return _with_modifiers(f"[{names}({rolls})]", modifiers), last_tags

    def _render_condition(
        self, node: ConditionNode, last_tags: list[str] | None
    ) -> tuple[str, list[str] | None]:
        parts: list[str] = []
        for child in node.children:
            text, last_tags = self.render_node(child, last_tags)
            if isinstance(text, str) and text.strip():
                parts.append(text)
        label = node.condition_text or "..."
        return f"{label}: {' - '.join(parts)}", last_tags

    def _render_logic_chain(
        self, node: LogicChainNode, last_tags: list[str] | None
    ) -> tuple[str, list[str] | None]:
        parts: list[str] = []
        for child in node.children:
            text, last_tags = self.render_node(child, last_tags)
            if isinstance(text, str):
                parts.append(text)
        return f"{{ {' | '.join(parts)} }}", last_tags

    # ==========================================================================
    # ASSEMBLY
    # ==========================================================================

    def resolve(self, tree: Iterable[SequenceNode]) -> str:
        """
        Renders a whole tree into the narration string.

        Parts starting a line are prefixed with ``"> "``; later parts on the
        same line are joined with ``" - "``. A divider adds a blank line and
        starts a new paragraph.

        Args:
            tree (Iterable[SequenceNode]): The top-level nodes.

        Returns:
            str: The narration, stripped of surrounding whitespace.

        """
        text = ""
        at_line_start = True
        last_tags: list[str] | None = None
        for node in tree:
            part, last_tags = self.render_node(node, last_tags)
            if isinstance(part, _Divider):
                text += "\n\n"
                at_line_start = True
                continue
            clean = part.strip()
            if not clean:
                continue
            if at_line_start:
                text += f"> {clean}"
                at_line_start = False
            else:
                text += f" - {clean}"
        log_debug("Sequence resolved.", {"length": len(text)})
        return text.strip()


def resolve(
    tree: Iterable[SequenceNode],
    participants: Iterable[Participant],
    rules: Iterable[InjuryRule] = DEFAULT_INJURY_RULES,
) -> str:
    """
    Renders the narration of a sequence tree.

    Args:
        tree (Iterable[SequenceNode]):
            The top-level nodes of the queued sequence.
        participants (Iterable[Participant]):
            The participants of the battle.
        rules (Iterable[InjuryRule]):
            The injury rule table.

    Returns:
        str:
            One narrative string, ready to be copied into the battle log.

    """
    return SequenceEvaluator(participants, rules).resolve(tree)
