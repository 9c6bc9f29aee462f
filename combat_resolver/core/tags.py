"""
Semantic tag lookup for the combat resolver.

Every component classifies tags through this module: the aggregator decides
whether an action is offensive or defensive, the calculator infers which stats
an action uses, and the evaluator decides whether an action keeps or replaces
the running tag context.
"""

import re
from collections.abc import Iterable

from .constants import (
    ANY_STAT_TOKENS,
    CLEAN_BONUS_TOKEN,
    NiceEnum,
    StatKind,
)


class SemanticTag(NiceEnum):
    """Defines the meanings a free-form tag can carry."""

    OFFENSIVE = "OFFENSIVE"
    DEFENSIVE = "DEFENSIVE"
    NON_OFFENSIVE = "NON_OFFENSIVE"
    FORM = "FORM"
    BUFF = "BUFF"


SEMANTIC_MARKERS: dict[SemanticTag, tuple[str, ...]] = {
    SemanticTag.OFFENSIVE: (
        "attack",
        "hit",
        "damage",
        "melee",
        "ranged",
        "offense",
        "offensive",
        "атака",
        "удар",
        "урон",
        "ближний",
        "дальний",
        "нападение",
    ),
    SemanticTag.DEFENSIVE: (
        "defense",
        "defence",
        "block",
        "dodge",
        "protection",
        "parry",
        "защита",
        "блок",
        "уклонение",
        "парирование",
    ),
    SemanticTag.NON_OFFENSIVE: (
        "dodge",
        "evade",
        "evasion",
        "movement",
        "move",
        "defense",
        "defence",
        "block",
        "parry",
        "уклонение",
        "уворот",
        "перемещение",
        "движение",
        "защита",
        "блок",
        "парирование",
    ),
    SemanticTag.FORM: ("form", "форма"),
    SemanticTag.BUFF: ("buff", "бафф"),
}

_WORD_SPLIT = re.compile(r"[^\w]+|_")

STAT_MARKERS: dict[StatKind, tuple[str, ...]] = {
    StatKind.PHYS: ("phys", "физ"),
    StatKind.MAGIC: ("mag", "маг"),
    StatKind.UNIQUE: ("uniq", "уник"),
}


def normalize_tag(tag: str) -> str:
    """Lower-cases and trims a single tag."""
    return tag.lower().strip()


def normalize_tags(tags: Iterable[str] | None) -> list[str]:
    """
    Normalizes a collection of tags, dropping empty ones.

    Args:
        tags (Iterable[str] | None):
            The tags to normalize.

    Returns:
        list[str]:
            The lower-cased, trimmed, non-empty tags in their original order.

    """
    if not tags:
        return []
    result = []
    for tag in tags:
        if not isinstance(tag, str):
            continue
        normalized = normalize_tag(tag)
        if normalized:
            result.append(normalized)
    return result


def merge_tags(*groups: Iterable[str] | None) -> list[str]:
    """Union of several tag groups, normalized, first occurrence wins."""
    merged: list[str] = []
    for group in groups:
        for tag in normalize_tags(group):
            if tag not in merged:
                merged.append(tag)
    return merged


def has_overlap(source: Iterable[str] | None, target: Iterable[str] | None) -> bool:
    """
    Checks whether two tag collections share at least one tag.

    Comparison is case-insensitive and ignores surrounding whitespace. An empty
    collection on either side never overlaps.

    Args:
        source (Iterable[str] | None):
            The first collection of tags.
        target (Iterable[str] | None):
            The second collection of tags.

    Returns:
        bool:
            True if the intersection is non-empty, False otherwise.

    """
    return bool(set(normalize_tags(source)) & set(normalize_tags(target)))


def _words(tag: str) -> list[str]:
    return [word for word in _WORD_SPLIT.split(tag) if word]


def _matches_marker(tag: str, marker: str) -> bool:
    # Markers match word starts: "fire_form" is a form, "debuff" is no buff.
    return any(word.startswith(marker) for word in _words(tag))


def tag_meanings(tag: str) -> set[SemanticTag]:
    """Returns every semantic meaning carried by a single tag."""
    normalized = normalize_tag(tag)
    return {
        meaning
        for meaning, markers in SEMANTIC_MARKERS.items()
        if any(_matches_marker(normalized, marker) for marker in markers)
    }


def has_meaning(tags: Iterable[str] | None, meaning: SemanticTag) -> bool:
    """
    Checks whether any of the tags carries the given semantic meaning.

    Args:
        tags (Iterable[str] | None):
            The tags to inspect.
        meaning (SemanticTag):
            The meaning to look for.

    Returns:
        bool:
            True if at least one tag carries the meaning.

    """
    markers = SEMANTIC_MARKERS[meaning]
    return any(
        _matches_marker(tag, marker)
        for tag in normalize_tags(tags)
        for marker in markers
    )


def is_offensive(tags: Iterable[str] | None) -> bool:
    return has_meaning(tags, SemanticTag.OFFENSIVE)


def is_defensive(tags: Iterable[str] | None) -> bool:
    return has_meaning(tags, SemanticTag.DEFENSIVE)


def preserves_context(tags: Iterable[str] | None) -> bool:
    """Whether an action with these tags keeps the previous tag context."""
    return has_meaning(tags, SemanticTag.NON_OFFENSIVE)


def stat_kind_of(token: str | None) -> StatKind | None:
    """
    Maps a stat token (a bonus-entry stat or a tag) to a stat kind.

    Args:
        token (str | None):
            The token to classify, e.g. "phys", "Магия", "uniq_power".

    Returns:
        StatKind | None:
            The first stat kind whose marker starts one of the words of the
            token, or None when the token names no stat.

    """
    if not token:
        return None
    words = _words(normalize_tag(token))
    for kind, markers in STAT_MARKERS.items():
        if any(word.startswith(marker) for word in words for marker in markers):
            return kind
    return None


def infer_stat_kinds(tags: Iterable[str] | None) -> set[StatKind]:
    """Returns the stat kinds named by any of the tags."""
    kinds = set()
    for tag in normalize_tags(tags):
        kind = stat_kind_of(tag)
        if kind is not None:
            kinds.add(kind)
    return kinds


def is_clean_bonus(token: str | None) -> bool:
    """Whether a bonus-entry stat token is the stat-independent flat bonus."""
    return normalize_tag(token or "") == CLEAN_BONUS_TOKEN


def is_any_stat(token: str | None) -> bool:
    """Whether a bonus-entry stat token applies regardless of stat."""
    return normalize_tag(token or "") in ANY_STAT_TOKENS
