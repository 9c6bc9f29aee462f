import json
from collections.abc import Callable
from pathlib import Path
from typing import Any

from catchery import log_warning

from ..character.models import CharacterTemplate, InjuryRule
from ..character.stats import DEFAULT_INJURY_RULES
from .utils import Singleton, cprint


class ContentRepository(metaclass=Singleton):
    """
    Registry of the stored characters and the injury rule table, with
    by-key access.
    """

    injury_rules: dict[str, InjuryRule]
    characters: dict[str, CharacterTemplate]

    def __init__(self, data_dir: Path | None = None) -> None:
        """
        Initialize the ContentRepository.

        Args:
            data_dir (Path | None):
                The directory containing data files to load.

        """
        if data_dir:
            self.reload(data_dir)
            self.loaded = True
        elif not hasattr(self, "loaded"):
            raise ValueError(
                "ContentRepository must be initialized with a valid data_dir on first use."
            )

    def reload(self, root: Path) -> None:
        """
        (Re)load the JSON assets from disk.

        A missing ``injury_rules.json`` falls back to the default table.

        Args:
            root (Path):
                The directory containing data files to load.
        """
        rules_file = root / "injury_rules.json"
        if rules_file.exists():
            self.injury_rules = _load_json_file(
                rules_file,
                self._load_injury_rules,
                "injury rules",
            )
        else:
            log_warning(
                "No injury rule file found, using the default table.",
                {"data_dir": str(root)},
            )
            self.injury_rules = {rule.tag: rule for rule in DEFAULT_INJURY_RULES}
        self.characters = _load_json_file(
            root / "characters.json",
            self._load_characters,
            "characters",
        )

    @property
    def rules(self) -> list[InjuryRule]:
        """The injury rule table, as expected by the engine."""
        return list(self.injury_rules.values())

    def get_character(self, template_id: str) -> CharacterTemplate | None:
        """Get a character template by id, or None if not found."""
        entry = self.characters.get(template_id)
        if entry is None:
            log_warning(
                f"Character '{template_id}' not found in ContentRepository.",
                {"template_id": template_id},
            )
        return entry

    def get_injury_rule(self, tag: str) -> InjuryRule | None:
        """Get an injury rule by tag, or None if not found."""
        return self.injury_rules.get(tag)

    @staticmethod
    def _load_injury_rules(data: list[dict]) -> dict[str, InjuryRule]:
        """
        Load injury rules from JSON data.

        Args:
            data (list[dict]): List of injury rule dictionaries.

        Returns:
            dict[str, InjuryRule]: Dictionary mapping tags to rules.

        Raises:
            ValueError: If duplicate tags are found.

        """
        rules: dict[str, InjuryRule] = {}
        for rule_data in data:
            rule = InjuryRule.model_validate(rule_data)
            if rule.tag in rules:
                raise ValueError(f"Duplicate injury tag: {rule.tag}")
            rules[rule.tag] = rule
        return rules

    @staticmethod
    def _load_characters(data: list[dict]) -> dict[str, CharacterTemplate]:
        """
        Load character templates from JSON data.

        Args:
            data (list[dict]): List of character dictionaries.

        Returns:
            dict[str, CharacterTemplate]: Dictionary mapping ids to templates.

        Raises:
            ValueError: If duplicate ids are found.

        """
        characters: dict[str, CharacterTemplate] = {}
        for char_data in data:
            template = CharacterTemplate.model_validate(char_data)
            if template.id in characters:
                raise ValueError(f"Duplicate character id: {template.id}")
            characters[template.id] = template
        return characters


def _load_json_file(
    filepath: Path,
    loader_func: Callable[[list[dict]], dict[str, Any]],
    description: str,
) -> dict[str, Any]:
    """Helper to load and validate JSON files"""
    try:
        cprint(
            f"  Loading {description} using {loader_func.__name__}...",
            style="bold green",
        )
        if not filepath.exists():
            raise FileNotFoundError(f"File not found: {filepath}")
        if not filepath.is_file():
            raise ValueError(f"Not a file: {filepath}")
        with open(filepath, encoding="utf-8") as f:
            data = json.load(f)
        if not data:
            raise ValueError(f"Empty data list in {filepath}")
        if not isinstance(data, list):
            raise ValueError(f"Expected list in {filepath}, got {type(data).__name__}")
        return loader_func(data)
    except (json.JSONDecodeError, FileNotFoundError, ValueError) as e:
        raise ValueError(f"File {filepath} raised an error: {e}") from e
