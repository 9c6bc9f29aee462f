"""
Utilities module for the combat resolver.

Provides common helpers shared across the engine: console printing with rich
formatting, the singleton metaclass, id generation and lenient number
coercion.
"""

from __future__ import annotations

import math
import uuid
from typing import Any, Generic

from rich.console import Console
from rich.rule import Rule
from typing_extensions import TypeVar

# Initialize the rich console.
_console = Console(markup=True, width=120, force_terminal=True, force_jupyter=False)


def cprint(*args: Any, **kwargs: Any) -> None:
    """
    Custom print function to handle colored output.

    Args:
        *args: Arguments to pass to the console print function.
        **kwargs: Keyword arguments to pass to the console print function.

    """
    _console.print(*args, **kwargs)


def crule(*args: Any, **kwargs: Any) -> None:
    """
    Custom print function to handle colored output with a rule.

    Args:
        *args: Arguments to pass to the Rule constructor.
        **kwargs: Keyword arguments to pass to the Rule constructor.

    """
    _console.print(Rule(*args, **kwargs))


# ---- Singleton Metaclass ----


_T = TypeVar("_T")


class Singleton(type, Generic[_T]):
    """Metaclass that returns the same instance every time."""

    _instances: dict[Singleton[_T], _T] = {}

    def __call__(cls, *args: Any, **kwargs: Any) -> _T:
        if cls not in cls._instances:
            cls._instances[cls] = super().__call__(*args, **kwargs)
        return cls._instances[cls]


# ---- Identifiers ----


def generate_id(prefix: str) -> str:
    """
    Generates a unique identifier for a cooldown, effect or participant.

    Args:
        prefix (str): The prefix marking what the id belongs to (e.g. "cd").

    Returns:
        str: A string such as ``cd_3f9a1c2b``.

    """
    return f"{prefix}_{uuid.uuid4().hex[:8]}"


# ---- Numbers ----


def coerce_int(value: Any, default: int = 0) -> int:
    """
    Converts a loosely typed number to an int.

    Booleans, NaN, infinities and anything that does not parse as a number
    yield the default instead of raising.

    Args:
        value (Any): The value to convert (int, float or numeric string).
        default (int): The value returned when conversion fails.

    Returns:
        int: The converted value, truncated toward zero.

    """
    if isinstance(value, bool) or value is None:
        return default
    if isinstance(value, int):
        return value
    try:
        number = float(str(value).strip())
    except (TypeError, ValueError):
        return default
    if math.isnan(number) or math.isinf(number):
        return default
    return int(number)


def is_numeric(value: Any) -> bool:
    """Whether coerce_int would convert the value without falling back."""
    if isinstance(value, bool) or value is None:
        return False
    if isinstance(value, int):
        return True
    try:
        number = float(str(value).strip())
    except (TypeError, ValueError):
        return False
    return not (math.isnan(number) or math.isinf(number))


def make_bar(current: int, maximum: int, length: int = 10, color: str = "white") -> str:
    """
    Creates a visual progress bar representation.

    Args:
        current (int): The current value.
        maximum (int): The maximum value.
        length (int): The length of the bar in characters. Defaults to 10.
        color (str): The color for the filled portion. Defaults to "white".

    Returns:
        str: A formatted progress bar string.

    """
    if maximum <= 0:
        filled = 0
    else:
        filled = max(0, min(length, int((current / maximum) * length)))
    empty = length - filled
    bar = f"[{color}]" + "▮" * filled
    if empty > 0:
        bar += "[dim white]" + "▯" * empty + "[/]"
    bar += "[/]"
    return bar
