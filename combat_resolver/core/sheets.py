"""
Module for printing participant sheets and battle reports in a formatted way.
"""

from collections.abc import Iterable

from rich.padding import Padding

from ..character.models import (
    Ability,
    ActiveEffect,
    Bonus,
    Cooldown,
    Item,
    Participant,
    Passive,
)
from ..character.stats import live_stat
from .constants import StatKind
from .utils import cprint, crule, make_bar


def bonuses_to_string(bonuses: Iterable[Bonus]) -> str:
    """
    Converts a list of bonuses to a formatted string.

    Args:
        bonuses (Iterable[Bonus]): The bonuses to format.

    Returns:
        str: Comma-separated ``+N stat`` entries with colors.

    """
    parts = []
    for bonus in bonuses:
        color = "green" if bonus.val >= 0 else "red"
        stat = f" {bonus.stat}" if bonus.stat else ""
        parts.append(f"[{color}]{bonus.val:+d}[/]{stat}")
    return ", ".join(parts)


def print_ability_sheet(ability: Ability, padding: int = 2) -> None:
    """Prints the details of an ability in a formatted way."""
    sheet = f"[cyan]{ability.name}[/]"
    if ability.tags:
        sheet += f" [dim]({', '.join(ability.tags)})[/]"
    if ability.bonuses:
        sheet += f", {bonuses_to_string(ability.bonuses)}"
    if ability.dur:
        sheet += f", lasts {ability.dur} {ability.duration_unit}"
    if ability.cd:
        sheet += f", cooldown {ability.cd} {ability.cooldown_unit}"
    if ability.is_usage_limited:
        sheet += f", {ability.limit} use(s) per {ability.limit_unit or 'battle'}"
    cprint(Padding(sheet, (0, padding)))


def print_passive_sheet(passive: Passive, padding: int = 2) -> None:
    """Prints the details of a passive in a formatted way."""
    color = "red" if passive.is_flaw else "green"
    sheet = f"[{color}]{passive.name}[/] [dim]{passive.trigger.display_name}[/]"
    if passive.bonuses:
        sheet += f", {bonuses_to_string(passive.bonuses)}"
    if passive.desc_mech:
        sheet += f' - [italic]"{passive.desc_mech}"[/]'
    cprint(Padding(sheet, (0, padding)))


def print_item_sheet(item: Item, padding: int = 2) -> None:
    """Prints the details of an item in a formatted way."""
    sheet = f"[blue]{item.name}[/]"
    if item.is_equipped:
        sheet += " [yellow](equipped)[/]"
    if item.bonuses:
        sheet += f", {bonuses_to_string(item.bonuses)}"
    cprint(Padding(sheet, (0, padding)))


def print_effect_sheet(effect: ActiveEffect, padding: int = 2) -> None:
    """
    Prints the details of an active effect in a formatted way.

    Args:
        effect (ActiveEffect): The effect to display.
        padding (int): Left padding for the output. Defaults to 2.

    """
    sheet = f"[magenta]{effect.name}[/], {effect.duration_left} {effect.unit}"
    if effect.bonuses:
        sheet += f", [bold]{bonuses_to_string(effect.bonuses)}[/]"
    cprint(Padding(sheet, (0, padding)))


def print_cooldown_sheet(cooldown: Cooldown, padding: int = 2) -> None:
    """Prints a cooldown with a bar showing the time left."""
    bar = make_bar(cooldown.val, cooldown.max, color="yellow")
    cprint(
        Padding(
            f"[yellow]{cooldown.name}[/] {bar} {cooldown.val}/{cooldown.max} {cooldown.unit}",
            (0, padding),
        )
    )


def print_participant_sheet(participant: Participant) -> None:
    """
    Prints the details of a participant in a formatted way.

    Args:
        participant (Participant): The participant to display.

    """
    crule(f"[bold]{participant.name}[/]", style="cyan")
    faction = f", [blue]{participant.profile.faction}[/]" if participant.profile.faction else ""
    cprint(f"Level [green]{participant.level}[/]{faction}")

    stats = []
    for kind in StatKind:
        base = participant.stats.get(kind)
        live = live_stat(participant, kind)
        value = f"{base}" if live == base else f"{base} ({live - base:+d})"
        stats.append(kind.colorize(f"{kind.name.capitalize()}: {value}"))
    cprint(f"  {', '.join(stats)}")

    if participant.equipment.usable:
        cprint("  [blue]Weapons[/]:")
        for item in participant.equipment.usable:
            print_item_sheet(item, 4)
    if participant.equipment.wearable:
        cprint("  [blue]Worn[/]:")
        for item in participant.equipment.wearable:
            print_item_sheet(item, 4)

    if participant.flat_abilities:
        cprint("  [cyan]Abilities[/]:")
        for ability in participant.flat_abilities:
            print_ability_sheet(ability, 4)

    if participant.flat_passives:
        cprint("  [green]Passives[/]:")
        for passive in participant.flat_passives:
            print_passive_sheet(passive, 4)

    if participant.active_effects:
        cprint("  [magenta]Active Effects[/]:")
        for effect in participant.active_effects:
            print_effect_sheet(effect, 4)

    if participant.cooldowns:
        cprint("  [yellow]Cooldowns[/]:")
        for cooldown in participant.cooldowns:
            print_cooldown_sheet(cooldown, 4)

    if participant.medcard.injuries:
        injuries = [
            f"{injury.custom_name or injury.template_id} x{injury.count}"
            for injury in participant.medcard.injuries
        ]
        cprint(f"  [red]Injuries[/]: {', '.join(injuries)}")
