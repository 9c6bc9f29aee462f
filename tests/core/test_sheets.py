"""
Tests for the rich participant sheets.
"""

import pytest

from combat_resolver.character.models import (
    Ability,
    Bonus,
    Cooldown,
    Injury,
    MedCard,
    Participant,
    Profile,
    StatBlock,
)
from combat_resolver.core.sheets import (
    bonuses_to_string,
    print_ability_sheet,
    print_participant_sheet,
)


@pytest.fixture
def console(mocker):
    printed = mocker.patch("combat_resolver.core.sheets.cprint")
    rule = mocker.patch("combat_resolver.core.sheets.crule")
    return printed, rule


def printed_text(printed):
    texts = []
    for call in printed.call_args_list:
        content = call.args[0]
        texts.append(str(getattr(content, "renderable", content)))
    return "\n".join(texts)


def test_bonuses_to_string():
    """Bonuses are signed and colored by sign."""
    text = bonuses_to_string([Bonus(stat="phys", val=3), Bonus(val=-2)])
    assert text == "[green]+3[/] phys, [red]-2[/]"


def test_ability_sheet_lists_timers(console):
    """An ability sheet shows its duration, cooldown and usage limit."""
    printed, _ = console
    ability = Ability(name="Volley", cd=3, cd_unit="round", dur=1, limit=2, limit_unit="round")
    print_ability_sheet(ability)
    text = printed_text(printed)
    assert "lasts 1 turn" in text
    assert "cooldown 3 round" in text
    assert "2 use(s) per round" in text


def test_participant_sheet_shows_live_stats(console):
    """The participant sheet shows injured stats next to the base value."""
    printed, rule = console
    participant = Participant(
        id="ogre",
        instance_id="ogre_1",
        profile=Profile(name="Ogre"),
        stats=StatBlock(phys=20, magic=5),
        medcard=MedCard(injuries=[Injury(template_id="mid_phys")]),
        cooldowns=[Cooldown(name="Smash", val=1, max=2)],
    )
    print_participant_sheet(participant)
    rule.assert_called_once()
    text = printed_text(printed)
    assert "Phys: 20 (-10)" in text
    assert "Magic: 5[/]" in text
    assert "Smash" in text
    assert "mid_phys x1" in text
