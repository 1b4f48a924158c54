"""Tests for shorthand parsing and duration grammar."""

import pytest

from weekboard.services.parser import is_shorthand, parse_duration, parse_shorthand


@pytest.mark.parametrize("text,minutes", [
    ("15m", 15),
    ("30m", 30),
    ("1h", 60),
    ("1.5h", 90),
    ("1d", 480),
    ("0.5d", 240),
    ("2H", 120),
    (" 45m ", 45),
    ("0m", 0),
    ("0.5m", 1),
])
def test_parse_duration_valid(text, minutes):
    assert parse_duration(text) == minutes


@pytest.mark.parametrize("text", ["50k", "abc", "", "90", "1.h", "h", "-1h", "1 h"])
def test_parse_duration_no_match(text):
    assert parse_duration(text) is None


def test_two_segments():
    draft = parse_shorthand("Proj::Title")
    assert draft.project == "Proj"
    assert draft.title == "Title"
    assert draft.description is None
    assert draft.duration_minutes is None
    assert draft.warnings == []


def test_segments_are_trimmed():
    draft = parse_shorthand("  Proj ::  Fix the bug  ")
    assert draft.project == "Proj"
    assert draft.title == "Fix the bug"


def test_three_segments_duration():
    draft = parse_shorthand("Proj::Title::1.5h")
    assert draft.duration_minutes == 90
    assert draft.description is None
    assert draft.warnings == []


def test_three_segments_description():
    draft = parse_shorthand("Proj::Title::some desc")
    assert draft.description == "some desc"
    assert draft.duration_minutes is None
    assert draft.warnings == []


def test_three_segments_bad_duration_becomes_description():
    draft = parse_shorthand("Proj::Title::50k")
    assert draft.description == "50k"
    assert draft.duration_minutes is None
    assert draft.warnings == []


def test_three_segments_empty_extra():
    draft = parse_shorthand("Proj::Title::")
    assert draft.description is None
    assert draft.duration_minutes is None


def test_four_segments_duration():
    draft = parse_shorthand("Proj::Title::Desc::2h")
    assert draft.description == "Desc"
    assert draft.duration_minutes == 120
    assert draft.warnings == []


def test_four_segments_bad_duration_warns():
    draft = parse_shorthand("Proj::Title::Desc::50k")
    assert draft.description == "Desc"
    assert draft.duration_minutes is None
    assert len(draft.warnings) == 1
    assert "50k" in draft.warnings[0]


def test_four_segments_description_is_never_a_duration():
    draft = parse_shorthand("Proj::Title::1h::30m")
    assert draft.description == "1h"
    assert draft.duration_minutes == 30


def test_four_segments_empty_description():
    draft = parse_shorthand("Proj::Title::::1h")
    assert draft.description is None
    assert draft.duration_minutes == 60
    assert draft.warnings == []


@pytest.mark.parametrize("text", [
    "OnlyOneSegment",
    "A::B::C::D::E",
    "::Title",
    "Proj::",
    "  ::  ",
    "",
])
def test_structural_failures(text):
    assert parse_shorthand(text) is None


def test_is_shorthand():
    assert is_shorthand("a::b")
    assert is_shorthand("::")
    assert is_shorthand("plain text with :: inside")
    assert not is_shorthand("a:b")
    assert not is_shorthand("plain title")
