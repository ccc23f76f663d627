from __future__ import annotations

import pytest

from nexstar.angles import parse_angle, parse_angle_pair, scan_angle
from nexstar.protocol import NexStarAngleUnit, NexStarGrammarError, NexStarGrammarState


def test_parse_hours_angle() -> None:
    angle, rest = parse_angle("10h30m0s")
    assert angle.unit is NexStarAngleUnit.HOURS
    assert (angle.sign, angle.whole, angle.minutes, angle.seconds) == (1, 10, 30, 0.0)
    assert angle.turns == pytest.approx(10.5 / 24.0)
    assert rest == ""


def test_parse_degrees_with_spaces_and_fraction() -> None:
    angle, rest = parse_angle("12d 30m 15.5s tail")
    assert angle.unit is NexStarAngleUnit.DEGREES
    assert angle.seconds == pytest.approx(15.5)
    assert angle.value == pytest.approx(12 + 30 / 60 + 15.5 / 3600)
    assert rest == " tail"


@pytest.mark.parametrize("text", ["10H30M0S", "10h30M0s", "10H30m0S"])
def test_unit_letters_any_case(text: str) -> None:
    angle, _ = parse_angle(text)
    assert angle.turns == pytest.approx(10.5 / 24.0)


def test_empty_fraction_is_accepted() -> None:
    angle, _ = parse_angle("1d0m12.s")
    assert angle.seconds == 12.0


def test_sign_applies_to_whole_value() -> None:
    plus, _ = parse_angle("+10d30m0s")
    minus, _ = parse_angle("-10d30m0s")
    assert minus.turns == pytest.approx(-plus.turns)
    zero_deg, _ = parse_angle("-0d30m0s")
    assert zero_deg.turns == pytest.approx(-0.5 / 360.0)
    assert (-plus).turns == pytest.approx(minus.turns)


def test_minutes_are_not_range_checked() -> None:
    wide, _ = parse_angle("10d75m0s")
    normal, _ = parse_angle("11d15m0s")
    assert wide.minutes == 75
    assert wide.turns == pytest.approx(normal.turns)


@pytest.mark.parametrize(
    ("text", "state", "position"),
    [
        ("", NexStarGrammarState.SIGN, 0),
        ("   ", NexStarGrammarState.SIGN, 3),
        ("abc", NexStarGrammarState.WHOLE, 0),
        ("-", NexStarGrammarState.WHOLE, 1),
        ("+-1d0m0s", NexStarGrammarState.WHOLE, 1),
        ("10x30m0s", NexStarGrammarState.UNIT, 2),
        ("1dm", NexStarGrammarState.MINUTES, 2),
        ("10d30 0s", NexStarGrammarState.MINUTE_MARK, 5),
        ("10d30m", NexStarGrammarState.SECONDS_SPACE, 6),
        ("10d30mxs", NexStarGrammarState.SECONDS, 6),
        ("10d30m0", NexStarGrammarState.SECOND_MARK, 7),
        ("10d30m0x", NexStarGrammarState.SECOND_MARK, 7),
        ("10d0m1.5x", NexStarGrammarState.FRACTION, 8),
    ],
)
def test_failure_reports_stage_and_offset(text: str, state: NexStarGrammarState, position: int) -> None:
    with pytest.raises(NexStarGrammarError) as excinfo:
        parse_angle(text)
    assert excinfo.value.state is state
    assert excinfo.value.position == position
    assert excinfo.value.code == "grammar"


@pytest.mark.parametrize("text", ["d", "1d", "1d0", "1d0m", "1d0m0", "1d0m0.", "h1m1s", "\t\n", "1.5d0m0s", "9" * 40])
def test_bad_input_only_raises_grammar_error(text: str) -> None:
    with pytest.raises(NexStarGrammarError) as excinfo:
        parse_angle(text)
    assert isinstance(excinfo.value.state, NexStarGrammarState)
    assert 0 <= excinfo.value.position <= len(text)


def test_scan_angle_from_offset() -> None:
    angle, pos = scan_angle("xx1h0m0s", 2)
    assert angle.whole == 1
    assert pos == 8


def test_parse_pair() -> None:
    pair = parse_angle_pair("10h30m0s +45d0m0s")
    assert pair.first.unit is NexStarAngleUnit.HOURS
    assert pair.second.unit is NexStarAngleUnit.DEGREES
    assert pair.turns == pytest.approx((10.5 / 24.0, 45.0 / 360.0))


def test_parse_pair_without_separator_and_trailing_text() -> None:
    pair = parse_angle_pair("1h0m0s-2d0m0s ignored")
    assert pair.second.sign == -1
    assert pair.second.whole == 2


def test_pair_error_offset_is_absolute() -> None:
    with pytest.raises(NexStarGrammarError) as excinfo:
        parse_angle_pair("10h30m0s +45x")
    assert excinfo.value.state is NexStarGrammarState.UNIT
    assert excinfo.value.position == 12


def test_pair_missing_second_angle() -> None:
    with pytest.raises(NexStarGrammarError) as excinfo:
        parse_angle_pair("10h30m0s")
    assert excinfo.value.state is NexStarGrammarState.SIGN
    assert excinfo.value.position == 8


@pytest.mark.parametrize(
    ("text", "state", "position"),
    [
        ("\u00a010d30m0s", NexStarGrammarState.WHOLE, 0),
        ("10d\u00a030m0s", NexStarGrammarState.MINUTES, 3),
        ("10d30m\u20030s", NexStarGrammarState.SECONDS, 6),
    ],
)
def test_only_ascii_whitespace_is_skipped(text: str, state: NexStarGrammarState, position: int) -> None:
    with pytest.raises(NexStarGrammarError) as excinfo:
        parse_angle(text)
    assert excinfo.value.state is state
    assert excinfo.value.position == position


def test_ascii_whitespace_is_skipped() -> None:
    angle, _ = parse_angle("\t10d\r30m\x0b\x0c0s")
    assert angle.turns == pytest.approx(10.5 / 360.0)
