from __future__ import annotations

import logging

import pytest

from nexstar.angles import NexStarAngle, NexStarAnglePair, parse_angle_pair
from nexstar.codec import NexStarWireField, decode_position, encode_position, format_sexagesimal
from nexstar.protocol import (
    NexStarAngleUnit,
    NexStarCommand,
    NexStarPrecision,
    NexStarProtocolNack,
    NexStarUnknownEnumValue,
)


def test_encode_low_precision() -> None:
    first, second = encode_position(parse_angle_pair("1h30m0s +56d15m0s"), NexStarPrecision.LOW)
    assert first.to_ascii() == "1000"
    assert second.to_ascii() == "2800"


def test_encode_negative_is_twos_complement() -> None:
    _, low = encode_position(parse_angle_pair("0h0m0s -45d0m0s"), NexStarPrecision.LOW)
    _, high = encode_position(parse_angle_pair("0h0m0s -90d0m0s"), NexStarPrecision.HIGH)
    assert low.to_ascii() == "E000"
    assert high.to_ascii() == "C0000000"


def test_getra_reply_renders() -> None:
    pos = decode_position(b"1000,2800#", NexStarCommand.GET_RA_DEC)
    assert pos.first == pytest.approx(1.5)
    assert pos.second_degrees == pytest.approx(56.25)
    assert pos.to_string() == "+001h 30m 00.000s +056d 15m 00.000s"


def test_precise_reply_renders() -> None:
    pos = decode_position(b"10000000,20000000#", NexStarCommand.GET_PRECISE_RA_DEC)
    assert pos.to_string() == "+001h 30m 00.000s +045d 00m 00.000s"


def test_second_component_folds_negative() -> None:
    pos = decode_position(b"0000,E000#", NexStarCommand.GET_RA_DEC)
    assert pos.second_degrees == pytest.approx(-45.0)
    assert pos.to_string() == "+000h 00m 00.000s -045d 00m 00.000s"


def test_first_component_is_not_folded() -> None:
    pos = decode_position(b"C000,0000#", NexStarCommand.GET_AZM_ALT)
    assert pos.first == pytest.approx(270.0)
    assert pos.to_string() == "+270d 00m 00.000s +000d 00m 00.000s"


def test_six_tenths_turn_wraps() -> None:
    field = NexStarWireField.from_turns(0.6, NexStarPrecision.LOW)
    reply = f"0000,{field.to_ascii()}#".encode("ascii")
    pos = decode_position(reply, NexStarCommand.GET_AZM_ALT)
    assert pos.second_degrees == pytest.approx(-144.0, abs=360.0 / 65536)


@pytest.mark.parametrize(
    ("text", "get_cmd"),
    [
        ("23h59m59.5s -89d59m59s", NexStarCommand.GET_PRECISE_RA_DEC),
        ("359d0m0s +12d34m56.789s", NexStarCommand.GET_PRECISE_AZM_ALT),
    ],
)
def test_high_precision_round_trip(text: str, get_cmd: NexStarCommand) -> None:
    pair = parse_angle_pair(text)
    first, second = encode_position(pair, NexStarPrecision.HIGH)
    pos = decode_position(f"{first.to_ascii()},{second.to_ascii()}#".encode("ascii"), get_cmd)
    assert pos.first == pytest.approx(pair.first.value, abs=1e-6)
    assert pos.second_degrees == pytest.approx(pair.second.value, abs=1e-6)


def test_overflow_is_logged_and_masked(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.WARNING, logger="nexstar.codec")
    field = NexStarWireField.from_turns(1.5, NexStarPrecision.LOW)
    assert field.value == 0x8000
    assert "encoding-overflow" in caplog.text


def test_in_range_negative_is_not_an_overflow(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.WARNING, logger="nexstar.codec")
    NexStarWireField.from_turns(-0.25, NexStarPrecision.LOW)
    assert caplog.records == []


def test_from_ascii_rejects_bad_fields() -> None:
    with pytest.raises(ValueError):
        NexStarWireField.from_ascii("123", NexStarPrecision.LOW)
    with pytest.raises(ValueError):
        NexStarWireField.from_ascii("12G4", NexStarPrecision.LOW)
    with pytest.raises(ValueError):
        NexStarWireField(0x10000, NexStarPrecision.LOW)


def test_decode_bad_hex_is_nack() -> None:
    with pytest.raises(NexStarProtocolNack):
        decode_position(b"XYZW,0000#", NexStarCommand.GET_RA_DEC)


def test_decode_rejects_non_position_command() -> None:
    with pytest.raises(NexStarUnknownEnumValue):
        decode_position(b"1000,2800#", NexStarCommand.GOTO_RA_DEC)


def test_format_truncates_milliseconds() -> None:
    assert format_sexagesimal(10 + 1.9999 / 3600, NexStarAngleUnit.DEGREES) == "+010d 00m 01.999s"
    assert format_sexagesimal(-0.5, NexStarAngleUnit.DEGREES) == "-000d 30m 00.000s"
    assert format_sexagesimal(12.25, NexStarAngleUnit.HOURS) == "+012h 15m 00.000s"


def test_getra_reply_without_separator() -> None:
    pos = decode_position(b"1000028000#", NexStarCommand.GET_RA_DEC)
    assert pos.to_string() == "+001h 30m 00.000s +056d 15m 00.000s"


def test_low_precision_round_trip() -> None:
    for value in range(0, 1 << 16, 7):
        turns = value / 65536
        field = NexStarWireField.from_turns(turns, NexStarPrecision.LOW)
        assert field.value == value
        reply = f"{field.to_ascii()},{field.to_ascii()}#".encode("ascii")
        pos = decode_position(reply, NexStarCommand.GET_AZM_ALT)
        assert pos.first_turns == turns
        expected_deg = turns * 360.0
        if expected_deg > 180.0:
            expected_deg -= 360.0
        assert pos.second_degrees == expected_deg
        assert NexStarWireField.from_turns(pos.second_turns, NexStarPrecision.LOW).value == value


def test_encode_position_round_trip_on_eighth_turns() -> None:
    for whole in range(0, 360, 45):
        angle = NexStarAngle(sign=1, whole=whole, minutes=0, seconds=0.0, unit=NexStarAngleUnit.DEGREES)
        first, second = encode_position(NexStarAnglePair(first=angle, second=-angle), NexStarPrecision.LOW)
        assert first.value == whole * 65536 // 360
        pos = decode_position(f"{first.to_ascii()},{second.to_ascii()}#".encode("ascii"), NexStarCommand.GET_AZM_ALT)
        assert pos.first == whole
        assert pos.second_degrees == (-whole if whole < 180 else 360 - whole)
