from __future__ import annotations

import pytest

from nexstar.angles import parse_angle_pair
from nexstar.commands import (
    QUERY_COMMANDS,
    build_device_version,
    build_echo,
    build_get_position,
    build_goto_position,
    build_query,
    build_set_location,
    build_set_time,
    build_set_tracking,
    build_slew,
    build_sync,
    validate_reply,
)
from nexstar.parsers import parse_location_arg, parse_time_arg
from nexstar.protocol import (
    REPLY_LENGTHS,
    NexStarArgumentError,
    NexStarCommand,
    NexStarDevice,
    NexStarProtocolNack,
    NexStarTrackingMode,
    NexStarTransportReadShort,
    NexStarUnknownEnumValue,
)


@pytest.mark.parametrize(
    ("command", "length"),
    [
        (NexStarCommand.GET_TIME, 9),
        (NexStarCommand.GET_LOCATION, 9),
        (NexStarCommand.GET_TRACKING, 2),
        (NexStarCommand.CANCEL_GOTO, 1),
        (NexStarCommand.GET_VERSION, 3),
        (NexStarCommand.GET_MODEL, 2),
        (NexStarCommand.IS_GOTO_IN_PROGRESS, 2),
        (NexStarCommand.IS_ALIGNMENT_COMPLETE, 2),
    ],
)
def test_query_frames(command: NexStarCommand, length: int) -> None:
    frame = build_query(command)
    assert frame.raw == command.value.encode("ascii")
    assert frame.reply_length == length
    assert frame.acked is QUERY_COMMANDS[command]


def test_query_rejects_other_commands() -> None:
    with pytest.raises(NexStarUnknownEnumValue):
        build_query(NexStarCommand.GOTO_RA_DEC)


def test_echo_frame() -> None:
    frame = build_echo("x")
    assert frame.raw == b"Kx"
    assert frame.reply_length == 2
    with pytest.raises(NexStarArgumentError):
        build_echo("")


def test_set_time_frame() -> None:
    frame = build_set_time(parse_time_arg("14 30 0 6 15 23 -4 1"))
    assert frame.raw == b"H" + bytes([14, 30, 0, 6, 15, 23, 0xFC, 1])
    assert frame.reply_length == 1
    assert frame.acked


def test_set_location_frame() -> None:
    frame = build_set_location(parse_location_arg("-33 52 0 151 12 30"))
    assert frame.raw == b"W" + bytes([33, 52, 0, 1, 151, 12, 30, 0])
    assert frame.reply_length == 1


def test_position_frames() -> None:
    pair = parse_angle_pair("1h30m0s +56d15m0s")
    assert build_goto_position(NexStarCommand.GOTO_RA_DEC, pair).raw == b"R1000,2800"
    assert build_goto_position(NexStarCommand.GOTO_PRECISE_RA_DEC, pair).raw == b"r10000000,28000000"
    assert build_sync(NexStarCommand.SYNC, pair).raw == b"S1000,2800"
    assert build_sync(NexStarCommand.PRECISE_SYNC, pair).raw == b"s10000000,28000000"
    assert build_get_position(NexStarCommand.GET_PRECISE_AZM_ALT).reply_length == 18
    assert build_get_position(NexStarCommand.GET_AZM_ALT).reply_length == 10
    with pytest.raises(NexStarUnknownEnumValue):
        build_goto_position(NexStarCommand.SYNC, pair)
    with pytest.raises(NexStarUnknownEnumValue):
        build_sync(NexStarCommand.GOTO_RA_DEC, pair)


def test_reply_length_is_fixed_per_command() -> None:
    for command in QUERY_COMMANDS:
        assert build_query(command).reply_length == REPLY_LENGTHS[command]


def test_slew_fixed_frames() -> None:
    assert build_slew(True, 1, -9).raw == b"P\x02\x11\x25\x09\x00\x00\x00"
    assert build_slew(True, 0, 5).raw == b"P\x02\x10\x24\x05\x00\x00\x00"
    assert build_slew(True, 0, 0).raw == b"P\x02\x10\x24\x00\x00\x00\x00"


@pytest.mark.parametrize("rate", [10, -10, 100])
def test_slew_fixed_rate_bounds(rate: int) -> None:
    with pytest.raises(NexStarArgumentError):
        build_slew(True, 0, rate)


def test_slew_variable_frames() -> None:
    assert build_slew(False, 0, 1000).raw == b"P\x03\x10\x06\x0f\xa0\x00\x00"
    assert build_slew(False, 1, -1000).raw == b"P\x03\x11\x07\x0f\xa0\x00\x00"
    assert build_slew(False, 0, 100000).reply_length == 1


def test_slew_rejects_unknown_axis() -> None:
    with pytest.raises(NexStarUnknownEnumValue):
        build_slew(True, 2, 1)


def test_device_version_frame() -> None:
    frame = build_device_version("GPS")
    assert frame.raw == b"P\x01\x12\xfe\x00\x00\x00\x02"
    assert frame.reply_length == 3
    assert not frame.acked
    assert build_device_version(NexStarDevice.RTC).raw[2] == 0x13
    with pytest.raises(NexStarUnknownEnumValue):
        build_device_version("gps")


def test_set_tracking_frame() -> None:
    assert build_set_tracking("EQNorth").raw == b"T\x02"
    assert build_set_tracking(NexStarTrackingMode.OFF).raw == b"T\x00"
    with pytest.raises(NexStarUnknownEnumValue):
        build_set_tracking("eqnorth")


def test_validate_reply() -> None:
    frame = build_query(NexStarCommand.CANCEL_GOTO)
    assert validate_reply(frame, b"#") == b"#"
    with pytest.raises(NexStarProtocolNack):
        validate_reply(frame, b"!")
    with pytest.raises(NexStarTransportReadShort):
        validate_reply(frame, b"")


def test_validate_reply_ungated() -> None:
    frame = build_query(NexStarCommand.GET_VERSION)
    assert validate_reply(frame, b"\x04\x15!") == b"\x04\x15!"


def test_echo_rejects_non_ascii() -> None:
    with pytest.raises(NexStarArgumentError):
        build_echo("é")
