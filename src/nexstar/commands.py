"""Outbound frame builders.

Each builder returns a :class:`NexStarFrame`: the exact bytes to send, the exact reply
length to read back, and whether the reply must end in the ``#`` sentinel. Builders are
pure; nothing here touches the serial line.
"""
from __future__ import annotations

import dataclasses
from typing import Union

from .angles import NexStarAnglePair
from .codec import encode_position
from .models import NexStarLocation, NexStarTime
from .parsers import parse_device_name, parse_tracking_mode
from .protocol import (
    REPLY_LENGTHS,
    NexStarArgumentError,
    NexStarCommand,
    NexStarConstants,
    NexStarDevice,
    NexStarPrecision,
    NexStarProtocolNack,
    NexStarSlewAxis,
    NexStarTrackingMode,
    NexStarTransportReadShort,
    NexStarUnknownEnumValue,
)

# single-letter requests and whether their reply is gated on the trailing "#"
QUERY_COMMANDS: dict[NexStarCommand, bool] = {
    NexStarCommand.GET_TIME: False,
    NexStarCommand.GET_LOCATION: False,
    NexStarCommand.GET_TRACKING: True,
    NexStarCommand.CANCEL_GOTO: True,
    NexStarCommand.GET_VERSION: False,
    NexStarCommand.GET_MODEL: False,
    NexStarCommand.IS_GOTO_IN_PROGRESS: True,
    NexStarCommand.IS_ALIGNMENT_COMPLETE: True,
}

GET_POSITION_COMMANDS = (
    NexStarCommand.GET_RA_DEC,
    NexStarCommand.GET_PRECISE_RA_DEC,
    NexStarCommand.GET_AZM_ALT,
    NexStarCommand.GET_PRECISE_AZM_ALT,
)
GOTO_POSITION_COMMANDS = (
    NexStarCommand.GOTO_RA_DEC,
    NexStarCommand.GOTO_PRECISE_RA_DEC,
    NexStarCommand.GOTO_AZM_ALT,
    NexStarCommand.GOTO_PRECISE_AZM_ALT,
)
SYNC_COMMANDS = (NexStarCommand.SYNC, NexStarCommand.PRECISE_SYNC)
PRECISE_COMMANDS = (
    NexStarCommand.GOTO_PRECISE_RA_DEC,
    NexStarCommand.GOTO_PRECISE_AZM_ALT,
    NexStarCommand.PRECISE_SYNC,
)


@dataclasses.dataclass(frozen=True)
class NexStarFrame:
    command: NexStarCommand
    payload: bytes
    reply_length: int
    acked: bool

    @property
    def raw(self) -> bytes:
        return self.command.value.encode(NexStarConstants.ENCODING) + self.payload


def validate_reply(frame: NexStarFrame, reply: bytes) -> bytes:
    if len(reply) != frame.reply_length:
        raise NexStarTransportReadShort(frame.reply_length, reply)
    if frame.acked and reply[-1:] != NexStarConstants.ACK:
        raise NexStarProtocolNack(frame.command, reply)
    return reply


def _frame(command: NexStarCommand, payload: bytes = b"", acked: bool = True) -> NexStarFrame:
    return NexStarFrame(command=command, payload=payload, reply_length=REPLY_LENGTHS[command], acked=acked)


def _require(command: NexStarCommand, allowed: tuple[NexStarCommand, ...] | dict, family: str) -> None:
    if command not in allowed:
        raise NexStarUnknownEnumValue(f"{family} command", str(command))


def build_query(command: NexStarCommand) -> NexStarFrame:
    _require(command, QUERY_COMMANDS, "query")
    return _frame(command, acked=QUERY_COMMANDS[command])


def build_echo(arg: str) -> NexStarFrame:
    if not arg:
        raise NexStarArgumentError("echo needs one character")
    try:
        payload = arg[0].encode(NexStarConstants.ENCODING)
    except UnicodeEncodeError as exc:
        raise NexStarArgumentError(f"echo needs an ASCII character, got {arg[0]!r}") from exc
    return _frame(NexStarCommand.ECHO, payload, acked=False)


def build_set_time(value: NexStarTime) -> NexStarFrame:
    return _frame(NexStarCommand.SET_TIME, value.to_payload())


def build_set_location(value: NexStarLocation) -> NexStarFrame:
    return _frame(NexStarCommand.SET_LOCATION, value.to_payload())


def build_get_position(command: NexStarCommand) -> NexStarFrame:
    _require(command, GET_POSITION_COMMANDS, "get-position")
    return _frame(command)


def _position_frame(command: NexStarCommand, pair: NexStarAnglePair) -> NexStarFrame:
    precision = NexStarPrecision.HIGH if command in PRECISE_COMMANDS else NexStarPrecision.LOW
    first, second = encode_position(pair, precision)
    text = f"{first.to_ascii()}{NexStarConstants.FIELD_SEP}{second.to_ascii()}"
    return _frame(command, text.encode(NexStarConstants.ENCODING))


def build_goto_position(command: NexStarCommand, pair: NexStarAnglePair) -> NexStarFrame:
    _require(command, GOTO_POSITION_COMMANDS, "goto")
    return _position_frame(command, pair)


def build_sync(command: NexStarCommand, pair: NexStarAnglePair) -> NexStarFrame:
    _require(command, SYNC_COMMANDS, "sync")
    return _position_frame(command, pair)


def build_slew(fixed: bool, axis: Union[int, NexStarSlewAxis], rate: int) -> NexStarFrame:
    """Motor pass-through slew.

    Fixed-rate slews take an index in [-9, 9]. Variable-rate slews are sent as
    ``|rate| * 4`` split high/low across two bytes, truncated to 16 bits; their
    magnitude is not bounded here. The sign of ``rate`` picks the direction.
    """
    try:
        axis = NexStarSlewAxis(axis)
    except ValueError:
        raise NexStarUnknownEnumValue("slew axis", str(axis)) from None
    if fixed and abs(rate) > NexStarConstants.SLEW_FIXED_MAX:
        raise NexStarArgumentError(f"fixed slew rate out of bounds: {rate!r}")
    variable = 0 if fixed else 1
    direction = 1 if rate < 0 else 0
    rate_class = (NexStarConstants.SLEW_RATE_CLASS | direction) + (NexStarConstants.SLEW_FIXED_OFFSET if fixed else 0)
    if fixed:
        high, low = abs(rate), 0
    else:
        scaled = abs(rate * NexStarConstants.SLEW_VARIABLE_SCALE)
        high, low = scaled >> 8, scaled
    payload = bytes(
        b & NexStarConstants.BYTE_MASK
        for b in (
            NexStarConstants.SLEW_MSG_LEN | variable,
            NexStarConstants.SLEW_CHANNEL | axis,
            rate_class,
            high,
            low,
            0,
            0,
        )
    )
    return NexStarFrame(command=NexStarCommand.PASS_THROUGH, payload=payload, reply_length=1, acked=True)


def build_device_version(device: Union[str, NexStarDevice]) -> NexStarFrame:
    if isinstance(device, str):
        device = parse_device_name(device)
    payload = bytes(
        (
            NexStarConstants.DEVICE_MSG_LEN,
            device.channel,
            NexStarConstants.DEVICE_VERSION_CMD,
            0,
            0,
            0,
            NexStarConstants.DEVICE_REPLY_LEN,
        )
    )
    return NexStarFrame(
        command=NexStarCommand.PASS_THROUGH,
        payload=payload,
        reply_length=NexStarConstants.DEVICE_REPLY_LEN + 1,
        acked=False,
    )


def build_get_tracking() -> NexStarFrame:
    return build_query(NexStarCommand.GET_TRACKING)


def build_set_tracking(mode: Union[str, NexStarTrackingMode]) -> NexStarFrame:
    if isinstance(mode, str):
        mode = parse_tracking_mode(mode)
    return _frame(NexStarCommand.SET_TRACKING, bytes((int(mode),)))
