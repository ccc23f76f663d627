"""In-memory hand control speaking the NexStar serial protocol.

Used by the tests and by ``--device dummy``. It implements the same ``write`` /
``read`` transport interface as :class:`nexstar.serial_prims.NexStarSerialDevice`.
"""
from __future__ import annotations

import dataclasses
import logging
from typing import Callable, Optional

from .models import NexStarLocation, NexStarTime
from .protocol import (
    NexStarCommand,
    NexStarConstants,
    NexStarDevice,
    NexStarPrecision,
    NexStarTrackingMode,
    NexStarTransportReadShort,
)

LOGGER = logging.getLogger("nexstar.dummy")


class NexStarDummyConstants:
    NAME = "dummy"
    NACK = b"!"
    HIGH_TO_LOW_SHIFT = NexStarPrecision.HIGH.value - NexStarPrecision.LOW.value
    VERSION = (4, 21)
    MODEL = 11
    NOT_CONNECTED_REPLY = b"\x00\x00\x00"
    DEFAULT_TIME = NexStarTime(hour=0, minute=0, second=0, month=1, day=1, year=0, gmt_offset=0, dst=0)
    DEFAULT_LOCATION = NexStarLocation(
        lat_deg=0, lat_min=0, lat_sec=0, south=False, lon_deg=0, lon_min=0, lon_sec=0, west=False
    )


def _default_device_versions() -> dict[NexStarDevice, Optional[tuple[int, int]]]:
    return {
        NexStarDevice.AZM_RA_MOTOR: (7, 11),
        NexStarDevice.ALT_DEC_MOTOR: (7, 11),
        NexStarDevice.GPS: None,
        NexStarDevice.RTC: (1, 6),
    }


@dataclasses.dataclass
class NexStarDummyState:
    # positions are kept at 32-bit resolution
    ra: int = 0
    dec: int = 0
    azm: int = 0
    alt: int = 0
    tracking: NexStarTrackingMode = NexStarTrackingMode.OFF
    time: NexStarTime = NexStarDummyConstants.DEFAULT_TIME
    location: NexStarLocation = NexStarDummyConstants.DEFAULT_LOCATION
    version: tuple[int, int] = NexStarDummyConstants.VERSION
    model: int = NexStarDummyConstants.MODEL
    device_versions: dict[NexStarDevice, Optional[tuple[int, int]]] = dataclasses.field(
        default_factory=_default_device_versions
    )
    goto_in_progress: bool = False
    aligned: bool = True
    slew_rates: dict[int, int] = dataclasses.field(default_factory=dict)
    nack: bool = False
    short_reply: bool = False
    frames: list[bytes] = dataclasses.field(default_factory=list)


class NexStarDummyHandControl:
    def __init__(self, state: Optional[NexStarDummyState] = None, logger: Optional[logging.Logger] = None) -> None:
        self.state = state or NexStarDummyState()
        self.log = logger or LOGGER
        self._pending = bytearray()
        self._handlers: dict[NexStarCommand, Callable[[bytes], bytes]] = {
            NexStarCommand.ECHO: self._echo,
            NexStarCommand.GET_TIME: lambda _: self.state.time.to_payload() + NexStarConstants.ACK,
            NexStarCommand.SET_TIME: self._set_time,
            NexStarCommand.GET_LOCATION: lambda _: self.state.location.to_payload() + NexStarConstants.ACK,
            NexStarCommand.SET_LOCATION: self._set_location,
            NexStarCommand.GET_RA_DEC: lambda _: self._position(self.state.ra, self.state.dec, NexStarPrecision.LOW),
            NexStarCommand.GET_PRECISE_RA_DEC: lambda _: self._position(
                self.state.ra, self.state.dec, NexStarPrecision.HIGH
            ),
            NexStarCommand.GET_AZM_ALT: lambda _: self._position(self.state.azm, self.state.alt, NexStarPrecision.LOW),
            NexStarCommand.GET_PRECISE_AZM_ALT: lambda _: self._position(
                self.state.azm, self.state.alt, NexStarPrecision.HIGH
            ),
            NexStarCommand.GOTO_RA_DEC: lambda p: self._move("ra", "dec", p, NexStarPrecision.LOW),
            NexStarCommand.GOTO_PRECISE_RA_DEC: lambda p: self._move("ra", "dec", p, NexStarPrecision.HIGH),
            NexStarCommand.GOTO_AZM_ALT: lambda p: self._move("azm", "alt", p, NexStarPrecision.LOW),
            NexStarCommand.GOTO_PRECISE_AZM_ALT: lambda p: self._move("azm", "alt", p, NexStarPrecision.HIGH),
            NexStarCommand.SYNC: lambda p: self._move("ra", "dec", p, NexStarPrecision.LOW),
            NexStarCommand.PRECISE_SYNC: lambda p: self._move("ra", "dec", p, NexStarPrecision.HIGH),
            NexStarCommand.GET_TRACKING: lambda _: bytes((int(self.state.tracking),)) + NexStarConstants.ACK,
            NexStarCommand.SET_TRACKING: self._set_tracking,
            NexStarCommand.CANCEL_GOTO: self._cancel_goto,
            NexStarCommand.GET_VERSION: lambda _: bytes(self.state.version) + NexStarConstants.ACK,
            NexStarCommand.GET_MODEL: lambda _: bytes((self.state.model,)) + NexStarConstants.ACK,
            NexStarCommand.IS_GOTO_IN_PROGRESS: lambda _: (b"1" if self.state.goto_in_progress else b"0")
            + NexStarConstants.ACK,
            NexStarCommand.IS_ALIGNMENT_COMPLETE: lambda _: bytes((int(self.state.aligned),)) + NexStarConstants.ACK,
            NexStarCommand.PASS_THROUGH: self._pass_through,
        }

    def __repr__(self) -> str:
        return "NexStarDummyHandControl()"

    def write(self, data: bytes) -> int:
        self.state.frames.append(bytes(data))
        reply = self.handle_frame(bytes(data))
        if reply and self.state.nack:
            reply = reply[:-1] + NexStarDummyConstants.NACK
        if reply and self.state.short_reply:
            reply = reply[:-1]
        self.log.debug("dummy rx=%r tx=%r", data, reply)
        self._pending += reply
        return len(data)

    def read(self, count: int) -> bytes:
        data = bytes(self._pending[:count])
        del self._pending[:count]
        if len(data) != count:
            raise NexStarTransportReadShort(count, data)
        return data

    def close(self) -> None:
        self._pending.clear()

    def handle_frame(self, frame: bytes) -> bytes:
        if not frame:
            return b""
        try:
            command = NexStarCommand(chr(frame[0]))
        except ValueError:
            self.log.debug("dummy ignoring unknown command %r", frame)
            return b""
        return self._handlers[command](frame[1:])

    def _echo(self, payload: bytes) -> bytes:
        return payload[:1] + NexStarConstants.ACK

    def _set_time(self, payload: bytes) -> bytes:
        self.state.time = NexStarTime.from_reply(payload + NexStarConstants.ACK)
        return NexStarConstants.ACK

    def _set_location(self, payload: bytes) -> bytes:
        self.state.location = NexStarLocation.from_reply(payload + NexStarConstants.ACK)
        return NexStarConstants.ACK

    def _position(self, first: int, second: int, precision: NexStarPrecision) -> bytes:
        if precision is NexStarPrecision.LOW:
            first >>= NexStarDummyConstants.HIGH_TO_LOW_SHIFT
            second >>= NexStarDummyConstants.HIGH_TO_LOW_SHIFT
        digits = precision.hex_digits
        text = f"{first:0{digits}X}{NexStarConstants.FIELD_SEP}{second:0{digits}X}{NexStarConstants.ACK_CHAR}"
        return text.encode(NexStarConstants.ENCODING)

    def _move(self, first_attr: str, second_attr: str, payload: bytes, precision: NexStarPrecision) -> bytes:
        first_text, second_text = payload.decode(NexStarConstants.ENCODING).split(NexStarConstants.FIELD_SEP)
        first, second = int(first_text, 16), int(second_text, 16)
        if precision is NexStarPrecision.LOW:
            first <<= NexStarDummyConstants.HIGH_TO_LOW_SHIFT
            second <<= NexStarDummyConstants.HIGH_TO_LOW_SHIFT
        setattr(self.state, first_attr, first)
        setattr(self.state, second_attr, second)
        self.state.goto_in_progress = False
        return NexStarConstants.ACK

    def _set_tracking(self, payload: bytes) -> bytes:
        self.state.tracking = NexStarTrackingMode(payload[0])
        return NexStarConstants.ACK

    def _cancel_goto(self, _: bytes) -> bytes:
        self.state.goto_in_progress = False
        return NexStarConstants.ACK

    def _pass_through(self, payload: bytes) -> bytes:
        channel, command = payload[1], payload[2]
        if command == NexStarConstants.DEVICE_VERSION_CMD:
            device = NexStarDevice(channel - NexStarConstants.DEVICE_CHANNEL_BASE)
            version = self.state.device_versions.get(device)
            if version is None:
                return NexStarDummyConstants.NOT_CONNECTED_REPLY
            return bytes(version) + NexStarConstants.ACK
        axis = channel - NexStarConstants.SLEW_CHANNEL
        negative = command & 1
        if payload[0] & 1:
            rate = ((payload[3] << 8) | payload[4]) // NexStarConstants.SLEW_VARIABLE_SCALE
        else:
            rate = payload[3]
        self.state.slew_rates[axis] = -rate if negative else rate
        return NexStarConstants.ACK
