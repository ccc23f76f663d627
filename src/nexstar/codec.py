from __future__ import annotations

import dataclasses
import logging
import math
from typing import Tuple

from .angles import NexStarAnglePair
from .protocol import (
    NexStarAngleUnit,
    NexStarCommand,
    NexStarConstants,
    NexStarEncodingOverflow,
    NexStarPrecision,
    NexStarProtocolNack,
    NexStarUnknownEnumValue,
)

LOGGER = logging.getLogger("nexstar.codec")

# command -> (field width, unit of the first component); the second is always degrees
POSITION_VARIANTS: dict[NexStarCommand, Tuple[NexStarPrecision, NexStarAngleUnit]] = {
    NexStarCommand.GET_RA_DEC: (NexStarPrecision.LOW, NexStarAngleUnit.HOURS),
    NexStarCommand.GET_PRECISE_RA_DEC: (NexStarPrecision.HIGH, NexStarAngleUnit.HOURS),
    NexStarCommand.GET_AZM_ALT: (NexStarPrecision.LOW, NexStarAngleUnit.DEGREES),
    NexStarCommand.GET_PRECISE_AZM_ALT: (NexStarPrecision.HIGH, NexStarAngleUnit.DEGREES),
}


@dataclasses.dataclass(frozen=True)
class NexStarWireField:
    value: int
    precision: NexStarPrecision

    def __post_init__(self) -> None:
        if self.value < 0 or self.value > self.precision.mask:
            raise ValueError(f"wire field out of range for {self.precision.value}-bit: {self.value!r}")

    @classmethod
    def from_turns(cls, turns: float, precision: NexStarPrecision) -> "NexStarWireField":
        """Scale a turn fraction to the field width, wrapping anything outside it.

        Negative turns within one revolution are the normal two's-complement form
        (e.g. a southern declination). Magnitudes of a full turn or more are logged
        as an overflow but still sent, masked to the field width.
        """
        raw = int(turns * precision.scale)
        if abs(raw) >= precision.scale:
            LOGGER.warning("%s: %s", NexStarEncodingOverflow.code, NexStarEncodingOverflow(turns, precision, raw))
        elif raw < 0:
            LOGGER.debug("negative turns=%r wrapped to two's complement", turns)
        return cls(raw & precision.mask, precision)

    @classmethod
    def from_ascii(cls, text: str | bytes, precision: NexStarPrecision) -> "NexStarWireField":
        if isinstance(text, bytes):
            text = text.decode(NexStarConstants.ENCODING, errors="replace")
        if len(text) != precision.hex_digits:
            raise ValueError(f"expected {precision.hex_digits} hex digits, got {text!r}")
        if not all(ch in "0123456789abcdefABCDEF" for ch in text):
            raise ValueError(f"invalid hex digit in {text!r}")
        return cls(int(text, 16), precision)

    @property
    def turns(self) -> float:
        return self.value / self.precision.scale

    def to_ascii(self) -> str:
        return f"{self.value:0{self.precision.hex_digits}X}"


def encode_position(
    pair: NexStarAnglePair, precision: NexStarPrecision
) -> Tuple[NexStarWireField, NexStarWireField]:
    return (
        NexStarWireField.from_turns(pair.first.turns, precision),
        NexStarWireField.from_turns(pair.second.turns, precision),
    )


def format_sexagesimal(value: float, unit: NexStarAngleUnit) -> str:
    """Render degrees or hours as ``+DDDd MMm SS.fffs``; milliseconds are truncated."""
    ticks = unit.ticks
    sign = "-" if value < 0.0 else "+"
    value = abs(value)
    whole = math.floor(value)
    value = (value - whole) * NexStarConstants.MINUTES_PER_UNIT
    minutes = math.floor(value)
    value = (value - minutes) * NexStarConstants.SECONDS_PER_MINUTE
    seconds = math.floor(value)
    value = (value - seconds) * NexStarConstants.MILLIS_PER_SECOND
    millis = math.floor(value)
    return f"{sign}{whole:03d}{ticks[0]} {minutes:02d}{ticks[1]} {seconds:02d}.{millis:03d}{ticks[2]}"


@dataclasses.dataclass(frozen=True)
class NexStarPosition:
    command: NexStarCommand
    first_turns: float
    second_degrees: float
    unit: NexStarAngleUnit

    @property
    def first(self) -> float:
        """First component in its native unit (hours for RA, degrees for azimuth)."""
        return self.first_turns * self.unit.per_turn

    @property
    def second_turns(self) -> float:
        return self.second_degrees / NexStarConstants.DEGREES_PER_TURN

    def to_string(self) -> str:
        return (
            f"{format_sexagesimal(self.first, self.unit)} "
            f"{format_sexagesimal(self.second_degrees, NexStarAngleUnit.DEGREES)}"
        )


def decode_position(reply: bytes, command: NexStarCommand) -> NexStarPosition:
    """Decode a get-position reply (``XXXX,YYYY#`` or ``XXXXXXXX,YYYYYYYY#``).

    Fields are taken at fixed offsets; the separator byte is not inspected. Only the
    second component is folded: above 180 degrees it becomes negative.
    """
    try:
        precision, unit = POSITION_VARIANTS[command]
    except KeyError:
        raise NexStarUnknownEnumValue("position command", str(command)) from None
    digits = precision.hex_digits
    try:
        first = NexStarWireField.from_ascii(reply[:digits], precision)
        second = NexStarWireField.from_ascii(reply[digits + 1 : 2 * digits + 1], precision)
    except ValueError as exc:
        raise NexStarProtocolNack(command, reply) from exc
    second_deg = second.turns * NexStarConstants.DEGREES_PER_TURN
    if second_deg > NexStarConstants.HALF_TURN_DEG:
        second_deg -= NexStarConstants.DEGREES_PER_TURN
    return NexStarPosition(
        command=command,
        first_turns=first.turns,
        second_degrees=second_deg,
        unit=unit,
    )
