from __future__ import annotations

import dataclasses
import datetime as dt
import time
from typing import Optional

from .protocol import (
    MODEL_NAMES,
    NexStarConstants,
    NexStarDevice,
    NexStarTrackingMode,
)


def _signed_byte(value: int) -> int:
    value &= NexStarConstants.BYTE_MASK
    return value - 0x100 if value & 0x80 else value


def _pack(values: tuple[int, ...]) -> bytes:
    return bytes(v & NexStarConstants.BYTE_MASK for v in values)


def _valid(reply: bytes, index: int) -> bool:
    return reply[index : index + 1] == NexStarConstants.ACK


@dataclasses.dataclass(frozen=True)
class NexStarTime:
    hour: int
    minute: int
    second: int
    month: int
    day: int
    year: int
    gmt_offset: int
    dst: int
    valid: bool = True

    @classmethod
    def from_reply(cls, reply: bytes) -> "NexStarTime":
        return cls(
            hour=reply[0],
            minute=reply[1],
            second=reply[2],
            month=reply[3],
            day=reply[4],
            year=reply[5],
            gmt_offset=_signed_byte(reply[6]),
            dst=reply[7],
            valid=_valid(reply, 8),
        )

    @classmethod
    def from_struct_time(cls, tm: time.struct_time, timezone_s: int) -> "NexStarTime":
        """Build from a local wall-clock reading; ``timezone_s`` is seconds west of UTC."""
        return cls(
            hour=tm.tm_hour,
            minute=tm.tm_min,
            second=tm.tm_sec,
            month=tm.tm_mon,
            day=tm.tm_mday,
            year=tm.tm_year % 100,
            gmt_offset=-int(timezone_s / 3600),
            dst=max(tm.tm_isdst, 0),
        )

    def to_payload(self) -> bytes:
        return _pack(
            (self.hour, self.minute, self.second, self.month, self.day, self.year, self.gmt_offset, self.dst)
        )

    def to_datetime(self) -> dt.datetime:
        return dt.datetime(2000 + self.year, self.month, self.day, self.hour, self.minute, self.second)

    def to_string(self) -> str:
        return (
            f"Time {'valid' if self.valid else 'invalid'} "
            f"{self.hour:02d}h {self.minute:02d}m {self.second:02d}s "
            f"{self.month:02d}-{self.day:02d}-{self.year:02d} {self.gmt_offset:02d} "
            f"{'Standard' if self.dst == 0 else 'Summer'} time"
        )


@dataclasses.dataclass(frozen=True)
class NexStarLocation:
    lat_deg: int
    lat_min: int
    lat_sec: int
    south: bool
    lon_deg: int
    lon_min: int
    lon_sec: int
    west: bool
    valid: bool = True

    @classmethod
    def from_reply(cls, reply: bytes) -> "NexStarLocation":
        return cls(
            lat_deg=reply[0],
            lat_min=reply[1],
            lat_sec=reply[2],
            south=reply[3] != 0,
            lon_deg=reply[4],
            lon_min=reply[5],
            lon_sec=reply[6],
            west=reply[7] != 0,
            valid=_valid(reply, 8),
        )

    def to_payload(self) -> bytes:
        return _pack(
            (
                self.lat_deg,
                self.lat_min,
                self.lat_sec,
                int(self.south),
                self.lon_deg,
                self.lon_min,
                self.lon_sec,
                int(self.west),
            )
        )

    def to_string(self) -> str:
        return (
            f"Location {'valid' if self.valid else 'invalid'} "
            f"{self.lat_deg:02d}d {self.lat_min:02d}m {self.lat_sec:02d}s {'S' if self.south else 'N'} "
            f"{self.lon_deg:03d}d {self.lon_min:02d}m {self.lon_sec:02d}s {'W' if self.west else 'E'}"
        )


@dataclasses.dataclass(frozen=True)
class NexStarVersion:
    major: int
    minor: int
    valid: bool

    @classmethod
    def from_reply(cls, reply: bytes) -> "NexStarVersion":
        return cls(major=reply[0], minor=reply[1], valid=_valid(reply, 2))

    def to_string(self) -> str:
        if not self.valid:
            return "Hand Control Version is fail."
        return f"Hand Control Version is {self.major}.{self.minor}"


@dataclasses.dataclass(frozen=True)
class NexStarDeviceVersion:
    device: NexStarDevice
    major: int
    minor: int
    connected: bool

    @classmethod
    def from_reply(cls, device: NexStarDevice, reply: bytes) -> "NexStarDeviceVersion":
        return cls(device=device, major=reply[0], minor=reply[1], connected=_valid(reply, 2))

    def to_string(self) -> str:
        version = f"{self.major}.{self.minor}" if self.connected else "not connected"
        return f"Version of '{self.device.label}' is {version}"


@dataclasses.dataclass(frozen=True)
class NexStarModel:
    index: int
    valid: bool

    @classmethod
    def from_reply(cls, reply: bytes) -> "NexStarModel":
        return cls(index=reply[0], valid=_valid(reply, 1))

    @property
    def name(self) -> str:
        # index 0 is a table entry but is still reported as unknown
        if self.index <= 0 or self.index >= len(MODEL_NAMES):
            return "Unknown Model"
        return MODEL_NAMES[self.index]

    def to_string(self) -> str:
        return f"Telescope Model Celestron {self.name}"


@dataclasses.dataclass(frozen=True)
class NexStarTracking:
    raw: int

    @property
    def mode(self) -> Optional[NexStarTrackingMode]:
        try:
            return NexStarTrackingMode(_signed_byte(self.raw))
        except ValueError:
            return None

    def to_string(self) -> str:
        mode = self.mode
        return f"Tracking mode: {mode.label if mode is not None else 'Unknown'}"


@dataclasses.dataclass(frozen=True)
class NexStarSlew:
    fixed: bool
    axis: int
    rate: int

    def to_string(self) -> str:
        axis = "azimuth/RA" if self.axis == 0 else "altitude/declination"
        return f"Slew {'fixed' if self.fixed else 'variable'} {axis} {self.rate} ok"


@dataclasses.dataclass(frozen=True)
class NexStarClockCheck:
    host_before: float
    host_after: float
    hand_control: NexStarTime

    @property
    def round_trip_s(self) -> float:
        return self.host_after - self.host_before

    @property
    def host_midpoint(self) -> dt.datetime:
        return dt.datetime.fromtimestamp((self.host_before + self.host_after) / 2.0)

    @property
    def offset_s(self) -> float:
        """Hand-control clock minus host local clock, in seconds."""
        return (self.hand_control.to_datetime() - self.host_midpoint).total_seconds()

    def to_string(self) -> str:
        return (
            f"Clock offset {self.offset_s:+.3f}s "
            f"(hand control {self.hand_control.to_datetime():%H:%M:%S}, "
            f"host {self.host_midpoint:%H:%M:%S.%f}, round trip {self.round_trip_s:.3f}s)"
        )
