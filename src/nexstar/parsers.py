from __future__ import annotations

import time
from typing import Optional

from .models import NexStarLocation, NexStarSlew, NexStarTime
from .protocol import (
    DEVICE_LABELS,
    SLEW_AXIS_NAMES,
    TRACKING_MODE_LABELS,
    NexStarArgumentError,
    NexStarConstants,
    NexStarDevice,
    NexStarTrackingMode,
    NexStarUnknownEnumValue,
)

TIME_FIELDS = 8
LOCATION_FIELDS = 6
SLEW_FIELDS = 3
SLEW_KINDS = {"fixed": True, "variable": False}


def _parse_ints(arg: str, count: int, what: str) -> list[int]:
    parts = arg.split()
    if len(parts) != count:
        raise NexStarArgumentError(f"invalid {what}: expected {count} integers, got {arg!r}")
    try:
        return [int(p) for p in parts]
    except ValueError as exc:
        raise NexStarArgumentError(f"invalid {what}: {arg!r}") from exc


def parse_time_arg(
    arg: str,
    now: Optional[time.struct_time] = None,
    timezone_s: Optional[int] = None,
) -> NexStarTime:
    """``localtime`` or ``"hour min sec month day year gmt_offset dst"``; ranges are not checked."""
    if arg == NexStarConstants.LOCALTIME:
        return NexStarTime.from_struct_time(
            now if now is not None else time.localtime(),
            timezone_s if timezone_s is not None else time.timezone,
        )
    hour, minute, second, month, day, year, gmt_offset, dst = _parse_ints(arg, TIME_FIELDS, "time-date format")
    return NexStarTime(
        hour=hour,
        minute=minute,
        second=second,
        month=month,
        day=day,
        year=year,
        gmt_offset=gmt_offset,
        dst=dst,
    )


def parse_location_arg(arg: str) -> NexStarLocation:
    """``"lat_d lat_m lat_s lon_d lon_m lon_s"``; negative degrees mean south / west."""
    lat_d, lat_m, lat_s, lon_d, lon_m, lon_s = _parse_ints(arg, LOCATION_FIELDS, "latitude/longitude entry")
    return NexStarLocation(
        lat_deg=abs(lat_d),
        lat_min=lat_m,
        lat_sec=lat_s,
        south=lat_d < 0,
        lon_deg=abs(lon_d),
        lon_min=lon_m,
        lon_sec=lon_s,
        west=lon_d < 0,
    )


def parse_slew_arg(arg: str) -> NexStarSlew:
    """``"fixed|variable,azimuth|RA|altitude|declination,rate"``."""
    parts = arg.split(",", SLEW_FIELDS - 1)
    if len(parts) != SLEW_FIELDS:
        raise NexStarArgumentError(f"bad slew syntax: {arg!r}")
    kind, axis_name, rate_text = parts
    if kind not in SLEW_KINDS:
        raise NexStarUnknownEnumValue("slew kind", kind, list(SLEW_KINDS))
    if axis_name not in SLEW_AXIS_NAMES:
        raise NexStarUnknownEnumValue("slew axis", axis_name, list(SLEW_AXIS_NAMES))
    try:
        rate = int(rate_text.strip())
    except ValueError as exc:
        raise NexStarArgumentError(f"bad slew rate: {rate_text!r}") from exc
    return NexStarSlew(fixed=SLEW_KINDS[kind], axis=int(SLEW_AXIS_NAMES[axis_name]), rate=rate)


def parse_tracking_mode(name: str) -> NexStarTrackingMode:
    for mode, label in TRACKING_MODE_LABELS.items():
        if label == name:
            return mode
    raise NexStarUnknownEnumValue("tracking mode", name, list(TRACKING_MODE_LABELS.values()))


def parse_device_name(name: str) -> NexStarDevice:
    for device, label in DEVICE_LABELS.items():
        if label == name:
            return device
    raise NexStarUnknownEnumValue("device", name, list(DEVICE_LABELS.values()))
