from __future__ import annotations

from .angles import NexStarAngle, NexStarAnglePair, parse_angle, parse_angle_pair
from .client import NexStarHandControl
from .codec import NexStarPosition, NexStarWireField, decode_position, encode_position, format_sexagesimal
from .protocol import (
    NexStarAngleUnit,
    NexStarCommand,
    NexStarError,
    NexStarPrecision,
    NexStarTrackingMode,
)

__all__ = [
    "NexStarAngle",
    "NexStarAnglePair",
    "NexStarAngleUnit",
    "NexStarCommand",
    "NexStarError",
    "NexStarHandControl",
    "NexStarPosition",
    "NexStarPrecision",
    "NexStarTrackingMode",
    "NexStarWireField",
    "decode_position",
    "encode_position",
    "format_sexagesimal",
    "parse_angle",
    "parse_angle_pair",
]
