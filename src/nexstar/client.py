from __future__ import annotations

import logging
import time
from typing import Optional

from .angles import parse_angle_pair
from .codec import NexStarPosition, decode_position
from .commands import (
    NexStarFrame,
    build_device_version,
    build_echo,
    build_get_position,
    build_get_tracking,
    build_goto_position,
    build_query,
    build_set_location,
    build_set_time,
    build_set_tracking,
    build_slew,
    build_sync,
    validate_reply,
)
from .models import (
    NexStarClockCheck,
    NexStarDeviceVersion,
    NexStarLocation,
    NexStarModel,
    NexStarSlew,
    NexStarTime,
    NexStarTracking,
    NexStarVersion,
)
from .parsers import parse_device_name, parse_tracking_mode
from .protocol import (
    NexStarCommand,
    NexStarConstants,
    NexStarProtocolNack,
    NexStarTrackingMode,
    NexStarTransportWriteShort,
)
from .serial_prims import NexStarTransport

LOGGER = logging.getLogger("nexstar")


class NexStarHandControl:
    """Celestron NexStar hand-control protocol wrapper.

    Every method is one blocking request/reply exchange over ``transport``.
    """

    def __init__(self, transport: NexStarTransport, logger: Optional[logging.Logger] = None) -> None:
        LOGGER.info("init transport=%r", transport)
        self.transport = transport
        self.log = logger or logging.getLogger("nexstar.client")

    def close(self) -> None:
        self.transport.close()

    def echo(self, char: str) -> bytes:
        self.log.info("echo char=%r", char)
        return self._transact(build_echo(char))

    def get_time(self) -> NexStarTime:
        return NexStarTime.from_reply(self._transact(build_query(NexStarCommand.GET_TIME)))

    def set_time(self, value: NexStarTime) -> None:
        self.log.info("set_time value=%s", value)
        self._transact(build_set_time(value))

    def get_location(self) -> NexStarLocation:
        return NexStarLocation.from_reply(self._transact(build_query(NexStarCommand.GET_LOCATION)))

    def set_location(self, value: NexStarLocation) -> None:
        self.log.info("set_location value=%s", value)
        self._transact(build_set_location(value))

    def get_position(self, command: NexStarCommand) -> tuple[bytes, NexStarPosition]:
        frame = build_get_position(command)
        reply = self._transact(frame)
        return reply, decode_position(reply, command)

    def goto_position(self, command: NexStarCommand, text: str) -> NexStarFrame:
        """Parse ``text`` as two angles and slew there; returns the frame that was sent."""
        frame = build_goto_position(command, parse_angle_pair(text))
        self.log.info("goto cmd=%s text=%r frame=%r", command, text, frame.raw)
        self._transact(frame)
        return frame

    def sync(self, command: NexStarCommand, text: str) -> NexStarFrame:
        frame = build_sync(command, parse_angle_pair(text))
        self.log.info("sync cmd=%s text=%r frame=%r", command, text, frame.raw)
        self._transact(frame)
        return frame

    def get_tracking(self) -> NexStarTracking:
        return NexStarTracking(self._transact(build_get_tracking())[0])

    def set_tracking(self, mode: str | NexStarTrackingMode) -> NexStarTrackingMode:
        if isinstance(mode, str):
            mode = parse_tracking_mode(mode)
        self.log.info("set_tracking mode=%s", mode.label)
        self._transact(build_set_tracking(mode))
        return mode

    def is_goto_in_progress(self) -> bool:
        reply = self._transact(build_query(NexStarCommand.IS_GOTO_IN_PROGRESS))
        return reply[0] == NexStarConstants.GOTO_IN_PROGRESS

    def is_alignment_complete(self) -> bool:
        # reports a raw 0/1 byte, unlike the ASCII '0'/'1' of goto-in-progress
        reply = self._transact(build_query(NexStarCommand.IS_ALIGNMENT_COMPLETE))
        return reply[0] == NexStarConstants.ALIGNMENT_COMPLETE

    def cancel_goto(self) -> None:
        self.log.info("cancel_goto")
        self._transact(build_query(NexStarCommand.CANCEL_GOTO))

    def get_version(self) -> NexStarVersion:
        return NexStarVersion.from_reply(self._transact(build_query(NexStarCommand.GET_VERSION)))

    def get_device_version(self, name: str) -> NexStarDeviceVersion:
        device = parse_device_name(name)
        return NexStarDeviceVersion.from_reply(device, self._transact(build_device_version(device)))

    def get_model(self) -> NexStarModel:
        return NexStarModel.from_reply(self._transact(build_query(NexStarCommand.GET_MODEL)))

    def slew(self, fixed: bool, axis: int, rate: int) -> NexStarSlew:
        self.log.info("slew fixed=%s axis=%s rate=%s", fixed, axis, rate)
        self._transact(build_slew(fixed, axis, rate))
        return NexStarSlew(fixed=fixed, axis=axis, rate=rate)

    def measure_clock(self) -> NexStarClockCheck:
        """Read the hand-control clock bracketed by two host clock readings."""
        frame = build_query(NexStarCommand.GET_TIME)
        before = time.time()
        reply = self._transact(frame)
        after = time.time()
        hand_control = NexStarTime.from_reply(reply)
        try:
            hand_control.to_datetime()
        except ValueError as exc:
            raise NexStarProtocolNack(NexStarCommand.GET_TIME, reply) from exc
        check = NexStarClockCheck(host_before=before, host_after=after, hand_control=hand_control)
        self.log.info("clock offset=%.3fs round_trip=%.3fs", check.offset_s, check.round_trip_s)
        return check

    def _transact(self, frame: NexStarFrame) -> bytes:
        payload = frame.raw
        self.log.debug("tx cmd=%s raw=%r hex=%s", frame.command, payload, payload.hex())
        written = self.transport.write(payload)
        if written != len(payload):
            raise NexStarTransportWriteShort(len(payload), written)
        reply = self.transport.read(frame.reply_length)
        self.log.debug("rx cmd=%s raw=%r hex=%s", frame.command, reply, reply.hex())
        return validate_reply(frame, reply)
