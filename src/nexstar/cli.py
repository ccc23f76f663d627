"""Command-line front end for a Celestron NexStar hand control.

Options are executed in the order given, e.g.::

    nexstar-ctl --device /dev/ttyUSB0 --gettime --getra --gotora "10h30m0s +45d0m0s"

``--device`` opens the serial port (or ``dummy`` for a simulated hand control) and must
precede any command that talks to the telescope. A transport or protocol failure closes
the port and stops processing with exit status 1; malformed arguments are reported and
skipped.
"""
from __future__ import annotations

import argparse
import dataclasses
import logging
import sys
from typing import Callable, Optional, Sequence, TextIO

from .client import NexStarHandControl
from .config import NexStarConfig
from .dummy import NexStarDummyConstants, NexStarDummyHandControl
from .logging_setup import setup_logging
from .parsers import parse_location_arg, parse_slew_arg, parse_time_arg
from .protocol import NexStarCommand, NexStarConstants, NexStarError, NexStarNotConnectedError
from .serial_prims import NexStarSerialDevice

LOGGER = logging.getLogger("nexstar.cli")


class NexStarCliConstants:
    PROG = "nexstar-ctl"
    EXIT_OK = 0
    EXIT_FATAL = 1
    COPYRIGHT = (
        "Copyright (C) 2015 Francis J. A. Pinteric\n"
        "License GPLv2: GNU GPL version 2 <http://gnu.org/licenses/gpl-2.0.html>.\n"
        "This is free software: you are free to change and redistribute it.\n"
        "There is NO WARRANTY, to the extent permitted by law"
    )


@dataclasses.dataclass
class NexStarSession:
    config: NexStarConfig
    out: TextIO = dataclasses.field(default_factory=lambda: sys.stdout)
    err: TextIO = dataclasses.field(default_factory=lambda: sys.stderr)
    prog: str = NexStarCliConstants.PROG
    hand_control: Optional[NexStarHandControl] = None

    def open(self, port: str) -> str:
        if self.hand_control is not None:
            LOGGER.warning("device already open, ignoring %s", port)
            return f"Already communicating over {self.hand_control.transport!r}"
        if port == NexStarDummyConstants.NAME:
            transport = NexStarDummyHandControl()
        else:
            transport = NexStarSerialDevice(port, baud=self.config.baud, timeout_s=self.config.timeout_s)
        self.hand_control = NexStarHandControl(transport)
        return f"Communicating over port {port}"

    def require(self) -> NexStarHandControl:
        if self.hand_control is None:
            raise NexStarNotConnectedError("no device open; pass --device first")
        return self.hand_control

    def close(self) -> None:
        if self.hand_control is not None:
            self.hand_control.close()
            self.hand_control = None


Handler = Callable[[NexStarSession, Optional[str]], Optional[str]]


def _version(session: NexStarSession, _: Optional[str]) -> str:
    major, minor, rev = NexStarConstants.VERSION
    return f"{session.prog} version {major}.{minor}.{rev}"


def _copyright(session: NexStarSession, _: Optional[str]) -> str:
    return NexStarCliConstants.COPYRIGHT


def _device(session: NexStarSession, arg: Optional[str]) -> str:
    return session.open(arg or "")


def _echo(session: NexStarSession, arg: Optional[str]) -> str:
    reply = session.require().echo(arg or "")
    return f"cmdecho read {reply.decode(NexStarConstants.ENCODING, errors='replace')}"


def _get_location(session: NexStarSession, _: Optional[str]) -> str:
    return session.require().get_location().to_string()


def _set_location(session: NexStarSession, arg: Optional[str]) -> str:
    location = parse_location_arg(arg or "")
    session.require().set_location(location)
    return "set location successfully"


def _get_time(session: NexStarSession, _: Optional[str]) -> str:
    return session.require().get_time().to_string()


def _set_time(session: NexStarSession, arg: Optional[str]) -> str:
    value = parse_time_arg(arg or "")
    session.require().set_time(value)
    return "set time/date successfully"


def _get_position(name: str, command: NexStarCommand) -> Handler:
    def handler(session: NexStarSession, _: Optional[str]) -> str:
        reply, position = session.require().get_position(command)
        return f"{name} returns {reply.decode(NexStarConstants.ENCODING, errors='replace')} {position.to_string()}"

    return handler


def _move(name: str, command: NexStarCommand, sync: bool = False) -> Handler:
    def handler(session: NexStarSession, arg: Optional[str]) -> str:
        hand_control = session.require()
        if sync:
            frame = hand_control.sync(command, arg or "")
        else:
            frame = hand_control.goto_position(command, arg or "")
        sent = frame.raw.decode(NexStarConstants.ENCODING)
        return f"{name} converts `{arg}' to `{sent}' success"

    return handler


def _get_tracking(session: NexStarSession, _: Optional[str]) -> str:
    return session.require().get_tracking().to_string()


def _set_tracking(session: NexStarSession, arg: Optional[str]) -> str:
    mode = session.require().set_tracking(arg or "")
    return f"Tracking mode set to {mode.label}"


def _goto_in_progress(session: NexStarSession, _: Optional[str]) -> str:
    return f"Is Goto In Progress? {'Yes' if session.require().is_goto_in_progress() else 'No'}."


def _alignment_complete(session: NexStarSession, _: Optional[str]) -> str:
    return f"Is Alignment Complete? {'Yes' if session.require().is_alignment_complete() else 'No'}."


def _cancel_goto(session: NexStarSession, _: Optional[str]) -> str:
    session.require().cancel_goto()
    return "cancelgoto ... success"


def _get_version(session: NexStarSession, _: Optional[str]) -> str:
    return session.require().get_version().to_string()


def _device_version(session: NexStarSession, arg: Optional[str]) -> str:
    return session.require().get_device_version(arg or "").to_string()


def _get_model(session: NexStarSession, _: Optional[str]) -> str:
    return session.require().get_model().to_string()


def _slew(session: NexStarSession, arg: Optional[str]) -> str:
    slew = parse_slew_arg(arg or "")
    return session.require().slew(slew.fixed, slew.axis, slew.rate).to_string()


def _clock_check(session: NexStarSession, _: Optional[str]) -> str:
    return session.require().measure_clock().to_string()


# option name -> (takes an argument, handler, help)
VERBS: dict[str, tuple[bool, Handler, str]] = {
    "version": (False, _version, "print program version"),
    "copyright": (False, _copyright, "print copyright and licence"),
    "device": (True, _device, "open serial device (or 'dummy')"),
    "echo": (True, _echo, "echo one character through the hand control"),
    "getlocation": (False, _get_location, "read site location"),
    "setlocation": (True, _set_location, "'lat_d lat_m lat_s lon_d lon_m lon_s'; negative = S/W"),
    "gettime": (False, _get_time, "read hand-control time"),
    "settime": (True, _set_time, "'localtime' or 'hour min sec month day year gmt_offset dst'"),
    "getra": (False, _get_position("getra", NexStarCommand.GET_RA_DEC), "read RA/DEC"),
    "precise-getra": (
        False,
        _get_position("precise-getra", NexStarCommand.GET_PRECISE_RA_DEC),
        "read RA/DEC (32-bit)",
    ),
    "getazalt": (False, _get_position("getazalt", NexStarCommand.GET_AZM_ALT), "read AZM/ALT"),
    "precise-getazalt": (
        False,
        _get_position("precise-getazalt", NexStarCommand.GET_PRECISE_AZM_ALT),
        "read AZM/ALT (32-bit)",
    ),
    "gotora": (True, _move("gotora", NexStarCommand.GOTO_RA_DEC), "goto 'NNhNNmNNs [+-]NNdNNmNNs'"),
    "precise-gotora": (
        True,
        _move("precise-gotora", NexStarCommand.GOTO_PRECISE_RA_DEC),
        "goto RA/DEC (32-bit)",
    ),
    "gotoazalt": (True, _move("gotoazalt", NexStarCommand.GOTO_AZM_ALT), "goto 'NNNdNNmNNs [+-]NNdNNmNNs'"),
    "precise-gotoazalt": (
        True,
        _move("precise-gotoazalt", NexStarCommand.GOTO_PRECISE_AZM_ALT),
        "goto AZM/ALT (32-bit)",
    ),
    "gettracking": (False, _get_tracking, "read tracking mode"),
    "settracking": (True, _set_tracking, "Off, Alt-Azimuth, EQNorth or EQSouth"),
    "isgotoinprogress": (False, _goto_in_progress, "ask whether a goto is running"),
    "isalignmentcomplete": (False, _alignment_complete, "ask whether alignment is complete"),
    "sync": (True, _move("sync", NexStarCommand.SYNC, sync=True), "sync to RA/DEC"),
    "precise-sync": (True, _move("precise-sync", NexStarCommand.PRECISE_SYNC, sync=True), "sync (32-bit)"),
    "cancelgoto": (False, _cancel_goto, "cancel a running goto"),
    "getversions": (False, _get_version, "read hand-control version"),
    "deviceversion": (True, _device_version, "'AZM/RA Motor', 'ALT/DEC Motor', 'GPS' or 'RTC'"),
    "getmodel": (False, _get_model, "read telescope model"),
    "slew": (True, _slew, "'fixed|variable,azimuth|RA|altitude|declination,rate'"),
    "clockcheck": (False, _clock_check, "compare hand-control clock with host clock"),
}


class NexStarVerbAction(argparse.Action):
    """Collects ``(verb, argument)`` pairs in command-line order."""

    def __call__(self, parser, namespace, values, option_string=None):
        verbs = list(getattr(namespace, self.dest, None) or [])
        verbs.append((self.const, values))
        setattr(namespace, self.dest, verbs)


def build_parser(prog: str = NexStarCliConstants.PROG) -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog=prog, description="Celestron NexStar hand control client")
    try:
        env = NexStarConfig.from_env()
    except ValueError as exc:
        ap.error(f"bad environment setting: {exc}")
    ap.add_argument("--baud", type=int, default=env.baud, help="serial baud rate (default %(default)s)")
    ap.add_argument(
        "--timeout",
        type=NexStarConfig.parse_timeout,
        default=env.timeout_s,
        help="serial read timeout in seconds, 0 blocks (default %(default)s)",
    )
    ap.add_argument("--log-level", default=env.log_level)
    for name, (takes_arg, _, help_text) in VERBS.items():
        ap.add_argument(
            f"--{name}",
            dest="verbs",
            action=NexStarVerbAction,
            const=name,
            default=[],
            nargs=None if takes_arg else 0,
            metavar="PARAM" if takes_arg else None,
            help=help_text,
        )
    return ap


def run(verbs: Sequence[tuple[str, object]], session: NexStarSession) -> int:
    try:
        for name, arg in verbs:
            handler = VERBS[name][1]
            try:
                line = handler(session, arg if isinstance(arg, str) else None)
            except NexStarError as exc:
                print(f"{name}: [{exc.code}] {exc}", file=session.err)
                LOGGER.debug("%s failed", name, exc_info=True)
                if exc.fatal:
                    return NexStarCliConstants.EXIT_FATAL
                continue
            if line:
                print(line, file=session.out)
    finally:
        session.close()
    return NexStarCliConstants.EXIT_OK


def main(argv: Optional[Sequence[str]] = None) -> int:
    ap = build_parser()
    args = ap.parse_args(argv)
    try:
        config = NexStarConfig(baud=args.baud, timeout_s=args.timeout, log_level=args.log_level)
    except ValueError as exc:
        ap.error(str(exc))
    setup_logging(config.log_level)
    return run(args.verbs, NexStarSession(config=config))
