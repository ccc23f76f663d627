from __future__ import annotations

from enum import IntEnum, StrEnum
from typing import Optional


class NexStarConstants:
    ENCODING = "ascii"
    ACK = b"#"
    ACK_CHAR = "#"
    FIELD_SEP = ","
    DEFAULT_BAUD = 9600
    DEFAULT_TIMEOUT_S = 2.0
    VERSION = (0, 95, 2)
    LOW_SCALE = 1 << 16
    HIGH_SCALE = 1 << 32
    LOW_MASK = LOW_SCALE - 1
    HIGH_MASK = HIGH_SCALE - 1
    LOW_HEX_DIGITS = 4
    HIGH_HEX_DIGITS = 8
    DEGREES_PER_TURN = 360.0
    HOURS_PER_TURN = 24.0
    HALF_TURN_DEG = 180.0
    MINUTES_PER_UNIT = 60
    SECONDS_PER_MINUTE = 60
    MILLIS_PER_SECOND = 1000
    BYTE_MASK = 0xFF
    SET_FRAME_PAYLOAD = 8
    PASS_THROUGH_LEN = 8
    SLEW_FIXED_MAX = 9
    SLEW_FIXED_OFFSET = 30
    SLEW_RATE_CLASS = 6
    SLEW_CHANNEL = 16
    SLEW_MSG_LEN = 2
    SLEW_VARIABLE_SCALE = 4
    DEVICE_CHANNEL_BASE = 16
    DEVICE_VERSION_CMD = 254
    DEVICE_MSG_LEN = 1
    DEVICE_REPLY_LEN = 2
    GOTO_IN_PROGRESS = ord("1")
    ALIGNMENT_COMPLETE = 1
    LOCALTIME = "localtime"


class NexStarCommand(StrEnum):
    ECHO = "K"
    GET_TIME = "h"
    SET_TIME = "H"
    GET_LOCATION = "w"
    SET_LOCATION = "W"
    GET_RA_DEC = "E"
    GET_PRECISE_RA_DEC = "e"
    GET_AZM_ALT = "Z"
    GET_PRECISE_AZM_ALT = "z"
    GOTO_RA_DEC = "R"
    GOTO_PRECISE_RA_DEC = "r"
    GOTO_AZM_ALT = "B"
    GOTO_PRECISE_AZM_ALT = "b"
    SYNC = "S"
    PRECISE_SYNC = "s"
    GET_TRACKING = "t"
    SET_TRACKING = "T"
    CANCEL_GOTO = "M"
    GET_VERSION = "V"
    GET_MODEL = "m"
    IS_GOTO_IN_PROGRESS = "L"
    IS_ALIGNMENT_COMPLETE = "J"
    PASS_THROUGH = "P"


# Inbound byte count per command kind; a reply of any other size is a protocol violation.
REPLY_LENGTHS: dict[NexStarCommand, int] = {
    NexStarCommand.ECHO: 2,
    NexStarCommand.GET_TIME: 9,
    NexStarCommand.SET_TIME: 1,
    NexStarCommand.GET_LOCATION: 9,
    NexStarCommand.SET_LOCATION: 1,
    NexStarCommand.GET_RA_DEC: 10,
    NexStarCommand.GET_PRECISE_RA_DEC: 18,
    NexStarCommand.GET_AZM_ALT: 10,
    NexStarCommand.GET_PRECISE_AZM_ALT: 18,
    NexStarCommand.GOTO_RA_DEC: 1,
    NexStarCommand.GOTO_PRECISE_RA_DEC: 1,
    NexStarCommand.GOTO_AZM_ALT: 1,
    NexStarCommand.GOTO_PRECISE_AZM_ALT: 1,
    NexStarCommand.SYNC: 1,
    NexStarCommand.PRECISE_SYNC: 1,
    NexStarCommand.GET_TRACKING: 2,
    NexStarCommand.SET_TRACKING: 1,
    NexStarCommand.CANCEL_GOTO: 1,
    NexStarCommand.GET_VERSION: 3,
    NexStarCommand.GET_MODEL: 2,
    NexStarCommand.IS_GOTO_IN_PROGRESS: 2,
    NexStarCommand.IS_ALIGNMENT_COMPLETE: 2,
}


class NexStarAngleUnit(StrEnum):
    DEGREES = "d"
    HOURS = "h"

    @property
    def per_turn(self) -> float:
        if self is NexStarAngleUnit.HOURS:
            return NexStarConstants.HOURS_PER_TURN
        return NexStarConstants.DEGREES_PER_TURN

    @property
    def ticks(self) -> str:
        return "hms" if self is NexStarAngleUnit.HOURS else "dms"


class NexStarPrecision(IntEnum):
    LOW = 16
    HIGH = 32

    @property
    def scale(self) -> int:
        return NexStarConstants.HIGH_SCALE if self is NexStarPrecision.HIGH else NexStarConstants.LOW_SCALE

    @property
    def mask(self) -> int:
        return NexStarConstants.HIGH_MASK if self is NexStarPrecision.HIGH else NexStarConstants.LOW_MASK

    @property
    def hex_digits(self) -> int:
        if self is NexStarPrecision.HIGH:
            return NexStarConstants.HIGH_HEX_DIGITS
        return NexStarConstants.LOW_HEX_DIGITS


class NexStarGrammarState(IntEnum):
    SIGN = 0
    WHOLE = 1
    UNIT = 2
    MINUTES_SPACE = 3
    MINUTES = 4
    MINUTE_MARK = 5
    SECONDS_SPACE = 6
    SECONDS = 7
    SECOND_MARK = 8
    FRACTION = 9


class NexStarTrackingMode(IntEnum):
    OFF = 0
    ALT_AZIMUTH = 1
    EQ_NORTH = 2
    EQ_SOUTH = 3

    @property
    def label(self) -> str:
        return TRACKING_MODE_LABELS[self]


TRACKING_MODE_LABELS: dict[NexStarTrackingMode, str] = {
    NexStarTrackingMode.OFF: "Off",
    NexStarTrackingMode.ALT_AZIMUTH: "Alt-Azimuth",
    NexStarTrackingMode.EQ_NORTH: "EQNorth",
    NexStarTrackingMode.EQ_SOUTH: "EQSouth",
}


class NexStarDevice(IntEnum):
    AZM_RA_MOTOR = 0
    ALT_DEC_MOTOR = 1
    GPS = 2
    RTC = 3

    @property
    def label(self) -> str:
        return DEVICE_LABELS[self]

    @property
    def channel(self) -> int:
        return self.value + NexStarConstants.DEVICE_CHANNEL_BASE


DEVICE_LABELS: dict[NexStarDevice, str] = {
    NexStarDevice.AZM_RA_MOTOR: "AZM/RA Motor",
    NexStarDevice.ALT_DEC_MOTOR: "ALT/DEC Motor",
    NexStarDevice.GPS: "GPS",
    NexStarDevice.RTC: "RTC",
}


class NexStarSlewAxis(IntEnum):
    AZM_RA = 0
    ALT_DEC = 1


SLEW_AXIS_NAMES: dict[str, NexStarSlewAxis] = {
    "azimuth": NexStarSlewAxis.AZM_RA,
    "RA": NexStarSlewAxis.AZM_RA,
    "altitude": NexStarSlewAxis.ALT_DEC,
    "declination": NexStarSlewAxis.ALT_DEC,
}

MODEL_NAMES: tuple[str, ...] = (
    "None (0)",
    "GPS Series",
    "None (2)",
    "i-Series",
    "i-Series SE",
    "CGE",
    "Advanced GT",
    "SLT",
    "None (8)",
    "CPC",
    "GT",
    "NexStar 4/5 SE",
    "NexStar 6/8 SE",
)


class NexStarErrorCode(StrEnum):
    GRAMMAR = "grammar"
    ENCODING_OVERFLOW = "encoding-overflow"
    TRANSPORT_WRITE_SHORT = "transport-write-short"
    TRANSPORT_READ_SHORT = "transport-read-short"
    PROTOCOL_NACK = "protocol-nack"
    UNKNOWN_ENUM_VALUE = "unknown-enum-value"
    ARGUMENT = "argument"
    NOT_CONNECTED = "not-connected"
    CONNECTION = "connection"


class NexStarError(Exception):
    code: NexStarErrorCode
    fatal = False

    @property
    def message(self) -> str:
        return str(self)


class NexStarGrammarError(NexStarError):
    code = NexStarErrorCode.GRAMMAR

    def __init__(self, state: NexStarGrammarState, position: int, text: str) -> None:
        self.state = state
        self.position = position
        self.text = text
        super().__init__(f"bad angle {text!r}: stage {int(state)} ({state.name}) failed at offset {position}")


class NexStarEncodingOverflow(NexStarError):
    code = NexStarErrorCode.ENCODING_OVERFLOW

    def __init__(self, turns: float, precision: NexStarPrecision, raw: int) -> None:
        self.turns = turns
        self.precision = precision
        self.raw = raw
        super().__init__(
            f"{turns!r} turns wraps to 0x{raw & precision.mask:0{precision.hex_digits}X} at {precision.value}-bit"
        )


class NexStarTransportWriteShort(NexStarError):
    code = NexStarErrorCode.TRANSPORT_WRITE_SHORT
    fatal = True

    def __init__(self, expected: int, written: int) -> None:
        self.expected = expected
        self.written = written
        super().__init__(f"short write: {written} of {expected} bytes")


class NexStarTransportReadShort(NexStarError):
    code = NexStarErrorCode.TRANSPORT_READ_SHORT
    fatal = True

    def __init__(self, expected: int, data: bytes) -> None:
        self.expected = expected
        self.data = data
        super().__init__(f"short read: {len(data)} of {expected} bytes, got={data!r}")


class NexStarProtocolNack(NexStarError):
    code = NexStarErrorCode.PROTOCOL_NACK
    fatal = True

    def __init__(self, command: NexStarCommand, reply: bytes) -> None:
        self.command = command
        self.reply = reply
        super().__init__(f"no {NexStarConstants.ACK_CHAR!r} from cmd={command.value!r} reply={reply!r}")


class NexStarUnknownEnumValue(NexStarError):
    code = NexStarErrorCode.UNKNOWN_ENUM_VALUE

    def __init__(self, kind: str, value: str, choices: Optional[list[str]] = None) -> None:
        self.kind = kind
        self.value = value
        self.choices = choices or []
        super().__init__(f"unknown {kind}: {value!r}")


class NexStarArgumentError(NexStarError):
    code = NexStarErrorCode.ARGUMENT


class NexStarNotConnectedError(NexStarError):
    code = NexStarErrorCode.NOT_CONNECTED
    fatal = True


class NexStarConnectionError(NexStarError):
    code = NexStarErrorCode.CONNECTION
    fatal = True
