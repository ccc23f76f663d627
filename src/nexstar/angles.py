"""Sexagesimal angle text parser.

Accepts ``[+|-]N(d|h)[ ]Nm[ ]N[.F]s`` (unit letters in any case) and turns it into a
signed fraction of a full turn. ``d`` means degrees (360 per turn), ``h`` means hours
(24 per turn). The minutes field is not range checked: ``10d75m0s`` is accepted and
scaled arithmetically, so it equals ``11d15m0s``.

The scanner is a finite-state machine with one state per grammar stage. A failure
raises :class:`NexStarGrammarError` carrying the stage that rejected the input and the
offset of the offending character (or the text length when the input ran out).
"""
from __future__ import annotations

import dataclasses
from typing import Tuple

from .protocol import (
    NexStarAngleUnit,
    NexStarConstants,
    NexStarGrammarError,
    NexStarGrammarState,
)

_SIGNS = {"+": 1, "-": -1}
_SECOND_MARKS = "sS"
_MINUTE_MARKS = "mM"
_DECIMAL_POINT = "."
_ASCII_SPACES = " \t\n\r\v\f"


@dataclasses.dataclass(frozen=True)
class NexStarAngle:
    sign: int
    whole: int
    minutes: int
    seconds: float
    unit: NexStarAngleUnit

    @property
    def turns(self) -> float:
        value = self.whole + (self.minutes + self.seconds / NexStarConstants.SECONDS_PER_MINUTE) / (
            NexStarConstants.MINUTES_PER_UNIT
        )
        return self.sign * (value / self.unit.per_turn)

    @property
    def value(self) -> float:
        """Signed angle in the unit it was written in (degrees or hours)."""
        return self.turns * self.unit.per_turn

    def __neg__(self) -> "NexStarAngle":
        return dataclasses.replace(self, sign=-self.sign)


@dataclasses.dataclass(frozen=True)
class NexStarAnglePair:
    first: NexStarAngle
    second: NexStarAngle

    @property
    def turns(self) -> Tuple[float, float]:
        return self.first.turns, self.second.turns


def _is_digit(ch: str) -> bool:
    return "0" <= ch <= "9"


def _scan_digits(text: str, pos: int) -> Tuple[str, int]:
    end = pos
    while end < len(text) and _is_digit(text[end]):
        end += 1
    return text[pos:end], end


def scan_angle(text: str, pos: int = 0) -> Tuple[NexStarAngle, int]:
    """Parse one angle starting at ``pos``; return it with the offset just past ``s``."""
    state = NexStarGrammarState.SIGN
    sign = 1
    whole = minutes = seconds = 0
    fraction = ""
    # set at the UNIT stage, which every accepted input passes through
    unit = NexStarAngleUnit.DEGREES

    def fail() -> NexStarGrammarError:
        return NexStarGrammarError(state, pos, text)

    while pos < len(text):
        ch = text[pos]
        if state is NexStarGrammarState.SIGN:
            if ch in _ASCII_SPACES:
                pos += 1
                continue
            if ch in _SIGNS:
                sign = _SIGNS[ch]
                pos += 1
            state = NexStarGrammarState.WHOLE
        elif state in (NexStarGrammarState.WHOLE, NexStarGrammarState.MINUTES, NexStarGrammarState.SECONDS):
            if not _is_digit(ch):
                raise fail()
            digits, pos = _scan_digits(text, pos)
            if state is NexStarGrammarState.WHOLE:
                whole = int(digits)
                state = NexStarGrammarState.UNIT
            elif state is NexStarGrammarState.MINUTES:
                minutes = int(digits)
                state = NexStarGrammarState.MINUTE_MARK
            else:
                seconds = int(digits)
                state = NexStarGrammarState.SECOND_MARK
        elif state is NexStarGrammarState.UNIT:
            try:
                unit = NexStarAngleUnit(ch.lower())
            except ValueError:
                raise fail() from None
            pos += 1
            state = NexStarGrammarState.MINUTES_SPACE
        elif state in (NexStarGrammarState.MINUTES_SPACE, NexStarGrammarState.SECONDS_SPACE):
            if ch in _ASCII_SPACES:
                pos += 1
                continue
            if state is NexStarGrammarState.MINUTES_SPACE:
                state = NexStarGrammarState.MINUTES
            else:
                state = NexStarGrammarState.SECONDS
        elif state is NexStarGrammarState.MINUTE_MARK:
            if ch not in _MINUTE_MARKS:
                raise fail()
            pos += 1
            state = NexStarGrammarState.SECONDS_SPACE
        elif state is NexStarGrammarState.SECOND_MARK:
            if ch in _SECOND_MARKS:
                pos += 1
                break
            if ch != _DECIMAL_POINT:
                raise fail()
            pos += 1
            state = NexStarGrammarState.FRACTION
        else:
            # fractional digits are optional: "12.s" is accepted
            fraction, pos = _scan_digits(text, pos)
            if pos >= len(text) or text[pos] not in _SECOND_MARKS:
                raise fail()
            pos += 1
            break
    else:
        raise fail()

    total_seconds = seconds + (float(f"0.{fraction}") if fraction else 0.0)
    angle = NexStarAngle(sign=sign, whole=whole, minutes=minutes, seconds=total_seconds, unit=unit)
    return angle, pos


def parse_angle(text: str) -> Tuple[NexStarAngle, str]:
    angle, pos = scan_angle(text)
    return angle, text[pos:]


def parse_angle_pair(text: str) -> NexStarAnglePair:
    """Parse two back-to-back angles, e.g. ``"10h30m0s +45d0m0s"``.

    Error offsets are relative to ``text`` for both halves. Anything after the second
    angle is ignored.
    """
    first, pos = scan_angle(text)
    second, _ = scan_angle(text, pos)
    return NexStarAnglePair(first=first, second=second)
