from __future__ import annotations

import re
from enum import Enum

"""Shift classification from the first punch of the day."""

__all__ = [
    "ShiftCode",
    "classify",
    "parse_hour",
]

_STRIP = re.compile(r"[:\s]")
_LEADING_INT = re.compile(r"[+-]?\d+")


class ShiftCode(str, Enum):
    """Shift label written into roster cells. NONE is falsy ("")."""
    FS = "FS"  # early
    GS = "GS"  # morning
    SS = "SS"  # afternoon
    NS = "NS"  # night
    NONE = ""

    def __bool__(self) -> bool:
        return self is not ShiftCode.NONE


def parse_hour(punch_time: str | None) -> int | None:
    """Leading two characters (after removing colons/whitespace) as an int hour."""
    if not punch_time:
        return None
    prefix = _STRIP.sub("", str(punch_time))[:2]
    m = _LEADING_INT.match(prefix)
    if m is None:
        return None
    return int(m.group(0))


def classify(punch_time: str | None) -> ShiftCode:
    """Map a punch-time text such as "07:45" to a shift code.

    Hour ranges: [4, 6) FS, [6, 10) GS, [11, 16) SS, >= 16 NS. Hour 10 and
    hours below 4 have no code. Expects zero-padded times; "7:45" reads as
    hour 74 and classifies as NS.
    """
    hour = parse_hour(punch_time)
    if hour is None:
        return ShiftCode.NONE
    if 4 <= hour < 6:
        return ShiftCode.FS
    if 6 <= hour < 10:
        return ShiftCode.GS
    if 11 <= hour < 16:
        return ShiftCode.SS
    if hour >= 16:
        return ShiftCode.NS
    return ShiftCode.NONE
