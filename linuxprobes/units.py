"""Conversion of kilobyte counts into other memory units."""

from __future__ import annotations

from enum import IntEnum


class UnitShift(IntEnum):
    """Bit shifts that select the output unit."""

    B = 0
    K = 10
    M = 20
    G = 30


_LABELS = {
    UnitShift.B: "B",
    UnitShift.K: "kB",
    UnitShift.M: "MB",
    UnitShift.G: "GB",
}


def unit_convert(kilobytes: int, shift: UnitShift) -> int:
    """Convert a value in kilobytes into the unit chosen by shift."""
    return (int(kilobytes) << UnitShift.K) >> UnitShift(shift)


def unit_label(shift: UnitShift) -> str:
    """Return the label printed after values in the chosen unit."""
    return _LABELS[UnitShift(shift)]