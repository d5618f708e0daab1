"""Nagios threshold ranges and the status they produce."""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import Optional

from .plugin import Status, UsageError


class RangeParseError(UsageError, ValueError):
    """A threshold range could not be parsed."""

    def __init__(self, message: str):
        super().__init__(message)


@dataclass(frozen=True)
class Range:
    """A range in the Nagios threshold format: [@][start:][end]."""

    start: float = 0.0
    end: float = math.inf
    start_infinity: bool = False
    end_infinity: bool = True
    alert_inside: bool = False

    def alerts(self, value: float) -> bool:
        """Return True if the value lies where this range raises an alert."""
        if not self.start_infinity and not self.end_infinity:
            within = self.start <= value <= self.end
        elif not self.start_infinity:
            within = self.start <= value
        elif not self.end_infinity:
            within = value <= self.end
        else:
            within = True
        return within if self.alert_inside else not within


@dataclass(frozen=True)
class Thresholds:
    """The warning and critical ranges of a plugin."""

    warning: Optional[Range] = None
    critical: Optional[Range] = None


_NUMBER = re.compile(r"\s*[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?\s*%?\s*")


def _number(part: str, original: str) -> float:
    if not _NUMBER.fullmatch(part):
        raise RangeParseError(f"unparseable threshold range: '{original}'")
    text = part.strip()
    if text.endswith("%"):
        text = text[:-1].strip()
    return float(text)


def parse_range(text: str) -> Range:
    """Parse a Nagios range string."""
    body = text
    inside = body.startswith("@")
    if inside:
        body = body[1:]

    start, start_inf = 0.0, False
    end, end_inf = math.inf, True
    if ":" in body:
        left, right = body.split(":", 1)
        if left.strip() == "~":
            start_inf = True
        elif left:
            start = _number(left, text)
        if right:
            end = _number(right, text)
            end_inf = False
    else:
        end = _number(body, text)
        end_inf = False

    if not start_inf and not end_inf and start > end:
        raise RangeParseError(f"threshold range start exceeds end: '{text}'")

    return Range(start, end, start_inf, end_inf, inside)


def set_thresholds(warning: Optional[str], critical: Optional[str]) -> Thresholds:
    """Build the thresholds from the optional warning and critical strings."""
    return Thresholds(
        warning=parse_range(warning) if warning is not None else None,
        critical=parse_range(critical) if critical is not None else None,
    )


def get_status(value: float, thresholds: Optional[Thresholds]) -> Status:
    """Return the status a value earns against the thresholds."""
    if thresholds is None:
        return Status.OK
    if thresholds.critical is not None and thresholds.critical.alerts(value):
        return Status.CRITICAL
    if thresholds.warning is not None and thresholds.warning.alerts(value):
        return Status.WARNING
    return Status.OK


def thresholds_expressed_as_percentages(warning: Optional[str],
                                        critical: Optional[str]) -> bool:
    """Return True unless a given threshold lacks a percent sign."""
    return all("%" in text for text in (warning, critical) if text is not None)