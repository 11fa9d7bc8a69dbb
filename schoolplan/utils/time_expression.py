"""Lesson time expressions: validation, parsing and weekly-grid ordering.

A weekly lesson is placed in the day either by a free-form period label
("P3", "08h00-09h00", "2") or by an explicit start/end pair. This module
checks that a lesson carries at least one usable form, converts the explicit
pair to canonical ``datetime.time`` values, and derives the ordering key used
when listing the weekly grid.

The ordering key is recomputed on every read and never stored: the time
fields stay the only source of truth and remain independently editable.
"""

import math
import re
from dataclasses import dataclass
from datetime import time
from typing import Any, NamedTuple, Optional, Union

from schoolplan.exceptions import FieldValidationError

PERIOD_MAX_LENGTH = 50

ClockValue = Union[str, time, None]

_CLOCK_RE = re.compile(r"^(\d{1,2}):(\d{2})(?::(\d{2}))?$")

# "8h", "08h00", "8:30" as found inside period labels
_LABEL_CLOCK = r"(\d{1,2})\s*(?:h|:)\s*(\d{2})?"
_LABEL_RANGE_RE = re.compile(
    rf"^{_LABEL_CLOCK}\s*(?:-|–|à|a|to)\s*{_LABEL_CLOCK}$", re.IGNORECASE
)
_LABEL_SINGLE_RE = re.compile(rf"^{_LABEL_CLOCK}$", re.IGNORECASE)


class MinuteRange(NamedTuple):
    """Minutes since midnight; ``end`` is None when only a start is known."""

    start: int
    end: Optional[int] = None


class SortKey(NamedTuple):
    """Weekly-grid ordering key.

    ``tier`` is 0 for slots with an explicit start time, 1 for period-only
    slots and 2 for slots with neither.
    """

    tier: int
    minutes: float
    period: str


@dataclass(frozen=True)
class CanonicalTime:
    """Validated time fields ready to persist."""

    period: Optional[str]
    start_time: Optional[time]
    end_time: Optional[time]

    @property
    def has_explicit_time(self) -> bool:
        return self.start_time is not None and self.end_time is not None

    def as_fields(self) -> dict[str, Any]:
        return {
            "period": self.period,
            "start_time": self.start_time,
            "end_time": self.end_time,
        }


def parse_clock(value: ClockValue) -> time:
    """Parse an ``HH:MM`` (or ``HH:MM:SS``) value to a minute-resolution time.

    Args:
        value: String or ``datetime.time``.

    Returns:
        Time with seconds dropped.

    Raises:
        ValueError: If the value is not a valid wall-clock time.
    """
    if isinstance(value, time):
        return time(value.hour, value.minute)
    if not isinstance(value, str):
        raise ValueError(f"Invalid time value: {value!r}")

    match = _CLOCK_RE.match(value.strip())
    if match is None:
        raise ValueError(f"Invalid time format: {value!r}, expected HH:MM")

    hour, minute = int(match.group(1)), int(match.group(2))
    if not (0 <= hour <= 23 and 0 <= minute <= 59):
        raise ValueError(f"Invalid time value: {value!r}")
    return time(hour, minute)


def format_clock(value: Optional[time]) -> Optional[str]:
    """Render a time as ``HH:MM``."""
    if value is None:
        return None
    return f"{value.hour:02d}:{value.minute:02d}"


def to_minutes(value: time) -> int:
    return value.hour * 60 + value.minute


def _label_minutes(hour: str, minute: Optional[str]) -> Optional[int]:
    h, m = int(hour), int(minute or 0)
    if h > 23 or m > 59:
        return None
    return h * 60 + m


def parse_period_range(label: Optional[str]) -> Optional[MinuteRange]:
    """Best-effort reading of a time-shaped period label.

    Understands ranges such as ``"08h00-09h00"``, ``"8h-9h30"`` or
    ``"08:00 - 09:00"`` and single clocks such as ``"8h30"``. Ordinal labels
    (``"P3"``, ``"2"``) carry no clock time and give None.
    """
    if not label:
        return None
    text = label.strip()

    match = _LABEL_RANGE_RE.match(text)
    if match:
        start = _label_minutes(match.group(1), match.group(2))
        end = _label_minutes(match.group(3), match.group(4))
        if start is None or end is None:
            return None
        return MinuteRange(start, end)

    match = _LABEL_SINGLE_RE.match(text)
    if match:
        start = _label_minutes(match.group(1), match.group(2))
        return MinuteRange(start) if start is not None else None

    return None


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def validate_time_expression(
    period: Any, start_time: ClockValue, end_time: ClockValue
) -> CanonicalTime:
    """Validate the temporal identity of a weekly lesson.

    A lesson needs a non-empty period label or a complete start/end pair,
    and the end must fall strictly after the start on the same day.

    Returns:
        The canonical time fields.

    Raises:
        FieldValidationError: With every offending field. Nothing is written
            by callers when this is raised.
    """
    errors: dict[str, list[str]] = {}

    def add(field: str, message: str) -> None:
        errors.setdefault(field, []).append(message)

    label = str(period).strip() if period is not None else ""
    if len(label) > PERIOD_MAX_LENGTH:
        add("period", f"period must be at most {PERIOD_MAX_LENGTH} characters")

    parsed: dict[str, Optional[time]] = {"start_time": None, "end_time": None}
    for field, raw in (("start_time", start_time), ("end_time", end_time)):
        if _is_blank(raw):
            continue
        try:
            parsed[field] = parse_clock(raw)
        except ValueError as e:
            add(field, str(e))

    has_start = not _is_blank(start_time)
    has_end = not _is_blank(end_time)

    if has_start and not has_end:
        add("end_time", "end_time is required when start_time is given")
    elif has_end and not has_start:
        add("start_time", "start_time is required when end_time is given")
    elif not label and not has_start:
        message = "Provide a period or both start_time and end_time (HH:MM)"
        add("period", message)
        add("start_time", message)

    start, end = parsed["start_time"], parsed["end_time"]
    if start is not None and end is not None and to_minutes(end) <= to_minutes(start):
        add("end_time", "end_time must be after start_time")

    if errors:
        raise FieldValidationError(errors)

    return CanonicalTime(period=label or None, start_time=start, end_time=end)


def _explicit_start(slot: Any) -> Optional[int]:
    raw = getattr(slot, "start_time", None)
    if _is_blank(raw):
        return None
    try:
        return to_minutes(parse_clock(raw))
    except ValueError:
        return None


def sort_key(slot: Any) -> SortKey:
    """Ordering key of a slot inside one degree/day group.

    Explicit start times come first (ascending), then period-only slots
    (by the clock time their label spells out, if any, then by label), then
    slots with neither.
    """
    label = (getattr(slot, "period", None) or "").strip()

    start = _explicit_start(slot)
    if start is not None:
        return SortKey(0, start, label.casefold())

    if label:
        parsed = parse_period_range(label)
        minutes = parsed.start if parsed is not None else math.inf
        return SortKey(1, minutes, label.casefold())

    return SortKey(2, math.inf, "")


def slot_range(slot: Any) -> Optional[MinuteRange]:
    """Explicit minute range of a slot, None for period-only slots."""
    start = _explicit_start(slot)
    raw_end = getattr(slot, "end_time", None)
    if start is None or _is_blank(raw_end):
        return None
    try:
        end = to_minutes(parse_clock(raw_end))
    except ValueError:
        return None
    return MinuteRange(start, end)


def minutes_overlap(a: MinuteRange, b: MinuteRange) -> bool:
    """Whether two closed-open minute ranges intersect."""
    if a.end is None or b.end is None:
        return False
    return a.start < b.end and a.end > b.start
