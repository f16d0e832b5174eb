"""Tide schedule extraction from an hourly height curve.

High and low tides are read off the turning points of the curve:
- High tide: local maximum above HIGH_TIDE_MIN_M
- Low tide: local minimum below LOW_TIDE_MAX_M

A curve that yields fewer than two turning points (flat, monotonic, or too
coarse) falls back to a fixed semidiurnal schedule so callers always have a
usable table.
"""

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from enum import Enum
from typing import Optional, Sequence

from surfrank.core.sample import TideLevel, round_half_up


HIGH_TIDE_MIN_M = 2.5
LOW_TIDE_MAX_M = 2.0


class TideType(Enum):
    HIGH = "high"
    LOW = "low"


@dataclass(frozen=True)
class TideEvent:
    """A single high or low tide."""
    time: str  # HH:MM
    type: TideType
    height: float
    timestamp: datetime


# (hour, minute, type, height)
FALLBACK_SCHEDULE = [
    (5, 30, TideType.LOW, 1.1),
    (11, 45, TideType.HIGH, 3.7),
    (17, 20, TideType.LOW, 1.3),
    (23, 50, TideType.HIGH, 3.9),
]


def _midnight(day) -> datetime:
    if isinstance(day, datetime):
        return datetime.combine(day.date(), time())
    if isinstance(day, date):
        return datetime.combine(day, time())
    raise TypeError(f"Expected date or datetime, got {type(day).__name__}")


def fallback_tide_events(day) -> list[TideEvent]:
    """Return the fixed four-tide schedule for a day."""
    start = _midnight(day)
    return [
        TideEvent(
            time=f"{hour:02d}:{minute:02d}",
            type=tide_type,
            height=height,
            timestamp=start + timedelta(hours=hour, minutes=minute),
        )
        for hour, minute, tide_type, height in FALLBACK_SCHEDULE
    ]


def extract_tide_events(heights: Sequence[float], day) -> list[TideEvent]:
    """Derive high/low tide events from an hourly height series.

    Args:
        heights: Tide heights in metres, index = hour of day
        day: Date the series belongs to (date or datetime)

    Returns:
        Tide events sorted by time; the fallback schedule if fewer than two
        turning points are found
    """
    start = _midnight(day)
    events = []

    for i in range(1, len(heights) - 1):
        prev, curr, nxt = heights[i - 1], heights[i], heights[i + 1]

        if prev < curr > nxt and curr > HIGH_TIDE_MIN_M:
            tide_type = TideType.HIGH
        elif prev > curr < nxt and curr < LOW_TIDE_MAX_M:
            tide_type = TideType.LOW
        else:
            continue

        events.append(TideEvent(
            time=f"{i:02d}:00",
            type=tide_type,
            height=round_half_up(curr),
            timestamp=start + timedelta(hours=i),
        ))

    if len(events) < 2:
        return fallback_tide_events(day)

    return sorted(events, key=lambda e: e.timestamp)


def tide_level_at(heights: Sequence[float], hour: int) -> Optional[TideLevel]:
    """Classify the tide state at an hour of the curve.

    Turning points are high/low; elsewhere the direction of travel to the
    next hour decides rising/falling (the previous hour at the end of the
    series).

    Returns:
        TideLevel, or None if the series is too short or the hour is out of range
    """
    if len(heights) < 2 or not 0 <= hour < len(heights):
        return None

    curr = heights[hour]
    prev = heights[hour - 1] if hour > 0 else None
    nxt = heights[hour + 1] if hour + 1 < len(heights) else None

    if prev is not None and nxt is not None:
        if prev < curr > nxt:
            return TideLevel.HIGH
        if prev > curr < nxt:
            return TideLevel.LOW

    if nxt is not None:
        return TideLevel.RISING if nxt >= curr else TideLevel.FALLING
    return TideLevel.RISING if curr >= prev else TideLevel.FALLING
