#!/usr/bin/env python3
"""Tests for tide schedule extraction.

Run from project root:
    python scripts/test_tides.py
"""

import sys
from datetime import date, datetime
from pathlib import Path

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from surfrank.core.sample import TideLevel
from surfrank.core.tides import (
    TideType,
    extract_tide_events,
    fallback_tide_events,
    tide_level_at,
)


DAY = date(2026, 7, 14)


def series_with(points: dict, base: float = 2.2) -> list:
    """24 hourly heights at ``base`` with selected hours overridden."""
    heights = [base] * 24
    for hour, height in points.items():
        heights[hour] = height
    return heights


def test_monotonic_falls_back():
    """A curve with no turning points yields the fixed schedule."""
    print("\n" + "="*60)
    print("TEST: Monotonic Curve Fallback")
    print("="*60)

    heights = [0.5 + i * 0.15 for i in range(24)]
    events = extract_tide_events(heights, DAY)

    for event in events:
        print(f"  {event.time} {event.type.value:<4} {event.height}m")

    assert events == fallback_tide_events(DAY)
    assert [e.time for e in events] == ["05:30", "11:45", "17:20", "23:50"]
    assert [e.type for e in events] == [TideType.LOW, TideType.HIGH, TideType.LOW, TideType.HIGH]
    assert [e.height for e in events] == [1.1, 3.7, 1.3, 3.9]
    assert events[1].timestamp == datetime(2026, 7, 14, 11, 45)


def test_one_peak_one_trough():
    """A single high above 2.5m and a single low below 2.0m give exactly two events."""
    heights = series_with({6: 3.5, 15: 1.0})
    events = extract_tide_events(heights, DAY)

    assert len(events) == 2

    high, low = events
    assert high.type == TideType.HIGH
    assert high.time == "06:00"
    assert high.height == 3.5
    assert high.timestamp == datetime(2026, 7, 14, 6)

    assert low.type == TideType.LOW
    assert low.time == "15:00"
    assert low.height == 1.0
    assert low.timestamp == datetime(2026, 7, 14, 15)


def test_events_sorted_by_time():
    """Events come back in time order."""
    heights = series_with({3: 1.2, 9: 3.4, 16: 1.4, 21: 3.6})
    events = extract_tide_events(heights, DAY)

    assert [e.time for e in events] == ["03:00", "09:00", "16:00", "21:00"]
    timestamps = [e.timestamp for e in events]
    assert timestamps == sorted(timestamps)


def test_shallow_turning_points_ignored():
    """A peak below the high threshold does not count, so one event falls back."""
    heights = series_with({6: 2.4, 15: 1.0})
    events = extract_tide_events(heights, DAY)

    assert events == fallback_tide_events(DAY)


def test_short_series_falls_back():
    """Empty and two-point series cannot have interior turning points."""
    assert extract_tide_events([], DAY) == fallback_tide_events(DAY)
    assert extract_tide_events([1.0, 3.0], DAY) == fallback_tide_events(DAY)


def test_accepts_datetime():
    """A datetime is treated as its calendar day."""
    heights = series_with({6: 3.5, 15: 1.0})
    events = extract_tide_events(heights, datetime(2026, 7, 14, 17, 30))

    assert events[0].timestamp == datetime(2026, 7, 14, 6)


def test_rejects_non_date():
    """Anything other than a date or datetime is a TypeError."""
    try:
        extract_tide_events([1.0, 2.0, 1.0], "2026-07-14")
    except TypeError:
        return
    raise AssertionError("Expected TypeError")


def test_tide_level_at():
    """Turning points are high/low; otherwise the slope gives rising/falling."""
    heights = [1.0, 2.0, 3.0, 2.0, 1.0]

    assert tide_level_at(heights, 0) == TideLevel.RISING
    assert tide_level_at(heights, 1) == TideLevel.RISING
    assert tide_level_at(heights, 2) == TideLevel.HIGH
    assert tide_level_at(heights, 3) == TideLevel.FALLING
    assert tide_level_at(heights, 4) == TideLevel.FALLING

    assert tide_level_at([3.0, 1.0, 2.0], 1) == TideLevel.LOW
    assert tide_level_at(heights, 5) is None
    assert tide_level_at([2.0], 0) is None


def run_all_tests():
    """Run all tests and report results."""
    print("\n" + "#"*60)
    print("# TIDE EXTRACTION - TEST SUITE")
    print("#"*60)

    tests = [
        ("Monotonic Curve Fallback", test_monotonic_falls_back),
        ("One Peak One Trough", test_one_peak_one_trough),
        ("Events Sorted", test_events_sorted_by_time),
        ("Shallow Turning Points", test_shallow_turning_points_ignored),
        ("Short Series", test_short_series_falls_back),
        ("Accepts Datetime", test_accepts_datetime),
        ("Rejects Non Date", test_rejects_non_date),
        ("Tide Level At Hour", test_tide_level_at),
    ]

    passed = 0
    failed = 0

    for name, test_func in tests:
        try:
            test_func()
            passed += 1
        except AssertionError as e:
            failed += 1
            print(f"\n  ✗ FAILED: {name}")
            print(f"    Error: {e}")
        except Exception as e:
            failed += 1
            print(f"\n  ✗ ERROR: {name}")
            print(f"    Exception: {e}")

    print("\n" + "="*60)
    print("TEST RESULTS")
    print("="*60)
    print(f"  Passed: {passed}")
    print(f"  Failed: {failed}")
    print(f"  Total:  {len(tests)}")
    print("="*60)

    return failed == 0


if __name__ == "__main__":
    success = run_all_tests()
    sys.exit(0 if success else 1)
