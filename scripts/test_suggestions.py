#!/usr/bin/env python3
"""Tests for surf advice generation.

Run from project root:
    python scripts/test_suggestions.py
"""

import sys
from pathlib import Path

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from surfrank.core.sample import (
    EnvironmentalSample,
    TideLevel,
    TideReading,
    WaveReading,
    WeatherCondition,
    WeatherReading,
    WindReading,
)
from surfrank.core.scorer import Scores
from surfrank.core.spot import Coordinates, SurfSpot
from surfrank.core.suggestions import build_suggestion, build_summary, tide_advice


def make_spot(difficulty="beginner-intermediate") -> SurfSpot:
    return SurfSpot(
        id="liuqinghe",
        name="Liuqinghe Beach",
        region="qingdao",
        coordinates=Coordinates(36.125, 120.6144),
        difficulty=difficulty,
    )


def make_sample(
    wave_height=1.4,
    period=10.0,
    wind_speed=10.0,
    wind_direction=180.0,
    tide_level=TideLevel.HIGH,
    tide_height=3.0,
    condition=WeatherCondition.CLEAR,
    temperature=25.0,
) -> EnvironmentalSample:
    return EnvironmentalSample(
        wave=WaveReading(height=wave_height, period=period),
        wind=WindReading(speed=wind_speed, direction=wind_direction),
        tide=TideReading(level=tide_level, height=tide_height),
        weather=WeatherReading(condition=condition, temperature=temperature, visibility=10.0),
    )


def make_scores(wave=9.0, wind=9.0, tide=8.0, weather=9.0, overall=7.0) -> Scores:
    return Scores(wave=wave, wind=wind, tide=tide, weather=weather, overall=overall)


def test_great_session():
    """High scores produce positive suggestions and no warnings."""
    print("\n" + "="*60)
    print("TEST: Great Session Advice")
    print("="*60)

    result = build_suggestion(make_spot(), make_sample(), make_scores())

    print(f"  Summary: {result.summary}")
    for s in result.suggestions:
        print(f"    + {s}")

    assert result.warnings == []
    assert result.suggestions[0] == "Excellent waves: 1.4m at 10s, great for surfing"
    assert result.suggestions[1] == "Ideal wind: 10kt from S, favourable for surfing"
    assert result.suggestions[2] == "Good tide: currently high, 3m"
    assert result.suggestions[3] == "Clear skies: 25°C, comfortable conditions"
    assert result.suggestions[4] == "High tide: prime time to get in the water"


def test_good_waves():
    """Wave scores of 6-8 get the practice message."""
    result = build_suggestion(make_spot(), make_sample(), make_scores(wave=6.5))
    assert "Good waves: 1.4m, fine for practice" in result.suggestions


def test_poor_conditions_warn():
    """Low wave and wind scores become warnings."""
    scores = make_scores(wave=3.0, wind=2.0, tide=5.0, overall=3.0)
    result = build_suggestion(make_spot(), make_sample(wave_height=0.3, wind_speed=4.0), scores)

    assert "Poor waves: only 0.3m, consider another time" in result.warnings
    assert "Unfavourable wind: 4kt may spoil the session" in result.warnings
    assert not any(s.startswith("Good tide") for s in result.suggestions)


def test_safety_warnings_independent_of_scores():
    """Strong wind and big waves always warn."""
    sample = make_sample(wave_height=2.8, wind_speed=22.0)
    result = build_suggestion(make_spot(), sample, make_scores())

    assert "Strong wind (22kt): take extra care" in result.warnings
    assert "Big waves (2.8m): experienced surfers only" in result.warnings


def test_rain_warning():
    """Any rain condition warns; no clear-sky suggestion."""
    for condition in (WeatherCondition.LIGHT_RAIN, WeatherCondition.HEAVY_RAIN):
        result = build_suggestion(make_spot(), make_sample(condition=condition), make_scores())
        assert "Rain expected: take care and bring waterproof gear" in result.warnings
        assert not any(s.startswith("Clear skies") for s in result.suggestions)


def test_tide_advice():
    """Rising, high and falling tides get timing advice; low gets none."""
    assert tide_advice(TideLevel.RISING).startswith("Rising tide")
    assert tide_advice(TideLevel.HIGH).startswith("High tide")
    assert tide_advice(TideLevel.FALLING).startswith("Falling tide")
    assert tide_advice(TideLevel.LOW) is None
    assert tide_advice(None) is None


def test_summary_suitability():
    """Suitability is judged on the entry tier of the difficulty range."""
    print("\n" + "="*60)
    print("TEST: Summary Suitability")
    print("="*60)

    cases = [
        (6.5, "beginner-intermediate", "Overall score 6.5/10 — Good, suitable for beginners"),
        (6.5, "intermediate-advanced", "Overall score 6.5/10 — Good"),
        (7.2, "intermediate-advanced", "Overall score 7.2/10 — Good, suitable for intermediate surfers"),
        (8.0, "advanced", "Overall score 8.0/10 — Excellent, suitable for advanced surfers"),
        (4.5, "intermediate", "Overall score 4.5/10 — Fair, consider another time or spot"),
        (5.0, "intermediate", "Overall score 5.0/10 — Fair"),
    ]

    for overall, difficulty, expected in cases:
        summary = build_summary(overall, difficulty)
        print(f"  {overall} {difficulty:<24} -> {summary}")
        assert summary == expected


def test_summary_in_suggestion():
    """The suggestion summary uses the spot's difficulty."""
    result = build_suggestion(make_spot("beginner"), make_sample(), make_scores(overall=6.0))
    assert result.summary == "Overall score 6.0/10 — Good, suitable for beginners"


def test_missing_readings():
    """Unknown conditions and NaN readings still produce advice."""
    sample = EnvironmentalSample(
        wave=WaveReading(height=float("nan")),
        wind=WindReading(speed=float("nan")),
    )
    result = build_suggestion(make_spot(), sample, make_scores(wave=2.0, wind=5.0, tide=5.0, overall=4.0))

    assert "Poor waves: only 0m, consider another time" in result.warnings
    assert result.summary.startswith("Overall score 4.0/10")


def run_all_tests():
    """Run all tests and report results."""
    print("\n" + "#"*60)
    print("# SURF ADVICE - TEST SUITE")
    print("#"*60)

    tests = [
        ("Great Session", test_great_session),
        ("Good Waves", test_good_waves),
        ("Poor Conditions", test_poor_conditions_warn),
        ("Safety Warnings", test_safety_warnings_independent_of_scores),
        ("Rain Warning", test_rain_warning),
        ("Tide Advice", test_tide_advice),
        ("Summary Suitability", test_summary_suitability),
        ("Summary In Suggestion", test_summary_in_suggestion),
        ("Missing Readings", test_missing_readings),
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
