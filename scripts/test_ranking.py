#!/usr/bin/env python3
"""Tests for the spot ranking engine.

Uses fake providers so no network access is needed.

Run from project root:
    python scripts/test_ranking.py
"""

import sys
import threading
from datetime import date, timedelta
from pathlib import Path

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from surfrank.core.provider import SampleUnavailableError
from surfrank.core.ranker import (
    DATA_UNAVAILABLE,
    FALLBACK_REASON,
    SpotRanker,
    default_analysis,
    ranking_reason,
    rank_spots,
    top_n,
)
from surfrank.core.sample import (
    EnvironmentalSample,
    TideLevel,
    TideReading,
    WaveReading,
    WeatherCondition,
    WeatherReading,
    WindReading,
)
from surfrank.core.scorer import ScoreLevel
from surfrank.core.spot import BestConditions, Coordinates, SpotDatabase, SurfSpot


DAY = date(2026, 7, 14)


def make_spot(spot_id: str, lat: float, region: str = "qingdao") -> SurfSpot:
    return SurfSpot(
        id=spot_id,
        name=spot_id.title(),
        region=region,
        coordinates=Coordinates(lat, 120.5),
        best_conditions=BestConditions(
            wave_height_range=(0.8, 2.5),
            wind_directions=frozenset({"S", "SE", "E"}),
            tide_level="mid-high",
        ),
        difficulty="beginner-intermediate",
    )


def sample_with_wave(height: float) -> EnvironmentalSample:
    return EnvironmentalSample(
        wave=WaveReading(height=height, period=10.0, swell_height=1.0),
        wind=WindReading(speed=10.0, direction=135.0, gust=12.0),
        tide=TideReading(level=TideLevel.HIGH, height=2.5),
        weather=WeatherReading(condition=WeatherCondition.CLEAR, temperature=24.0, visibility=10.0),
    )


class FakeProvider:
    """Returns a fixed wave height per latitude; raises for listed latitudes."""

    def __init__(self, waves: dict, failing=()):
        self.waves = waves
        self.failing = set(failing)
        self.calls = 0
        self._lock = threading.Lock()

    def get_sample(self, coordinates, day):
        with self._lock:
            self.calls += 1
        if coordinates.lat in self.failing:
            raise SampleUnavailableError(f"no data at {coordinates.lat}")
        return sample_with_wave(self.waves[coordinates.lat])


SPOTS = [
    make_spot("alpha", 36.0),
    make_spot("bravo", 36.1),
    make_spot("charlie", 36.2),
    make_spot("delta", 36.3),
    make_spot("echo", 36.4),
]

WAVES = {36.0: 0.2, 36.1: 1.5, 36.2: 4.0, 36.3: 1.0, 36.4: 1.5}


def test_one_failure_still_ranks_all():
    """A failing provider call yields a default analysis, not an exception."""
    print("\n" + "="*60)
    print("TEST: Ranking With One Failure")
    print("="*60)

    provider = FakeProvider(WAVES, failing=[36.2])
    analyses = rank_spots(SPOTS, DAY, provider)

    for a in analyses:
        print(f"  {a.spot.id:<8} {a.overall:.2f} available={a.available}")

    assert len(analyses) == 5
    assert {a.spot.id for a in analyses} == {s.id for s in SPOTS}

    failed = [a for a in analyses if not a.available]
    assert len(failed) == 1
    assert failed[0].spot.id == "charlie"
    assert failed[0].overall == 5.0
    assert failed[0].suggestion.suggestions == [DATA_UNAVAILABLE]
    assert failed[0].suggestion.summary == "No data"


def test_sorted_descending():
    """Rankings are non-increasing by overall score."""
    analyses = rank_spots(SPOTS, DAY, FakeProvider(WAVES))
    overall = [a.overall for a in analyses]
    assert overall == sorted(overall, reverse=True)


def test_ties_keep_input_order():
    """Equal scores keep the order spots were given in."""
    analyses = rank_spots(SPOTS, DAY, FakeProvider(WAVES))
    tied = [a.spot.id for a in analyses if a.spot.id in ("bravo", "echo")]
    assert tied == ["bravo", "echo"]


def test_top_three():
    """Top 3 gets ranks 1-3, never-empty reasons and closing phrases."""
    print("\n" + "="*60)
    print("TEST: Top 3")
    print("="*60)

    analyses = rank_spots(SPOTS, DAY, FakeProvider(WAVES))
    ranked = top_n(analyses, 3)

    for r in ranked:
        print(f"  {r.rank}. {r.spot.id} {r.score:.2f} {r.level.label}: {r.reason}")

    assert [r.rank for r in ranked] == [1, 2, 3]
    assert all(r.reason for r in ranked)
    assert ranked[0].reason.endswith("best overall")
    assert ranked[1].reason.endswith("second choice")
    assert ranked[2].reason.endswith("third choice")
    assert ranked[0].region == "qingdao"
    assert ranked[0].score == analyses[0].overall


def test_top_n_short_list():
    """Asking for more than available returns what there is."""
    analyses = rank_spots(SPOTS[:2], DAY, FakeProvider(WAVES))
    ranked = top_n(analyses, 3)
    assert [r.rank for r in ranked] == [1, 2]
    assert top_n([], 3) == []


def test_reason_capped_and_fallback():
    """At most three reasons before the closing phrase; fallback when none apply."""
    analyses = rank_spots([SPOTS[1]], DAY, FakeProvider(WAVES))
    reason = ranking_reason(analyses[0], 1)

    # waves, wind, tide and clear skies all qualify; only three are kept
    assert reason == "excellent waves (1.5m), ideal wind (10kt), high tide, best overall"

    fallback = ranking_reason(default_analysis(SPOTS[0]), 4)
    assert fallback == FALLBACK_REASON


def test_top_n_region_labels():
    """With a spot database, regions are shown by label."""
    config = Path(__file__).parent.parent / "config" / "spots.yaml"
    spot_db = SpotDatabase(config)
    spots = spot_db.get_spots_by_region("zhoushan")
    waves = {spot.coordinates.lat: 1.5 for spot in spots}

    ranker = SpotRanker(FakeProvider(waves), spot_db=spot_db)
    ranked = ranker.top_n(ranker.rank_region("zhoushan", DAY), 3)

    assert len(ranked) == 2
    assert all(r.region == "Zhoushan" for r in ranked)


def test_cache_reuses_analyses():
    """A second ranking within the TTL does not call the provider again."""
    provider = FakeProvider(WAVES)
    ranker = SpotRanker(provider)

    first = ranker.rank_spots(SPOTS, DAY)
    assert provider.calls == 5

    second = ranker.rank_spots(SPOTS, DAY)
    assert provider.calls == 5
    assert [a.spot.id for a in first] == [a.spot.id for a in second]

    ranker.rank_spots(SPOTS, date(2026, 7, 15))
    assert provider.calls == 10

    ranker.clear_cache()
    ranker.rank_spots(SPOTS, DAY)
    assert provider.calls == 15


def test_failures_not_cached():
    """Unavailable analyses are retried on the next ranking."""
    provider = FakeProvider(WAVES, failing=[36.2])
    ranker = SpotRanker(provider)

    ranker.rank_spots(SPOTS, DAY)
    assert provider.calls == 5

    ranker.rank_spots(SPOTS, DAY)
    assert provider.calls == 6


def test_cache_disabled():
    """A zero TTL always refetches."""
    provider = FakeProvider(WAVES)
    ranker = SpotRanker(provider, cache_ttl_seconds=0)

    ranker.rank_spots(SPOTS, DAY)
    ranker.rank_spots(SPOTS, DAY)
    assert provider.calls == 10


def test_expired_entries_evicted():
    """Expired analyses are dropped from the cache when looked up."""
    provider = FakeProvider(WAVES)
    ranker = SpotRanker(provider)

    ranker.rank_spots(SPOTS, DAY)
    assert len(ranker._cache) == 5

    # Every entry is now past its lifetime, and nothing new is stored
    ranker.cache_ttl = timedelta(0)
    ranker.rank_spots(SPOTS, DAY)
    assert provider.calls == 10
    assert ranker._cache == {}


def test_analyze_propagates():
    """Single-spot analysis surfaces provider errors to the caller."""
    ranker = SpotRanker(FakeProvider(WAVES, failing=[36.0]))
    try:
        ranker.analyze(SPOTS[0], DAY)
    except SampleUnavailableError:
        return
    raise AssertionError("Expected SampleUnavailableError")


def test_rank_region_needs_database():
    """Region ranking without a spot database is an error."""
    ranker = SpotRanker(FakeProvider(WAVES))
    try:
        ranker.rank_region("qingdao", DAY)
    except ValueError:
        return
    raise AssertionError("Expected ValueError")


def test_levels():
    """Ranked entries carry the score level."""
    analyses = rank_spots(SPOTS, DAY, FakeProvider(WAVES))
    ranked = top_n(analyses, 1)
    assert ranked[0].level == ScoreLevel.EXCELLENT


def run_all_tests():
    """Run all tests and report results."""
    print("\n" + "#"*60)
    print("# SPOT RANKER - TEST SUITE")
    print("#"*60)

    tests = [
        ("One Failure Still Ranks All", test_one_failure_still_ranks_all),
        ("Sorted Descending", test_sorted_descending),
        ("Ties Keep Input Order", test_ties_keep_input_order),
        ("Top Three", test_top_three),
        ("Top N Short List", test_top_n_short_list),
        ("Reason Capped And Fallback", test_reason_capped_and_fallback),
        ("Region Labels", test_top_n_region_labels),
        ("Cache Reuses Analyses", test_cache_reuses_analyses),
        ("Failures Not Cached", test_failures_not_cached),
        ("Cache Disabled", test_cache_disabled),
        ("Expired Entries Evicted", test_expired_entries_evicted),
        ("Analyze Propagates", test_analyze_propagates),
        ("Rank Region Needs Database", test_rank_region_needs_database),
        ("Levels", test_levels),
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
