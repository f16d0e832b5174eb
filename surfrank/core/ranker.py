"""Spot ranking engine.

Fetches samples and scores/ranks surf spots for a date.
This is the orchestration layer that connects:
- Spot database (spot.py)
- A sample provider (provider.py, clients/)
- Scoring and advice (scorer.py, suggestions.py)

Each spot is fetched and scored as an independent unit on a thread pool.
A spot that fails gets a neutral placeholder analysis so one bad data
source never sinks the whole ranking.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Optional

from surfrank.core.provider import SampleProvider
from surfrank.core.sample import EnvironmentalSample, WeatherCondition, finite_or
from surfrank.core.scorer import ConditionScorer, ScoreLevel, Scores, score_level
from surfrank.core.spot import SpotDatabase, SurfSpot
from surfrank.core.suggestions import Suggestion, build_suggestion


logger = logging.getLogger(__name__)

DEFAULT_SCORE = 5.0
DATA_UNAVAILABLE = "Data unavailable, please refresh later"
MAX_REASONS = 3
FALLBACK_REASON = "relatively good overall conditions"
CLOSING_PHRASES = {
    1: "best overall",
    2: "second choice",
    3: "third choice",
}


@dataclass(frozen=True)
class Analysis:
    """Scores and advice for one spot on one date."""
    spot: SurfSpot
    sample: Optional[EnvironmentalSample]
    scores: Scores
    suggestion: Suggestion
    computed_at: datetime = field(default_factory=datetime.now)
    available: bool = True

    @property
    def overall(self) -> float:
        return self.scores.overall


@dataclass(frozen=True)
class RankedSpot:
    """A top-N entry."""
    rank: int
    spot: SurfSpot
    score: float
    reason: str
    level: ScoreLevel
    region: str
    analysis: Analysis


def default_analysis(spot: SurfSpot) -> Analysis:
    """Neutral analysis used when a spot's data cannot be fetched or scored."""
    return Analysis(
        spot=spot,
        sample=None,
        scores=Scores(
            wave=DEFAULT_SCORE,
            wind=DEFAULT_SCORE,
            tide=DEFAULT_SCORE,
            weather=DEFAULT_SCORE,
            overall=DEFAULT_SCORE,
        ),
        suggestion=Suggestion(
            suggestions=[DATA_UNAVAILABLE],
            warnings=[],
            summary="No data",
        ),
        available=False,
    )


def analyze_spot(
    spot: SurfSpot,
    sample: EnvironmentalSample,
    scorer: Optional[ConditionScorer] = None,
) -> Analysis:
    """Score a sample and build advice for a spot."""
    scorer = scorer or ConditionScorer()
    scores = scorer.score(spot, sample)
    return Analysis(
        spot=spot,
        sample=sample,
        scores=scores,
        suggestion=build_suggestion(spot, sample, scores),
    )


def sort_analyses(analyses: list[Analysis]) -> list[Analysis]:
    """Sort by overall score, highest first; ties keep their input order."""
    return sorted(analyses, key=lambda a: a.scores.overall, reverse=True)


def ranking_reason(analysis: Analysis, rank: int) -> str:
    """Explain why a spot made the top list.

    Args:
        analysis: Analysis for the spot
        rank: 1-based rank

    Returns:
        Reason text, never empty
    """
    scores = analysis.scores
    sample = analysis.sample
    reasons = []

    if sample is not None:
        wave_height = finite_or(sample.wave.height, 0.0)
        wind_speed = finite_or(sample.wind.speed, 0.0)

        if scores.wave >= 8:
            reasons.append(f"excellent waves ({wave_height:g}m)")
        elif scores.wave >= 6:
            reasons.append(f"good waves ({wave_height:g}m)")

        if scores.wind >= 8:
            reasons.append(f"ideal wind ({wind_speed:g}kt)")
        elif scores.wind >= 6:
            reasons.append(f"suitable wind ({wind_speed:g}kt)")

        if scores.tide >= 7 and sample.tide.level is not None:
            reasons.append(f"{sample.tide.level.value} tide")

        if sample.weather.condition == WeatherCondition.CLEAR:
            reasons.append("clear skies")

    reasons = reasons[:MAX_REASONS] or [FALLBACK_REASON]

    closing = CLOSING_PHRASES.get(rank)
    if closing:
        reasons.append(closing)

    return ", ".join(reasons)


def top_n(
    analyses: list[Analysis],
    n: int = 3,
    spot_db: Optional[SpotDatabase] = None,
) -> list[RankedSpot]:
    """Take the first ``n`` analyses as ranked recommendations.

    Args:
        analyses: Analyses sorted by overall score
        n: Number of entries
        spot_db: Used to label regions. Region keys are used without it.

    Returns:
        RankedSpot list with ranks 1..n
    """
    ranked = []
    for rank, analysis in enumerate(analyses[:n], 1):
        region = analysis.spot.region
        ranked.append(RankedSpot(
            rank=rank,
            spot=analysis.spot,
            score=analysis.scores.overall,
            reason=ranking_reason(analysis, rank),
            level=score_level(analysis.scores.overall),
            region=spot_db.region_label(region) if spot_db else region,
            analysis=analysis,
        ))
    return ranked


class SpotRanker:
    """Ranks surf spots based on conditions for a date."""

    def __init__(
        self,
        provider: SampleProvider,
        scorer: Optional[ConditionScorer] = None,
        spot_db: Optional[SpotDatabase] = None,
        max_workers: int = 4,
        cache_ttl_seconds: int = 1800,
    ):
        """Initialize the ranker.

        Args:
            provider: Source of samples (may be calibrated)
            scorer: Condition scorer. Defaults to ConditionScorer().
            spot_db: Spot database for region lookups
            max_workers: Spots fetched in parallel
            cache_ttl_seconds: Lifetime of cached analyses. 0 disables caching.
        """
        self.provider = provider
        self.scorer = scorer or ConditionScorer()
        self.spot_db = spot_db
        self.max_workers = max_workers
        self.cache_ttl = timedelta(seconds=cache_ttl_seconds)
        self._cache: dict[tuple[str, date], Analysis] = {}

    def _get_cached(self, spot: SurfSpot, day: date) -> Optional[Analysis]:
        key = (spot.id, day)
        cached = self._cache.get(key)
        if cached is None:
            return None
        if datetime.now() - cached.computed_at >= self.cache_ttl:
            self._cache.pop(key, None)
            return None
        logger.debug(f"Using cached analysis for {spot.id} on {day}")
        return cached

    def clear_cache(self) -> None:
        self._cache.clear()

    def analyze(self, spot: SurfSpot, day: date) -> Analysis:
        """Fetch and score a single spot. Exceptions propagate."""
        sample = self.provider.get_sample(spot.coordinates, day)
        return analyze_spot(spot, sample, self.scorer)

    def _analyze_safely(self, spot: SurfSpot, day: date) -> Analysis:
        try:
            return self.analyze(spot, day)
        except Exception as e:
            logger.warning(f"Failed to analyze spot {spot.id}: {e}")
            return default_analysis(spot)

    def rank_spots(self, spots: list[SurfSpot], day: date) -> list[Analysis]:
        """Analyze and rank spots for a date.

        Args:
            spots: Spots to rank
            day: Date to rank for

        Returns:
            One Analysis per spot, sorted by overall score (highest first)
        """
        analyses: list[Optional[Analysis]] = [self._get_cached(spot, day) for spot in spots]
        pending = [i for i, analysis in enumerate(analyses) if analysis is None]

        if pending:
            workers = max(1, min(self.max_workers, len(pending)))
            with ThreadPoolExecutor(max_workers=workers) as executor:
                futures = {
                    i: executor.submit(self._analyze_safely, spots[i], day)
                    for i in pending
                }
                for i, future in futures.items():
                    analyses[i] = future.result()

            for i in pending:
                if analyses[i].available and self.cache_ttl > timedelta(0):
                    self._cache[(spots[i].id, day)] = analyses[i]

        failed = sum(1 for a in analyses if not a.available)
        if failed:
            logger.warning(f"{failed} of {len(spots)} spots had no data for {day}")

        return sort_analyses(analyses)

    def rank_region(self, region: str, day: date) -> list[Analysis]:
        """Rank the spots of one region, or all spots for region "all"."""
        if self.spot_db is None:
            raise ValueError("rank_region needs a spot database")
        if region == "all":
            spots = self.spot_db.get_all_spots()
        else:
            spots = self.spot_db.get_spots_by_region(region)
        return self.rank_spots(spots, day)

    def top_n(self, analyses: list[Analysis], n: int = 3) -> list[RankedSpot]:
        return top_n(analyses, n, self.spot_db)


def rank_spots(
    spots: list[SurfSpot],
    day: date,
    provider: SampleProvider,
    scorer: Optional[ConditionScorer] = None,
) -> list[Analysis]:
    """Rank spots for a date with a one-off ranker (no caching)."""
    ranker = SpotRanker(provider, scorer=scorer, cache_ttl_seconds=0)
    return ranker.rank_spots(spots, day)
