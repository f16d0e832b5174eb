"""Core surf condition scoring and ranking engine."""

from surfrank.core.calibration import (
    CalibrationFactor,
    CalibrationRegistry,
    calibrate,
    derive_factor,
)
from surfrank.core.provider import (
    CalibratedSampleProvider,
    SampleProvider,
    SampleUnavailableError,
)
from surfrank.core.ranker import (
    Analysis,
    RankedSpot,
    SpotRanker,
    default_analysis,
    rank_spots,
    top_n,
)
from surfrank.core.sample import (
    EnvironmentalSample,
    HourlySeries,
    TideLevel,
    TideReading,
    WaveReading,
    WeatherCondition,
    WeatherReading,
    WindReading,
    degrees_to_compass,
)
from surfrank.core.scorer import (
    ConditionScorer,
    ScoreLevel,
    Scores,
    ScoringConfig,
    load_scoring_config,
    score_level,
    score_spot,
)
from surfrank.core.spot import (
    BestConditions,
    Coordinates,
    SpotDatabase,
    SurfSpot,
    get_spot_database,
)
from surfrank.core.suggestions import Suggestion, build_suggestion
from surfrank.core.tides import (
    TideEvent,
    TideType,
    extract_tide_events,
    tide_level_at,
)

__all__ = [
    # Calibration
    "CalibrationFactor",
    "CalibrationRegistry",
    "calibrate",
    "derive_factor",
    # Provider
    "CalibratedSampleProvider",
    "SampleProvider",
    "SampleUnavailableError",
    # Ranker
    "Analysis",
    "RankedSpot",
    "SpotRanker",
    "default_analysis",
    "rank_spots",
    "top_n",
    # Sample
    "EnvironmentalSample",
    "HourlySeries",
    "TideLevel",
    "TideReading",
    "WaveReading",
    "WeatherCondition",
    "WeatherReading",
    "WindReading",
    "degrees_to_compass",
    # Scorer
    "ConditionScorer",
    "ScoreLevel",
    "Scores",
    "ScoringConfig",
    "load_scoring_config",
    "score_level",
    "score_spot",
    # Spot
    "BestConditions",
    "Coordinates",
    "SpotDatabase",
    "SurfSpot",
    "get_spot_database",
    # Suggestions
    "Suggestion",
    "build_suggestion",
    # Tides
    "TideEvent",
    "TideType",
    "extract_tide_events",
    "tide_level_at",
]
