"""Surf condition scoring.

Each dimension is scored 0-10 from points awarded per factor:

Wave (max 10):
- Height inside the spot's preferred range: 4 (proportional outside)
- Swell height between 0.5m and 3m: 2 (triangular falloff around 1.5m)
- Period between 8s and 14s: 2 (triangular falloff around 11s)
- Baseline: 2

Wind (max 10):
- Speed between 5kt and 15kt: 4 (below 5kt: the speed itself, above 15kt: -0.2/kt)
- Direction in the spot's preferred set: 3, otherwise 1
- Gust excess below 5kt: 2, otherwise 2 - 0.2/kt
- Baseline: 1

Tide (max 10): base 5, +3 for the preferred tide state (else +1),
+2 for a height between 1.5m and 3.5m (falloff of 0.4/m around 2.5m).

Weather (max 10): base 5, condition bonus (-2..+3), visibility (+0.5/+1),
comfortable air temperature (+1).

The overall score is a weighted sum of the four dimension scores.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional

import yaml

from surfrank.core.sample import EnvironmentalSample, WeatherCondition, finite_or


logger = logging.getLogger(__name__)

# NOTE: these weights sum to 0.8, not 1.0, so the overall score tops out at
# 8.0. They are kept as-is because historical rankings were produced with
# them. The legacy configuration also listed wind_direction: 0.20, which no
# formula ever used.
DEFAULT_WEIGHTS = {
    "wave": 0.30,
    "wind": 0.25,
    "tide": 0.15,
    "weather": 0.10,
}

DEFAULT_CONDITION_BONUS = {
    WeatherCondition.CLEAR: 3.0,
    WeatherCondition.CLOUDY: 2.0,
    WeatherCondition.OVERCAST: 1.0,
    WeatherCondition.LIGHT_RAIN: 0.0,
    WeatherCondition.MODERATE_RAIN: -1.0,
    WeatherCondition.HEAVY_RAIN: -2.0,
}

# Tide policies that accept more than one tide state
TIDE_POLICIES = {
    "mid": {"rising", "falling"},
    "mid-high": {"rising", "high"},
}


class ScoreLevel(Enum):
    """Qualitative level for a 0-10 score."""
    EXCELLENT = ("excellent", 8.0, "Excellent")
    GOOD = ("good", 6.0, "Good")
    FAIR = ("fair", 4.0, "Fair")
    POOR = ("poor", 0.0, "Poor")

    def __init__(self, key: str, minimum: float, label: str):
        self.key = key
        self.minimum = minimum
        self.label = label


def score_level(score: float) -> ScoreLevel:
    """Map a score to its level (excellent >= 8, good >= 6, fair >= 4)."""
    for level in ScoreLevel:
        if score >= level.minimum:
            return level
    return ScoreLevel.POOR


@dataclass
class ScoringConfig:
    """Weights and thresholds for the condition scorer."""
    weights: dict = field(default_factory=lambda: dict(DEFAULT_WEIGHTS))
    clamp_overall: bool = True

    # Swell band (exclusive) and triangle centre, metres
    swell_min_m: float = 0.5
    swell_max_m: float = 3.0
    swell_center_m: float = 1.5

    # Period band (inclusive), triangle centre and half-width, seconds
    period_min_s: float = 8.0
    period_max_s: float = 14.0
    period_center_s: float = 11.0
    period_half_width_s: float = 6.0

    # Wind speed band, knots
    wind_min_kt: float = 5.0
    wind_max_kt: float = 15.0
    wind_penalty_per_kt: float = 0.2
    gust_tolerance_kt: float = 5.0
    gust_penalty_per_kt: float = 0.2

    # Tide height band, metres
    tide_min_m: float = 1.5
    tide_max_m: float = 3.5
    tide_center_m: float = 2.5
    tide_penalty_per_m: float = 0.4

    # Weather
    condition_bonus: dict = field(default_factory=lambda: dict(DEFAULT_CONDITION_BONUS))
    visibility_good_km: float = 8.0
    visibility_fair_km: float = 5.0
    comfortable_temp_min_c: float = 20.0
    comfortable_temp_max_c: float = 28.0

    @classmethod
    def from_dict(cls, data: dict) -> "ScoringConfig":
        """Build a config from a mapping, keeping defaults for absent keys.

        Unknown keys raise ValueError so typos in config files are not
        silently ignored.
        """
        data = dict(data or {})
        config = cls()

        weights = data.pop("weights", None)
        if weights:
            unknown = set(weights) - set(DEFAULT_WEIGHTS)
            if unknown:
                raise ValueError(f"Unknown scoring weights: {sorted(unknown)}")
            config.weights.update({k: float(v) for k, v in weights.items()})

        bonuses = data.pop("condition_bonus", None)
        if bonuses:
            for name, bonus in bonuses.items():
                config.condition_bonus[WeatherCondition(name)] = float(bonus)

        for key, value in data.items():
            if not hasattr(config, key):
                raise ValueError(f"Unknown scoring option: {key}")
            setattr(config, key, value)

        return config


def load_scoring_config(config_path: Optional[Path] = None) -> ScoringConfig:
    """Load scoring overrides from scoring.yaml.

    Args:
        config_path: Path to scoring.yaml. Defaults to config/scoring.yaml;
            defaults are used if no file is found.

    Returns:
        ScoringConfig
    """
    if config_path is None:
        possible_paths = [
            Path(__file__).parent.parent.parent / "config" / "scoring.yaml",
            Path.cwd() / "config" / "scoring.yaml",
        ]
        config_path = next((p for p in possible_paths if p.exists()), None)
        if config_path is None:
            logger.debug("No scoring.yaml found, using default scoring config")
            return ScoringConfig()

    with open(config_path) as f:
        data = yaml.safe_load(f) or {}

    return ScoringConfig.from_dict(data.get("scoring", data))


@dataclass(frozen=True)
class Scores:
    """Dimension scores (0-10) and the weighted overall score."""
    wave: float
    wind: float
    tide: float
    weather: float
    overall: float

    @property
    def level(self) -> ScoreLevel:
        return score_level(self.overall)


def _clamp(value: float, low: float = 0.0, high: float = 10.0) -> float:
    return max(low, min(high, value))


class ConditionScorer:
    """Scores surf conditions for a spot."""

    def __init__(self, config: Optional[ScoringConfig] = None):
        """Initialize the scorer.

        Args:
            config: Weights and thresholds. Defaults to ScoringConfig().
        """
        self.config = config or ScoringConfig()

    def score_wave(self, spot, sample: EnvironmentalSample) -> float:
        """Score wave height, swell and period against the spot's range."""
        cfg = self.config
        height = finite_or(sample.wave.height, 0.0)
        swell = finite_or(sample.wave.swell_height, 0.0)
        period = finite_or(sample.wave.period, 0.0)
        min_height, max_height = spot.best_conditions.wave_height_range

        score = 0.0

        if min_height <= height <= max_height:
            score += 4
        elif height < min_height:
            if min_height > 0:
                score += max(0.0, 4 * (height / min_height))
        else:
            score += max(0.0, 4 * (max_height / height))

        if cfg.swell_min_m < swell < cfg.swell_max_m:
            score += 2
        else:
            score += max(0.0, 2 * (1 - abs(swell - cfg.swell_center_m) / cfg.swell_center_m))

        if cfg.period_min_s <= period <= cfg.period_max_s:
            score += 2
        else:
            score += max(0.0, 2 * (1 - abs(period - cfg.period_center_s) / cfg.period_half_width_s))

        score += 2
        return _clamp(score)

    def score_wind(self, spot, sample: EnvironmentalSample) -> float:
        """Score wind speed, direction and gustiness."""
        cfg = self.config
        speed = finite_or(sample.wind.speed, 0.0)

        score = 0.0

        if cfg.wind_min_kt <= speed <= cfg.wind_max_kt:
            score += 4
        elif speed < cfg.wind_min_kt:
            score += max(0.0, speed)
        else:
            score += max(0.0, 4 - (speed - cfg.wind_max_kt) * cfg.wind_penalty_per_kt)

        if sample.wind.compass in spot.best_conditions.wind_directions:
            score += 3
        else:
            score += 1

        gust_excess = sample.wind.gust_excess
        if gust_excess < cfg.gust_tolerance_kt:
            score += 2
        else:
            score += max(0.0, 2 - gust_excess * cfg.gust_penalty_per_kt)

        score += 1
        return _clamp(score)

    def tide_matches(self, preferred: str, level) -> bool:
        """Check a tide state against a spot's tide policy."""
        if preferred == "all":
            return True
        if level is None:
            return False
        if preferred in TIDE_POLICIES:
            return level.value in TIDE_POLICIES[preferred]
        return preferred == level.value

    def score_tide(self, spot, sample: EnvironmentalSample) -> float:
        """Score tide state against the spot's policy, and tide height."""
        cfg = self.config
        height = finite_or(sample.tide.height, 0.0)

        score = 5.0

        if self.tide_matches(spot.best_conditions.tide_level, sample.tide.level):
            score += 3
        else:
            score += 1

        if cfg.tide_min_m <= height <= cfg.tide_max_m:
            score += 2
        else:
            score += max(0.0, 2 - abs(height - cfg.tide_center_m) * cfg.tide_penalty_per_m)

        return _clamp(score)

    def score_weather(self, sample: EnvironmentalSample) -> float:
        """Score sky condition, visibility and air temperature."""
        cfg = self.config
        weather = sample.weather
        visibility = finite_or(weather.visibility, 0.0)
        temperature = finite_or(weather.temperature, 0.0)

        score = 5.0
        score += cfg.condition_bonus.get(weather.condition, 0.0)

        if visibility >= cfg.visibility_good_km:
            score += 1
        elif visibility >= cfg.visibility_fair_km:
            score += 0.5

        if cfg.comfortable_temp_min_c <= temperature <= cfg.comfortable_temp_max_c:
            score += 1

        return _clamp(score)

    def overall(self, wave: float, wind: float, tide: float, weather: float) -> float:
        """Weighted sum of dimension scores, clamped to 0-10 if configured."""
        weights = self.config.weights
        total = (
            wave * weights.get("wave", 0.0) +
            wind * weights.get("wind", 0.0) +
            tide * weights.get("tide", 0.0) +
            weather * weights.get("weather", 0.0)
        )
        if self.config.clamp_overall:
            total = _clamp(total)
        return total

    def score(self, spot, sample: EnvironmentalSample) -> Scores:
        """Score all dimensions for a spot.

        Args:
            spot: SurfSpot being scored
            sample: Environmental sample for the spot

        Returns:
            Scores
        """
        wave = self.score_wave(spot, sample)
        wind = self.score_wind(spot, sample)
        tide = self.score_tide(spot, sample)
        weather = self.score_weather(sample)

        return Scores(
            wave=wave,
            wind=wind,
            tide=tide,
            weather=weather,
            overall=self.overall(wave, wind, tide, weather),
        )


def score_spot(spot, sample: EnvironmentalSample, config: Optional[ScoringConfig] = None) -> Scores:
    """Score a spot with a default (or given) scoring config."""
    return ConditionScorer(config).score(spot, sample)
