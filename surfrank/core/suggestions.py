"""Rule-based surf advice.

Turns scores and raw readings into suggestions, warnings and a one-line
summary. Safety warnings for strong wind and big waves are raised from the
readings alone, regardless of scores.
"""

from dataclasses import dataclass, field
from typing import Optional

from surfrank.core.sample import EnvironmentalSample, TideLevel, WeatherCondition, finite_or
from surfrank.core.scorer import Scores, score_level


STRONG_WIND_KT = 20.0
BIG_WAVE_M = 2.5

TIDE_ADVICE = {
    TideLevel.RISING: "Rising tide: plan to surf within the next 2-3 hours",
    TideLevel.HIGH: "High tide: prime time to get in the water",
    TideLevel.FALLING: "Falling tide: there may still be decent waves",
}

# Entry tier -> minimum overall score to call the spot suitable
SUITABILITY = {
    "beginner": (6.0, "suitable for beginners"),
    "intermediate": (7.0, "suitable for intermediate surfers"),
    "advanced": (8.0, "suitable for advanced surfers"),
}


@dataclass(frozen=True)
class Suggestion:
    """Advice for one spot."""
    suggestions: list = field(default_factory=list)
    warnings: list = field(default_factory=list)
    summary: str = ""


def tide_advice(level: Optional[TideLevel]) -> Optional[str]:
    """Session timing advice for the current tide state."""
    return TIDE_ADVICE.get(level)


def build_summary(overall: float, difficulty: str) -> str:
    """One-line summary with a suitability or redirect suffix."""
    summary = f"Overall score {overall:.1f}/10 — {score_level(overall).label}"

    tier = (difficulty or "").split("-")[0].strip().lower()
    threshold = SUITABILITY.get(tier)
    if threshold and overall >= threshold[0]:
        summary += f", {threshold[1]}"
    elif overall < 5:
        summary += ", consider another time or spot"

    return summary


def build_suggestion(spot, sample: EnvironmentalSample, scores: Scores) -> Suggestion:
    """Generate suggestions and warnings for a scored spot.

    Args:
        spot: SurfSpot that was scored
        sample: Sample the scores came from
        scores: Scores for the spot

    Returns:
        Suggestion
    """
    suggestions = []
    warnings = []

    wave_height = finite_or(sample.wave.height, 0.0)
    wave_period = finite_or(sample.wave.period, 0.0)
    wind_speed = finite_or(sample.wind.speed, 0.0)

    if scores.wave >= 8:
        suggestions.append(
            f"Excellent waves: {wave_height:g}m at {wave_period:g}s, great for surfing"
        )
    elif scores.wave >= 6:
        suggestions.append(f"Good waves: {wave_height:g}m, fine for practice")
    elif scores.wave < 4:
        warnings.append(f"Poor waves: only {wave_height:g}m, consider another time")

    if scores.wind >= 8:
        suggestions.append(
            f"Ideal wind: {wind_speed:g}kt from {sample.wind.compass}, favourable for surfing"
        )
    elif scores.wind < 4:
        warnings.append(f"Unfavourable wind: {wind_speed:g}kt may spoil the session")

    if scores.tide >= 7 and sample.tide.level is not None:
        suggestions.append(
            f"Good tide: currently {sample.tide.level.value}, "
            f"{finite_or(sample.tide.height, 0.0):g}m"
        )

    condition = sample.weather.condition
    if condition is not None:
        if condition.is_rain:
            warnings.append("Rain expected: take care and bring waterproof gear")
        elif condition == WeatherCondition.CLEAR:
            suggestions.append(
                f"Clear skies: {finite_or(sample.weather.temperature, 0.0):g}°C, comfortable conditions"
            )

    if wind_speed > STRONG_WIND_KT:
        warnings.append(f"Strong wind ({wind_speed:g}kt): take extra care")
    if wave_height > BIG_WAVE_M:
        warnings.append(f"Big waves ({wave_height:g}m): experienced surfers only")

    advice = tide_advice(sample.tide.level)
    if advice:
        suggestions.append(advice)

    return Suggestion(
        suggestions=suggestions,
        warnings=warnings,
        summary=build_summary(scores.overall, spot.difficulty),
    )
