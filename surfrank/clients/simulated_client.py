"""Simulated sample provider.

Generates plausible, repeatable conditions for offline runs and tests. Each
(coordinates, date, seed) triple always yields the same sample.

Hourly shape:
- Waves: base 0.8-2.3m plus a 24h tidal swing of +/-0.5m and noise
- Wind: base 8-18kt, x1.2 between 06:00 and 18:00, x0.8 otherwise
- Wind direction: around 120 deg, swinging +/-30 deg over the day
- Tide: semi-diurnal, 2.0m +/- 1.5m with a 12h period
"""

import logging
import math
import random
from datetime import date, datetime
from typing import Iterable, Optional

from surfrank.core.provider import SampleUnavailableError
from surfrank.core.sample import (
    EnvironmentalSample,
    HourlySeries,
    TideReading,
    WaveReading,
    WeatherCondition,
    WeatherReading,
    WindReading,
    round_half_up,
)
from surfrank.core.tides import tide_level_at


logger = logging.getLogger(__name__)

BASE_TIDE_M = 2.0
TIDE_AMPLITUDE_M = 1.5

SIMULATED_CONDITIONS = [
    WeatherCondition.CLEAR,
    WeatherCondition.CLOUDY,
    WeatherCondition.OVERCAST,
    WeatherCondition.LIGHT_RAIN,
    WeatherCondition.MODERATE_RAIN,
]


class SimulatedSampleProvider:
    """Deterministic fake provider."""

    def __init__(
        self,
        seed: int = 0,
        sample_hour: int = 12,
        unavailable: Optional[Iterable] = None,
    ):
        """Initialize the provider.

        Args:
            seed: Mixed into every spot's random stream
            sample_hour: Hour of day used for the point-in-time sample
            unavailable: Coordinates that raise SimulatedOutageError, to
                exercise failure handling
        """
        self.seed = seed
        self.sample_hour = sample_hour
        self.unavailable = {(c.lat, c.lng) for c in (unavailable or [])}

    def _rng(self, coordinates, day: date) -> random.Random:
        return random.Random(f"{coordinates.lat:.4f}:{coordinates.lng:.4f}:{day.isoformat()}:{self.seed}")

    def get_hourly(self, coordinates, day: date) -> HourlySeries:
        """Generate a 24-hour series for a location and date."""
        return self._generate_hourly(self._rng(coordinates, day))

    def _generate_hourly(self, rng: random.Random) -> HourlySeries:
        base_wave = 0.8 + rng.random() * 1.5
        base_wind = 8 + rng.random() * 10

        wave_height, swell, wind_speed, wind_gust, wind_direction, tide_height = ([] for _ in range(6))
        for hour in range(24):
            tide_influence = math.sin((hour + 6) * math.pi / 12) * 0.5
            wave = max(0.2, base_wave + tide_influence + (rng.random() - 0.5) * 0.4)
            wind_wave_ratio = 0.6 + rng.random() * 0.3

            day_factor = 1.2 if 6 <= hour <= 18 else 0.8
            speed = max(2.0, base_wind * day_factor + (rng.random() - 0.5) * 4)
            gust = speed + rng.random() * 5

            base_direction = 120 + math.sin(hour * math.pi / 12) * 30
            direction = (base_direction + (rng.random() - 0.5) * 20 + 360) % 360

            tide = BASE_TIDE_M + math.sin(hour * math.pi / 6) * TIDE_AMPLITUDE_M + rng.random() * 0.2

            wave_height.append(round_half_up(wave))
            swell.append(round_half_up(wave * (1 - wind_wave_ratio)))
            wind_speed.append(round_half_up(speed))
            wind_gust.append(round_half_up(gust))
            wind_direction.append(float(round(direction)))
            tide_height.append(round_half_up(tide))

        return HourlySeries(
            wave_height=tuple(wave_height),
            swell_height=tuple(swell),
            wind_speed=tuple(wind_speed),
            wind_gust=tuple(wind_gust),
            wind_direction=tuple(wind_direction),
            tide_height=tuple(tide_height),
        )

    def get_sample(self, coordinates, day: date) -> EnvironmentalSample:
        """Generate a sample for a location and date.

        Raises:
            SimulatedOutageError: If the coordinates are marked unavailable
        """
        if isinstance(day, datetime):
            day = day.date()

        if (coordinates.lat, coordinates.lng) in self.unavailable:
            raise SimulatedOutageError(
                f"Simulated outage at ({coordinates.lat}, {coordinates.lng})"
            )

        rng = self._rng(coordinates, day)
        hourly = self._generate_hourly(rng)
        hour = self.sample_hour

        sample = EnvironmentalSample(
            wave=WaveReading(
                height=hourly.wave_height[hour],
                period=round_half_up(rng.random() * 8 + 6),
                direction=float(round(rng.random() * 360)),
                swell_height=hourly.swell_height[hour],
                swell_period=round_half_up(rng.random() * 5 + 8),
                swell_direction=float(round(rng.random() * 360)),
            ),
            wind=WindReading(
                speed=hourly.wind_speed[hour],
                direction=hourly.wind_direction[hour],
                gust=hourly.wind_gust[hour],
            ),
            tide=TideReading(
                level=tide_level_at(hourly.tide_height, hour),
                height=hourly.tide_height[hour],
            ),
            weather=WeatherReading(
                condition=rng.choice(SIMULATED_CONDITIONS),
                temperature=float(round(rng.random() * 15 + 15)),
                humidity=float(round(rng.random() * 40 + 40)),
                visibility=float(round(rng.random() * 5 + 5)),
            ),
            water_temperature=round_half_up(rng.random() * 10 + 18),
            hourly=hourly,
            source="simulated",
        )

        logger.debug(f"Simulated sample for ({coordinates.lat}, {coordinates.lng}) on {day}")
        return sample


class SimulatedOutageError(SampleUnavailableError):
    """Raised for coordinates configured as unavailable."""

    pass
