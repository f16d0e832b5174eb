"""Calibration of forecast samples against authoritative local sources.

Global forecast models tend to be biased for specific stretches of coast.
A calibration factor corrects a sample with two multipliers and an offset:

- wave height   x wave_multiplier
- wind speed    x wind_multiplier (gusts too)
- water temp    + temp_offset

Factors are configured per spot (spots.yaml) or derived from a reference
bulletin reading (see clients/marine_bulletin_client.py).
"""

import logging
import math
from dataclasses import dataclass, replace
from typing import Iterable, Optional

from surfrank.core.sample import EnvironmentalSample, HourlySeries, finite_or, round_half_up


logger = logging.getLogger(__name__)

# Max lat/lng difference (degrees) for a coordinate lookup to match a spot
COORDINATE_TOLERANCE_DEG = 0.01


@dataclass(frozen=True)
class CalibrationFactor:
    """Correction factors for one spot."""
    wave_multiplier: float = 1.0
    wind_multiplier: float = 1.0
    temp_offset: float = 0.0
    source: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> "CalibrationFactor":
        return cls(
            wave_multiplier=float(data.get("wave", data.get("wave_multiplier", 1.0))),
            wind_multiplier=float(data.get("wind", data.get("wind_multiplier", 1.0))),
            temp_offset=float(data.get("temp_offset", 0.0)),
            source=data.get("source", ""),
        )

    @property
    def is_identity(self) -> bool:
        return self.wave_multiplier == 1.0 and self.wind_multiplier == 1.0 and self.temp_offset == 0.0


def _scale(value: Optional[float], multiplier: float) -> Optional[float]:
    # Missing readings stay missing
    if value is None or not math.isfinite(value):
        return value
    return round_half_up(value * multiplier)


def _scale_series(values: tuple, multiplier: float) -> tuple:
    return tuple(_scale(v, multiplier) for v in values)


def calibrate(
    sample: EnvironmentalSample,
    factor: Optional[CalibrationFactor],
) -> EnvironmentalSample:
    """Apply a calibration factor to a sample.

    The input sample is left untouched. Without a factor the sample passes
    through unchanged and is marked uncalibrated.

    Args:
        sample: Raw sample from a provider
        factor: Factor for the sample's spot, or None

    Returns:
        New calibrated sample
    """
    if factor is None:
        return replace(sample, calibrated=False, calibration_source=None)

    wave = replace(
        sample.wave,
        height=round_half_up(finite_or(sample.wave.height, 0.0) * factor.wave_multiplier),
    )
    wind = replace(
        sample.wind,
        speed=round_half_up(finite_or(sample.wind.speed, 0.0) * factor.wind_multiplier),
        gust=_scale(sample.wind.gust, factor.wind_multiplier),
    )

    water_temperature = sample.water_temperature
    if water_temperature is not None:
        water_temperature = round_half_up(finite_or(water_temperature, 0.0) + factor.temp_offset)

    hourly = sample.hourly
    if hourly is not None:
        hourly = HourlySeries(
            wave_height=_scale_series(hourly.wave_height, factor.wave_multiplier),
            swell_height=_scale_series(hourly.swell_height, factor.wave_multiplier),
            wind_speed=_scale_series(hourly.wind_speed, factor.wind_multiplier),
            wind_gust=_scale_series(hourly.wind_gust, factor.wind_multiplier),
            wind_direction=hourly.wind_direction,
            tide_height=hourly.tide_height,
        )

    return replace(
        sample,
        wave=wave,
        wind=wind,
        water_temperature=water_temperature,
        hourly=hourly,
        calibrated=True,
        calibration_source=factor.source or None,
    )


def derive_factor(
    reference_wave_height: Optional[float],
    reference_wind_speed: Optional[float],
    reference_water_temp: Optional[float],
    sample: EnvironmentalSample,
    source: str = "",
) -> CalibrationFactor:
    """Derive a calibration factor from an authoritative reference reading.

    Multipliers are reference/sample ratios and the temperature correction is
    an offset. Any component that cannot be computed (missing reference or
    zero sample value) stays neutral.
    """
    wave_multiplier = 1.0
    sample_wave = finite_or(sample.wave.height, 0.0)
    if reference_wave_height is not None and sample_wave > 0:
        wave_multiplier = round(reference_wave_height / sample_wave, 2)

    wind_multiplier = 1.0
    sample_wind = finite_or(sample.wind.speed, 0.0)
    if reference_wind_speed is not None and sample_wind > 0:
        wind_multiplier = round(reference_wind_speed / sample_wind, 2)

    temp_offset = 0.0
    if reference_water_temp is not None and sample.water_temperature is not None:
        temp_offset = round(reference_water_temp - sample.water_temperature, 2)

    return CalibrationFactor(
        wave_multiplier=wave_multiplier,
        wind_multiplier=wind_multiplier,
        temp_offset=temp_offset,
        source=source,
    )


class CalibrationRegistry:
    """Calibration factors keyed by spot id."""

    def __init__(self):
        self._factors: dict[str, CalibrationFactor] = {}
        self._coordinates: dict[str, tuple[float, float]] = {}

    @classmethod
    def from_spots(cls, spots: Iterable) -> "CalibrationRegistry":
        """Build a registry from spots that carry a calibration block."""
        registry = cls()
        for spot in spots:
            if spot.calibration is not None:
                registry.register(
                    spot.id,
                    spot.calibration,
                    (spot.coordinates.lat, spot.coordinates.lng),
                )
        return registry

    def register(
        self,
        spot_id: str,
        factor: CalibrationFactor,
        coordinates: Optional[tuple[float, float]] = None,
    ) -> None:
        """Register or replace the factor for a spot."""
        self._factors[spot_id] = factor
        if coordinates is not None:
            self._coordinates[spot_id] = coordinates
        logger.debug(f"Registered calibration for {spot_id}: {factor}")

    def get(self, spot_id: str) -> Optional[CalibrationFactor]:
        return self._factors.get(spot_id)

    def lookup(self, lat: float, lng: float) -> Optional[CalibrationFactor]:
        """Find the factor for the spot at the given coordinates."""
        for spot_id, (spot_lat, spot_lng) in self._coordinates.items():
            if (abs(spot_lat - lat) < COORDINATE_TOLERANCE_DEG
                    and abs(spot_lng - lng) < COORDINATE_TOLERANCE_DEG):
                return self._factors.get(spot_id)
        return None

    def __len__(self) -> int:
        return len(self._factors)

    def __contains__(self, spot_id: str) -> bool:
        return spot_id in self._factors
