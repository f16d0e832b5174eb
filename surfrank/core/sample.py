"""Environmental sample model.

A sample is one snapshot of wave, wind, tide and weather readings for a spot.
Samples are immutable; calibration and other adjustments produce new samples.

Units:
- Heights in metres, periods in seconds
- Wind speed and gust in knots
- Directions in degrees (where the wind/swell comes FROM)
- Temperatures in degrees Celsius, visibility in kilometres
"""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

import pandas as pd


COMPASS_POINTS = [
    "N", "NNE", "NE", "ENE", "E", "ESE", "SE", "SSE",
    "S", "SSW", "SW", "WSW", "W", "WNW", "NW", "NNW",
]

HOURLY_FIELDS = [
    "wave_height",
    "swell_height",
    "wind_speed",
    "wind_gust",
    "wind_direction",
    "tide_height",
]


class TideLevel(Enum):
    """Tide state at the time of the sample."""
    LOW = "low"
    RISING = "rising"
    HIGH = "high"
    FALLING = "falling"


class WeatherCondition(Enum):
    """Sky/precipitation condition."""
    CLEAR = "clear"
    CLOUDY = "cloudy"
    OVERCAST = "overcast"
    LIGHT_RAIN = "light-rain"
    MODERATE_RAIN = "moderate-rain"
    HEAVY_RAIN = "heavy-rain"

    @property
    def is_rain(self) -> bool:
        return "rain" in self.value


def round_half_up(value: float, digits: int = 1) -> float:
    """Round to ``digits`` decimals, halves away from zero for positives.

    ``round()`` uses banker's rounding, which disagrees with the published
    forecast figures on values like 2.25.
    """
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def degrees_to_compass(degrees: float) -> str:
    """Convert a bearing in degrees to a 16-point compass name."""
    index = int(math.floor((degrees % 360) / 22.5 + 0.5)) % 16
    return COMPASS_POINTS[index]


def finite_or(value: Optional[float], default: float) -> float:
    """Return ``value`` if it is a finite number, else ``default``."""
    if value is None:
        return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    if not math.isfinite(number):
        return default
    return number


@dataclass(frozen=True)
class WaveReading:
    """Wave and swell readings."""
    height: float = 0.0
    period: float = 0.0
    direction: float = 0.0
    swell_height: float = 0.0
    swell_period: float = 0.0
    swell_direction: float = 0.0


@dataclass(frozen=True)
class WindReading:
    """Wind readings. A missing gust means no gust excess."""
    speed: float = 0.0
    direction: float = 0.0
    gust: Optional[float] = None

    @property
    def compass(self) -> str:
        return degrees_to_compass(finite_or(self.direction, 0.0))

    @property
    def gust_excess(self) -> float:
        """Gust above sustained speed, never negative."""
        speed = finite_or(self.speed, 0.0)
        gust = finite_or(self.gust, speed)
        return max(0.0, gust - speed)


@dataclass(frozen=True)
class TideReading:
    """Current tide state and height."""
    level: Optional[TideLevel] = None
    height: float = 0.0


@dataclass(frozen=True)
class WeatherReading:
    """Surface weather readings."""
    condition: Optional[WeatherCondition] = None
    temperature: float = 0.0
    humidity: float = 0.0
    visibility: float = 0.0


@dataclass(frozen=True)
class HourlySeries:
    """One day of hourly readings, index 0..23 = hour of day."""
    wave_height: tuple = ()
    swell_height: tuple = ()
    wind_speed: tuple = ()
    wind_gust: tuple = ()
    wind_direction: tuple = ()
    tide_height: tuple = ()

    def __post_init__(self):
        lengths = set()
        for name in HOURLY_FIELDS:
            values = tuple(getattr(self, name))
            object.__setattr__(self, name, values)
            if values:
                lengths.add(len(values))
        if len(lengths) > 1:
            raise ValueError(f"Hourly series have mismatched lengths: {sorted(lengths)}")

    def __len__(self) -> int:
        for name in HOURLY_FIELDS:
            values = getattr(self, name)
            if values:
                return len(values)
        return 0

    def to_frame(self) -> pd.DataFrame:
        """Return the series as a DataFrame indexed by hour."""
        length = len(self)
        data = {
            name: list(getattr(self, name)) or [float("nan")] * length
            for name in HOURLY_FIELDS
        }
        frame = pd.DataFrame(data, index=pd.RangeIndex(length, name="hour"))
        return frame

    @classmethod
    def from_frame(cls, frame: pd.DataFrame) -> "HourlySeries":
        """Build a series from a DataFrame with any of the hourly columns.

        Missing columns become empty series.
        """
        kwargs = {}
        for name in HOURLY_FIELDS:
            if name in frame.columns:
                kwargs[name] = tuple(float(v) for v in frame[name].tolist())
        return cls(**kwargs)


@dataclass(frozen=True)
class EnvironmentalSample:
    """Wave, wind, tide and weather readings for one spot at one instant."""
    wave: WaveReading = field(default_factory=WaveReading)
    wind: WindReading = field(default_factory=WindReading)
    tide: TideReading = field(default_factory=TideReading)
    weather: WeatherReading = field(default_factory=WeatherReading)
    water_temperature: Optional[float] = None
    hourly: Optional[HourlySeries] = None

    # Provenance
    source: str = ""
    calibrated: bool = False
    calibration_source: Optional[str] = None
