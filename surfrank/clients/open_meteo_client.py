"""Open-Meteo client for marine and weather forecasts.

Combines two free, keyless endpoints into one EnvironmentalSample per spot:
- Marine API: wave/swell height, period, direction, sea temperature, sea level
- Forecast API: wind (knots), gusts, air temperature, humidity, visibility, WMO code

Sea level is relative to mean sea level; a datum offset shifts it onto the
chart-datum scale the tide scoring thresholds use.
"""

import hashlib
import json
import logging
import math
import os
import sqlite3
from datetime import date, datetime, timedelta, timezone
from pathlib import Path
from typing import Optional

import pandas as pd
import requests

from surfrank.core.provider import SampleUnavailableError
from surfrank.core.sample import (
    EnvironmentalSample,
    HourlySeries,
    TideReading,
    WaveReading,
    WeatherCondition,
    WeatherReading,
    WindReading,
)
from surfrank.core.tides import tide_level_at


logger = logging.getLogger(__name__)

MARINE_URL = "https://marine-api.open-meteo.com/v1/marine"
FORECAST_URL = "https://api.open-meteo.com/v1/forecast"
CACHE_TTL_SECONDS = 1800  # 30 minutes
REQUEST_TIMEOUT = 15

MARINE_VARIABLES = [
    "wave_height",
    "wave_period",
    "wave_direction",
    "swell_wave_height",
    "swell_wave_period",
    "swell_wave_direction",
    "sea_surface_temperature",
    "sea_level_height_msl",
]

FORECAST_VARIABLES = [
    "temperature_2m",
    "relative_humidity_2m",
    "visibility",
    "weather_code",
    "wind_speed_10m",
    "wind_direction_10m",
    "wind_gusts_10m",
]

# Hourly column -> source column
HOURLY_COLUMNS = {
    "wave_height": "wave_height",
    "swell_height": "swell_wave_height",
    "wind_speed": "wind_speed_10m",
    "wind_gust": "wind_gusts_10m",
    "wind_direction": "wind_direction_10m",
    "tide_height": "sea_level_height_msl",
}

# WMO weather interpretation codes
WMO_CONDITIONS = {
    WeatherCondition.CLEAR: {0, 1},
    WeatherCondition.CLOUDY: {2},
    WeatherCondition.OVERCAST: {3, 45, 48, 71, 73, 75, 77, 85, 86},
    WeatherCondition.LIGHT_RAIN: {51, 53, 55, 56, 57, 61, 80},
    WeatherCondition.MODERATE_RAIN: {63, 66, 81},
    WeatherCondition.HEAVY_RAIN: {65, 67, 82, 95, 96, 99},
}


def weather_code_to_condition(code: Optional[float]) -> Optional[WeatherCondition]:
    """Map a WMO weather code to a WeatherCondition."""
    if code is None or (isinstance(code, float) and math.isnan(code)):
        return None
    code = int(code)
    for condition, codes in WMO_CONDITIONS.items():
        if code in codes:
            return condition
    return None


def _default_cache_path() -> Path:
    cache_dir = Path(os.environ.get("SURFRANK_CACHE_DIR", Path.home() / ".cache" / "surf-rank"))
    cache_dir.mkdir(parents=True, exist_ok=True)
    return cache_dir / "open_meteo.db"


class OpenMeteoClient:
    """Sample provider backed by the Open-Meteo marine and forecast APIs."""

    def __init__(
        self,
        cache_path: Optional[Path] = None,
        sample_hour: int = 12,
        tide_datum_offset_m: float = 2.0,
    ):
        """Initialize the Open-Meteo client.

        Args:
            cache_path: Path to SQLite cache file. Defaults to
                $SURFRANK_CACHE_DIR/open_meteo.db (~/.cache/surf-rank).
            sample_hour: Hour of day used for the point-in-time sample.
            tide_datum_offset_m: Added to sea level (MSL) to get tide height.
        """
        self.session = requests.Session()
        self.session.headers["User-Agent"] = "SurfRank/1.0"

        self.cache_path = cache_path or _default_cache_path()
        self.sample_hour = sample_hour
        self.tide_datum_offset_m = tide_datum_offset_m
        self._init_cache()

    def _init_cache(self) -> None:
        """Initialize the SQLite cache table."""
        with sqlite3.connect(self.cache_path) as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS open_meteo_cache (
                    cache_key TEXT PRIMARY KEY,
                    data TEXT NOT NULL,
                    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                )
            """)
            conn.commit()

    def _make_cache_key(self, url: str, params: dict) -> str:
        """Generate a cache key for the request."""
        key_data = json.dumps({"url": url, **params}, sort_keys=True)
        return hashlib.sha256(key_data.encode()).hexdigest()[:32]

    def _get_cached(self, cache_key: str) -> Optional[dict]:
        """Retrieve data from cache if valid."""
        with sqlite3.connect(self.cache_path) as conn:
            cursor = conn.execute(
                "SELECT data, created_at FROM open_meteo_cache WHERE cache_key = ?",
                (cache_key,),
            )
            row = cursor.fetchone()

            if row is None:
                return None

            data_json, created_at_str = row
            created_at = datetime.fromisoformat(created_at_str)

            if datetime.now(timezone.utc) - created_at > timedelta(seconds=CACHE_TTL_SECONDS):
                conn.execute("DELETE FROM open_meteo_cache WHERE cache_key = ?", (cache_key,))
                conn.commit()
                return None

            return json.loads(data_json)

    def _set_cached(self, cache_key: str, data: dict) -> None:
        """Store data in cache."""
        with sqlite3.connect(self.cache_path) as conn:
            conn.execute(
                """
                INSERT OR REPLACE INTO open_meteo_cache (cache_key, data, created_at)
                VALUES (?, ?, ?)
                """,
                (cache_key, json.dumps(data), datetime.now(timezone.utc).isoformat()),
            )
            conn.commit()

    def _fetch_json(self, url: str, params: dict, use_cache: bool = True) -> dict:
        """Fetch a JSON document, using the cache when possible."""
        cache_key = self._make_cache_key(url, params)

        if use_cache:
            cached = self._get_cached(cache_key)
            if cached is not None:
                logger.debug(f"Cache hit for {url}")
                return cached

        try:
            response = self.session.get(url, params=params, timeout=REQUEST_TIMEOUT)
            response.raise_for_status()
            data = response.json()
        except requests.RequestException as e:
            raise OpenMeteoError(f"Failed to fetch {url}: {e}") from e
        except ValueError as e:
            raise OpenMeteoError(f"Invalid JSON from {url}: {e}") from e

        if data.get("error"):
            raise OpenMeteoError(f"Open-Meteo error: {data.get('reason', 'Unknown error')}")

        if use_cache:
            self._set_cached(cache_key, data)

        return data

    def _hourly_frame(self, data: dict) -> pd.DataFrame:
        """Convert an Open-Meteo response to a DataFrame indexed by time."""
        hourly = data.get("hourly") or {}
        if "time" not in hourly:
            raise OpenMeteoError("Response has no hourly data")

        df = pd.DataFrame(hourly)
        df["time"] = pd.to_datetime(df["time"])
        return df.set_index("time")

    def get_hourly_frame(
        self,
        lat: float,
        lng: float,
        day: date,
        use_cache: bool = True,
    ) -> pd.DataFrame:
        """Get one day of combined marine and weather data.

        Args:
            lat: Latitude
            lng: Longitude
            day: Local date to fetch
            use_cache: Whether to use cached responses

        Returns:
            DataFrame indexed by hour 0..23 with all marine and forecast
            columns; missing hours are NaN
        """
        if isinstance(day, datetime):
            day = day.date()

        common = {
            "latitude": round(lat, 4),
            "longitude": round(lng, 4),
            "start_date": day.isoformat(),
            "end_date": day.isoformat(),
            "timezone": "auto",
        }

        marine = self._hourly_frame(self._fetch_json(
            MARINE_URL,
            {**common, "hourly": ",".join(MARINE_VARIABLES)},
            use_cache,
        ))
        forecast = self._hourly_frame(self._fetch_json(
            FORECAST_URL,
            {**common, "hourly": ",".join(FORECAST_VARIABLES), "wind_speed_unit": "kn"},
            use_cache,
        ))

        df = marine.join(forecast, how="outer")
        df = df[df.index.date == day]
        df.index = df.index.hour
        df = df[~df.index.duplicated(keep="first")]
        df = df.reindex(range(24))
        df.index.name = "hour"
        return df

    def _to_hourly_series(self, df: pd.DataFrame) -> HourlySeries:
        """Pick and round the hourly series columns."""
        hourly = pd.DataFrame(index=df.index)
        for name, column in HOURLY_COLUMNS.items():
            if column in df.columns:
                hourly[name] = pd.to_numeric(df[column], errors="coerce")
            else:
                hourly[name] = float("nan")

        hourly["tide_height"] = hourly["tide_height"] + self.tide_datum_offset_m
        return HourlySeries.from_frame(hourly.round(1))

    def get_sample(self, coordinates, day: date) -> EnvironmentalSample:
        """Get a sample for a spot's coordinates on a date.

        Args:
            coordinates: Object with lat and lng attributes
            day: Date to sample

        Returns:
            EnvironmentalSample at sample_hour with the day's hourly series

        Raises:
            OpenMeteoError: If either API fails or there is no wave data
        """
        df = self.get_hourly_frame(coordinates.lat, coordinates.lng, day)
        row = df.loc[self.sample_hour]

        def value(column: str) -> Optional[float]:
            if column not in row.index:
                return None
            number = pd.to_numeric(row[column], errors="coerce")
            return None if pd.isna(number) else float(number)

        wave_height = value("wave_height")
        if wave_height is None:
            raise OpenMeteoError(
                f"No marine data at ({coordinates.lat}, {coordinates.lng}) for {day}"
            )

        hourly = self._to_hourly_series(df)
        tide_level = None
        tide_height = 0.0
        if hourly.tide_height and not any(math.isnan(h) for h in hourly.tide_height):
            tide_level = tide_level_at(hourly.tide_height, self.sample_hour)
            tide_height = hourly.tide_height[self.sample_hour]

        visibility_m = value("visibility")

        return EnvironmentalSample(
            wave=WaveReading(
                height=wave_height,
                period=value("wave_period") or 0.0,
                direction=value("wave_direction") or 0.0,
                swell_height=value("swell_wave_height") or 0.0,
                swell_period=value("swell_wave_period") or 0.0,
                swell_direction=value("swell_wave_direction") or 0.0,
            ),
            wind=WindReading(
                speed=value("wind_speed_10m") or 0.0,
                direction=value("wind_direction_10m") or 0.0,
                gust=value("wind_gusts_10m"),
            ),
            tide=TideReading(
                level=tide_level,
                height=tide_height,
            ),
            weather=WeatherReading(
                condition=weather_code_to_condition(value("weather_code")),
                temperature=value("temperature_2m") or 0.0,
                humidity=value("relative_humidity_2m") or 0.0,
                visibility=round(visibility_m / 1000, 1) if visibility_m is not None else 0.0,
            ),
            water_temperature=value("sea_surface_temperature"),
            hourly=hourly,
            source="open-meteo",
        )


class OpenMeteoError(SampleUnavailableError):
    """Exception raised for Open-Meteo client errors."""

    pass
