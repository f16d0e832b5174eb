"""Regional marine bulletin scraper for calibration references.

Provincial marine forecast centres publish daily bulletins as HTML tables
(one row per sea area: wave height, wind, water temperature). Those figures
are the local reference the global model output is calibrated against.
"""

import logging
import re
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Optional

import requests
from bs4 import BeautifulSoup

from surfrank.core.calibration import CalibrationFactor, CalibrationRegistry, derive_factor
from surfrank.core.sample import round_half_up


logger = logging.getLogger(__name__)

CACHE_TTL_SECONDS = 7200  # 2 hours
REQUEST_TIMEOUT = 15

MS_TO_KNOTS = 1.94384
KMH_TO_KNOTS = 0.539957

# Beaufort force -> mid-range speed (knots)
BEAUFORT_KNOTS = {
    0: 0.5, 1: 2.0, 2: 5.0, 3: 8.5, 4: 13.5, 5: 19.0, 6: 24.5,
    7: 30.5, 8: 37.0, 9: 44.0, 10: 51.5, 11: 59.5, 12: 64.0,
}

# Region key -> bulletin page, publishing centre, and the sea area to read
BULLETIN_SOURCES = {
    "zhoushan": {
        "url": "http://www.zjhy.net.cn/",
        "source": "Zhejiang Marine Monitoring and Forecasting Center",
        "area": "Zhoushan",
    },
    "qingdao": {
        "url": "http://www.sdoa.cn/",
        "source": "Shandong Marine Forecast Station",
        "area": "Qingdao",
    },
}

# Header keywords (English and Chinese) -> column
HEADER_KEYWORDS = {
    "area": ["area", "region", "海区", "海域", "区域"],
    "wave_height": ["wave", "浪高", "波高"],
    "wind_speed": ["wind", "风速", "风力"],
    "water_temp": ["water temp", "sea temp", "sst", "水温"],
}

# Wind column headers that report Beaufort force rather than speed
BEAUFORT_HEADER_KEYWORDS = ["风力", "force", "beaufort"]

NUMBER_PATTERN = re.compile(r"-?\d+(?:\.\d+)?")


@dataclass(frozen=True)
class BulletinReading:
    """One sea area's row from a marine bulletin."""
    area: str
    wave_height: Optional[float] = None
    wind_speed: Optional[float] = None  # knots
    water_temp: Optional[float] = None
    source: str = ""


def _parse_numbers(text: str) -> list[float]:
    numbers = [float(n) for n in NUMBER_PATTERN.findall(text.replace("~", " ").replace("–", " "))]
    # "1.2-1.8" parses as 1.2 and -1.8; only the first number keeps its sign
    return numbers[:1] + [abs(n) for n in numbers[1:]]


def parse_number(text: str) -> Optional[float]:
    """Parse a value or range ("1.2-1.8m" -> 1.5) from a table cell."""
    numbers = _parse_numbers(text)
    if not numbers:
        return None
    return sum(numbers) / len(numbers)


def beaufort_to_knots(force: float) -> float:
    """Mid-range wind speed in knots for a Beaufort force."""
    force = min(max(int(round(force)), 0), max(BEAUFORT_KNOTS))
    return BEAUFORT_KNOTS[force]


def parse_wind_knots(text: str, beaufort: bool = False) -> Optional[float]:
    """Parse a wind cell to knots.

    Cells with a unit are converted from m/s or km/h, or taken as knots.
    Beaufort forces ("4-5级", "force 5") use the mid-range speed of each
    force. Bare numbers are forces when ``beaufort`` is set (a 风力 column),
    knots otherwise.
    """
    lowered = text.lower()
    value = parse_number(text)
    if value is None:
        return None
    if "m/s" in lowered or "米/秒" in text:
        return round(value * MS_TO_KNOTS, 1)
    if "km/h" in lowered or "kmh" in lowered:
        return round(value * KMH_TO_KNOTS, 1)
    if "kt" in lowered or "knot" in lowered or "节" in text:
        return value

    if beaufort or "级" in text or "force" in lowered or "beaufort" in lowered:
        knots = [beaufort_to_knots(f) for f in _parse_numbers(text)]
        return round_half_up(sum(knots) / len(knots))
    return value


def _column_map(header_cells: list[str]) -> dict[str, int]:
    columns = {}
    for index, cell in enumerate(header_cells):
        lowered = cell.lower()
        for column, keywords in HEADER_KEYWORDS.items():
            if column not in columns and any(kw in lowered for kw in keywords):
                columns[column] = index
                break
    return columns


def parse_bulletin(html: str, source: str = "") -> list[BulletinReading]:
    """Parse sea-area rows out of a bulletin page.

    Any table whose header names an area column and at least one measurement
    column is read.

    Args:
        html: Bulletin page HTML
        source: Publishing centre, copied onto each reading

    Returns:
        List of BulletinReading, empty if no usable table was found
    """
    soup = BeautifulSoup(html, "html.parser")
    content = soup.find("div", class_="forecast") or soup.find("article") or soup.body or soup

    readings = []
    for table in content.find_all("table"):
        rows = table.find_all("tr")
        if len(rows) < 2:
            continue

        header = [cell.get_text(strip=True) for cell in rows[0].find_all(["th", "td"])]
        columns = _column_map(header)
        wind_header = header[columns["wind_speed"]].lower() if "wind_speed" in columns else ""
        wind_is_force = any(kw in wind_header for kw in BEAUFORT_HEADER_KEYWORDS)
        if "area" not in columns or len(columns) < 2:
            continue

        for row in rows[1:]:
            cells = [cell.get_text(strip=True) for cell in row.find_all(["td", "th"])]
            if len(cells) <= columns["area"] or not cells[columns["area"]]:
                continue

            def cell(column: str) -> Optional[str]:
                index = columns.get(column)
                if index is None or index >= len(cells):
                    return None
                return cells[index]

            wave = cell("wave_height")
            wind = cell("wind_speed")
            temp = cell("water_temp")
            readings.append(BulletinReading(
                area=cells[columns["area"]],
                wave_height=parse_number(wave) if wave else None,
                wind_speed=parse_wind_knots(wind, beaufort=wind_is_force) if wind else None,
                water_temp=parse_number(temp) if temp else None,
                source=source,
            ))

    return readings


class MarineBulletinClient:
    """Client for fetching regional marine bulletins."""

    def __init__(self, sources: Optional[dict] = None):
        """Initialize the client.

        Args:
            sources: Region -> {url, source, area}. Defaults to BULLETIN_SOURCES.
        """
        self.sources = sources or BULLETIN_SOURCES
        self.session = requests.Session()
        self.session.headers.update({
            "User-Agent": "SurfRank/1.0 (surf-conditions-ranking)"
        })
        self._cache = {}  # Simple in-memory cache
        self._cache_ttl = CACHE_TTL_SECONDS

    def get_readings(self, region: str, use_cache: bool = True) -> list[BulletinReading]:
        """Fetch and parse the bulletin for a region.

        Args:
            region: Region key (e.g., "zhoushan")
            use_cache: Whether to use cached readings

        Returns:
            Readings for every sea area in the bulletin

        Raises:
            MarineBulletinError: If the region is unknown or the page cannot be fetched
        """
        config = self.sources.get(region)
        if config is None:
            raise MarineBulletinError(f"No bulletin source for region {region}")

        if use_cache and region in self._cache:
            cached_time, readings = self._cache[region]
            if datetime.now() - cached_time < timedelta(seconds=self._cache_ttl):
                return readings

        try:
            response = self.session.get(config["url"], timeout=REQUEST_TIMEOUT)
            response.raise_for_status()
        except requests.RequestException as e:
            raise MarineBulletinError(f"Failed to fetch bulletin for {region}: {e}") from e

        readings = parse_bulletin(response.text, config.get("source", ""))
        if not readings:
            logger.warning(f"No sea-area table found in bulletin for {region}")

        self._cache[region] = (datetime.now(), readings)
        return readings

    def get_reading(self, region: str) -> Optional[BulletinReading]:
        """Get the reading for a region's configured sea area."""
        area = self.sources.get(region, {}).get("area", "").lower()
        for reading in self.get_readings(region):
            if area and area in reading.area.lower():
                return reading
        return None

    def calibration_factor(self, spot, sample) -> Optional[CalibrationFactor]:
        """Derive a calibration factor for a spot from its region's bulletin."""
        reading = self.get_reading(spot.region)
        if reading is None:
            return None
        return derive_factor(
            reading.wave_height,
            reading.wind_speed,
            reading.water_temp,
            sample,
            source=reading.source,
        )


def refresh_calibration(
    registry: CalibrationRegistry,
    client: MarineBulletinClient,
    spots: list,
    provider,
    day: date,
) -> int:
    """Update a registry with bulletin-derived factors.

    Spots whose bulletin or raw sample cannot be fetched keep their existing
    factor.

    Args:
        registry: Registry to update
        client: Bulletin client
        spots: Spots to calibrate
        provider: Uncalibrated sample provider
        day: Date to compare on

    Returns:
        Number of spots updated
    """
    updated = 0
    for spot in spots:
        try:
            sample = provider.get_sample(spot.coordinates, day)
            factor = client.calibration_factor(spot, sample)
        except Exception as e:
            logger.warning(f"Calibration refresh failed for {spot.id}: {e}")
            continue

        if factor is None:
            continue

        registry.register(spot.id, factor, (spot.coordinates.lat, spot.coordinates.lng))
        updated += 1

    logger.info(f"Refreshed calibration for {updated} of {len(spots)} spots")
    return updated


class MarineBulletinError(Exception):
    """Exception raised for marine bulletin client errors."""

    pass
