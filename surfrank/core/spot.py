"""Spot model and database loader.

Loads surf spot definitions from spots.yaml and provides a clean interface
for accessing spot properties and filtering spots by region or difficulty.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml

from surfrank.core.calibration import CalibrationFactor


DIFFICULTY_ORDER = ["beginner", "intermediate", "advanced", "expert"]


@dataclass(frozen=True)
class Coordinates:
    """Geographic coordinates."""
    lat: float
    lng: float


@dataclass(frozen=True)
class BestConditions:
    """Conditions a spot works best in."""
    wave_height_range: tuple[float, float] = (0.5, 2.0)
    wind_directions: frozenset = frozenset()
    tide_level: str = "all"  # all, mid, mid-high, low, rising, high, falling


@dataclass(frozen=True)
class SurfSpot:
    """Complete surf spot model."""
    id: str
    name: str
    region: str
    coordinates: Coordinates
    best_conditions: BestConditions = field(default_factory=BestConditions)
    difficulty: str = "intermediate"  # single tier or range, e.g. beginner-intermediate
    location: str = ""
    description: str = ""
    calibration: Optional[CalibrationFactor] = None

    @property
    def entry_difficulty(self) -> str:
        """Lowest tier of the difficulty range."""
        return self.difficulty.split("-")[0].strip().lower()

    def suits(self, skill_level: str) -> bool:
        """Check if the spot's entry tier is at or below a skill level."""
        try:
            return DIFFICULTY_ORDER.index(self.entry_difficulty) <= DIFFICULTY_ORDER.index(skill_level.lower())
        except ValueError:
            return True


class SpotDatabase:
    """Database of surf spots loaded from YAML."""

    def __init__(self, spots_path: Optional[Path] = None):
        """Initialize the spot database.

        Args:
            spots_path: Path to spots.yaml. Defaults to config/spots.yaml.
        """
        if spots_path is None:
            possible_paths = [
                Path(__file__).parent.parent.parent / "config" / "spots.yaml",
                Path.cwd() / "config" / "spots.yaml",
            ]
            for path in possible_paths:
                if path.exists():
                    spots_path = path
                    break

        if spots_path is None or not Path(spots_path).exists():
            raise FileNotFoundError("Could not find spots.yaml")

        self.spots_path = Path(spots_path)
        self._spots: dict[str, SurfSpot] = {}
        self._regions: dict[str, list[SurfSpot]] = {}
        self._region_labels: dict[str, str] = {}
        self._load_spots()

    def _load_spots(self) -> None:
        """Load spots from YAML file."""
        with open(self.spots_path) as f:
            data = yaml.safe_load(f) or {}

        for region, region_data in (data.get("regions") or {}).items():
            region_data = region_data or {}
            self._region_labels[region] = region_data.get("label", region.replace("_", " ").title())
            self._regions[region] = []

            for spot_data in region_data.get("spots", []):
                spot = self._parse_spot(spot_data, region)
                self._spots[spot.id] = spot
                self._regions[region].append(spot)

    def _parse_spot(self, data: dict, region: str) -> SurfSpot:
        """Parse a spot dictionary into a SurfSpot object."""
        coords = data.get("coordinates", {})
        best = data.get("best_conditions", {})
        wave_range = best.get("wave_height", [0.5, 2.0])
        calibration = data.get("calibration")

        return SurfSpot(
            id=data.get("id", "unknown"),
            name=data.get("name", "Unknown"),
            region=region,
            coordinates=Coordinates(
                lat=float(coords.get("lat", 0)),
                lng=float(coords.get("lng", 0)),
            ),
            best_conditions=BestConditions(
                wave_height_range=(float(wave_range[0]), float(wave_range[1])),
                wind_directions=frozenset(d.upper() for d in best.get("wind_direction", [])),
                tide_level=best.get("tide_level", "all"),
            ),
            difficulty=data.get("difficulty", "intermediate"),
            location=data.get("location", ""),
            description=data.get("description", ""),
            calibration=CalibrationFactor.from_dict(calibration) if calibration else None,
        )

    def get_spot(self, spot_id: str) -> Optional[SurfSpot]:
        """Get a spot by ID.

        Args:
            spot_id: Spot identifier (e.g., "dongsha")

        Returns:
            SurfSpot or None if not found
        """
        return self._spots.get(spot_id)

    def get_spot_by_name(self, name: str) -> Optional[SurfSpot]:
        """Get a spot by name (case-insensitive partial match)."""
        name_lower = name.lower()
        for spot in self._spots.values():
            if name_lower in spot.name.lower():
                return spot
        return None

    def get_all_spots(self) -> list[SurfSpot]:
        """Get all spots in file order."""
        return list(self._spots.values())

    def get_spots_by_region(self, region: str) -> list[SurfSpot]:
        """Get all spots for a region.

        Args:
            region: Region key (e.g., "zhoushan", "qingdao")

        Returns:
            List of spots, empty for an unknown region
        """
        return list(self._regions.get(region.lower(), []))

    def get_spots_by_skill(self, skill_level: str) -> list[SurfSpot]:
        """Get spots whose entry tier is at or below a skill level."""
        return [spot for spot in self._spots.values() if spot.suits(skill_level)]

    def region_label(self, region: str) -> str:
        """Human-readable name for a region key."""
        return self._region_labels.get(region, "Unknown region")

    @property
    def spot_count(self) -> int:
        return len(self._spots)

    @property
    def regions(self) -> list[str]:
        return list(self._regions.keys())


def get_spot_database(spots_path: Optional[Path] = None) -> SpotDatabase:
    """Load the spot database from the default or given location."""
    return SpotDatabase(spots_path)
