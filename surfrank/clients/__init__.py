"""Data source clients for surf conditions."""

from surfrank.clients.marine_bulletin_client import (
    BulletinReading,
    MarineBulletinClient,
    MarineBulletinError,
    parse_bulletin,
    refresh_calibration,
)
from surfrank.clients.open_meteo_client import OpenMeteoClient, OpenMeteoError
from surfrank.clients.simulated_client import SimulatedOutageError, SimulatedSampleProvider

__all__ = [
    "BulletinReading",
    "MarineBulletinClient",
    "MarineBulletinError",
    "OpenMeteoClient",
    "OpenMeteoError",
    "SimulatedOutageError",
    "SimulatedSampleProvider",
    "parse_bulletin",
    "refresh_calibration",
]
