"""Sample provider contract.

A provider returns an EnvironmentalSample (with hourly series) for a
location and date, and signals failure by raising. The ranker treats any
failure as the spot's data being unavailable.
"""

import logging
from datetime import date
from typing import Optional, Protocol

from surfrank.core.calibration import CalibrationRegistry, calibrate
from surfrank.core.sample import EnvironmentalSample


logger = logging.getLogger(__name__)


class SampleProvider(Protocol):
    """Anything that can produce a sample for a location and date."""

    def get_sample(self, coordinates, day: date) -> EnvironmentalSample:
        ...


class CalibratedSampleProvider:
    """Wraps a provider and calibrates its samples per spot."""

    def __init__(
        self,
        base: SampleProvider,
        registry: Optional[CalibrationRegistry] = None,
    ):
        """Initialize the provider.

        Args:
            base: Provider that produces raw samples
            registry: Calibration factors. None or empty passes samples through.
        """
        self.base = base
        self.registry = registry if registry is not None else CalibrationRegistry()

    def get_sample(self, coordinates, day: date) -> EnvironmentalSample:
        sample = self.base.get_sample(coordinates, day)
        factor = self.registry.lookup(coordinates.lat, coordinates.lng)
        if factor is None:
            logger.debug(f"No calibration for ({coordinates.lat}, {coordinates.lng})")
        return calibrate(sample, factor)


class SampleUnavailableError(Exception):
    """Raised when a provider cannot produce a sample."""

    pass
