"""Distance service port — driving distance and time between two points."""

from abc import ABC, abstractmethod


class DistancePort(ABC):
    """Abstract interface for distance/geocoding services."""

    @abstractmethod
    def matrix(self, origin, destination) -> dict:
        """Return driving distance (meters) and time (seconds) between two locations.

        Returns:
            dict with keys: distance, time
        """
        ...
