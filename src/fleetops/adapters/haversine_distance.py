"""Great-circle distance service — offline estimate used when no routing API is configured."""

import math

from fleetops.adapters.distance_port import DistancePort

EARTH_RADIUS_METERS = 6_371_000


class HaversineDistance(DistancePort):
    """Estimates driving time from straight-line distance at a fixed average speed."""

    def __init__(self, average_speed_kmh: float = 40.0):
        self.average_speed_kmh = average_speed_kmh

    def matrix(self, origin, destination) -> dict:
        if origin is None or destination is None:
            return {"distance": 0, "time": 0}

        lat1, lng1 = math.radians(origin.latitude), math.radians(origin.longitude)
        lat2, lng2 = math.radians(destination.latitude), math.radians(destination.longitude)
        a = math.sin((lat2 - lat1) / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin((lng2 - lng1) / 2) ** 2
        distance = 2 * EARTH_RADIUS_METERS * math.asin(math.sqrt(a))

        meters_per_second = self.average_speed_kmh * 1000 / 3600
        return {"distance": round(distance), "time": round(distance / meters_per_second)}
