"""
Geodetic coordinates and the local tangent-plane projection.

Local frame: +x east, +y up, +z south (north is -z), meters.
The projection is equirectangular: fine for offsets up to a few kilometres,
with error growing (never failing) beyond that. No ellipsoid model.
"""

import math
from dataclasses import dataclass

EARTH_RADIUS_M = 6371000.0


@dataclass(frozen=True)
class GeoCoordinate:
    """Latitude/longitude in decimal degrees."""

    latitude: float
    longitude: float

    def is_valid(self) -> bool:
        """True if both values are finite and within the WGS84 ranges."""
        lat, lon = self.latitude, self.longitude
        if math.isnan(lat) or math.isnan(lon):
            return False
        return -90.0 <= lat <= 90.0 and -180.0 <= lon <= 180.0

    def offset_by(self, d_lat: float, d_lon: float) -> "GeoCoordinate":
        """Return a coordinate shifted by the given degrees."""
        return GeoCoordinate(self.latitude + d_lat, self.longitude + d_lon)


@dataclass(frozen=True)
class LocalOffset:
    """Offset in meters from the world origin."""

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    def as_tuple(self) -> tuple:
        return (self.x, self.y, self.z)

    def length(self) -> float:
        return math.sqrt(self.x * self.x + self.y * self.y + self.z * self.z)


def project(origin: GeoCoordinate, target: GeoCoordinate) -> LocalOffset:
    """
    Project target into the tangent plane at origin.

    Returns the east (x) and north (-z) displacement in meters; y is always 0.
    """
    d_lat = math.radians(target.latitude - origin.latitude)
    d_lon = math.radians(target.longitude - origin.longitude)
    x = d_lon * EARTH_RADIUS_M * math.cos(math.radians(origin.latitude))
    z = d_lat * EARTH_RADIUS_M
    return LocalOffset(x=x, y=0.0, z=-z)


def distance_m(a: GeoCoordinate, b: GeoCoordinate) -> float:
    """Planar distance in meters between two nearby coordinates."""
    return project(a, b).length()
