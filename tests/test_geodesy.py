"""
Unit tests for the tangent-plane projection and GeoCoordinate.
"""

import math

import pytest

from geoanchor.geodesy import (
    EARTH_RADIUS_M,
    GeoCoordinate,
    LocalOffset,
    distance_m,
    project,
)

# 0.00005 deg of latitude in meters.
FIVE_E5_DEG_M = math.radians(0.00005) * EARTH_RADIUS_M


class TestProject:
    """Axis conventions: +x east, -z north, y always 0."""

    @pytest.mark.parametrize(
        "lat,lon",
        [(0.0, 0.0), (12.7489708, 80.1988392), (-33.9, 151.2), (89.9, -179.9)],
    )
    def test_same_point_is_zero(self, lat: float, lon: float) -> None:
        a = GeoCoordinate(lat, lon)
        assert project(a, a) == LocalOffset(0.0, 0.0, 0.0)

    def test_pure_north_has_no_east_component(self) -> None:
        offset = project(GeoCoordinate(48.1, 11.5), GeoCoordinate(48.2, 11.5))
        assert offset.x == 0.0
        assert offset.z < 0.0

    def test_pure_south_is_positive_z(self) -> None:
        offset = project(GeoCoordinate(48.1, 11.5), GeoCoordinate(48.0, 11.5))
        assert offset.x == 0.0
        assert offset.z > 0.0

    def test_pure_east_is_positive_x(self) -> None:
        offset = project(GeoCoordinate(10.0, 20.0), GeoCoordinate(10.0, 20.001))
        assert offset.z == 0.0
        assert offset.x > 0.0

    def test_pure_west_is_negative_x(self) -> None:
        offset = project(GeoCoordinate(10.0, 20.0), GeoCoordinate(10.0, 19.999))
        assert offset.z == 0.0
        assert offset.x < 0.0

    def test_y_is_always_zero(self) -> None:
        offset = project(GeoCoordinate(1.0, 2.0), GeoCoordinate(1.5, 2.5))
        assert offset.y == 0.0

    def test_north_offset_magnitude(self) -> None:
        offset = project(GeoCoordinate(0.0, 0.0), GeoCoordinate(0.00005, 0.0))
        assert offset.z == pytest.approx(-FIVE_E5_DEG_M)
        assert offset.z == pytest.approx(-5.56, abs=0.01)

    def test_east_offset_shrinks_with_latitude(self) -> None:
        at_equator = project(GeoCoordinate(0.0, 0.0), GeoCoordinate(0.0, 0.001))
        at_60 = project(GeoCoordinate(60.0, 0.0), GeoCoordinate(60.0, 0.001))
        assert at_60.x == pytest.approx(at_equator.x * 0.5)

    def test_antisymmetric_for_small_offsets(self) -> None:
        o = GeoCoordinate(12.7489708, 80.1988392)
        t = GeoCoordinate(12.7490708, 80.1989392)
        forward = project(o, t)
        backward = project(t, o)
        assert forward.x == pytest.approx(-backward.x, rel=1e-4)
        assert forward.z == pytest.approx(-backward.z, rel=1e-9)

    def test_deterministic(self) -> None:
        o = GeoCoordinate(51.5, -0.12)
        t = GeoCoordinate(51.5003, -0.1203)
        assert project(o, t) == project(o, t)

    def test_large_distance_does_not_fail(self) -> None:
        offset = project(GeoCoordinate(0.0, 0.0), GeoCoordinate(45.0, 170.0))
        assert math.isfinite(offset.x) and math.isfinite(offset.z)


class TestGeoCoordinate:
    """Range checks and helpers."""

    @pytest.mark.parametrize(
        "lat,lon", [(0.0, 0.0), (90.0, 180.0), (-90.0, -180.0), (12.7, 80.2)]
    )
    def test_valid(self, lat: float, lon: float) -> None:
        assert GeoCoordinate(lat, lon).is_valid()

    @pytest.mark.parametrize(
        "lat,lon",
        [(90.1, 0.0), (-91.0, 0.0), (0.0, 180.5), (0.0, -181.0), (math.nan, 0.0)],
    )
    def test_invalid(self, lat: float, lon: float) -> None:
        assert not GeoCoordinate(lat, lon).is_valid()

    def test_offset_by(self) -> None:
        c = GeoCoordinate(10.0, 20.0).offset_by(0.5, -0.25)
        assert c == GeoCoordinate(10.5, 19.75)

    def test_immutable(self) -> None:
        c = GeoCoordinate(1.0, 2.0)
        with pytest.raises(AttributeError):
            c.latitude = 3.0  # type: ignore[misc]


class TestDistance:
    def test_zero_for_same_point(self) -> None:
        a = GeoCoordinate(10.0, 20.0)
        assert distance_m(a, a) == 0.0

    def test_north_distance(self) -> None:
        d = distance_m(GeoCoordinate(0.0, 0.0), GeoCoordinate(0.00005, 0.0))
        assert d == pytest.approx(FIVE_E5_DEG_M)

    def test_local_offset_length(self) -> None:
        assert LocalOffset(3.0, 0.0, -4.0).length() == 5.0
