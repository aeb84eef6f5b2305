import math

import numpy as np
import pytest

from planetracker.domain import geometry
from planetracker.domain.geometry import EARTH_RADIUS_M
from planetracker.models import GeodeticPosition


def _pos(lat, lon, elevation=0.0):
    return GeodeticPosition(lat=lat, lon=lon, elevation=elevation)


def test_unit_cartesian_axes():
    assert geometry.to_unit_cartesian(_pos(0.0, 0.0)) == pytest.approx([1.0, 0.0, 0.0])
    assert geometry.to_unit_cartesian(_pos(90.0, 0.0)) == pytest.approx([0.0, 0.0, 1.0], abs=1e-12)
    assert geometry.to_unit_cartesian(_pos(0.0, 90.0)) == pytest.approx([0.0, 1.0, 0.0], abs=1e-12)


@pytest.mark.parametrize(
    "lat, lon",
    [(0.0, 0.0), (51.5, -0.1), (-33.9, 151.2), (89.9, 179.9), (-89.9, -179.9), (45.0, 180.0 - 1e-9)],
)
def test_unit_cartesian_round_trip(lat, lon):
    back = geometry.from_unit_cartesian(geometry.to_unit_cartesian(_pos(lat, lon)))

    assert back.lat == pytest.approx(lat, abs=1e-9)
    assert back.lon == pytest.approx(lon, abs=1e-9)


def test_to_global_uses_mean_radius_and_elevation():
    assert np.linalg.norm(geometry.to_global(_pos(10.0, 20.0))) == pytest.approx(EARTH_RADIUS_M)
    assert np.linalg.norm(geometry.to_global(_pos(10.0, 20.0, 500.0))) == pytest.approx(EARTH_RADIUS_M + 500.0)
    assert np.linalg.norm(geometry.to_global(_pos(10.0, 20.0, 500.0), 1000.0)) == pytest.approx(EARTH_RADIUS_M + 1000.0)


def test_project_observer_is_origin():
    x, y = geometry.project(_pos(47.3, 8.5), _pos(47.3, 8.5))

    assert x == pytest.approx(0.0, abs=1e-6)
    assert y == pytest.approx(0.0, abs=1e-6)


def test_project_east_and_north():
    observer = _pos(0.0, 0.0)

    x, y = geometry.project(observer, _pos(0.0, 1.0))
    assert x == pytest.approx(EARTH_RADIUS_M * math.sin(math.radians(1.0)))
    assert y == pytest.approx(0.0, abs=1e-6)

    x, y = geometry.project(observer, _pos(1.0, 0.0))
    assert x == pytest.approx(0.0, abs=1e-6)
    assert y == pytest.approx(EARTH_RADIUS_M * math.sin(math.radians(1.0)))


def test_project_at_high_latitude_keeps_north_up():
    x, y = geometry.project(_pos(60.0, 10.0), _pos(60.5, 10.0))

    assert x == pytest.approx(0.0, abs=1e-6)
    assert y > 0


@pytest.mark.parametrize("track", [0.0, 45.0, 90.0, 180.0, 270.0, 359.9, 360.0])
def test_estimate_position_zero_elapsed(track):
    start = _pos(51.5, -0.1)

    estimate = geometry.estimate_position(start, track, 250.0, 0.0)

    assert estimate.lat == pytest.approx(start.lat, abs=1e-9)
    assert estimate.lon == pytest.approx(start.lon, abs=1e-9)


@pytest.mark.parametrize("elapsed", [0.0, 1.0, 3600.0])
def test_estimate_position_zero_speed(elapsed):
    start = _pos(-12.0, 130.0)

    estimate = geometry.estimate_position(start, 123.0, 0.0, elapsed)

    assert estimate.lat == pytest.approx(start.lat, abs=1e-9)
    assert estimate.lon == pytest.approx(start.lon, abs=1e-9)


def test_estimate_position_east_along_equator():
    estimate = geometry.estimate_position(_pos(0.0, 0.0), 90.0, 1000.0, 100.0)

    assert estimate.lat == pytest.approx(0.0, abs=1e-9)
    assert estimate.lon == pytest.approx(math.degrees(100_000.0 / EARTH_RADIUS_M))


def test_estimate_position_north_along_meridian():
    estimate = geometry.estimate_position(_pos(10.0, 20.0), 0.0, 100.0, 60.0)

    assert estimate.lat == pytest.approx(10.0 + math.degrees(6000.0 / EARTH_RADIUS_M))
    assert estimate.lon == pytest.approx(20.0, abs=1e-9)


def test_estimate_position_track_wraparound():
    start = _pos(40.0, -75.0)

    a = geometry.estimate_position(start, 0.0, 200.0, 30.0)
    b = geometry.estimate_position(start, 360.0, 200.0, 30.0)
    c = geometry.estimate_position(start, -90.0, 200.0, 30.0)
    d = geometry.estimate_position(start, 270.0, 200.0, 30.0)

    assert a.lat == pytest.approx(b.lat) and a.lon == pytest.approx(b.lon)
    assert c.lat == pytest.approx(d.lat) and c.lon == pytest.approx(d.lon)
    assert c.lon < start.lon


def test_estimate_position_at_pole_does_not_raise():
    estimate = geometry.estimate_position(_pos(90.0, 0.0), 45.0, 200.0, 10.0)

    assert isinstance(estimate.lat, float)


def test_distance_includes_altitude():
    observer = _pos(51.5, -0.1)

    assert geometry.distance(observer, _pos(51.5, -0.1), 1000.0) == pytest.approx(1000.0)
    assert geometry.distance(_pos(0.0, 0.0), _pos(0.0, 1.0), 0.0) == pytest.approx(
        2 * EARTH_RADIUS_M * math.sin(math.radians(0.5))
    )


def test_projected_range_of_surface_distance():
    assert geometry.projected_range_of_surface_distance(0.0) == 0.0
    assert geometry.projected_range_of_surface_distance(20_000.0) == pytest.approx(
        EARTH_RADIUS_M * math.sin(20_000.0 / EARTH_RADIUS_M)
    )
    assert geometry.projected_range_of_surface_distance(500_000.0) < 500_000.0


def test_local_frame_of_aircraft_overhead():
    observer = _pos(48.0, 11.0)
    aircraft = geometry.to_global(_pos(48.0, 11.0), 1000.0)

    assert geometry.to_local_point(observer, aircraft) == pytest.approx([0.0, 0.0, 1000.0], abs=1e-6)


@pytest.mark.parametrize("track, expected", [(0.0, [0.0, 100.0, 0.0]), (90.0, [100.0, 0.0, 0.0]), (180.0, [0.0, -100.0, 0.0])])
def test_local_velocity_follows_track(track, expected):
    observer = _pos(30.0, -100.0)
    velocity = geometry.to_global_velocity(observer, track, 100.0)

    assert geometry.to_local_vector(observer, velocity) == pytest.approx(expected, abs=1e-9)
