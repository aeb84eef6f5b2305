"""Spherical-Earth geometry used for tracking, projection and telemetry.

Global frame: metres, origin at the Earth's centre, lat. 0 / lon. 0 on the
+X axis and the North Pole on +Z. Local frame: east / north / up at the
observer.
"""

from __future__ import annotations

import math

import numpy as np

from planetracker.models.geo import GeodeticPosition

# Arithmetic mean radius (R1) as per IUGG.
EARTH_RADIUS_M = 6_371_008.8

NORTH_POLE = np.array([0.0, 0.0, 1.0])


def _normalize(vector: np.ndarray) -> np.ndarray:
    # Zero vectors (e.g. local north at a pole) become NaN instead of raising.
    with np.errstate(invalid="ignore", divide="ignore"):
        return vector / np.linalg.norm(vector)


def rotate(vector: np.ndarray, axis: np.ndarray, angle: float) -> np.ndarray:
    """Rotate ``vector`` about ``axis`` by ``angle`` radians (right-hand rule)."""

    k = _normalize(axis)
    cos_a = math.cos(angle)
    sin_a = math.sin(angle)
    return (
        vector * cos_a
        + np.cross(k, vector) * sin_a
        + k * np.dot(k, vector) * (1.0 - cos_a)
    )


def to_unit_cartesian(position: GeodeticPosition) -> np.ndarray:
    lat = math.radians(position.lat)
    lon = math.radians(position.lon)
    return np.array(
        [
            math.cos(lon) * math.cos(lat),
            math.sin(lon) * math.cos(lat),
            math.sin(lat),
        ]
    )


def from_unit_cartesian(vector: np.ndarray) -> GeodeticPosition:
    """Inverse of :func:`to_unit_cartesian`; elevation is not recovered."""

    lat = np.degrees(np.arcsin(np.clip(vector[2], -1.0, 1.0)))
    lon = np.degrees(np.arctan2(vector[1], vector[0]))
    return GeodeticPosition(lat=float(lat), lon=float(lon))


def to_global(position: GeodeticPosition, elevation: float | None = None) -> np.ndarray:
    """Global Cartesian coordinates in metres.

    ``elevation`` overrides the elevation carried by ``position`` (used for
    aircraft, whose altitude is tracked separately from lat/lon).
    """

    height = position.elevation if elevation is None else elevation
    return (EARTH_RADIUS_M + height) * to_unit_cartesian(position)


def local_north(unit: np.ndarray) -> np.ndarray:
    """Unit tangent pointing to true north at the point ``unit``."""

    return _normalize(np.cross(unit, np.cross(NORTH_POLE, unit)))


def forward_direction(unit: np.ndarray, track: float) -> np.ndarray:
    """Unit tangent along ``track`` (degrees clockwise from true north)."""

    return rotate(local_north(unit), unit, -math.radians(track))


def project(observer: GeodeticPosition, target: GeodeticPosition) -> tuple[float, float]:
    """Orthographic projection onto the plane tangent at the observer.

    Returns (x, y) in metres with x pointing east and y pointing north.
    """

    v = to_unit_cartesian(target)
    v = rotate(v, NORTH_POLE, -math.radians(observer.lon))
    v = rotate(v, np.array([0.0, 1.0, 0.0]), math.radians(observer.lat))
    return float(EARTH_RADIUS_M * v[1]), float(EARTH_RADIUS_M * v[2])


def estimate_position(
    start: GeodeticPosition, track: float, ground_speed: float, elapsed: float
) -> GeodeticPosition:
    """Advance ``start`` along a great circle.

    ``ground_speed`` is in m/s and ``elapsed`` in seconds; the arc travelled
    is ``ground_speed * elapsed / EARTH_RADIUS_M`` radians.
    """

    pos = to_unit_cartesian(start)
    forward = forward_direction(pos, track)
    angle = ground_speed * elapsed / EARTH_RADIUS_M
    if angle == 0.0:
        return GeodeticPosition(lat=start.lat, lon=start.lon)
    estimated = rotate(pos, np.cross(pos, forward), angle)
    return from_unit_cartesian(estimated)


def distance(
    observer: GeodeticPosition, position: GeodeticPosition, altitude: float
) -> float:
    """Straight-line distance in metres between the observer and an aircraft."""

    return float(np.linalg.norm(to_global(observer) - to_global(position, altitude)))


def projected_range_of_surface_distance(radius: float) -> float:
    """Projection-plane radius of a ring ``radius`` metres away along the surface."""

    return EARTH_RADIUS_M * math.sin(radius / EARTH_RADIUS_M)


def _local_basis(observer: GeodeticPosition) -> np.ndarray:
    up = to_unit_cartesian(observer)
    east = _normalize(np.cross(NORTH_POLE, up))
    north = np.cross(up, east)
    return np.vstack([east, north, up])


def to_local_point(observer: GeodeticPosition, point: np.ndarray) -> np.ndarray:
    """Express a global point in the observer's east/north/up frame."""

    return _local_basis(observer) @ (point - to_global(observer))


def to_local_vector(observer: GeodeticPosition, vector: np.ndarray) -> np.ndarray:
    return _local_basis(observer) @ vector


def to_global_velocity(
    position: GeodeticPosition, track: float, ground_speed: float
) -> np.ndarray:
    """Horizontal velocity (m/s) in the global frame."""

    return ground_speed * forward_direction(to_unit_cartesian(position), track)


__all__ = [
    "EARTH_RADIUS_M",
    "distance",
    "estimate_position",
    "forward_direction",
    "from_unit_cartesian",
    "local_north",
    "project",
    "projected_range_of_surface_distance",
    "rotate",
    "to_global",
    "to_global_velocity",
    "to_local_point",
    "to_local_vector",
    "to_unit_cartesian",
]
