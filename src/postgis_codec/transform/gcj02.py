"""
WGS84 <-> GCJ02 coordinate offset.

GCJ02 is the obfuscated datum used by maps published in mainland China. The
forward transform adds a latitude/longitude offset derived from two
polynomials and a Krasovsky-ellipsoid scale factor. Points outside the
coverage box are returned unchanged.

The reverse transform has no closed form. gcj02_to_wgs84 subtracts the offset
evaluated at the GCJ02 position, which lands within 1e-4 degrees (a few
metres) of the true WGS84 position. gcj02_to_wgs84_exact refines that by
fixed-point iteration when the residual matters.

Only X (longitude) and Y (latitude) are touched; Z and M pass through.
"""

import math
from typing import Callable, Optional

from ..geometry.srid import Tagged, WithSrid
from ..geometry.types import Point

# Krasovsky 1940 ellipsoid
_A = 6378245.0
_EE = 0.00669342162296594323

# Coverage box (longitude, latitude)
MIN_LNG, MAX_LNG = 72.004, 137.8347
MIN_LAT, MAX_LAT = 0.8293, 55.8271

# Single-step inverse error bound, in degrees
REVERSE_TOLERANCE = 1e-4


def out_of_china(lng: float, lat: float) -> bool:
    """True if the position lies outside the GCJ02 coverage box."""
    return not (MIN_LNG <= lng <= MAX_LNG and MIN_LAT <= lat <= MAX_LAT)


def _transform_lat(x: float, y: float) -> float:
    ret = -100.0 + 2.0 * x + 3.0 * y + 0.2 * y * y + 0.1 * x * y + 0.2 * math.sqrt(abs(x))
    ret += (20.0 * math.sin(6.0 * x * math.pi) + 20.0 * math.sin(2.0 * x * math.pi)) * 2.0 / 3.0
    ret += (20.0 * math.sin(y * math.pi) + 40.0 * math.sin(y / 3.0 * math.pi)) * 2.0 / 3.0
    ret += (160.0 * math.sin(y / 12.0 * math.pi) + 320.0 * math.sin(y * math.pi / 30.0)) * 2.0 / 3.0
    return ret


def _transform_lng(x: float, y: float) -> float:
    ret = 300.0 + x + 2.0 * y + 0.1 * x * x + 0.1 * x * y + 0.1 * math.sqrt(abs(x))
    ret += (20.0 * math.sin(6.0 * x * math.pi) + 20.0 * math.sin(2.0 * x * math.pi)) * 2.0 / 3.0
    ret += (20.0 * math.sin(x * math.pi) + 40.0 * math.sin(x / 3.0 * math.pi)) * 2.0 / 3.0
    ret += (150.0 * math.sin(x / 12.0 * math.pi) + 300.0 * math.sin(x / 30.0 * math.pi)) * 2.0 / 3.0
    return ret


def _offset(lng: float, lat: float) -> tuple[float, float]:
    """GCJ02 offset (dlng, dlat) in degrees at a position."""
    dlat = _transform_lat(lng - 105.0, lat - 35.0)
    dlng = _transform_lng(lng - 105.0, lat - 35.0)
    radlat = lat / 180.0 * math.pi
    magic = math.sin(radlat)
    magic = 1 - _EE * magic * magic
    sqrtmagic = math.sqrt(magic)
    dlat = (dlat * 180.0) / ((_A * (1 - _EE)) / (magic * sqrtmagic) * math.pi)
    dlng = (dlng * 180.0) / (_A / sqrtmagic * math.cos(radlat) * math.pi)
    return dlng, dlat


def _moved(point: Point, lng: float, lat: float) -> Point:
    return Point(lng, lat, point.z, point.m)


def wgs84_to_gcj02(point: Point) -> Point:
    """
    Shift a WGS84 point into GCJ02.

    Args:
        point: Point with x = longitude, y = latitude

    Returns:
        New point; the input itself when it is empty or outside coverage
    """
    if point.is_empty or out_of_china(point.x, point.y):
        return point
    dlng, dlat = _offset(point.x, point.y)
    return _moved(point, point.x + dlng, point.y + dlat)


def _single_step(point: Point) -> Optional[Point]:
    # Coverage is judged on the WGS84 estimate: near the box edge the GCJ02
    # input itself may lie outside it
    dlng, dlat = _offset(point.x, point.y)
    candidate = _moved(point, point.x - dlng, point.y - dlat)
    if out_of_china(candidate.x, candidate.y):
        return None
    return candidate


def gcj02_to_wgs84(point: Point) -> Point:
    """
    Approximate inverse of wgs84_to_gcj02.

    Subtracts the offset evaluated at the GCJ02 position. The result is within
    REVERSE_TOLERANCE degrees of the exact inverse; use gcj02_to_wgs84_exact
    where that is not enough. A point whose WGS84 estimate falls outside
    coverage is returned unchanged.
    """
    if point.is_empty:
        return point
    candidate = _single_step(point)
    return point if candidate is None else candidate


def gcj02_to_wgs84_exact(point: Point, tolerance: float = 1e-9, max_iter: int = 30) -> Point:
    """
    Inverse of wgs84_to_gcj02 by fixed-point iteration.

    Starting from the single-step estimate, the guess is corrected by the
    residual of re-encoding it until both residuals are below `tolerance`
    degrees or `max_iter` rounds have run.
    """
    if point.is_empty:
        return point
    guess = _single_step(point)
    if guess is None:
        return point
    for _ in range(max_iter):
        forward = wgs84_to_gcj02(guess)
        dlng = point.x - forward.x
        dlat = point.y - forward.y
        guess = _moved(point, guess.x + dlng, guess.y + dlat)
        if abs(dlng) < tolerance and abs(dlat) < tolerance:
            break
    return guess


def transform_geometry(value, fn: Callable[[Point], Point]):
    """
    Copy a geometry with every point passed through `fn`.

    SRID wrappers are preserved around the transformed geometry.
    """
    if isinstance(value, WithSrid):
        return WithSrid(value.geometry.map_points(fn), value.srid)
    if isinstance(value, Tagged):
        return Tagged(value.tag, value.geometry.map_points(fn))
    return value.map_points(fn)


def offset_distance(a: Point, b: Point) -> float:
    """Geodesic distance in metres between two lon/lat points on WGS84."""
    from pyproj import Geod

    geod = Geod(ellps="WGS84")
    _, _, distance = geod.inv(a.x, a.y, b.x, b.y)
    return distance
