"""
Shared fixtures for the postgis_codec test suite.

Hex vectors are PostGIS output (ST_AsEWKB / ST_AsTWKB) for the geometries
named next to them.
"""
import os

import pytest

from postgis_codec.geometry import (
    GeometryCollection,
    LineString,
    MultiLineString,
    MultiPoint,
    MultiPolygon,
    Point,
    Polygon,
)

SQUARE = [(0, 0), (2, 0), (2, 2), (0, 2), (0, 0)]
HOLE = [(10, 10), (-2, 10), (-2, -2), (10, -2), (10, 10)]


@pytest.fixture
def sample_geometries():
    """One XY value of every geometry variant, plus Z/M/ZM points and lines."""
    return [
        Point(10, -20),
        Point(10, -20, 100),
        Point(10, -20, m=1),
        Point(10, -20, 100, 1),
        LineString([(10, -20), (0, -0.5)]),
        LineString([(10, -20, 100, 1), (0, -0.5, 101, 2)]),
        LineString(),
        Polygon([SQUARE]),
        Polygon([SQUARE, HOLE]),
        MultiPoint([(10, -20), (0, -1)]),
        MultiLineString([[(10, -20), (0, -1)], [(0, 0), (2, 0)]]),
        MultiPolygon([[SQUARE], [HOLE]]),
        GeometryCollection([
            Point(10, 10),
            LineString([(15, 15), (20, 20)]),
            GeometryCollection([Point(1, 2)]),
        ]),
        GeometryCollection(),
    ]


@pytest.fixture
def test_dsn():
    """PostGIS connection string for integration tests, from POSTGIS_CODEC_TEST_DSN."""
    dsn = os.environ.get("POSTGIS_CODEC_TEST_DSN")
    if not dsn:
        pytest.skip("POSTGIS_CODEC_TEST_DSN not set")
    return dsn
