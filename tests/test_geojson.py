"""Tests for GeoJSON and WKT output."""
import pytest

from postgis_codec.errors import MalformedGeometryError, UnknownGeometryTypeError
from postgis_codec.geometry.geojson import from_geojson, to_geojson, to_wkt
from postgis_codec.geometry.srid import WithSrid
from postgis_codec.geometry.types import (
    GeometryCollection,
    LineString,
    MultiPoint,
    MultiPolygon,
    Point,
    Polygon,
)


def test_point_to_geojson():
    assert to_geojson(Point(10, -20)) == {"type": "Point", "coordinates": [10, -20]}
    assert to_geojson(Point(10, -20, 100)) == {"type": "Point", "coordinates": [10, -20, 100]}


def test_measure_is_dropped():
    assert to_geojson(Point(10, -20, m=5)) == {"type": "Point", "coordinates": [10, -20]}


def test_polygon_to_geojson():
    poly = Polygon([[(0, 0), (1, 0), (1, 1), (0, 0)]])
    assert to_geojson(poly) == {
        "type": "Polygon",
        "coordinates": [[[0, 0], [1, 0], [1, 1], [0, 0]]],
    }


def test_collection_to_geojson():
    gc = GeometryCollection([Point(1, 2), LineString([(0, 0), (1, 1)])])
    assert to_geojson(WithSrid(gc, 4326)) == {
        "type": "GeometryCollection",
        "geometries": [
            {"type": "Point", "coordinates": [1, 2]},
            {"type": "LineString", "coordinates": [[0, 0], [1, 1]]},
        ],
    }


def test_from_geojson_round_trip(sample_geometries):
    for geom in sample_geometries:
        if geom.dimensions().has_m:
            continue
        assert from_geojson(to_geojson(geom)) == geom


def test_from_geojson_empty_point():
    assert from_geojson({"type": "Point", "coordinates": []}).is_empty


def test_from_geojson_errors():
    with pytest.raises(UnknownGeometryTypeError):
        from_geojson({"type": "Circle", "coordinates": [0, 0]})
    with pytest.raises(MalformedGeometryError):
        from_geojson({"type": "Point"})
    with pytest.raises(MalformedGeometryError):
        from_geojson({"type": "Point", "coordinates": [1]})


@pytest.mark.parametrize("value, expected", [
    (Point(10, -20), "POINT(10 -20)"),
    (Point(10, -20, 100), "POINT(10 -20 100)"),
    (Point(1, 2, m=3), "POINTM(1 2 3)"),
    (Point.empty(), "POINT EMPTY"),
    (WithSrid(Point(10, -20), 4326), "SRID=4326;POINT(10 -20)"),
    (LineString([(10, -20), (0, -0.5)]), "LINESTRING(10 -20, 0 -0.5)"),
    (LineString(), "LINESTRING EMPTY"),
    (Polygon([[(0, 0), (1, 0), (0, 0)]]), "POLYGON((0 0, 1 0, 0 0))"),
    (MultiPoint([(1, 2), (3, 4)]), "MULTIPOINT((1 2), (3 4))"),
    (MultiPolygon([[[(0, 0), (1, 0), (0, 0)]]]), "MULTIPOLYGON(((0 0, 1 0, 0 0)))"),
    (GeometryCollection([Point(1, 2), LineString([(0, 0), (1, 1)])]),
     "GEOMETRYCOLLECTION(POINT(1 2), LINESTRING(0 0, 1 1))"),
    (MultiPoint([Point.empty(), (3, 4)]), "MULTIPOINT(EMPTY, (3 4))"),
    (MultiPolygon([Polygon(), [[(0, 0), (1, 0), (0, 0)]]]),
     "MULTIPOLYGON(EMPTY, ((0 0, 1 0, 0 0)))"),
    (GeometryCollection([Point(1, 2), LineString()]),
     "GEOMETRYCOLLECTION(POINT(1 2), LINESTRING EMPTY)"),
])
def test_to_wkt(value, expected):
    assert to_wkt(value) == expected
