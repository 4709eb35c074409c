"""
GeoJSON and WKT views of the geometry model.

GeoJSON positions carry X, Y and (when present) Z; M has no GeoJSON
representation and is dropped. WKT output follows PostGIS EWKT: Z geometries
list three ordinates, M-only geometries use the `M` suffix (POINTM), and an
SRID wrapper becomes a `SRID=n;` prefix.
"""

from typing import Any

from ..errors import MalformedGeometryError, UnknownGeometryTypeError
from .srid import unwrap
from .types import (
    GeometryCollection,
    LineString,
    MultiLineString,
    MultiPoint,
    MultiPolygon,
    Point,
    Polygon,
)


def _position(point: Point) -> list[float]:
    if point.is_empty:
        return []
    if point.z is not None:
        return [point.x, point.y, point.z]
    return [point.x, point.y]


def _positions(points) -> list[list[float]]:
    return [_position(p) for p in points]


def to_geojson(value) -> dict[str, Any]:
    """
    Convert a geometry to a GeoJSON geometry dict.

    Args:
        value: Geometry, or an SRID wrapper (the SRID is not represented)

    Returns:
        GeoJSON geometry dict with 'type' and 'coordinates' (or 'geometries')
    """
    geometry, _ = unwrap(value)

    if isinstance(geometry, Point):
        return {"type": "Point", "coordinates": _position(geometry)}
    elif isinstance(geometry, LineString):
        return {"type": "LineString", "coordinates": _positions(geometry.vertices)}
    elif isinstance(geometry, Polygon):
        rings = [_positions(ring.vertices) for ring in geometry.rings]
        return {"type": "Polygon", "coordinates": rings}
    elif isinstance(geometry, MultiPoint):
        return {"type": "MultiPoint", "coordinates": _positions(geometry.members)}
    elif isinstance(geometry, MultiLineString):
        lines = [_positions(line.vertices) for line in geometry.lines]
        return {"type": "MultiLineString", "coordinates": lines}
    elif isinstance(geometry, MultiPolygon):
        polygons = [
            [_positions(ring.vertices) for ring in poly.rings]
            for poly in geometry.polygons
        ]
        return {"type": "MultiPolygon", "coordinates": polygons}
    elif isinstance(geometry, GeometryCollection):
        return {
            "type": "GeometryCollection",
            "geometries": [to_geojson(g) for g in geometry.geometries],
        }
    raise UnknownGeometryTypeError(f"Unsupported geometry type: {type(geometry).__name__}")


def _point_from(coords) -> Point:
    if not coords:
        return Point.empty()
    if len(coords) not in (2, 3):
        raise MalformedGeometryError(f"GeoJSON position needs 2 or 3 values, got {coords!r}")
    return Point(*(float(c) for c in coords))


def from_geojson(mapping: dict):
    """
    Build a geometry from a GeoJSON geometry dict.

    Raises:
        UnknownGeometryTypeError: On an unsupported 'type'
        MalformedGeometryError: On missing keys or malformed positions
    """
    try:
        geom_type = mapping["type"]
        if geom_type == "GeometryCollection":
            return GeometryCollection(from_geojson(g) for g in mapping["geometries"])
        coords = mapping["coordinates"]
    except (KeyError, TypeError) as e:
        raise MalformedGeometryError(f"Invalid GeoJSON geometry: {e}") from e

    if geom_type == "Point":
        return _point_from(coords)
    elif geom_type == "LineString":
        return LineString(_point_from(c) for c in coords)
    elif geom_type == "Polygon":
        return Polygon(LineString(_point_from(c) for c in ring) for ring in coords)
    elif geom_type == "MultiPoint":
        return MultiPoint(_point_from(c) for c in coords)
    elif geom_type == "MultiLineString":
        return MultiLineString(LineString(_point_from(c) for c in line) for line in coords)
    elif geom_type == "MultiPolygon":
        return MultiPolygon(
            Polygon(LineString(_point_from(c) for c in ring) for ring in poly)
            for poly in coords
        )
    else:
        raise UnknownGeometryTypeError(f"Unsupported geometry type: {geom_type}")


def _num(value: float) -> str:
    return format(value, ".15g")


def _wkt_point(point: Point) -> str:
    return " ".join(_num(v) for v in point.ordinates())


def _wkt_points(points) -> str:
    return ", ".join(_wkt_point(p) for p in points)


def _wkt_part(geometry) -> str:
    """Parenthesised body of a geometry, or EMPTY."""
    if geometry.is_empty:
        return "EMPTY"
    if isinstance(geometry, Point):
        return f"({_wkt_point(geometry)})"
    elif isinstance(geometry, LineString):
        return f"({_wkt_points(geometry.vertices)})"
    elif isinstance(geometry, Polygon):
        parts = [_wkt_part(ring) for ring in geometry.rings]
    elif isinstance(geometry, MultiPoint):
        parts = [_wkt_part(p) for p in geometry.members]
    elif isinstance(geometry, MultiLineString):
        parts = [_wkt_part(line) for line in geometry.lines]
    elif isinstance(geometry, MultiPolygon):
        parts = [_wkt_part(poly) for poly in geometry.polygons]
    else:
        parts = [_wkt(g) for g in geometry.geometries]
    return "(" + ", ".join(parts) + ")"


def _wkt(geometry) -> str:
    name = geometry.geometry_type().name
    dims = geometry.dimensions()
    if dims.has_m and not dims.has_z:
        name += "M"
    if geometry.is_empty:
        return f"{name} EMPTY"
    return name + _wkt_part(geometry)


def to_wkt(value) -> str:
    """
    Convert a geometry to (E)WKT text.

    Args:
        value: Geometry, or an SRID wrapper (rendered as an EWKT SRID prefix)

    Returns:
        WKT string, e.g. 'SRID=4326;POINT(10 -20)'
    """
    geometry, srid = unwrap(value)
    text = _wkt(geometry)
    return f"SRID={srid};{text}" if srid is not None else text
