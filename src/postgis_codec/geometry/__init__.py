# Geometry model, SRID wrappers and GeoJSON/WKT views
from .types import (
    XY,
    XYM,
    XYZ,
    XYZM,
    Dimensions,
    Envelope,
    GeometryCollection,
    GeometryType,
    LineString,
    MultiLineString,
    MultiPoint,
    MultiPolygon,
    Point,
    Polygon,
    envelope_of,
    iter_points,
)
from .srid import (
    SridTag,
    Tagged,
    Unspecified,
    WebMercator,
    Wgs84,
    WithSrid,
    get_srid,
    srid_tag,
    unwrap,
    with_srid,
)
from .geojson import from_geojson, to_geojson, to_wkt

__all__ = [
    "XY",
    "XYM",
    "XYZ",
    "XYZM",
    "Dimensions",
    "Envelope",
    "GeometryCollection",
    "GeometryType",
    "LineString",
    "MultiLineString",
    "MultiPoint",
    "MultiPolygon",
    "Point",
    "Polygon",
    "envelope_of",
    "iter_points",
    "SridTag",
    "Tagged",
    "Unspecified",
    "WebMercator",
    "WithSrid",
    "Wgs84",
    "get_srid",
    "srid_tag",
    "unwrap",
    "with_srid",
    "from_geojson",
    "to_geojson",
    "to_wkt",
]
