"""
PostGIS geometry codecs.

EWKB and TWKB encoding/decoding, an immutable geometry model with SRID
wrappers, the WGS84/GCJ02 offset transform and psycopg2 integration.
"""

from .codec import (
    ByteOrder,
    TwkbGeometry,
    decode_ewkb,
    decode_ewkb_hex,
    decode_twkb,
    encode_ewkb,
    encode_ewkb_hex,
    encode_twkb,
)
from .config import CodecConfig
from .errors import (
    DimensionMismatchError,
    EncodeError,
    GeometryCodecError,
    GeometryTypeMismatchError,
    InvalidIdListError,
    MalformedGeometryError,
    PrecisionOutOfRangeError,
    SridMismatchError,
    TruncatedInputError,
    UnknownGeometryTypeError,
    VarintOverflowError,
)
from .geometry import (
    GeometryCollection,
    GeometryType,
    LineString,
    MultiLineString,
    MultiPoint,
    MultiPolygon,
    Point,
    Polygon,
    Tagged,
    WebMercator,
    Wgs84,
    WithSrid,
    get_srid,
    with_srid,
)
from .transform import gcj02_to_wgs84, wgs84_to_gcj02

__version__ = "0.1.0"

__all__ = [
    "ByteOrder",
    "TwkbGeometry",
    "decode_ewkb",
    "decode_ewkb_hex",
    "decode_twkb",
    "encode_ewkb",
    "encode_ewkb_hex",
    "encode_twkb",
    "CodecConfig",
    "DimensionMismatchError",
    "EncodeError",
    "GeometryCodecError",
    "GeometryTypeMismatchError",
    "InvalidIdListError",
    "MalformedGeometryError",
    "PrecisionOutOfRangeError",
    "SridMismatchError",
    "TruncatedInputError",
    "UnknownGeometryTypeError",
    "VarintOverflowError",
    "GeometryCollection",
    "GeometryType",
    "LineString",
    "MultiLineString",
    "MultiPoint",
    "MultiPolygon",
    "Point",
    "Polygon",
    "Tagged",
    "WebMercator",
    "Wgs84",
    "WithSrid",
    "get_srid",
    "with_srid",
    "gcj02_to_wgs84",
    "wgs84_to_gcj02",
]
