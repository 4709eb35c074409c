"""
EWKB (PostGIS Extended Well-Known Binary) reader and writer.

Layout of every (sub-)geometry:

    [byte order:1][type|flags:4][SRID:4, if flagged][body]

Flag bits in the type word: 0x80000000 Z, 0x40000000 M, 0x20000000 SRID.
The low byte is the geometry type code. ISO WKB dimension codes (1000 Z,
2000 M, 3000 ZM added to the type code) are accepted on input as well.
Multi* and GeometryCollection members are complete sub-geometries with their
own header.
"""

import logging
from typing import Optional

from ..errors import (
    DimensionMismatchError,
    EncodeError,
    MalformedGeometryError,
    TruncatedInputError,
    UnknownGeometryTypeError,
)
from ..geometry.srid import WithSrid, unwrap
from ..geometry.types import (
    Dimensions,
    GeometryCollection,
    GeometryType,
    LineString,
    MultiLineString,
    MultiPoint,
    MultiPolygon,
    Point,
    Polygon,
)
from .cursor import ByteOrder, ByteReader, ByteWriter

logger = logging.getLogger(__name__)

# Type word flags
EWKB_Z = 0x80000000
EWKB_M = 0x40000000
EWKB_SRID = 0x20000000
EWKB_FLAGS = EWKB_Z | EWKB_M | EWKB_SRID
TYPE_MASK = 0xFF

# Member type expected inside each Multi* container
MEMBER_TYPES = {
    GeometryType.MULTIPOINT: GeometryType.POINT,
    GeometryType.MULTILINESTRING: GeometryType.LINESTRING,
    GeometryType.MULTIPOLYGON: GeometryType.POLYGON,
}


def _parse_type_word(word: int) -> tuple[GeometryType, Dimensions, bool]:
    """Split a type word into (geometry type, dimensions, has SRID)."""
    has_srid = bool(word & EWKB_SRID)
    has_z = bool(word & EWKB_Z)
    has_m = bool(word & EWKB_M)
    code = word & ~EWKB_FLAGS

    # ISO WKB: 1001 = PointZ, 2001 = PointM, 3001 = PointZM
    if 1000 <= code < 4000:
        iso_dims, code = divmod(code, 1000)
        has_z = has_z or iso_dims in (1, 3)
        has_m = has_m or iso_dims in (2, 3)
    elif code > TYPE_MASK:
        raise UnknownGeometryTypeError(f"Unsupported geometry type: {word:#010x}")

    try:
        geom_type = GeometryType(code & TYPE_MASK)
    except ValueError:
        raise UnknownGeometryTypeError(f"Unsupported geometry type: {code}") from None
    return geom_type, Dimensions(has_z, has_m), has_srid


def type_word(geom_type: GeometryType, dims: Dimensions, has_srid: bool = False) -> int:
    word = int(geom_type)
    if dims.has_z:
        word |= EWKB_Z
    if dims.has_m:
        word |= EWKB_M
    if has_srid:
        word |= EWKB_SRID
    return word


# --- reading -----------------------------------------------------------------

def _read_header(reader: ByteReader) -> tuple[GeometryType, Dimensions, Optional[int]]:
    reader.read_byte_order()
    geom_type, dims, has_srid = _parse_type_word(reader.read_u32())
    srid = reader.read_i32() if has_srid else None
    return geom_type, dims, srid


def _read_point(reader: ByteReader, dims: Dimensions) -> Point:
    x = reader.read_f64()
    y = reader.read_f64()
    z = reader.read_f64() if dims.has_z else None
    m = reader.read_f64() if dims.has_m else None
    return Point(x, y, z, m)


def _read_points(reader: ByteReader, dims: Dimensions) -> list[Point]:
    count = reader.read_u32()
    needed = count * dims.count * 8
    if needed > reader.remaining:
        raise TruncatedInputError(needed, reader.position, reader.remaining)
    return [_read_point(reader, dims) for _ in range(count)]


def _read_polygon(reader: ByteReader, dims: Dimensions) -> Polygon:
    num_rings = reader.read_u32()
    return Polygon(LineString(_read_points(reader, dims)) for _ in range(num_rings))


def _read_member(reader: ByteReader, parent_type: GeometryType, dims: Dimensions):
    """Read one complete sub-geometry and check it against its container."""
    geom_type, member_dims, _ = _read_header(reader)
    if member_dims != dims:
        raise DimensionMismatchError(
            f"{parent_type.name} member is {member_dims.label}, container is {dims.label}"
        )
    expected = MEMBER_TYPES.get(parent_type)
    if expected is not None and geom_type != expected:
        raise MalformedGeometryError(
            f"{parent_type.name} cannot contain {geom_type.name}"
        )
    return _read_body(reader, geom_type, dims)


def _read_body(reader: ByteReader, geom_type: GeometryType, dims: Dimensions):
    if geom_type == GeometryType.POINT:
        return _read_point(reader, dims)
    elif geom_type == GeometryType.LINESTRING:
        return LineString(_read_points(reader, dims))
    elif geom_type == GeometryType.POLYGON:
        return _read_polygon(reader, dims)

    num_geoms = reader.read_u32()
    members = [_read_member(reader, geom_type, dims) for _ in range(num_geoms)]
    if geom_type == GeometryType.MULTIPOINT:
        return MultiPoint(members)
    elif geom_type == GeometryType.MULTILINESTRING:
        return MultiLineString(members)
    elif geom_type == GeometryType.MULTIPOLYGON:
        return MultiPolygon(members)
    elif geom_type == GeometryType.GEOMETRYCOLLECTION:
        return GeometryCollection(members)
    raise UnknownGeometryTypeError(f"Unsupported geometry type: {geom_type}")


def read_ewkb(reader: ByteReader):
    """
    Read exactly one EWKB geometry from a reader.

    Returns:
        The geometry, wrapped in WithSrid if the SRID flag was set
    """
    geom_type, dims, srid = _read_header(reader)
    logger.debug("EWKB %s %s srid=%s", geom_type.name, dims.label, srid)
    geometry = _read_body(reader, geom_type, dims)
    return WithSrid(geometry, srid) if srid is not None else geometry


def decode_ewkb(data):
    """
    Decode an EWKB buffer.

    Args:
        data: EWKB bytes (either byte order)

    Returns:
        Geometry, or WithSrid when the buffer carries an SRID

    Raises:
        TruncatedInputError: If the buffer ends early
        UnknownGeometryTypeError: On an unrecognized type code
        DimensionMismatchError: If a member's Z/M flags differ from its container
        MalformedGeometryError: On a bad byte order marker, wrong member type or
            trailing bytes
    """
    reader = ByteReader(data)
    value = read_ewkb(reader)
    if reader.remaining:
        raise MalformedGeometryError(
            f"{reader.remaining} trailing byte(s) after EWKB geometry"
        )
    return value


def decode_ewkb_hex(text: str):
    """Decode hex-encoded EWKB, as returned by PostGIS in text mode."""
    try:
        data = bytes.fromhex(text)
    except ValueError as e:
        raise MalformedGeometryError(f"Invalid EWKB hex: {e}") from e
    return decode_ewkb(data)


# --- writing -----------------------------------------------------------------

def _write_point(writer: ByteWriter, point: Point) -> None:
    for value in point.ordinates():
        writer.write_f64(value)


def _write_points(writer: ByteWriter, points) -> None:
    writer.write_u32(len(points))
    for point in points:
        _write_point(writer, point)


def _write_geometry(writer: ByteWriter, geometry, dims: Dimensions,
                    srid: Optional[int]) -> None:
    geom_type = geometry.geometry_type()
    writer.write_byte_order()
    writer.write_u32(type_word(geom_type, dims, srid is not None))
    if srid is not None:
        writer.write_i32(srid)

    if isinstance(geometry, Point):
        point = geometry if not geometry.is_empty else Point.empty(dims)
        _write_point(writer, point)
    elif isinstance(geometry, LineString):
        _write_points(writer, geometry.vertices)
    elif isinstance(geometry, Polygon):
        writer.write_u32(len(geometry.rings))
        for ring in geometry.rings:
            _write_points(writer, ring.vertices)
    else:
        members = list(geometry)
        writer.write_u32(len(members))
        for member in members:
            _write_geometry(writer, member, dims, None)


def write_ewkb(writer: ByteWriter, value) -> None:
    """Write a geometry (optionally SRID-wrapped) as EWKB."""
    geometry, srid = unwrap(value)
    if srid is not None and not -(1 << 31) <= srid < (1 << 31):
        raise EncodeError(f"SRID out of int32 range: {srid}")
    dims = geometry.dimensions()
    _write_geometry(writer, geometry, dims, srid)


def encode_ewkb(value, byte_order: ByteOrder = ByteOrder.LITTLE) -> bytes:
    """
    Encode a geometry as EWKB.

    Args:
        value: Geometry, WithSrid or Tagged
        byte_order: Byte order for every fixed-width value

    Returns:
        EWKB bytes

    Raises:
        DimensionMismatchError: If the geometry mixes Z/M presence
        EncodeError: If the SRID does not fit in 32 bits
    """
    writer = ByteWriter(order=byte_order)
    write_ewkb(writer, value)
    return writer.getvalue()


def encode_ewkb_hex(value, byte_order: ByteOrder = ByteOrder.LITTLE) -> str:
    """Encode as upper-case hex EWKB (the form ST_AsEWKB output is shown in)."""
    return encode_ewkb(value, byte_order).hex().upper()
