"""
TWKB (Tiny Well-Known Binary) reader and writer.

Layout:

    [type|precision:1][metadata:1][extended dims:1?][size:uvarint?]
    [bbox:varint*2*dims?][body]

The type byte holds the geometry type code in its low nibble and the
zigzag-encoded decimal precision in its high nibble. Coordinates are integers
scaled by 10**precision and stored as signed varint deltas from the previous
point. One accumulator per dimension runs across the whole geometry, rings and
Multi* members included; GeometryCollection members are complete TWKB
geometries with their own header and accumulators.
"""

import logging
import math
from dataclasses import dataclass
from typing import Iterator, Optional

from ..errors import (
    DimensionMismatchError,
    EncodeError,
    InvalidIdListError,
    MalformedGeometryError,
    PrecisionOutOfRangeError,
    TruncatedInputError,
    UnknownGeometryTypeError,
)
from ..geometry.srid import unwrap
from ..geometry.types import (
    XY,
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
)
from .cursor import ByteReader, ByteWriter
from .varint import (
    I64_MAX,
    I64_MIN,
    encode_uvarint,
    read_svarint,
    read_uvarint,
    write_svarint,
    write_uvarint,
    zigzag_decode,
    zigzag_encode,
)

logger = logging.getLogger(__name__)

# Metadata header bits
TWKB_BBOX = 0x01
TWKB_SIZE = 0x02
TWKB_IDS = 0x04
TWKB_EXTENDED_DIMS = 0x08
TWKB_EMPTY = 0x10

MIN_PRECISION = -8
MAX_PRECISION = 7
MAX_EXTENDED_PRECISION = 7

COLLECTION_TYPES = (
    GeometryType.MULTIPOINT,
    GeometryType.MULTILINESTRING,
    GeometryType.MULTIPOLYGON,
    GeometryType.GEOMETRYCOLLECTION,
)


@dataclass(frozen=True)
class TwkbHeader:
    """Everything in front of a TWKB geometry body."""
    geometry_type: GeometryType
    precision: int
    dims: Dimensions = XY
    z_precision: int = 0
    m_precision: int = 0
    has_bbox: bool = False
    has_size: bool = False
    has_ids: bool = False
    is_empty: bool = False
    size: Optional[int] = None

    def precisions(self) -> tuple:
        """Decimal precision of each present dimension, in X, Y, Z, M order."""
        values = [self.precision, self.precision]
        if self.dims.has_z:
            values.append(self.z_precision)
        if self.dims.has_m:
            values.append(self.m_precision)
        return tuple(values)


@dataclass(frozen=True)
class TwkbGeometry:
    """
    A decoded TWKB geometry with the metadata that travelled with it.

    Passing an instance back to encode_twkb reproduces the same optional
    sections: bbox presence, size presence and the id list. The bbox is
    informational only; the encoder always recomputes it from the points.
    """
    geometry: object
    precision: int = 0
    z_precision: int = 0
    m_precision: int = 0
    bbox: Optional[Envelope] = None
    ids: Optional[tuple] = None
    has_size: bool = False


def _to_float(raw: int, precision: int) -> float:
    if precision >= 0:
        return raw / 10 ** precision
    return float(raw * 10 ** -precision)


def _to_int(value: float, precision: int) -> int:
    if not math.isfinite(value):
        raise PrecisionOutOfRangeError(f"Cannot scale non-finite ordinate {value}")
    scaled = value * 10 ** precision if precision >= 0 else value / 10 ** -precision
    if not math.isfinite(scaled):
        raise PrecisionOutOfRangeError(
            f"Ordinate {value} overflows at precision {precision}"
        )
    # Half away from zero, matching PostGIS lround()
    raw = int(math.copysign(math.floor(abs(scaled) + 0.5), scaled))
    if not I64_MIN <= raw <= I64_MAX:
        raise PrecisionOutOfRangeError(
            f"Ordinate {value} at precision {precision} exceeds int64"
        )
    return raw


def _check_precisions(precision: int, z_precision: int, m_precision: int) -> None:
    if not MIN_PRECISION <= precision <= MAX_PRECISION:
        raise PrecisionOutOfRangeError(
            f"Precision {precision} outside {MIN_PRECISION}..{MAX_PRECISION}"
        )
    for name, value in (("Z", z_precision), ("M", m_precision)):
        if not 0 <= value <= MAX_EXTENDED_PRECISION:
            raise PrecisionOutOfRangeError(
                f"{name} precision {value} outside 0..{MAX_EXTENDED_PRECISION}"
            )


# --- reading -----------------------------------------------------------------

class _DeltaReader:
    """Running per-dimension accumulators for one TWKB geometry."""

    def __init__(self, reader: ByteReader, header: TwkbHeader):
        self.reader = reader
        self.dims = header.dims
        self.precisions = header.precisions()
        self.acc = [0] * len(self.precisions)

    def read_point(self) -> Point:
        values = []
        for i, precision in enumerate(self.precisions):
            self.acc[i] += read_svarint(self.reader)
            if not I64_MIN <= self.acc[i] <= I64_MAX:
                raise PrecisionOutOfRangeError(
                    f"Accumulated coordinate exceeds int64 at offset {self.reader.position}"
                )
            values.append(_to_float(self.acc[i], precision))
        x, y = values[0], values[1]
        z = values[2] if self.dims.has_z else None
        m = values[-1] if self.dims.has_m else None
        return Point(x, y, z, m)

    def read_count(self) -> int:
        count = read_uvarint(self.reader)
        # Every counted item takes at least one byte
        if count > self.reader.remaining:
            raise TruncatedInputError(count, self.reader.position, self.reader.remaining)
        return count

    def read_points(self) -> list[Point]:
        return [self.read_point() for _ in range(self.read_count())]


def read_twkb_header(reader: ByteReader) -> TwkbHeader:
    """
    Read a TWKB header up to (not including) the bounding box.

    Raises:
        UnknownGeometryTypeError: On an unrecognized type code
        InvalidIdListError: If a Point/LineString/Polygon claims an id list
    """
    type_and_precision = reader.read_u8()
    code = type_and_precision & 0x0F
    try:
        geom_type = GeometryType(code)
    except ValueError:
        raise UnknownGeometryTypeError(f"Unsupported TWKB geometry type: {code}") from None
    precision = zigzag_decode(type_and_precision >> 4)

    metadata = reader.read_u8()
    has_ids = bool(metadata & TWKB_IDS)
    if has_ids and geom_type not in COLLECTION_TYPES:
        raise InvalidIdListError(f"TWKB {geom_type.name} cannot carry an id list")

    dims = XY
    z_precision = m_precision = 0
    if metadata & TWKB_EXTENDED_DIMS:
        extended = reader.read_u8()
        dims = Dimensions(bool(extended & 0x01), bool(extended & 0x02))
        z_precision = (extended >> 2) & 0x07
        m_precision = (extended >> 5) & 0x07

    size = None
    if metadata & TWKB_SIZE:
        size = read_uvarint(reader)
        if size > reader.remaining:
            raise TruncatedInputError(size, reader.position, reader.remaining)

    return TwkbHeader(
        geometry_type=geom_type,
        precision=precision,
        dims=dims,
        z_precision=z_precision,
        m_precision=m_precision,
        has_bbox=bool(metadata & TWKB_BBOX),
        has_size=size is not None,
        has_ids=has_ids,
        is_empty=bool(metadata & TWKB_EMPTY),
        size=size,
    )


def _read_bbox(reader: ByteReader, header: TwkbHeader) -> Envelope:
    bounds = []
    for precision in header.precisions():
        low = read_svarint(reader)
        # PostGIS writes the range zigzag-encoded, like the minimum
        extent = read_svarint(reader)
        bounds.append((_to_float(low, precision), _to_float(low + extent, precision)))
    (xmin, xmax), (ymin, ymax) = bounds[0], bounds[1]
    zmin = zmax = mmin = mmax = None
    if header.dims.has_z:
        zmin, zmax = bounds[2]
    if header.dims.has_m:
        mmin, mmax = bounds[-1]
    return Envelope(xmin, ymin, xmax, ymax, zmin, zmax, mmin, mmax)


def _read_ids(deltas: _DeltaReader, header: TwkbHeader, count: int) -> Optional[tuple]:
    if not header.has_ids:
        return None
    return tuple(read_svarint(deltas.reader) for _ in range(count))


def _read_body(reader: ByteReader, header: TwkbHeader):
    """Decode the geometry body; returns (geometry, ids)."""
    geom_type = header.geometry_type
    deltas = _DeltaReader(reader, header)

    if geom_type == GeometryType.POINT:
        return deltas.read_point(), None
    elif geom_type == GeometryType.LINESTRING:
        return LineString(deltas.read_points()), None
    elif geom_type == GeometryType.POLYGON:
        rings = [LineString(deltas.read_points()) for _ in range(deltas.read_count())]
        return Polygon(rings), None

    count = deltas.read_count()
    ids = _read_ids(deltas, header, count)
    if geom_type == GeometryType.MULTIPOINT:
        return MultiPoint(deltas.read_point() for _ in range(count)), ids
    elif geom_type == GeometryType.MULTILINESTRING:
        return MultiLineString(deltas.read_points() for _ in range(count)), ids
    elif geom_type == GeometryType.MULTIPOLYGON:
        polygons = []
        for _ in range(count):
            rings = [LineString(deltas.read_points()) for _ in range(deltas.read_count())]
            polygons.append(Polygon(rings))
        return MultiPolygon(polygons), ids
    elif geom_type == GeometryType.GEOMETRYCOLLECTION:
        members = []
        for _ in range(count):
            member, member_header = _read_twkb(reader)
            if member_header.dims != header.dims:
                raise DimensionMismatchError(
                    f"GEOMETRYCOLLECTION member is {member_header.dims.label}, "
                    f"container is {header.dims.label}"
                )
            members.append(member.geometry)
        return GeometryCollection(members), ids
    raise UnknownGeometryTypeError(f"Unsupported TWKB geometry type: {geom_type}")


def _empty_geometry(header: TwkbHeader):
    if header.geometry_type == GeometryType.POINT:
        return Point.empty(header.dims)
    cls = {
        GeometryType.LINESTRING: LineString,
        GeometryType.POLYGON: Polygon,
        GeometryType.MULTIPOINT: MultiPoint,
        GeometryType.MULTILINESTRING: MultiLineString,
        GeometryType.MULTIPOLYGON: MultiPolygon,
        GeometryType.GEOMETRYCOLLECTION: GeometryCollection,
    }[header.geometry_type]
    return cls()


def read_twkb(reader: ByteReader) -> TwkbGeometry:
    """
    Read exactly one TWKB geometry from a reader.

    Raises:
        TruncatedInputError: If the buffer ends early
        VarintOverflowError: On a varint wider than 64 bits
        UnknownGeometryTypeError: On an unrecognized type code or misplaced id list
        PrecisionOutOfRangeError: If accumulated coordinates overflow int64
        MalformedGeometryError: If the size field disagrees with the body
    """
    value, _ = _read_twkb(reader)
    return value


def _read_twkb(reader: ByteReader):
    header = read_twkb_header(reader)
    start = reader.position
    logger.debug(
        "TWKB %s precision=%d %s size=%s bbox=%s ids=%s empty=%s",
        header.geometry_type.name, header.precision, header.dims.label,
        header.size, header.has_bbox, header.has_ids, header.is_empty,
    )

    bbox = _read_bbox(reader, header) if header.has_bbox else None
    if header.is_empty:
        geometry, ids = _empty_geometry(header), None
    else:
        geometry, ids = _read_body(reader, header)

    if header.has_size and reader.position - start != header.size:
        raise MalformedGeometryError(
            f"TWKB size field says {header.size} byte(s), body used "
            f"{reader.position - start}"
        )

    value = TwkbGeometry(
        geometry=geometry,
        precision=header.precision,
        z_precision=header.z_precision,
        m_precision=header.m_precision,
        bbox=bbox,
        ids=ids,
        has_size=header.has_size,
    )
    return value, header


def skip_twkb(reader: ByteReader) -> TwkbHeader:
    """
    Advance past one TWKB geometry, without decoding the body when the size
    field is present.
    """
    header = read_twkb_header(reader)
    if header.has_size:
        reader.skip(header.size)
    else:
        if header.has_bbox:
            _read_bbox(reader, header)
        if not header.is_empty:
            _read_body(reader, header)
    return header


def decode_twkb(data) -> TwkbGeometry:
    """
    Decode a TWKB buffer holding a single geometry.

    Args:
        data: TWKB bytes, e.g. the result of ST_AsTWKB

    Returns:
        TwkbGeometry with the geometry and its precision, bbox and ids
    """
    reader = ByteReader(data)
    value = read_twkb(reader)
    if reader.remaining:
        raise MalformedGeometryError(
            f"{reader.remaining} trailing byte(s) after TWKB geometry"
        )
    return value


def iter_twkb(data) -> Iterator[TwkbGeometry]:
    """Decode a buffer of back-to-back TWKB geometries."""
    reader = ByteReader(data)
    while reader.remaining:
        yield read_twkb(reader)


# --- writing -----------------------------------------------------------------

class _DeltaWriter:
    """Mirror of _DeltaReader for encoding."""

    def __init__(self, writer: ByteWriter, precisions: tuple):
        self.writer = writer
        self.precisions = precisions
        self.acc = [0] * len(precisions)

    def write_point(self, point: Point) -> None:
        for i, (value, precision) in enumerate(zip(point.ordinates(), self.precisions)):
            raw = _to_int(value, precision)
            delta = raw - self.acc[i]
            if not I64_MIN <= delta <= I64_MAX:
                raise PrecisionOutOfRangeError(
                    f"Coordinate delta {delta} exceeds int64 at precision {precision}"
                )
            write_svarint(self.writer, delta)
            self.acc[i] = raw

    def write_points(self, points) -> None:
        write_uvarint(self.writer, len(points))
        for point in points:
            self.write_point(point)


def _write_bbox(writer: ByteWriter, envelope: Envelope, precisions: tuple) -> None:
    spans = [(envelope.xmin, envelope.xmax), (envelope.ymin, envelope.ymax)]
    if envelope.zmin is not None:
        spans.append((envelope.zmin, envelope.zmax))
    if envelope.mmin is not None:
        spans.append((envelope.mmin, envelope.mmax))
    for (low, high), precision in zip(spans, precisions):
        raw_low = _to_int(low, precision)
        write_svarint(writer, raw_low)
        write_svarint(writer, _to_int(high, precision) - raw_low)


def _write_body(writer: ByteWriter, geometry, precisions: tuple,
                ids: Optional[tuple], options: dict) -> None:
    deltas = _DeltaWriter(writer, precisions)

    if isinstance(geometry, Point):
        deltas.write_point(geometry)
    elif isinstance(geometry, LineString):
        deltas.write_points(geometry.vertices)
    elif isinstance(geometry, Polygon):
        write_uvarint(writer, len(geometry.rings))
        for ring in geometry.rings:
            deltas.write_points(ring.vertices)
    else:
        members = list(geometry)
        write_uvarint(writer, len(members))
        for member_id in ids or ():
            write_svarint(writer, member_id)
        if isinstance(geometry, MultiPoint):
            for point in members:
                deltas.write_point(point)
        elif isinstance(geometry, MultiLineString):
            for line in members:
                deltas.write_points(line.vertices)
        elif isinstance(geometry, MultiPolygon):
            for polygon in members:
                write_uvarint(writer, len(polygon.rings))
                for ring in polygon.rings:
                    deltas.write_points(ring.vertices)
        else:
            for member in members:
                _write_geometry(writer, member, options, bbox=False, size=False, ids=None)


def _write_geometry(writer: ByteWriter, geometry, options: dict, *,
                    bbox: bool, size: bool, ids: Optional[tuple]) -> None:
    precision = options["precision"]
    z_precision = options["z_precision"]
    m_precision = options["m_precision"]
    dims = options["dims"]
    geom_type = geometry.geometry_type()
    empty = geometry.is_empty

    if ids is not None:
        if geom_type not in COLLECTION_TYPES:
            raise InvalidIdListError(f"TWKB {geom_type.name} cannot carry an id list")
        if len(ids) != len(geometry):
            raise EncodeError(
                f"Id list has {len(ids)} entries for {len(geometry)} members"
            )

    header = TwkbHeader(
        geometry_type=geom_type,
        precision=precision,
        dims=dims,
        z_precision=z_precision,
        m_precision=m_precision,
    )
    precisions = header.precisions()

    metadata = 0
    if empty:
        metadata |= TWKB_EMPTY
    envelope = envelope_of(geometry) if bbox and not empty else None
    bbox = envelope is not None
    if bbox:
        metadata |= TWKB_BBOX
    if size:
        metadata |= TWKB_SIZE
    if ids is not None and not empty:
        metadata |= TWKB_IDS
    if dims.has_z or dims.has_m:
        metadata |= TWKB_EXTENDED_DIMS

    writer.write_u8((zigzag_encode(precision) << 4) | int(geom_type))
    writer.write_u8(metadata)
    if metadata & TWKB_EXTENDED_DIMS:
        writer.write_u8(
            int(dims.has_z) | (int(dims.has_m) << 1) | (z_precision << 2) | (m_precision << 5)
        )

    rest = ByteWriter()
    if bbox:
        _write_bbox(rest, envelope, precisions)
    if not empty:
        _write_body(rest, geometry, precisions, ids, options)
    payload = rest.getvalue()

    if size:
        writer.write_bytes(encode_uvarint(len(payload)))
    writer.write_bytes(payload)


def write_twkb(writer: ByteWriter, value, precision: Optional[int] = None, *,
               z_precision: Optional[int] = None, m_precision: Optional[int] = None,
               bbox: Optional[bool] = None, size: Optional[bool] = None,
               ids=None) -> None:
    """Write one TWKB geometry; see encode_twkb for the arguments."""
    if isinstance(value, TwkbGeometry):
        defaults = value
        value = value.geometry
    else:
        defaults = TwkbGeometry(geometry=None)

    geometry, _ = unwrap(value)
    precision = defaults.precision if precision is None else precision
    z_precision = defaults.z_precision if z_precision is None else z_precision
    m_precision = defaults.m_precision if m_precision is None else m_precision
    bbox = defaults.bbox is not None if bbox is None else bbox
    size = defaults.has_size if size is None else size
    ids = defaults.ids if ids is None else tuple(ids)
    _check_precisions(precision, z_precision, m_precision)

    options = {
        "precision": precision,
        "z_precision": z_precision,
        "m_precision": m_precision,
        "dims": geometry.dimensions(),
    }
    _write_geometry(writer, geometry, options, bbox=bbox, size=size, ids=ids)


def encode_twkb(value, precision: Optional[int] = None, *,
                z_precision: Optional[int] = None, m_precision: Optional[int] = None,
                bbox: Optional[bool] = None, size: Optional[bool] = None,
                ids=None) -> bytes:
    """
    Encode a geometry as TWKB.

    Optional sections are emitted only when requested, either through the
    keyword arguments or by passing a TwkbGeometry that carried them. TWKB has
    no SRID, so SRID wrappers are unwrapped and their SRID dropped.

    Args:
        value: Geometry, WithSrid, Tagged or TwkbGeometry
        precision: Decimal digits kept for X/Y (-8..7, default 0)
        z_precision: Decimal digits kept for Z (0..7)
        m_precision: Decimal digits kept for M (0..7)
        bbox: Emit the bounding box (computed from the points)
        size: Emit the body size so readers can skip the geometry
        ids: Per-member ids for Multi*/GeometryCollection values

    Returns:
        TWKB bytes

    Raises:
        PrecisionOutOfRangeError: On unsupported precision or unrepresentable ordinates
        InvalidIdListError: If ids are given for a non-collection type
        DimensionMismatchError: If the geometry mixes Z/M presence
    """
    writer = ByteWriter()
    write_twkb(writer, value, precision, z_precision=z_precision,
               m_precision=m_precision, bbox=bbox, size=size, ids=ids)
    return writer.getvalue()
