"""
psycopg2 integration.

Outgoing geometries are adapted to a hex EWKB literal cast to geometry, so they
can be passed as ordinary query parameters:

    register_adapters()
    cur.execute("INSERT INTO roads (geom) VALUES (%s)", (WithSrid(line, 4326),))

Incoming geometry/geography columns are decoded by a typecaster registered
per connection (or cursor):

    register_geometry(conn)
    cur.execute("SELECT geom FROM roads")
    line = cur.fetchone()[0]    # WithSrid(LineString(...), 4326)
"""

import functools
import logging
from typing import Optional, Type

import psycopg2
import psycopg2.extensions
from psycopg2.extensions import ISQLQuote

from ..codec.cursor import ByteOrder
from ..codec.ewkb import decode_ewkb, encode_ewkb, encode_ewkb_hex
from ..codec.twkb import TwkbGeometry, decode_twkb, encode_twkb
from ..config import DEFAULT_CONFIG, CodecConfig
from ..errors import GeometryCodecError, GeometryTypeMismatchError, MalformedGeometryError
from ..geometry.srid import Tagged, WithSrid, unwrap
from ..geometry.types import GEOMETRY_CLASSES

logger = logging.getLogger(__name__)

GEOMETRY_TYPE_NAMES = ("geometry", "geography")


def _as_bytes(raw) -> bytes:
    if isinstance(raw, str):
        # Plain hex (geometry text output) or \x-prefixed bytea hex
        text = raw[2:] if raw.startswith("\\x") else raw
        try:
            return bytes.fromhex(text)
        except ValueError as e:
            raise MalformedGeometryError(f"Invalid hex geometry: {e}") from e
    if isinstance(raw, (bytes, bytearray, memoryview)):
        return bytes(raw)
    raise TypeError(f"Cannot decode geometry from {type(raw).__name__}")


def decode_column(raw, expected: Optional[Type] = None):
    """
    Decode a geometry column value.

    Args:
        raw: EWKB as bytes/memoryview, hex text as returned by PostGIS in
            text mode, or None for SQL NULL
        expected: Optional geometry class the value must be

    Returns:
        Geometry or WithSrid, or None for NULL

    Raises:
        GeometryTypeMismatchError: If `expected` is given and does not match
    """
    if raw is None:
        return None
    value = decode_ewkb(_as_bytes(raw))

    if expected is not None:
        geometry, _ = unwrap(value)
        if not isinstance(geometry, expected):
            raise GeometryTypeMismatchError(
                f"Expected {expected.__name__}, got {type(geometry).__name__}"
            )
    return value


def decode_twkb_column(raw) -> Optional[TwkbGeometry]:
    """Decode an ST_AsTWKB() bytea column; None for SQL NULL."""
    if raw is None:
        return None
    return decode_twkb(_as_bytes(raw))


def encode_param(value, byte_order: ByteOrder = ByteOrder.LITTLE) -> bytes:
    """Encode a geometry as EWKB bytes for a bytea parameter (e.g. ST_GeomFromEWKB(%s))."""
    return encode_ewkb(value, byte_order)


def encode_twkb_param(value, config: CodecConfig = DEFAULT_CONFIG) -> bytes:
    """Encode a geometry as TWKB using the config's precision and sections."""
    return encode_twkb(
        value,
        config.twkb_precision,
        bbox=config.twkb_bbox,
        size=config.twkb_size,
    )


class GeometryAdapter:
    """
    psycopg2 adapter rendering a geometry as `'<hex ewkb>'::geometry`.

    The SRID travels inside the EWKB, so no ST_SetSRID call is needed.
    """

    def __init__(self, value, config: CodecConfig = DEFAULT_CONFIG):
        self.value = value
        self.config = config

    def __conform__(self, protocol):
        if protocol is ISQLQuote:
            return self

    def prepare(self, conn):
        pass

    def getquoted(self) -> bytes:
        hex_ewkb = encode_ewkb_hex(self.value, self.config.byte_order)
        return f"'{hex_ewkb}'::geometry".encode("ascii")

    def __str__(self):
        return self.getquoted().decode("ascii")


def register_adapters(config: Optional[CodecConfig] = None) -> None:
    """
    Register GeometryAdapter for every geometry class and SRID wrapper.

    Registration is process-wide (psycopg2's adapter registry).
    """
    config = config or DEFAULT_CONFIG
    adapter = functools.partial(GeometryAdapter, config=config)
    for cls in GEOMETRY_CLASSES + (WithSrid, Tagged):
        psycopg2.extensions.register_adapter(cls, adapter)
    logger.info("Registered geometry adapters (byte order %s)", config.byte_order.name)


def _cast_geometry(value, cur):
    try:
        return decode_column(value)
    except GeometryCodecError as e:
        raise psycopg2.DataError(f"Cannot decode geometry: {e}") from e


def register_geometry(conn_or_cursor, names=GEOMETRY_TYPE_NAMES) -> dict[str, int]:
    """
    Register a typecaster decoding PostGIS geometry columns.

    Args:
        conn_or_cursor: psycopg2 connection or cursor to register on
        names: PostGIS type names to decode

    Returns:
        Mapping of type name to the OID that was registered

    Raises:
        psycopg2.ProgrammingError: If none of the types exist (PostGIS missing)
    """
    if isinstance(conn_or_cursor, psycopg2.extensions.cursor):
        cur = conn_or_cursor
        close = False
    else:
        cur = conn_or_cursor.cursor()
        close = True

    try:
        cur.execute(
            "SELECT typname, oid FROM pg_type WHERE typname = ANY(%s)",
            (list(names),),
        )
        oids = {name: oid for name, oid in cur.fetchall()}
    finally:
        if close:
            cur.close()

    if not oids:
        raise psycopg2.ProgrammingError(
            f"PostGIS types not found: {', '.join(names)}. "
            "Is the postgis extension installed?"
        )

    caster = psycopg2.extensions.new_type(tuple(oids.values()), "GEOMETRY", _cast_geometry)
    psycopg2.extensions.register_type(caster, conn_or_cursor)
    logger.info("Registered geometry typecaster for %s", ", ".join(
        f"{name} (oid {oid})" for name, oid in sorted(oids.items())
    ))
    return oids
