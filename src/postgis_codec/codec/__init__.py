# Wire format codecs
from .cursor import ByteOrder, ByteReader, ByteWriter
from .ewkb import decode_ewkb, decode_ewkb_hex, encode_ewkb, encode_ewkb_hex, read_ewkb, write_ewkb
from .twkb import (
    TwkbGeometry,
    TwkbHeader,
    decode_twkb,
    encode_twkb,
    iter_twkb,
    read_twkb,
    read_twkb_header,
    skip_twkb,
    write_twkb,
)

__all__ = [
    "ByteOrder",
    "ByteReader",
    "ByteWriter",
    "decode_ewkb",
    "decode_ewkb_hex",
    "encode_ewkb",
    "encode_ewkb_hex",
    "read_ewkb",
    "write_ewkb",
    "TwkbGeometry",
    "TwkbHeader",
    "decode_twkb",
    "encode_twkb",
    "iter_twkb",
    "read_twkb",
    "read_twkb_header",
    "skip_twkb",
    "write_twkb",
]
