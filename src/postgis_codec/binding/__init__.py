# Database driver integration
from .psycopg import (
    GeometryAdapter,
    decode_column,
    decode_twkb_column,
    encode_param,
    encode_twkb_param,
    register_adapters,
    register_geometry,
)

__all__ = [
    "GeometryAdapter",
    "decode_column",
    "decode_twkb_column",
    "encode_param",
    "encode_twkb_param",
    "register_adapters",
    "register_geometry",
]
