"""
Codec defaults used by the database binding.
"""

from dataclasses import dataclass, fields
from typing import Any, Mapping

from .codec.cursor import ByteOrder
from .errors import EncodeError


@dataclass(frozen=True)
class CodecConfig:
    """
    Settings applied when geometries are sent to or read from PostGIS.

    Attributes:
        byte_order: Byte order of outgoing EWKB
        twkb_precision: Default X/Y decimal precision for TWKB encoding
        twkb_bbox: Emit a bounding box in TWKB output
        twkb_size: Emit the size field in TWKB output
    """
    byte_order: ByteOrder = ByteOrder.LITTLE
    twkb_precision: int = 0
    twkb_bbox: bool = False
    twkb_size: bool = False

    @classmethod
    def from_mapping(cls, settings: Mapping[str, Any]) -> "CodecConfig":
        """
        Build a config from a plain mapping, e.g. application settings.

        Unknown keys are rejected. `byte_order` accepts a ByteOrder, its
        marker value (0/1) or the names "big"/"little".
        """
        known = {f.name for f in fields(cls)}
        unknown = set(settings) - known
        if unknown:
            raise EncodeError(f"Unknown codec setting(s): {', '.join(sorted(unknown))}")

        values = dict(settings)
        if "byte_order" in values:
            values["byte_order"] = _parse_byte_order(values["byte_order"])
        if "twkb_precision" in values:
            values["twkb_precision"] = int(values["twkb_precision"])
        for flag in ("twkb_bbox", "twkb_size"):
            if flag in values:
                values[flag] = bool(values[flag])
        return cls(**values)


def _parse_byte_order(value) -> ByteOrder:
    if isinstance(value, str):
        try:
            return ByteOrder[value.upper()]
        except KeyError:
            raise EncodeError(f"Unknown byte order: {value!r}") from None
    try:
        return ByteOrder(value)
    except ValueError:
        raise EncodeError(f"Unknown byte order: {value!r}") from None


DEFAULT_CONFIG = CodecConfig()
