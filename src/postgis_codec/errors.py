"""
Exceptions raised by the geometry codecs.

All decode and encode failures derive from GeometryCodecError, which is a
ValueError so callers that already catch ValueError around WKB parsing keep
working.
"""


class GeometryCodecError(ValueError):
    """Base exception for geometry codec errors"""
    pass


class TruncatedInputError(GeometryCodecError):
    """Buffer exhausted before the expected bytes were read"""

    def __init__(self, needed: int, offset: int, available: int):
        self.needed = needed
        self.offset = offset
        self.available = available
        super().__init__(
            f"Truncated input: needed {needed} byte(s) at offset {offset}, "
            f"only {available} available"
        )


class UnknownGeometryTypeError(GeometryCodecError):
    """Unrecognized geometry type code"""
    pass


class InvalidIdListError(UnknownGeometryTypeError):
    """TWKB id list flag set on a geometry type that cannot carry one"""
    pass


class VarintOverflowError(GeometryCodecError):
    """Varint exceeds the representable 64-bit width"""
    pass


class DimensionMismatchError(GeometryCodecError):
    """Inconsistent Z/M presence within one geometry"""
    pass


class PrecisionOutOfRangeError(GeometryCodecError):
    """TWKB precision or scaled coordinate not representable"""
    pass


class MalformedGeometryError(GeometryCodecError):
    """Structurally invalid geometry bytes (bad marker, wrong member type, size mismatch)"""
    pass


class EncodeError(GeometryCodecError):
    """Caller-supplied state that cannot be encoded"""
    pass


class SridMismatchError(GeometryCodecError):
    """Geometry carries a different SRID than the one required"""
    pass


class GeometryTypeMismatchError(GeometryCodecError):
    """Decoded geometry is not of the type the caller expected"""
    pass
