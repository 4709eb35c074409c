"""
Variable-length integers used by TWKB.

Unsigned values are little-endian base-128 groups with a continuation bit;
signed values are zigzag-mapped first so small magnitudes of either sign stay
short.
"""

from ..errors import VarintOverflowError
from .cursor import ByteReader, ByteWriter

# A 64-bit value needs at most ten 7-bit groups
MAX_VARINT_BYTES = 10

U64_MAX = (1 << 64) - 1
I64_MIN = -(1 << 63)
I64_MAX = (1 << 63) - 1


def zigzag_encode(n: int) -> int:
    if not I64_MIN <= n <= I64_MAX:
        raise VarintOverflowError(f"Signed varint out of int64 range: {n}")
    return ((n << 1) ^ (n >> 63)) & U64_MAX


def zigzag_decode(u: int) -> int:
    return (u >> 1) ^ -(u & 1)


def read_uvarint(reader: ByteReader) -> int:
    """
    Read an unsigned varint.

    Raises:
        VarintOverflowError: If the value does not fit in 64 bits
        TruncatedInputError: If the buffer ends mid-varint
    """
    result = 0
    for i in range(MAX_VARINT_BYTES):
        b = reader.read_u8()
        result |= (b & 0x7F) << (7 * i)
        if b < 0x80:
            if result > U64_MAX:
                raise VarintOverflowError(
                    f"Varint exceeds 64 bits at offset {reader.position - i - 1}"
                )
            return result
    raise VarintOverflowError(
        f"Varint longer than {MAX_VARINT_BYTES} bytes at offset "
        f"{reader.position - MAX_VARINT_BYTES}"
    )


def read_svarint(reader: ByteReader) -> int:
    return zigzag_decode(read_uvarint(reader))


def encode_uvarint(value: int) -> bytes:
    if not 0 <= value <= U64_MAX:
        raise VarintOverflowError(f"Unsigned varint out of uint64 range: {value}")
    out = bytearray()
    while value >= 0x80:
        out.append((value & 0x7F) | 0x80)
        value >>= 7
    out.append(value)
    return bytes(out)


def encode_svarint(value: int) -> bytes:
    return encode_uvarint(zigzag_encode(value))


def write_uvarint(writer: ByteWriter, value: int) -> None:
    writer.write_bytes(encode_uvarint(value))


def write_svarint(writer: ByteWriter, value: int) -> None:
    writer.write_bytes(encode_svarint(value))
