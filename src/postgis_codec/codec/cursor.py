"""
Byte cursor over WKB buffers.

ByteReader walks an immutable buffer with typed fixed-width reads, ByteWriter
appends the same primitives to a binary stream. Both use the stdlib struct
module; the byte order is chosen once per geometry and applied to every
fixed-width value that follows.
"""

import io
import struct
from enum import IntEnum
from typing import BinaryIO, Optional

from ..errors import EncodeError, MalformedGeometryError, TruncatedInputError


class ByteOrder(IntEnum):
    """WKB byte order marker values."""
    BIG = 0
    LITTLE = 1

    @property
    def prefix(self) -> str:
        """struct format prefix for this byte order."""
        return ">" if self is ByteOrder.BIG else "<"


_FORMATS = {
    "u8": ("B", 1),
    "i32": ("i", 4),
    "u32": ("I", 4),
    "u64": ("Q", 8),
    "f64": ("d", 8),
}


class ByteReader:
    """
    Sequential reader over a bytes-like buffer.

    Args:
        data: Buffer to read (bytes, bytearray or memoryview)
        order: Byte order used by fixed-width reads unless overridden per call
    """

    def __init__(self, data, order: ByteOrder = ByteOrder.LITTLE):
        self._data = bytes(data)
        self._pos = 0
        self.order = order

    @property
    def position(self) -> int:
        return self._pos

    @property
    def remaining(self) -> int:
        return len(self._data) - self._pos

    def _take(self, n: int) -> bytes:
        if n < 0:
            raise MalformedGeometryError(f"Negative read length: {n}")
        if self._pos + n > len(self._data):
            raise TruncatedInputError(n, self._pos, self.remaining)
        chunk = self._data[self._pos:self._pos + n]
        self._pos += n
        return chunk

    def _unpack(self, kind: str, order: Optional[ByteOrder]):
        code, size = _FORMATS[kind]
        prefix = (order if order is not None else self.order).prefix
        return struct.unpack(f"{prefix}{code}", self._take(size))[0]

    def read_u8(self) -> int:
        return self._take(1)[0]

    def read_i32(self, order: Optional[ByteOrder] = None) -> int:
        return self._unpack("i32", order)

    def read_u32(self, order: Optional[ByteOrder] = None) -> int:
        return self._unpack("u32", order)

    def read_u64(self, order: Optional[ByteOrder] = None) -> int:
        return self._unpack("u64", order)

    def read_f64(self, order: Optional[ByteOrder] = None) -> float:
        return self._unpack("f64", order)

    def read_bytes(self, n: int) -> bytes:
        return self._take(n)

    def skip(self, n: int) -> None:
        self._take(n)

    def peek_byte_order(self) -> ByteOrder:
        """
        Look at the next byte as a WKB byte order marker without consuming it.

        Raises:
            TruncatedInputError: If the buffer is exhausted
            MalformedGeometryError: If the byte is neither 0 nor 1
        """
        if self._pos >= len(self._data):
            raise TruncatedInputError(1, self._pos, 0)
        marker = self._data[self._pos]
        if marker not in (ByteOrder.BIG, ByteOrder.LITTLE):
            raise MalformedGeometryError(f"Invalid WKB byte order: {marker}")
        return ByteOrder(marker)

    def read_byte_order(self) -> ByteOrder:
        """Consume a byte order marker and make it the reader's current order."""
        order = self.peek_byte_order()
        self._pos += 1
        self.order = order
        return order


class ByteWriter:
    """
    Sequential writer of WKB primitives.

    Args:
        stream: Binary stream to write to (defaults to an in-memory buffer)
        order: Byte order used by fixed-width writes
    """

    def __init__(self, stream: Optional[BinaryIO] = None,
                 order: ByteOrder = ByteOrder.LITTLE):
        self._stream = stream if stream is not None else io.BytesIO()
        self.order = order

    def _pack(self, kind: str, value, order: Optional[ByteOrder]) -> None:
        code, _ = _FORMATS[kind]
        prefix = (order if order is not None else self.order).prefix
        try:
            packed = struct.pack(f"{prefix}{code}", value)
        except struct.error as e:
            raise EncodeError(f"Value {value!r} does not fit {kind}: {e}") from e
        self._stream.write(packed)

    def write_u8(self, value: int) -> None:
        self._pack("u8", value, None)

    def write_i32(self, value: int, order: Optional[ByteOrder] = None) -> None:
        self._pack("i32", value, order)

    def write_u32(self, value: int, order: Optional[ByteOrder] = None) -> None:
        self._pack("u32", value, order)

    def write_u64(self, value: int, order: Optional[ByteOrder] = None) -> None:
        self._pack("u64", value, order)

    def write_f64(self, value: float, order: Optional[ByteOrder] = None) -> None:
        self._pack("f64", value, order)

    def write_bytes(self, data: bytes) -> None:
        self._stream.write(data)

    def write_byte_order(self) -> None:
        self.write_u8(int(self.order))

    def getvalue(self) -> bytes:
        """Return everything written so far (in-memory streams only)."""
        return self._stream.getvalue()
