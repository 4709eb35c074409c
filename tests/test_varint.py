"""Tests for TWKB varints and zigzag encoding."""
import pytest

from postgis_codec.codec.cursor import ByteReader, ByteWriter
from postgis_codec.codec.varint import (
    I64_MAX,
    I64_MIN,
    U64_MAX,
    encode_svarint,
    encode_uvarint,
    read_svarint,
    read_uvarint,
    write_svarint,
    write_uvarint,
    zigzag_decode,
    zigzag_encode,
)
from postgis_codec.errors import TruncatedInputError, VarintOverflowError


@pytest.mark.parametrize("n, expected", [
    (0, 0), (-1, 1), (1, 2), (-2, 3), (2, 4),
    (I64_MAX, U64_MAX - 1), (I64_MIN, U64_MAX),
])
def test_zigzag(n, expected):
    assert zigzag_encode(n) == expected
    assert zigzag_decode(expected) == n


def test_zigzag_rejects_values_outside_int64():
    with pytest.raises(VarintOverflowError):
        zigzag_encode(I64_MAX + 1)


@pytest.mark.parametrize("value, encoded", [
    (0, "00"), (1, "01"), (127, "7f"), (128, "8001"), (300, "ac02"),
    (2000000, "80897a"), (U64_MAX, "ffffffffffffffffff01"),
])
def test_uvarint_bytes(value, encoded):
    assert encode_uvarint(value).hex() == encoded
    assert read_uvarint(ByteReader(bytes.fromhex(encoded))) == value


@pytest.mark.parametrize("n", [0, 1, -1, 63, -64, 64, -65, 10 ** 12, -(10 ** 12), I64_MAX, I64_MIN])
def test_svarint_law(n):
    writer = ByteWriter()
    write_svarint(writer, n)
    assert read_svarint(ByteReader(writer.getvalue())) == n


@pytest.mark.parametrize("u", [0, 1, 127, 128, 16383, 16384, 2 ** 35, U64_MAX])
def test_uvarint_law(u):
    writer = ByteWriter()
    write_uvarint(writer, u)
    assert read_uvarint(ByteReader(writer.getvalue())) == u


def test_small_magnitudes_stay_short():
    assert len(encode_svarint(-64)) == 1
    assert len(encode_svarint(64)) == 2


def test_eleven_byte_varint_overflows():
    with pytest.raises(VarintOverflowError):
        read_uvarint(ByteReader(b"\x80" * 10 + b"\x01"))


def test_varint_beyond_64_bits_overflows():
    with pytest.raises(VarintOverflowError):
        read_uvarint(ByteReader(b"\xff" * 9 + b"\x02"))


def test_truncated_varint():
    with pytest.raises(TruncatedInputError):
        read_uvarint(ByteReader(b"\x80\x80"))


def test_encode_rejects_negative_unsigned():
    with pytest.raises(VarintOverflowError):
        encode_uvarint(-1)
    with pytest.raises(VarintOverflowError):
        encode_uvarint(U64_MAX + 1)
