"""Tests for the EWKB codec."""
import pytest

from postgis_codec.codec.cursor import ByteOrder, ByteReader
from postgis_codec.codec.ewkb import (
    decode_ewkb,
    decode_ewkb_hex,
    encode_ewkb,
    encode_ewkb_hex,
    read_ewkb,
)
from postgis_codec.errors import (
    DimensionMismatchError,
    EncodeError,
    MalformedGeometryError,
    TruncatedInputError,
    UnknownGeometryTypeError,
)
from postgis_codec.geometry.srid import Tagged, Unspecified, Wgs84, WithSrid
from postgis_codec.geometry.types import (
    GeometryCollection,
    LineString,
    MultiLineString,
    MultiPoint,
    Point,
    Polygon,
)

ZERO = "0000000000000000"
TWO = "0000000000000040"

POINT_1_2 = "0101000000000000000000F03F0000000000000040"
POINT = "0101000000000000000000244000000000000034C0"
POINT_BE = "00000000014024000000000000C034000000000000"
POINT_Z = "0101000080000000000000244000000000000034C00000000000005940"
POINT_M = "0101000040000000000000244000000000000034C0000000000000F03F"
POINT_ZM = "01010000C0000000000000244000000000000034C00000000000005940000000000000F03F"
POINT_ISO_Z = "01E9030000000000000000244000000000000034C00000000000005940"
POINT_SRID = "0101000020E6100000000000000000244000000000000034C0"
LINE = "010200000002000000000000000000244000000000000034C00000000000000000000000000000E0BF"
LINE_Z_SRID = (
    "01020000A0E610000002000000000000000000244000000000000034C00000000000005940"
    "0000000000000000000000000000E0BF0000000000405940"
)
EMPTY_LINE = "010200000000000000"
POLYGON_SRID = (
    "0103000020E61000000100000005000000"
    + ZERO + ZERO + TWO + ZERO + TWO + TWO + ZERO + TWO + ZERO + ZERO
)
MULTIPOINT_Z_SRID = (
    "01040000A0E610000002000000"
    "0101000080000000000000244000000000000034C00000000000005940"
    "01010000800000000000000000000000000000E0BF0000000000405940"
)
MULTILINE_SRID = (
    "0105000020E610000002000000"
    "010200000002000000000000000000244000000000000034C00000000000000000000000000000E0BF"
    "0102000000020000000000000000000000000000000000000000000000000000400000000000000000"
)
COLLECTION = (
    "010700000003000000"
    "010100000000000000000024400000000000002440"
    "01010000000000000000003E400000000000003E40"
    "0102000000020000000000000000002E400000000000002E4000000000000034400000000000003440"
)
NESTED_EMPTY_Z = (
    "010700008002000000"
    "0101000080000000000000F03F00000000000000400000000000000840"
    "010700008001000000"
    "010200008000000000"
)


def _decode(hex_text):
    return decode_ewkb(bytes.fromhex(hex_text))


class TestDecode:
    def test_point(self):
        assert _decode(POINT_1_2) == Point(1.0, 2.0)
        assert _decode(POINT) == Point(10, -20)

    def test_big_endian_point(self):
        assert _decode(POINT_BE) == Point(10, -20)

    @pytest.mark.parametrize("hex_text, expected", [
        (POINT_Z, Point(10, -20, 100)),
        (POINT_M, Point(10, -20, m=1)),
        (POINT_ZM, Point(10, -20, 100, 1)),
        (POINT_ISO_Z, Point(10, -20, 100)),
    ])
    def test_point_dimensions(self, hex_text, expected):
        assert _decode(hex_text) == expected

    def test_srid_point(self):
        assert _decode(POINT_SRID) == WithSrid(Point(10, -20), 4326)

    def test_line(self):
        assert _decode(LINE) == LineString([(10, -20), (0, -0.5)])

    def test_line_z_with_srid(self):
        assert _decode(LINE_Z_SRID) == WithSrid(
            LineString([(10, -20, 100), (0, -0.5, 101)]), 4326
        )

    def test_empty_line(self):
        line = _decode(EMPTY_LINE)
        assert line == LineString()
        assert list(line.points()) == []

    def test_empty_point(self):
        point = decode_ewkb_hex("0101000000000000000000F87F000000000000F87F")
        assert point.is_empty

    def test_polygon(self):
        value = _decode(POLYGON_SRID)
        assert value.srid == 4326
        assert value.geometry == Polygon([[(0, 0), (2, 0), (2, 2), (0, 2), (0, 0)]])

    def test_multipoint_members_keep_z(self):
        value = _decode(MULTIPOINT_Z_SRID)
        assert value == WithSrid(MultiPoint([(10, -20, 100), (0, -0.5, 101)]), 4326)

    def test_multilinestring(self):
        value = _decode(MULTILINE_SRID)
        assert value.geometry == MultiLineString([[(10, -20), (0, -0.5)], [(0, 0), (2, 0)]])

    def test_geometry_collection(self):
        assert _decode(COLLECTION) == GeometryCollection([
            Point(10, 10),
            Point(30, 30),
            LineString([(15, 15), (20, 20)]),
        ])

    def test_members_may_switch_byte_order(self):
        data = "000000000400000001" + POINT
        assert _decode(data) == MultiPoint([Point(10, -20)])

    def test_read_ewkb_consumes_one_geometry(self):
        reader = ByteReader(bytes.fromhex(POINT + LINE))
        assert read_ewkb(reader) == Point(10, -20)
        assert read_ewkb(reader) == LineString([(10, -20), (0, -0.5)])
        assert reader.remaining == 0

    def test_hex_is_case_insensitive(self):
        assert decode_ewkb_hex(POINT.lower()) == Point(10, -20)


class TestDecodeErrors:
    def test_invalid_byte_order(self):
        with pytest.raises(MalformedGeometryError):
            _decode("02" + POINT[2:])

    def test_unknown_type(self):
        with pytest.raises(UnknownGeometryTypeError):
            _decode("0109000000")
        with pytest.raises(UnknownGeometryTypeError):
            _decode("0100000000")

    def test_wrong_member_type(self):
        member = "010200000001000000000000000000244000000000000034C0"
        with pytest.raises(MalformedGeometryError):
            _decode("010400000001000000" + member)

    def test_member_dimension_mismatch(self):
        with pytest.raises(DimensionMismatchError):
            _decode("010400000001000000" + POINT_Z)

    def test_trailing_bytes(self):
        with pytest.raises(MalformedGeometryError):
            _decode(POINT + "00")

    def test_invalid_hex(self):
        with pytest.raises(MalformedGeometryError):
            decode_ewkb_hex("01zz")

    def test_huge_point_count_is_truncated_not_allocated(self):
        with pytest.raises(TruncatedInputError):
            _decode("0102000000FFFFFFFF")

    @pytest.mark.parametrize("hex_text", [
        POINT, POINT_SRID, LINE_Z_SRID, POLYGON_SRID, MULTIPOINT_Z_SRID, COLLECTION,
    ])
    def test_truncation_anywhere_is_reported(self, hex_text):
        data = bytes.fromhex(hex_text)
        for cut in range(len(data)):
            with pytest.raises(TruncatedInputError):
                decode_ewkb(data[:cut])


class TestEncode:
    @pytest.mark.parametrize("value, expected", [
        (Point(1.0, 2.0), POINT_1_2),
        (Point(10, -20), POINT),
        (Point(10, -20, 100), POINT_Z),
        (Point(10, -20, m=1), POINT_M),
        (Point(10, -20, 100, 1), POINT_ZM),
        (WithSrid(Point(10, -20), 4326), POINT_SRID),
        (LineString([(10, -20), (0, -0.5)]), LINE),
        (WithSrid(LineString([(10, -20, 100), (0, -0.5, 101)]), 4326), LINE_Z_SRID),
        (LineString(), EMPTY_LINE),
        (WithSrid(MultiPoint([(10, -20, 100), (0, -0.5, 101)]), 4326), MULTIPOINT_Z_SRID),
        (WithSrid(MultiLineString([[(10, -20), (0, -0.5)], [(0, 0), (2, 0)]]), 4326),
         MULTILINE_SRID),
    ])
    def test_known_vectors(self, value, expected):
        assert encode_ewkb_hex(value) == expected

    def test_point_is_21_bytes(self):
        assert len(encode_ewkb(Point(1.0, 2.0))) == 21

    def test_big_endian(self):
        assert encode_ewkb_hex(Point(10, -20), ByteOrder.BIG) == POINT_BE

    def test_tagged_value_emits_srid(self):
        assert encode_ewkb_hex(Tagged(Wgs84, Point(10, -20))) == POINT_SRID
        assert encode_ewkb_hex(Tagged(Unspecified, Point(10, -20))) == POINT

    def test_empty_point_round_trips(self):
        assert decode_ewkb(encode_ewkb(Point.empty())).is_empty

    def test_srid_out_of_range(self):
        with pytest.raises(EncodeError):
            encode_ewkb(WithSrid(Point(0, 0), 2 ** 31))

    def test_mixed_dimensions(self):
        with pytest.raises(DimensionMismatchError):
            encode_ewkb(LineString([(0, 0), (1, 1, 1)]))

    def test_collection_with_pointless_member(self):
        gc = GeometryCollection([Point(1, 2, 3), GeometryCollection([LineString()])])
        data = encode_ewkb(gc)
        assert decode_ewkb(data) == gc
        assert encode_ewkb(decode_ewkb(data)) == data

    def test_decoded_pointless_member_reencodes(self):
        assert encode_ewkb_hex(decode_ewkb_hex(NESTED_EMPTY_Z)) == NESTED_EMPTY_Z

    def test_round_trip_is_byte_exact(self, sample_geometries):
        for geom in sample_geometries:
            for order in ByteOrder:
                data = encode_ewkb(geom, order)
                assert encode_ewkb(decode_ewkb(data), order) == data
                assert decode_ewkb(data) == geom

    def test_srid_round_trip(self, sample_geometries):
        for geom in sample_geometries:
            wrapped = WithSrid(geom, 3857)
            assert decode_ewkb(encode_ewkb(wrapped)) == wrapped
