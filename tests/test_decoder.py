"""Tests for the WKB decoder."""

import struct

import pytest

from wkb_reader import (
    LineString,
    MultiLineString,
    MultiPoint,
    MultiPolygon,
    Point,
    Polygon,
    WKBDecoder,
    decode_geometry,
    to_wkb,
)
from wkb_reader.errors import (
    InvalidGeometryError,
    NestedTypeMismatchError,
    TruncatedInputError,
    UnknownGeometryTypeError,
    UnsupportedByteOrderError,
    UnsupportedGeometryTypeError,
)

POINT_1_3 = bytes.fromhex("01" "01000000" "000000000000f03f" "0000000000000840")
MULTIPOINT_2_3 = bytes.fromhex(
    "01" "04000000" "01000000" "01" "01000000" "0000000000000040" "0000000000000840"
)
SQUARE = ((0.0, 0.0), (10.0, 0.0), (10.0, 10.0), (0.0, 10.0), (0.0, 0.0))
HOLE = ((2.0, 2.0), (8.0, 2.0), (8.0, 8.0), (2.0, 8.0), (2.0, 2.0))


def header(type_code: int, byte_order: int = 1) -> bytes:
    return struct.pack("<BI", byte_order, type_code)


class TestDecodePoint:
    def test_point(self):
        geom = decode_geometry(POINT_1_3)
        assert geom == Point(x=1.0, y=3.0)

    def test_point_doubles_follow_header(self):
        buf = header(1) + struct.pack("<dd", -122.4194, 37.7749)
        geom = decode_geometry(buf)
        assert (geom.x, geom.y) == (-122.4194, 37.7749)

    def test_accepts_bytearray_and_memoryview(self):
        assert decode_geometry(bytearray(POINT_1_3)) == Point(1.0, 3.0)
        assert decode_geometry(memoryview(POINT_1_3)) == Point(1.0, 3.0)

    def test_decode_is_pure(self):
        buf = bytearray(POINT_1_3)
        first = decode_geometry(buf)
        second = decode_geometry(buf)
        assert first == second
        assert bytes(buf) == POINT_1_3

    def test_nan_coordinates_pass_through(self):
        buf = header(1) + struct.pack("<dd", float("nan"), float("inf"))
        geom = decode_geometry(buf)
        assert geom.x != geom.x
        assert geom.y == float("inf")


class TestDecodeLineString:
    def test_linestring(self):
        buf = header(2) + struct.pack("<I", 3) + struct.pack("<6d", 0, 0, 1, 1, 2, 2)
        geom = decode_geometry(buf)
        assert isinstance(geom, LineString)
        assert geom.points == ((0.0, 0.0), (1.0, 1.0), (2.0, 2.0))

    def test_empty_linestring_is_accepted(self):
        buf = header(2) + struct.pack("<I", 0)
        geom = decode_geometry(buf)
        assert geom == LineString(points=())

    def test_huge_count_fails_as_truncated(self):
        buf = header(2) + struct.pack("<I", 0xFFFFFFFF) + struct.pack("<dd", 0, 0)
        with pytest.raises(TruncatedInputError):
            decode_geometry(buf)


class TestDecodePolygon:
    def test_polygon_with_hole(self):
        poly = Polygon(rings=(SQUARE, HOLE))
        geom = decode_geometry(to_wkb(poly))
        assert geom == poly
        assert geom.exterior == SQUARE
        assert geom.interiors == (HOLE,)

    def test_unclosed_ring_is_accepted(self):
        ring = ((0.0, 0.0), (1.0, 0.0), (1.0, 1.0))
        geom = decode_geometry(to_wkb(Polygon(rings=(ring,))))
        assert geom.rings == (ring,)

    def test_ring_order_is_kept(self):
        poly = Polygon(rings=(HOLE, SQUARE))
        assert decode_geometry(to_wkb(poly)).exterior == HOLE


class TestDecodeMulti:
    def test_multipoint(self):
        geom = decode_geometry(MULTIPOINT_2_3)
        assert geom == MultiPoint(points=(Point(2.0, 3.0),))

    def test_multilinestring(self):
        mls = MultiLineString(
            lines=(
                LineString(points=((1.0, 3.0), (2.0, 2.0))),
                LineString(points=((1.0, 1.0), (2.0, 1.5))),
            )
        )
        assert decode_geometry(to_wkb(mls)) == mls

    def test_multipolygon(self):
        mpoly = MultiPolygon(
            polygons=(Polygon(rings=(SQUARE, HOLE)), Polygon(rings=(HOLE,)))
        )
        assert decode_geometry(to_wkb(mpoly)) == mpoly

    def test_empty_multipoint(self):
        assert decode_geometry(header(4) + struct.pack("<I", 0)) == MultiPoint(())

    def test_multipoint_with_linestring_member(self):
        member = to_wkb(LineString(points=((0.0, 0.0), (1.0, 1.0))))
        buf = header(4) + struct.pack("<I", 1) + member
        with pytest.raises(NestedTypeMismatchError, match="MultiPoint may contain only Points"):
            decode_geometry(buf)

    def test_multipolygon_with_point_member(self):
        buf = header(6) + struct.pack("<I", 1) + POINT_1_3
        with pytest.raises(NestedTypeMismatchError) as exc:
            decode_geometry(buf)
        assert exc.value.offset == 9

    def test_nested_big_endian_member(self):
        member = header(1, byte_order=0) + struct.pack("<dd", 2.0, 3.0)
        buf = header(4) + struct.pack("<I", 1) + member
        with pytest.raises(UnsupportedByteOrderError):
            decode_geometry(buf)

    def test_nested_geometry_collection(self):
        buf = header(5) + struct.pack("<I", 1) + header(7) + struct.pack("<I", 0)
        with pytest.raises(UnsupportedGeometryTypeError):
            decode_geometry(buf)

    @pytest.mark.parametrize("multi_code", [4, 5, 6])
    @pytest.mark.parametrize("member_code", [0, 9, 1001])
    def test_nested_unknown_type_code(self, multi_code, member_code):
        member = header(member_code) + struct.pack("<dd", 2.0, 3.0)
        buf = header(multi_code) + struct.pack("<I", 1) + member
        with pytest.raises(UnknownGeometryTypeError) as exc:
            decode_geometry(buf)
        assert not isinstance(exc.value, NestedTypeMismatchError)
        assert exc.value.offset == 10


class TestHeaderErrors:
    def test_big_endian(self):
        buf = bytes.fromhex("00" "00000001" "3ff0000000000000" "4008000000000000")
        with pytest.raises(UnsupportedByteOrderError, match="little endian"):
            decode_geometry(buf)

    @pytest.mark.parametrize("flag", [0x00, 0x02, 0xFF])
    def test_any_other_first_byte(self, flag):
        buf = bytes([flag]) + POINT_1_3[1:]
        with pytest.raises(UnsupportedByteOrderError):
            decode_geometry(buf)

    def test_geometry_collection(self):
        buf = header(7) + struct.pack("<I", 0)
        with pytest.raises(UnsupportedGeometryTypeError, match="GeometryCollection"):
            decode_geometry(buf)

    @pytest.mark.parametrize("code", [0, 8, 17, 1001, 0x80000001, 0x20000001])
    def test_unknown_type_code(self, code):
        buf = header(code) + struct.pack("<dd", 1.0, 3.0)
        with pytest.raises(UnknownGeometryTypeError):
            decode_geometry(buf)

    def test_empty_buffer(self):
        with pytest.raises(TruncatedInputError):
            decode_geometry(b"")

    def test_truncated_mid_coordinate(self):
        with pytest.raises(TruncatedInputError) as exc:
            decode_geometry(POINT_1_3[:-3])
        assert exc.value.offset == 5

    def test_truncated_type_code(self):
        with pytest.raises(TruncatedInputError):
            decode_geometry(bytes([0x01, 0x01, 0x00]))


class TestStrictMode:
    def test_trailing_bytes_ignored_by_default(self):
        assert decode_geometry(POINT_1_3 + b"\x00\x00") == Point(1.0, 3.0)

    def test_trailing_bytes_rejected_when_strict(self):
        with pytest.raises(InvalidGeometryError, match="trailing"):
            decode_geometry(POINT_1_3 + b"\x00", strict=True)

    def test_unclosed_ring_rejected_when_strict(self):
        ring = ((0.0, 0.0), (1.0, 0.0), (1.0, 1.0), (0.0, 1.0))
        with pytest.raises(InvalidGeometryError, match="not closed"):
            decode_geometry(to_wkb(Polygon(rings=(ring,))), strict=True)

    def test_short_ring_rejected_when_strict(self):
        ring = ((0.0, 0.0), (1.0, 0.0), (0.0, 0.0))
        with pytest.raises(InvalidGeometryError, match="at least 4"):
            decode_geometry(to_wkb(Polygon(rings=(ring,))), strict=True)

    def test_single_point_line_rejected_when_strict(self):
        decoder = WKBDecoder(strict=True)
        with pytest.raises(InvalidGeometryError):
            decoder.decode(to_wkb(LineString(points=((0.0, 0.0),))))

    def test_valid_polygon_passes_strict(self):
        poly = Polygon(rings=(SQUARE, HOLE))
        assert WKBDecoder(strict=True).decode(to_wkb(poly)) == poly
