"""
WKB geometry decoder.

Decodes OGC Well-Known Binary into the immutable geometry classes of this
package. Only the little-endian 2D encoding of the six simple feature types is
supported.

Buffer Structure:
    - Byte 0: Byte order flag (must be 0x01)
    - Bytes 1-4: Type code (uint32, 1-6)
    - Bytes 5+: Body, depending on type:
        Point:           x, y
        LineString:      point count, then points
        Polygon:         ring count, then per ring a point count and points
        Multi*:          member count, then each member as a full WKB geometry
                         (own byte order flag and type code)
"""

import logging
from collections.abc import Callable
from typing import Any

from .cursor import (
    ByteCursor,
    ByteOrder,
    read_byte_order,
    read_coordinate,
    read_count,
    read_type_code,
)
from .errors import (
    InvalidGeometryError,
    NestedTypeMismatchError,
    UnknownGeometryTypeError,
    UnsupportedByteOrderError,
    UnsupportedGeometryTypeError,
)
from .geometry import (
    Coordinate,
    Geometry,
    GeometryType,
    LinearRing,
    LineString,
    MultiLineString,
    MultiPoint,
    MultiPolygon,
    Point,
    Polygon,
)

logger = logging.getLogger(__name__)

# Bytes per encoded 2D coordinate
COORD_SIZE = 16

# Simple type required for the members of each multi type
MEMBER_TYPES = {
    GeometryType.MULTIPOINT: GeometryType.POINT,
    GeometryType.MULTILINESTRING: GeometryType.LINESTRING,
    GeometryType.MULTIPOLYGON: GeometryType.POLYGON,
}


def read_points(cursor: ByteCursor, count: int) -> tuple[Coordinate, ...]:
    """Read count coordinates in order"""
    cursor.require(count * COORD_SIZE)
    return tuple(read_coordinate(cursor) for _ in range(count))


def read_rings(cursor: ByteCursor, count: int) -> tuple[LinearRing, ...]:
    """Read count rings, each a point count followed by its points"""
    # A ring needs at least its own 4-byte point count
    cursor.require(count * 4)
    return tuple(read_points(cursor, read_count(cursor)) for _ in range(count))


def read_header(cursor: ByteCursor) -> GeometryType:
    """
    Read and validate a byte order flag and type code.

    Raises:
        UnsupportedByteOrderError: If the flag is not little endian
        UnsupportedGeometryTypeError: For GeometryCollection
        UnknownGeometryTypeError: For any code outside 1-7
    """
    offset = cursor.position
    byte_order = read_byte_order(cursor)
    if byte_order != ByteOrder.LITTLE_ENDIAN:
        if byte_order == ByteOrder.BIG_ENDIAN:
            message = "Only little endian WKB is supported"
        else:
            message = f"Invalid WKB byte order flag: 0x{byte_order:02x}"
        raise UnsupportedByteOrderError(message, offset=offset)

    offset = cursor.position
    code = read_type_code(cursor)
    try:
        geom_type = GeometryType(code)
    except ValueError:
        raise UnknownGeometryTypeError(
            f"Unknown WKB geometry type code {code}; supported types are Point, "
            "LineString, Polygon, MultiPoint, MultiLineString, and MultiPolygon",
            offset=offset,
        ) from None

    if geom_type == GeometryType.GEOMETRYCOLLECTION:
        raise UnsupportedGeometryTypeError(
            "GeometryCollection is not a supported geometry type", offset=offset
        )
    return geom_type


class WKBDecoder:
    """
    Decoder for little-endian 2D WKB geometries.

    The decoder holds no per-buffer state: each call to decode() creates its
    own cursor, so one instance can be shared between threads.

    By default malformed-but-parseable input is accepted as the bytes say
    (empty line strings, unclosed rings, trailing bytes). With strict=True
    those conditions raise InvalidGeometryError.

    Example:
        >>> decoder = WKBDecoder()
        >>> geom = decoder.decode(bytes.fromhex(
        ...     "0101000000000000000000f03f0000000000000840"))
        >>> print(geom.wkt)
        POINT (1.0 3.0)
    """

    def __init__(self, strict: bool = False):
        """
        Initialize the decoder.

        Args:
            strict: Enforce geometry validity (closed rings, minimum point
                    counts, no trailing bytes)
        """
        self.strict = strict

    def decode(self, buffer: bytes | bytearray | memoryview) -> Geometry:
        """
        Decode one WKB buffer to a geometry object.

        Args:
            buffer: The raw WKB bytes

        Returns:
            A Point, LineString, Polygon, MultiPoint, MultiLineString, or
            MultiPolygon

        Raises:
            WKBError: If the buffer is malformed or unsupported
        """
        cursor = ByteCursor(buffer)
        geom_type = read_header(cursor)
        geom = self._read_body(cursor, geom_type)

        if cursor.remaining:
            if self.strict:
                raise InvalidGeometryError(
                    f"{cursor.remaining} trailing bytes after {geom_type.label}",
                    offset=cursor.position,
                )
            logger.debug(
                "Ignoring %d trailing bytes after %s",
                cursor.remaining,
                geom_type.label,
            )
        return geom

    def _read_body(self, cursor: ByteCursor, geom_type: GeometryType) -> Geometry:
        if geom_type == GeometryType.POINT:
            return self._read_point(cursor)
        if geom_type == GeometryType.LINESTRING:
            return self._read_linestring(cursor)
        if geom_type == GeometryType.POLYGON:
            return self._read_polygon(cursor)
        if geom_type == GeometryType.MULTIPOINT:
            return MultiPoint(
                points=self._read_members(cursor, geom_type, self._read_point)
            )
        if geom_type == GeometryType.MULTILINESTRING:
            return MultiLineString(
                lines=self._read_members(cursor, geom_type, self._read_linestring)
            )
        # read_header has already rejected everything but MultiPolygon
        assert geom_type == GeometryType.MULTIPOLYGON
        return MultiPolygon(
            polygons=self._read_members(cursor, geom_type, self._read_polygon)
        )

    def _read_point(self, cursor: ByteCursor) -> Point:
        x, y = read_coordinate(cursor)
        return Point(x=x, y=y)

    def _read_linestring(self, cursor: ByteCursor) -> LineString:
        offset = cursor.position
        points = read_points(cursor, read_count(cursor))
        if self.strict and len(points) < 2:
            raise InvalidGeometryError(
                f"LineString has {len(points)} points, at least 2 required",
                offset=offset,
            )
        return LineString(points=points)

    def _read_polygon(self, cursor: ByteCursor) -> Polygon:
        offset = cursor.position
        rings = read_rings(cursor, read_count(cursor))
        if self.strict:
            for i, ring in enumerate(rings):
                if len(ring) < 4:
                    raise InvalidGeometryError(
                        f"Ring {i} has {len(ring)} points, at least 4 required",
                        offset=offset,
                    )
                if ring[0] != ring[-1]:
                    raise InvalidGeometryError(f"Ring {i} is not closed", offset=offset)
        return Polygon(rings=rings)

    def _read_members(
        self,
        cursor: ByteCursor,
        multi_type: GeometryType,
        read_member: Callable[[ByteCursor], Geometry],
    ) -> tuple[Any, ...]:
        """Read a member count, then that many headered simple geometries"""
        expected = MEMBER_TYPES[multi_type]
        count = read_count(cursor)
        # Each member carries at least a 5-byte header
        cursor.require(count * 5)

        members = []
        for _ in range(count):
            offset = cursor.position
            member_type = read_header(cursor)
            if member_type != expected:
                raise NestedTypeMismatchError(
                    f"{multi_type.label} may contain only {expected.label}s, "
                    f"found {member_type.label}",
                    offset=offset,
                )
            members.append(read_member(cursor))
        return tuple(members)


def decode_geometry(
    buffer: bytes | bytearray | memoryview, strict: bool = False
) -> Geometry:
    """
    Convenience function to decode one WKB buffer.

    Args:
        buffer: Raw WKB bytes (little endian)
        strict: Enforce geometry validity checks

    Returns:
        Decoded geometry object with .wkt property

    Example:
        >>> geom = decode_geometry(bytes.fromhex(
        ...     "0101000000000000000000f03f0000000000000840"))
        >>> geom
        Point(x=1.0, y=3.0)
    """
    return WKBDecoder(strict=strict).decode(buffer)
