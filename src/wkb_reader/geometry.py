"""
Geometry classes for representing decoded WKB.

These classes are immutable containers for 2D geometry data with WKT output.
"""

from collections.abc import Iterator
from dataclasses import dataclass
from enum import IntEnum
from typing import ClassVar

# Type aliases for coordinate tuples
Coordinate = tuple[float, float]
LinearRing = tuple[Coordinate, ...]


class GeometryType(IntEnum):
    """OGC WKB geometry type codes (2D only)"""

    POINT = 1
    LINESTRING = 2
    POLYGON = 3
    MULTIPOINT = 4
    MULTILINESTRING = 5
    MULTIPOLYGON = 6
    # Recognized but not decoded
    GEOMETRYCOLLECTION = 7

    @property
    def label(self) -> str:
        """OGC type name, e.g. 'MultiLineString'"""
        return _TYPE_LABELS[self]


_TYPE_LABELS = {
    GeometryType.POINT: "Point",
    GeometryType.LINESTRING: "LineString",
    GeometryType.POLYGON: "Polygon",
    GeometryType.MULTIPOINT: "MultiPoint",
    GeometryType.MULTILINESTRING: "MultiLineString",
    GeometryType.MULTIPOLYGON: "MultiPolygon",
    GeometryType.GEOMETRYCOLLECTION: "GeometryCollection",
}


@dataclass(frozen=True)
class BoundingBox:
    """Geometry bounding box"""

    xmin: float
    ymin: float
    xmax: float
    ymax: float

    def __iter__(self) -> Iterator[float]:
        return iter((self.xmin, self.ymin, self.xmax, self.ymax))


def _bounds_of(coords: list[Coordinate]) -> BoundingBox:
    if not coords:
        raise ValueError("Empty geometry has no bounds")
    xs = [c[0] for c in coords]
    ys = [c[1] for c in coords]
    return BoundingBox(min(xs), min(ys), max(xs), max(ys))


def _coord_text(coords: tuple[Coordinate, ...]) -> str:
    return ", ".join(f"{c[0]} {c[1]}" for c in coords)


def _rings_text(rings: tuple[LinearRing, ...]) -> str:
    return ", ".join(f"({_coord_text(ring)})" for ring in rings)


@dataclass(frozen=True)
class Point:
    """A 2D point"""

    geometry_type: ClassVar[GeometryType] = GeometryType.POINT

    x: float
    y: float

    @property
    def wkt(self) -> str:
        return f"POINT ({self.x} {self.y})"

    @property
    def coordinates(self) -> Coordinate:
        return (self.x, self.y)

    @property
    def bounds(self) -> BoundingBox:
        return BoundingBox(self.x, self.y, self.x, self.y)


@dataclass(frozen=True)
class LineString:
    """A line string (polyline), possibly empty"""

    geometry_type: ClassVar[GeometryType] = GeometryType.LINESTRING

    points: tuple[Coordinate, ...]

    @property
    def wkt(self) -> str:
        if not self.points:
            return "LINESTRING EMPTY"
        return f"LINESTRING ({_coord_text(self.points)})"

    @property
    def coordinates(self) -> list[Coordinate]:
        return list(self.points)

    @property
    def bounds(self) -> BoundingBox:
        return _bounds_of(list(self.points))

    def __len__(self) -> int:
        return len(self.points)


@dataclass(frozen=True)
class Polygon:
    """
    A polygon with optional holes.

    Ring order is kept exactly as encoded: ring 0 is the exterior, the rest are
    holes. Orientation and closure are not checked here.
    """

    geometry_type: ClassVar[GeometryType] = GeometryType.POLYGON

    rings: tuple[LinearRing, ...]

    @property
    def exterior(self) -> LinearRing:
        """The exterior ring (first ring)"""
        return self.rings[0] if self.rings else ()

    @property
    def interiors(self) -> tuple[LinearRing, ...]:
        """Interior rings (holes)"""
        return self.rings[1:]

    @property
    def wkt(self) -> str:
        if not self.rings:
            return "POLYGON EMPTY"
        return f"POLYGON ({_rings_text(self.rings)})"

    @property
    def coordinates(self) -> list[list[Coordinate]]:
        return [list(ring) for ring in self.rings]

    @property
    def bounds(self) -> BoundingBox:
        return _bounds_of([c for ring in self.rings for c in ring])


@dataclass(frozen=True)
class MultiPoint:
    """Multiple points"""

    geometry_type: ClassVar[GeometryType] = GeometryType.MULTIPOINT

    points: tuple[Point, ...]

    @property
    def wkt(self) -> str:
        if not self.points:
            return "MULTIPOINT EMPTY"
        coords = ", ".join(f"({p.x} {p.y})" for p in self.points)
        return f"MULTIPOINT ({coords})"

    @property
    def coordinates(self) -> list[Coordinate]:
        return [p.coordinates for p in self.points]

    @property
    def bounds(self) -> BoundingBox:
        return _bounds_of(self.coordinates)

    def __len__(self) -> int:
        return len(self.points)

    def __iter__(self) -> Iterator[Point]:
        return iter(self.points)


@dataclass(frozen=True)
class MultiLineString:
    """Multiple line strings"""

    geometry_type: ClassVar[GeometryType] = GeometryType.MULTILINESTRING

    lines: tuple[LineString, ...]

    @property
    def wkt(self) -> str:
        if not self.lines:
            return "MULTILINESTRING EMPTY"
        line_strs = ", ".join(f"({_coord_text(line.points)})" for line in self.lines)
        return f"MULTILINESTRING ({line_strs})"

    @property
    def coordinates(self) -> list[list[Coordinate]]:
        return [line.coordinates for line in self.lines]

    @property
    def bounds(self) -> BoundingBox:
        return _bounds_of([c for line in self.lines for c in line.points])

    def __len__(self) -> int:
        return len(self.lines)

    def __iter__(self) -> Iterator[LineString]:
        return iter(self.lines)


@dataclass(frozen=True)
class MultiPolygon:
    """Multiple polygons"""

    geometry_type: ClassVar[GeometryType] = GeometryType.MULTIPOLYGON

    polygons: tuple[Polygon, ...]

    @property
    def wkt(self) -> str:
        if not self.polygons:
            return "MULTIPOLYGON EMPTY"
        poly_strs = ", ".join(f"({_rings_text(poly.rings)})" for poly in self.polygons)
        return f"MULTIPOLYGON ({poly_strs})"

    @property
    def coordinates(self) -> list[list[list[Coordinate]]]:
        return [poly.coordinates for poly in self.polygons]

    @property
    def bounds(self) -> BoundingBox:
        return _bounds_of(
            [c for poly in self.polygons for ring in poly.rings for c in ring]
        )

    def __len__(self) -> int:
        return len(self.polygons)

    def __iter__(self) -> Iterator[Polygon]:
        return iter(self.polygons)


# Type alias for any geometry
Geometry = Point | LineString | Polygon | MultiPoint | MultiLineString | MultiPolygon
