"""
Spatial containers built from a decoded batch.

The container class depends on the geometry type of the batch:

    Type of WKB geometry    Result
    Point                   SpatialPoints
    LineString              SpatialLines
    Polygon                 SpatialPolygons
    MultiPoint              list of SpatialPoints
    MultiLineString         SpatialLines
    MultiPolygon            SpatialPolygons
"""

from collections.abc import Callable, Iterator, Sequence
from dataclasses import dataclass
from typing import Any

import shapely
from pyproj import CRS
from pyproj.exceptions import CRSError
from shapely.errors import GEOSException
from shapely.geometry import LineString as ShapelyLineString
from shapely.geometry import MultiLineString as ShapelyMultiLineString
from shapely.geometry import MultiPoint as ShapelyMultiPoint
from shapely.geometry import MultiPolygon as ShapelyMultiPolygon
from shapely.geometry import Polygon as ShapelyPolygon
from shapely.geometry.base import BaseGeometry

from .batch import BatchShape, DecodedBatch, Path, PointTable, RingGroup, decode_batch
from .errors import InvalidGeometryError, InvalidInputError
from .geometry import Coordinate


def resolve_crs(crs: str | int | CRS | None) -> CRS | None:
    """
    Turn a user supplied CRS descriptor into a pyproj CRS.

    Accepts anything pyproj.CRS.from_user_input does: EPSG strings or codes,
    PROJ strings, WKT, or a CRS object. None means unspecified.

    Example:
        >>> resolve_crs("+proj=longlat +ellps=WGS84 +datum=WGS84 +no_defs").is_geographic
        True
    """
    if crs is None or isinstance(crs, CRS):
        return crs
    try:
        return CRS.from_user_input(crs)
    except CRSError as e:
        raise InvalidInputError(f"Invalid coordinate reference system: {e}") from e


@dataclass(frozen=True)
class SpatialPoints:
    """A set of points sharing one CRS"""

    geometry: ShapelyMultiPoint
    crs: CRS | None = None
    identifier: str | None = None

    @property
    def coords(self) -> list[Coordinate]:
        return [(p.x, p.y) for p in self.geometry.geoms]

    def __len__(self) -> int:
        return len(self.geometry.geoms)


@dataclass(frozen=True)
class _KeyedLayer:
    identifiers: tuple[str, ...]
    geometries: tuple[BaseGeometry, ...]
    crs: CRS | None = None

    def __len__(self) -> int:
        return len(self.geometries)

    def __iter__(self) -> Iterator[tuple[str, BaseGeometry]]:
        return iter(zip(self.identifiers, self.geometries, strict=True))

    def __getitem__(self, identifier: str) -> BaseGeometry:
        try:
            return self.geometries[self.identifiers.index(identifier)]
        except ValueError:
            raise KeyError(identifier) from None


@dataclass(frozen=True)
class SpatialLines(_KeyedLayer):
    """Line features, one MultiLineString per identifier"""

    geometries: tuple[ShapelyMultiLineString, ...] = ()


@dataclass(frozen=True)
class SpatialPolygons(_KeyedLayer):
    """Polygon features, one MultiPolygon per identifier"""

    geometries: tuple[ShapelyMultiPolygon, ...] = ()


Spatial = SpatialPoints | list[SpatialPoints] | SpatialLines | SpatialPolygons


def _path_to_shapely(path: Path) -> ShapelyMultiLineString:
    return ShapelyMultiLineString([ShapelyLineString(line) for line in path.lines])


def _ring_group_to_shapely(group: RingGroup) -> ShapelyMultiPolygon:
    # A zero-ring member stays in place as an empty polygon
    polygons = [
        ShapelyPolygon(rings[0], list(rings[1:]) or None) if rings else ShapelyPolygon()
        for rings in group.polygons
    ]
    if not polygons:
        return ShapelyMultiPolygon()
    # The ShapelyMultiPolygon constructor drops empty members
    return shapely.multipolygons(polygons)


def _build_each(
    items: list[Path] | list[RingGroup], to_shapely: Callable[[Any], BaseGeometry]
) -> tuple[BaseGeometry, ...]:
    """Convert keyed items, reporting Shapely rejections as InvalidGeometryError"""
    geometries = []
    for i, item in enumerate(items):
        try:
            geometries.append(to_shapely(item))
        except (GEOSException, ValueError) as e:
            raise InvalidGeometryError(
                f"Cannot build geometry: {e}", index=i, identifier=item.identifier
            ) from e
    return tuple(geometries)


def build_spatial(batch: DecodedBatch) -> Spatial:
    """
    Build spatial containers from a decoded batch.

    Args:
        batch: Result of decode_batch()

    Returns:
        SpatialPoints, a list of SpatialPoints, SpatialLines or
        SpatialPolygons, depending on batch.shape
    """
    crs = resolve_crs(batch.crs)

    if batch.shape is BatchShape.POINTS:
        return SpatialPoints(ShapelyMultiPoint(list(batch.items)), crs=crs)

    if batch.shape is BatchShape.POINT_TABLES:
        tables: list[PointTable] = list(batch.items)  # type: ignore[arg-type]
        return [
            SpatialPoints(
                ShapelyMultiPoint(list(t.coordinates)),
                crs=crs,
                identifier=t.identifier,
            )
            for t in tables
        ]

    if batch.shape is BatchShape.PATHS:
        paths: list[Path] = list(batch.items)  # type: ignore[arg-type]
        return SpatialLines(
            identifiers=tuple(p.identifier for p in paths),
            geometries=_build_each(paths, _path_to_shapely),
            crs=crs,
        )

    groups: list[RingGroup] = list(batch.items)  # type: ignore[arg-type]
    return SpatialPolygons(
        identifiers=tuple(g.identifier for g in groups),
        geometries=_build_each(groups, _ring_group_to_shapely),
        crs=crs,
    )


def read_wkb(
    buffers: Sequence[bytes | bytearray | memoryview] | bytes | bytearray | memoryview,
    identifiers: Sequence[str] | str | None = None,
    crs: str | int | CRS | None = None,
    **options: Any,
) -> Spatial:
    """
    Convert WKB buffers to spatial containers.

    Args:
        buffers: Sequence of little-endian WKB buffers, or a single buffer
        identifiers: Unique identifiers, one per buffer (default "1", "2", ...)
        crs: Coordinate reference system (EPSG code, PROJ string, WKT or CRS)
        **options: Passed to decode_batch (strict, max_workers)

    Returns:
        See build_spatial()

    Example:
        >>> pts = read_wkb([
        ...     bytes.fromhex("0101000000000000000000f03f0000000000000840"),
        ...     bytes.fromhex("010100000000000000000000400000000000000040"),
        ... ])
        >>> pts.coords
        [(1.0, 3.0), (2.0, 2.0)]
    """
    # Validate the CRS before spending time on decoding
    resolved = resolve_crs(crs)
    return build_spatial(decode_batch(buffers, identifiers, resolved, **options))
