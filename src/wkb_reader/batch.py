"""
Batch decoding of WKB buffers.

A batch is a list of WKB buffers that must all decode to the same geometry
type. The decoded geometries are reshaped into the form a spatial container
builder expects:

    Point            -> one merged table of coordinates (ids dropped)
    MultiPoint       -> one coordinate table per buffer
    (Multi)LineString -> one path per buffer
    (Multi)Polygon    -> one ring group per buffer

MultiPoint is the odd one out: it stays split per input element, every other
type merges into a single combined container.
"""

import logging
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from enum import Enum
from typing import Any

from .decoder import WKBDecoder
from .errors import InvalidInputError, MixedGeometryTypeError, WKBError
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

BUFFER_TYPES = (bytes, bytearray, memoryview)


class BatchShape(Enum):
    """Aggregate layout of a decoded batch"""

    POINTS = "points"
    POINT_TABLES = "point_tables"
    PATHS = "paths"
    RING_GROUPS = "ring_groups"


@dataclass(frozen=True)
class PointTable:
    """Coordinates of one MultiPoint buffer"""

    identifier: str
    coordinates: tuple[Coordinate, ...]

    def __len__(self) -> int:
        return len(self.coordinates)


@dataclass(frozen=True)
class Path:
    """One or more point sequences decoded from a single line buffer"""

    identifier: str
    lines: tuple[tuple[Coordinate, ...], ...]


@dataclass(frozen=True)
class RingGroup:
    """
    Rings decoded from a single polygon buffer.

    polygons[i][0] is the exterior ring of polygon i, polygons[i][1:] its holes.
    """

    identifier: str
    polygons: tuple[tuple[LinearRing, ...], ...]


BatchItem = Coordinate | PointTable | Path | RingGroup

_SHAPES = {
    GeometryType.POINT: BatchShape.POINTS,
    GeometryType.MULTIPOINT: BatchShape.POINT_TABLES,
    GeometryType.LINESTRING: BatchShape.PATHS,
    GeometryType.MULTILINESTRING: BatchShape.PATHS,
    GeometryType.POLYGON: BatchShape.RING_GROUPS,
    GeometryType.MULTIPOLYGON: BatchShape.RING_GROUPS,
}


@dataclass(frozen=True)
class DecodedBatch:
    """
    Result of decoding a homogeneous batch of WKB buffers.

    Attributes:
        geometry_type: The geometry type shared by every buffer
        identifiers: One identifier per input buffer, in input order
        geometries: One decoded geometry per input buffer, in input order
        crs: Coordinate reference system as given by the caller, not
             interpreted here (None when unspecified)
        shape: Layout of items
        items: Reshaped payload, see BatchShape
    """

    geometry_type: GeometryType
    identifiers: tuple[str, ...]
    geometries: tuple[Geometry, ...]
    crs: Any
    shape: BatchShape
    items: tuple[BatchItem, ...]

    def __len__(self) -> int:
        return len(self.geometries)

    def __iter__(self):
        return iter(zip(self.identifiers, self.geometries, strict=True))


def _normalize_inputs(
    buffers: Any, identifiers: Any
) -> tuple[list[bytes | bytearray | memoryview], list[str]]:
    """Check batch arguments before any decoding happens"""
    if isinstance(buffers, BUFFER_TYPES):
        buffers = [buffers]
        if isinstance(identifiers, str):
            identifiers = [identifiers]

    if isinstance(buffers, str) or not isinstance(buffers, Sequence):
        raise InvalidInputError(
            f"buffers must be a sequence of byte buffers, got {type(buffers).__name__}"
        )
    if len(buffers) < 1:
        raise InvalidInputError("buffers must have length 1 or greater")
    for i, buf in enumerate(buffers):
        if not isinstance(buf, BUFFER_TYPES):
            raise InvalidInputError(
                f"Each element of buffers must be a byte buffer, got "
                f"{type(buf).__name__}",
                index=i,
            )

    if identifiers is None:
        ids = [str(i) for i in range(1, len(buffers) + 1)]
    elif isinstance(identifiers, str) or not isinstance(identifiers, Sequence):
        raise InvalidInputError(
            f"identifiers must be a sequence, got {type(identifiers).__name__}"
        )
    else:
        ids = [str(i) for i in identifiers]

    if len(ids) != len(buffers):
        raise InvalidInputError(
            f"buffers and identifiers must have same length "
            f"({len(buffers)} != {len(ids)})"
        )
    seen: set[str] = set()
    for i, ident in enumerate(ids):
        if ident in seen:
            raise InvalidInputError(
                "identifiers must be unique", index=i, identifier=ident
            )
        seen.add(ident)
    return list(buffers), ids


def _decode_all(
    decoder: WKBDecoder,
    buffers: list[bytes | bytearray | memoryview],
    ids: list[str],
    max_workers: int | None,
) -> list[Geometry]:
    def decode_one(index: int) -> Geometry:
        try:
            return decoder.decode(buffers[index])
        except WKBError as e:
            e.index = index
            e.identifier = ids[index]
            raise

    indices = range(len(buffers))
    if max_workers is not None and max_workers > 1 and len(buffers) > 1:
        logger.debug(
            "Decoding %d buffers with %d workers", len(buffers), max_workers
        )
        # map() yields in submission order, so input order is kept
        with ThreadPoolExecutor(max_workers=min(max_workers, len(buffers))) as ex:
            return list(ex.map(decode_one, indices))
    return [decode_one(i) for i in indices]


def _reshape(
    geom_type: GeometryType, geometries: list[Geometry], ids: list[str]
) -> tuple[BatchItem, ...]:
    if geom_type == GeometryType.POINT:
        return tuple(g.coordinates for g in geometries if isinstance(g, Point))

    items: list[BatchItem] = []
    for ident, geom in zip(ids, geometries, strict=True):
        if isinstance(geom, MultiPoint):
            items.append(PointTable(ident, tuple(geom.coordinates)))
        elif isinstance(geom, LineString):
            items.append(Path(ident, (geom.points,)))
        elif isinstance(geom, MultiLineString):
            items.append(Path(ident, tuple(line.points for line in geom.lines)))
        elif isinstance(geom, Polygon):
            items.append(RingGroup(ident, (geom.rings,)))
        else:
            assert isinstance(geom, MultiPolygon)
            items.append(RingGroup(ident, tuple(p.rings for p in geom.polygons)))
    return tuple(items)


def decode_batch(
    buffers: Sequence[bytes | bytearray | memoryview] | bytes | bytearray | memoryview,
    identifiers: Sequence[str] | str | None = None,
    crs: Any = None,
    *,
    strict: bool = False,
    max_workers: int | None = None,
) -> DecodedBatch:
    """
    Decode a batch of WKB buffers that share one geometry type.

    Args:
        buffers: Sequence of WKB buffers, or a single buffer
        identifiers: One identifier per buffer (default "1", "2", ...)
        crs: Coordinate reference system descriptor, passed through unchanged
        strict: Enforce geometry validity checks while decoding
        max_workers: Decode with a thread pool of this size when > 1

    Returns:
        A DecodedBatch

    Raises:
        InvalidInputError: If the arguments are malformed, including duplicate
            identifiers (rejected for every geometry type, even Point batches
            whose merged result does not keep them)
        MixedGeometryTypeError: If buffers decode to different types; index and
            identifier name the first buffer whose type differs from the first
        WKBError: If any buffer fails to decode; index and identifier are set

    Example:
        >>> batch = decode_batch([
        ...     bytes.fromhex("0101000000000000000000f03f0000000000000840"),
        ...     bytes.fromhex("010100000000000000000000400000000000000040"),
        ... ])
        >>> batch.items
        ((1.0, 3.0), (2.0, 2.0))
    """
    bufs, ids = _normalize_inputs(buffers, identifiers)
    geometries = _decode_all(WKBDecoder(strict=strict), bufs, ids, max_workers)

    geom_type = geometries[0].geometry_type
    for i, geom in enumerate(geometries):
        if geom.geometry_type != geom_type:
            names = ", ".join(t.label for t in sorted({g.geometry_type for g in geometries}))
            raise MixedGeometryTypeError(
                f"Elements of buffers cannot have different geometry types: {names}; "
                f"expected {geom_type.label}, found {geom.geometry_type.label}",
                index=i,
                identifier=ids[i],
            )

    logger.debug("Decoded %d %s geometries", len(geometries), geom_type.label)
    return DecodedBatch(
        geometry_type=geom_type,
        identifiers=tuple(ids),
        geometries=tuple(geometries),
        crs=crs,
        shape=_SHAPES[geom_type],
        items=_reshape(geom_type, geometries, ids),
    )
