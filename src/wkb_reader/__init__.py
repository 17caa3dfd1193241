"""
WKB Reader

Decode OGC Well-Known Binary (WKB) geometries into plain Python geometry
objects and spatial containers.

Supported WKB geometry types are Point, LineString, Polygon, MultiPoint,
MultiLineString, and MultiPolygon, in little-endian 2D encoding. All buffers
of one batch must share the same geometry type.

Example:
    >>> from wkb_reader import decode_geometry, read_wkb
    >>>
    >>> geom = decode_geometry(blob)
    >>> print(geom.wkt)
    >>>
    >>> polygons = read_wkb(
    ...     [blob1, blob2],
    ...     identifiers=["San Francisco", "New York"],
    ...     crs="+proj=longlat +ellps=WGS84 +datum=WGS84 +no_defs",
    ... )

CLI Example:
    $ wkb-reader info geometries.txt
    $ wkb-reader convert geometries.txt output.geojson
"""

__version__ = "0.1.0"

from .geometry import (
    Coordinate,
    Geometry,
    GeometryType,
    Point,
    LineString,
    Polygon,
    MultiPoint,
    MultiLineString,
    MultiPolygon,
    BoundingBox,
)

from .errors import (
    WKBError,
    InvalidInputError,
    UnsupportedByteOrderError,
    UnsupportedGeometryTypeError,
    UnknownGeometryTypeError,
    NestedTypeMismatchError,
    TruncatedInputError,
    MixedGeometryTypeError,
    InvalidGeometryError,
)

from .cursor import ByteCursor, ByteOrder

from .decoder import (
    WKBDecoder,
    decode_geometry,
)

from .batch import (
    BatchShape,
    DecodedBatch,
    Path,
    PointTable,
    RingGroup,
    decode_batch,
)

from .spatial import (
    SpatialLines,
    SpatialPoints,
    SpatialPolygons,
    build_spatial,
    read_wkb,
    resolve_crs,
)

from .converters import (
    to_wkt,
    to_wkb,
    to_geojson_geometry,
    geometry_to_shapely,
    batch_to_geojson,
    write_geojson,
    write_geopackage,
)

__all__ = [
    # Version
    "__version__",
    # Geometry types
    "Coordinate",
    "Geometry",
    "GeometryType",
    "Point",
    "LineString",
    "Polygon",
    "MultiPoint",
    "MultiLineString",
    "MultiPolygon",
    "BoundingBox",
    # Errors
    "WKBError",
    "InvalidInputError",
    "UnsupportedByteOrderError",
    "UnsupportedGeometryTypeError",
    "UnknownGeometryTypeError",
    "NestedTypeMismatchError",
    "TruncatedInputError",
    "MixedGeometryTypeError",
    "InvalidGeometryError",
    # Decoder
    "ByteCursor",
    "ByteOrder",
    "WKBDecoder",
    "decode_geometry",
    # Batches
    "BatchShape",
    "DecodedBatch",
    "Path",
    "PointTable",
    "RingGroup",
    "decode_batch",
    # Spatial containers
    "SpatialLines",
    "SpatialPoints",
    "SpatialPolygons",
    "build_spatial",
    "read_wkb",
    "resolve_crs",
    # Converters
    "to_wkt",
    "to_wkb",
    "to_geojson_geometry",
    "geometry_to_shapely",
    "batch_to_geojson",
    "write_geojson",
    "write_geopackage",
]
