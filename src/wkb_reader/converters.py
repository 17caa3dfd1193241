"""
Output format converters for decoded geometries.

This module provides functions to convert geometries to various formats:
- WKT (Well-Known Text)
- WKB (Well-Known Binary, little endian)
- GeoJSON
- GeoPackage (using fiona/GDAL)
- Shapely geometries
"""

import json
import struct
from pathlib import Path
from typing import Any

import fiona
import shapely
from shapely.geometry import LineString as ShapelyLineString
from shapely.geometry import MultiLineString as ShapelyMultiLineString
from shapely.geometry import MultiPoint as ShapelyMultiPoint
from shapely.geometry import MultiPolygon as ShapelyMultiPolygon
from shapely.geometry import Point as ShapelyPoint
from shapely.geometry import Polygon as ShapelyPolygon
from shapely.geometry import mapping
from shapely.geometry.base import BaseGeometry

from .batch import DecodedBatch
from .geometry import (
    Geometry,
    GeometryType,
    LineString,
    MultiLineString,
    MultiPoint,
    MultiPolygon,
    Point,
    Polygon,
)
from .spatial import resolve_crs


def to_wkt(geom: Geometry) -> str:
    """
    Convert geometry to Well-Known Text (WKT) format.

    Example:
        >>> to_wkt(Point(x=-122.0, y=47.0))
        'POINT (-122.0 47.0)'
    """
    return geom.wkt


def to_wkb(geom: Geometry) -> bytes:
    """
    Convert geometry to little-endian 2D Well-Known Binary.

    Output decodes back to an equal geometry with decode_geometry().

    Example:
        >>> to_wkb(Point(x=1.0, y=3.0)).hex()
        '0101000000000000000000f03f0000000000000840'
    """
    header = struct.pack("<BI", 1, geom.geometry_type)

    if isinstance(geom, Point):
        return header + struct.pack("<dd", geom.x, geom.y)

    elif isinstance(geom, LineString):
        data = header + struct.pack("<I", len(geom.points))
        for pt in geom.points:
            data += struct.pack("<dd", pt[0], pt[1])
        return data

    elif isinstance(geom, Polygon):
        data = header + struct.pack("<I", len(geom.rings))
        for ring in geom.rings:
            data += struct.pack("<I", len(ring))
            for pt in ring:
                data += struct.pack("<dd", pt[0], pt[1])
        return data

    elif isinstance(geom, MultiPoint):
        members: tuple[Geometry, ...] = geom.points
    elif isinstance(geom, MultiLineString):
        members = geom.lines
    else:
        # MultiPolygon is the only remaining case
        assert isinstance(geom, MultiPolygon)
        members = geom.polygons

    data = header + struct.pack("<I", len(members))
    for member in members:
        data += to_wkb(member)
    return data


def to_geojson_geometry(geom: Geometry) -> dict[str, Any]:
    """
    Convert geometry to GeoJSON geometry object.

    Coordinates are written as decoded; no reprojection is applied.

    Example:
        >>> to_geojson_geometry(Point(x=-122.0, y=47.0))
        {'type': 'Point', 'coordinates': [-122.0, 47.0]}
    """
    if isinstance(geom, Point):
        return {"type": "Point", "coordinates": [geom.x, geom.y]}

    elif isinstance(geom, LineString):
        return {
            "type": "LineString",
            "coordinates": [list(pt) for pt in geom.points],
        }

    elif isinstance(geom, Polygon):
        return {
            "type": "Polygon",
            "coordinates": [[list(pt) for pt in ring] for ring in geom.rings],
        }

    elif isinstance(geom, MultiPoint):
        return {
            "type": "MultiPoint",
            "coordinates": [[pt.x, pt.y] for pt in geom.points],
        }

    elif isinstance(geom, MultiLineString):
        return {
            "type": "MultiLineString",
            "coordinates": [
                [list(pt) for pt in line.points] for line in geom.lines
            ],
        }

    # MultiPolygon is the only remaining case
    return {
        "type": "MultiPolygon",
        "coordinates": [
            [[list(pt) for pt in ring] for ring in poly.rings]
            for poly in geom.polygons
        ],
    }


def batch_to_geojson(batch: DecodedBatch) -> dict[str, Any]:
    """
    Convert a decoded batch to a GeoJSON FeatureCollection.

    Each input buffer becomes one feature whose id is its identifier.
    """
    features = [
        {
            "type": "Feature",
            "id": ident,
            "properties": {"id": ident},
            "geometry": to_geojson_geometry(geom),
        }
        for ident, geom in batch
    ]
    return {"type": "FeatureCollection", "features": features}


def write_geojson(batch: DecodedBatch, output_path: str, indent: int | None = 2) -> int:
    """
    Write a decoded batch to a GeoJSON file.

    Args:
        batch: Result of decode_batch()
        output_path: Path to output GeoJSON file
        indent: JSON indentation (None for compact)

    Returns:
        Number of features written
    """
    geojson = batch_to_geojson(batch)
    with Path(output_path).open("w") as f:
        json.dump(geojson, f, indent=indent)
    return len(batch)


def _point_to_shapely(pt: Point) -> ShapelyPoint:
    return ShapelyPoint(pt.x, pt.y)


def _linestring_to_shapely(line: LineString) -> ShapelyLineString:
    return ShapelyLineString(list(line.points))


def _polygon_to_shapely(poly: Polygon) -> ShapelyPolygon:
    if not poly.rings:
        return ShapelyPolygon()
    holes = [list(ring) for ring in poly.interiors]
    return ShapelyPolygon(list(poly.exterior), holes if holes else None)


def geometry_to_shapely(geom: Geometry) -> BaseGeometry:
    """
    Convert a decoded geometry to a Shapely geometry.

    Args:
        geom: Geometry object from this library

    Returns:
        Corresponding Shapely geometry object
    """
    if isinstance(geom, Point):
        return _point_to_shapely(geom)

    if isinstance(geom, LineString):
        return _linestring_to_shapely(geom)

    if isinstance(geom, Polygon):
        return _polygon_to_shapely(geom)

    if isinstance(geom, MultiPoint):
        return ShapelyMultiPoint([_point_to_shapely(pt) for pt in geom.points])

    if isinstance(geom, MultiLineString):
        return ShapelyMultiLineString(
            [_linestring_to_shapely(line) for line in geom.lines]
        )

    # MultiPolygon is the only remaining case
    assert isinstance(geom, MultiPolygon)
    if not geom.polygons:
        return ShapelyMultiPolygon()
    # Empty members keep their position; the MultiPolygon constructor drops them
    return shapely.multipolygons([_polygon_to_shapely(poly) for poly in geom.polygons])


# Lines and polygons are written as Multi* features, as in SpatialLines/SpatialPolygons
_PROMOTED_TYPES = {
    GeometryType.POINT: "Point",
    GeometryType.MULTIPOINT: "MultiPoint",
    GeometryType.LINESTRING: "MultiLineString",
    GeometryType.MULTILINESTRING: "MultiLineString",
    GeometryType.POLYGON: "MultiPolygon",
    GeometryType.MULTIPOLYGON: "MultiPolygon",
}


def _promote(shapely_geom: BaseGeometry) -> BaseGeometry:
    if isinstance(shapely_geom, ShapelyLineString):
        return ShapelyMultiLineString([shapely_geom])
    if isinstance(shapely_geom, ShapelyPolygon):
        return ShapelyMultiPolygon([shapely_geom])
    return shapely_geom


def write_geopackage(
    batch: DecodedBatch,
    output_path: str,
    layer: str | None = None,
) -> int:
    """
    Write a decoded batch to a GeoPackage file.

    Uses fiona/GDAL to create a properly formatted GeoPackage (.gpkg) file.
    The batch CRS, if any, is written as the layer's spatial reference.

    Args:
        batch: Result of decode_batch()
        output_path: Path to output GeoPackage file
        layer: Layer name (default: output file stem)

    Returns:
        Number of features written

    Example:
        >>> batch = decode_batch(buffers, crs="EPSG:4326")
        >>> write_geopackage(batch, "points.gpkg")
    """
    output_file = Path(output_path)
    if output_file.exists():
        output_file.unlink()

    crs = resolve_crs(batch.crs)
    schema: dict[str, Any] = {
        "geometry": _PROMOTED_TYPES[batch.geometry_type],
        "properties": {"id": "str"},
    }
    layer_name = (layer or output_file.stem).replace(" ", "_").replace("-", "_")

    count = 0
    with fiona.open(  # pyright: ignore[reportUnknownMemberType]
        output_path,
        "w",
        driver="GPKG",
        crs_wkt=crs.to_wkt() if crs is not None else None,
        schema=schema,
        layer=layer_name,
    ) as dst:  # pyright: ignore[reportUnknownVariableType]
        for ident, geom in batch:
            record: dict[str, Any] = {
                "geometry": mapping(_promote(geometry_to_shapely(geom))),
                "properties": {"id": ident},
            }
            dst.write(record)  # pyright: ignore[reportUnknownMemberType]
            count += 1

    return count
