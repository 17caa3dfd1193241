"""Tests for output converters."""

import json

import fiona
from shapely.geometry import LineString as ShapelyLineString
from shapely.geometry import MultiPoint as ShapelyMultiPoint
from shapely.geometry import Point as ShapelyPoint
from shapely.geometry import Polygon as ShapelyPolygon

from wkb_reader import (
    LineString,
    MultiLineString,
    MultiPoint,
    MultiPolygon,
    Point,
    Polygon,
    batch_to_geojson,
    decode_batch,
    decode_geometry,
    geometry_to_shapely,
    to_geojson_geometry,
    to_wkb,
    to_wkt,
    write_geojson,
    write_geopackage,
)

SQUARE = ((0.0, 0.0), (10.0, 0.0), (10.0, 10.0), (0.0, 10.0), (0.0, 0.0))


class TestToWkt:
    def test_point_wkt(self):
        assert to_wkt(Point(x=-122.0, y=47.0)) == "POINT (-122.0 47.0)"

    def test_decoded_linestring_wkt(self):
        line = decode_geometry(to_wkb(LineString(points=((0.0, 0.0), (1.0, 1.0)))))
        assert to_wkt(line) == "LINESTRING (0.0 0.0, 1.0 1.0)"


class TestToWkb:
    def test_point_bytes(self):
        assert to_wkb(Point(x=1.0, y=3.0)) == bytes.fromhex(
            "0101000000000000000000f03f0000000000000840"
        )

    def test_multipoint_bytes(self):
        assert to_wkb(MultiPoint(points=(Point(2.0, 3.0),))) == bytes.fromhex(
            "010400000001000000010100000000000000000000400000000000000840"
        )

    def test_multipolygon_decodes_back(self):
        mpoly = MultiPolygon(polygons=(Polygon(rings=(SQUARE,)),))
        assert decode_geometry(to_wkb(mpoly)) == mpoly


class TestToGeoJsonGeometry:
    def test_point_geojson(self):
        geojson = to_geojson_geometry(Point(x=-122.0, y=47.0))
        assert geojson == {"type": "Point", "coordinates": [-122.0, 47.0]}

    def test_linestring_geojson(self):
        geojson = to_geojson_geometry(LineString(points=((0, 0), (1, 1), (2, 2))))
        assert geojson["type"] == "LineString"
        assert geojson["coordinates"] == [[0, 0], [1, 1], [2, 2]]

    def test_polygon_geojson(self):
        geojson = to_geojson_geometry(Polygon(rings=(SQUARE,)))
        assert geojson["type"] == "Polygon"
        assert len(geojson["coordinates"][0]) == 5

    def test_multilinestring_geojson(self):
        mls = MultiLineString(lines=(LineString(points=((0, 0), (1, 1))),))
        assert to_geojson_geometry(mls)["coordinates"] == [[[0, 0], [1, 1]]]

    def test_multipolygon_geojson(self):
        mpoly = MultiPolygon(polygons=(Polygon(rings=(SQUARE,)),))
        geojson = to_geojson_geometry(mpoly)
        assert geojson["type"] == "MultiPolygon"
        assert geojson["coordinates"][0][0][1] == [10.0, 0.0]


class TestGeometryToShapely:
    def test_point(self):
        assert geometry_to_shapely(Point(1.0, 2.0)).equals(ShapelyPoint(1.0, 2.0))

    def test_linestring(self):
        shapely_geom = geometry_to_shapely(LineString(points=((0, 0), (1, 1))))
        assert isinstance(shapely_geom, ShapelyLineString)

    def test_polygon(self):
        shapely_geom = geometry_to_shapely(Polygon(rings=(SQUARE,)))
        assert isinstance(shapely_geom, ShapelyPolygon)
        assert shapely_geom.area == 100.0

    def test_multipoint(self):
        mp = MultiPoint(points=(Point(0, 0), Point(1, 1)))
        shapely_geom = geometry_to_shapely(mp)
        assert isinstance(shapely_geom, ShapelyMultiPoint)
        assert len(shapely_geom.geoms) == 2

    def test_multipolygon_keeps_empty_member(self):
        mpoly = MultiPolygon(polygons=(Polygon(rings=(SQUARE,)), Polygon(rings=())))
        shapely_geom = geometry_to_shapely(mpoly)
        assert len(shapely_geom.geoms) == 2
        assert shapely_geom.geoms[1].is_empty

    def test_empty_multipolygon(self):
        assert geometry_to_shapely(MultiPolygon(polygons=())).is_empty


class TestBatchOutput:
    def test_batch_to_geojson(self):
        batch = decode_batch(
            [to_wkb(Point(1.0, 3.0)), to_wkb(Point(2.0, 2.0))], ["a", "b"]
        )
        collection = batch_to_geojson(batch)
        assert collection["type"] == "FeatureCollection"
        assert [f["id"] for f in collection["features"]] == ["a", "b"]
        assert collection["features"][1]["geometry"]["coordinates"] == [2.0, 2.0]

    def test_write_geojson(self, tmp_path):
        batch = decode_batch([to_wkb(Polygon(rings=(SQUARE,)))], ["park"])
        output = tmp_path / "out.geojson"
        assert write_geojson(batch, str(output)) == 1
        data = json.loads(output.read_text())
        assert data["features"][0]["properties"] == {"id": "park"}

    def test_write_geopackage(self, tmp_path):
        batch = decode_batch(
            [to_wkb(Polygon(rings=(SQUARE,))), to_wkb(Polygon(rings=(SQUARE,)))],
            ["a", "b"],
            crs="EPSG:4326",
        )
        output = tmp_path / "out.gpkg"
        assert write_geopackage(batch, str(output), layer="parks") == 2

        with fiona.open(output, layer="parks") as src:
            assert src.schema["geometry"] == "MultiPolygon"
            assert [f["properties"]["id"] for f in src] == ["a", "b"]
