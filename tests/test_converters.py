"""
Unit tests for urbact.converters.

Polygons as exported by the map's draw control.
"""

import json

import pytest

from urbact.converters import PolygonLoader
from urbact.errors import InvalidGeometryError

SQUARE = [[[75.70, 26.85], [75.80, 26.85], [75.80, 26.95], [75.70, 26.95], [75.70, 26.85]]]


def feature(coords, geom_type="Polygon"):
    return {"type": "Feature", "properties": {}, "geometry": {"type": geom_type, "coordinates": coords}}


def feature_of(geometry):
    return {"type": "Feature", "properties": {}, "geometry": geometry}


class TestFromGeoJSON:

    def test_bare_polygon(self):
        gdf = PolygonLoader.from_geojson(json.dumps({"type": "Polygon", "coordinates": SQUARE}))
        assert len(gdf) == 1
        assert gdf.crs.to_epsg() == 4326
        assert gdf.geometry.iloc[0].area == pytest.approx(0.01)

    def test_feature(self):
        gdf = PolygonLoader.from_geojson(json.dumps(feature(SQUARE)))
        assert gdf.geometry.iloc[0].geom_type == "Polygon"

    def test_feature_collection_is_dissolved(self):
        other = [[[75.80, 26.85], [75.90, 26.85], [75.90, 26.95], [75.80, 26.95], [75.80, 26.85]]]
        text = json.dumps({"type": "FeatureCollection", "features": [feature(SQUARE), feature(other)]})
        gdf = PolygonLoader.from_geojson(text)
        assert len(gdf) == 1
        assert gdf.geometry.iloc[0].area == pytest.approx(0.02)

    @pytest.mark.parametrize("text", ["", "   ", None])
    def test_empty_input(self, text):
        with pytest.raises(InvalidGeometryError, match="No polygon"):
            PolygonLoader.from_geojson(text)

    def test_not_json(self):
        with pytest.raises(InvalidGeometryError, match="not valid GeoJSON"):
            PolygonLoader.from_geojson("{polygon")

    def test_point_rejected(self):
        with pytest.raises(InvalidGeometryError):
            PolygonLoader.from_geojson(json.dumps(feature([75.7, 26.9], "Point")))

    def test_point_in_collection_rejected(self):
        text = json.dumps({"type": "FeatureCollection",
                           "features": [feature(SQUARE), feature([75.7, 26.9], "Point")]})
        with pytest.raises(InvalidGeometryError, match="Point"):
            PolygonLoader.from_geojson(text)

    def test_empty_collection(self):
        with pytest.raises(InvalidGeometryError):
            PolygonLoader.from_geojson(json.dumps({"type": "FeatureCollection", "features": []}))

    def test_zero_area(self):
        flat = [[[75.7, 26.9], [75.8, 26.9], [75.9, 26.9], [75.7, 26.9]]]
        with pytest.raises(InvalidGeometryError, match="no area"):
            PolygonLoader.from_geojson(json.dumps(feature(flat)))

    def test_bowtie_is_repaired(self):
        bowtie = [[[0, 0], [1, 1], [1, 0], [0, 1], [0, 0]]]
        gdf = PolygonLoader.from_geojson(json.dumps(feature(bowtie)))
        assert gdf.geometry.iloc[0].is_valid

    @pytest.mark.parametrize("geometry", [
        {"type": "Polygon", "coordinates": [[[75.7, 26.9]]]},
        {"type": "Polygon"},
    ])
    def test_malformed_coordinates(self, geometry):
        with pytest.raises(InvalidGeometryError, match="malformed"):
            PolygonLoader.from_geojson(json.dumps(feature_of(geometry)))