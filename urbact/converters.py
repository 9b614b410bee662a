# urbact/converters.py

import json

import geopandas as gpd
from shapely.errors import ShapelyError
from shapely.geometry import shape

from urbact.errors import InvalidGeometryError

POLYGON_TYPES = {"Polygon", "MultiPolygon"}


class PolygonLoader:
    """
    Turns a drawn polygon into a single WGS84 polygon GeoDataFrame.
    Accepts GeoJSON text as exported by the map's draw control: a bare
    geometry, a Feature or a FeatureCollection.
    """

    @staticmethod
    def from_geojson(text: str) -> gpd.GeoDataFrame:
        if not text or not text.strip():
            raise InvalidGeometryError("No polygon provided. Draw a polygon and paste its GeoJSON.")
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise InvalidGeometryError(f"Polygon is not valid GeoJSON: {e}")

        kind = data.get("type") if isinstance(data, dict) else None
        if kind == "FeatureCollection":
            geoms = [f.get("geometry") for f in data.get("features", []) if isinstance(f, dict)]
        elif kind == "Feature":
            geoms = [data.get("geometry")]
        elif kind in POLYGON_TYPES:
            geoms = [data]
        else:
            raise InvalidGeometryError(f"Unsupported GeoJSON type: {kind}")

        try:
            geoms = [shape(g) for g in geoms if g]
        except (KeyError, IndexError, TypeError, ValueError, ShapelyError) as e:
            raise InvalidGeometryError(f"Polygon coordinates are malformed: {e}")
        gdf = gpd.GeoDataFrame(geometry=geoms, crs="EPSG:4326")
        return PolygonLoader._normalize(gdf)

    @staticmethod
    def _normalize(gdf: gpd.GeoDataFrame) -> gpd.GeoDataFrame:
        """Dissolve to one polygon; reject empty or non-areal input."""
        if gdf.empty:
            raise InvalidGeometryError("No geometry found.")

        bad = sorted(set(gdf.geom_type) - POLYGON_TYPES)
        if bad:
            raise InvalidGeometryError(f"Only polygons can be aggregated, got: {', '.join(bad)}")

        gdf = gdf[["geometry"]].copy()
        invalid = ~gdf.geometry.is_valid
        if invalid.any():
            gdf.loc[invalid, "geometry"] = gdf.geometry[invalid].buffer(0)

        dissolved = gdf.dissolve().reset_index(drop=True)
        geom = dissolved.geometry.iloc[0]
        if geom is None or geom.is_empty or geom.area == 0:
            raise InvalidGeometryError("Polygon has no area.")
        return dissolved
