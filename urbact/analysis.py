# urbact/analysis.py

from typing import Any, Dict, List, Optional

import geopandas as gpd
from loguru import logger

from urbact.constants import HISTOGRAM_BINS, ZONAL_MAX_PIXELS, ZONAL_SCALE_M
from urbact.service import CityConfig


class UrbanActivityAnalysis:
    """
    Thin wrapper around the Earth Engine & geemap operations the dashboard and
    the batch pipeline need for one city.
    Requests are issued as-is: no retries, failures propagate to the caller.
    """

    def __init__(self, project_id: str, city: CityConfig):
        self.project_id = project_id
        self.city = city
        self._ee_initialized = False

    def initialize_ee(self) -> None:
        import ee
        try:
            ee.Initialize(project=self.project_id)
            self._ee_initialized = True
            logger.info(f"Earth Engine initialized for project {self.project_id}")
            return
        except Exception as e:
            logger.info(f"Earth Engine needs authentication: {e}")

        try:
            ee.Authenticate()
            ee.Initialize(project=self.project_id)
            self._ee_initialized = True
            logger.info(f"Earth Engine initialized for project {self.project_id}")
        except Exception as e:
            raise RuntimeError(
                "Earth Engine authentication failed. Please ensure your Google account has access, "
                "the 'Earth Engine API' is enabled for your Google Cloud project, and retry. "
                "Original error: " + str(e)
            )

    def _ensure_ee(self) -> None:
        if not self._ee_initialized:
            self.initialize_ee()

    @staticmethod
    def _ee_getinfo(ee_object):
        return ee_object.getInfo()

    # -- datasets -------------------------------------------------------

    def boundary(self):
        import ee
        self._ensure_ee()
        return ee.FeatureCollection(self.city.aoi_asset)

    def aoi(self):
        return self.boundary().geometry()

    def population(self):
        import ee
        self._ensure_ee()
        return ee.Image(self.city.population_asset).select(self.city.population_band)

    def wards(self):
        import ee
        self._ensure_ee()
        return ee.FeatureCollection(self.city.ward_asset)

    def attribute_image(self, prop: Optional[str] = None):
        """Rasterise one attribute of the EAI point/value collection by per-cell mean."""
        import ee
        self._ensure_ee()
        prop = prop or self.city.eai_property
        return ee.FeatureCollection(self.city.eai_asset).reduceToImage(
            properties=[prop], reducer=ee.Reducer.mean()
        )

    def geopandas_to_ee(self, gdf: gpd.GeoDataFrame):
        import geemap
        self._ensure_ee()
        fc = geemap.geopandas_to_ee(gdf, geodesic=False)
        return fc.geometry()

    # -- zonal statistics ----------------------------------------------

    def population_sum(self, geom) -> float:
        import ee
        self._ensure_ee()
        band = self.city.population_band
        total = self.population().reduceRegion(
            reducer=ee.Reducer.sum(),
            geometry=geom,
            scale=ZONAL_SCALE_M,
            maxPixels=ZONAL_MAX_PIXELS,
        ).get(band)
        value = self._ee_getinfo(ee.Number(total))
        return float(value or 0.0)

    def population_histogram(self, geom, bins: int = HISTOGRAM_BINS) -> Dict[str, List[float]]:
        """Fixed-width histogram of population per cell: {'bucket_means': [...], 'counts': [...]}."""
        import ee
        self._ensure_ee()
        band = self.city.population_band
        hist = self.population().clip(geom).reduceRegion(
            reducer=ee.Reducer.histogram(maxBuckets=bins),
            geometry=geom,
            scale=ZONAL_SCALE_M,
            maxPixels=ZONAL_MAX_PIXELS,
        ).get(band)
        info = self._ee_getinfo(hist) or {}
        return {
            "bucket_means": [float(v) for v in info.get("bucketMeans", [])],
            "counts": [float(v) for v in info.get("histogram", [])],
        }

    def ward_means(self, prop: Optional[str] = None) -> List[Dict[str, Any]]:
        """Zonal mean of the attribute raster per ward: [{'ward_id': ..., 'value': ...}]."""
        import ee
        self._ensure_ee()
        id_prop = self.city.ward_id_property
        reduced = self.attribute_image(prop).reduceRegions(
            collection=self.wards(),
            reducer=ee.Reducer.mean(),
            scale=ZONAL_SCALE_M,
        )
        info = self._ee_getinfo(reduced.select([id_prop, 'mean'], retainGeometry=False))
        return [
            {"ward_id": f["properties"].get(id_prop), "value": f["properties"].get("mean")}
            for f in info.get("features", [])
        ]

    def ward_outline(self, ward_ids: List[Any], color: str, width: int = 2):
        """Outlined, unfilled rendering of the given wards."""
        import ee
        self._ensure_ee()
        chosen = self.wards().filter(ee.Filter.inList(self.city.ward_id_property, ward_ids))
        return chosen.style(color=color, fillColor='00000000', width=width)

    # -- maps -----------------------------------------------------------

    def geemap_map(self, height: str = "700px"):
        import geemap.foliumap as geemap
        self._ensure_ee()
        lon, lat = self.city.center
        m = geemap.Map(center=[lat, lon], zoom=self.city.zoom, height=height,
                       ee_initialize=False, draw_export=True)
        m.add_basemap("SATELLITE")
        return m
