# urbact/exporter.py
"""
Urbact Export Module
Builds the three raster layers for a city (index composite, built-up surface,
night lights) and submits them as asynchronous Drive exports.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from loguru import logger

from urbact.analysis import UrbanActivityAnalysis
from urbact.compositor import index_composite
from urbact.constants import INDEX_NAME
from urbact.errors import EmptyRegionError, PixelBudgetExceededError
from urbact.service import CityConfig


@dataclass
class ExportJob:
    """One raster export: image, destination and the grid it is written on."""
    image: Any
    folder: str
    filename: str
    region: Any
    crs: str
    scale: float
    max_pixels: float
    description: Optional[str] = None

    def validate(self) -> None:
        if self.image is None:
            raise ValueError("Export job has no image")
        if self.region is None:
            raise EmptyRegionError(f"Export '{self.filename}' has no region")
        if not self.folder or not self.filename:
            raise ValueError("Export folder and filename must be non-empty")
        if not self.crs:
            raise ValueError(f"Export '{self.filename}' has no CRS")
        if self.scale <= 0:
            raise ValueError(f"Export scale must be positive, got {self.scale}")
        if self.max_pixels <= 0:
            raise ValueError(f"Pixel budget must be positive, got {self.max_pixels}")

    def estimate_pixels(self, area_m2: float) -> float:
        return area_m2 / (self.scale ** 2)

    def check_pixel_budget(self, area_m2: float) -> float:
        """Estimated pixel count for a region of `area_m2`; raises if over budget or empty."""
        if area_m2 <= 0:
            raise EmptyRegionError(f"Export '{self.filename}' region is empty")
        pixels = self.estimate_pixels(area_m2)
        if pixels > self.max_pixels:
            raise PixelBudgetExceededError(self.filename, pixels, self.max_pixels)
        return pixels

    def to_drive_kwargs(self) -> Dict[str, Any]:
        return {
            "image": self.image,
            "description": self.description or self.filename,
            "folder": self.folder,
            "fileNamePrefix": self.filename,
            "region": self.region,
            "scale": self.scale,
            "crs": self.crs,
            "maxPixels": self.max_pixels,
        }


def submit(job: ExportJob):
    """Start a Drive export for `job` and return the task without waiting on it."""
    import ee
    job.validate()
    task = ee.batch.Export.image.toDrive(**job.to_drive_kwargs())
    task.start()
    logger.info(f"Submitted export {job.filename} -> {job.folder}/ (task {getattr(task, 'id', '?')})")
    return task


class BatchExportPipeline:
    """AOI -> filtered collection -> masked/scaled composite -> export, plus two auxiliary layers."""

    def __init__(self, analysis: UrbanActivityAnalysis):
        self.analysis = analysis
        self.city: CityConfig = analysis.city

    def ndvi_layer(self, aoi):
        c = self.city
        description = f"{c.slug}_mean_{INDEX_NAME}_{c.ndvi_year}"
        return index_composite(aoi, c.ndvi_start, c.ndvi_end,
                               year=c.ndvi_year, description=description)

    def built_surface_layer(self, aoi):
        import ee
        c = self.city
        return (ee.Image(c.built_asset).select(c.built_band).clip(aoi)
                .set({"year": c.built_year,
                      "description": f"{c.slug}_GHSL_built_surface_{c.built_year}"}))

    def night_lights_layer(self, aoi):
        import ee
        c = self.city
        period = f"{c.lights_start[:4]}_{c.lights_end[:4]}"
        return (ee.ImageCollection(c.lights_collection)
                .filterDate(c.lights_start, c.lights_end)
                .select(c.lights_band)
                .first()
                .clip(aoi)
                .set({"year": period.replace("_", "-"),
                      "description": f"{c.slug}_VIIRS_DNB_{c.lights_band}_{period}"}))

    def build_jobs(self, aoi) -> List[ExportJob]:
        c = self.city
        period = f"{c.lights_start[:4]}_{c.lights_end[:4]}"
        layers = [
            (self.ndvi_layer(aoi), f"{c.slug}_{INDEX_NAME}_mean_{c.ndvi_year}"),
            (self.built_surface_layer(aoi), f"{c.slug}_GHSL_built_surface_{c.built_year}"),
            (self.night_lights_layer(aoi), f"{c.slug}_VIIRS_DNB_{c.lights_band}_{period}"),
        ]
        return [
            ExportJob(image=image, folder=c.export_folder, filename=name, region=aoi,
                      crs=c.export_crs, scale=c.export_scale, max_pixels=c.export_max_pixels)
            for image, name in layers
        ]

    def run(self, dry_run: bool = False) -> List[ExportJob]:
        aoi = self.analysis.aoi()
        jobs = self.build_jobs(aoi)

        area_m2 = float(self.analysis._ee_getinfo(aoi.area(maxError=1)) or 0.0)
        for job in jobs:
            job.validate()
            pixels = job.check_pixel_budget(area_m2)
            logger.info(f"{job.filename}: ~{pixels:,.0f} pixels at {job.scale} m in {job.crs}")

        if dry_run:
            logger.info(f"Dry run: {len(jobs)} exports validated, none submitted")
            return jobs

        for job in jobs:
            submit(job)
        return jobs
