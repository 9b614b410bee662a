# urbact/service.py

import json
import os
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from loguru import logger
from unidecode import unidecode

from urbact.constants import EXPORT_CONFIG


@dataclass(frozen=True)
class CityConfig:
    """Asset identifiers and processing parameters for one city."""
    code: str
    name: str
    aoi_asset: str
    population_asset: str
    eai_asset: str
    ward_asset: str
    population_band: str = "b1"
    eai_property: str = "EPI_o"
    ward_id_property: str = "ward_id"
    center: Tuple[float, float] = (0.0, 0.0)
    zoom: int = 12
    ndvi_start: str = "2024-01-01"
    ndvi_end: str = "2024-12-31"
    ndvi_year: int = 2024
    built_asset: str = "JRC/GHSL/P2023A/GHS_BUILT_S/2020"
    built_band: str = "built_surface"
    built_year: int = 2020
    lights_collection: str = "NOAA/VIIRS/DNB/ANNUAL_V22"
    lights_band: str = "average"
    lights_start: str = "2023-01-01"
    lights_end: str = "2024-01-01"
    export_folder: str = EXPORT_CONFIG["folder"]
    export_crs: str = EXPORT_CONFIG["crs"]
    export_scale: float = EXPORT_CONFIG["scale"]
    export_max_pixels: float = EXPORT_CONFIG["max_pixels"]
    heritage_note: Optional[str] = None
    extra: Dict = field(default_factory=dict)

    @property
    def slug(self) -> str:
        """ASCII, underscore-separated city name for export file names."""
        return "_".join(unidecode(self.name).split())

    @classmethod
    def from_dict(cls, code: str, conf: Dict) -> "CityConfig":
        known = set(cls.__dataclass_fields__) - {"code", "extra"}
        kwargs = {k: v for k, v in conf.items() if k in known}
        if "center" in kwargs:
            kwargs["center"] = tuple(kwargs["center"])
        missing = [k for k in ("name", "aoi_asset", "population_asset", "eai_asset", "ward_asset")
                   if k not in kwargs]
        if missing:
            raise ValueError(f"City '{code}' is missing required keys: {', '.join(missing)}")
        extra = {k: v for k, v in conf.items() if k not in known}
        return cls(code=code, extra=extra, **kwargs)


class CityService:
    """
    Registry of configured cities.
    Reads the JSON registry once; a missing file gives an empty registry.
    """

    def __init__(self, registry_path: str = "cities.json"):
        if os.path.exists(registry_path):
            with open(registry_path, 'r', encoding='utf-8') as f:
                self.registry = json.load(f)
            logger.info(f"Loaded {len(self.registry)} cities from {registry_path}")
        else:
            logger.warning(f"City registry {registry_path} not found; registry is empty")
            self.registry = {}

    def get_available_cities(self) -> List[Tuple[str, str]]:
        """Returns list of (label, code) for configured cities."""
        return [(conf.get('name', code), code) for code, conf in self.registry.items()]

    def get_city(self, code: str) -> CityConfig:
        if code not in self.registry:
            raise ValueError(f"City '{code}' not found in registry.")
        return CityConfig.from_dict(code, self.registry[code])
