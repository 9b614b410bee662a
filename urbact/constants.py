# urbact/constants.py
"""
Urban Activities Constants and Configuration
Visualisation tables, instrument constants and dashboard limits.
"""

from dataclasses import dataclass
from typing import Dict, List, Tuple


@dataclass(frozen=True)
class VisParams:
    """Visualisation record for a continuous layer."""
    min: float
    max: float
    palette: Tuple[str, ...]

    def to_ee(self) -> Dict:
        return {"min": self.min, "max": self.max, "palette": list(self.palette)}


# ColorBrewer / matplotlib ramps
RDPU_9 = ('#fff7f3', '#fde0dd', '#fcc5c0', '#fa9fb5', '#f768a1',
          '#dd3497', '#ae017e', '#7a0177', '#49006a')
PURD_9 = ('#f7f4f9', '#e7e1ef', '#d4b9da', '#c994c7', '#df65b0',
          '#e7298a', '#ce1256', '#980043', '#67001f')
YLORBR_9 = ('#ffffe5', '#fff7bc', '#fee391', '#fec44f', '#fe9929',
            '#ec7014', '#cc4c02', '#993404', '#662506')
PLASMA_7 = ('#0d0887', '#5c01a6', '#9c179e', '#cc4778', '#ed7953', '#fdb42f', '#f0f921')

# Base layers
POPULATION_VIS = VisParams(min=7, max=120, palette=PURD_9)
EAI_VIS = VisParams(min=-0.5, max=1.7, palette=PLASMA_7)
DEFAULT_VARIABLE_VIS = VisParams(min=0, max=100, palette=YLORBR_9)

POPULATION_TITLE = "Population Count"
EAI_TITLE = "Economic Activity Index"

# Variables contributing to the EAI: field name -> display name
VARIABLE_LABELS: Dict[str, str] = {
    'transport_': 'Transport Station (Point)',
    'transpor_1': 'Transport Station (Polygon)',
    'motorable_': 'Motorable Network',
    'amenities_': 'Amenities POI',
    'office_poi': 'Office POI',
    'shop_poi': 'Shop POI',
    'ndvi_mean': 'NDVI',
    'ntl_mean': 'Nighttime Light Intensity',
    'pop_densit': 'Population Density',
    'builtup_de': 'Built-up Density',
}

VARIABLE_VIS: Dict[str, VisParams] = {
    'transport_': VisParams(0, 15, RDPU_9),
    'transpor_1': VisParams(0, 3, RDPU_9),
    'motorable_': VisParams(0, 60000, RDPU_9),
    'amenities_': VisParams(0, 20, RDPU_9),
    'office_poi': VisParams(0, 15, RDPU_9),
    'shop_poi': VisParams(0, 25, RDPU_9),
    'ndvi_mean': VisParams(0, 0.65, RDPU_9),
    'ntl_mean': VisParams(0, 60, RDPU_9),
    'pop_densit': VisParams(0, 30000, RDPU_9),
    'builtup_de': VisParams(0, 1, RDPU_9),
}


def lookup_vis(variable: str) -> VisParams:
    """Vis record for `variable`, or the default ramp when it is not tabulated."""
    return VARIABLE_VIS.get(variable, DEFAULT_VARIABLE_VIS)


def variable_label(variable: str) -> str:
    return VARIABLE_LABELS.get(variable, variable)


def variable_choices() -> List[Tuple[str, str]]:
    """(label, value) pairs for dropdowns."""
    return [(label, key) for key, label in VARIABLE_LABELS.items()]


class QABits:
    """Landsat Collection 2 QA_PIXEL bit positions."""
    BAND_NAME = 'QA_PIXEL'
    CLOUD_SHADOW = 3
    CLOUD = 5
    CIRRUS = 9

    MASKED = (CLOUD_SHADOW, CLOUD, CIRRUS)


@dataclass(frozen=True)
class ReflectanceScaling:
    """Linear DN -> reflectance transform: value * gain + offset."""
    gain: float = 0.0000275
    offset: float = -0.2


LANDSAT_C2_L2 = ReflectanceScaling()

# Landsat 8/9 OLI band pair for NDVI: (band_a, band_b) -> (b - a) / (b + a)
RED_BAND = 'SR_B4'
NIR_BAND = 'SR_B5'
INDEX_NAME = 'NDVI'

# Dashboard
MAX_POLYGONS = 2
POLYGON_COLORS = ('#D73A55', 'blue')
NOTIFICATION_SECONDS = 3
TOP_N_WARDS = 10
ZONAL_SCALE_M = 100
ZONAL_MAX_PIXELS = 1e13
HIGHLIGHT_COLOR = '#E03625'
HISTOGRAM_BINS = 30

# Export
EXPORT_CONFIG = {
    "scale": 100,
    "crs": "EPSG:32643",
    "max_pixels": 1e13,
    "folder": "dissertation",
}
