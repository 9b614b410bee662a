# urbact/compositor.py
"""
Cloud masking and vegetation-index compositing.

Two renditions of the same rules:
- Earth Engine expression builders, evaluated lazily by the remote backend.
- numpy kernels over in-memory arrays (same masking, scaling and index
  semantics), used for local evaluation of downloaded tiles.

Rules:
- a pixel is clear iff the cloud-shadow (3), cloud (5) and cirrus (9) bits of
  QA_PIXEL are all unset; other flags are ignored.
- reflectance = DN * gain + offset, before the index is computed.
- index = (b - a) / (b + a), clamped to [-1, 1]; undefined where b + a == 0.
- temporal composite = mean of valid observations; undefined where none.
"""

from typing import Optional, Sequence

import numpy as np

from urbact.constants import (
    INDEX_NAME, LANDSAT_C2_L2, NIR_BAND, QABits, RED_BAND, ReflectanceScaling,
)

LANDSAT9_L2 = 'LANDSAT/LC09/C02/T1_L2'


def qa_bitmask(bits: Sequence[int] = QABits.MASKED) -> int:
    """Integer with every masked QA bit set."""
    value = 0
    for bit in bits:
        value |= 1 << bit
    return value


# ---------------------------------------------------------------------------
# Earth Engine builders
# ---------------------------------------------------------------------------

def clear_sky_mask(image, bits: Sequence[int] = QABits.MASKED):
    """Boolean ee.Image: 1 where none of `bits` is set in the QA band."""
    qa = image.select(QABits.BAND_NAME)
    mask = None
    for bit in bits:
        clear = qa.bitwiseAnd(1 << bit).eq(0)
        mask = clear if mask is None else mask.And(clear)
    return mask


def scale_reflectance(image, bands: Sequence[str], names: Sequence[str],
                      scaling: ReflectanceScaling = LANDSAT_C2_L2):
    return image.select(list(bands)).multiply(scaling.gain).add(scaling.offset).rename(list(names))


def normalized_difference_image(image, band_a: str, band_b: str, name: str = INDEX_NAME):
    """(b - a) / (b + a), masked where the denominator is zero."""
    a = image.select(band_a)
    b = image.select(band_b)
    denominator = b.add(a)
    return (b.subtract(a).divide(denominator)
            .updateMask(denominator.neq(0))
            .clamp(-1, 1)
            .rename(name))


def prep_index(image, band_a: str = RED_BAND, band_b: str = NIR_BAND,
               scaling: ReflectanceScaling = LANDSAT_C2_L2, name: str = INDEX_NAME):
    """Mask clouds, scale DN to reflectance and compute the index for one scene."""
    masked = image.updateMask(clear_sky_mask(image))
    refl = scale_reflectance(masked, [band_a, band_b], ['a', 'b'], scaling)
    index = normalized_difference_image(refl, 'a', 'b', name)
    return index.copyProperties(image, image.propertyNames())


def index_composite(aoi, start: str, end: str, *, collection: str = LANDSAT9_L2,
                    band_a: str = RED_BAND, band_b: str = NIR_BAND,
                    scaling: ReflectanceScaling = LANDSAT_C2_L2,
                    name: str = INDEX_NAME, year: Optional[int] = None,
                    description: Optional[str] = None):
    """
    Mean index over every scene intersecting `aoi` in [start, end), clipped to the AOI.
    Filtering by bounds and date happens before any per-scene transform.
    """
    import ee
    scenes = ee.ImageCollection(collection).filterBounds(aoi).filterDate(start, end)
    composite = scenes.map(
        lambda img: prep_index(img, band_a, band_b, scaling, name)
    ).mean().clip(aoi)
    props = {}
    if year is not None:
        props["year"] = year
    if description:
        props["description"] = description
    return composite.set(props) if props else composite


# ---------------------------------------------------------------------------
# numpy kernels
# ---------------------------------------------------------------------------

def clear_sky(qa, bits: Sequence[int] = QABits.MASKED) -> np.ndarray:
    qa = np.asarray(qa, dtype=np.int64)
    return (qa & qa_bitmask(bits)) == 0


def scale_dn(dn, scaling: ReflectanceScaling = LANDSAT_C2_L2) -> np.ndarray:
    return np.asarray(dn, dtype=np.float64) * scaling.gain + scaling.offset


def normalized_difference(a, b) -> np.ndarray:
    """(b - a) / (b + a) clamped to [-1, 1]; NaN where b + a == 0."""
    a = np.asarray(a, dtype=np.float64)
    b = np.asarray(b, dtype=np.float64)
    denominator = b + a
    out = np.full(np.broadcast(a, b).shape, np.nan)
    valid = denominator != 0
    np.divide(b - a, denominator, out=out, where=valid)
    return np.clip(out, -1.0, 1.0)


def temporal_mean(values, valid=None) -> np.ndarray:
    """
    Per-pixel mean over axis 0 of the valid, finite observations.
    Pixels with no contributing observation are NaN.
    """
    values = np.asarray(values, dtype=np.float64)
    usable = np.isfinite(values)
    if valid is not None:
        usable &= np.asarray(valid, dtype=bool)
    count = usable.sum(axis=0)
    total = np.where(usable, values, 0.0).sum(axis=0)
    mean = np.full(count.shape, np.nan)
    np.divide(total, count, out=mean, where=count > 0)
    return mean


def composite_from_arrays(qa, band_a, band_b,
                          scaling: ReflectanceScaling = LANDSAT_C2_L2) -> np.ndarray:
    """Local counterpart of `index_composite` for stacks shaped (time, rows, cols)."""
    index = normalized_difference(scale_dn(band_a, scaling), scale_dn(band_b, scaling))
    return temporal_mean(index, clear_sky(qa))
