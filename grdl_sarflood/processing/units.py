# -*- coding: utf-8 -*-
"""
Backscatter Units - Conversion between linear power and decibels.

Speckle filtering must run on linear ("natural") power; thresholding and
display use dB. Both conversions are pure pointwise maps: masked pixels
stay masked, and the logarithm of a non-positive sample is masked (NaN)
rather than raised.

License
-------
MIT License
Copyright (c) 2024 geoint.org

Created
-------
2026-02-12

Modified
--------
2026-02-18
"""

# Standard library
from typing import Any, Union

# Third-party
import numpy as np

# GRDL internal
from grdl.image_processing.base import ImageTransform
from grdl.image_processing.versioning import processor_version, processor_tags
from grdl.vocabulary import ImageModality, ProcessorCategory

from grdl_sarflood.exceptions import UnitError
from grdl_sarflood.io.raster import BackscatterUnit, Raster
from grdl_sarflood.utils.constants import DB_SCALE


def _natural_array(values: np.ndarray) -> np.ndarray:
    values = np.asarray(values, dtype=np.float64)
    with np.errstate(over='ignore', invalid='ignore'):
        return np.power(10.0, values / DB_SCALE)


def _db_array(values: np.ndarray) -> np.ndarray:
    values = np.asarray(values, dtype=np.float64)
    out = np.full(values.shape, np.nan)
    positive = np.isfinite(values) & (values > 0)
    out[positive] = DB_SCALE * np.log10(values[positive])
    return out


def to_natural(image: Union[np.ndarray, Raster]) -> Union[np.ndarray, Raster]:
    """
    Convert backscatter from dB to linear power: ``10 ** (dB / 10)``.

    Parameters
    ----------
    image : np.ndarray or Raster
        dB samples. A Raster must carry ``BackscatterUnit.DB``.

    Returns
    -------
    np.ndarray or Raster
        Linear power, same kind and grid as the input. NaN (masked)
        samples remain NaN.

    Raises
    ------
    UnitError
        If a Raster is not in dB.
    """
    if isinstance(image, Raster):
        if image.unit is not BackscatterUnit.DB:
            raise UnitError(f"to_natural expects a dB raster, got unit {image.unit}")
        return image.with_data(_natural_array(image.data), unit=BackscatterUnit.NATURAL)
    return _natural_array(image)


def to_db(image: Union[np.ndarray, Raster]) -> Union[np.ndarray, Raster]:
    """
    Convert backscatter from linear power to dB: ``10 * log10(power)``.

    Non-positive and non-finite samples have no dB value and come back
    as NaN (masked in a Raster). Never raises on sample values.

    Parameters
    ----------
    image : np.ndarray or Raster
        Linear power samples. A Raster must carry
        ``BackscatterUnit.NATURAL``.

    Returns
    -------
    np.ndarray or Raster
        dB samples, same kind and grid as the input.

    Raises
    ------
    UnitError
        If a Raster is not in natural units.
    """
    if isinstance(image, Raster):
        if image.unit is not BackscatterUnit.NATURAL:
            raise UnitError(f"to_db expects a natural-unit raster, got unit {image.unit}")
        return image.with_data(_db_array(image.data), unit=BackscatterUnit.DB)
    return _db_array(image)


# ===================================================================
# Processor wrappers
# ===================================================================

@processor_version('1.0.0')
@processor_tags(
    modalities=[ImageModality.SAR],
    category=ProcessorCategory.MATH,
    description='Convert backscatter from dB to linear power'
)
class DecibelToNatural(ImageTransform):
    """Pipeline step converting dB backscatter to linear power."""

    __gpu_compatible__ = True

    def apply(self, source: np.ndarray, **kwargs: Any) -> np.ndarray:
        """Return ``10 ** (source / 10)`` as float64."""
        return _natural_array(source)


@processor_version('1.0.0')
@processor_tags(
    modalities=[ImageModality.SAR],
    category=ProcessorCategory.MATH,
    description='Convert backscatter from linear power to dB'
)
class NaturalToDecibel(ImageTransform):
    """Pipeline step converting linear power to dB (NaN where undefined)."""

    __gpu_compatible__ = True

    def apply(self, source: np.ndarray, **kwargs: Any) -> np.ndarray:
        """Return ``10 * log10(source)`` as float64, NaN for non-positive input."""
        return _db_array(source)


__all__ = [
    "to_natural",
    "to_db",
    "DecibelToNatural",
    "NaturalToDecibel",
]
