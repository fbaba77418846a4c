# -*- coding: utf-8 -*-
"""
Neighborhood Statistics - Windowed mean and variance over fixed kernels.

Computes, for every pixel, the kernel-weighted mean or population
variance of the samples inside the kernel window centred on it:

    mean = sum(w * x) / sum(w)
    var  = sum(w * x**2) / sum(w) - mean**2

Both sums are formed with ``scipy.ndimage.correlate`` on a value plane
and a validity plane, so the cost per pixel is the kernel size and
border handling falls out of the zero padding.

Border policy: truncation. Window cells that fall outside the raster,
and masked (NaN) cells, are dropped from the window; the statistic over
the remaining cells is a valid output. A window with no valid cell
gives NaN. There is no wraparound or reflection.

Dependencies
------------
numpy - Array operations
scipy.ndimage - Correlation for windowed sums

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
from enum import Enum
from typing import Optional, Tuple, Union

# Third-party
import numpy as np
from scipy import ndimage

# GRDL internal
from grdl_sarflood.processing.kernels import Kernel


class Reducer(str, Enum):
    """Windowed reductions."""
    MEAN = "mean"
    VARIANCE = "variance"


# ===================================================================
# Helpers
# ===================================================================

def _validate_raster_array(data: np.ndarray, param_name: str = "data") -> None:
    """
    Validate a 2D real-valued raster array.

    Raises
    ------
    TypeError
        If not a numpy array, or complex.
    ValueError
        If not 2D.
    """
    if not isinstance(data, np.ndarray):
        raise TypeError(
            f"{param_name} must be a numpy ndarray, got {type(data).__name__}"
        )
    if np.iscomplexobj(data):
        raise TypeError(f"{param_name} must be real-valued, got {data.dtype}")
    if data.ndim != 2:
        raise ValueError(
            f"{param_name} must be 2D (rows, cols), got {data.ndim}D "
            f"with shape {data.shape}"
        )


def _valid_planes(
    data: np.ndarray,
    mask: Optional[np.ndarray]
) -> Tuple[np.ndarray, np.ndarray]:
    """Split data into (zero-filled values, validity as float)."""
    values = data.astype(np.float64)
    valid = np.isfinite(values)
    if mask is not None:
        valid &= ~np.asarray(mask, dtype=bool)
    return np.where(valid, values, 0.0), valid.astype(np.float64)


def _window_sum(plane: np.ndarray, kernel: Kernel) -> np.ndarray:
    return ndimage.correlate(plane, kernel.weights, mode='constant', cval=0.0)


# ===================================================================
# Reductions
# ===================================================================

def neighborhood_stats(
    data: np.ndarray,
    kernel: Kernel,
    mask: Optional[np.ndarray] = None
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Windowed weighted mean and population variance.

    Parameters
    ----------
    data : np.ndarray
        2D raster, shape (rows, cols). NaN samples are treated as masked.
    kernel : Kernel
        Window weights, anchored at the kernel centre.
    mask : np.ndarray, optional
        Boolean mask, True for samples to exclude.

    Returns
    -------
    mean : np.ndarray
        Windowed mean, float64. NaN where the window has no valid cell.
    variance : np.ndarray
        Windowed population variance, float64, >= 0. NaN where the
        window has no valid cell.
    """
    _validate_raster_array(data)
    filled, valid = _valid_planes(data, mask)

    weight_sum = _window_sum(valid, kernel)
    value_sum = _window_sum(filled, kernel)
    square_sum = _window_sum(filled * filled, kernel)

    empty = weight_sum <= 0
    with np.errstate(divide='ignore', invalid='ignore'):
        mean = value_sum / weight_sum
        variance = square_sum / weight_sum - mean * mean
    # Clamp tiny negative values from floating-point rounding
    np.maximum(variance, 0.0, out=variance)

    mean[empty] = np.nan
    variance[empty] = np.nan
    return mean, variance


def reduce_neighborhood(
    data: np.ndarray,
    kernel: Kernel,
    reducer: Union[Reducer, str] = Reducer.MEAN,
    mask: Optional[np.ndarray] = None
) -> np.ndarray:
    """
    Apply a windowed reduction at every pixel.

    Parameters
    ----------
    data : np.ndarray
        2D raster, shape (rows, cols).
    kernel : Kernel
        Window weights.
    reducer : Reducer or str
        ``'mean'`` or ``'variance'`` (population).
    mask : np.ndarray, optional
        Boolean mask, True for samples to exclude.

    Returns
    -------
    np.ndarray
        Reduced raster, float64, same shape as ``data``.

    Raises
    ------
    ValueError
        If the reducer is unknown.
    """
    reducer = Reducer(reducer)
    mean, variance = neighborhood_stats(data, kernel, mask)
    if reducer is Reducer.MEAN:
        return mean
    return variance


def neighborhood_to_bands(data: np.ndarray, kernel: Kernel) -> np.ndarray:
    """
    Stack the samples under each non-zero kernel cell as bands.

    Band ``k`` holds, at every pixel, the value found at the ``k``-th
    non-zero kernel cell (row-major) relative to that pixel. Samples
    that fall outside the raster are NaN.

    Parameters
    ----------
    data : np.ndarray
        2D raster, shape (rows, cols).
    kernel : Kernel
        Sampling pattern.

    Returns
    -------
    np.ndarray
        Band stack, shape (n_cells, rows, cols), float64.
    """
    _validate_raster_array(data)
    rows, cols = data.shape
    pr, pc = kernel.anchor
    padded = np.pad(
        data.astype(np.float64),
        ((pr, pr), (pc, pc)),
        mode='constant',
        constant_values=np.nan,
    )

    offsets = kernel.offsets
    bands = np.empty((len(offsets), rows, cols), dtype=np.float64)
    for k, (dr, dc, _) in enumerate(offsets):
        bands[k] = padded[pr + dr:pr + dr + rows, pc + dc:pc + dc + cols]
    return bands


__all__ = [
    "Reducer",
    "neighborhood_stats",
    "reduce_neighborhood",
    "neighborhood_to_bands",
]
