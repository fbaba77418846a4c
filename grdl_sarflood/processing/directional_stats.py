# -*- coding: utf-8 -*-
"""
Directional Statistics - Edge-aligned window mean and variance.

For every direction label present in a ``DirectionField``, the mean and
variance of the raw samples are computed with that label's 7x7
directional kernel, and each pixel takes the pair belonging to its own
label. The selection is a one-hot gather by label, so no pixel ever
mixes statistics from two windows.

License
-------
MIT License
Copyright (c) 2024 geoint.org

Created
-------
2026-02-13

Modified
--------
2026-02-18
"""

# Standard library
import logging
from typing import Optional, Tuple

# Third-party
import numpy as np

# GRDL internal
from grdl_sarflood.processing.kernels import DIRECTIONAL_KERNELS
from grdl_sarflood.processing.neighborhood import neighborhood_stats

logger = logging.getLogger(__name__)


def directional_statistics(
    data: np.ndarray,
    labels: np.ndarray,
    mask: Optional[np.ndarray] = None
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Mean and variance over each pixel's directional window.

    Parameters
    ----------
    data : np.ndarray
        2D linear-power raster, shape (rows, cols). NaN samples are
        treated as masked.
    labels : np.ndarray
        Direction labels 1-8 per pixel, same shape. Any other value
        (including 0) selects no window.
    mask : np.ndarray, optional
        Boolean mask, True for samples to exclude from the windows.

    Returns
    -------
    dir_mean : np.ndarray
        Directional mean, float64. NaN where no window applies.
    dir_var : np.ndarray
        Directional population variance, float64. NaN where no window
        applies.

    Raises
    ------
    ValueError
        If labels and data shapes differ.
    """
    labels = np.asarray(labels)
    if labels.shape != data.shape:
        raise ValueError(
            f"labels shape {labels.shape} does not match data shape {data.shape}"
        )

    dir_mean = np.full(data.shape, np.nan)
    dir_var = np.full(data.shape, np.nan)

    for direction, kernel in DIRECTIONAL_KERNELS.items():
        selected = labels == int(direction)
        if not selected.any():
            continue
        mean, variance = neighborhood_stats(data, kernel, mask)
        dir_mean[selected] = mean[selected]
        dir_var[selected] = variance[selected]
        logger.debug("Direction %d (%s): %d pixels",
                     int(direction), kernel.name, int(selected.sum()))

    return dir_mean, dir_var


__all__ = ["directional_statistics"]
