# -*- coding: utf-8 -*-
"""
Edge Directions - Dominant edge orientation and local noise level.

From 3x3 window means sampled at nine points of a 7x7 neighborhood
(row-major, top row first)::

    0 . 1 . 2
    . . . . .
    3 . 4 . 5
    . . . . .
    6 . 7 . 8

four gradient magnitudes are formed across the centre sample 4:

    g0 = |m1 - m7|   vertical
    g1 = |m6 - m2|   anti-diagonal
    g2 = |m3 - m5|   horizontal
    g3 = |m0 - m8|   diagonal

Every gradient equal to the largest one is active. Along each active
axis the comparison picks one of two opposite labels (window side in
parentheses, see ``Direction``):

    d0: (m1 - m4) > (m4 - m7) -> 1 (south)      else 5 (north)
    d1: (m6 - m4) > (m4 - m2) -> 2 (southwest)  else 6 (northeast)
    d2: (m3 - m4) > (m4 - m5) -> 3 (west)       else 7 (east)
    d3: (m0 - m4) > (m4 - m8) -> 4 (northwest)  else 8 (southeast)

When several gradients tie, the raw result is the sum of the active
labels (``DirectionField.composite``). ``tie_policy`` decides what is
done with it:

``'first'``
    Use the label of the first active gradient in the order g0, g2,
    g1, g3 (axis gradients before diagonal ones). A straight row or
    column edge ties its axis gradient with both diagonals, and this
    order resolves it to the axis. Where no gradient is defined (raster
    corners, where samples fall off the grid) all four count as tied,
    so every pixel gets a label.
``'composite'``
    Use the summed label as is. A sum from 1 to 8 takes the window of
    that label, which need not be one of the tied labels (1 + 2 -> 3).
    Sums above 8 match no directional window and leave the pixel
    without a direction.

The local noise level ``sigmaV`` is the mean of the five smallest of
the nine sampled ``variance / mean**2`` ratios.

Dependencies
------------
numpy - Array operations

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
from dataclasses import dataclass
from typing import Optional, Tuple

# Third-party
import numpy as np

# GRDL internal
from grdl_sarflood.processing.kernels import BOX_3X3, SAMPLE_7X7
from grdl_sarflood.processing.neighborhood import (
    neighborhood_stats,
    neighborhood_to_bands,
)
from grdl_sarflood.utils.constants import NOISE_SAMPLE_COUNT

#: Allowed values for ``tie_policy``
TIE_POLICIES = ('first', 'composite')

#: Label returned where no direction could be determined
NO_DIRECTION = 0

# ((sample, opposite sample), label, opposite label) per axis
_AXES = (
    ((1, 7), 1, 5),
    ((6, 2), 2, 6),
    ((3, 5), 3, 7),
    ((0, 8), 4, 8),
)

# Gradient order used by the 'first' tie policy
_TIE_PRIORITY = np.array([0, 2, 1, 3])


@dataclass
class DirectionField:
    """
    Per-pixel edge direction.

    Attributes
    ----------
    labels : np.ndarray
        Direction label used for windowing (1-8), ``NO_DIRECTION`` (0)
        where none applies. int16, shape (rows, cols).
    composite : np.ndarray
        Sum of the labels of all active gradients, int16. Equals
        ``labels`` wherever there is no tie.
    tied : np.ndarray
        Boolean, True where more than one gradient reached the maximum.
    """
    labels: np.ndarray
    composite: np.ndarray
    tied: np.ndarray


def sample_statistics(
    data: np.ndarray,
    mask: Optional[np.ndarray] = None
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Sample 3x3 window statistics at the nine 7x7 lattice points.

    Parameters
    ----------
    data : np.ndarray
        2D linear-power raster. NaN samples are treated as masked.
    mask : np.ndarray, optional
        Boolean mask, True for samples to exclude.

    Returns
    -------
    sample_mean : np.ndarray
        Shape (9, rows, cols). NaN where the lattice point is off-grid.
    sample_var : np.ndarray
        Shape (9, rows, cols).
    """
    mean3, var3 = neighborhood_stats(data, BOX_3X3, mask)
    return (neighborhood_to_bands(mean3, SAMPLE_7X7),
            neighborhood_to_bands(var3, SAMPLE_7X7))


def directional_gradients(sample_mean: np.ndarray) -> np.ndarray:
    """
    Absolute gradients along the four axes through the centre sample.

    Parameters
    ----------
    sample_mean : np.ndarray
        Sampled means, shape (9, rows, cols).

    Returns
    -------
    np.ndarray
        Gradients ``g0..g3``, shape (4, rows, cols).
    """
    return np.stack([
        np.abs(sample_mean[a] - sample_mean[b]) for (a, b), _, _ in _AXES
    ])


def select_directions(
    sample_mean: np.ndarray,
    tie_policy: str = 'first'
) -> DirectionField:
    """
    Choose the edge direction at every pixel.

    Parameters
    ----------
    sample_mean : np.ndarray
        Sampled means, shape (9, rows, cols).
    tie_policy : str
        ``'first'`` or ``'composite'``; see module docstring.

    Returns
    -------
    DirectionField

    Raises
    ------
    ValueError
        If tie_policy is unknown or sample_mean has the wrong shape.
    """
    if tie_policy not in TIE_POLICIES:
        raise ValueError(
            f"tie_policy must be one of {TIE_POLICIES}, got {tie_policy!r}"
        )
    if sample_mean.ndim != 3 or sample_mean.shape[0] != 9:
        raise ValueError(
            f"sample_mean must have shape (9, rows, cols), got {sample_mean.shape}"
        )

    gradients = directional_gradients(sample_mean)
    # fmax skips NaN gradients from off-grid samples
    max_gradient = np.fmax.reduce(gradients, axis=0)
    active = gradients == max_gradient[np.newaxis]

    centre = sample_mean[4]
    candidates = np.empty(gradients.shape, dtype=np.int16)
    for k, ((side, opposite), label, opposite_label) in enumerate(_AXES):
        with np.errstate(invalid='ignore'):
            side_differs = (sample_mean[side] - centre) > (centre - sample_mean[opposite])
        candidates[k] = np.where(side_differs, label, opposite_label)

    composite = np.where(active, candidates, 0).sum(axis=0).astype(np.int16)
    tied = active.sum(axis=0) > 1

    if tie_policy == 'first':
        # An all-False column gives argmax 0: no defined gradient resolves
        # like a four-way tie
        first_active = _TIE_PRIORITY[np.argmax(active[_TIE_PRIORITY], axis=0)]
        labels = np.take_along_axis(candidates, first_active[np.newaxis], axis=0)[0]
    else:
        labels = np.where(composite <= 8, composite, NO_DIRECTION).astype(np.int16)

    return DirectionField(labels=labels, composite=composite, tied=tied)


def estimate_noise_variance(
    sample_mean: np.ndarray,
    sample_var: np.ndarray,
    n_smallest: int = NOISE_SAMPLE_COUNT
) -> np.ndarray:
    """
    Local noise variance ratio ``sigmaV``.

    The nine ``variance / mean**2`` ratios are sorted ascending and the
    first ``n_smallest`` are averaged: homogeneous patches have the
    lowest ratios and carry the speckle level. Ratios that are not
    finite (off-grid samples, zero mean) are dropped before sorting, so
    border pixels average fewer samples.

    Parameters
    ----------
    sample_mean : np.ndarray
        Sampled means, shape (9, rows, cols).
    sample_var : np.ndarray
        Sampled variances, shape (9, rows, cols).
    n_smallest : int
        Number of smallest ratios to average. Default 5.

    Returns
    -------
    np.ndarray
        sigmaV, shape (rows, cols). NaN where no ratio is finite.
    """
    if n_smallest < 1:
        raise ValueError(f"n_smallest must be >= 1, got {n_smallest}")

    with np.errstate(divide='ignore', invalid='ignore'):
        ratios = sample_var / (sample_mean * sample_mean)
    ratios[~np.isfinite(ratios)] = np.nan

    # NaN sorts last
    smallest = np.sort(ratios, axis=0)[:n_smallest]
    finite = np.isfinite(smallest)
    count = finite.sum(axis=0)
    total = np.where(finite, smallest, 0.0).sum(axis=0)
    with np.errstate(divide='ignore', invalid='ignore'):
        sigma_v = total / count
    sigma_v[count == 0] = np.nan
    return sigma_v


__all__ = [
    "TIE_POLICIES",
    "NO_DIRECTION",
    "DirectionField",
    "sample_statistics",
    "directional_gradients",
    "select_directions",
    "estimate_noise_variance",
]
