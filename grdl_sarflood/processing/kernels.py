# -*- coding: utf-8 -*-
"""
Kernels - Fixed neighborhood windows used by the Refined Lee filter.

Defines the immutable ``Kernel`` type and the static kernel table:

- ``BOX_3X3``: local statistics window.
- ``SAMPLE_7X7``: nine 3x3-window centres on a stride-2 lattice inside a
  7x7 neighborhood, used to sample local statistics for edge detection.
- ``DIRECTIONAL_KERNELS``: eight 7x7 edge-aligned windows indexed by
  ``Direction``. Labels 1/3/5/7 are rectangular half windows and labels
  2/4/6/8 triangular (diagonal) windows. Each includes the centre line
  and covers one side of it.

The table is built once at import; nothing is rotated at run time.

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
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Dict, Tuple

# Third-party
import numpy as np

# GRDL internal
from grdl_sarflood.utils.constants import DIRECTIONAL_WINDOW_SIZE, LOCAL_WINDOW_SIZE


# ===================================================================
# Kernel type
# ===================================================================

@dataclass(frozen=True, eq=False)
class Kernel:
    """
    Fixed-size weight grid anchored at its centre cell.

    Parameters
    ----------
    weights : array_like
        2D weights with odd side lengths. Zero cells are outside the
        neighborhood.
    name : str
        Label used in logs and reprs.

    Raises
    ------
    ValueError
        If weights are not 2D with odd side lengths, are negative, or
        are all zero.
    """
    weights: np.ndarray
    name: str = field(default='kernel')

    def __post_init__(self) -> None:
        weights = np.array(self.weights, dtype=np.float64)
        if weights.ndim != 2:
            raise ValueError(f"kernel weights must be 2D, got {weights.ndim}D")
        if weights.shape[0] % 2 == 0 or weights.shape[1] % 2 == 0:
            raise ValueError(
                f"kernel side lengths must be odd, got {weights.shape}"
            )
        if np.any(weights < 0):
            raise ValueError("kernel weights must be non-negative")
        if not np.any(weights > 0):
            raise ValueError("kernel must have at least one non-zero weight")
        weights.setflags(write=False)
        object.__setattr__(self, 'weights', weights)

    @property
    def shape(self) -> Tuple[int, int]:
        """Kernel shape ``(rows, cols)``."""
        return self.weights.shape

    @property
    def anchor(self) -> Tuple[int, int]:
        """Index of the centre cell."""
        return (self.weights.shape[0] // 2, self.weights.shape[1] // 2)

    @property
    def radius(self) -> int:
        """Largest row/column distance from the anchor to the kernel edge."""
        return max(self.anchor)

    @property
    def offsets(self) -> Tuple[Tuple[int, int, float], ...]:
        """Non-zero cells as ``(drow, dcol, weight)``, row-major."""
        ar, ac = self.anchor
        rows, cols = np.nonzero(self.weights)
        return tuple(
            (int(r - ar), int(c - ac), float(self.weights[r, c]))
            for r, c in zip(rows, cols)
        )

    def __repr__(self) -> str:
        return f"Kernel(name={self.name!r}, shape={self.shape}, cells={len(self.offsets)})"


# ===================================================================
# Static kernel table
# ===================================================================

class Direction(IntEnum):
    """
    Edge direction labels.

    Member names give the side of the centre pixel covered by the
    label's directional window. Going from label 1 to 8 the window
    turns clockwise in 45 degree steps, so labels ``k`` and ``k + 4``
    face opposite ways. See ``grdl_sarflood.processing.directions`` for
    how labels are chosen.
    """
    SOUTH = 1
    SOUTHWEST = 2
    WEST = 3
    NORTHWEST = 4
    NORTH = 5
    NORTHEAST = 6
    EAST = 7
    SOUTHEAST = 8


def _sample_lattice(size: int) -> np.ndarray:
    """Ones at the odd rows and columns of a size x size grid."""
    weights = np.zeros((size, size))
    weights[1::2, 1::2] = 1.0
    return weights


BOX_3X3 = Kernel(np.ones((LOCAL_WINDOW_SIZE, LOCAL_WINDOW_SIZE)), name='box3x3')

SAMPLE_7X7 = Kernel(_sample_lattice(DIRECTIONAL_WINDOW_SIZE), name='sample7x7')

# Centre row and the rows below it
_RECT_WEIGHTS = np.zeros((DIRECTIONAL_WINDOW_SIZE, DIRECTIONAL_WINDOW_SIZE))
_RECT_WEIGHTS[DIRECTIONAL_WINDOW_SIZE // 2:] = 1.0

# Main diagonal and the lower-left triangle
_DIAG_WEIGHTS = np.tril(np.ones((DIRECTIONAL_WINDOW_SIZE, DIRECTIONAL_WINDOW_SIZE)))


def _directional_kernels() -> Dict[Direction, Kernel]:
    """Label 2i+1 is the half window and label 2i+2 the triangle, turned
    i quarter turns clockwise."""
    kernels = {}
    for turns in range(4):
        for base, label in ((_RECT_WEIGHTS, 2 * turns + 1),
                            (_DIAG_WEIGHTS, 2 * turns + 2)):
            direction = Direction(label)
            # np.rot90 turns counter-clockwise for positive k
            kernels[direction] = Kernel(np.rot90(base, -turns),
                                        name=direction.name.lower())
    return kernels


DIRECTIONAL_KERNELS: Dict[Direction, Kernel] = _directional_kernels()


__all__ = [
    "Kernel",
    "Direction",
    "BOX_3X3",
    "SAMPLE_7X7",
    "DIRECTIONAL_KERNELS",
]
