# -*- coding: utf-8 -*-
"""
Raster Grid Geometry - Origin, pixel size, and extent of a raster grid.

Provides the grid description needed to address pixels of a raster and
to write them out: upper-left origin, signed pixel size, dimensions and
an optional CRS label. Rasters combined pixel-wise must share identical
grids; ``require_same_grid`` enforces this before any pixel work.

Dependencies
------------
numpy - Vectorized pixel/world transforms
dataclasses - Immutable grid structure

License
-------
MIT License
Copyright (c) 2024 geoint.org

Created
-------
2026-02-11

Modified
--------
2026-02-18
"""

# Standard library
from typing import Optional, Sequence, Tuple, Union
from dataclasses import dataclass

# Third-party
import numpy as np

# GRDL internal
from grdl_sarflood.exceptions import GridMismatchError
from grdl_sarflood.utils.constants import DEFAULT_PIXEL_SPACING


#: Absolute tolerance when comparing grid origins and pixel sizes
GRID_TOLERANCE = 1e-6


# ===================================================================
# Data Structures
# ===================================================================

@dataclass(frozen=True)
class GridGeometry:
    """
    Geometry of a north-up raster grid.

    Attributes
    ----------
    rows : int
        Number of pixel rows.
    cols : int
        Number of pixel columns.
    origin_x : float
        X coordinate of the upper-left corner of the upper-left pixel.
    origin_y : float
        Y coordinate of the upper-left corner of the upper-left pixel.
    pixel_width : float
        Pixel size along X (positive).
    pixel_height : float
        Pixel size along Y (negative for north-up grids).
    crs : str, optional
        Coordinate reference system label (e.g. ``'EPSG:32643'``).
        Carried through unchanged, never interpreted.
    """
    rows: int
    cols: int
    origin_x: float = 0.0
    origin_y: float = 0.0
    pixel_width: float = DEFAULT_PIXEL_SPACING
    pixel_height: float = -DEFAULT_PIXEL_SPACING
    crs: Optional[str] = None

    def __post_init__(self) -> None:
        if not isinstance(self.rows, (int, np.integer)) or \
                not isinstance(self.cols, (int, np.integer)):
            raise TypeError(
                f"rows and cols must be int, got {type(self.rows).__name__} "
                f"and {type(self.cols).__name__}"
            )
        if self.rows <= 0 or self.cols <= 0:
            raise ValueError(
                f"rows and cols must be positive, got ({self.rows}, {self.cols})"
            )
        if self.pixel_width == 0 or self.pixel_height == 0:
            raise ValueError(
                f"pixel size must be non-zero, got "
                f"({self.pixel_width}, {self.pixel_height})"
            )

    @classmethod
    def from_transform(
        cls,
        transform: Sequence[float],
        rows: int,
        cols: int,
        crs: Optional[str] = None
    ) -> 'GridGeometry':
        """
        Build a grid from a GDAL-ordered geotransform.

        Parameters
        ----------
        transform : sequence of float
            ``(origin_x, pixel_width, row_rotation, origin_y,
            col_rotation, pixel_height)``.
        rows : int
            Number of rows.
        cols : int
            Number of columns.
        crs : str, optional
            CRS label.

        Returns
        -------
        GridGeometry

        Raises
        ------
        ValueError
            If the transform does not have six terms or is rotated.
        """
        if len(transform) != 6:
            raise ValueError(
                f"transform must have 6 terms, got {len(transform)}"
            )
        if transform[2] != 0 or transform[4] != 0:
            raise ValueError("rotated geotransforms are not supported")
        return cls(
            rows=int(rows),
            cols=int(cols),
            origin_x=float(transform[0]),
            origin_y=float(transform[3]),
            pixel_width=float(transform[1]),
            pixel_height=float(transform[5]),
            crs=crs,
        )

    @property
    def shape(self) -> Tuple[int, int]:
        """Grid shape as ``(rows, cols)``."""
        return (int(self.rows), int(self.cols))

    @property
    def transform(self) -> Tuple[float, float, float, float, float, float]:
        """GDAL-ordered geotransform."""
        return (self.origin_x, self.pixel_width, 0.0,
                self.origin_y, 0.0, self.pixel_height)

    @property
    def pixel_spacing(self) -> float:
        """Pixel spacing along X in grid units."""
        return abs(self.pixel_width)

    @property
    def extent(self) -> Tuple[float, float, float, float]:
        """Bounding box ``(xmin, ymin, xmax, ymax)`` of the whole grid."""
        x0 = self.origin_x
        x1 = self.origin_x + self.cols * self.pixel_width
        y0 = self.origin_y
        y1 = self.origin_y + self.rows * self.pixel_height
        return (min(x0, x1), min(y0, y1), max(x0, x1), max(y0, y1))

    def pixel_to_world(
        self,
        row: Union[float, np.ndarray],
        col: Union[float, np.ndarray]
    ) -> Tuple[Union[float, np.ndarray], Union[float, np.ndarray]]:
        """
        World coordinates of pixel centres.

        Parameters
        ----------
        row : float or np.ndarray
            Row index (or indices).
        col : float or np.ndarray
            Column index (or indices).

        Returns
        -------
        x, y : float or np.ndarray
            World coordinates of the pixel centres.
        """
        x = self.origin_x + (np.asarray(col) + 0.5) * self.pixel_width
        y = self.origin_y + (np.asarray(row) + 0.5) * self.pixel_height
        if np.ndim(x) == 0:
            return float(x), float(y)
        return x, y

    def world_to_pixel(
        self,
        x: Union[float, np.ndarray],
        y: Union[float, np.ndarray]
    ) -> Tuple[Union[float, np.ndarray], Union[float, np.ndarray]]:
        """
        Fractional pixel coordinates of world points.

        Inverse of :meth:`pixel_to_world`: a pixel centre maps back to
        integral ``(row, col)``.

        Parameters
        ----------
        x : float or np.ndarray
            World X coordinate(s).
        y : float or np.ndarray
            World Y coordinate(s).

        Returns
        -------
        row, col : float or np.ndarray
        """
        col = (np.asarray(x) - self.origin_x) / self.pixel_width - 0.5
        row = (np.asarray(y) - self.origin_y) / self.pixel_height - 0.5
        if np.ndim(row) == 0:
            return float(row), float(col)
        return row, col

    def same_grid(self, other: 'GridGeometry', atol: float = GRID_TOLERANCE) -> bool:
        """
        Whether two grids share extent, pixel size and alignment.

        CRS labels must match exactly when both are set.

        Parameters
        ----------
        other : GridGeometry
            Grid to compare against.
        atol : float
            Absolute tolerance on origin and pixel size.

        Returns
        -------
        bool
        """
        if self.shape != other.shape:
            return False
        if self.crs is not None and other.crs is not None and self.crs != other.crs:
            return False
        mine = np.array(self.transform)
        theirs = np.array(other.transform)
        return bool(np.allclose(mine, theirs, rtol=0.0, atol=atol))


# ===================================================================
# Validation
# ===================================================================

def require_same_grid(*grids: GridGeometry, names: Optional[Sequence[str]] = None) -> GridGeometry:
    """
    Fail fast unless every grid is identical to the first.

    Parameters
    ----------
    *grids : GridGeometry
        Grids to compare. At least one is required.
    names : sequence of str, optional
        Labels used in the error message, one per grid.

    Returns
    -------
    GridGeometry
        The common grid.

    Raises
    ------
    ValueError
        If no grids are given.
    GridMismatchError
        If any grid differs from the first.
    """
    if not grids:
        raise ValueError("at least one grid is required")
    if names is None:
        names = [f"grid[{i}]" for i in range(len(grids))]

    reference = grids[0]
    for name, grid in zip(names[1:], grids[1:]):
        if not reference.same_grid(grid):
            raise GridMismatchError(
                f"{name} is not on the same grid as {names[0]}: "
                f"shape {grid.shape} vs {reference.shape}, "
                f"transform {grid.transform} vs {reference.transform}"
            )
    return reference


__all__ = [
    "GRID_TOLERANCE",
    "GridGeometry",
    "require_same_grid",
]
