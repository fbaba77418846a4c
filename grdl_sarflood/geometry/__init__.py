# -*- coding: utf-8 -*-
"""
Geometry - Raster grid description and grid compatibility checks.

License
-------
MIT License
Copyright (c) 2024 geoint.org
"""

from grdl_sarflood.geometry.grid import (
    GRID_TOLERANCE,
    GridGeometry,
    require_same_grid,
)

__all__ = [
    "GRID_TOLERANCE",
    "GridGeometry",
    "require_same_grid",
]
