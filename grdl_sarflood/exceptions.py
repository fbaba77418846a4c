# -*- coding: utf-8 -*-
"""
Exceptions - Flood mapping errors built on the GRDL exception hierarchy.

License
-------
MIT License
Copyright (c) 2024 geoint.org
"""

from grdl.exceptions import ValidationError


class GridMismatchError(ValidationError):
    """Rasters combined pixel-wise are not on identical grids.

    Raised before any pixel computation. Inputs are never resampled.
    """


class UnitError(ValidationError):
    """Raster is in the wrong radiometric unit for the requested operation."""


__all__ = ["GridMismatchError", "UnitError"]
