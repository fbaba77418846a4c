# -*- coding: utf-8 -*-
"""
Utilities - Constants.

Radiometric, grid, and filter constants for SAR flood mapping.

License
-------
MIT License
Copyright (c) 2024 geoint.org
"""

from grdl_sarflood.utils.constants import (
    DB_SCALE,
    DEFAULT_THRESHOLD_DB,
    DEFAULT_PIXEL_SPACING,
    LOCAL_WINDOW_SIZE,
    DIRECTIONAL_WINDOW_SIZE,
    NOISE_SAMPLE_COUNT,
    FILTER_HALO,
    DEFAULT_TILE_SIZE,
)

__all__ = [
    "DB_SCALE",
    "DEFAULT_THRESHOLD_DB",
    "DEFAULT_PIXEL_SPACING",
    "LOCAL_WINDOW_SIZE",
    "DIRECTIONAL_WINDOW_SIZE",
    "NOISE_SAMPLE_COUNT",
    "FILTER_HALO",
    "DEFAULT_TILE_SIZE",
]
