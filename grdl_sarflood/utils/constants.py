# -*- coding: utf-8 -*-
"""
Constants - Radiometric, grid, and filter constants for flood mapping.

Provides the fixed values shared across the flood mapping chain:
- Decibel scaling for backscatter power
- Water classification threshold
- Default pixel spacing of the source grids
- Refined Lee window geometry and noise-estimate sample count

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

# ===================================================================
# Radiometry
# ===================================================================

#: Decibel scale factor for power quantities (dB = 10 * log10(P))
DB_SCALE = 10.0

#: Backscatter level (dB) below which a surface is classified as
#: specular / water-like
DEFAULT_THRESHOLD_DB = -15.0

# ===================================================================
# Grid
# ===================================================================

#: Pixel spacing of the source rasters (meters)
DEFAULT_PIXEL_SPACING = 10.0  # m

# ===================================================================
# Refined Lee Filter
# ===================================================================

#: Side length of the local statistics window (3x3)
LOCAL_WINDOW_SIZE = 3

#: Side length of the directional window (7x7)
DIRECTIONAL_WINDOW_SIZE = 7

#: Number of lowest variance-to-mean-squared ratios averaged into sigmaV
NOISE_SAMPLE_COUNT = 5

#: Halo (pixels) a tile needs so that its core matches a whole-raster run
FILTER_HALO = DIRECTIONAL_WINDOW_SIZE // 2

#: Default core tile side length for tiled execution (pixels)
DEFAULT_TILE_SIZE = 512


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
