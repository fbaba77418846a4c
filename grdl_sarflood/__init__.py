# -*- coding: utf-8 -*-
"""
grdl-sarflood - Bi-temporal SAR flood mapping on GRDL processors.

Speckle-filters a normal-condition and a flood-condition Sentinel-1
style backscatter scene with the Refined Lee filter and thresholds the
pair into persistent water and flood extent masks.

Modules
-------
processing : Unit conversion, Refined Lee filter, change detection
pipeline : End-to-end flood mapper
geometry : Raster grid description and compatibility checks
io : Raster exchange type
utils : Constants and helper functions

License
-------
MIT License
Copyright (c) 2024 geoint.org
"""

__version__ = "0.1.0"

from grdl_sarflood import processing, geometry, io, utils
from grdl_sarflood.pipeline import FloodMapper, FloodMapResult, map_flood_extent

__all__ = [
    "processing",
    "geometry",
    "io",
    "utils",
    "FloodMapper",
    "FloodMapResult",
    "map_flood_extent",
    "__version__",
]
