# -*- coding: utf-8 -*-
"""
SAR Flood Processing - Speckle filtering and change detection stages.

This module contains the processing stages of the flood mapping chain:

- Backscatter unit conversion (dB <-> linear power)
- Fixed neighborhood kernels and windowed statistics
- Edge direction selection and local noise estimation
- Refined Lee speckle filter
- Bi-temporal threshold change detection
- Quality mosaic of scene stacks
- Halo-padded tiled execution

License
-------
MIT License
Copyright (c) 2024 geoint.org
"""

# Units
from grdl_sarflood.processing.units import (
    to_natural,
    to_db,
    DecibelToNatural,
    NaturalToDecibel,
)

# Kernels and neighborhood statistics
from grdl_sarflood.processing.kernels import (
    Kernel,
    Direction,
    BOX_3X3,
    SAMPLE_7X7,
    DIRECTIONAL_KERNELS,
)
from grdl_sarflood.processing.neighborhood import (
    Reducer,
    neighborhood_stats,
    reduce_neighborhood,
    neighborhood_to_bands,
)

# Edge directions
from grdl_sarflood.processing.directions import (
    TIE_POLICIES,
    NO_DIRECTION,
    DirectionField,
    sample_statistics,
    directional_gradients,
    select_directions,
    estimate_noise_variance,
)
from grdl_sarflood.processing.directional_stats import directional_statistics

# Speckle filtering
from grdl_sarflood.processing.speckle_filter import (
    adaptive_estimate,
    refined_lee,
    RefinedLeeFilter,
)

# Change detection
from grdl_sarflood.processing.change_detection import (
    threshold_masks,
    FloodMaps,
    FloodChangeDetector,
)

# Compositing
from grdl_sarflood.processing.composite import quality_mosaic

# Tiling
from grdl_sarflood.processing.tiling import (
    TileWindow,
    plan_tiles,
    apply_tiled,
)

__all__ = [
    # Units
    "to_natural",
    "to_db",
    "DecibelToNatural",
    "NaturalToDecibel",
    # Kernels
    "Kernel",
    "Direction",
    "BOX_3X3",
    "SAMPLE_7X7",
    "DIRECTIONAL_KERNELS",
    # Neighborhood
    "Reducer",
    "neighborhood_stats",
    "reduce_neighborhood",
    "neighborhood_to_bands",
    # Directions
    "TIE_POLICIES",
    "NO_DIRECTION",
    "DirectionField",
    "sample_statistics",
    "directional_gradients",
    "select_directions",
    "estimate_noise_variance",
    "directional_statistics",
    # Speckle
    "adaptive_estimate",
    "refined_lee",
    "RefinedLeeFilter",
    # Change detection
    "threshold_masks",
    "FloodMaps",
    "FloodChangeDetector",
    # Compositing
    "quality_mosaic",
    # Tiling
    "TileWindow",
    "plan_tiles",
    "apply_tiled",
]
