# -*- coding: utf-8 -*-
"""
Quality Mosaic - Per-pixel best-scene composite of a scene stack.

Collapses several co-registered scenes of one epoch into a single
raster. Each pixel takes its value from the scene with the highest
quality score there. By default a scene's own samples are its quality,
which for a VH backscatter stack keeps the brightest observation.

Masked samples never win. Ties go to the earliest scene in the stack.
Pixels masked in every scene stay masked.

License
-------
MIT License
Copyright (c) 2024 geoint.org

Created
-------
2026-02-16

Modified
--------
2026-02-18
"""

# Standard library
import logging
from typing import Optional, Sequence, Union

# Third-party
import numpy as np

# GRDL internal
from grdl_sarflood.exceptions import UnitError
from grdl_sarflood.geometry.grid import require_same_grid
from grdl_sarflood.io.raster import Raster

logger = logging.getLogger(__name__)


def quality_mosaic(
    scenes: Sequence[Raster],
    quality: Optional[Sequence[Union[Raster, np.ndarray]]] = None
) -> Raster:
    """
    Build a quality mosaic from a stack of scenes.

    Parameters
    ----------
    scenes : sequence of Raster
        Scenes on one grid, all in the same unit.
    quality : sequence of Raster or np.ndarray, optional
        One quality score per scene, same grid. Higher is better.
        Non-finite scores exclude the sample. Defaults to the scenes'
        own samples.

    Returns
    -------
    Raster
        Composite on the common grid, in the scenes' unit.

    Raises
    ------
    ValueError
        If no scenes are given, or quality does not match the stack.
    GridMismatchError
        If the scenes are not on one grid.
    UnitError
        If the scenes do not share a unit.
    """
    if not scenes:
        raise ValueError("at least one scene is required")
    names = [f"scenes[{i}]" for i in range(len(scenes))]
    geometry = require_same_grid(*(s.geometry for s in scenes), names=names)
    unit = scenes[0].unit
    for name, scene in zip(names[1:], scenes[1:]):
        if scene.unit is not unit:
            raise UnitError(f"{name} unit {scene.unit} does not match {unit}")

    if quality is None:
        scores = [s.data for s in scenes]
    else:
        if len(quality) != len(scenes):
            raise ValueError(
                f"quality has {len(quality)} layers for {len(scenes)} scenes"
            )
        scores = []
        for k, layer in enumerate(quality):
            if isinstance(layer, Raster):
                require_same_grid(geometry, layer.geometry,
                                  names=["scenes", f"quality[{k}]"])
                layer = layer.filled(np.nan)
            layer = np.asarray(layer, dtype=np.float64)
            if layer.shape != geometry.shape:
                raise ValueError(
                    f"quality[{k}] shape {layer.shape} does not match "
                    f"{geometry.shape}"
                )
            scores.append(layer)

    values = np.stack([s.data for s in scenes])
    score = np.stack(scores).astype(np.float64)
    usable = np.stack([s.valid for s in scenes]) & np.isfinite(score)
    score[~usable] = -np.inf

    # argmax returns the first maximum, so ties go to the earliest scene
    best = np.argmax(score, axis=0)
    mosaic = np.take_along_axis(values, best[np.newaxis], axis=0)[0]
    mask = ~usable.any(axis=0)

    logger.debug("Quality mosaic of %d scenes: %d pixels masked",
                 len(scenes), int(mask.sum()))
    return Raster(data=mosaic, geometry=geometry, unit=unit, mask=mask)


__all__ = ["quality_mosaic"]
