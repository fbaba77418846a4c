# -*- coding: utf-8 -*-
"""
Flood Change Detection - Bi-temporal backscatter thresholding.

Compares a normal-condition ("reference") and a flood-condition scene,
both filtered and in dB. Open water is a specular reflector and shows
as low backscatter, so with threshold ``T``:

    persistent_water = (normal < T) & (flood < T)
    flood_extent     = (normal >= T) & (flood < T)

The two classes are disjoint. A pixel with no valid observation in
either epoch, or outside the optional study extent, is masked (and
False) in both outputs.

Dependencies
------------
numpy - Array operations

License
-------
MIT License
Copyright (c) 2024 geoint.org

Created
-------
2026-02-14

Modified
--------
2026-02-18
"""

# Standard library
import dataclasses
import logging
from dataclasses import dataclass
from typing import Annotated, Any, Optional, Tuple

# Third-party
import numpy as np

# GRDL internal
from grdl.image_processing.base import ImageProcessor
from grdl.image_processing.params import Desc, Range
from grdl.image_processing.versioning import processor_version, processor_tags
from grdl.vocabulary import ImageModality, ProcessorCategory

from grdl_sarflood.exceptions import UnitError
from grdl_sarflood.geometry.grid import require_same_grid
from grdl_sarflood.io.raster import BackscatterUnit, Raster
from grdl_sarflood.processing.neighborhood import _validate_raster_array
from grdl_sarflood.utils.constants import DEFAULT_THRESHOLD_DB

logger = logging.getLogger(__name__)


# ===================================================================
# Helpers
# ===================================================================

def _optional_mask(
    mask: Optional[np.ndarray],
    shape: Tuple[int, int],
    param_name: str
) -> np.ndarray:
    """Boolean mask of *shape*, all False when *mask* is None."""
    if mask is None:
        return np.zeros(shape, dtype=bool)
    mask = np.asarray(mask, dtype=bool)
    if mask.shape != shape:
        raise ValueError(
            f"{param_name} shape {mask.shape} does not match image shape {shape}"
        )
    return mask


# ===================================================================
# Standalone thresholding
# ===================================================================

def threshold_masks(
    normal_db: np.ndarray,
    flood_db: np.ndarray,
    threshold_db: float = DEFAULT_THRESHOLD_DB,
    extent: Optional[np.ndarray] = None,
    normal_mask: Optional[np.ndarray] = None,
    flood_mask: Optional[np.ndarray] = None
) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Classify persistent water and new flooding from two dB scenes.

    Parameters
    ----------
    normal_db : np.ndarray
        Normal-condition backscatter in dB, shape (rows, cols).
    flood_db : np.ndarray
        Flood-condition backscatter in dB, same shape.
    threshold_db : float
        Water threshold in dB. Default -15.
    extent : np.ndarray, optional
        Boolean study extent, True inside. Pixels outside are masked.
    normal_mask : np.ndarray, optional
        Boolean mask for the normal scene (True = masked).
    flood_mask : np.ndarray, optional
        Boolean mask for the flood scene (True = masked).

    Returns
    -------
    persistent_water : np.ndarray
        bool, water in both epochs.
    flood_extent : np.ndarray
        bool, water only in the flood epoch.
    mask : np.ndarray
        bool, True where neither class is defined.

    Raises
    ------
    TypeError
        If inputs are not real numpy arrays.
    ValueError
        If inputs are not 2D or shapes differ, or threshold_db is not
        finite.
    """
    _validate_raster_array(normal_db, "normal_db")
    _validate_raster_array(flood_db, "flood_db")
    if normal_db.shape != flood_db.shape:
        raise ValueError(
            f"Images must have same shape. Got normal_db: {normal_db.shape}, "
            f"flood_db: {flood_db.shape}"
        )
    if not np.isfinite(threshold_db):
        raise ValueError(f"threshold_db must be finite, got {threshold_db}")

    shape = normal_db.shape
    normal = normal_db.astype(np.float64)
    flood = flood_db.astype(np.float64)

    mask = (
        _optional_mask(normal_mask, shape, "normal_mask")
        | _optional_mask(flood_mask, shape, "flood_mask")
        | ~np.isfinite(normal)
        | ~np.isfinite(flood)
    )
    if extent is not None:
        mask |= ~_optional_mask(extent, shape, "extent")

    with np.errstate(invalid='ignore'):
        water_before = normal < threshold_db
        water_after = flood < threshold_db

    persistent_water = water_before & water_after & ~mask
    flood_extent = ~water_before & water_after & ~mask
    return persistent_water, flood_extent, mask


@dataclass(frozen=True)
class FloodMaps:
    """
    Change-detection products on a common grid.

    Attributes
    ----------
    persistent_water : Raster
        Boolean raster, water before and during the flood.
    flood_extent : Raster
        Boolean raster, water only during the flood.
    """
    persistent_water: Raster
    flood_extent: Raster

    @property
    def geometry(self):
        """Grid shared by both maps."""
        return self.flood_extent.geometry

    def flooded_area(self) -> float:
        """Flood extent area in squared map units."""
        grid = self.geometry
        pixel_area = abs(grid.pixel_width * grid.pixel_height)
        return float(np.count_nonzero(self.flood_extent.data)) * pixel_area


# ===================================================================
# FloodChangeDetector Processor
# ===================================================================

@processor_version('1.0.0')
@processor_tags(
    modalities=[ImageModality.SAR],
    category=ProcessorCategory.ANALYZE,
    description='Flood extent from normal and flood-condition backscatter in dB'
)
class FloodChangeDetector(ImageProcessor):
    """
    Flood change detection between two co-registered dB scenes.

    Parameters
    ----------
    threshold_db : float
        Backscatter below this level (dB) is classified as water.
        Default -15.

    Examples
    --------
    >>> detector = FloodChangeDetector(threshold_db=-15.0)
    >>> flood = detector.apply(normal_db, flood_db)
    >>> water, flood = detector.apply_with_water(normal_db, flood_db)
    """

    __gpu_compatible__ = True

    threshold_db: Annotated[
        float,
        Range(min=-60.0, max=20.0),
        Desc('Water threshold in dB')
    ] = DEFAULT_THRESHOLD_DB

    def __init__(self, threshold_db: float = DEFAULT_THRESHOLD_DB) -> None:
        if not np.isfinite(threshold_db):
            raise ValueError(f"threshold_db must be finite, got {threshold_db}")
        self._threshold_db = float(threshold_db)

    @property
    def threshold_db(self) -> float:
        """Water threshold in dB."""
        return self._threshold_db

    def apply(
        self,
        reference_image: np.ndarray,
        flood_image: np.ndarray,
        **kwargs: Any
    ) -> np.ndarray:
        """
        Flood extent between a normal and a flood-condition scene.

        Parameters
        ----------
        reference_image : np.ndarray
            Normal-condition backscatter in dB, shape (rows, cols).
        flood_image : np.ndarray
            Flood-condition backscatter in dB, same shape.
        **kwargs
            ``threshold_db`` override; ``extent`` study-extent mask.

        Returns
        -------
        np.ndarray
            bool, True where newly flooded.
        """
        _, flood_extent = self.apply_with_water(reference_image, flood_image, **kwargs)
        return flood_extent

    def apply_with_water(
        self,
        reference_image: np.ndarray,
        flood_image: np.ndarray,
        **kwargs: Any
    ) -> Tuple[np.ndarray, np.ndarray]:
        """
        Persistent water and flood extent.

        Returns
        -------
        persistent_water : np.ndarray
            bool, water in both epochs.
        flood_extent : np.ndarray
            bool, water only in the flood epoch.
        """
        params = self._resolve_params(kwargs)
        water, flood, _ = threshold_masks(
            reference_image,
            flood_image,
            threshold_db=params['threshold_db'],
            extent=kwargs.get('extent'),
        )
        return water, flood

    def execute(
        self,
        metadata: Any,
        source: np.ndarray,
        **kwargs: Any
    ) -> tuple:
        """
        Run ``apply`` with the flood scene passed as ``flood_image``.

        Parameters
        ----------
        metadata : ImageMetadata
            Metadata of the normal-condition scene.
        source : np.ndarray
            Normal-condition backscatter in dB.
        **kwargs
            Must include ``flood_image``. Other keys are forwarded.

        Returns
        -------
        tuple[np.ndarray, ImageMetadata]
            Flood extent and metadata updated to a single boolean band.

        Raises
        ------
        ValueError
            If ``flood_image`` is missing.
        """
        self._metadata = metadata
        if 'flood_image' not in kwargs:
            raise ValueError("execute() requires the flood_image keyword argument")
        flood_image = kwargs.pop('flood_image')
        result = self.apply(source, flood_image, **kwargs)
        updated = dataclasses.replace(
            metadata,
            rows=result.shape[0],
            cols=result.shape[1],
            bands=1,
            dtype=str(result.dtype),
        )
        return result, updated

    def detect(
        self,
        normal: Raster,
        flood: Raster,
        extent: Optional[Raster] = None,
        **kwargs: Any
    ) -> FloodMaps:
        """
        Classify two dB Rasters on the same grid.

        Parameters
        ----------
        normal : Raster
            Normal-condition backscatter, ``BackscatterUnit.DB``.
        flood : Raster
            Flood-condition backscatter, ``BackscatterUnit.DB``.
        extent : Raster, optional
            Boolean study extent on the same grid, True inside.
        **kwargs
            ``threshold_db`` override.

        Returns
        -------
        FloodMaps

        Raises
        ------
        GridMismatchError
            If the rasters are not on the same grid.
        UnitError
            If either backscatter raster is not in dB.
        """
        grids = [normal.geometry, flood.geometry]
        names = ["normal", "flood"]
        if extent is not None:
            grids.append(extent.geometry)
            names.append("extent")
        require_same_grid(*grids, names=names)
        for name, raster in (("normal", normal), ("flood", flood)):
            if raster.unit is not BackscatterUnit.DB:
                raise UnitError(f"{name} must be in dB, got unit {raster.unit}")

        params = self._resolve_params(kwargs)
        extent_mask = None
        if extent is not None:
            extent_mask = np.asarray(extent.data, dtype=bool) & ~extent.mask

        water, flooded, mask = threshold_masks(
            normal.data,
            flood.data,
            threshold_db=params['threshold_db'],
            extent=extent_mask,
            normal_mask=normal.mask,
            flood_mask=flood.mask,
        )
        logger.info("Thresholded at %.1f dB: %d persistent water, %d flooded, "
                    "%d masked pixels", params['threshold_db'],
                    int(water.sum()), int(flooded.sum()), int(mask.sum()))
        return FloodMaps(
            persistent_water=Raster(water, normal.geometry, mask=mask),
            flood_extent=Raster(flooded, normal.geometry, mask=mask),
        )


__all__ = ["threshold_masks", "FloodMaps", "FloodChangeDetector"]
