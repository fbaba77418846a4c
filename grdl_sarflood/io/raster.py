# -*- coding: utf-8 -*-
"""
Raster - Single-band raster with grid geometry, unit, and validity mask.

The exchange type between the imagery source, the flood mapping chain,
and downstream writers. A raster pairs a 2D sample array with the
``GridGeometry`` needed to address it, the radiometric unit of its
samples, and a per-pixel mask (True = no valid observation).

Masked floating-point samples are stored as NaN, so plain array stages
see missing data without consulting the mask; the mask stays the
authoritative bitset. Rasters are immutable: arrays are copied on
construction and flagged read-only, and every stage derives a new
raster with :meth:`Raster.with_data`.

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
from enum import Enum
from typing import Optional

# Third-party
import numpy as np

# GRDL internal
from grdl_sarflood.geometry.grid import GridGeometry


class BackscatterUnit(str, Enum):
    """Radiometric unit of backscatter samples."""
    NATURAL = "natural"
    DB = "dB"


def _readonly(array: np.ndarray) -> np.ndarray:
    array = np.array(array, copy=True)
    array.setflags(write=False)
    return array


@dataclass(frozen=True, eq=False)
class Raster:
    """
    Immutable single-band raster.

    Parameters
    ----------
    data : np.ndarray
        2D sample array, shape ``(rows, cols)``. Floating-point data is
        promoted to float64; boolean data is kept as bool.
    geometry : GridGeometry
        Grid the samples sit on. Its shape must match ``data``.
    unit : BackscatterUnit, optional
        Radiometric unit. ``None`` for class / mask rasters.
    mask : np.ndarray, optional
        Boolean mask, True where there is no valid observation. Merged
        with non-finite samples of floating-point data.

    Raises
    ------
    TypeError
        If data is not a numpy array.
    ValueError
        If data is not 2D or shapes disagree.
    """
    data: np.ndarray
    geometry: GridGeometry
    unit: Optional[BackscatterUnit] = None
    mask: Optional[np.ndarray] = field(default=None)

    def __post_init__(self) -> None:
        data = self.data
        if not isinstance(data, np.ndarray):
            raise TypeError(
                f"data must be a numpy ndarray, got {type(data).__name__}"
            )
        if data.ndim != 2:
            raise ValueError(
                f"data must be 2D (rows, cols), got {data.ndim}D "
                f"with shape {data.shape}"
            )
        if data.shape != self.geometry.shape:
            raise ValueError(
                f"data shape {data.shape} does not match grid shape "
                f"{self.geometry.shape}"
            )
        if np.iscomplexobj(data):
            raise TypeError("data must be real-valued backscatter, got complex")

        if self.mask is None:
            mask = np.zeros(data.shape, dtype=bool)
        else:
            mask = np.asarray(self.mask, dtype=bool)
            if mask.shape != data.shape:
                raise ValueError(
                    f"mask shape {mask.shape} does not match data shape {data.shape}"
                )

        if data.dtype == bool:
            values = data.copy()
            values[mask] = False
        else:
            values = data.astype(np.float64)
            mask = mask | ~np.isfinite(values)
            values[mask] = np.nan

        if self.unit is not None:
            object.__setattr__(self, 'unit', BackscatterUnit(self.unit))
        object.__setattr__(self, 'data', _readonly(values))
        object.__setattr__(self, 'mask', _readonly(mask))

    @classmethod
    def from_array(
        cls,
        data: np.ndarray,
        geometry: GridGeometry,
        unit: Optional[BackscatterUnit] = None,
        nodata: Optional[float] = None,
        mask: Optional[np.ndarray] = None
    ) -> 'Raster':
        """
        Build a raster, masking a nodata sentinel value.

        Parameters
        ----------
        data : np.ndarray
            2D sample array.
        geometry : GridGeometry
            Grid of the samples.
        unit : BackscatterUnit, optional
            Radiometric unit.
        nodata : float, optional
            Sentinel marking missing samples. NaN samples are always masked.
        mask : np.ndarray, optional
            Additional boolean mask (True = masked).

        Returns
        -------
        Raster
        """
        data = np.asarray(data)
        combined = np.zeros(data.shape, dtype=bool) if mask is None \
            else np.asarray(mask, dtype=bool)
        if nodata is not None and data.ndim == 2:
            combined = combined | (data == nodata)
        return cls(data=data, geometry=geometry, unit=unit, mask=combined)

    @property
    def shape(self):
        """Raster shape ``(rows, cols)``."""
        return self.data.shape

    @property
    def valid(self) -> np.ndarray:
        """Boolean array, True where the sample is a valid observation."""
        return ~self.mask

    def filled(self, fill_value=np.nan) -> np.ndarray:
        """
        Writable copy of the samples with masked pixels replaced.

        Parameters
        ----------
        fill_value : scalar
            Value written into masked pixels. Default NaN.

        Returns
        -------
        np.ndarray
        """
        out = np.array(self.data, copy=True)
        out[self.mask] = fill_value
        return out

    def with_data(
        self,
        data: np.ndarray,
        unit: Optional[BackscatterUnit] = None,
        mask: Optional[np.ndarray] = None
    ) -> 'Raster':
        """
        Derive a new raster on the same grid.

        The new raster keeps this raster's mask merged with *mask*.

        Parameters
        ----------
        data : np.ndarray
            New samples, same shape.
        unit : BackscatterUnit, optional
            Unit of the new samples.
        mask : np.ndarray, optional
            Extra pixels to mask.

        Returns
        -------
        Raster
        """
        combined = self.mask if mask is None else (self.mask | np.asarray(mask, dtype=bool))
        return Raster(data=data, geometry=self.geometry, unit=unit, mask=combined)

    def positive_only(self) -> 'Raster':
        """
        Mask every False pixel of a boolean raster.

        Leaves only the positive class visible, as flood and water
        layers are usually displayed and exported.

        Returns
        -------
        Raster

        Raises
        ------
        TypeError
            If the raster is not boolean.
        """
        if self.data.dtype != bool:
            raise TypeError(
                f"positive_only requires a boolean raster, got {self.data.dtype}"
            )
        return Raster(
            data=self.data,
            geometry=self.geometry,
            unit=self.unit,
            mask=self.mask | ~self.data,
        )


__all__ = ["BackscatterUnit", "Raster"]
