# -*- coding: utf-8 -*-
"""
Tiling - Halo-padded tile processing for neighborhood operators.

Large rasters are split into core tiles with
``grdl.data_prep.ChipExtractor``. Each core tile is grown by a halo of
``halo`` pixels on every side (clipped at the raster border), the
operator runs on the padded tile, and only the core region is written
back. When the halo covers the operator's reach, the stitched result is
identical to running the operator on the whole raster: raster borders
are truncated the same way in both cases, and interior tile borders
never enter a core pixel's window.

Edge chips from ``ChipExtractor`` snap inward and may overlap their
neighbours. Overlapping cores compute the same values, so write order
does not matter.

Dependencies
------------
numpy - Array operations
grdl.data_prep - Chip layout

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
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, List, NamedTuple, Sequence, Tuple, Union

# Third-party
import numpy as np

# GRDL internal
from grdl.data_prep import ChipExtractor, ChipRegion

logger = logging.getLogger(__name__)


class TileWindow(NamedTuple):
    """
    One unit of tiled work.

    Attributes
    ----------
    core : ChipRegion
        Region whose output this tile owns.
    padded : ChipRegion
        Core grown by the halo and clipped to the raster. The operator
        reads this region.
    """
    core: ChipRegion
    padded: ChipRegion

    @property
    def padded_slices(self) -> Tuple[slice, slice]:
        """Raster slices of the padded region."""
        return (slice(self.padded.row_start, self.padded.row_end),
                slice(self.padded.col_start, self.padded.col_end))

    @property
    def core_slices(self) -> Tuple[slice, slice]:
        """Raster slices of the core region."""
        return (slice(self.core.row_start, self.core.row_end),
                slice(self.core.col_start, self.core.col_end))

    @property
    def inner_slices(self) -> Tuple[slice, slice]:
        """Slices of the core region inside the padded tile."""
        r0 = self.core.row_start - self.padded.row_start
        c0 = self.core.col_start - self.padded.col_start
        return (slice(r0, r0 + self.core.row_end - self.core.row_start),
                slice(c0, c0 + self.core.col_end - self.core.col_start))


def plan_tiles(
    shape: Tuple[int, int],
    tile_size: int,
    halo: int
) -> List[TileWindow]:
    """
    Lay out halo-padded tiles covering a raster.

    Parameters
    ----------
    shape : tuple of int
        Raster shape ``(rows, cols)``.
    tile_size : int
        Core tile side in pixels. Rasters smaller than this get a
        single tile.
    halo : int
        Extra pixels read on each side of a core tile.

    Returns
    -------
    list of TileWindow
        Tiles in row-major order. Their cores cover every pixel.

    Raises
    ------
    ValueError
        If tile_size is not positive or halo is negative.
    """
    rows, cols = int(shape[0]), int(shape[1])
    if tile_size < 1:
        raise ValueError(f"tile_size must be >= 1, got {tile_size}")
    if halo < 0:
        raise ValueError(f"halo must be >= 0, got {halo}")

    extractor = ChipExtractor(nrows=rows, ncols=cols)
    tiles = []
    for core in extractor.chip_positions(row_width=int(tile_size),
                                         col_width=int(tile_size)):
        padded = ChipRegion(
            row_start=max(core.row_start - halo, 0),
            col_start=max(core.col_start - halo, 0),
            row_end=min(core.row_end + halo, rows),
            col_end=min(core.col_end + halo, cols),
        )
        tiles.append(TileWindow(core=core, padded=padded))
    return tiles


def apply_tiled(
    func: Callable[..., Union[np.ndarray, Tuple[np.ndarray, ...]]],
    arrays: Sequence[np.ndarray],
    tile_size: int,
    halo: int,
    max_workers: int = 1
) -> Union[np.ndarray, Tuple[np.ndarray, ...]]:
    """
    Run a neighborhood operator tile by tile and stitch the cores.

    Parameters
    ----------
    func : callable
        Called as ``func(*tiles)`` with one padded tile per input array.
        Returns one array, or a tuple of arrays, shaped like the tile.
    arrays : sequence of np.ndarray
        2D inputs of identical shape, tiled together.
    tile_size : int
        Core tile side in pixels.
    halo : int
        Reach of ``func`` in pixels.
    max_workers : int
        Threads used. 1 runs tiles sequentially.

    Returns
    -------
    np.ndarray or tuple of np.ndarray
        Same structure as ``func`` returns, at full raster shape.

    Raises
    ------
    ValueError
        If no arrays are given, shapes differ, or max_workers < 1.
    """
    if not arrays:
        raise ValueError("at least one input array is required")
    shape = arrays[0].shape
    for k, array in enumerate(arrays[1:], start=1):
        if array.shape != shape:
            raise ValueError(
                f"arrays[{k}] shape {array.shape} does not match {shape}"
            )
    if max_workers < 1:
        raise ValueError(f"max_workers must be >= 1, got {max_workers}")

    tiles = plan_tiles(shape, tile_size, halo)
    logger.info("Tiling %s raster into %d tiles (size=%d, halo=%d, workers=%d)",
                shape, len(tiles), tile_size, halo, max_workers)

    # The first tile fixes the output structure and dtypes
    first = func(*(a[tiles[0].padded_slices] for a in arrays))
    single = isinstance(first, np.ndarray)
    first = (first,) if single else tuple(first)
    outputs = tuple(np.empty(shape, dtype=part.dtype) for part in first)

    def _store(tile: TileWindow, parts: Tuple[np.ndarray, ...]) -> None:
        for out, part in zip(outputs, parts):
            out[tile.core_slices] = part[tile.inner_slices]

    def _process_tile(tile: TileWindow) -> None:
        result = func(*(a[tile.padded_slices] for a in arrays))
        _store(tile, (result,) if single else tuple(result))

    _store(tiles[0], first)
    remaining = tiles[1:]
    if max_workers == 1 or len(remaining) < 2:
        for tile in remaining:
            _process_tile(tile)
    else:
        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            list(pool.map(_process_tile, remaining))

    return outputs[0] if single else outputs


__all__ = ["TileWindow", "plan_tiles", "apply_tiled"]
