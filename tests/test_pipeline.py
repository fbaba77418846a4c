# -*- coding: utf-8 -*-
"""
Tests for the end-to-end flood mapper.

License
-------
MIT License
Copyright (c) 2024 geoint.org

Created
-------
2026-02-16
"""

import numpy as np
import pytest

from grdl.image_processing.pipeline import Pipeline

from grdl_sarflood import FloodMapper, FloodMapResult, map_flood_extent
from grdl_sarflood.exceptions import GridMismatchError, UnitError
from grdl_sarflood.geometry import GridGeometry
from grdl_sarflood.io import BackscatterUnit, Raster
from grdl_sarflood.processing import RefinedLeeFilter, to_db, to_natural


@pytest.fixture
def grid():
    return GridGeometry(rows=48, cols=48, origin_x=300000.0,
                        origin_y=2500000.0, crs='EPSG:32643')


@pytest.fixture
def scenes(grid):
    """
    Speckled normal and flood scenes.

    Land at -8 dB; a river (rows 6-13) is water in both epochs and a
    floodplain (rows 30-41) turns to water in the flood scene.
    """
    rng = np.random.RandomState(42)
    normal = np.full((48, 48), -8.0)
    normal[6:14, :] = -22.0
    flood = normal.copy()
    flood[30:42, :] = -22.0

    def _speckle(db):
        power = to_natural(db) * rng.gamma(16.0, 1.0 / 16.0, db.shape)
        return to_db(power)

    return (Raster(_speckle(normal), grid, BackscatterUnit.DB),
            Raster(_speckle(flood), grid, BackscatterUnit.DB))


class TestFloodMapper:
    """Test FloodMapper.run()."""

    def test_result_layers(self, scenes, grid):
        result = FloodMapper().run(*scenes)
        assert isinstance(result, FloodMapResult)
        assert result.geometry is grid
        assert result.pixel_spacing == 10.0
        assert result.normal_db.unit is BackscatterUnit.DB
        assert result.flood_extent.data.dtype == bool

    def test_classifies_regions(self, scenes):
        result = FloodMapper().run(*scenes)
        water = result.persistent_water.data
        flooded = result.flood_extent.data
        assert water[8:12, 4:44].mean() > 0.95
        assert flooded[32:40, 4:44].mean() > 0.95
        assert flooded[18:26, 4:44].mean() < 0.05
        assert not (water & flooded).any()

    def test_filtering_reduces_spread(self, scenes):
        result = FloodMapper().run(*scenes)
        roi = (slice(18, 26), slice(4, 44))
        assert np.std(result.normal_db.data[roi]) < np.std(scenes[0].data[roi])

    def test_masked_input_propagates(self, scenes, grid):
        normal, flood = scenes
        data = normal.filled()
        data[20, 20] = np.nan
        normal = Raster(data, grid, BackscatterUnit.DB)
        result = FloodMapper().run(normal, flood)
        assert result.normal_db.mask[20, 20]
        assert result.persistent_water.mask[20, 20]
        assert result.flood_extent.mask[20, 20]
        assert not result.flood_extent.mask[20, 21]

    def test_extent(self, scenes, grid):
        inside = np.zeros((48, 48), dtype=bool)
        inside[:, :24] = True
        result = FloodMapper().run(*scenes, extent=Raster(inside, grid))
        assert result.flood_extent.mask[:, 24:].all()
        assert not result.flood_extent.data[:, 24:].any()

    def test_tiled_matches_whole(self, scenes):
        whole = FloodMapper(tile_size=0).run(*scenes)
        tiled = FloodMapper(tile_size=16, max_workers=2).run(*scenes)
        np.testing.assert_allclose(tiled.flood_db.data, whole.flood_db.data,
                                   rtol=1e-12)
        np.testing.assert_array_equal(tiled.flood_extent.data,
                                      whole.flood_extent.data)

    def test_chain(self):
        mapper = FloodMapper(tie_policy='composite', tile_size=0)
        assert isinstance(mapper.chain, Pipeline)
        assert len(mapper.chain) == 3
        assert isinstance(mapper.speckle_filter, RefinedLeeFilter)
        assert mapper.speckle_filter.tie_policy == 'composite'

    def test_map_flood_extent(self, scenes):
        result = map_flood_extent(*scenes, threshold_db=-15.0)
        expected = FloodMapper(threshold_db=-15.0).run(*scenes)
        np.testing.assert_array_equal(result.flood_extent.data,
                                      expected.flood_extent.data)

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def test_grid_mismatch_fails_first(self, scenes):
        normal, flood = scenes
        other = GridGeometry(rows=48, cols=48, origin_x=300010.0,
                             origin_y=2500000.0, crs='EPSG:32643')
        moved = Raster(flood.filled(), other, BackscatterUnit.DB)
        with pytest.raises(GridMismatchError):
            FloodMapper().run(normal, moved)

    def test_requires_db(self, scenes):
        normal, flood = scenes
        natural = to_natural(normal)
        with pytest.raises(UnitError, match="dB"):
            FloodMapper().run(natural, flood)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
