# -*- coding: utf-8 -*-
"""
Tests for backscatter unit conversion.

License
-------
MIT License
Copyright (c) 2024 geoint.org

Created
-------
2026-02-12
"""

import numpy as np
import pytest

from grdl_sarflood.exceptions import UnitError
from grdl_sarflood.geometry import GridGeometry
from grdl_sarflood.io import BackscatterUnit, Raster
from grdl_sarflood.processing.units import (
    DecibelToNatural,
    NaturalToDecibel,
    to_db,
    to_natural,
)


@pytest.fixture
def random_state():
    """Fixed random state for reproducible tests."""
    return np.random.RandomState(42)


class TestArrayConversion:
    """Test pointwise conversions on arrays."""

    def test_known_values(self):
        np.testing.assert_allclose(to_natural(np.array([0.0, -10.0, 10.0])),
                                   [1.0, 0.1, 10.0])
        np.testing.assert_allclose(to_db(np.array([1.0, 0.01, 100.0])),
                                   [0.0, -20.0, 20.0])

    def test_round_trip(self, random_state):
        db = random_state.uniform(-30.0, 5.0, (32, 32))
        np.testing.assert_allclose(to_db(to_natural(db)), db, atol=1e-9)

    def test_non_positive_becomes_nan(self):
        out = to_db(np.array([0.0, -1.0, np.nan, 1.0]))
        assert np.isnan(out[:3]).all()
        assert out[3] == 0.0

    def test_nan_stays_nan(self):
        assert np.isnan(to_natural(np.array([np.nan]))).all()

    def test_no_warnings(self):
        with np.errstate(all='raise'):
            to_db(np.array([0.0, -5.0]))


class TestRasterConversion:
    """Test conversions on Rasters."""

    @pytest.fixture
    def db_raster(self):
        data = np.full((3, 3), -10.0)
        data[1, 1] = np.nan
        return Raster(data, GridGeometry(rows=3, cols=3), BackscatterUnit.DB)

    def test_to_natural_raster(self, db_raster):
        out = to_natural(db_raster)
        assert out.unit is BackscatterUnit.NATURAL
        assert out.geometry is db_raster.geometry
        assert out.mask[1, 1]
        np.testing.assert_allclose(out.data[0, 0], 0.1)

    def test_to_db_masks_zero(self):
        data = np.ones((2, 2))
        data[0, 1] = 0.0
        r = Raster(data, GridGeometry(rows=2, cols=2), BackscatterUnit.NATURAL)
        out = to_db(r)
        assert out.unit is BackscatterUnit.DB
        assert out.mask[0, 1]
        assert out.mask.sum() == 1

    def test_wrong_unit(self, db_raster):
        with pytest.raises(UnitError, match="natural-unit"):
            to_db(db_raster)
        with pytest.raises(UnitError, match="dB raster"):
            to_natural(to_natural(db_raster))


class TestConversionProcessors:
    """Test grdl processor wrappers."""

    def test_decibel_to_natural(self):
        out = DecibelToNatural().apply(np.array([[-10.0, 0.0]]))
        np.testing.assert_allclose(out, [[0.1, 1.0]])
        assert out.dtype == np.float64

    def test_natural_to_decibel(self):
        out = NaturalToDecibel().apply(np.array([[0.1, 0.0]]))
        np.testing.assert_allclose(out[0, 0], -10.0)
        assert np.isnan(out[0, 1])

    def test_gpu_compatible(self):
        assert DecibelToNatural.__gpu_compatible__
        assert NaturalToDecibel.__gpu_compatible__


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
