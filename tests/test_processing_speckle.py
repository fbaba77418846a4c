# -*- coding: utf-8 -*-
"""
Tests for the Refined Lee speckle filter.

Tests the adaptive estimator and RefinedLeeFilter with synthetic SAR
data to verify:
- Constant rasters pass through unchanged
- Estimates stay between the sample and its directional mean
- Masked samples propagate
- Speckle reduction on homogeneous areas
- Parameter validation and unit checks

License
-------
MIT License
Copyright (c) 2024 geoint.org

Created
-------
2026-02-11
"""

import numpy as np
import pytest

from grdl_sarflood.exceptions import UnitError
from grdl_sarflood.geometry import GridGeometry
from grdl_sarflood.io import BackscatterUnit, Raster
from grdl_sarflood.processing.directional_stats import directional_statistics
from grdl_sarflood.processing.directions import sample_statistics, select_directions
from grdl_sarflood.processing.speckle_filter import (
    RefinedLeeFilter,
    adaptive_estimate,
    refined_lee,
)


class TestAdaptiveEstimate:
    """Test the adaptive blend."""

    def test_zero_variance_gives_mean(self):
        out = adaptive_estimate(np.array([5.0]), np.array([2.0]),
                                np.array([0.0]), np.array([0.3]))
        assert out[0] == 2.0

    def test_zero_noise_keeps_sample(self):
        out = adaptive_estimate(np.array([5.0]), np.array([2.0]),
                                np.array([4.0]), np.array([0.0]))
        assert out[0] == pytest.approx(5.0)

    def test_known_blend(self):
        # varX = (4 - 4 * 0.5) / 1.5 = 4/3, b = 1/3
        out = adaptive_estimate(np.array([5.0]), np.array([2.0]),
                                np.array([4.0]), np.array([0.5]))
        assert out[0] == pytest.approx(2.0 + (5.0 - 2.0) / 3.0)

    def test_noise_dominated_gives_mean(self):
        out = adaptive_estimate(np.array([5.0]), np.array([2.0]),
                                np.array([1.0]), np.array([10.0]))
        assert out[0] == pytest.approx(2.0)

    def test_undefined_mean_is_nan(self):
        out = adaptive_estimate(np.array([5.0]), np.array([np.nan]),
                                np.array([np.nan]), np.array([0.1]))
        assert np.isnan(out[0])


class TestRefinedLee:
    """Test refined_lee() on synthetic rasters."""

    @pytest.fixture
    def random_state(self):
        """Fixed random state for reproducible tests."""
        return np.random.RandomState(42)

    @pytest.fixture
    def clean_image(self):
        """Linear power image with a bright square."""
        image = np.full((64, 64), 0.05)
        image[20:44, 20:44] = 0.5
        return image

    @pytest.fixture
    def speckled_image(self, clean_image, random_state):
        """Single-look speckle: exponential multiplicative noise."""
        return clean_image * random_state.gamma(1.0, 1.0, clean_image.shape)

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    def test_constant_raster_unchanged(self):
        data = np.full((20, 17), 0.0316)
        estimate, mask = refined_lee(data)
        assert not mask.any()
        np.testing.assert_allclose(estimate, data, rtol=1e-12)

    def test_constant_raster_composite_policy(self):
        """Four-way ties have no window under 'composite'."""
        data = np.full((12, 12), 0.2)
        estimate, mask = refined_lee(data, tie_policy='composite')
        assert mask[2:-2, 2:-2].all()
        assert np.isnan(estimate[2:-2, 2:-2]).all()

    def test_monotone_bound(self, speckled_image):
        estimate, mask = refined_lee(speckled_image)
        sample_mean, _ = sample_statistics(speckled_image)
        field = select_directions(sample_mean)
        dir_mean, _ = directional_statistics(speckled_image, field.labels)

        lower = np.minimum(speckled_image, dir_mean)
        upper = np.maximum(speckled_image, dir_mean)
        tol = 1e-12
        assert not mask.any()
        assert np.all(estimate >= lower - tol)
        assert np.all(estimate <= upper + tol)

    def test_reduces_speckle(self, speckled_image):
        estimate, _ = refined_lee(speckled_image)
        roi = (slice(2, 16), slice(2, 62))
        assert np.std(estimate[roi]) < 0.7 * np.std(speckled_image[roi])

    def test_preserves_mean_level(self, speckled_image):
        estimate, _ = refined_lee(speckled_image)
        roi = (slice(26, 38), slice(26, 38))
        assert np.mean(estimate[roi]) == pytest.approx(
            np.mean(speckled_image[roi]), rel=0.3
        )

    def test_nan_propagates(self, speckled_image):
        data = speckled_image.copy()
        data[10, 10] = np.nan
        estimate, mask = refined_lee(data)
        assert mask[10, 10] and np.isnan(estimate[10, 10])
        assert np.isfinite(estimate[10, 11])
        assert mask.sum() == 1

    def test_mask_argument(self, speckled_image):
        mask = np.zeros(speckled_image.shape, dtype=bool)
        mask[30:34, 30:34] = True
        estimate, out_mask = refined_lee(speckled_image, mask=mask)
        assert out_mask[mask].all()
        assert np.isnan(estimate[mask]).all()
        assert not out_mask[~mask].any()

    def test_masked_values_do_not_leak(self, speckled_image):
        """Values under the mask never influence valid outputs."""
        mask = np.zeros(speckled_image.shape, dtype=bool)
        mask[:, 40:] = True
        altered = speckled_image.copy()
        altered[:, 40:] = 1e6
        a, _ = refined_lee(speckled_image, mask=mask)
        b, _ = refined_lee(altered, mask=mask)
        np.testing.assert_array_equal(a, b)

    def test_mask_shape_mismatch(self, speckled_image):
        with pytest.raises(ValueError, match="mask shape"):
            refined_lee(speckled_image, mask=np.zeros((3, 3), dtype=bool))


class TestRefinedLeeFilter:
    """Test suite for the RefinedLeeFilter processor."""

    @pytest.fixture
    def image(self):
        rng = np.random.RandomState(42)
        return 0.1 * rng.gamma(1.0, 1.0, (48, 40))

    def test_apply_matches_function(self, image):
        expected, _ = refined_lee(image)
        np.testing.assert_array_equal(RefinedLeeFilter().apply(image), expected)

    def test_output_shape_and_dtype(self, image):
        out = RefinedLeeFilter().apply(image.astype(np.float32))
        assert out.shape == image.shape
        assert out.dtype == np.float64

    def test_mask_kwarg(self, image):
        mask = np.zeros(image.shape, dtype=bool)
        mask[0, 0] = True
        out = RefinedLeeFilter().apply(image, mask=mask)
        assert np.isnan(out[0, 0])
        assert np.isfinite(out).sum() == image.size - 1

    def test_kwargs_override(self):
        data = np.full((12, 12), 0.2)
        lee = RefinedLeeFilter()
        assert np.isfinite(lee.apply(data)).all()
        assert np.isnan(lee.apply(data, tie_policy='composite')[6, 6])

    def test_properties(self):
        lee = RefinedLeeFilter(tie_policy='composite', tile_size=64, max_workers=2)
        assert lee.tie_policy == 'composite'
        assert lee.tile_size == 64
        assert lee.max_workers == 2

    def test_gpu_compatible_false(self):
        assert not RefinedLeeFilter.__gpu_compatible__

    # ------------------------------------------------------------------
    # Raster interface
    # ------------------------------------------------------------------

    def test_filter_raster(self, image):
        grid = GridGeometry(rows=48, cols=40)
        data = image.copy()
        data[5, 5] = np.nan
        raster = Raster(data, grid, BackscatterUnit.NATURAL)
        out = RefinedLeeFilter().filter_raster(raster)
        assert out.geometry is grid
        assert out.unit is BackscatterUnit.NATURAL
        assert out.mask[5, 5]
        assert out.mask.sum() == 1

    def test_filter_raster_rejects_db(self, image):
        raster = Raster(image, GridGeometry(rows=48, cols=40), BackscatterUnit.DB)
        with pytest.raises(UnitError, match="natural-unit"):
            RefinedLeeFilter().filter_raster(raster)

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def test_invalid_tie_policy(self):
        with pytest.raises(ValueError, match="tie_policy"):
            RefinedLeeFilter(tie_policy='nearest')

    def test_invalid_tile_size(self):
        with pytest.raises(ValueError, match="tile_size"):
            RefinedLeeFilter(tile_size=-1)

    def test_invalid_max_workers(self):
        with pytest.raises(ValueError, match="max_workers"):
            RefinedLeeFilter(max_workers=0)

    def test_not_ndarray(self):
        with pytest.raises(TypeError, match="numpy ndarray"):
            RefinedLeeFilter().apply([[1.0, 2.0]])

    def test_complex_rejected(self):
        with pytest.raises(TypeError, match="real-valued"):
            RefinedLeeFilter().apply(np.ones((8, 8), dtype=np.complex64))

    def test_not_2d(self):
        with pytest.raises(ValueError, match="2D"):
            RefinedLeeFilter().apply(np.ones((2, 8, 8)))


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
