# -*- coding: utf-8 -*-
"""
Tests for directional window statistics.

License
-------
MIT License
Copyright (c) 2024 geoint.org

Created
-------
2026-02-13
"""

import numpy as np
import pytest

from grdl_sarflood.processing.directional_stats import directional_statistics
from grdl_sarflood.processing.kernels import DIRECTIONAL_KERNELS, Direction
from grdl_sarflood.processing.neighborhood import neighborhood_stats


@pytest.fixture
def random_state():
    """Fixed random state for reproducible tests."""
    return np.random.RandomState(42)


class TestDirectionalStatistics:
    """Test one-hot selection of directional window statistics."""

    def test_single_label_matches_kernel(self, random_state):
        data = random_state.gamma(1.0, 1.0, (15, 15))
        labels = np.full(data.shape, int(Direction.EAST))
        mean, var = directional_statistics(data, labels)
        expected_mean, expected_var = neighborhood_stats(
            data, DIRECTIONAL_KERNELS[Direction.EAST]
        )
        np.testing.assert_allclose(mean, expected_mean)
        np.testing.assert_allclose(var, expected_var)

    def test_interior_east_window(self, random_state):
        data = random_state.gamma(1.0, 1.0, (15, 15))
        labels = np.full(data.shape, int(Direction.EAST))
        mean, var = directional_statistics(data, labels)
        window = data[4:11, 7:11]
        assert mean[7, 7] == pytest.approx(window.mean())
        assert var[7, 7] == pytest.approx(window.var())

    def test_mixed_labels_selected_per_pixel(self, random_state):
        data = random_state.gamma(1.0, 1.0, (15, 15))
        labels = random_state.randint(1, 9, data.shape)
        mean, _ = directional_statistics(data, labels)
        for direction in Direction:
            expected, _ = neighborhood_stats(data, DIRECTIONAL_KERNELS[direction])
            selected = labels == int(direction)
            np.testing.assert_allclose(mean[selected], expected[selected])

    def test_no_label_is_nan(self, random_state):
        data = random_state.gamma(1.0, 1.0, (9, 9))
        labels = np.full(data.shape, int(Direction.NORTH))
        labels[4, 4] = 0
        labels[2, 2] = 26
        mean, var = directional_statistics(data, labels)
        assert np.isnan(mean[4, 4]) and np.isnan(var[4, 4])
        assert np.isnan(mean[2, 2])
        assert np.isfinite(mean).sum() == 79

    def test_mask_excluded(self):
        data = np.ones((9, 9))
        data[5:, :] = 100.0
        mask = np.zeros(data.shape, dtype=bool)
        mask[5:, :] = True
        labels = np.full(data.shape, int(Direction.SOUTH))
        mean, var = directional_statistics(data, labels, mask)
        assert mean[4, 4] == pytest.approx(1.0)
        assert var[4, 4] == pytest.approx(0.0)

    def test_shape_mismatch(self):
        with pytest.raises(ValueError, match="labels shape"):
            directional_statistics(np.ones((5, 5)), np.ones((4, 5), dtype=int))


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
