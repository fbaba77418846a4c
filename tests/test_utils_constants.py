# -*- coding: utf-8 -*-
"""
Tests for constants module.

Tests radiometric and filter constants.

License
-------
MIT License
Copyright (c) 2024 geoint.org

Created
-------
2026-02-12
"""

import pytest

from grdl_sarflood.processing.kernels import BOX_3X3, DIRECTIONAL_KERNELS
from grdl_sarflood.utils import constants


class TestRadiometricConstants:
    """Test radiometric constant values."""

    def test_db_scale(self):
        """Power quantities use a factor of 10."""
        assert constants.DB_SCALE == 10.0

    def test_default_threshold(self):
        """Water threshold defaults to -15 dB."""
        assert constants.DEFAULT_THRESHOLD_DB == -15.0

    def test_default_pixel_spacing(self):
        """Working grid is 10 m."""
        assert constants.DEFAULT_PIXEL_SPACING == 10.0


class TestFilterConstants:
    """Test Refined Lee window constants."""

    def test_window_sizes(self):
        assert constants.LOCAL_WINDOW_SIZE == 3
        assert constants.DIRECTIONAL_WINDOW_SIZE == 7

    def test_noise_sample_count(self):
        assert constants.NOISE_SAMPLE_COUNT == 5

    def test_filter_halo_covers_directional_window(self):
        """Halo equals the directional window radius."""
        assert constants.FILTER_HALO == 3
        assert 2 * constants.FILTER_HALO + 1 == constants.DIRECTIONAL_WINDOW_SIZE

    def test_window_sizes_match_kernels(self):
        """Kernel table uses the declared window sizes."""
        assert BOX_3X3.shape == (constants.LOCAL_WINDOW_SIZE,) * 2
        for kernel in DIRECTIONAL_KERNELS.values():
            assert kernel.shape == (constants.DIRECTIONAL_WINDOW_SIZE,) * 2

    def test_default_tile_size(self):
        assert constants.DEFAULT_TILE_SIZE == 512


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
