"""Tests for the structural hashes."""

import imagehash
import numpy as np

from lookalike.fingerprint.hash import (
    average_hash,
    difference_hash,
    edge_hash,
    perceptual_hash,
)
from tests.helpers.raster_factory import (
    checkerboard_raster,
    gradient_raster,
    noise_raster,
    solid_raster,
)


class TestAverageHash:
    def test_hash_is_64_bits(self):
        hashed = average_hash(noise_raster(40, 30))
        assert isinstance(hashed, imagehash.ImageHash)
        assert hashed.hash.size == 64

    def test_gradient_sets_bright_half(self):
        """Cells in the brighter half of a left-to-right ramp are set."""
        hashed = average_hash(gradient_raster(64, 64))
        expected = np.array([[False] * 4 + [True] * 4] * 8)
        assert np.array_equal(hashed.hash, expected)

    def test_solid_image_sets_every_bit(self):
        """Every cell equals the mean, and equality counts as set."""
        hashed = average_hash(solid_raster(20, 20, (10, 200, 30)))
        assert hashed.hash.all()


class TestDifferenceHash:
    def test_hash_is_64_bits(self):
        assert difference_hash(noise_raster(33, 17)).hash.size == 64

    def test_rising_ramp_clears_every_bit(self):
        hashed = difference_hash(gradient_raster(72, 16))
        assert not hashed.hash.any()

    def test_falling_ramp_sets_every_bit(self):
        hashed = difference_hash(gradient_raster(72, 16, reverse=True))
        assert hashed.hash.all()


class TestPerceptualHash:
    def test_hash_is_64_bits_with_zero_pad(self):
        """63 coefficient bits followed by a constant 0."""
        hashed = perceptual_hash(noise_raster(50, 50, seed=3))
        assert hashed.hash.size == 64
        assert not hashed.hash.flatten()[-1]

    def test_deterministic(self):
        raster = noise_raster(48, 32, seed=7)
        assert perceptual_hash(raster) == perceptual_hash(raster)

    def test_mirrored_structure_differs(self):
        rising = perceptual_hash(gradient_raster(64, 64))
        falling = perceptual_hash(gradient_raster(64, 64, reverse=True))
        assert rising - falling > 0

    def test_tolerates_small_rasters(self):
        """Rasters smaller than the DCT grid are upsampled."""
        assert perceptual_hash(noise_raster(3, 2)).hash.size == 64


class TestEdgeHash:
    def test_hash_is_64_bits(self):
        assert edge_hash(noise_raster(25, 40)).hash.size == 64

    def test_flat_image_sets_every_bit(self):
        """No gradient anywhere: every magnitude equals the mean."""
        assert edge_hash(solid_raster(30, 30)).hash.all()

    def test_textured_image_differs_from_flat(self):
        textured = edge_hash(checkerboard_raster(64, 64, cell=8))
        flat = edge_hash(solid_raster(64, 64))
        assert textured != flat

    def test_grid_size_controls_length(self):
        assert edge_hash(noise_raster(40, 40), grid_size=4).hash.size == 16
