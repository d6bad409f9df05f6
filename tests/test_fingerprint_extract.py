"""Tests for full fingerprint extraction."""

import json
from dataclasses import FrozenInstanceError

import pytest
from hypothesis import given, settings, strategies as st

from lookalike.config import Settings
from lookalike.errors import InvalidRaster
from lookalike.fingerprint.extract import extract_fingerprint
from lookalike.fingerprint.model import ImageFingerprint
from lookalike.raster.model import Raster
from tests.helpers.raster_factory import gradient_raster, noise_raster, solid_raster


class TestExtractFingerprint:
    def test_fields_populated(self):
        fingerprint = extract_fingerprint("img1", noise_raster(40, 20, seed=4))

        assert isinstance(fingerprint, ImageFingerprint)
        assert fingerprint.id == "img1"
        assert (fingerprint.width, fingerprint.height) == (40, 20)
        assert fingerprint.aspect_ratio == 2.0
        for hashed in (fingerprint.ahash, fingerprint.dhash, fingerprint.phash, fingerprint.edge_hash):
            assert hashed.hash.size == 64
        assert fingerprint.color_histogram.bucket_count == 256
        assert 1 <= len(fingerprint.dominant_colors) <= 5
        assert fingerprint.computed_at.tzinfo is not None

    def test_empty_raster_rejected(self):
        """A 0x0 raster fails with InvalidRaster."""
        with pytest.raises(InvalidRaster):
            extract_fingerprint("empty", Raster(width=0, height=0, data=b""))

    def test_truncated_buffer_rejected(self):
        with pytest.raises(InvalidRaster):
            extract_fingerprint("short", Raster(width=4, height=4, data=bytes(60)))

    def test_deterministic(self):
        """Identical buffers give equal fingerprints."""
        first = extract_fingerprint("a", noise_raster(37, 29, seed=9))
        second = extract_fingerprint("a", noise_raster(37, 29, seed=9))
        assert first == second
        assert first.to_dict() | {"computed_at": None} == second.to_dict() | {"computed_at": None}

    def test_settings_control_sizes(self):
        custom = Settings(hash_size=16, phash_size=64, edge_grid_size=4, histogram_buckets=32, dominant_color_count=2)
        fingerprint = extract_fingerprint("img", noise_raster(80, 80), custom)

        assert fingerprint.ahash.hash.size == 256
        assert fingerprint.dhash.hash.size == 256
        assert fingerprint.phash.hash.size == 256
        assert fingerprint.edge_hash.hash.size == 16
        assert fingerprint.color_histogram.bucket_count == 32
        assert len(fingerprint.dominant_colors) <= 2

    def test_fingerprint_immutable(self):
        fingerprint = extract_fingerprint("img", solid_raster(8, 8))
        with pytest.raises(FrozenInstanceError):
            fingerprint.width = 10  # type: ignore

    def test_to_dict_is_json_serialisable(self):
        fingerprint = extract_fingerprint("img", gradient_raster(32, 16))
        payload = json.loads(json.dumps(fingerprint.to_dict()))

        assert payload["id"] == "img"
        assert len(payload["ahash"]) == 16
        assert len(payload["color_histogram"]["r"]) == 256
        assert payload["aspect_ratio"] == 2.0

    @settings(max_examples=25, deadline=None)
    @given(
        width=st.integers(min_value=1, max_value=48),
        height=st.integers(min_value=1, max_value=48),
        seed=st.integers(min_value=0, max_value=10_000),
    )
    def test_any_valid_raster_extracts(self, width, height, seed):
        """Extraction succeeds for any size and is reproducible."""
        raster = noise_raster(width, height, seed)
        fingerprint = extract_fingerprint("img", raster)
        assert fingerprint == extract_fingerprint("img", raster)
        for channel in fingerprint.color_histogram.channels():
            assert sum(channel) == pytest.approx(1.0)
