"""Tests for digest comparison helpers."""

import imagehash
import pytest

from photodedup.config import GridSpec
from photodedup.dedup.distance import as_image_hash, hamming_distance
from photodedup.dedup.hash import average_hash
from tests.helpers.ppm_factory import make_image


class TestAsImageHash:
    def test_bit_positions_follow_cells(self):
        image_hash = as_image_hash(0b101)
        flat = image_hash.hash.reshape(-1)

        assert isinstance(image_hash, imagehash.ImageHash)
        assert image_hash.hash.shape == (8, 8)
        assert flat[0] and not flat[1] and flat[2]
        assert flat[3:].sum() == 0

    def test_small_grid(self):
        assert as_image_hash(0xF, GridSpec(2, 2)).hash.all()

    @pytest.mark.parametrize("digest", [-1, 2 ** 64])
    def test_out_of_range_digest(self, digest):
        with pytest.raises(ValueError):
            as_image_hash(digest)


class TestHammingDistance:
    def test_identical(self):
        digest = average_hash(make_image(seed=1))
        assert hamming_distance(digest, digest) == 0

    def test_counts_differing_bits(self):
        assert hamming_distance(0, 0b1011) == 3
        assert hamming_distance(0, 2 ** 64 - 1) == 64

    def test_symmetric(self):
        a = average_hash(make_image(seed=1))
        b = average_hash(make_image(seed=2))
        assert hamming_distance(a, b) == hamming_distance(b, a)

    def test_accepts_image_hash(self):
        assert hamming_distance(as_image_hash(0b11), 0) == 2
        assert isinstance(hamming_distance(as_image_hash(1), as_image_hash(2)), int)
