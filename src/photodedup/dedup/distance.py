"""Digest comparison helpers built on imagehash."""

from numbers import Integral
from typing import Union

import imagehash
import numpy as np

from ..config import DEFAULT_GRID, GridSpec

DigestLike = Union[int, imagehash.ImageHash]


def as_image_hash(digest: int, grid: GridSpec = DEFAULT_GRID) -> imagehash.ImageHash:
    """
    Convert a digest into an imagehash.ImageHash.

    Bit ``i`` of the digest lands at flat position ``i`` of the hash array,
    so the array reads in cell order.
    """
    if digest < 0 or digest >> grid.digest_bits:
        raise ValueError(f"Digest {digest:#x} does not fit in {grid.digest_bits} bits")
    bits = np.array(
        [(digest >> position) & 1 for position in range(grid.digest_bits)],
        dtype=bool,
    )
    return imagehash.ImageHash(bits.reshape(grid.height, grid.width))


def hamming_distance(a: DigestLike, b: DigestLike, grid: GridSpec = DEFAULT_GRID) -> int:
    """
    Number of differing bits between two digests.

    Args:
        a: First digest, as an int or ImageHash
        b: Second digest, as an int or ImageHash
        grid: Grid used to produce integer digests

    Returns:
        Hamming distance
    """
    if isinstance(a, Integral):
        a = as_image_hash(int(a), grid)
    if isinstance(b, Integral):
        b = as_image_hash(int(b), grid)
    return int(a - b)
