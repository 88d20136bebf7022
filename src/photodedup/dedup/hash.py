"""Average-hash fingerprinting for decoded images."""

from dataclasses import dataclass
from typing import Optional, Protocol

import numpy as np

from ..config import DEFAULT_GRID, GridSpec
from ..image.model import CHANNEL_WIDTH, Image
from ..logging import get_logger

logger = get_logger(__name__)


class FingerprintError(Exception):
    """Raised when an image cannot be fingerprinted with the configured grid."""


class FingerprintStrategy(Protocol):
    def generate(self, image: Optional[Image]) -> int:
        ...


def segment_length(grid: GridSpec = DEFAULT_GRID) -> int:
    """Number of consecutive samples averaged into one grid cell."""
    return CHANNEL_WIDTH * grid.cells


def min_samples(grid: GridSpec = DEFAULT_GRID) -> int:
    """Smallest sample count that fills every cell of the grid."""
    return segment_length(grid) * grid.cells


def cell_values(image: Image, grid: GridSpec = DEFAULT_GRID) -> np.ndarray:
    """
    Average the image's flat sample sequence into one value per grid cell.

    Cell ``i`` covers samples ``[i * L, (i + 1) * L)`` where ``L`` is
    ``segment_length(grid)``. This is a positional split of the flat array,
    not a geometric resize: samples past ``min_samples(grid)`` are ignored.

    Raises:
        FingerprintError: If the image has fewer than ``min_samples(grid)`` samples
    """
    length = segment_length(grid)
    needed = length * grid.cells
    if image.sample_count < needed:
        raise FingerprintError(
            f"Image {image.identifier!r} has {image.sample_count} samples; "
            f"a {grid.width}x{grid.height} grid needs at least {needed}"
        )

    accumulator = np.int64 if np.issubdtype(image.dtype, np.integer) else np.float64
    segments = image.pixels[:needed].astype(accumulator).reshape(grid.cells, length)
    return segments.sum(axis=1) // length


def digest_bits(image: Image, grid: GridSpec = DEFAULT_GRID) -> np.ndarray:
    """Boolean ``(grid.height, grid.width)`` field: cells strictly above the mean cell value."""
    cells = cell_values(image, grid)
    # Floor division, matching the per-cell averages.
    mean = cells.sum() // grid.cells
    return (cells > mean).reshape(grid.height, grid.width)


def average_hash(image: Optional[Image], grid: GridSpec = DEFAULT_GRID) -> int:
    """
    Compute the average-hash digest of an image.

    Bit ``i`` of the result is set iff cell ``i`` is strictly greater than
    the mean of all cells, so cell 0 is the least significant bit.

    Args:
        image: Image to fingerprint
        grid: Grid pair fixing both the cell count and the digest width

    Returns:
        Digest as a non-negative int below ``2 ** grid.digest_bits``. A missing
        image yields 0; that is a sentinel, not the digest of a real image.

    Raises:
        FingerprintError: If the image is too small for the grid
    """
    if image is None:
        logger.debug("No image given, returning zero digest")
        return 0

    digest = 0
    for position, bit in enumerate(digest_bits(image, grid).reshape(-1)):
        if bit:
            digest |= 1 << position
    return digest


def format_digest(digest: int, grid: GridSpec = DEFAULT_GRID) -> str:
    """Zero-padded lowercase hex rendering of a digest."""
    width = (grid.digest_bits + 3) // 4
    return f"{digest:0{width}x}"


@dataclass(frozen=True)
class AverageHashStrategy:
    """Fingerprint strategy computing the average hash over a fixed grid."""
    grid: GridSpec = DEFAULT_GRID

    @property
    def min_samples(self) -> int:
        return min_samples(self.grid)

    def generate(self, image: Optional[Image]) -> int:
        return average_hash(image, self.grid)
