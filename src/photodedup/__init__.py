"""photodedup: perceptual-fingerprint image deduplication."""

from .config import GridSpec, Settings
from .image import CHANNEL_WIDTH, Image, LoadError, WriteError, load_image, save_image
from .dedup import (
    AverageHashStrategy,
    Collection,
    FingerprintError,
    IndexOutOfRange,
    average_hash,
)

__version__ = "0.1.0"

__all__ = [
    "GridSpec",
    "Settings",
    "CHANNEL_WIDTH",
    "Image",
    "LoadError",
    "WriteError",
    "load_image",
    "save_image",
    "AverageHashStrategy",
    "Collection",
    "FingerprintError",
    "IndexOutOfRange",
    "average_hash",
]
