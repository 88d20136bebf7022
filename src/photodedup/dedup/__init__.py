"""Fingerprint-indexed image deduplication."""

from .collection import Collection, IndexOutOfRange
from .hash import (
    AverageHashStrategy,
    FingerprintError,
    FingerprintStrategy,
    average_hash,
    digest_bits,
    format_digest,
)
from .distance import as_image_hash, hamming_distance

__all__ = [
    "Collection",
    "IndexOutOfRange",
    "AverageHashStrategy",
    "FingerprintError",
    "FingerprintStrategy",
    "average_hash",
    "digest_bits",
    "format_digest",
    "as_image_hash",
    "hamming_distance",
]
