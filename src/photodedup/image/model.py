from __future__ import annotations

from pathlib import Path
from typing import Union

import numpy as np
from PIL import Image as PILImage

CHANNEL_WIDTH = 3

DEFAULT_DTYPE = np.int16

DTypeLike = Union[str, type, np.dtype, None]


def _to_samples(identifier: str, pixels, dtype: DTypeLike) -> np.ndarray:
    """Flatten pixels into ``dtype``, refusing casts that would change a sample."""
    try:
        source = np.asarray(pixels).reshape(-1)
        data = source.astype(dtype)
    except (TypeError, ValueError, OverflowError) as exc:
        raise ValueError(f"Image {identifier!r} samples cannot be stored as {dtype}: {exc}") from exc
    if np.issubdtype(data.dtype, np.integer) and not np.array_equal(data, source):
        raise ValueError(
            f"Image {identifier!r} has samples that do not fit {data.dtype} exactly"
        )
    return data


class Image:
    """
    Decoded raster held in memory.

    Pixels are stored as one flat, read-only numpy array in row-major,
    channel-interleaved order, holding exactly ``width * height * CHANNEL_WIDTH``
    samples. The sample type is chosen with ``dtype`` (int16 by default).
    """

    __slots__ = ("_identifier", "_width", "_height", "_pixels")

    def __init__(
        self,
        identifier: str,
        width: int,
        height: int,
        pixels,
        dtype: DTypeLike = None,
    ) -> None:
        width = int(width)
        height = int(height)
        if width <= 0 or height <= 0:
            raise ValueError(f"Image dimensions must be positive, got {width}x{height}")

        data = _to_samples(identifier, pixels, DEFAULT_DTYPE if dtype is None else dtype)
        expected = width * height * CHANNEL_WIDTH
        if data.size != expected:
            raise ValueError(
                f"Image {identifier!r} expects {expected} samples for "
                f"{width}x{height}x{CHANNEL_WIDTH}, got {data.size}"
            )
        data.setflags(write=False)

        self._identifier = str(identifier)
        self._width = width
        self._height = height
        self._pixels = data

    @classmethod
    def from_array(cls, identifier: str, array: np.ndarray, dtype: DTypeLike = None) -> Image:
        """Build an image from an ``(height, width, 3)`` array."""
        array = np.asarray(array)
        if array.ndim != 3 or array.shape[2] != CHANNEL_WIDTH:
            raise ValueError(
                f"Expected array of shape (height, width, {CHANNEL_WIDTH}), got {array.shape}"
            )
        height, width = array.shape[:2]
        return cls(identifier, width, height, array, dtype=dtype)

    @classmethod
    def from_pil(cls, identifier: str, pil_image: PILImage.Image, dtype: DTypeLike = None) -> Image:
        if pil_image.mode != "RGB":
            pil_image = pil_image.convert("RGB")
        return cls.from_array(identifier, np.asarray(pil_image), dtype=dtype)

    @property
    def identifier(self) -> str:
        return self._identifier

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    @property
    def dtype(self) -> np.dtype:
        return self._pixels.dtype

    @property
    def pixels(self) -> np.ndarray:
        return self._pixels

    @property
    def sample_count(self) -> int:
        return int(self._pixels.size)

    @property
    def shape(self) -> tuple[int, int, int]:
        return (self._height, self._width, CHANNEL_WIDTH)

    def as_array(self) -> np.ndarray:
        """Read-only ``(height, width, 3)`` view of the samples."""
        return self._pixels.reshape(self.shape)

    def to_pil(self) -> PILImage.Image:
        data = np.clip(self.as_array(), 0, 255).astype(np.uint8)
        return PILImage.fromarray(data)

    def save(self, destination: Union[str, Path]) -> None:
        """Write this image as binary PPM. See ``photodedup.image.ppm.save_image``."""
        from .ppm import save_image

        save_image(self, destination)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Image):
            return NotImplemented
        if self._width != other._width or self._height != other._height:
            return False
        return bool(np.array_equal(self._pixels, other._pixels))

    # Equality is content-based; images are not meant to key dicts or sets.
    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return (
            f"Image(identifier={self._identifier!r}, width={self._width}, "
            f"height={self._height}, dtype={self.dtype})"
        )
