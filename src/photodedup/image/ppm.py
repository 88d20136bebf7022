from __future__ import annotations

from pathlib import Path
from typing import Optional, Union

import numpy as np
from PIL import Image as PILImage

from .model import CHANNEL_WIDTH, DTypeLike, Image
from ..logging import get_logger

logger = get_logger(__name__)

PPM_MAGIC = b"P6"
PPM_MAXVAL = 255


class LoadError(Exception):
    """Raised when an image source cannot be read or decoded."""


class WriteError(Exception):
    """Raised when an image cannot be written to its destination."""


def _read_header_fields(fh, count: int) -> list[int]:
    """Read ``count`` whitespace-separated integers following the magic marker."""
    fields: list[int] = []
    token = b""
    while len(fields) < count:
        char = fh.read(1)
        if char == b"#":
            fh.readline()
        if not char or char == b"#" or char.isspace():
            if token:
                fields.append(int(token))
                token = b""
            if not char:
                raise LoadError(f"Header ended after {len(fields)} of {count} fields")
            continue
        token += char
        if len(token) > 10:
            raise LoadError(f"Header field {token!r}... is too long")
    return fields


def load_image(source: Union[str, Path], dtype: DTypeLike = None) -> Image:
    """
    Load a binary PPM (P6) raster into an Image.

    Samples are taken as stored, so only files with a maxval of 255 are
    accepted; Pillow would otherwise rescale them.

    Args:
        source: Path of the file to read
        dtype: Sample type of the resulting Image (int16 when omitted)

    Returns:
        Fully populated Image

    Raises:
        LoadError: If the file is unreadable, the magic marker is not P6,
            the header is malformed, the maxval is not 255 or the pixel
            stream is truncated
    """
    path = Path(source)
    if not path.is_file():
        raise LoadError(f"Image file does not exist: {path}")

    try:
        with path.open("rb") as fh:
            magic = fh.read(len(PPM_MAGIC))
            if magic != PPM_MAGIC:
                raise LoadError(f"Bad magic marker {magic!r} in {path}, expected {PPM_MAGIC!r}")
            width, height, maxval = _read_header_fields(fh, 3)
            if maxval != PPM_MAXVAL:
                raise LoadError(f"Unsupported maxval {maxval} in {path}, expected {PPM_MAXVAL}")
            fh.seek(0)

            with PILImage.open(fh, formats=["PPM"]) as pil_image:
                # Pillow decodes lazily; force the read so truncation surfaces here.
                pil_image.load()
                if pil_image.mode != "RGB":
                    raise LoadError(f"Unsupported PPM mode {pil_image.mode!r} in {path}")
                image = Image.from_pil(str(source), pil_image, dtype=dtype)
    except (OSError, ValueError, SyntaxError) as exc:
        raise LoadError(f"Failed to load image {path}: {exc}") from exc

    logger.debug(f"Loaded {path} ({width}x{height}, dtype={image.dtype})")
    return image


def save_image(image: Optional[Image], destination: Union[str, Path]) -> None:
    """
    Write an Image as binary PPM with the same header layout load_image reads.

    A missing or zero-dimension image is a no-op.

    Raises:
        WriteError: If the destination cannot be opened or written
    """
    if image is None or image.width == 0 or image.height == 0:
        logger.debug(f"Nothing to write to {destination}: empty image")
        return

    header = f"P6\n{image.width} {image.height}\n{PPM_MAXVAL}\n".encode("ascii")
    samples = np.clip(image.pixels, 0, PPM_MAXVAL).astype(np.uint8)
    path = Path(destination)

    try:
        with path.open("wb") as fh:
            fh.write(header)
            fh.write(samples.tobytes())
    except OSError as exc:
        raise WriteError(f"Failed to write image to {path}: {exc}") from exc

    logger.debug(
        f"Wrote {image.identifier} to {path} "
        f"({image.width}x{image.height}, {image.width * image.height * CHANNEL_WIDTH} samples)"
    )
