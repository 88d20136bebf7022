"""
photodedup image container and PPM codec

Decoded rasters are held as immutable Image objects; load_image and
save_image move them to and from binary PPM (P6) files.
"""

from .model import CHANNEL_WIDTH, Image
from .ppm import LoadError, WriteError, load_image, save_image

__all__ = [
    "CHANNEL_WIDTH",
    "Image",
    "LoadError",
    "WriteError",
    "load_image",
    "save_image",
]
