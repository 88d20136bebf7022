"""Deduplicated image collection indexed by fingerprint digest."""

from __future__ import annotations

import threading
from pathlib import Path
from typing import Callable, Dict, Iterator, List, Optional, Union

from ..config import Settings
from ..image.model import Image
from ..image.ppm import load_image
from ..logging import get_logger
from .hash import AverageHashStrategy, FingerprintStrategy

logger = get_logger(__name__)

Loader = Callable[[Union[str, Path]], Image]


class IndexOutOfRange(IndexError):
    """Raised when a store position past the end of the collection is requested."""


class Collection:
    """
    Append-only image store with a digest index.

    Images live in an arena list and are addressed by their position, which
    never changes once issued. The index maps each digest to the positions of
    the images sharing it, in insertion order. Digests are computed once, on
    insertion, and kept alongside the arena.

    Two images are only treated as duplicates when their digests match *and*
    their pixels are identical, so digest collisions never reject a distinct
    image.
    """

    def __init__(
        self,
        strategy: Optional[FingerprintStrategy] = None,
        loader: Optional[Loader] = None,
    ) -> None:
        self._strategy: FingerprintStrategy = strategy or AverageHashStrategy()
        self._loader: Loader = loader or load_image
        self._store: List[Image] = []
        self._digests: List[int] = []
        self._index: Dict[int, List[int]] = {}
        self._lock = threading.RLock()

    @classmethod
    def from_settings(cls, settings: Settings) -> Collection:
        dtype = settings.pixel_dtype

        def loader(source: Union[str, Path]) -> Image:
            return load_image(source, dtype=dtype)

        return cls(strategy=AverageHashStrategy(grid=settings.grid), loader=loader)

    @property
    def strategy(self) -> FingerprintStrategy:
        return self._strategy

    def size(self) -> int:
        with self._lock:
            return len(self._store)

    def get(self, index: int) -> Image:
        """
        Return the image stored at ``index``.

        Raises:
            IndexOutOfRange: If ``index`` is negative or not below ``size()``
        """
        with self._lock:
            if index < 0 or index >= len(self._store):
                raise IndexOutOfRange(
                    f"Index {index} out of range for collection of size {len(self._store)}"
                )
            image = self._store[index]
            assert image is not None, f"store slot {index} is empty"
            return image

    def digest_at(self, index: int) -> int:
        """Digest recorded for the image at ``index`` when it was inserted."""
        with self._lock:
            self.get(index)
            return self._digests[index]

    def bucket(self, digest: int) -> List[Image]:
        """Images sharing ``digest``, in insertion order."""
        with self._lock:
            return [self._store[handle] for handle in self._index.get(digest, [])]

    def digests(self) -> List[int]:
        """Distinct digests present, in the order they were first seen."""
        with self._lock:
            return list(self._index)

    def add(self, source: Union[str, Path]) -> bool:
        """
        Load an image and insert it unless an identical one is already stored.

        Args:
            source: Identifier handed to the loader, usually a file path

        Returns:
            True if the image was stored, False if it duplicated a stored image
            or the loader produced no image

        Raises:
            LoadError: If the loader cannot produce the image
            FingerprintError: If the image is too small for the strategy's grid
        """
        image = self._loader(source)
        return self.add_image(image)

    def add_image(self, image: Optional[Image]) -> bool:
        """Insert an already decoded image; see ``add``. A missing image is refused."""
        if image is None:
            logger.debug("No image given, nothing added")
            return False

        digest = self._strategy.generate(image)

        with self._lock:
            handles = self._index.get(digest)
            if handles is not None:
                for handle in handles:
                    if self._store[handle] == image:
                        logger.debug(
                            f"Rejected {image.identifier}: duplicate of "
                            f"{self._store[handle].identifier} (digest {digest:#x})"
                        )
                        return False
                logger.info(
                    f"Digest collision on {digest:#x}: {image.identifier} "
                    f"differs from {len(handles)} stored image(s)"
                )

            handle = len(self._store)
            self._store.append(image)
            self._digests.append(digest)
            if handles is None:
                self._index[digest] = [handle]
            else:
                handles.append(handle)

        logger.debug(f"Added {image.identifier} at {handle} (digest {digest:#x})")
        return True

    def __len__(self) -> int:
        return self.size()

    def __getitem__(self, index: int) -> Image:
        return self.get(index)

    def __iter__(self) -> Iterator[Image]:
        with self._lock:
            snapshot = list(self._store)
        return iter(snapshot)

    def __contains__(self, image: object) -> bool:
        if not isinstance(image, Image):
            return False
        digest = self._strategy.generate(image)
        return any(candidate == image for candidate in self.bucket(digest))
