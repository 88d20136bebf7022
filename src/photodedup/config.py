from __future__ import annotations

import os
from dataclasses import dataclass, field

MAX_DIGEST_BITS = 64


@dataclass(frozen=True)
class GridSpec:
    """Fingerprint grid. The cell count is also the digest width in bits."""
    width: int = 8
    height: int = 8

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Grid dimensions must be positive, got {self.width}x{self.height}")
        if self.cells > MAX_DIGEST_BITS:
            raise ValueError(
                f"Grid {self.width}x{self.height} has {self.cells} cells; "
                f"digests hold at most {MAX_DIGEST_BITS} bits"
            )

    @property
    def cells(self) -> int:
        return self.width * self.height

    @property
    def digest_bits(self) -> int:
        return self.cells


DEFAULT_GRID = GridSpec()


@dataclass
class Settings:
    grid: GridSpec = field(default_factory=GridSpec)
    pixel_dtype: str = "int16"

    @classmethod
    def from_env(cls) -> Settings:
        """Build settings from PHOTODEDUP_* environment variables, falling back to defaults."""
        defaults = cls()
        grid = GridSpec(
            width=int(os.getenv("PHOTODEDUP_GRID_WIDTH", defaults.grid.width)),
            height=int(os.getenv("PHOTODEDUP_GRID_HEIGHT", defaults.grid.height)),
        )
        return cls(
            grid=grid,
            pixel_dtype=os.getenv("PHOTODEDUP_PIXEL_DTYPE", defaults.pixel_dtype),
        )
