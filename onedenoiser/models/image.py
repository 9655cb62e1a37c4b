from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
from typing import Sequence
import numpy as np


@dataclass
class Image:
    """
    Simple data object: linear-light float pixels (+ optional path for bookkeeping).
    No codec logic outside the repository layer.
    """
    pixels: np.ndarray  # Shape (H, W, C), dtype float32, RGB(A) order, linear light.
    path: Path | None = None  # Source or destination of the image.
    source_dtype: np.dtype | None = None  # Native sample encoding the codec decoded.

    def __post_init__(self):
        pixels = np.asarray(self.pixels)
        if pixels.ndim != 3 or min(pixels.shape) <= 0:
            raise ValueError(f"Image pixels must have shape (H, W, C) with positive dims, got {pixels.shape}")
        self.pixels = np.ascontiguousarray(pixels, dtype=np.float32)
        if self.path is not None:
            self.path = Path(self.path)

    @classmethod
    def from_flat(
        cls,
        samples: Sequence[float] | np.ndarray,
        width: int,
        height: int,
        channels: int,
        path: str | Path | None = None,
    ) -> Image:
        """
        Build an Image from a row-major, channel-interleaved sample sequence.
        """
        samples = np.asarray(samples, dtype=np.float32).ravel()
        if width <= 0 or height <= 0 or channels <= 0:
            raise ValueError(f"Image dimensions must be positive, got {width}x{height}x{channels}")
        if samples.size != width * height * channels:
            raise ValueError(
                f"Expected {width * height * channels} samples for {width}x{height}x{channels}, "
                f"got {samples.size}"
            )
        return cls(pixels=samples.reshape(height, width, channels), path=path)

    @property
    def height(self) -> int:
        return self.pixels.shape[0]

    @property
    def width(self) -> int:
        return self.pixels.shape[1]

    @property
    def channels(self) -> int:
        return self.pixels.shape[2]

    @property
    def flat(self) -> np.ndarray:
        return self.pixels.reshape(-1)

    def same_size(self, other: Image) -> bool:
        return (self.width, self.height) == (other.width, other.height)

    def copy(self) -> Image:
        return Image(pixels=self.pixels.copy(), path=self.path, source_dtype=self.source_dtype)
