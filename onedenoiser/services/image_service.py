from __future__ import annotations
from pathlib import Path
from typing import Union
import logging
import numpy as np
from ..models.image import Image
from ..models.srgb import linear_to_srgb, srgb_to_linear
from ..repositories.image_repository import ImageRepository

logger = logging.getLogger(__name__)

# Sample encodings that are already linear light when decoded.
LINEAR_DTYPES = (np.dtype(np.float16), np.dtype(np.float32), np.dtype(np.float64))


class ImageService:
    """
    Image Loader and Image Writer.

    Keeps every in-memory Image in linear light: decoding linearizes
    non-float sources, encoding re-applies sRGB for non-HDR containers.
    """
    def __init__(self, image_repository: ImageRepository | None = None):
        self.image_repository = image_repository or ImageRepository()

    @staticmethod
    def is_linear_encoding(dtype: np.dtype | None) -> bool:
        """
        True for float16/float32/float64 sources. A source is linear only if its
        encoding equals one of them; anything else is treated as sRGB encoded.
        """
        return dtype is not None and np.dtype(dtype) in LINEAR_DTYPES

    def linearize(self, image: Image) -> Image:
        """
        Return `image` in linear light. Non-linear sources get srgb_to_linear on every sample.
        """
        if self.is_linear_encoding(image.source_dtype):
            return image
        return Image(
            pixels=srgb_to_linear(image.pixels),
            path=image.path,
            source_dtype=image.source_dtype,
        )

    def load(self, path: Union[str, Path]) -> Image:
        """Decode a file into a linear-light Image."""
        image = self.image_repository.load(path)
        linear = self.linearize(image)
        logger.info(
            f"Loaded {Path(path).name}: {image.width}x{image.height}x{image.channels} "
            f"({image.source_dtype}{', sRGB decoded' if linear is not image else ''})"
        )
        return linear

    def encode_for(self, image: Image, path: Union[str, Path]) -> np.ndarray:
        """
        Samples as they should be handed to the codec for `path`.
        HDR containers keep linear samples; everything else gets linear_to_srgb.
        """
        if self.image_repository.is_hdr_path(path):
            return image.pixels
        return linear_to_srgb(image.pixels)

    def can_write(self, path: Union[str, Path]) -> bool:
        return self.image_repository.can_write(path)

    def save(self, image: Image, path: Union[str, Path, None] = None) -> Path:
        """
        Business-level method to encode and write the image. `image` is left untouched.
        """
        path = Path(path or image.path)
        encoded = Image(pixels=self.encode_for(image, path), path=path)
        written = self.image_repository.save(encoded, path)
        logger.info(f"Saved {written} ({image.width}x{image.height}x{image.channels})")
        return written
