from __future__ import annotations
from pathlib import Path
from typing import Union
import logging
import numpy as np
from ..models.image import Image
from ..repositories.denoiser_repository import DenoiserRepository
from ..errors import DenoiseBackendError, ImageShapeError
from .image_service import ImageService

logger = logging.getLogger(__name__)

RGB = 3


class DenoiseService:
    """
    Denoise Invoker: validates color/guide buffers and runs the selected backend.
    *   No file I/O in `denoise`; `denoise_files` loads through ImageService first.
    *   The backend is resolved in __init__ so selection errors surface before any I/O.
    """

    def __init__(
        self,
        backend: str = "oidn",
        *,
        denoiser_repository: DenoiserRepository | None = None,
        image_service: ImageService | None = None,
    ):
        self.backend_name = backend
        self.denoiser_repository = denoiser_repository or DenoiserRepository()
        self.image_service = image_service or ImageService()
        self.denoiser = self.denoiser_repository.get(backend)

    @staticmethod
    def _rgb(image: Image) -> np.ndarray:
        return np.ascontiguousarray(image.pixels[:, :, :RGB], dtype=np.float32)

    @staticmethod
    def _check_guide(kind: str, guide: Image, color: Image) -> None:
        if not guide.same_size(color):
            raise ImageShapeError(
                f"{kind} image is {guide.width}x{guide.height}, "
                f"color image is {color.width}x{color.height}"
            )
        if guide.channels < RGB:
            raise ImageShapeError(f"{kind} image needs at least {RGB} channels, got {guide.channels}")

    def denoise(
        self,
        color: Image,
        albedo: Image | None = None,
        normal: Image | None = None,
    ) -> Image:
        """
        Denoise `color`, optionally guided by albedo and normal buffers.

        Only the RGB channels go to the backend; any extra channel (alpha)
        is carried over from the input unchanged.

        Returns:
            Image: same width, height and channel count as `color`.
        """
        if color.channels < RGB:
            raise ImageShapeError(f"color image needs at least {RGB} channels, got {color.channels}")
        if albedo is not None:
            self._check_guide("albedo", albedo, color)
        if normal is not None:
            self._check_guide("normal", normal, color)

        result = self.denoiser.denoise(
            self._rgb(color),
            self._rgb(albedo) if albedo is not None else None,
            self._rgb(normal) if normal is not None else None,
        )
        expected = (color.height, color.width, RGB)
        if result is None or tuple(np.shape(result)) != expected:
            raise DenoiseBackendError(
                f"{self.backend_name} returned shape {None if result is None else np.shape(result)}, "
                f"expected {expected}"
            )

        output = color.copy()
        output.pixels[:, :, :RGB] = result
        return output

    def denoise_files(
        self,
        input_path: Union[str, Path],
        albedo_path: Union[str, Path, None] = None,
        normal_path: Union[str, Path, None] = None,
    ) -> Image:
        """
        Load the color image and any guides, then denoise.
        """
        color = self.image_service.load(input_path)
        albedo = self.image_service.load(albedo_path) if albedo_path else None
        normal = self.image_service.load(normal_path) if normal_path else None

        guides = [kind for kind, img in (("albedo", albedo), ("normal", normal)) if img is not None]
        logger.info(
            f"Denoising {color.width}x{color.height} with '{self.backend_name}'"
            f"{' guided by ' + ' + '.join(guides) if guides else ''}"
        )
        return self.denoise(color, albedo, normal)
