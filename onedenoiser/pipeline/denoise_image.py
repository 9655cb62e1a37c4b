"""
Denoise Image Pipeline
Load → denoise → write, strictly in that order, for a single image.
"""
from __future__ import annotations
import logging
from pathlib import Path
from typing import Union

from ..models.image import Image
from ..services.image_service import ImageService
from ..services.denoise_service import DenoiseService

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def denoise_image(
    input_path: PathLike,
    output_path: PathLike,
    *,
    backend: str = "oidn",
    albedo_path: PathLike | None = None,
    normal_path: PathLike | None = None,
    image_service: ImageService | None = None,
    denoise_service: DenoiseService | None = None,
) -> Image:
    """
    Denoise one rendered image and write the result.

    The backend is resolved before anything is read, and any failure aborts
    the remaining stages; nothing is written unless denoising succeeded.

    Args:
        input_path: Noisy color image.
        output_path: Destination; the extension picks the container and encoding.
        backend: Registered denoiser name (ignored when `denoise_service` is given).
        albedo_path: Optional albedo guide image.
        normal_path: Optional normal guide image.
        image_service: Service for decoding/encoding.
        denoise_service: Service for running the backend.

    Returns:
        Image: the denoised linear-light image that was written.
    """
    image_service = image_service or ImageService()
    denoise_service = denoise_service or DenoiseService(backend, image_service=image_service)

    output_path = Path(output_path)
    denoised = denoise_service.denoise_files(input_path, albedo_path, normal_path)
    denoised.path = output_path
    image_service.save(denoised, output_path)

    logger.info(f"Denoised {Path(input_path).name} → {output_path}")
    return denoised
