from __future__ import annotations
from pathlib import Path
from typing import Union
import logging
import os
import numpy as np
import cv2
from PIL import Image as PILImage
from dotenv import load_dotenv
from ..models.image import Image
from ..errors import InputReadError, OutputBackendUnavailable, OutputWriteError

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)


class ImageRepository:
    """
    Handles codec I/O for Image entities.

    Decoding goes through OpenCV for every format. Encoding goes through OpenCV
    for the HDR container(s) and through Pillow for everything else.
    No color transforms here: samples come out as the codec stored them.
    """
    def __init__(self, hdr_extensions: str | None = None):
        raw = hdr_extensions or os.getenv("HDR_OUTPUT_EXTENSIONS", ".exr")
        self.HDR_EXTS = {
            ext.strip().lower() if ext.strip().startswith(".") else f".{ext.strip().lower()}"
            for ext in raw.split(",")
            if ext.strip()
        }

    def is_hdr_path(self, path: Union[str, Path]) -> bool:
        return Path(path).suffix.lower() in self.HDR_EXTS

    @staticmethod
    def _pil_can_write(path: Path) -> bool:
        return path.suffix.lower() in PILImage.registered_extensions()

    def can_write(self, path: Union[str, Path]) -> bool:
        """
        True if a codec is able to create a writer for this extension.
        """
        path = Path(path)
        if not self.is_hdr_path(path) and self._pil_can_write(path):
            return True
        return bool(cv2.haveImageWriter(str(path)))

    @staticmethod
    def _to_rgb_order(arr: np.ndarray) -> np.ndarray:
        if arr.ndim == 2:
            return arr[:, :, np.newaxis]
        if arr.shape[2] == 3:
            return arr[:, :, ::-1]
        if arr.shape[2] == 4:
            return arr[:, :, [2, 1, 0, 3]]
        return arr

    @staticmethod
    def _to_bgr_order(arr: np.ndarray) -> np.ndarray:
        if arr.shape[2] == 3:
            return arr[:, :, ::-1]
        if arr.shape[2] == 4:
            return arr[:, :, [2, 1, 0, 3]]
        return arr

    @staticmethod
    def _normalize(arr: np.ndarray) -> np.ndarray:
        """
        Integer samples → [0, 1] float32; float samples kept as stored.
        """
        if np.issubdtype(arr.dtype, np.integer):
            return arr.astype(np.float32) / np.float32(np.iinfo(arr.dtype).max)
        return arr.astype(np.float32)

    def load(self, path: Union[str, Path]) -> Image:
        path = Path(path)
        arr = cv2.imread(str(path), cv2.IMREAD_UNCHANGED)
        if arr is None:
            raise InputReadError(f"Image not found or unreadable: {path}")

        source_dtype = arr.dtype
        pixels = self._normalize(self._to_rgb_order(arr))
        logger.debug(f"Decoded {path.name}: {pixels.shape[1]}x{pixels.shape[0]}x{pixels.shape[2]} {source_dtype}")
        return Image(pixels=pixels, path=path, source_dtype=source_dtype)

    @staticmethod
    def _quantize(pixels: np.ndarray) -> np.ndarray:
        return np.round(np.clip(pixels, 0.0, 1.0) * 255.0).astype(np.uint8)

    def _write_cv2(self, pixels: np.ndarray, path: Path) -> None:
        bgr = np.ascontiguousarray(self._to_bgr_order(pixels), dtype=np.float32)
        try:
            ok = cv2.imwrite(str(path), bgr)
        except cv2.error as err:
            raise OutputWriteError(f"Failed to write {path}: {err}") from err
        if not ok:
            raise OutputWriteError(f"Failed to write {path}")

    def _write_pil(self, pixels: np.ndarray, path: Path) -> None:
        u8 = self._quantize(pixels)
        if u8.shape[2] == 1:
            u8 = u8[:, :, 0]
        try:
            PILImage.fromarray(u8).save(path)
        except (OSError, ValueError, TypeError, KeyError) as err:
            raise OutputWriteError(f"Failed to write {path}: {err}") from err

    def save(self, image: Image, path: Union[str, Path, None] = None) -> Path:
        """
        Write the pixels exactly as given (no transfer function applied).

        HDR extensions get float32 samples through OpenCV. Extensions Pillow
        knows get 8 bits per channel. Anything else OpenCV can encode (e.g.
        Radiance .hdr) gets float32 samples through OpenCV.
        """
        path = Path(path or image.path)
        if not self.can_write(path):
            raise OutputBackendUnavailable(f"No image writer available for '{path.suffix or path.name}'")

        if self.is_hdr_path(path) or not self._pil_can_write(path):
            self._write_cv2(image.pixels, path)
        else:
            self._write_pil(image.pixels, path)

        logger.debug(f"Wrote {path}")
        return path
