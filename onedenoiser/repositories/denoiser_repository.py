from __future__ import annotations
from typing import Dict, List, Type
import logging
import numpy as np
from ..models.oidn_engine import OidnEngine
from ..errors import BackendUnavailable, UnknownBackend

logger = logging.getLogger(__name__)


class Denoiser:
    """
    A denoising backend: accepts color + optional albedo + optional normal,
    returns a denoised buffer of the same shape.

    Buffers are (H, W, 3) float32, C-contiguous, linear light.
    """
    name: str = ""
    display_name: str = ""

    @classmethod
    def is_available(cls) -> bool:
        return True

    def denoise(
        self,
        color: np.ndarray,
        albedo: np.ndarray | None = None,
        normal: np.ndarray | None = None,
    ) -> np.ndarray:
        raise NotImplementedError


class OidnDenoiser(Denoiser):
    """
    Intel Open Image Denoise "RT" filter (ray-traced noise removal), HDR input.
    """
    name = "oidn"
    display_name = "OpenImageDenoise"
    filter_type = "RT"

    def __init__(self):
        self.engine = OidnEngine()  # Singleton is handled inside

    @classmethod
    def is_available(cls) -> bool:
        return OidnEngine.is_available()

    def denoise(self, color, albedo=None, normal=None):
        images = {"color": color}
        if albedo is not None:
            images["albedo"] = albedo
        if normal is not None:
            images["normal"] = normal
        # Output starts as a copy of the input; the filter overwrites it.
        output = color.copy()
        return self.engine.execute(self.filter_type, images, output, hdr=True)


class DenoiserRepository:
    """
    Name → backend mapping. Built at import; extend with `register`.
    """
    _backends: Dict[str, Type[Denoiser]] = {
        OidnDenoiser.name: OidnDenoiser,
    }

    @classmethod
    def register(cls, name: str, backend: Type[Denoiser]) -> None:
        cls._backends[name] = backend

    @classmethod
    def names(cls) -> List[str]:
        return sorted(cls._backends)

    def get(self, name: str) -> Denoiser:
        """
        Resolve and instantiate a backend.

        Raises:
            UnknownBackend: `name` was never registered.
            BackendUnavailable: the backend's library is not installed.
        """
        backend = self._backends.get(name)
        if backend is None:
            raise UnknownBackend(name)
        if not backend.is_available():
            raise BackendUnavailable(f"{backend.display_name or name} is not enabled")
        logger.debug(f"Using denoiser backend '{name}' ({backend.__name__})")
        return backend()
