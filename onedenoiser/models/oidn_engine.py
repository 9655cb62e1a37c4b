from __future__ import annotations
import ctypes
import logging
import os
from typing import Dict
import numpy as np
from dotenv import load_dotenv

from ..errors import BackendUnavailable, DenoiseBackendError

try:
    import oidn
except (ImportError, OSError, RuntimeError):  # binding absent or its native library failed to load
    oidn = None

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)


class OidnEngine:
    """
    Singleton wrapper around an Intel Open Image Denoise device.

    The device is created once per Python process; every filter run shares it.
    """

    _instance: OidnEngine | None = None  # Class-level cache for singleton

    def __new__(cls, *args, **kwargs):
        """
        Ensure the device is created only once (Singleton pattern).

        Args:
            device_type (str, optional): "default" or "cpu". Defaults to env var.
        """
        if cls._instance is None:
            instance = super().__new__(cls)
            instance._init_engine(*args, **kwargs)
            cls._instance = instance
        return cls._instance

    @staticmethod
    def is_available() -> bool:
        return oidn is not None

    def _init_engine(self, device_type: str | None = None):
        if oidn is None:
            raise BackendUnavailable("OpenImageDenoise is not enabled")

        if device_type is None:
            device_type = os.getenv("OIDN_DEVICE_TYPE", "default")
        device_types = {
            "default": oidn.DEVICE_TYPE_DEFAULT,
            "cpu": oidn.DEVICE_TYPE_CPU,
        }
        if device_type.lower() not in device_types:
            raise BackendUnavailable(
                f"Unsupported OIDN device type {device_type!r}; expected one of {sorted(device_types)}"
            )

        self.device = oidn.NewDevice(device_types[device_type.lower()])
        oidn.CommitDevice(self.device)
        self._check_device("device commit")
        logger.info(f"OpenImageDenoise device ready ({device_type})")

    @staticmethod
    def _error_name(code: int) -> str:
        names = {
            getattr(oidn, attr): attr
            for attr in dir(oidn)
            if attr.startswith("ERROR_")
        }
        return names.get(code, "ERROR_UNKNOWN")

    def _check_device(self, stage: str) -> None:
        code = oidn.GetDeviceError(self.device)
        if code != oidn.ERROR_NONE:
            raise DenoiseBackendError(
                f"OpenImageDenoise {stage} failed: {self._error_name(code)} (code {code})",
                code=code,
            )

    @staticmethod
    def _raw_bool_setter():
        """
        The C setter from the library the binding loaded, for bindings that
        only wrap image parameters (oidn 0.2.x).
        """
        lib = getattr(oidn, "__lib_oidn", None)
        if lib is None:
            return None
        for symbol in ("oidnSetFilterBool", "oidnSetFilter1b"):
            func = getattr(lib, symbol, None)
            if func is not None:
                func.argtypes = [ctypes.c_void_p, ctypes.c_char_p, ctypes.c_bool]
                func.restype = None
                return lambda handle, name, value: func(handle, name.encode("ascii"), value)
        return None

    @classmethod
    def _set_bool(cls, filter_handle, name: str, value: bool) -> None:
        setter = (
            getattr(oidn, "SetFilterBool", None)
            or getattr(oidn, "SetFilter1b", None)
            or cls._raw_bool_setter()
        )
        if setter is None:
            raise DenoiseBackendError(f"OIDN binding cannot set filter parameter '{name}'")
        setter(filter_handle, name, value)

    def execute(
        self,
        filter_type: str,
        images: Dict[str, np.ndarray],
        output: np.ndarray,
        *,
        hdr: bool = True,
    ) -> np.ndarray:
        """
        Run one filter synchronously and write the result into `output` in place.

        Args:
            filter_type (str): OIDN filter name, e.g. "RT".
            images (dict): "color" plus optional "albedo"/"normal", each (H, W, 3) float32.
            output (np.ndarray): (H, W, 3) float32, C-contiguous; overwritten.
            hdr (bool): Whether the color buffer holds unbounded linear values.

        Returns:
            np.ndarray: the `output` buffer.
        """
        height, width = output.shape[:2]
        filter_handle = oidn.NewFilter(self.device, filter_type)
        try:
            for name, buffer in images.items():
                oidn.SetSharedFilterImage(filter_handle, name, buffer, oidn.FORMAT_FLOAT3, width, height)
            oidn.SetSharedFilterImage(filter_handle, "output", output, oidn.FORMAT_FLOAT3, width, height)
            self._set_bool(filter_handle, "hdr", hdr)
            oidn.CommitFilter(filter_handle)
            oidn.ExecuteFilter(filter_handle)
        finally:
            oidn.ReleaseFilter(filter_handle)
        self._check_device(f"{filter_type} filter")
        return output
