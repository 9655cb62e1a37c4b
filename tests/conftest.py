"""
Pytest configuration and fixtures
"""
import os
import sys
import pytest
import numpy as np

# Add project root to path
project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if project_root not in sys.path:
    sys.path.insert(0, project_root)

import onedenoiser  # noqa: F401  (sets OPENCV_IO_ENABLE_OPENEXR before cv2 loads)
import cv2
from PIL import Image as PILImage

from onedenoiser.repositories.denoiser_repository import Denoiser, DenoiserRepository


class BoxDenoiser(Denoiser):
    """Replaces every pixel by the per-channel mean and records what it was given."""
    name = "box"
    display_name = "Box"
    calls = []

    def denoise(self, color, albedo=None, normal=None):
        type(self).calls.append({"color": color, "albedo": albedo, "normal": normal})
        mean = color.reshape(-1, color.shape[2]).mean(axis=0)
        return np.broadcast_to(mean, color.shape).astype(np.float32)


class IdentityDenoiser(Denoiser):
    name = "identity"
    display_name = "Identity"

    def denoise(self, color, albedo=None, normal=None):
        return color.copy()


class UnavailableDenoiser(Denoiser):
    name = "missing"
    display_name = "Missing Denoiser"

    @classmethod
    def is_available(cls):
        return False


@pytest.fixture
def fake_backends(monkeypatch):
    """Register test backends for the duration of one test"""
    BoxDenoiser.calls = []
    monkeypatch.setitem(DenoiserRepository._backends, "box", BoxDenoiser)
    monkeypatch.setitem(DenoiserRepository._backends, "identity", IdentityDenoiser)
    monkeypatch.setitem(DenoiserRepository._backends, "missing", UnavailableDenoiser)
    return BoxDenoiser


@pytest.fixture
def write_png():
    """Write an RGB/RGBA/gray uint8 array through Pillow"""
    def _write(path, pixels):
        pixels = np.asarray(pixels, dtype=np.uint8)
        PILImage.fromarray(pixels).save(path)
        return path
    return _write


@pytest.fixture
def write_exr():
    """Write an RGB float array as OpenEXR through OpenCV"""
    def _write(path, pixels):
        rgb = np.asarray(pixels, dtype=np.float32)
        assert cv2.imwrite(str(path), np.ascontiguousarray(rgb[:, :, ::-1]))
        return path
    return _write


@pytest.fixture
def noisy_rgb():
    """A 2x2 three-channel 8-bit noisy image"""
    return np.array(
        [
            [[200, 10, 30], [20, 180, 40]],
            [[90, 60, 250], [255, 0, 128]],
        ],
        dtype=np.uint8,
    )


@pytest.fixture
def linear_rgb():
    """A 4x3 HDR linear float image with values above 1"""
    rng = np.random.default_rng(7)
    return (rng.random((3, 4, 3)) * 4.0).astype(np.float32)
