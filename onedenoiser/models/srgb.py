"""
sRGB transfer functions (IEC 61966-2-1).

Both functions are elementwise and order-independent, so they are written as
vectorised numpy maps over the whole buffer. Scalars and arrays of any shape
are accepted; the input is never modified.
"""
from __future__ import annotations
import numpy as np

SRGB_KNEE = 0.04045      # encoded-side threshold
LINEAR_KNEE = 0.0031308  # linear-side threshold
_GAMMA = 2.4


def _as_float(x) -> np.ndarray:
    arr = np.asarray(x)
    if not np.issubdtype(arr.dtype, np.floating):
        arr = arr.astype(np.float32)
    return arr


def srgb_to_linear(s):
    """
    S / 12.92                     if S < 0.04045
    ((S + 0.055) / 1.055) ** 2.4  otherwise
    """
    s = _as_float(s)
    # Clamp the power branch's base so np.where never evaluates a negative root.
    curve = np.power((np.maximum(s, SRGB_KNEE) + 0.055) / 1.055, _GAMMA)
    return np.where(s < SRGB_KNEE, s / 12.92, curve).astype(s.dtype, copy=False)


def linear_to_srgb(lin):
    """
    L * 12.92                        if L < 0.0031308
    1.055 * L ** (1 / 2.4) - 0.055   otherwise
    """
    lin = _as_float(lin)
    curve = 1.055 * np.power(np.maximum(lin, LINEAR_KNEE), 1.0 / _GAMMA) - 0.055
    return np.where(lin < LINEAR_KNEE, lin * 12.92, curve).astype(lin.dtype, copy=False)
