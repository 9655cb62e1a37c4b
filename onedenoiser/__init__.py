"""
OneDenoiser: easy-to-use wrapper for open source denoisers.
"""
import os

# OpenCV only decodes/encodes EXR when this is set before first use.
os.environ.setdefault("OPENCV_IO_ENABLE_OPENEXR", "1")

__version__ = "1.0.0"
