class OneDenoiserError(Exception):
    """Base class for every failure the command line maps to exit status 1."""


class MissingArgument(OneDenoiserError):
    """Raised when a required flag is absent."""


class UnknownBackend(OneDenoiserError, LookupError):
    """Raised when --use names a backend nobody registered."""

    def __init__(self, name: str):
        super().__init__(f"unknown denoiser {name}")
        self.name = name


class BackendUnavailable(OneDenoiserError):
    """Raised when a registered backend cannot run (binding not installed)."""


class InputReadError(OneDenoiserError, FileNotFoundError):
    """Raised when the codec cannot open or decode an input path."""


class ImageShapeError(OneDenoiserError, ValueError):
    """Raised when color/guide buffers disagree on size or channel count."""


class OutputBackendUnavailable(OneDenoiserError):
    """Raised when no writer exists for the output path's extension."""


class OutputWriteError(OneDenoiserError, OSError):
    """Raised when a writer exists but encoding or writing failed."""


class DenoiseBackendError(OneDenoiserError, RuntimeError):
    """Raised when the denoising backend reports a failure after execution."""

    def __init__(self, message: str, code: int | None = None):
        super().__init__(message)
        self.code = code
