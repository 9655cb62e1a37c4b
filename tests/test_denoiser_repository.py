"""
Test backend registry resolution
"""
import pytest

from onedenoiser.models import oidn_engine
from onedenoiser.repositories.denoiser_repository import (
    Denoiser,
    DenoiserRepository,
    OidnDenoiser,
)
from onedenoiser.errors import BackendUnavailable, UnknownBackend


class TestDenoiserRepository:

    def test_oidn_registered_by_default(self):
        assert "oidn" in DenoiserRepository.names()
        assert DenoiserRepository._backends["oidn"] is OidnDenoiser

    def test_unknown_backend(self):
        with pytest.raises(UnknownBackend) as exc:
            DenoiserRepository().get("foo")
        assert str(exc.value) == "unknown denoiser foo"
        assert isinstance(exc.value, LookupError)

    def test_oidn_not_enabled(self, monkeypatch):
        monkeypatch.setattr(oidn_engine, "oidn", None)
        with pytest.raises(BackendUnavailable) as exc:
            DenoiserRepository().get("oidn")
        assert str(exc.value) == "OpenImageDenoise is not enabled"

    def test_registered_backend_instantiated(self, fake_backends):
        backend = DenoiserRepository().get("box")
        assert isinstance(backend, fake_backends)
        assert "box" in DenoiserRepository.names()

    def test_unavailable_registered_backend(self, fake_backends):
        with pytest.raises(BackendUnavailable, match="Missing Denoiser is not enabled"):
            DenoiserRepository().get("missing")

    def test_register(self, monkeypatch):
        monkeypatch.setattr(DenoiserRepository, "_backends", dict(DenoiserRepository._backends))

        class Passthrough(Denoiser):
            def denoise(self, color, albedo=None, normal=None):
                return color

        DenoiserRepository.register("passthrough", Passthrough)
        assert isinstance(DenoiserRepository().get("passthrough"), Passthrough)

    def test_base_denoise_not_implemented(self):
        with pytest.raises(NotImplementedError):
            Denoiser().denoise(None)
