"""Unit tests for environment-based settings."""

import pytest

from whisperbind.config import Settings, get_settings
from whisperbind.types import ExecutionTarget


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in (
        "WHISPERBIND_MODEL_PATH",
        "WHISPERBIND_DEVICE",
        "WHISPERBIND_COMPUTE_TYPE",
        "WHISPERBIND_DETECT_WORKERS",
        "WHISPERBIND_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)


def test_defaults():
    assert get_settings() == Settings()


def test_reads_environment(monkeypatch):
    monkeypatch.setenv("WHISPERBIND_MODEL_PATH", "/models/whisper-small-ct2")
    monkeypatch.setenv("WHISPERBIND_DEVICE", "CUDA")
    monkeypatch.setenv("WHISPERBIND_COMPUTE_TYPE", "float16")
    monkeypatch.setenv("WHISPERBIND_DETECT_WORKERS", "2")
    monkeypatch.setenv("WHISPERBIND_LOG_LEVEL", "debug")

    settings = get_settings()

    assert settings.model_path == "/models/whisper-small-ct2"
    assert settings.execution_target is ExecutionTarget.CUDA
    assert settings.log_level == "DEBUG"
    assert settings.engine_options() == {"compute_type": "float16", "detect_workers": 2}


@pytest.mark.parametrize(
    "name, value",
    [
        ("WHISPERBIND_DEVICE", "gpu0"),
        ("WHISPERBIND_DETECT_WORKERS", "many"),
        ("WHISPERBIND_DETECT_WORKERS", "0"),
        ("WHISPERBIND_LOG_LEVEL", "LOUD"),
    ],
)
def test_invalid_values(monkeypatch, name, value):
    monkeypatch.setenv(name, value)
    with pytest.raises(ValueError, match=name):
        get_settings()


def test_configure_logging(monkeypatch):
    from whisperbind import config

    calls = []
    monkeypatch.setattr(config.logging, "basicConfig", lambda **kwargs: calls.append(kwargs))
    config.configure_logging("DEBUG")
    assert calls[0]["level"] == "DEBUG"


def test_configure_logging_reads_environment(monkeypatch):
    """Without an explicit level, WHISPERBIND_LOG_LEVEL decides."""
    from whisperbind import config

    calls = []
    monkeypatch.setenv("WHISPERBIND_LOG_LEVEL", "debug")
    monkeypatch.setattr(config.logging, "basicConfig", lambda **kwargs: calls.append(kwargs))
    config.configure_logging()
    assert calls[0]["level"] == "DEBUG"
