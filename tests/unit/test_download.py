"""Unit tests for model bundle download."""

from pathlib import Path

from whisperbind import download
from whisperbind.constants import DEFAULT_MODEL_ID


def test_download_model_defaults(monkeypatch, tmp_path):
    calls = []

    def fake_snapshot_download(**kwargs):
        calls.append(kwargs)
        return str(tmp_path)

    monkeypatch.setattr(download, "snapshot_download", fake_snapshot_download)

    path = download.download_model()

    assert path == Path(tmp_path)
    assert calls[0]["repo_id"] == DEFAULT_MODEL_ID
    assert calls[0]["local_dir"] is None


def test_download_model_to_local_dir(monkeypatch, tmp_path):
    calls = []
    monkeypatch.setattr(
        download,
        "snapshot_download",
        lambda **kwargs: calls.append(kwargs) or kwargs["local_dir"],
    )

    path = download.download_model("Systran/faster-whisper-small", tmp_path / "small", revision="main")

    assert path == tmp_path / "small"
    assert calls[0]["local_dir"] == str(tmp_path / "small")
    assert calls[0]["revision"] == "main"
