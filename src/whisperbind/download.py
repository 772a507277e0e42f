"""Fetch converted model bundles from the Hugging Face Hub."""

import logging
from pathlib import Path

from huggingface_hub import snapshot_download

from whisperbind.constants import DEFAULT_MODEL_ID

LOG = logging.getLogger(__name__)


def download_model(
    repo_id: str = DEFAULT_MODEL_ID,
    local_dir: str | Path | None = None,
    revision: str | None = None,
) -> Path:
    """Download a CTranslate2 Whisper bundle and return its directory.

    Without ``local_dir`` the bundle lands in the Hub cache.
    """
    path = snapshot_download(
        repo_id=repo_id,
        local_dir=str(local_dir) if local_dir is not None else None,
        revision=revision,
        ignore_patterns=["*.md"],
    )
    LOG.info("Model %s available at %s", repo_id, path)
    return Path(path)
