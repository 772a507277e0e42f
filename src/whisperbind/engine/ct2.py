"""Real engine backed by the CTranslate2 Whisper runtime.

The bundle directory must hold a CTranslate2-converted Whisper model
(``model.bin``, ``config.json``, vocabulary), e.g. the faster-whisper
conversions published on the Hugging Face Hub.
"""

import logging
from collections.abc import Sequence
from concurrent.futures import Future, ThreadPoolExecutor
from pathlib import Path
from typing import Any

import ctranslate2
import numpy as np

from whisperbind.constants import N_FRAMES
from whisperbind.types import DetectionResult, ExecutionTarget, GenerationResult, LanguageResult

LOG = logging.getLogger(__name__)


def _as_batch(features: np.ndarray) -> np.ndarray:
    """Return features as a C-contiguous float32 (batch, n_mels, frames) array."""
    array = np.asarray(features, dtype=np.float32)
    if array.ndim == 2:
        array = array[np.newaxis]
    if array.ndim != 3:
        raise ValueError(f"Expected (batch, n_mels, frames) features, got shape {array.shape}")
    return np.ascontiguousarray(array)


class CTranslate2Engine:
    """Wraps a ``ctranslate2.models.Whisper`` instance.

    Language detection is fanned out one segment per worker so every batch
    item resolves as its own future.
    """

    def __init__(
        self,
        model_path: str | Path,
        device: str | None = None,
        compute_type: str = "default",
        inter_threads: int = 1,
        detect_workers: int = 4,
    ):
        """Load the model.

        Args:
            model_path: Directory of the converted model bundle.
            device: "cpu", "cuda", or None for the runtime default.
            compute_type: Quantization type, e.g. "int8" or "float16".
            inter_threads: Number of batches the runtime may run in parallel.
            detect_workers: Threads used to fan out per-segment detection.
        """
        kwargs: dict[str, Any] = {"compute_type": compute_type, "inter_threads": inter_threads}
        if device is not None:
            kwargs["device"] = device

        self._model_path = Path(model_path)
        self._model = ctranslate2.models.Whisper(str(self._model_path), **kwargs)
        self._executor = ThreadPoolExecutor(
            max_workers=detect_workers,
            thread_name_prefix="whisper-detect",
        )

    def detect_language(self, features: np.ndarray) -> list[Future[DetectionResult]]:
        batch = _as_batch(features)
        return [self._executor.submit(self._detect_segment, segment) for segment in batch]

    def _detect_segment(self, segment: np.ndarray) -> DetectionResult:
        view = ctranslate2.StorageView.from_array(np.ascontiguousarray(segment[np.newaxis]))
        ranked = self._model.detect_language(view)[0]
        return [LanguageResult(token, float(prob)) for token, prob in ranked]

    def generate(
        self,
        features: np.ndarray,
        prompt_tokens: Sequence[int],
        **options: Any,
    ) -> list[GenerationResult]:
        batch = _as_batch(features)
        view = ctranslate2.StorageView.from_array(batch)
        prompts = [list(prompt_tokens)] * len(batch)
        options.setdefault("return_scores", True)

        results = self._model.generate(view, prompts, **options)
        return [
            GenerationResult(
                sequences_ids=[list(ids) for ids in result.sequences_ids],
                scores=list(result.scores),
            )
            for result in results
        ]

    def warmup(self) -> None:
        """Encode one window of silence to initialize the runtime."""
        dummy = np.zeros((1, self.n_mels, N_FRAMES), dtype=np.float32)
        self._model.encode(ctranslate2.StorageView.from_array(dummy))
        LOG.info("CTranslate2Engine warmed up on %s", self.device)

    def close(self) -> None:
        self._executor.shutdown(wait=True)
        self._model = None

    @property
    def device(self) -> str:
        return self._model.device

    @property
    def n_mels(self) -> int:
        return self._model.n_mels

    @property
    def is_multilingual(self) -> bool:
        return self._model.is_multilingual


def load_ctranslate2_engine(
    model_location: str | Path,
    execution_target: ExecutionTarget,
    **options: Any,
) -> CTranslate2Engine:
    """Default engine factory used by ``create_model``."""
    return CTranslate2Engine(model_location, device=execution_target.device, **options)
