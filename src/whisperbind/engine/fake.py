"""Fake engine for CPU-based testing.

Returns deterministic output based on feature content, allowing reliable
unit tests without the native runtime or a model bundle.
"""

import hashlib
import time
from collections.abc import Mapping, Sequence
from concurrent.futures import Future, ThreadPoolExecutor
from pathlib import Path
from typing import Any

import numpy as np

from whisperbind.constants import N_MELS
from whisperbind.types import DetectionResult, ExecutionTarget, GenerationResult, LanguageResult

LANGUAGES: tuple[str, ...] = ("en", "fr", "de", "es", "it", "ja")


class FakeEngine:
    """Deterministic CPU engine for testing.

    Each segment resolves on its own worker thread, after an optional
    per-index delay, so tests can force any completion order.
    """

    def __init__(
        self,
        model_path: str | Path = "fake",
        device: str = "cpu",
        compute_type: str = "default",
        detect_workers: int = 8,
        top_k: int = 3,
        latency_ms: Mapping[int, float] | None = None,
        fail_indices: Mapping[int, BaseException] | None = None,
        warmup_error: BaseException | None = None,
    ):
        """Initialize the fake engine.

        Args:
            model_path: Recorded for inspection only.
            device: Reported device string.
            compute_type: Recorded for inspection only.
            detect_workers: Worker threads resolving segments.
            top_k: Number of (language, probability) pairs per segment.
            latency_ms: Simulated per-segment latency keyed by batch index.
            fail_indices: Exceptions to raise for the given batch indices.
            warmup_error: Exception raised by ``warmup``, if any.
        """
        self.model_path = Path(model_path)
        self._device = device
        self.compute_type = compute_type
        self._top_k = top_k
        self._latency_ms = dict(latency_ms or {})
        self._fail_indices = dict(fail_indices or {})
        self._warmup_error = warmup_error
        self._executor = ThreadPoolExecutor(
            max_workers=detect_workers,
            thread_name_prefix="fake-detect",
        )

        self.completion_order: list[int] = []
        self.close_count = 0
        self.warmup_count = 0

    def detect_language(self, features: np.ndarray) -> list[Future[DetectionResult]]:
        batch = np.asarray(features, dtype=np.float32)
        if batch.ndim == 2:
            batch = batch[np.newaxis]
        return [
            self._executor.submit(self._detect_segment, index, segment)
            for index, segment in enumerate(batch)
        ]

    def _detect_segment(self, index: int, segment: np.ndarray) -> DetectionResult:
        delay = self._latency_ms.get(index, 0.0)
        if delay > 0:
            time.sleep(delay / 1000.0)

        self.completion_order.append(index)
        if index in self._fail_indices:
            raise self._fail_indices[index]
        return self.expected_result(segment, self._top_k)

    def generate(
        self,
        features: np.ndarray,
        prompt_tokens: Sequence[int],
        **options: Any,
    ) -> list[GenerationResult]:
        batch = np.asarray(features, dtype=np.float32)
        if batch.ndim == 2:
            batch = batch[np.newaxis]
        results = []
        for segment in batch:
            seed = int(self._hash_segment(segment)[:4], 16)
            results.append(
                GenerationResult(sequences_ids=[list(prompt_tokens) + [seed]], scores=[0.0])
            )
        return results

    def warmup(self) -> None:
        self.warmup_count += 1
        if self._warmup_error is not None:
            raise self._warmup_error

    def close(self) -> None:
        self.close_count += 1
        self._executor.shutdown(wait=True)

    @property
    def device(self) -> str:
        return self._device

    @property
    def n_mels(self) -> int:
        return N_MELS

    @property
    def is_multilingual(self) -> bool:
        return True

    @classmethod
    def expected_result(cls, segment: np.ndarray, top_k: int = 3) -> DetectionResult:
        """Ranked result the engine produces for a segment."""
        digest = cls._hash_segment(np.asarray(segment, dtype=np.float32))
        start = int(digest[:2], 16) % len(LANGUAGES)
        ranked = []
        remaining = 1.0
        for rank in range(top_k):
            prob = round(remaining / 2, 6)
            remaining -= prob
            ranked.append(LanguageResult(f"<|{LANGUAGES[(start + rank) % len(LANGUAGES)]}|>", prob))
        return ranked

    @staticmethod
    def _hash_segment(segment: np.ndarray) -> str:
        """Generate a short hash of segment content for deterministic output."""
        return hashlib.sha256(segment.tobytes()).hexdigest()


def fake_engine_factory(**engine_kwargs: Any):
    """Return an engine factory that builds ``FakeEngine`` instances.

    Every engine built is appended to ``factory.engines`` for inspection.
    """

    def factory(model_location: str | Path, execution_target: ExecutionTarget, **options: Any):
        kwargs = {**engine_kwargs, **options}
        kwargs.setdefault("device", execution_target.device or "cpu")
        engine = FakeEngine(model_location, **kwargs)
        factory.engines.append(engine)
        return engine

    factory.engines = []
    return factory
