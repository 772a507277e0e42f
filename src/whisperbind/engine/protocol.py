"""Engine protocol defining the interface to the native Whisper runtime.

This is the "sealed boundary" that isolates the inference runtime from
the rest of the package (handle, aggregation, tests).
"""

from collections.abc import Callable, Sequence
from concurrent.futures import Future
from typing import Any, Protocol

import numpy as np

from whisperbind.types import DetectionResult, GenerationResult


class Engine(Protocol):
    """Protocol for loaded Whisper models.

    Implementations own the native model object. They are created once per
    handle and released through ``close``.
    """

    def detect_language(self, features: np.ndarray) -> list[Future[DetectionResult]]:
        """Start language detection over a batch of feature matrices.

        Args:
            features: Float32 array of shape (batch, n_mels, frames). A single
                (n_mels, frames) matrix is treated as a batch of one.

        Returns:
            One pending task per batch item, in batch order. Each resolves to
            a ranked list of (language, probability) pairs.
        """
        ...

    def generate(
        self,
        features: np.ndarray,
        prompt_tokens: Sequence[int],
        **options: Any,
    ) -> list[GenerationResult]:
        """Decode token ids for every batch item using the same prompt."""
        ...

    def warmup(self) -> None:
        """Run a dummy inference so the first real call is not slowed down."""
        ...

    def close(self) -> None:
        """Release the native model and any worker threads."""
        ...

    @property
    def device(self) -> str:
        """Device the model runs on."""
        ...

    @property
    def n_mels(self) -> int:
        """Number of mel bins the model expects."""
        ...

    @property
    def is_multilingual(self) -> bool:
        """Whether the model can detect languages."""
        ...


# Builds a loaded engine from a bundle directory and a validated target.
EngineFactory = Callable[..., Engine]
