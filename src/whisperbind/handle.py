"""Model handle factory.

``create_model`` turns a model bundle directory into a ``ModelHandle``: an
exclusively-owned reference to a loaded engine. Loading is synchronous and
atomic; the caller either gets a fully usable handle or a ``LoadError``.
"""

import logging
import os
import time
import weakref
from collections.abc import Sequence
from concurrent.futures import Future
from pathlib import Path
from typing import Any

import numpy as np

from whisperbind.aggregate import aggregate_detections
from whisperbind.config import Settings, get_settings
from whisperbind.engine.protocol import Engine, EngineFactory
from whisperbind.errors import HandleClosedError, LoadError
from whisperbind.types import AggregatedResult, DetectionResult, ExecutionTarget, GenerationResult

LOG = logging.getLogger(__name__)


def _release(engine: Engine, model_location: str) -> None:
    LOG.debug("Releasing model loaded from %s", model_location)
    engine.close()


class ModelHandle:
    """Exclusive owner of a loaded Whisper engine.

    The handle cannot be copied or pickled. Ownership moves with
    ``transfer()``; the engine is released exactly once, by ``close()``, by
    leaving a ``with`` block, or when the last owner is garbage collected.
    """

    def __init__(self, engine: Engine, model_location: str, execution_target: ExecutionTarget):
        self._engine: Engine | None = engine
        self._model_location = model_location
        self._execution_target = execution_target
        self._finalizer = weakref.finalize(self, _release, engine, model_location)

    def __enter__(self) -> "ModelHandle":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __copy__(self):
        raise TypeError("ModelHandle cannot be copied; use transfer() to move ownership")

    def __deepcopy__(self, memo):
        raise TypeError("ModelHandle cannot be copied; use transfer() to move ownership")

    def __reduce_ex__(self, protocol):
        raise TypeError("ModelHandle cannot be pickled")

    def __repr__(self) -> str:
        state = "closed" if self.closed else self._execution_target.name.lower()
        return f"<ModelHandle {self._model_location!r} ({state})>"

    @property
    def closed(self) -> bool:
        return self._engine is None

    @property
    def model_location(self) -> str:
        return self._model_location

    @property
    def execution_target(self) -> ExecutionTarget:
        return self._execution_target

    @property
    def engine(self) -> Engine:
        """The owned engine. Raises HandleClosedError once released."""
        if self._engine is None:
            raise HandleClosedError(f"Model handle for {self._model_location!r} is closed")
        return self._engine

    @property
    def device(self) -> str:
        return self.engine.device

    @property
    def n_mels(self) -> int:
        return self.engine.n_mels

    @property
    def is_multilingual(self) -> bool:
        return self.engine.is_multilingual

    def close(self) -> None:
        """Release the engine. Safe to call more than once."""
        self._engine = None
        self._finalizer()

    def transfer(self) -> "ModelHandle":
        """Move ownership into a new handle and invalidate this one."""
        engine = self.engine
        self._finalizer.detach()
        self._engine = None
        return ModelHandle(engine, self._model_location, self._execution_target)

    def detect_language(self, features: np.ndarray) -> list[Future[DetectionResult]]:
        """Start detection; returns one pending task per segment."""
        return self.engine.detect_language(features)

    def detect_language_aggregated(
        self,
        features: np.ndarray,
        timeout: float | None = None,
    ) -> AggregatedResult:
        """Detect languages for every segment and merge them in segment order."""
        return aggregate_detections(self.detect_language(features), timeout=timeout)

    def generate(
        self,
        features: np.ndarray,
        prompt_tokens: Sequence[int],
        **options: Any,
    ) -> list[GenerationResult]:
        return self.engine.generate(features, prompt_tokens, **options)


def _default_engine_factory() -> EngineFactory:
    # Imported lazily so the fake engine works without the native runtime.
    from whisperbind.engine.ct2 import load_ctranslate2_engine

    return load_ctranslate2_engine


def create_model(
    model_location: str | os.PathLike,
    execution_target: ExecutionTarget | str | int = ExecutionTarget.DEFAULT,
    *,
    engine_factory: EngineFactory | None = None,
    warmup: bool = False,
    **engine_options: Any,
) -> ModelHandle:
    """Load a model bundle and return a handle that owns it.

    Args:
        model_location: Directory holding the converted model bundle. Only
            its readability is checked here; the engine validates contents.
        execution_target: Device selector, see ``ExecutionTarget.parse``.
        engine_factory: Builds the engine; defaults to the CTranslate2 engine.
        warmup: Run a dummy inference before returning.
        **engine_options: Passed through to the engine factory.

    Returns:
        A ready-to-use ModelHandle.

    Raises:
        ValueError: If ``execution_target`` is not a known selector.
        LoadError: If the location is unreadable, the engine fails to load
            the bundle, or warmup fails. Nothing stays allocated.
    """
    target = ExecutionTarget.parse(execution_target)
    location = os.fspath(model_location)
    path = Path(location)

    if not path.exists():
        raise LoadError(location, "path does not exist")
    if not path.is_dir():
        raise LoadError(location, "path is not a directory")
    if not os.access(path, os.R_OK | os.X_OK):
        raise LoadError(location, "directory is not readable")

    started = time.perf_counter()
    try:
        factory = engine_factory or _default_engine_factory()
        engine = factory(location, target, **engine_options)
    except Exception as e:
        LOG.error("Loading %s failed: %s", location, e)
        raise LoadError(location, str(e) or type(e).__name__) from e

    if warmup:
        try:
            engine.warmup()
        except Exception as e:
            LOG.error("Warmup of %s failed, releasing engine: %s", location, e)
            try:
                engine.close()
            except Exception as close_error:
                LOG.error("Releasing %s after failed warmup also failed: %s", location, close_error)
            raise LoadError(location, f"warmup failed: {e}") from e

    LOG.info(
        "Loaded model from %s on %s in %.2fs",
        location,
        engine.device,
        time.perf_counter() - started,
    )
    return ModelHandle(engine, location, target)


def create_model_from_settings(settings: Settings | None = None, **kwargs: Any) -> ModelHandle:
    """Load the model configured by ``WHISPERBIND_*`` environment variables."""
    settings = settings or get_settings()
    if settings.model_path is None:
        raise LoadError("", "WHISPERBIND_MODEL_PATH is not set")

    options = {**settings.engine_options(), **kwargs}
    return create_model(settings.model_path, settings.execution_target, **options)
