"""Python binding layer for CTranslate2 Whisper models."""

from whisperbind.aggregate import (
    aggregate_detections,
    aggregate_detections_async,
    best_language,
    language_code,
)
from whisperbind.errors import DetectionTaskError, HandleClosedError, LoadError, WhisperBindError
from whisperbind.handle import ModelHandle, create_model, create_model_from_settings
from whisperbind.types import ExecutionTarget, GenerationResult, LanguageResult

__version__ = "0.1.0"

__all__ = [
    "create_model",
    "create_model_from_settings",
    "ModelHandle",
    "ExecutionTarget",
    "aggregate_detections",
    "aggregate_detections_async",
    "best_language",
    "language_code",
    "LanguageResult",
    "GenerationResult",
    "WhisperBindError",
    "LoadError",
    "DetectionTaskError",
    "HandleClosedError",
]
