"""Settings loaded from environment variables."""

import logging
import os
from dataclasses import dataclass

from whisperbind.types import ExecutionTarget


@dataclass(frozen=True)
class Settings:
    """Runtime configuration.

    Attributes:
        model_path: Model bundle directory, if configured.
        execution_target: Device selector passed to ``create_model``.
        compute_type: Engine quantization type.
        detect_workers: Threads used for per-segment language detection.
        log_level: Level name used by ``configure_logging``.
    """

    model_path: str | None = None
    execution_target: ExecutionTarget = ExecutionTarget.DEFAULT
    compute_type: str = "default"
    detect_workers: int = 4
    log_level: str = "INFO"

    def engine_options(self) -> dict:
        """Keyword arguments for the CTranslate2 engine factory."""
        return {"compute_type": self.compute_type, "detect_workers": self.detect_workers}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None
    if value <= 0:
        raise ValueError(f"{name} must be positive, got {value}")
    return value


def get_settings() -> Settings:
    """Load settings from ``WHISPERBIND_*`` environment variables."""
    device = os.getenv("WHISPERBIND_DEVICE", "default")
    try:
        target = ExecutionTarget.parse(device)
    except ValueError as e:
        raise ValueError(f"WHISPERBIND_DEVICE: {e}") from None

    log_level = os.getenv("WHISPERBIND_LOG_LEVEL", "INFO").upper()
    if not isinstance(logging.getLevelName(log_level), int):
        raise ValueError(f"WHISPERBIND_LOG_LEVEL: unknown level {log_level!r}")

    return Settings(
        model_path=os.getenv("WHISPERBIND_MODEL_PATH") or None,
        execution_target=target,
        compute_type=os.getenv("WHISPERBIND_COMPUTE_TYPE", "default"),
        detect_workers=_env_int("WHISPERBIND_DETECT_WORKERS", 4),
        log_level=log_level,
    )


def configure_logging(level: str | int | None = None) -> None:
    """Basic console logging for applications embedding the library.

    Without ``level``, ``WHISPERBIND_LOG_LEVEL`` decides.
    """
    if level is None:
        level = get_settings().log_level
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
