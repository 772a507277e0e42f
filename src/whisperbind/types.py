"""Value types shared by the handle, the engines and the aggregator."""

import enum
from dataclasses import dataclass, field
from typing import NamedTuple


class ExecutionTarget(enum.Enum):
    """Compute device selector accepted by ``create_model``.

    ``DEFAULT`` leaves the choice to the engine. ``CPU`` and ``CUDA`` are
    forwarded as-is to the engine's ``device`` argument.
    """

    DEFAULT = "default"
    CPU = "cpu"
    CUDA = "cuda"

    @classmethod
    def parse(cls, value: "ExecutionTarget | str | int") -> "ExecutionTarget":
        """Validate a selector and return the matching target.

        Accepts a target, a case-insensitive name (``"auto"`` is an alias of
        ``"default"``), or the integer ``0`` for the default device.

        Raises:
            ValueError: If the selector does not name a known target.
        """
        if isinstance(value, cls):
            return value
        # bool is an int subclass; True/False are not device selectors
        if isinstance(value, int) and not isinstance(value, bool):
            if value == 0:
                return cls.DEFAULT
            raise ValueError(f"Unknown execution target index: {value}")
        if isinstance(value, str):
            name = value.strip().lower()
            if name == "auto":
                return cls.DEFAULT
            for target in cls:
                if target.value == name:
                    return target
        raise ValueError(f"Unknown execution target: {value!r}")

    @property
    def device(self) -> str | None:
        """Engine device string, or None to use the engine default."""
        if self is ExecutionTarget.DEFAULT:
            return None
        return self.value


class LanguageResult(NamedTuple):
    """A (label, score) pair produced by language detection."""

    language: str
    probability: float


# One task's ranked results, and the flattened output of an aggregation.
DetectionResult = list[LanguageResult]
AggregatedResult = list[LanguageResult]


@dataclass(frozen=True)
class GenerationResult:
    """Token ids generated for one batch item."""

    sequences_ids: list[list[int]]
    scores: list[float] = field(default_factory=list)
