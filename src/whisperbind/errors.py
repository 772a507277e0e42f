"""Exception taxonomy for the binding layer.

Nothing here recovers locally: engine failures are wrapped into one of these
types, chained to the original exception, and raised to the caller.
"""


class WhisperBindError(Exception):
    """Base class for all errors raised by whisperbind."""


class LoadError(WhisperBindError):
    """A model bundle could not be turned into a usable handle."""

    def __init__(self, model_location: str, reason: str):
        super().__init__(f"Failed to load model from {model_location!r}: {reason}")
        self.model_location = model_location
        self.reason = reason


class DetectionTaskError(WhisperBindError):
    """One task of a language-detection aggregation failed.

    Attributes:
        index: Position of the failing task in the submitted sequence.
        cause: The exception the task resolved with.
    """

    def __init__(self, index: int, cause: BaseException):
        super().__init__(f"Language detection task {index} failed: {cause!r}")
        self.index = index
        self.cause = cause


class HandleClosedError(WhisperBindError):
    """The handle was closed or its ownership was transferred."""
