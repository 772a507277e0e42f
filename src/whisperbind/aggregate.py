"""Joins per-segment language detection tasks into one ordered result.

The engine resolves one task per audio segment, in whatever order its
workers finish. Aggregation waits for all of them (a barrier, not a
streaming merge) and concatenates results by submission index, so
``result`` positions always line up with segment positions.
"""

import asyncio
import logging
from collections.abc import Awaitable, Iterable, Sequence
from concurrent import futures

from whisperbind.errors import DetectionTaskError
from whisperbind.types import AggregatedResult, DetectionResult, LanguageResult

LOG = logging.getLogger(__name__)


def aggregate_detections(
    tasks: Iterable[futures.Future[DetectionResult]],
    timeout: float | None = None,
) -> AggregatedResult:
    """Wait for every detection task and concatenate results in input order.

    Args:
        tasks: Pending tasks, one per segment, in segment order.
        timeout: Seconds to wait for all tasks, or None to wait indefinitely.

    Returns:
        Flat list of (language, probability) pairs: task 0's results first,
        then task 1's, and so on. Empty input gives an empty list.

    Raises:
        DetectionTaskError: If any task failed. The lowest failing index is
            reported and no partial result is returned.
        TimeoutError: If the tasks did not all settle within ``timeout``.
    """
    pending = list(tasks)
    if not pending:
        return []

    _, not_done = futures.wait(pending, timeout=timeout, return_when=futures.ALL_COMPLETED)
    if not_done:
        raise TimeoutError(
            f"{len(not_done)} of {len(pending)} detection tasks did not complete in {timeout}s"
        )

    outcomes = []
    for task in pending:
        if task.cancelled():
            outcomes.append(futures.CancelledError())
            continue
        error = task.exception()
        outcomes.append(error if error is not None else task.result())
    return _concatenate(outcomes)


async def aggregate_detections_async(
    tasks: Sequence[Awaitable[DetectionResult]],
) -> AggregatedResult:
    """Async counterpart of ``aggregate_detections`` for awaitables.

    All awaitables run concurrently and are awaited to completion before
    results are concatenated in input order.
    """
    if not tasks:
        return []
    outcomes = await asyncio.gather(*tasks, return_exceptions=True)
    return _concatenate(outcomes)


def _concatenate(outcomes: list) -> AggregatedResult:
    """Merge settled outcomes by index, failing on the first exception."""
    for index, outcome in enumerate(outcomes):
        if isinstance(outcome, BaseException):
            LOG.error("Detection task %d of %d failed: %r", index, len(outcomes), outcome)
            raise DetectionTaskError(index, outcome) from outcome

    merged: AggregatedResult = []
    for outcome in outcomes:
        merged.extend(LanguageResult(label, float(score)) for label, score in outcome)
    return merged


def language_code(token: str) -> str:
    """Strip Whisper's special-token markers: ``"<|en|>"`` -> ``"en"``."""
    if token.startswith("<|") and token.endswith("|>"):
        return token[2:-2]
    return token


def best_language(
    results: Iterable[tuple[str, float]],
    candidates: Iterable[str] | None = None,
) -> LanguageResult | None:
    """Pick the highest-probability language.

    Labels are compared without their ``<|...|>`` markers. When
    ``candidates`` is given, only those languages are considered unless none
    of them was detected, in which case the overall best is returned.
    """
    scores: dict[str, float] = {}
    for label, score in results:
        code = language_code(label)
        scores[code] = max(score, scores.get(code, float("-inf")))
    if not scores:
        return None

    allowed = {c for c in (candidates or ()) if c in scores}
    pool = allowed or scores.keys()
    code = max(pool, key=scores.__getitem__)
    return LanguageResult(code, scores[code])
