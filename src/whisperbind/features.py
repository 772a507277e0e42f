"""Audio conversion and feature extraction utilities.

Audio is 16kHz mono, either PCM16 bytes or float32 numpy arrays in [-1, 1].
Features are log-mel spectrograms shaped (batch, n_mels, N_FRAMES), the
input the engine's detection and generation calls expect.
"""

from collections.abc import Iterable, Iterator
from pathlib import Path

import numpy as np
from transformers import WhisperFeatureExtractor

from whisperbind.constants import (
    BYTES_PER_SAMPLE,
    CHUNK_SAMPLES,
    HOP_LENGTH,
    N_MELS,
    PREPROCESSOR_CONFIG,
    SAMPLE_RATE,
)


def pcm16_to_float32(data: bytes) -> np.ndarray:
    """Convert PCM16 bytes to float32 array normalized to [-1, 1].

    Args:
        data: Raw PCM16 little-endian audio bytes.

    Returns:
        Float32 numpy array with values in [-1, 1].

    Raises:
        ValueError: If the byte count is not a whole number of samples.
    """
    if len(data) % BYTES_PER_SAMPLE:
        raise ValueError(f"PCM16 data must have an even byte count, got {len(data)}")
    audio = np.frombuffer(data, dtype=np.int16).astype(np.float32)
    audio /= 32768.0
    return audio


def float32_to_pcm16(audio: np.ndarray) -> bytes:
    """Convert float32 array [-1, 1] to PCM16 bytes."""
    clipped = np.clip(audio, -1.0, 1.0)
    pcm = (clipped * 32767.0).astype(np.int16)
    return pcm.tobytes()


def chunk_audio(audio: np.ndarray, chunk_samples: int = CHUNK_SAMPLES) -> Iterator[np.ndarray]:
    """Split audio into consecutive segments of at most ``chunk_samples``.

    Yields:
        Segments in order. The last one may be shorter; the feature
        extractor pads it to a full window.
    """
    if chunk_samples <= 0:
        raise ValueError(f"chunk_samples must be positive, got {chunk_samples}")
    for i in range(0, len(audio), chunk_samples):
        yield audio[i : i + chunk_samples]


def create_feature_extractor(
    model_location: str | Path | None = None,
    n_mels: int = N_MELS,
) -> WhisperFeatureExtractor:
    """Build the log-mel extractor matching a model bundle.

    Uses the bundle's ``preprocessor_config.json`` when present, otherwise
    the standard Whisper settings with ``n_mels`` bins.
    """
    if model_location is not None and (Path(model_location) / PREPROCESSOR_CONFIG).is_file():
        return WhisperFeatureExtractor.from_pretrained(str(model_location))
    return WhisperFeatureExtractor(
        feature_size=n_mels,
        sampling_rate=SAMPLE_RATE,
        hop_length=HOP_LENGTH,
    )


def compute_features(
    extractor: WhisperFeatureExtractor,
    segments: Iterable[np.ndarray],
) -> np.ndarray:
    """Compute a feature batch, one 30 second window per segment.

    Returns:
        C-contiguous float32 array of shape (batch, n_mels, frames).
    """
    batch = [np.asarray(segment, dtype=np.float32) for segment in segments]
    if not batch:
        return np.zeros((0, extractor.feature_size, extractor.nb_max_frames), dtype=np.float32)

    inputs = extractor(batch, sampling_rate=SAMPLE_RATE, return_tensors="np")
    return np.ascontiguousarray(inputs.input_features, dtype=np.float32)
