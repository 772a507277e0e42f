"""Core constants for the Whisper binding.

Whisper models consume 16kHz mono audio, split into 30 second windows and
converted to log-mel spectrograms with a 10ms hop (3000 frames per window).
"""

# Audio format requirements
SAMPLE_RATE: int = 16000  # Hz - Whisper feature extractor input rate
BYTES_PER_SAMPLE: int = 2  # 16-bit PCM

# Feature extraction
N_MELS: int = 80  # 128 for large-v3 bundles
HOP_LENGTH: int = 160  # 10ms at 16kHz
CHUNK_SECONDS: int = 30
CHUNK_SAMPLES: int = SAMPLE_RATE * CHUNK_SECONDS  # 480000
N_FRAMES: int = CHUNK_SAMPLES // HOP_LENGTH  # 3000

# Model identification
DEFAULT_MODEL_ID: str = "Systran/faster-whisper-tiny"
PREPROCESSOR_CONFIG: str = "preprocessor_config.json"
