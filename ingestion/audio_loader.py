"""
ingestion/audio_loader.py — File I/O boundary for audio loading.

This is the ONLY module in the feature pipeline that reads files from disk.
Decoding, channel downmixing and sample-rate conversion all happen here,
through librosa. Everything downstream (core/melspec/) takes a pre-loaded
mono float32 array that is already at the processor's sample rate.

Usage:
    from ingestion.audio_loader import load_signal
    y = load_signal("/path/to/clip.wav", sample_rate=22050)
"""

from __future__ import annotations

from pathlib import Path

import numpy as np

# Supported audio file extensions (must be loadable by librosa / soundfile)
AUDIO_EXTENSIONS: frozenset[str] = frozenset(
    {".mp3", ".wav", ".flac", ".aiff", ".aif", ".ogg", ".m4a", ".opus", ".webm"}
)

# Voice clips are short; cap the load so a stray long file cannot exhaust memory.
DEFAULT_DURATION: float = 30.0


def load_signal(
    path: str | Path,
    *,
    sample_rate: int,
    duration: float | None = DEFAULT_DURATION,
) -> np.ndarray:
    """Load an audio file as a mono float32 signal at `sample_rate`.

    Args:
        path: Absolute or relative path to an audio file.
              Supported formats: mp3, wav, flac, aiff, ogg, m4a, opus, webm.
        sample_rate: Target sample rate in Hz. The file is resampled by
              librosa when its native rate differs.
        duration: Maximum seconds to load. None loads the whole file.

    Returns:
        1-D float32 numpy array of samples.

    Raises:
        FileNotFoundError: File does not exist at the given path.
        ValueError: File extension is not a supported audio format, or
                    `sample_rate` is not positive.
        RuntimeError: librosa/soundfile could not decode the file
                      (corrupted, truncated, DRM-protected, etc.).
    """
    import librosa  # deferred to allow testing without audio backend

    if sample_rate <= 0:
        raise ValueError(f"sample_rate must be positive, got {sample_rate}")

    file_path = Path(path)

    if not file_path.exists():
        raise FileNotFoundError(f"Audio file not found: {file_path}")

    if file_path.suffix.lower() not in AUDIO_EXTENSIONS:
        raise ValueError(
            f"Unsupported audio format {file_path.suffix!r}. "
            f"Supported: {sorted(AUDIO_EXTENSIONS)}"
        )

    try:
        y, _ = librosa.load(
            file_path,
            sr=sample_rate,
            mono=True,
            duration=duration,
            offset=0.0,
        )
    except Exception as exc:
        raise RuntimeError(
            f"Failed to decode audio file {file_path.name!r}: {exc}"
        ) from exc

    return np.asarray(y, dtype=np.float32)
