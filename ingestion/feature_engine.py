"""
ingestion/feature_engine.py — Orchestrator for the audio→features pipeline.

FeatureExtractionEngine is the integration point between:
  - I/O layer (audio decoding in ingestion/audio_loader.py)
  - DSP layer (core/melspec/, pure numpy/scipy)
  - Observability (logging, infrastructure/metrics.py)

    audio file / raw samples
        │
        ├─ load_signal()                 [ingestion/audio_loader.py — I/O boundary]
        │       ↓
        ├─ MelSpectrogramProcessor.compute()  [core/melspec/processor.py — pure DSP]
        │       ↓
        └─ describe_features()           [core/melspec/processor.py — diagnostics]

This module is in `ingestion/` because it performs file I/O and records
metrics. The numeric core never logs; failures surface here first.

Usage:
    engine = FeatureExtractionEngine()
    result = engine.extract_from_file("/path/to/clip.wav")
    print(result.features.shape, result.stats.mean)
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

import numpy as np
from dotenv import load_dotenv

from core.config import DEFAULT_CONFIG, MelSpectrogramConfig
from core.melspec.processor import MelSpectrogramProcessor, describe_features
from core.melspec.types import FeatureStats
from infrastructure.metrics import LatencyTimer, record_extraction, record_signal_duration
from ingestion.audio_loader import DEFAULT_DURATION, load_signal

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Environment configuration
# ---------------------------------------------------------------------------


def config_from_env() -> MelSpectrogramConfig:
    """Build a configuration from environment overrides (and a .env file).

    Environment:
        MELSPEC_N_MELS          Number of mel bands (default 256).
        MELSPEC_MAX_LENGTH      Output frame count (default 200).
        MELSPEC_NORMALIZATION   "zscore", "minmax", or unset / "none".

    Unset variables keep the classifier defaults.

    Raises:
        InvalidConfigError: If an override is out of range or unknown.
        ValueError: If a numeric override is not an integer.
    """
    load_dotenv()
    n_mels = int(os.environ.get("MELSPEC_N_MELS", DEFAULT_CONFIG.n_mels))
    max_length = int(os.environ.get("MELSPEC_MAX_LENGTH", DEFAULT_CONFIG.max_length))
    normalization: str | None = os.environ.get("MELSPEC_NORMALIZATION", "").strip().lower()
    if normalization in ("", "none"):
        normalization = None
    return MelSpectrogramConfig(
        n_mels=n_mels,
        max_length=max_length,
        normalization=normalization,
    )


# ---------------------------------------------------------------------------
# FeatureExtraction — output of one engine call
# ---------------------------------------------------------------------------


@dataclass
class FeatureExtraction:
    """Feature matrix plus the bookkeeping the API and CLI report.

    Attributes:
        features:           ``(n_mels, max_length)`` float32 matrix.
        stats:              Min / max / mean of `features`.
        n_samples:          Length of the input signal in samples.
        n_frames:           Real frames computed before padding or truncation.
        sample_rate:        Sample rate the signal was processed at.
        processing_time_ms: Wall-clock time of the extraction in milliseconds.
    """

    features: np.ndarray
    stats: FeatureStats
    n_samples: int
    n_frames: int
    sample_rate: int
    processing_time_ms: float = 0.0

    @property
    def duration_sec(self) -> float:
        """Signal duration in seconds."""
        return self.n_samples / self.sample_rate

    @property
    def padded_frames(self) -> int:
        """Number of trailing ``-top_db`` frames added to reach max_length."""
        return max(0, self.features.shape[1] - self.n_frames)

    @property
    def truncated(self) -> bool:
        """True when real frames beyond max_length were dropped."""
        return self.n_frames > self.features.shape[1]


# ---------------------------------------------------------------------------
# FeatureExtractionEngine
# ---------------------------------------------------------------------------


class FeatureExtractionEngine:
    """Runs feature extraction for in-memory samples or audio files.

    Example:
        engine = FeatureExtractionEngine(COMPACT_CONFIG)
        result = engine.extract_from_samples(y)
        batch = result.features[np.newaxis]   # (1, n_mels, max_length)
    """

    def __init__(self, config: MelSpectrogramConfig = DEFAULT_CONFIG) -> None:
        """Initialise the engine.

        Args:
            config: Extraction parameters shared by every call.
        """
        self.config = config
        self.processor = MelSpectrogramProcessor(config)

    def extract_from_samples(self, samples: np.ndarray | list[float]) -> FeatureExtraction:
        """Extract features from a signal already at ``config.sample_rate``.

        Args:
            samples: 1-D sequence of float samples.

        Returns:
            FeatureExtraction for the signal.

        Raises:
            ValueError: If the samples are not one-dimensional or hold NaN / inf.
        """
        y = np.asarray(samples, dtype=np.float32)
        return self._run(y, source="samples")

    def extract_from_file(
        self,
        path: str | Path,
        *,
        duration: float | None = DEFAULT_DURATION,
    ) -> FeatureExtraction:
        """Decode an audio file at ``config.sample_rate`` and extract features.

        Args:
            path:     Path to an audio file (wav, mp3, flac, ...).
            duration: Maximum seconds to load (default 30 s).

        Returns:
            FeatureExtraction for the decoded signal.

        Raises:
            FileNotFoundError: If the file does not exist.
            ValueError: If the file extension is not a supported format.
            RuntimeError: If the audio cannot be decoded.
        """
        try:
            y = load_signal(path, sample_rate=self.config.sample_rate, duration=duration)
        except (FileNotFoundError, ValueError) as exc:
            logger.warning("Rejected audio file %s: %s", path, exc)
            record_extraction(status="invalid", source="file", latency_seconds=0.0)
            raise
        except RuntimeError as exc:
            logger.error("Audio decoding failed for %s: %s", path, exc)
            record_extraction(status="error", source="file", latency_seconds=0.0)
            raise
        return self._run(y, source="file")

    def _run(self, y: np.ndarray, *, source: str) -> FeatureExtraction:
        """Compute features and record timing / metrics for one signal."""
        with LatencyTimer() as timer:
            try:
                features = self.processor.compute(y)
            except ValueError as exc:
                logger.warning("Feature extraction rejected input: %s", exc)
                record_extraction(status="invalid", source=source, latency_seconds=0.0)
                raise

        n_samples = int(y.shape[0])
        n_frames = self.config.n_frames(n_samples)
        record_extraction(status="success", source=source, latency_seconds=timer.elapsed)
        record_signal_duration(n_samples / self.config.sample_rate)

        if n_frames == 0:
            logger.info(
                "Signal of %d samples is shorter than n_fft=%d — output is all padding",
                n_samples,
                self.config.n_fft,
            )
        elif n_frames > self.config.max_length:
            logger.debug(
                "Truncated %d frames to max_length=%d", n_frames, self.config.max_length
            )

        logger.debug(
            "Extracted %s features from %d samples in %.1f ms",
            features.shape,
            n_samples,
            timer.elapsed * 1000.0,
        )

        return FeatureExtraction(
            features=features,
            stats=describe_features(features),
            n_samples=n_samples,
            n_frames=n_frames,
            sample_rate=self.config.sample_rate,
            processing_time_ms=timer.elapsed * 1000.0,
        )
