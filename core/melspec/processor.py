"""
core/melspec/processor.py — End-to-end log-mel feature extraction.

MelSpectrogramProcessor wires the pipeline stages together:

    samples
        │
        ├─ normalize_amplitude()   peak -> 1.0
        ├─ frame_signal()          (n_frames, n_fft)
        ├─ apply_window()          Hann
        ├─ power_spectrum()        (n_frames, n_fft // 2 + 1)
        ├─ project_to_mel()        (n_frames, n_mels)      [memoised filter bank]
        ├─ power_to_db()           ref = global max, clip at -top_db
        ├─ pad_or_trim()           (max_length, n_mels)
        ├─ transpose()             (n_mels, max_length)
        └─ normalize_features()    only when config.normalization is set

The processor holds nothing but its frozen config. The filter bank lives in
the shared cache in filterbank.py, so two processors with the same config
share one bank and repeated calls return identical bytes.
"""

from __future__ import annotations

import numpy as np

from core.config import DEFAULT_CONFIG, MelSpectrogramConfig
from core.melspec.dsp import apply_window, frame_signal, normalize_amplitude, power_spectrum
from core.melspec.filterbank import get_mel_filter_bank
from core.melspec.scaling import (
    normalize_features,
    pad_or_trim,
    power_to_db,
    project_to_mel,
    transpose,
)
from core.melspec.types import FeatureStats, MelFilterBank


class MelSpectrogramProcessor:
    """Turns mono audio into the fixed-size feature matrix a classifier expects.

    Example:
        processor = MelSpectrogramProcessor()
        features = processor.compute(y)           # (256, 200) float32
        batch = processor.to_model_input(y)       # (1, 256, 200) float32
    """

    def __init__(self, config: MelSpectrogramConfig = DEFAULT_CONFIG) -> None:
        """Bind the processor to a validated configuration.

        Args:
            config: Extraction parameters. Validation already happened when
                the config was constructed.
        """
        self.config = config

    @property
    def filter_bank(self) -> MelFilterBank:
        """Shared, read-only filter bank for this configuration."""
        cfg = self.config
        return get_mel_filter_bank(cfg.sample_rate, cfg.n_fft, cfg.n_mels, cfg.resolved_fmax)

    @property
    def output_shape(self) -> tuple[int, int]:
        """Shape of every matrix returned by `compute()`."""
        return (self.config.n_mels, self.config.max_length)

    def compute_mel_db(self, y: np.ndarray) -> np.ndarray:
        """Decibel mel spectrogram of the real frames, before shaping.

        Args:
            y: 1-D samples at ``config.sample_rate``.

        Returns:
            ``(n_frames, n_mels)`` float64 decibels in ``[-top_db, 0]``.
            ``n_frames`` may be zero.

        Raises:
            ValueError: If `y` is not one-dimensional or holds NaN / inf.
        """
        samples = np.asarray(y)
        if samples.ndim != 1:
            raise ValueError(f"Expected a 1-D mono signal, got shape {samples.shape}")
        if not np.all(np.isfinite(samples)):
            raise ValueError("Signal contains non-finite samples (NaN or inf)")

        cfg = self.config
        normalized = normalize_amplitude(samples)
        frames = frame_signal(normalized, cfg.n_fft, cfg.hop_length)
        spectrum = power_spectrum(apply_window(frames))
        mel = project_to_mel(spectrum, self.filter_bank)
        return power_to_db(mel, top_db=cfg.top_db)

    def compute(self, y: np.ndarray) -> np.ndarray:
        """Extract the ``(n_mels, max_length)`` float32 feature matrix.

        Signals shorter than ``n_fft`` produce a matrix filled with
        ``-top_db`` (or its normalised equivalent).

        Args:
            y: 1-D samples at ``config.sample_rate``. Not modified.

        Returns:
            float32 array of shape `output_shape`.

        Raises:
            ValueError: If `y` is not one-dimensional or holds NaN / inf.
        """
        cfg = self.config
        mel_db = self.compute_mel_db(y)
        shaped = transpose(pad_or_trim(mel_db, cfg.max_length, top_db=cfg.top_db))
        features = shaped.astype(np.float32)
        if cfg.normalization is not None:
            features = normalize_features(features, cfg.normalization)
        return features

    def to_model_input(self, y: np.ndarray) -> np.ndarray:
        """Feature matrix with a leading batch axis: ``(1, n_mels, max_length)``."""
        return self.compute(y)[np.newaxis, :, :]


def describe_features(features: np.ndarray) -> FeatureStats:
    """Summarise a ``(n_mels, n_frames)`` feature matrix.

    Args:
        features: 2-D feature matrix, typically the output of `compute()`.

    Returns:
        FeatureStats with shape, low, high and mean.

    Raises:
        ValueError: If the matrix is not 2-D or has no entries.
    """
    if features.ndim != 2 or features.size == 0:
        raise ValueError(f"Expected a non-empty 2-D matrix, got shape {features.shape}")
    return FeatureStats(
        n_mels=int(features.shape[0]),
        n_frames=int(features.shape[1]),
        low=float(np.min(features)),
        high=float(np.max(features)),
        mean=float(np.mean(features)),
    )
