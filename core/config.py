"""
Configuration dataclasses for log-mel feature extraction.

These immutable config objects fix every numeric parameter of the pipeline
for one processor instance. The classifier that consumes the features was
trained against a specific layout, so the defaults reproduce that layout
exactly: 22050 Hz, 256 mel bands, 200 frames, 2048-point frames every 512
samples, 80 dB dynamic range.
"""

from __future__ import annotations

from dataclasses import dataclass

# Allowlist of per-band normalisation methods. None means "no normalisation".
VALID_NORMALIZATIONS: frozenset[str] = frozenset({"zscore", "minmax"})


class InvalidConfigError(ValueError):
    """Raised when a feature-extraction parameter is out of range.

    Always raised before any signal processing starts, so a caller never
    receives a partially computed feature matrix.
    """


@dataclass(frozen=True)
class MelSpectrogramConfig:
    """
    Configuration for log-mel feature extraction.

    Attributes:
        sample_rate: Sample rate (Hz) of the incoming signal and of the
            filter-bank frequency axis. Defaults to 22050.
        n_mels: Number of mel bands, i.e. rows of the feature matrix.
            Defaults to 256.
        max_length: Fixed number of frames (columns) in the output.
            Shorter inputs are padded with ``-top_db``, longer ones truncated.
            Defaults to 200.
        n_fft: Frame length in samples; also the spectral resolution.
            Defaults to 2048.
        hop_length: Stride between consecutive frame starts. Defaults to 512.
        fmax: Upper edge of the mel filter bank in Hz. ``None`` resolves to
            the Nyquist frequency ``sample_rate / 2``.
        top_db: Dynamic range of the decibel scale. Values below
            ``-top_db`` (relative to the spectrogram maximum) are clipped,
            and padding frames are filled with ``-top_db``. Defaults to 80.0.
        normalization: Optional per-band normalisation applied after
            transposition: ``"zscore"``, ``"minmax"`` or ``None``.

    Example:
        >>> config = MelSpectrogramConfig(n_mels=64, normalization="zscore")
        >>> processor = MelSpectrogramProcessor(config)
    """

    sample_rate: int = 22050
    n_mels: int = 256
    max_length: int = 200
    n_fft: int = 2048
    hop_length: int = 512
    fmax: float | None = None
    top_db: float = 80.0
    normalization: str | None = None

    def __post_init__(self) -> None:
        """Validate configuration parameters."""
        if self.sample_rate <= 0:
            raise InvalidConfigError(f"sample_rate must be positive, got {self.sample_rate}")
        if self.n_fft <= 1:
            raise InvalidConfigError(
                f"n_fft must be greater than 1 (Hann window undefined), got {self.n_fft}"
            )
        if self.hop_length <= 0:
            raise InvalidConfigError(f"hop_length must be positive, got {self.hop_length}")
        if self.n_mels <= 0:
            raise InvalidConfigError(f"n_mels must be positive, got {self.n_mels}")
        if self.max_length <= 0:
            raise InvalidConfigError(f"max_length must be positive, got {self.max_length}")
        if self.fmax is not None and self.fmax <= 0:
            raise InvalidConfigError(f"fmax must be positive, got {self.fmax}")
        if self.top_db <= 0:
            raise InvalidConfigError(f"top_db must be positive, got {self.top_db}")
        if self.normalization is not None and self.normalization not in VALID_NORMALIZATIONS:
            raise InvalidConfigError(
                f"Unknown normalization {self.normalization!r}, "
                f"valid options: {sorted(VALID_NORMALIZATIONS)} or None"
            )

    @property
    def resolved_fmax(self) -> float:
        """Upper filter-bank frequency in Hz (Nyquist when ``fmax`` is None)."""
        if self.fmax is None:
            return self.sample_rate / 2.0
        return float(self.fmax)

    @property
    def n_bins(self) -> int:
        """Number of non-negative frequency bins per frame: ``n_fft // 2 + 1``."""
        return self.n_fft // 2 + 1

    def n_frames(self, n_samples: int) -> int:
        """Number of complete frames in a signal of ``n_samples`` samples.

        Zero when the signal is shorter than one frame.
        """
        if n_samples < self.n_fft:
            return 0
        return (n_samples - self.n_fft) // self.hop_length + 1


# Pre-defined configurations for common use cases

DEFAULT_CONFIG = MelSpectrogramConfig()
"""Emotion-classifier layout: 256 mels x 200 frames at 22050 Hz, no normalisation."""

COMPACT_CONFIG = MelSpectrogramConfig(n_mels=64)
"""64-band variant for lighter classifiers trained on the same framing."""

NORMALIZED_CONFIG = MelSpectrogramConfig(normalization="zscore")
"""Default layout followed by per-band z-score normalisation."""
