"""
core/melspec/types.py — Frozen data types for log-mel feature extraction.

All types are frozen dataclasses — immutable value objects that can be
safely shared between threads and cached.

Design principles:
    - No I/O, no state, no side effects.
    - `MelFilterBank.weights` is a read-only numpy array. Once a bank is
      built for a configuration it can be handed to any number of
      concurrent projections without copying.
    - `FilterBankKey` is a plain tuple so it can key a dict.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

FilterBankKey = tuple[int, int, int, float]
"""(sample_rate, n_fft, n_mels, fmax) — identifies one filter bank."""


@dataclass(frozen=True, eq=False)
class MelFilterBank:
    """Triangular mel filter bank over the non-negative FFT bins.

    Invariants:
        weights.shape == (n_mels, n_fft // 2 + 1)
        weights.flags.writeable is False
        0.0 <= weights <= 1.0, no NaN
    """

    sample_rate: int
    """Sample rate (Hz) the bin frequencies were computed for."""

    n_fft: int
    """Frame length the bins belong to."""

    n_mels: int
    """Number of triangular filters (rows of `weights`)."""

    fmax: float
    """Upper edge of the last filter in Hz."""

    weights: np.ndarray
    """Read-only float64 matrix, one filter per row."""

    @property
    def key(self) -> FilterBankKey:
        """Cache key this bank was built for."""
        return (self.sample_rate, self.n_fft, self.n_mels, self.fmax)

    @property
    def n_bins(self) -> int:
        """Number of frequency bins each filter spans."""
        return self.n_fft // 2 + 1


@dataclass(frozen=True)
class FeatureStats:
    """Summary statistics of a feature matrix, for diagnostics.

    Values are in whatever scale the matrix is in: decibels before
    normalisation, unitless after.
    """

    n_mels: int
    n_frames: int
    low: float
    high: float
    mean: float

    @property
    def spread(self) -> float:
        """Distance between the largest and smallest entry."""
        return self.high - self.low
