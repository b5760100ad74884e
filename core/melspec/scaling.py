"""
core/melspec/scaling.py — Mel projection, decibel scaling and output shaping.

Stages, in pipeline order:
    project_to_mel()      power spectrum x filter bank -> mel energies
    power_to_db()         10*log10(power / global max), clipped at -top_db
    pad_or_trim()         fixed frame count, padding with -top_db
    transpose()           (frames, mels) -> (mels, frames)
    normalize_features()  optional per-band zscore / minmax

All functions are pure numpy and return new arrays.

power_to_db() references the spectrogram's own maximum (librosa's
``ref=np.max``). An all-silent input therefore maps every real frame to
0 dB, not -top_db. The consuming classifier was trained on that behaviour,
so it is kept.
"""

from __future__ import annotations

import numpy as np

from core.melspec.types import MelFilterBank

AMIN: float = 1e-10
"""Power floor applied before taking the logarithm."""

DEFAULT_TOP_DB: float = 80.0


def project_to_mel(spectrum: np.ndarray, filter_bank: MelFilterBank) -> np.ndarray:
    """Weighted sum of each frame's power spectrum under each mel filter.

    Args:
        spectrum:    ``(n_frames, n_bins)`` power spectrum.
        filter_bank: Bank whose weights are ``(n_mels, n_bins)``.

    Returns:
        ``(n_frames, n_mels)`` mel energies.

    Raises:
        ValueError: If the bin counts of spectrum and bank differ.
    """
    if spectrum.shape[1] != filter_bank.n_bins:
        raise ValueError(
            f"Spectrum has {spectrum.shape[1]} bins but filter bank expects "
            f"{filter_bank.n_bins}"
        )
    return spectrum @ filter_bank.weights.T


def power_to_db(
    mel: np.ndarray,
    *,
    amin: float = AMIN,
    top_db: float = DEFAULT_TOP_DB,
) -> np.ndarray:
    """Convert mel energies to decibels relative to their global maximum.

    ``ref = max(amin, max(mel))``; every entry becomes
    ``max(10 * log10(max(e, amin) / ref), -top_db)``. Results always lie in
    ``[-top_db, 0]``.

    Args:
        mel:    ``(n_frames, n_mels)`` non-negative energies.
        amin:   Power floor. Defaults to 1e-10.
        top_db: Clipping depth below the maximum. Defaults to 80.

    Returns:
        float64 array of the same shape.
    """
    power = np.asarray(mel, dtype=np.float64)
    if power.size == 0:
        return power.copy()
    ref = max(amin, float(np.max(power)))
    db = 10.0 * np.log10(np.maximum(power, amin) / ref)
    return np.maximum(db, -top_db)


def pad_or_trim(
    mel_db: np.ndarray,
    max_length: int,
    *,
    top_db: float = DEFAULT_TOP_DB,
) -> np.ndarray:
    """Force the frame axis (axis 0) to exactly `max_length` frames.

    Longer spectrograms keep their first `max_length` frames. Shorter ones
    keep every real frame in place and are extended with frames filled with
    ``-top_db`` (silence on the decibel scale).

    Args:
        mel_db:     ``(n_frames, n_mels)`` decibel spectrogram; may have
                    zero frames.
        max_length: Target frame count.
        top_db:     Padding value is ``-top_db``.

    Returns:
        New ``(max_length, n_mels)`` array.
    """
    n_frames, n_mels = mel_db.shape
    if n_frames >= max_length:
        return mel_db[:max_length].copy()
    padded = np.full((max_length, n_mels), -top_db, dtype=mel_db.dtype)
    padded[:n_frames] = mel_db
    return padded


def transpose(matrix: np.ndarray) -> np.ndarray:
    """Swap the two axes: ``(frames, mels) -> (mels, frames)``.

    Returns a contiguous copy so rows are mel bands in memory order.
    """
    return np.ascontiguousarray(matrix.T)


def normalize_features(matrix: np.ndarray, method: str | None) -> np.ndarray:
    """Normalise each row (mel band) across the time axis.

    Methods:
        "zscore": ``(x - mean) / std`` with the population std.
        "minmax": ``2 * (x - min) / (max - min) - 1``, i.e. into [-1, 1].
        None:     no-op copy.

    A row with zero std (zscore) or zero range (minmax) is returned
    unchanged.

    Args:
        matrix: ``(n_mels, n_frames)`` features.
        method: "zscore", "minmax" or None.

    Returns:
        New array with the dtype of `matrix`.

    Raises:
        ValueError: For any other method name.
    """
    if method is None:
        return matrix.copy()

    values = np.asarray(matrix, dtype=np.float64)

    if method == "zscore":
        mean = values.mean(axis=1, keepdims=True)
        std = values.std(axis=1, keepdims=True)
        scaled = np.divide(values - mean, std, out=values.copy(), where=std > 0.0)
    elif method == "minmax":
        low = values.min(axis=1, keepdims=True)
        span = values.max(axis=1, keepdims=True) - low
        scaled = np.divide(
            2.0 * (values - low), span, out=np.zeros_like(values), where=span > 0.0
        )
        scaled = np.where(span > 0.0, scaled - 1.0, values)
    else:
        raise ValueError(f"Unknown normalization method {method!r}")

    return scaled.astype(matrix.dtype, copy=False)
