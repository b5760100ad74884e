"""
core/melspec/filterbank.py — Triangular mel filter bank construction and cache.

Mel scale (HTK formula):
    mel(f) = 2595 * log10(1 + f / 700)
    f(mel) = 700 * (10 ** (mel / 2595) - 1)

`n_mels + 2` anchor frequencies are spaced evenly in mel between 0 Hz and
`fmax`. Filter m is a triangle over anchors (m, m+1, m+2): rising from 0 at
the left anchor to 1 at the centre, falling back to 0 at the right anchor.
The weights are not area-normalised.

Caching:
    `build_mel_filter_bank()` is a pure builder. `get_mel_filter_bank()`
    memoises it per (sample_rate, n_fft, n_mels, fmax) in a module-level
    dict guarded by a lock, so concurrent first calls for the same
    configuration build the bank exactly once. Cached banks are read-only
    and shared by reference.
"""

from __future__ import annotations

from threading import Lock

import numpy as np

from core.melspec.types import FilterBankKey, MelFilterBank

# ---------------------------------------------------------------------------
# Mel scale conversions
# ---------------------------------------------------------------------------


def hz_to_mel(frequencies: float | np.ndarray) -> float | np.ndarray:
    """Convert Hz to mels: ``2595 * log10(1 + f / 700)``."""
    return 2595.0 * np.log10(1.0 + np.asarray(frequencies, dtype=np.float64) / 700.0)


def mel_to_hz(mels: float | np.ndarray) -> float | np.ndarray:
    """Convert mels to Hz: ``700 * (10 ** (m / 2595) - 1)``."""
    return 700.0 * (10.0 ** (np.asarray(mels, dtype=np.float64) / 2595.0) - 1.0)


def fft_frequencies(sample_rate: int, n_fft: int) -> np.ndarray:
    """Centre frequency in Hz of each non-negative FFT bin: ``i * sr / n_fft``."""
    return np.arange(n_fft // 2 + 1, dtype=np.float64) * sample_rate / n_fft


def mel_anchor_frequencies(n_mels: int, fmax: float) -> np.ndarray:
    """`n_mels + 2` frequencies (Hz) evenly spaced on the mel scale in [0, fmax]."""
    min_mel = hz_to_mel(0.0)
    max_mel = hz_to_mel(fmax)
    steps = np.arange(n_mels + 2, dtype=np.float64)
    mels = min_mel + (max_mel - min_mel) * steps / (n_mels + 1)
    return mel_to_hz(mels)


# ---------------------------------------------------------------------------
# Builder
# ---------------------------------------------------------------------------


def triangular_filters(freqs: np.ndarray, anchors: np.ndarray) -> np.ndarray:
    """Evaluate triangular filters over an arbitrary frequency grid.

    Filter m uses anchors ``(anchors[m], anchors[m+1], anchors[m+2])`` as
    (left, center, right). For each frequency f::

        (f - left) / (center - left)    if left <= f <= center
        (right - f) / (right - center)  else if center <= f <= right
        0                               otherwise

    When two anchors coincide, the zero-width side of the triangle
    contributes weight 0 instead of NaN.

    Args:
        freqs:   1-D frequencies in Hz.
        anchors: 1-D ascending anchor frequencies; ``len(anchors) - 2``
                 filters are produced.

    Returns:
        float64 array of shape ``(len(anchors) - 2, len(freqs))``.
    """
    grid = np.asarray(freqs, dtype=np.float64)[np.newaxis, :]
    left = anchors[:-2, np.newaxis]
    center = anchors[1:-1, np.newaxis]
    right = anchors[2:, np.newaxis]

    shape = (left.shape[0], grid.shape[1])
    rising_width = center - left
    falling_width = right - center

    # np.divide's `where` leaves zero-width sides at 0 instead of 0/0.
    rising = np.divide(
        grid - left,
        rising_width,
        out=np.zeros(shape),
        where=rising_width > 0.0,
    )
    falling = np.divide(
        right - grid,
        falling_width,
        out=np.zeros(shape),
        where=falling_width > 0.0,
    )

    on_rising = (grid >= left) & (grid <= center)
    on_falling = ~on_rising & (grid >= center) & (grid <= right)

    return np.where(on_rising, rising, np.where(on_falling, falling, 0.0))


def build_mel_filter_bank(
    sample_rate: int,
    n_fft: int,
    n_mels: int,
    fmax: float,
) -> MelFilterBank:
    """Build a triangular mel filter bank over the FFT bins.

    See `triangular_filters()` for the per-bin weight. Anchors come from
    `mel_anchor_frequencies()`, bins from `fft_frequencies()`.

    Args:
        sample_rate: Sample rate in Hz.
        n_fft:       Frame length; the bank spans ``n_fft // 2 + 1`` bins.
        n_mels:      Number of filters.
        fmax:        Frequency of the last anchor in Hz.

    Returns:
        MelFilterBank with a read-only ``(n_mels, n_fft // 2 + 1)`` weight matrix.
    """
    weights = triangular_filters(
        fft_frequencies(sample_rate, n_fft),
        mel_anchor_frequencies(n_mels, fmax),
    )
    weights.setflags(write=False)

    return MelFilterBank(
        sample_rate=int(sample_rate),
        n_fft=int(n_fft),
        n_mels=int(n_mels),
        fmax=float(fmax),
        weights=weights,
    )


# ---------------------------------------------------------------------------
# Memoised access
# ---------------------------------------------------------------------------

_CACHE: dict[FilterBankKey, MelFilterBank] = {}
_CACHE_LOCK = Lock()


def get_mel_filter_bank(
    sample_rate: int,
    n_fft: int,
    n_mels: int,
    fmax: float,
) -> MelFilterBank:
    """Return the filter bank for a configuration, building it on first use.

    Thread-safe: the lock is held while building, so a bank is constructed
    once per distinct (sample_rate, n_fft, n_mels, fmax) for the lifetime
    of the process.
    """
    key: FilterBankKey = (int(sample_rate), int(n_fft), int(n_mels), float(fmax))
    bank = _CACHE.get(key)
    if bank is not None:
        return bank
    with _CACHE_LOCK:
        bank = _CACHE.get(key)
        if bank is None:
            bank = build_mel_filter_bank(*key)
            _CACHE[key] = bank
        return bank


def cached_filter_bank_count() -> int:
    """Number of distinct filter banks currently memoised."""
    with _CACHE_LOCK:
        return len(_CACHE)


def clear_filter_bank_cache() -> None:
    """Drop every memoised filter bank. Intended for tests."""
    with _CACHE_LOCK:
        _CACHE.clear()
