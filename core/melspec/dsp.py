"""
core/melspec/dsp.py — Time-domain and spectral stages of the log-mel pipeline.

Stages, in pipeline order:
    normalize_amplitude()  peak normalisation to max |x| = 1
    frame_signal()         overlapping frames of n_fft samples every hop_length
    apply_window()         symmetric Hann window per frame
    power_spectrum()       |DFT|^2 / N^2 over the non-negative bins

Design:
    - All functions are pure: they never mutate their inputs and keep no state.
    - `power_spectrum()` uses scipy's real FFT. `direct_power_spectrum()` is
      the literal O(N^2) sum the classifier's reference extractor used; it
      exists so tests can pin the fast path against it.
    - Frames are views produced by `sliding_window_view`, so framing a
      long signal costs no copy until the window is applied.
"""

from __future__ import annotations

import numpy as np
from numpy.lib.stride_tricks import sliding_window_view
from scipy import fft as scipy_fft

from core.config import InvalidConfigError

# ---------------------------------------------------------------------------
# Amplitude normalisation
# ---------------------------------------------------------------------------


def normalize_amplitude(y: np.ndarray) -> np.ndarray:
    """Scale a signal so that its largest absolute sample is 1.0.

    A silent signal (all zeros) is returned unchanged, since there is no
    peak to scale by.

    Args:
        y: 1-D array of samples.

    Returns:
        New float64 array of the same length. The input is never modified.
    """
    samples = np.asarray(y, dtype=np.float64)
    if samples.size == 0:
        return samples.copy()
    peak = float(np.max(np.abs(samples)))
    if peak > 0.0:
        return samples / peak
    return samples.copy()


# ---------------------------------------------------------------------------
# Framing and windowing
# ---------------------------------------------------------------------------


def frame_signal(y: np.ndarray, n_fft: int, hop_length: int) -> np.ndarray:
    """Slice a signal into overlapping frames.

    Frame `i` covers samples ``[i * hop_length, i * hop_length + n_fft)``.
    Only complete frames are produced; there is no centre padding.

    Args:
        y:          1-D array of samples.
        n_fft:      Frame length in samples.
        hop_length: Stride between frame starts.

    Returns:
        Array of shape ``(n_frames, n_fft)`` where
        ``n_frames = (len(y) - n_fft) // hop_length + 1``, or ``(0, n_fft)``
        when the signal is shorter than one frame. The result may be a
        read-only view of `y`.
    """
    if len(y) < n_fft:
        return np.empty((0, n_fft), dtype=np.float64)
    return sliding_window_view(y, n_fft)[::hop_length]


def hann_window(n: int) -> np.ndarray:
    """Symmetric Hann window ``w(k) = 0.5 * (1 - cos(2*pi*k / (n - 1)))``.

    Args:
        n: Window length.

    Returns:
        float64 array of length `n`.

    Raises:
        InvalidConfigError: If ``n <= 1`` (the formula divides by ``n - 1``).
    """
    if n <= 1:
        raise InvalidConfigError(f"Hann window needs more than one sample, got n={n}")
    return np.hanning(n)


def apply_window(frames: np.ndarray) -> np.ndarray:
    """Multiply every frame by a Hann window of the frame length.

    Args:
        frames: Array of shape ``(n_frames, n_fft)``.

    Returns:
        New float64 array of the same shape.
    """
    return frames * hann_window(frames.shape[1])


# ---------------------------------------------------------------------------
# Power spectrum
# ---------------------------------------------------------------------------


def power_spectrum(frames: np.ndarray) -> np.ndarray:
    """Power spectrum of each (already windowed) frame.

    For a frame of length N and bin k in ``[0, N // 2]``::

        power(k) = (|sum_n frame[n] * exp(-2j*pi*k*n/N)| / N) ** 2

    Args:
        frames: Array of shape ``(n_frames, N)``.

    Returns:
        Non-negative float64 array of shape ``(n_frames, N // 2 + 1)``.
    """
    n = frames.shape[1]
    if frames.shape[0] == 0:
        return np.zeros((0, n // 2 + 1), dtype=np.float64)
    spectrum = scipy_fft.rfft(frames, n=n, axis=1)
    magnitude = np.abs(spectrum) / n
    return magnitude**2


def direct_power_spectrum(frames: np.ndarray) -> np.ndarray:
    """Reference O(N^2) transform with the same contract as `power_spectrum`.

    Evaluates the real and imaginary sums explicitly with a cosine/sine
    basis. Too slow for production frame sizes; used to verify the fast
    path on small frames.

    Args:
        frames: Array of shape ``(n_frames, N)``.

    Returns:
        Non-negative float64 array of shape ``(n_frames, N // 2 + 1)``.
    """
    n = frames.shape[1]
    k = np.arange(n // 2 + 1)[:, np.newaxis]
    t = np.arange(n)[np.newaxis, :]
    angle = 2.0 * np.pi * k * t / n
    real = frames @ np.cos(angle).T
    imag = -(frames @ np.sin(angle).T)
    magnitude = np.sqrt(real**2 + imag**2) / n
    return magnitude**2
