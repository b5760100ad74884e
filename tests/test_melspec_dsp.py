"""
Tests for core/melspec/dsp.py — normalisation, framing, windowing, power spectrum.

All tests are pure numpy: small synthetic signals, no audio files.
"""

import numpy as np
import pytest

from core.config import InvalidConfigError
from core.melspec.dsp import (
    apply_window,
    direct_power_spectrum,
    frame_signal,
    hann_window,
    normalize_amplitude,
    power_spectrum,
)

# ---------------------------------------------------------------------------
# normalize_amplitude
# ---------------------------------------------------------------------------


class TestNormalizeAmplitude:
    def test_peak_becomes_one(self):
        y = np.array([0.1, -0.4, 0.2], dtype=np.float32)
        out = normalize_amplitude(y)
        assert np.max(np.abs(out)) == pytest.approx(1.0)

    def test_negative_peak_scales_by_absolute_value(self):
        out = normalize_amplitude(np.array([0.5, -2.0]))
        np.testing.assert_allclose(out, [0.25, -1.0])

    def test_silence_passes_through(self):
        y = np.zeros(100, dtype=np.float32)
        out = normalize_amplitude(y)
        assert np.all(out == 0.0)
        assert not np.any(np.isnan(out))

    def test_input_not_mutated(self):
        y = np.array([0.5, -0.25], dtype=np.float32)
        original = y.copy()
        normalize_amplitude(y)
        np.testing.assert_array_equal(y, original)

    def test_returns_new_array_for_silence(self):
        y = np.zeros(4)
        assert normalize_amplitude(y) is not y

    def test_empty_signal(self):
        assert normalize_amplitude(np.array([], dtype=np.float32)).size == 0


# ---------------------------------------------------------------------------
# frame_signal
# ---------------------------------------------------------------------------


class TestFrameSignal:
    def test_frame_count_formula(self):
        y = np.arange(2 * 512 + 2048, dtype=np.float64)
        frames = frame_signal(y, 2048, 512)
        assert frames.shape == (3, 2048)

    def test_single_exact_frame(self):
        frames = frame_signal(np.ones(2048), 2048, 512)
        assert frames.shape == (1, 2048)

    def test_short_signal_has_no_frames(self):
        frames = frame_signal(np.ones(2047), 2048, 512)
        assert frames.shape == (0, 2048)

    def test_trailing_partial_frame_dropped(self):
        frames = frame_signal(np.arange(10.0), 4, 3)
        # starts at 0, 3, 6 — a frame at 9 would be incomplete
        assert frames.shape == (3, 4)

    def test_frames_start_every_hop(self):
        y = np.arange(20.0)
        frames = frame_signal(y, 4, 3)
        np.testing.assert_array_equal(frames[0], [0, 1, 2, 3])
        np.testing.assert_array_equal(frames[1], [3, 4, 5, 6])
        np.testing.assert_array_equal(frames[-1], y[15:19])


# ---------------------------------------------------------------------------
# hann_window / apply_window
# ---------------------------------------------------------------------------


class TestHannWindow:
    def test_matches_formula(self):
        n = 16
        expected = 0.5 * (1.0 - np.cos(2.0 * np.pi * np.arange(n) / (n - 1)))
        np.testing.assert_allclose(hann_window(n), expected, atol=1e-12)

    def test_symmetric_with_zero_endpoints(self):
        w = hann_window(9)
        assert w[0] == pytest.approx(0.0)
        assert w[-1] == pytest.approx(0.0)
        assert w[4] == pytest.approx(1.0)
        np.testing.assert_allclose(w, w[::-1], atol=1e-12)

    @pytest.mark.parametrize("n", [1, 0])
    def test_undefined_length_raises(self, n):
        with pytest.raises(InvalidConfigError):
            hann_window(n)

    def test_apply_window_weights_each_frame(self):
        frames = np.ones((3, 8))
        windowed = apply_window(frames)
        for row in windowed:
            np.testing.assert_allclose(row, hann_window(8))

    def test_apply_window_does_not_mutate(self):
        frames = np.ones((2, 8))
        apply_window(frames)
        assert np.all(frames == 1.0)


# ---------------------------------------------------------------------------
# power_spectrum
# ---------------------------------------------------------------------------


class TestPowerSpectrum:
    def test_output_shape_even_frame(self):
        assert power_spectrum(np.ones((2, 64))).shape == (2, 33)

    def test_output_shape_odd_frame(self):
        assert power_spectrum(np.ones((2, 9))).shape == (2, 5)

    def test_no_frames(self):
        assert power_spectrum(np.empty((0, 2048))).shape == (0, 1025)

    def test_dc_signal(self):
        # constant 1.0: |sum| / N = 1 at k = 0, nothing elsewhere
        spectrum = power_spectrum(np.ones((1, 32)))
        assert spectrum[0, 0] == pytest.approx(1.0)
        np.testing.assert_allclose(spectrum[0, 1:], 0.0, atol=1e-20)

    def test_pure_cosine_lands_in_its_bin(self):
        n, k = 64, 5
        frame = np.cos(2.0 * np.pi * k * np.arange(n) / n)[np.newaxis, :]
        spectrum = power_spectrum(frame)
        # |sum| = N/2 → magnitude 0.5 → power 0.25
        assert spectrum[0, k] == pytest.approx(0.25)
        assert int(np.argmax(spectrum[0])) == k

    def test_non_negative(self):
        rng = np.random.default_rng(1)
        spectrum = power_spectrum(rng.standard_normal((4, 128)))
        assert np.all(spectrum >= 0.0)

    @pytest.mark.parametrize("n", [8, 15, 64, 256])
    def test_fast_transform_matches_direct_sum(self, n):
        rng = np.random.default_rng(n)
        frames = apply_window(rng.standard_normal((3, n)))
        np.testing.assert_allclose(
            power_spectrum(frames),
            direct_power_spectrum(frames),
            rtol=1e-7,
            atol=1e-12,
        )

    def test_direct_sum_shape(self):
        assert direct_power_spectrum(np.ones((2, 10))).shape == (2, 6)
