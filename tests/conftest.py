"""
Shared fixtures for the test suite.

Centralizes reusable configurations and signals so individual test files
don't need to repeat them.
"""

import numpy as np
import pytest

from core.config import MelSpectrogramConfig
from core.melspec.filterbank import clear_filter_bank_cache


@pytest.fixture()
def small_config() -> MelSpectrogramConfig:
    """Small, fast configuration: 16 mels x 10 frames, 256-point frames at 8 kHz."""
    return MelSpectrogramConfig(
        sample_rate=8000,
        n_mels=16,
        max_length=10,
        n_fft=256,
        hop_length=64,
    )


@pytest.fixture()
def noise() -> np.ndarray:
    """One second of deterministic float32 white noise at 22050 Hz."""
    rng = np.random.default_rng(0)
    return (0.3 * rng.standard_normal(22050)).astype(np.float32)


@pytest.fixture()
def fresh_filter_bank_cache():
    """Start and end the test with an empty filter-bank cache."""
    clear_filter_bank_cache()
    yield
    clear_filter_bank_cache()
