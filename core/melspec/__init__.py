"""
core/melspec — Pure log-mel feature extraction.

Turns a mono signal into the fixed-size decibel mel spectrogram an emotion
classifier was trained on. All functions take numpy arrays and return new
arrays. No file I/O (that lives in ingestion/audio_loader.py) and no logging.

Architecture note:
    numpy and scipy are pure computation libraries (no I/O, no side
    effects). The only state shared between calls is the filter-bank cache
    in filterbank.py, which is lock-guarded and read-only once built.

Public API:
    Types:      MelFilterBank, FeatureStats
    Processor:  MelSpectrogramProcessor, describe_features
    Filter bank: build_mel_filter_bank, get_mel_filter_bank
"""

from core.melspec.filterbank import build_mel_filter_bank, get_mel_filter_bank
from core.melspec.processor import MelSpectrogramProcessor, describe_features
from core.melspec.types import FeatureStats, MelFilterBank

__all__ = [
    "MelFilterBank",
    "FeatureStats",
    "MelSpectrogramProcessor",
    "describe_features",
    "build_mel_filter_bank",
    "get_mel_filter_bank",
]
