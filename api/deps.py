"""
FastAPI dependency providers.

Provides the feature-extraction engine singleton so the configuration is
resolved once per process (see ``config_from_env`` for the MELSPEC_*
variables) and the filter bank it uses is built once and reused across
requests.
"""

import logging

from ingestion.feature_engine import FeatureExtractionEngine, config_from_env

logger = logging.getLogger(__name__)

_feature_engine: FeatureExtractionEngine | None = None


def get_feature_engine() -> FeatureExtractionEngine:
    """Return a cached ``FeatureExtractionEngine`` singleton.

    Created on first call from the environment configuration and reused
    thereafter.
    """
    global _feature_engine  # noqa: PLW0603
    if _feature_engine is None:
        config = config_from_env()
        logger.info(
            "Feature engine: sr=%d n_mels=%d max_length=%d n_fft=%d hop=%d normalization=%s",
            config.sample_rate,
            config.n_mels,
            config.max_length,
            config.n_fft,
            config.hop_length,
            config.normalization,
        )
        _feature_engine = FeatureExtractionEngine(config)
    return _feature_engine
