"""
api/routes/features.py — Log-mel feature extraction endpoints.

Endpoints:
    POST /features/samples — Features from raw samples posted as JSON
    POST /features/file    — Features from an audio file on the server filesystem
    GET  /features/config  — Active extraction configuration

Routes are plain `def` functions: the extraction is CPU-bound and
synchronous, and FastAPI runs it in its worker thread pool.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException

from api.deps import get_feature_engine
from api.schemas.features import (
    FeatureConfigResponse,
    FeatureFileRequest,
    FeatureResponse,
    FeatureSamplesRequest,
    FeatureStatsOut,
)
from ingestion.feature_engine import FeatureExtraction, FeatureExtractionEngine

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/features", tags=["features"])


def _to_response(result: FeatureExtraction, engine: FeatureExtractionEngine) -> FeatureResponse:
    """Convert an engine result into the JSON response model."""
    config = engine.config
    return FeatureResponse(
        features=result.features.tolist(),
        n_mels=config.n_mels,
        n_frames=result.n_frames,
        max_length=config.max_length,
        padded_frames=result.padded_frames,
        truncated=result.truncated,
        duration_sec=result.duration_sec,
        sample_rate=result.sample_rate,
        normalization=config.normalization,
        processing_time_ms=result.processing_time_ms,
        stats=FeatureStatsOut(
            low=result.stats.low,
            high=result.stats.high,
            mean=result.stats.mean,
            spread=result.stats.spread,
        ),
    )


# ---------------------------------------------------------------------------
# POST /features/samples
# ---------------------------------------------------------------------------


@router.post("/samples", response_model=FeatureResponse)
def extract_from_samples(
    request: FeatureSamplesRequest,
    engine: FeatureExtractionEngine = Depends(get_feature_engine),
) -> FeatureResponse:
    """Extract the feature matrix from mono samples.

    The samples must already be at the service sample rate; resampling is
    the caller's job.

    Raises:
        422: sample_rate does not match the service, or invalid samples.
    """
    if request.sample_rate is not None and request.sample_rate != engine.config.sample_rate:
        raise HTTPException(
            status_code=422,
            detail=(
                f"sample_rate {request.sample_rate} does not match service sample rate "
                f"{engine.config.sample_rate}; resample before sending"
            ),
        )
    try:
        result = engine.extract_from_samples(request.samples)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    return _to_response(result, engine)


# ---------------------------------------------------------------------------
# POST /features/file
# ---------------------------------------------------------------------------


@router.post("/file", response_model=FeatureResponse)
def extract_from_file(
    request: FeatureFileRequest,
    engine: FeatureExtractionEngine = Depends(get_feature_engine),
) -> FeatureResponse:
    """Decode an audio file at the service sample rate and extract features.

    Raises:
        422: file_path does not exist or extension not supported.
        500: Audio decoding failure.
    """
    try:
        result = engine.extract_from_file(request.file_path, duration=request.duration)
    except FileNotFoundError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    except RuntimeError as exc:
        logger.error("Feature extraction failed: %s", exc)
        raise HTTPException(
            status_code=500, detail=f"Feature extraction failed: {exc}"
        ) from exc
    return _to_response(result, engine)


# ---------------------------------------------------------------------------
# GET /features/config
# ---------------------------------------------------------------------------


@router.get("/config", response_model=FeatureConfigResponse)
def get_config(
    engine: FeatureExtractionEngine = Depends(get_feature_engine),
) -> FeatureConfigResponse:
    """Return the configuration every extraction uses."""
    config = engine.config
    return FeatureConfigResponse(
        sample_rate=config.sample_rate,
        n_mels=config.n_mels,
        max_length=config.max_length,
        n_fft=config.n_fft,
        hop_length=config.hop_length,
        fmax=config.resolved_fmax,
        top_db=config.top_db,
        normalization=config.normalization,
    )
