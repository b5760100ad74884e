"""
api/schemas/features.py — Pydantic request/response schemas for feature endpoints.

Covers:
    /features/samples  — FeatureSamplesRequest / FeatureResponse
    /features/file     — FeatureFileRequest / FeatureResponse
    /features/config   — FeatureConfigResponse
"""

from typing import Annotated

from pydantic import BaseModel, Field

from ingestion.audio_loader import DEFAULT_DURATION

# 60 s at 22050 Hz. Longer clips are truncated to max_length frames anyway.
MAX_SAMPLES: int = 1_323_000


class FeatureStatsOut(BaseModel):
    """Summary statistics of the returned matrix."""

    low: float
    high: float
    mean: float
    spread: float


# ---------------------------------------------------------------------------
# /features/samples
# ---------------------------------------------------------------------------


class FeatureSamplesRequest(BaseModel):
    """Request body for POST /features/samples."""

    samples: list[Annotated[float, Field(allow_inf_nan=False)]] = Field(
        ...,
        max_length=MAX_SAMPLES,
        description="Finite mono samples, already at the service sample rate.",
    )
    sample_rate: int | None = Field(
        default=None,
        gt=0,
        description=(
            "Sample rate of `samples`. Optional; when given it must equal the "
            "service sample rate (no resampling is done on raw samples)."
        ),
    )


# ---------------------------------------------------------------------------
# /features/file
# ---------------------------------------------------------------------------


class FeatureFileRequest(BaseModel):
    """Request body for POST /features/file."""

    file_path: str = Field(
        ...,
        description="Absolute path to audio file on the server filesystem.",
    )
    duration: float = Field(
        default=DEFAULT_DURATION,
        gt=0.0,
        le=300.0,
        description="Maximum seconds to load.",
    )


# ---------------------------------------------------------------------------
# Shared response
# ---------------------------------------------------------------------------


class FeatureResponse(BaseModel):
    """Response body for both extraction endpoints."""

    features: list[list[float]] = Field(
        ..., description="Feature matrix, one row per mel band (n_mels x max_length)."
    )
    n_mels: int
    n_frames: int = Field(..., description="Real frames computed before padding/trimming.")
    max_length: int
    padded_frames: int
    truncated: bool
    duration_sec: float
    sample_rate: int
    normalization: str | None
    processing_time_ms: float
    stats: FeatureStatsOut


# ---------------------------------------------------------------------------
# /features/config
# ---------------------------------------------------------------------------


class FeatureConfigResponse(BaseModel):
    """Active extraction configuration."""

    sample_rate: int
    n_mels: int
    max_length: int
    n_fft: int
    hop_length: int
    fmax: float
    top_db: float
    normalization: str | None
