#!/usr/bin/env python
"""Log-mel feature extraction — audio file to .npy feature matrix.

Usage
-----
    # Default classifier layout (256 mels x 200 frames), saved next to the input
    python scripts/extract_features.py clip.wav

    # Explicit output path with z-score normalisation
    python scripts/extract_features.py clip.wav -o features/clip.npy --normalization zscore

    # Save with the leading batch axis: (1, n_mels, max_length)
    python scripts/extract_features.py clip.wav --batch

Defaults for --n-mels, --max-length and --normalization come from the
MELSPEC_* environment variables (or a .env file) when set.

Exit codes
----------
    0  — success
    1  — invalid input (missing file, unsupported format, bad config)
    2  — decoding failure
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

import numpy as np

# Add project root to sys.path
sys.path.insert(0, str(Path(__file__).parent.parent))

from core.config import VALID_NORMALIZATIONS, MelSpectrogramConfig  # noqa: E402
from ingestion.audio_loader import DEFAULT_DURATION  # noqa: E402
from ingestion.feature_engine import FeatureExtractionEngine, config_from_env  # noqa: E402

logger = logging.getLogger("extract_features")


def parse_args(defaults: MelSpectrogramConfig) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Extract a log-mel feature matrix from an audio file")
    p.add_argument("audio", type=Path, help="Input audio file (wav, mp3, flac, ...)")
    p.add_argument(
        "-o",
        "--output",
        type=Path,
        default=None,
        help="Output .npy path (default: <audio>.npy next to the input)",
    )
    p.add_argument("--n-mels", type=int, default=defaults.n_mels, help="Mel bands")
    p.add_argument(
        "--max-length", type=int, default=defaults.max_length, help="Output frame count"
    )
    p.add_argument(
        "--normalization",
        choices=sorted(VALID_NORMALIZATIONS) + ["none"],
        default=defaults.normalization or "none",
        help="Per-band normalisation",
    )
    p.add_argument(
        "--duration",
        type=float,
        default=DEFAULT_DURATION,
        help="Maximum seconds of audio to load",
    )
    p.add_argument(
        "--batch",
        action="store_true",
        help="Save with a leading batch axis (1, n_mels, max_length)",
    )
    p.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return p.parse_args()


def main() -> int:
    try:
        defaults = config_from_env()
    except ValueError as exc:
        print(f"ERROR: invalid MELSPEC_* environment: {exc}", file=sys.stderr)
        return 1

    args = parse_args(defaults)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        config = MelSpectrogramConfig(
            n_mels=args.n_mels,
            max_length=args.max_length,
            normalization=None if args.normalization == "none" else args.normalization,
        )
    except ValueError as exc:
        logger.error("Invalid configuration: %s", exc)
        return 1

    engine = FeatureExtractionEngine(config)
    try:
        result = engine.extract_from_file(args.audio, duration=args.duration)
    except (FileNotFoundError, ValueError) as exc:
        logger.error("%s", exc)
        return 1
    except RuntimeError as exc:
        logger.error("%s", exc)
        return 2

    features = result.features[np.newaxis] if args.batch else result.features
    output = args.output or args.audio.with_suffix(".npy")
    output.parent.mkdir(parents=True, exist_ok=True)
    np.save(output, features)

    stats = result.stats
    print(f"  Input          : {args.audio} ({result.duration_sec:.2f}s)")
    print(f"  Frames         : {result.n_frames} real, {result.padded_frames} padded")
    print(f"  Output shape   : {features.shape}")
    print(f"  Low / High     : {stats.low:.2f} / {stats.high:.2f}")
    print(f"  Mean / Spread  : {stats.mean:.2f} / {stats.spread:.2f}")
    print(f"  Time           : {result.processing_time_ms:.1f} ms")
    print(f"  Saved          : {output}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
