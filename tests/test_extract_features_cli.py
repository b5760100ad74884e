"""
Tests for scripts/extract_features.py — argument handling and exit codes.

The script is loaded from its file path; decoding is patched at
ingestion.feature_engine.load_signal.
"""

import importlib.util
from pathlib import Path
from unittest.mock import patch

import numpy as np
import pytest

from ingestion.audio_loader import DEFAULT_DURATION

_SCRIPT = Path(__file__).resolve().parent.parent / "scripts" / "extract_features.py"


@pytest.fixture()
def cli(monkeypatch):
    for name in ("MELSPEC_N_MELS", "MELSPEC_MAX_LENGTH", "MELSPEC_NORMALIZATION"):
        monkeypatch.delenv(name, raising=False)
    spec = importlib.util.spec_from_file_location("extract_features", _SCRIPT)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    with patch("ingestion.feature_engine.load_dotenv"):
        yield module


def _run(cli, monkeypatch, *argv: str) -> int:
    monkeypatch.setattr("sys.argv", ["extract_features.py", *argv])
    return cli.main()


def _signal() -> np.ndarray:
    return (0.1 * np.random.default_rng(4).standard_normal(22050)).astype(np.float32)


class TestExtractFeaturesCli:
    def test_saves_matrix(self, cli, monkeypatch, tmp_path):
        output = tmp_path / "out.npy"
        with patch("ingestion.feature_engine.load_signal", return_value=_signal()):
            code = _run(cli, monkeypatch, "clip.wav", "-o", str(output), "--n-mels", "32")
        assert code == 0
        features = np.load(output)
        assert features.shape == (32, 200)
        assert features.dtype == np.float32

    def test_batch_axis(self, cli, monkeypatch, tmp_path):
        output = tmp_path / "batch.npy"
        with patch("ingestion.feature_engine.load_signal", return_value=_signal()):
            code = _run(
                cli,
                monkeypatch,
                "clip.wav",
                "-o",
                str(output),
                "--n-mels",
                "16",
                "--max-length",
                "50",
                "--batch",
            )
        assert code == 0
        assert np.load(output).shape == (1, 16, 50)

    def test_default_output_next_to_input(self, cli, monkeypatch, tmp_path):
        audio = tmp_path / "clip.wav"
        with patch("ingestion.feature_engine.load_signal", return_value=_signal()):
            code = _run(cli, monkeypatch, str(audio), "--n-mels", "16")
        assert code == 0
        assert (tmp_path / "clip.npy").exists()

    def test_missing_file_exits_1(self, cli, monkeypatch, tmp_path):
        with patch(
            "ingestion.feature_engine.load_signal",
            side_effect=FileNotFoundError("Audio file not found"),
        ):
            code = _run(cli, monkeypatch, "missing.wav", "-o", str(tmp_path / "x.npy"))
        assert code == 1

    def test_decode_failure_exits_2(self, cli, monkeypatch, tmp_path):
        with patch(
            "ingestion.feature_engine.load_signal",
            side_effect=RuntimeError("Failed to decode audio file"),
        ):
            code = _run(cli, monkeypatch, "broken.mp3", "-o", str(tmp_path / "x.npy"))
        assert code == 2

    def test_invalid_config_exits_1(self, cli, monkeypatch):
        assert _run(cli, monkeypatch, "clip.wav", "--n-mels", "0") == 1

    def test_duration_defaults_to_loader_cap(self, cli, monkeypatch, tmp_path):
        with patch("ingestion.feature_engine.load_signal", return_value=_signal()) as load:
            _run(cli, monkeypatch, "clip.wav", "-o", str(tmp_path / "x.npy"), "--n-mels", "16")
        assert load.call_args.kwargs["duration"] == DEFAULT_DURATION
