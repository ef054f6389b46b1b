"""Tests for media duration probing."""

import json
import subprocess
from unittest.mock import MagicMock, patch

import pytest

from aikocanary.core.asr import probe_duration_seconds


def ffprobe_result(payload) -> MagicMock:
    return MagicMock(stdout=json.dumps(payload), returncode=0)


class TestWavDuration:
    def test_reads_wav_length(self, wav_factory):
        assert probe_duration_seconds(wav_factory(1.0)) == pytest.approx(1.0)

    def test_respects_sample_rate(self, wav_factory):
        path = wav_factory(2.5, sample_rate=8000)
        assert probe_duration_seconds(path) == pytest.approx(2.5)

    def test_accepts_string_path(self, wav_factory):
        assert probe_duration_seconds(str(wav_factory(0.5))) == pytest.approx(0.5)

    def test_empty_wav_is_unknown(self, wav_factory):
        with patch("aikocanary.core.asr.duration.shutil.which", return_value=None):
            assert probe_duration_seconds(wav_factory(0.0)) is None


class TestUnavailable:
    def test_missing_file(self, tmp_path):
        assert probe_duration_seconds(tmp_path / "nope.wav") is None

    def test_directory(self, tmp_path):
        assert probe_duration_seconds(tmp_path) is None

    def test_garbage_without_ffprobe(self, tmp_path):
        path = tmp_path / "broken.wav"
        path.write_bytes(b"not a wav file at all")
        with patch("aikocanary.core.asr.duration.shutil.which", return_value=None):
            assert probe_duration_seconds(path) is None


class TestFfprobeFallback:
    @pytest.fixture
    def media(self, tmp_path):
        path = tmp_path / "talk.m4a"
        path.write_bytes(b"\x00" * 64)
        return path

    @pytest.fixture
    def which(self):
        with patch(
            "aikocanary.core.asr.duration.shutil.which",
            return_value="/usr/bin/ffprobe",
        ) as which:
            yield which

    def test_reads_format_duration(self, media, which):
        with patch(
            "aikocanary.core.asr.duration.subprocess.run",
            return_value=ffprobe_result({"format": {"duration": "61.500000"}}),
        ) as run:
            assert probe_duration_seconds(media) == pytest.approx(61.5)

        cmd = run.call_args.args[0]
        assert cmd[0] == "/usr/bin/ffprobe"
        assert "format=duration" in cmd
        assert cmd[-1] == str(media)

    def test_ffprobe_failure(self, media, which):
        error = subprocess.CalledProcessError(1, "ffprobe", stderr="Invalid data")
        with patch("aikocanary.core.asr.duration.subprocess.run", side_effect=error):
            assert probe_duration_seconds(media) is None

    def test_ffprobe_timeout(self, media, which):
        error = subprocess.TimeoutExpired("ffprobe", 30)
        with patch("aikocanary.core.asr.duration.subprocess.run", side_effect=error):
            assert probe_duration_seconds(media) is None

    @pytest.mark.parametrize(
        "payload",
        [
            {"format": {"duration": "N/A"}},
            {"format": {}},
            {},
            {"format": {"duration": "-1"}},
            {"format": {"duration": "inf"}},
        ],
    )
    def test_unusable_duration(self, media, which, payload):
        with patch(
            "aikocanary.core.asr.duration.subprocess.run",
            return_value=ffprobe_result(payload),
        ):
            assert probe_duration_seconds(media) is None

    def test_not_json(self, media, which):
        with patch(
            "aikocanary.core.asr.duration.subprocess.run",
            return_value=MagicMock(stdout="garbage"),
        ):
            assert probe_duration_seconds(media) is None

    def test_unreadable_wav_falls_back(self, tmp_path, which):
        path = tmp_path / "odd.wav"
        path.write_bytes(b"RIFF junk")
        with patch(
            "aikocanary.core.asr.duration.subprocess.run",
            return_value=ffprobe_result({"format": {"duration": "3.0"}}),
        ):
            assert probe_duration_seconds(path) == pytest.approx(3.0)
