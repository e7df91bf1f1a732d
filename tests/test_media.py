"""Tests for duration probing (Layer 2a)."""

from unittest.mock import patch

import pytest
from pydub import AudioSegment

from speech_ducker.errors import ProbeError
from speech_ducker.media import probe_duration


def test_probe_real_file(tmp_path):
    path = tmp_path / "two_seconds.mp3"
    AudioSegment.silent(duration=2000).export(str(path), format="mp3")
    assert probe_duration(str(path)) == pytest.approx(2.0, abs=0.1)


def test_probe_missing_file(tmp_path):
    with pytest.raises(ProbeError, match="not found"):
        probe_duration(str(tmp_path / "missing.mp3"))


def test_probe_non_audio_file(tmp_path):
    path = tmp_path / "notes.mp3"
    path.write_text("not audio data")
    with patch("speech_ducker.media.mediainfo", return_value={}):
        with pytest.raises(ProbeError, match="No duration"):
            probe_duration(str(path))


@pytest.mark.parametrize("raw", ["N/A", "0", "-3.0", "nan"])
def test_probe_unusable_duration(tmp_path, raw):
    path = tmp_path / "track.mp3"
    path.write_text("x")
    with patch("speech_ducker.media.mediainfo", return_value={"duration": raw}):
        with pytest.raises(ProbeError):
            probe_duration(str(path))


def test_probe_ffprobe_missing(tmp_path):
    path = tmp_path / "track.mp3"
    path.write_text("x")
    with patch("speech_ducker.media.mediainfo", side_effect=FileNotFoundError("ffprobe")):
        with pytest.raises(ProbeError, match="ffprobe"):
            probe_duration(str(path))
