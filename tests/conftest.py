"""Shared fixtures for speech ducker tests."""

import json

import numpy as np
import pytest
from pydub import AudioSegment

from speech_ducker.config import DuckingConfig


def make_tone(duration_ms: int, freq: float = 440.0, sample_rate: int = 44100) -> AudioSegment:
    """Loud sine tone so volume changes show up in RMS."""
    t = np.linspace(0, duration_ms / 1000, int(sample_rate * duration_ms / 1000), endpoint=False)
    samples = (np.sin(2 * np.pi * freq * t) * 0.8 * 32767).astype(np.int16)
    return AudioSegment(
        data=samples.tobytes(),
        sample_width=2,
        frame_rate=sample_rate,
        channels=1,
    )


@pytest.fixture
def tone_mp3(tmp_path):
    """A 3-second 440 Hz tone saved as MP3."""
    path = tmp_path / "music.mp3"
    make_tone(3000).export(str(path), format="mp3")
    return path


@pytest.fixture
def speech_json(tmp_path):
    """Speech data file with one interval from 1s to 2s."""
    path = tmp_path / "speech.json"
    path.write_text(json.dumps([
        {"text": "Hello there", "start": 1.0, "duration": 1.0, "style": "comic"},
    ]))
    return path


@pytest.fixture
def config(tmp_path):
    return DuckingConfig(output_dir=str(tmp_path / "output"))


@pytest.fixture
def fake_ffmpeg(tmp_path):
    """Factory for a stand-in ffmpeg shell script.

    ``stderr_bytes`` fills stderr with that many 'w' characters before
    ``stderr_lines`` are written.
    """
    def factory(stdout_lines=(), stderr_lines=(), stderr_bytes=0, exit_code=0):
        script = ["#!/bin/sh"]
        if stderr_bytes:
            script.append(f"head -c {stderr_bytes} /dev/zero | tr '\\0' w >&2")
            script.append("echo >&2")
        script += [f"echo '{line}' >&2" for line in stderr_lines]
        script += [f"echo '{line}'" for line in stdout_lines]
        script.append(f"exit {exit_code}")
        path = tmp_path / "fake_ffmpeg.sh"
        path.write_text("\n".join(script) + "\n")
        path.chmod(0o755)
        return str(path)
    return factory
