"""Tests for constants, models and configuration (Layer 0)."""

import json

import pytest

from speech_ducker import constants
from speech_ducker.config import DuckingConfig, load_config
from speech_ducker.errors import ValidationError
from speech_ducker.models import SpeechInterval, VolumeSegment, VolumeKeyframe


def test_speech_interval_end():
    interval = SpeechInterval(start=2.0, duration=3.0)
    assert interval.end == 5.0
    assert interval.extra == {}


def test_speech_interval_extra_ignored_in_equality():
    """Presentation fields do not affect interval identity."""
    a = SpeechInterval(start=1.0, duration=1.0, extra={"text": "hi"})
    b = SpeechInterval(start=1.0, duration=1.0)
    assert a == b


def test_volume_segment_duration():
    seg = VolumeSegment(start=2.0, end=5.0, volume=0.2, ducked=True)
    assert seg.duration == 3.0
    assert seg.ducked


def test_models_are_immutable():
    kf = VolumeKeyframe(time=1.0, volume=0.5)
    with pytest.raises(AttributeError):
        kf.time = 2.0


def test_constants_exist():
    """All module-level constants are defined."""
    expected = [
        "DUCK_VOLUME",
        "NORMAL_VOLUME",
        "FADE_IN_SECONDS",
        "FADE_OUT_SECONDS",
        "PULSE_WIDTH_SECONDS",
        "OUTPUT_DIR",
        "OUTPUT_CODEC",
        "OUTPUT_BITRATE",
        "FILTER_MODES",
        "DEFAULT_MODE",
        "VERSION",
    ]
    for name in expected:
        assert hasattr(constants, name), f"Missing constant: {name}"


# --- Config ---

def test_config_defaults():
    cfg = DuckingConfig()
    assert cfg.duck_volume == 0.2
    assert cfg.normal_volume == 1.0
    assert cfg.fade_in == 0.1
    assert cfg.fade_out == 0.1
    assert cfg.output_dir == "output"
    assert cfg.mode == "step"


@pytest.mark.parametrize("field, value", [
    ("duck_volume", 1.5),
    ("normal_volume", -0.1),
    ("fade_in", -1.0),
    ("mode", "linear"),
    ("duck_volume", "loud"),
])
def test_config_validate_rejects(field, value):
    cfg = DuckingConfig(**{field: value})
    with pytest.raises(ValidationError):
        cfg.validate()


def test_config_from_dict_accepts_camel_case():
    cfg = DuckingConfig.from_dict({
        "duckVolume": 0.3,
        "normalVolume": 0.9,
        "fadeInDuration": 0.25,
        "fadeOutDuration": 0.5,
        "outputDir": "out",
        "unrelated": True,
    })
    assert cfg.duck_volume == 0.3
    assert cfg.normal_volume == 0.9
    assert cfg.fade_in == 0.25
    assert cfg.fade_out == 0.5
    assert cfg.output_dir == "out"


def test_config_from_dict_rejects_non_object():
    with pytest.raises(ValidationError):
        DuckingConfig.from_dict([0.2])


def test_config_merged_skips_none():
    cfg = DuckingConfig().merged(duck_volume=0.5, fade_in=None)
    assert cfg.duck_volume == 0.5
    assert cfg.fade_in == 0.1


def test_load_config(tmp_path):
    path = tmp_path / "ducking.json"
    path.write_text(json.dumps({"duck_volume": 0.1, "mode": "pulse"}))
    cfg = load_config(str(path))
    assert cfg.duck_volume == 0.1
    assert cfg.mode == "pulse"


def test_load_config_invalid_json(tmp_path):
    path = tmp_path / "ducking.json"
    path.write_text("{not json")
    with pytest.raises(ValidationError):
        load_config(str(path))
