"""Ducking configuration: defaults from constants, overrides from JSON or CLI flags."""

import json
import math
from dataclasses import dataclass, fields

from speech_ducker.constants import (
    DUCK_VOLUME,
    NORMAL_VOLUME,
    FADE_IN_SECONDS,
    FADE_OUT_SECONDS,
    PULSE_WIDTH_SECONDS,
    OUTPUT_DIR,
    OUTPUT_CODEC,
    OUTPUT_BITRATE,
    FILTER_MODES,
    DEFAULT_MODE,
)
from speech_ducker.errors import ValidationError

# Option names accepted in config files, including the camelCase spelling
# used by older speech-data tooling.
_ALIASES = {
    "duckVolume": "duck_volume",
    "normalVolume": "normal_volume",
    "fadeInDuration": "fade_in",
    "fadeOutDuration": "fade_out",
    "fade_in_duration": "fade_in",
    "fade_out_duration": "fade_out",
    "outputDir": "output_dir",
    "pulseWidth": "pulse_width",
}


@dataclass
class DuckingConfig:
    duck_volume: float = DUCK_VOLUME
    normal_volume: float = NORMAL_VOLUME
    fade_in: float = FADE_IN_SECONDS
    fade_out: float = FADE_OUT_SECONDS
    pulse_width: float = PULSE_WIDTH_SECONDS
    output_dir: str = OUTPUT_DIR
    codec: str = OUTPUT_CODEC
    bitrate: str = OUTPUT_BITRATE
    mode: str = DEFAULT_MODE

    def validate(self) -> "DuckingConfig":
        """Check value ranges. Returns self so calls can be chained."""
        for name in ("duck_volume", "normal_volume"):
            value = getattr(self, name)
            if not _is_number(value) or not 0.0 <= value <= 1.0:
                raise ValidationError(f"{name} must be a number in [0, 1], got {value!r}")
        for name in ("fade_in", "fade_out"):
            value = getattr(self, name)
            if not _is_number(value) or value < 0:
                raise ValidationError(f"{name} must be a non-negative number, got {value!r}")
        if not _is_number(self.pulse_width) or self.pulse_width <= 0:
            raise ValidationError(f"pulse_width must be positive, got {self.pulse_width!r}")
        if self.mode not in FILTER_MODES:
            raise ValidationError(
                f"mode must be one of {', '.join(FILTER_MODES)}, got {self.mode!r}"
            )
        return self

    @classmethod
    def from_dict(cls, data: dict) -> "DuckingConfig":
        """Build a config from a dict, ignoring unknown keys."""
        if not isinstance(data, dict):
            raise ValidationError("Ducking config must be a JSON object")
        known = {f.name for f in fields(cls)}
        values = {}
        for key, value in data.items():
            key = _ALIASES.get(key, key)
            if key in known:
                values[key] = value
        return cls(**values).validate()

    def merged(self, **overrides) -> "DuckingConfig":
        """Return a copy with every non-None override applied."""
        values = {f.name: getattr(self, f.name) for f in fields(self)}
        values.update({k: v for k, v in overrides.items() if v is not None})
        return DuckingConfig(**values).validate()


def load_config(path: str) -> DuckingConfig:
    """Read a JSON config file. Missing keys fall back to defaults."""
    with open(path) as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValidationError(f"Invalid JSON in config file {path}: {e}") from e
    return DuckingConfig.from_dict(data)


def _is_number(value) -> bool:
    return (
        isinstance(value, (int, float))
        and not isinstance(value, bool)
        and math.isfinite(value)
    )
