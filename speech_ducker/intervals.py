"""Load and validate timed speech intervals."""

import json
import math

from speech_ducker.errors import ValidationError
from speech_ducker.models import SpeechInterval


def _require_number(item: dict, key: str, index: int) -> float:
    value = item.get(key)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError(
            f"Speech item {index}: '{key}' must be a number, got {value!r}"
        )
    if not math.isfinite(value):
        raise ValidationError(f"Speech item {index}: '{key}' must be finite, got {value!r}")
    return float(value)


def parse_intervals(data) -> list[SpeechInterval]:
    """Validate deserialized speech data and return it sorted by start time.

    Each record needs numeric ``start`` (>= 0) and ``duration`` (> 0) in
    seconds. Any other fields (text, position, style...) are kept in
    ``extra`` and otherwise ignored. The sort is stable, so records sharing
    a start time keep their input order. Overlaps are left alone here.
    """
    if not isinstance(data, (list, tuple)):
        raise ValidationError("Speech data must be an array")

    intervals = []
    for index, item in enumerate(data):
        if not isinstance(item, dict):
            raise ValidationError(f"Speech item {index} must be an object, got {type(item).__name__}")
        start = _require_number(item, "start", index)
        duration = _require_number(item, "duration", index)
        if start < 0:
            raise ValidationError(f"Speech item {index}: 'start' must be >= 0, got {start}")
        if duration <= 0:
            raise ValidationError(f"Speech item {index}: 'duration' must be > 0, got {duration}")
        extra = {k: v for k, v in item.items() if k not in ("start", "duration")}
        intervals.append(SpeechInterval(start=start, duration=duration, extra=extra))

    return sorted(intervals, key=lambda interval: interval.start)


def load_intervals(json_path: str) -> list[SpeechInterval]:
    """Read a speech data JSON file. OSError propagates if the file is unreadable."""
    with open(json_path, encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValidationError(f"Invalid JSON in speech data {json_path}: {e}") from e
    return parse_intervals(data)
