"""Turn speech intervals into a gapless volume envelope for the music track."""

import math

import numpy as np

from speech_ducker.constants import DUCK_VOLUME, NORMAL_VOLUME, FADE_IN_SECONDS, FADE_OUT_SECONDS
from speech_ducker.errors import ValidationError
from speech_ducker.models import SpeechInterval, VolumeSegment, VolumeKeyframe


def _check_volume(name: str, value: float) -> None:
    if not 0.0 <= value <= 1.0:
        raise ValidationError(f"{name} must be in [0, 1], got {value}")


def _merge_spans(intervals: list[SpeechInterval], limit: float) -> list[list[float]]:
    """Merge overlapping or touching intervals and clip them to [0, limit).

    Intervals starting at or after ``limit`` are dropped.
    """
    spans = []
    for interval in sorted(intervals, key=lambda i: i.start):
        if interval.start >= limit:
            break
        end = min(interval.end, limit)
        if spans and interval.start <= spans[-1][1]:
            spans[-1][1] = max(spans[-1][1], end)
        else:
            spans.append([interval.start, end])
    return spans


def build_segments(
    intervals: list[SpeechInterval],
    total_duration: float | None,
    duck_volume: float = DUCK_VOLUME,
    normal_volume: float = NORMAL_VOLUME,
) -> list[VolumeSegment]:
    """Build the ordered, gapless segment list covering [0, total_duration).

    Walks the intervals with a cursor: a normal-volume segment fills any gap
    before each interval, a ducked segment covers the interval itself.
    Overlapping or back-to-back intervals merge into one ducked segment and
    anything past the end of the track is clipped, so adjacent segments
    always differ in volume.

    ``total_duration=None`` stops the envelope at the end of the last
    interval; with no intervals that gives an empty list.
    """
    _check_volume("duck_volume", duck_volume)
    _check_volume("normal_volume", normal_volume)

    if total_duration is None:
        if not intervals:
            return []
        limit = max(interval.end for interval in intervals)
    else:
        if not math.isfinite(total_duration) or total_duration <= 0:
            raise ValidationError(f"Total duration must be positive, got {total_duration}")
        limit = float(total_duration)

    if duck_volume == normal_volume:
        # Nothing to alternate between
        return [VolumeSegment(start=0.0, end=limit, volume=normal_volume)]

    segments = []
    current_time = 0.0
    for start, end in _merge_spans(intervals, limit):
        if current_time < start:
            segments.append(VolumeSegment(start=current_time, end=start, volume=normal_volume))
        segments.append(VolumeSegment(start=start, end=end, volume=duck_volume, ducked=True))
        current_time = end

    if current_time < limit:
        segments.append(VolumeSegment(start=current_time, end=limit, volume=normal_volume))

    return segments


def speech_intervals_from_segments(segments: list[VolumeSegment]) -> list[SpeechInterval]:
    """Recover the (merged) speech intervals from a segment list."""
    return [
        SpeechInterval(start=seg.start, duration=seg.duration)
        for seg in segments
        if seg.ducked
    ]


def sample_envelope(segments: list[VolumeSegment], times) -> np.ndarray:
    """Evaluate the step envelope at each time in ``times`` (seconds).

    Times before the first segment take its volume, times at or past the
    end take the last segment's volume.
    """
    if not segments:
        raise ValidationError("Cannot sample an empty envelope")
    times = np.asarray(times, dtype=np.float64)
    starts = np.array([seg.start for seg in segments], dtype=np.float64)
    volumes = np.array([seg.volume for seg in segments], dtype=np.float64)
    idx = np.searchsorted(starts, times, side="right") - 1
    idx = np.clip(idx, 0, len(segments) - 1)
    return volumes[idx]


def build_keyframes(
    segments: list[VolumeSegment],
    fade_in: float = FADE_IN_SECONDS,
    fade_out: float = FADE_OUT_SECONDS,
    duck_volume: float = DUCK_VOLUME,
    normal_volume: float = NORMAL_VOLUME,
) -> list[VolumeKeyframe]:
    """Place fade keyframes around each ducked segment.

    Before a ducked segment that follows a gap: normal volume at
    ``start - fade_out`` (never below 0), ducked volume at ``start``.
    After every ducked segment: ducked volume at ``end``, normal volume at
    ``end + fade_in``. Gives 2-4 keyframes per segment.
    """
    keyframes = []
    cursor = 0.0
    for seg in segments:
        if not seg.ducked:
            continue
        if seg.start > cursor:
            keyframes.append(VolumeKeyframe(time=max(0.0, seg.start - fade_out), volume=normal_volume))
            keyframes.append(VolumeKeyframe(time=seg.start, volume=duck_volume))
        keyframes.append(VolumeKeyframe(time=seg.end, volume=duck_volume))
        keyframes.append(VolumeKeyframe(time=seg.end + fade_in, volume=normal_volume))
        cursor = seg.end + fade_in
    return keyframes
