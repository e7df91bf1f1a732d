"""Render a volume envelope as an ffmpeg audio filter expression.

Two strategies share the same segment list from ``segments.build_segments``:

- ``step``: one gated ``volume`` stage per segment, hard cuts at boundaries.
- ``pulse``: fade keyframes around each ducked segment, rendered as a sum
  of narrow ``between()`` pulses weighted by their target volume.
"""

from enum import Enum

from speech_ducker.constants import PULSE_WIDTH_SECONDS
from speech_ducker.models import VolumeSegment, VolumeKeyframe
from speech_ducker.segments import build_keyframes

PASSTHROUGH_FILTER = "anull"


class FilterMode(str, Enum):
    STEP = "step"
    PULSE = "pulse"


def format_number(value: float) -> str:
    """Render a float for an ffmpeg expression: 2.0 -> "2", 9.90 -> "9.9"."""
    return f"{value:.6f}".rstrip("0").rstrip(".")


def render_step_filter(segments: list[VolumeSegment]) -> str:
    """Chain one ``volume`` stage per segment, each enabled on [start, end).

    The gate is half-open, so for gapless segments exactly one stage is
    active at any t inside the track. Transitions are hard cuts: fade
    durations play no part here; use the pulse strategy for fades.
    """
    if not segments:
        return PASSTHROUGH_FILTER
    stages = [
        f"volume={format_number(seg.volume)}"
        f":enable='gte(t,{format_number(seg.start)})*lt(t,{format_number(seg.end)})'"
        for seg in segments
    ]
    return ",".join(stages)


def render_pulse_filter(
    keyframes: list[VolumeKeyframe],
    pulse_width: float = PULSE_WIDTH_SECONDS,
) -> str:
    """Sum a ``volume * between(t, time, time + pulse_width)`` term per keyframe.

    This is a discrete approximation of a fade, not an interpolation. The
    expression only has a non-zero value inside the pulse windows, so the
    track is audible only at the keyframes themselves; no linear or cosine
    ramp is computed between them.
    """
    if not keyframes:
        return PASSTHROUGH_FILTER
    terms = "+".join(
        f"{format_number(kf.volume)}"
        f"*between(t,{format_number(kf.time)},{format_number(kf.time + pulse_width)})"
        for kf in keyframes
    )
    return f"volume='{terms}':eval=frame"


def synthesize_filter(mode, segments: list[VolumeSegment], config) -> str:
    """Render ``segments`` with the strategy named by ``mode``."""
    mode = FilterMode(mode)
    if mode is FilterMode.STEP:
        return render_step_filter(segments)
    keyframes = build_keyframes(
        segments,
        fade_in=config.fade_in,
        fade_out=config.fade_out,
        duck_volume=config.duck_volume,
        normal_volume=config.normal_volume,
    )
    return render_pulse_filter(keyframes, config.pulse_width)
