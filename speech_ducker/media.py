"""Read track duration with ffprobe through pydub."""

import logging
import math
import os

from pydub.utils import mediainfo

from speech_ducker.errors import ProbeError

logger = logging.getLogger(__name__)


def probe_duration(audio_path: str) -> float:
    """Return the duration of ``audio_path`` in seconds.

    Raises ProbeError if the file is missing, ffprobe cannot run, or the
    container reports no usable duration.
    """
    if not os.path.exists(audio_path):
        raise ProbeError(f"Audio file not found: {audio_path}")

    try:
        info = mediainfo(audio_path)
    except OSError as e:
        raise ProbeError(f"Could not run ffprobe on {audio_path}: {e}") from e

    raw = info.get("duration")
    try:
        duration = float(raw)
    except (TypeError, ValueError):
        raise ProbeError(f"No duration reported for {audio_path} (unreadable or unsupported media)")

    if not math.isfinite(duration) or duration <= 0:
        raise ProbeError(f"Invalid duration {duration} for {audio_path}")

    logger.debug("Probed %s: %.3fs", audio_path, duration)
    return duration
