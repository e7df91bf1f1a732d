"""Ducking pipeline: intervals -> duration -> segments -> filter -> transcode."""

import asyncio
import logging
import os

from speech_ducker.config import DuckingConfig
from speech_ducker.constants import OUTPUT_SUFFIX
from speech_ducker.errors import ProcessingError
from speech_ducker.intervals import load_intervals, parse_intervals
from speech_ducker.media import probe_duration
from speech_ducker.models import SpeechInterval
from speech_ducker.segments import build_segments
from speech_ducker.synthesis import FilterMode, synthesize_filter
from speech_ducker.transcode import PydubExecutor, TranscodeRequest

logger = logging.getLogger(__name__)


class DuckingEngine:
    """Duck a music track under speech intervals and write the result.

    ``executor`` is anything with ``run(request, listener) -> path`` (see
    ``speech_ducker.transcode``); ``probe`` maps a media path to its duration
    in seconds. Both default to the pydub/ffprobe implementations.
    """

    def __init__(self, config: DuckingConfig | None = None, executor=None, probe=probe_duration):
        self.config = (config or DuckingConfig()).validate()
        self.executor = executor or PydubExecutor()
        self.probe = probe
        os.makedirs(self.config.output_dir, exist_ok=True)

    def build_filter(
        self,
        intervals: list[SpeechInterval],
        total_duration: float | None,
        mode: FilterMode | str | None = None,
    ) -> str:
        """Build the segment envelope and render it with the selected strategy."""
        mode = FilterMode(mode or self.config.mode)
        segments = build_segments(
            intervals,
            total_duration,
            duck_volume=self.config.duck_volume,
            normal_volume=self.config.normal_volume,
        )
        return synthesize_filter(mode, segments, self.config)

    def default_output_path(self, music_path: str) -> str:
        stem = os.path.splitext(os.path.basename(music_path))[0]
        return os.path.join(self.config.output_dir, f"{stem}{OUTPUT_SUFFIX}.mp3")

    async def process(
        self,
        music_path: str,
        intervals_input,
        output_path: str | None = None,
        mode: FilterMode | str | None = None,
    ) -> str:
        """Run the full pipeline and return the absolute output path.

        ``intervals_input`` is either a path to a speech data JSON file or
        already-deserialized speech data. Step mode probes the track for its
        duration; pulse mode does not need it. Every failure is re-raised as
        ProcessingError with the original exception chained.
        """
        try:
            mode = FilterMode(mode or self.config.mode)

            logger.info("Loading speech data...")
            intervals = self._load_intervals(intervals_input)

            total_duration = None
            if mode is FilterMode.STEP:
                logger.info("Getting audio duration...")
                total_duration = await asyncio.to_thread(self.probe, music_path)
                if self.config.fade_in or self.config.fade_out:
                    logger.info("Step mode applies hard cuts; fade durations only affect pulse mode")

            logger.info("Generating volume filter...")
            audio_filter = self.build_filter(intervals, total_duration, mode)
            logger.debug("Volume filter: %s", audio_filter)

            output_path = output_path or self.default_output_path(music_path)
            os.makedirs(os.path.dirname(os.path.abspath(output_path)), exist_ok=True)

            request = TranscodeRequest(
                input_path=music_path,
                output_path=output_path,
                audio_filter=audio_filter,
                codec=self.config.codec,
                bitrate=self.config.bitrate,
                duration=total_duration,
            )
            logger.info("Processing audio with %s ducking...", mode.value)
            return await asyncio.to_thread(self.executor.run, request, self._on_transcode_event)
        except Exception as e:
            raise ProcessingError(f"Audio processing failed: {e}") from e

    async def process_smooth(self, music_path: str, intervals_input, output_path: str | None = None) -> str:
        """Same as process() with the pulse (keyframe) strategy."""
        return await self.process(music_path, intervals_input, output_path, mode=FilterMode.PULSE)

    def _load_intervals(self, intervals_input) -> list[SpeechInterval]:
        if isinstance(intervals_input, (str, os.PathLike)):
            return load_intervals(intervals_input)
        return parse_intervals(intervals_input)

    def _on_transcode_event(self, event: str, payload: dict) -> None:
        if event == "start":
            if "command" in payload:
                logger.debug("FFmpeg command: %s", payload["command"])
            else:
                logger.debug("Transcoding %s", payload.get("input"))
        elif event == "progress":
            logger.info("Processing: %d%%", payload.get("percent", 0))
        elif event == "end":
            logger.info("Audio ducking completed successfully!")
        elif event == "error":
            # the failure itself surfaces as ProcessingError
            logger.debug("Error processing audio: %s", payload.get("message"))
