"""Transcode executors: hand the music file and filter to an external engine.

Every executor takes a TranscodeRequest and an optional listener called as
``listener(event, payload)`` with events "start", "progress", "end" and
"error". The return value is the absolute output path.
"""

import os
import subprocess
import tempfile
from dataclasses import dataclass

from pydub import AudioSegment
from pydub.exceptions import CouldntDecodeError, CouldntEncodeError

from speech_ducker.errors import TranscodeError, ValidationError


@dataclass
class TranscodeRequest:
    input_path: str
    output_path: str
    audio_filter: str
    codec: str
    bitrate: str
    duration: float | None = None   # seconds, used for progress percentages


def _noop(event: str, payload: dict) -> None:
    pass


def _output_format(output_path: str) -> str:
    ext = os.path.splitext(output_path)[1].lstrip(".").lower()
    return ext or "mp3"


def build_ffmpeg_command(request: TranscodeRequest, binary: str = "ffmpeg") -> list[str]:
    """Build the ffmpeg argv for a request (progress goes to stdout)."""
    return [
        binary, "-y", "-hide_banner", "-loglevel", "error",
        "-i", request.input_path,
        "-af", request.audio_filter,
        "-c:a", request.codec,
        "-b:a", request.bitrate,
        "-progress", "pipe:1", "-nostats",
        request.output_path,
    ]


class PydubExecutor:
    """Decode with pydub and re-encode through ffmpeg with ``-af <filter>``.

    pydub does not report encoder progress, so listeners get a single 100%
    progress event once the export finishes.
    """

    def run(self, request: TranscodeRequest, listener=None) -> str:
        notify = listener or _noop
        output_path = os.path.abspath(request.output_path)
        # pydub builds its own ffmpeg argv, so there is no command line to report
        notify("start", {"input": request.input_path})

        try:
            audio = AudioSegment.from_file(request.input_path)
            handle = audio.export(
                output_path,
                format=_output_format(output_path),
                codec=request.codec,
                bitrate=request.bitrate,
                parameters=["-af", request.audio_filter],
            )
            handle.close()
        except (CouldntDecodeError, CouldntEncodeError, OSError) as e:
            notify("error", {"message": str(e)})
            raise TranscodeError(
                f"ffmpeg failed for {request.input_path}: {last_stderr_line(str(e))}",
                stderr=str(e),
            ) from e

        notify("progress", {"percent": 100})
        notify("end", {"output": output_path})
        return output_path


class FfmpegExecutor:
    """Run ffmpeg directly and stream ``-progress`` output to the listener."""

    def __init__(self, binary: str | None = None):
        self.binary = binary or AudioSegment.converter

    def run(self, request: TranscodeRequest, listener=None) -> str:
        notify = listener or _noop
        output_path = os.path.abspath(request.output_path)
        cmd = build_ffmpeg_command(request, self.binary)
        cmd[-1] = output_path
        notify("start", {"command": " ".join(cmd)})

        # stderr goes to a temp file so a flood of decode errors cannot fill
        # the pipe while stdout is being read
        with tempfile.TemporaryFile(mode="w+") as err_file:
            try:
                proc = subprocess.Popen(
                    cmd,
                    stdout=subprocess.PIPE,
                    stderr=err_file,
                    text=True,
                )
            except OSError as e:
                notify("error", {"message": str(e)})
                raise TranscodeError(f"Could not start {self.binary}: {e}") from e

            last_percent = None
            with proc.stdout:
                for line in proc.stdout:
                    percent = _parse_progress(line, request.duration)
                    if percent is not None and percent != last_percent:
                        last_percent = percent
                        notify("progress", {"percent": percent})

            returncode = proc.wait()
            err_file.seek(0)
            stderr = err_file.read()

        if returncode != 0:
            notify("error", {"message": stderr.strip(), "returncode": returncode})
            raise TranscodeError(
                f"ffmpeg exited with code {returncode}: {last_stderr_line(stderr)}",
                stderr=stderr,
                returncode=returncode,
            )

        notify("end", {"output": output_path})
        return output_path


def last_stderr_line(stderr: str) -> str:
    """Last non-empty line of ffmpeg output, usually the actual error."""
    lines = [line.strip() for line in stderr.splitlines() if line.strip()]
    return lines[-1] if lines else "no error output"


def _parse_progress(line: str, duration: float | None) -> int | None:
    """Turn an ``out_time_ms=<microseconds>`` progress line into a percentage."""
    if not duration or not line.startswith("out_time_ms="):
        return None
    try:
        seconds = int(line.split("=", 1)[1]) / 1_000_000
    except ValueError:
        return None
    return max(0, min(100, round(seconds / duration * 100)))


class DryRunExecutor:
    """Record requests without touching the filesystem."""

    def __init__(self):
        self.requests: list[TranscodeRequest] = []

    def run(self, request: TranscodeRequest, listener=None) -> str:
        notify = listener or _noop
        output_path = os.path.abspath(request.output_path)
        notify("start", {"command": " ".join(build_ffmpeg_command(request))})
        self.requests.append(request)
        notify("end", {"output": output_path})
        return output_path


EXECUTORS = {
    "pydub": PydubExecutor,
    "ffmpeg": FfmpegExecutor,
    "dry-run": DryRunExecutor,
}


def get_executor(name: str):
    """Instantiate an executor by backend name."""
    try:
        return EXECUTORS[name]()
    except KeyError:
        raise ValidationError(
            f"Unknown backend: {name} (choose from {', '.join(EXECUTORS)})"
        ) from None
