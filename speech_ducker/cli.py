"""CLI entry point: duck a music file under the speech intervals in a JSON file."""

import argparse
import asyncio
import logging
import os
import shutil
import sys

from speech_ducker.config import DuckingConfig, load_config
from speech_ducker.constants import BACKENDS, DEFAULT_BACKEND, FILTER_MODES, VERSION
from speech_ducker.engine import DuckingEngine
from speech_ducker.errors import DuckerError
from speech_ducker.intervals import load_intervals
from speech_ducker.media import probe_duration
from speech_ducker.transcode import get_executor

USAGE = "Usage: speech-ducker <music_file> <speech_data.json> <output_file> [options]"
EXAMPLE = "Example: speech-ducker music.mp3 speech_data.json output_ducked.mp3"


def _check_ffmpeg():
    """Verify ffmpeg is installed."""
    if not shutil.which("ffmpeg"):
        print("Error: ffmpeg is required but not found.", file=sys.stderr)
        print("Install with: brew install ffmpeg", file=sys.stderr)
        raise SystemExit(1)


def _print_error(error: Exception) -> None:
    """Print an error on a single line."""
    message = " ".join(str(error).split())
    print(f"Error: {message}", file=sys.stderr)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="speech-ducker",
        description="Lower background music under speech intervals",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {VERSION}")
    parser.add_argument("music_file", nargs="?", help="Background music file")
    parser.add_argument("speech_data", nargs="?", help="JSON array of {start, duration} records")
    parser.add_argument("output_file", nargs="?", help="Where to write the ducked track")
    parser.add_argument("--mode", choices=FILTER_MODES, help="step: hard cuts (default); pulse: fade keyframes")
    parser.add_argument("--duck-volume", type=float, help="Volume during speech, 0-1 (default 0.2)")
    parser.add_argument("--normal-volume", type=float, help="Volume outside speech, 0-1 (default 1.0)")
    parser.add_argument("--fade-in", type=float, help="Seconds to return to normal volume (pulse mode)")
    parser.add_argument("--fade-out", type=float, help="Seconds to reach ducked volume (pulse mode)")
    parser.add_argument("--codec", help="ffmpeg audio codec (default libmp3lame)")
    parser.add_argument("--bitrate", help="Output bitrate (default 192k)")
    parser.add_argument(
        "--backend",
        choices=[b for b in BACKENDS if b != "dry-run"],
        default=DEFAULT_BACKEND,
        help="How ffmpeg is driven (default pydub)",
    )
    parser.add_argument("--config", help="JSON file with ducking settings")
    parser.add_argument("--dry-run", action="store_true", help="Build the filter but do not transcode")
    parser.add_argument("--print-filter", action="store_true", help="Print the ffmpeg filter and exit")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log each processing step")
    return parser


def _resolve_config(args) -> DuckingConfig:
    base = load_config(args.config) if args.config else DuckingConfig()
    return base.merged(
        mode=args.mode,
        duck_volume=args.duck_volume,
        normal_volume=args.normal_volume,
        fade_in=args.fade_in,
        fade_out=args.fade_out,
        codec=args.codec,
        bitrate=args.bitrate,
    )


def _print_filter(engine: DuckingEngine, args) -> None:
    intervals = load_intervals(args.speech_data)
    total_duration = probe_duration(args.music_file) if engine.config.mode == "step" else None
    print(engine.build_filter(intervals, total_duration))


def main():
    """CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args()

    if not (args.music_file and args.speech_data and args.output_file):
        print(USAGE)
        print(EXAMPLE)
        raise SystemExit(1)

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(message)s",
    )

    if not os.path.exists(args.music_file):
        print(f"Error: Music file not found: {args.music_file}", file=sys.stderr)
        raise SystemExit(1)

    if not os.path.exists(args.speech_data):
        print(f"Error: Speech data file not found: {args.speech_data}", file=sys.stderr)
        raise SystemExit(1)

    try:
        config = _resolve_config(args)
    except (DuckerError, OSError) as e:
        _print_error(e)
        raise SystemExit(1)

    backend = "dry-run" if args.dry_run else args.backend
    transcodes = not (args.dry_run or args.print_filter)
    # step mode probes the track with ffprobe even when not transcoding
    if transcodes or config.mode == "step":
        _check_ffmpeg()

    try:
        engine = DuckingEngine(config, executor=get_executor(backend))
        if args.print_filter:
            _print_filter(engine, args)
            return
        result = asyncio.run(engine.process(args.music_file, args.speech_data, args.output_file))
    except (DuckerError, OSError) as e:
        _print_error(e)
        raise SystemExit(1)

    if args.dry_run:
        print(f"Dry run: would write {result}")
        return

    print(f"\nSuccess! Ducked audio saved to: {result}")
