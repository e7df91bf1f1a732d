"""Data models for speech ducking."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class SpeechInterval:
    start: float       # seconds from track start
    duration: float    # seconds, > 0
    extra: dict = field(default_factory=dict, compare=False)  # presentation fields, ignored

    @property
    def end(self) -> float:
        return self.start + self.duration


@dataclass(frozen=True)
class VolumeSegment:
    start: float
    end: float
    volume: float      # 0.0–1.0
    ducked: bool = False

    @property
    def duration(self) -> float:
        return self.end - self.start


@dataclass(frozen=True)
class VolumeKeyframe:
    time: float
    volume: float
