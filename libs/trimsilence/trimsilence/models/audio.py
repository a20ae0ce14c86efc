"""Audio models for probing, encoding and silence detection."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class AudioMetadata:
    """Structural metadata of the first audio stream of a file."""

    codec: str
    sample_rate: int
    channels: int
    bitrate: int | None = None  # bits per second
    duration_s: float | None = None

    @property
    def bitrate_kbps(self) -> int | None:
        if self.bitrate is None:
            return None
        return int(self.bitrate) // 1000

    def to_dict(self) -> dict[str, object]:
        return {
            "codec": self.codec,
            "sample_rate": self.sample_rate,
            "channels": self.channels,
            "bitrate": self.bitrate,
            "duration_s": self.duration_s,
        }


@dataclass(frozen=True)
class SilencePeriod:
    start: float
    end: float

    @property
    def duration(self) -> float:
        return max(0.0, float(self.end) - float(self.start))


@dataclass(frozen=True)
class EncodingPlan:
    """Codec selection for one transcode (audio filters rule out stream copy)."""

    codec: str
    bitrate_kbps: int | None = None
    options: tuple[str, ...] = field(default_factory=tuple)

    def to_ffmpeg_args(self) -> list[str]:
        args = ["-c:a", self.codec]
        if self.bitrate_kbps is not None:
            args += ["-b:a", f"{int(self.bitrate_kbps)}k"]
        args += list(self.options)
        return args
