"""FFmpeg-based audio utilities: probing, silence removal and silence detection."""

from __future__ import annotations

import json
import logging
import re
import shlex
import subprocess
from pathlib import Path
from typing import Any, Mapping

from trimsilence.exceptions import (
    NoAudioStreamError,
    ProbeFailedError,
    ToolTimeoutError,
    TranscodeFailedError,
)
from trimsilence.models.audio import AudioMetadata, EncodingPlan, SilencePeriod
from trimsilence.providers.audio.base import AudioProvider, ProgressCallback
from trimsilence.providers.audio.encoding import MIN_TARGET_KBPS, select_encoding
from trimsilence.utils.ffmpeg import resolve_ffmpeg_bin, resolve_ffprobe_bin
from trimsilence.utils.subprocess import run_subprocess

logger = logging.getLogger(__name__)

_SILENCE_START_RE = re.compile(r"silence_start:\s*(-?[\d.]+)")
_SILENCE_END_RE = re.compile(r"silence_end:\s*(-?[\d.]+)")

_STDERR_TAIL_CHARS = 2000

# ffmpeg output when the selected encoder is not allowed in the target container
_MUX_FAILURE_MARKERS = ("Could not write header", "incorrect codec parameters")

SUPPORTED_OUTPUT_FORMATS = "mp3, m4a, ogg and wav"


def _positive_int(value: Any) -> int | None:
    if value is None:
        return None
    try:
        parsed = int(float(str(value).strip()))
    except (TypeError, ValueError):
        return None
    return parsed if parsed > 0 else None


def _positive_float(value: Any) -> float | None:
    if value is None:
        return None
    try:
        parsed = float(str(value).strip())
    except (TypeError, ValueError):
        return None
    return parsed if parsed > 0 else None


def parse_probe_output(data: Mapping[str, Any]) -> AudioMetadata:
    """Build AudioMetadata from `ffprobe -print_format json -show_format -show_streams`."""
    streams = list(data.get("streams") or [])
    audio = next((s for s in streams if str(s.get("codec_type") or "") == "audio"), None)
    if audio is None:
        raise NoAudioStreamError("No audio stream found")

    fmt = dict(data.get("format") or {})
    duration = _positive_float(fmt.get("duration")) or _positive_float(audio.get("duration"))

    # stream bitrate -> container bitrate -> size * 8 / duration
    bitrate = _positive_int(audio.get("bit_rate"))
    if bitrate is None:
        bitrate = _positive_int(fmt.get("bit_rate"))
    if bitrate is None:
        size = _positive_int(fmt.get("size"))
        fmt_duration = _positive_float(fmt.get("duration"))
        if size is not None and fmt_duration is not None:
            bitrate = int(size * 8 // fmt_duration)

    return AudioMetadata(
        codec=str(audio.get("codec_name") or ""),
        sample_rate=_positive_int(audio.get("sample_rate")) or 0,
        channels=_positive_int(audio.get("channels")) or 0,
        bitrate=bitrate,
        duration_s=duration,
    )


def parse_silence_periods(stderr_text: str) -> list[SilencePeriod]:
    """Pair `silence_start`/`silence_end` lines from silencedetect output."""
    periods: list[SilencePeriod] = []
    current_start: float | None = None
    for line in stderr_text.splitlines():
        start_match = _SILENCE_START_RE.search(line)
        if start_match:
            current_start = max(0.0, float(start_match.group(1)))
        end_match = _SILENCE_END_RE.search(line)
        if end_match and current_start is not None:
            periods.append(SilencePeriod(start=current_start, end=float(end_match.group(1))))
            current_start = None
    return periods


class _ProgressParser:
    """Turns `-progress pipe:1` key=value lines into percent updates."""

    def __init__(self, duration_s: float | None, callback: ProgressCallback | None) -> None:
        self.duration_s = duration_s
        self.callback = callback
        self.out_time_s: float | None = None
        self.last_percent: float | None = None

    def feed(self, line: str) -> None:
        key, sep, value = line.partition("=")
        if not sep:
            return
        key = key.strip()
        value = value.strip()
        if key in {"out_time_us", "out_time_ms"}:
            micros = _positive_int(value)
            if micros is not None:
                self.out_time_s = micros / 1_000_000
        elif key == "progress":
            self._emit(final=value == "end")

    def _emit(self, *, final: bool) -> None:
        percent: float | None = None
        if final:
            percent = 100.0
        elif self.duration_s and self.out_time_s is not None:
            percent = min(100.0, self.out_time_s / self.duration_s * 100)
        if percent is not None and percent == self.last_percent:
            return
        self.last_percent = percent
        if percent is None:
            message = f"processed {self.out_time_s or 0.0:.1f}s"
        else:
            message = f"Processing: {round(percent)}% done"
        logger.debug("%s", message)
        if self.callback is not None:
            try:
                self.callback(percent, message)
            except Exception:
                logger.exception("progress callback failed")


def _stderr_tail(stderr: bytes) -> str:
    text = stderr.decode(errors="ignore").strip()
    return text[-_STDERR_TAIL_CHARS:]


def _transcode_failure_message(
    returncode: int, stderr_tail: str, plan: EncodingPlan, output_path: str
) -> str:
    """Client-facing summary; the raw stderr (with server paths) only goes to the log."""
    if any(marker in stderr_tail for marker in _MUX_FAILURE_MARKERS):
        container = Path(output_path).suffix.lstrip(".").lower() or "output"
        return (
            f"ffmpeg could not write {plan.codec} audio into the {container} container; "
            f"supported formats are {SUPPORTED_OUTPUT_FORMATS}"
        )
    return f"ffmpeg failed (code={returncode})"


class FFmpegProvider(AudioProvider):
    def __init__(
        self,
        ffmpeg_bin: str = "ffmpeg",
        ffprobe_bin: str = "ffprobe",
        *,
        silence_threshold_db: float = -30.0,
        min_silence_s: float = 0.5,
        bitrate_mode: str = "source",
        min_bitrate_kbps: int = MIN_TARGET_KBPS,
        probe_timeout_s: float | None = 30.0,
        transcode_timeout_s: float | None = 600.0,
    ) -> None:
        self.ffmpeg_bin = resolve_ffmpeg_bin(ffmpeg_bin)
        self.ffprobe_bin = resolve_ffprobe_bin(ffprobe_bin)
        self.silence_threshold_db = float(silence_threshold_db)
        self.min_silence_s = float(min_silence_s)
        self.bitrate_mode = bitrate_mode
        self.min_bitrate_kbps = int(min_bitrate_kbps)
        self.probe_timeout_s = probe_timeout_s
        self.transcode_timeout_s = transcode_timeout_s

    @property
    def silenceremove_filter(self) -> str:
        return (
            "silenceremove=stop_periods=-1"
            f":stop_duration={self.min_silence_s:g}"
            f":stop_threshold={self.silence_threshold_db:g}dB"
        )

    @property
    def silencedetect_filter(self) -> str:
        return f"silencedetect=noise={self.silence_threshold_db:g}dB:duration={self.min_silence_s:g}"

    async def probe(self, path: str) -> AudioMetadata:
        args = [
            self.ffprobe_bin,
            "-v",
            "error",
            "-print_format",
            "json",
            "-show_format",
            "-show_streams",
            str(path),
        ]
        try:
            result = await run_subprocess(args, timeout_s=self.probe_timeout_s)
        except FileNotFoundError as exc:
            raise ProbeFailedError(
                f"ffprobe binary not found: {self.ffprobe_bin}. "
                "Install ffmpeg and ensure it is in PATH (or set AUDIO_FFPROBE_BIN)."
            ) from exc
        except subprocess.TimeoutExpired as exc:
            raise ProbeFailedError(f"ffprobe timed out after {exc.timeout:g}s") from exc

        if result.returncode != 0:
            raise ProbeFailedError(
                f"ffprobe failed (code={result.returncode}): {_stderr_tail(result.stderr)}"
            )
        try:
            data = json.loads(result.stdout.decode(errors="ignore") or "{}")
        except json.JSONDecodeError as exc:
            raise ProbeFailedError(f"ffprobe returned invalid JSON: {exc}") from exc
        if not isinstance(data, dict):
            raise ProbeFailedError("ffprobe returned unexpected output")
        return parse_probe_output(data)

    async def remove_silence(
        self,
        input_path: str,
        output_path: str,
        metadata: AudioMetadata | None = None,
        *,
        progress: ProgressCallback | None = None,
    ) -> None:
        """Strip every silent run longer than `min_silence_s` and re-encode.

        Writes exactly one file at `output_path` on success. On failure the
        output may be partially written and must be discarded by the caller.
        """
        input_path = str(input_path)
        output_path = str(output_path)
        Path(output_path).parent.mkdir(parents=True, exist_ok=True)

        plan = select_encoding(
            output_path,
            metadata,
            mode=self.bitrate_mode,
            min_kbps=self.min_bitrate_kbps,
        )
        args = [
            self.ffmpeg_bin,
            "-hide_banner",
            "-nostats",
            "-nostdin",
            "-y",
            "-i",
            input_path,
            "-vn",
            "-af",
            self.silenceremove_filter,
            *plan.to_ffmpeg_args(),
            "-progress",
            "pipe:1",
            output_path,
        ]

        logger.info("ffmpeg command: %s", shlex.join(args))
        if metadata is not None:
            original = f"{metadata.bitrate_kbps}kbps" if metadata.bitrate else "unknown"
            logger.info("original bitrate: %s", original)
        if plan.bitrate_kbps is not None:
            logger.info("target %s bitrate: %dkbps", plan.codec, plan.bitrate_kbps)
        else:
            logger.info("target codec %s (encoder default bitrate)", plan.codec)

        parser = _ProgressParser(metadata.duration_s if metadata else None, progress)
        try:
            result = await run_subprocess(
                args,
                timeout_s=self.transcode_timeout_s,
                on_stdout_line=parser.feed,
            )
        except FileNotFoundError as exc:
            raise TranscodeFailedError(
                f"ffmpeg binary not found: {self.ffmpeg_bin}. "
                "Install ffmpeg and ensure it is in PATH (or install `imageio-ffmpeg` in the env, "
                "or set AUDIO_FFMPEG_BIN)."
            ) from exc
        except subprocess.TimeoutExpired as exc:
            raise ToolTimeoutError("ffmpeg", float(exc.timeout)) from exc

        if result.returncode != 0:
            tail = _stderr_tail(result.stderr)
            logger.error(
                "ffmpeg failed (code=%s) for %s:\n%s", result.returncode, input_path, tail
            )
            raise TranscodeFailedError(
                _transcode_failure_message(result.returncode, tail, plan, output_path)
            )
        logger.info("audio processing finished: %s", output_path)

    async def detect_silence(self, path: str) -> list[SilencePeriod]:
        args = [
            self.ffmpeg_bin,
            "-hide_banner",
            "-nostats",
            "-nostdin",
            "-i",
            str(path),
            "-af",
            self.silencedetect_filter,
            "-f",
            "null",
            "-",
        ]
        try:
            result = await run_subprocess(args, timeout_s=self.transcode_timeout_s)
        except FileNotFoundError as exc:
            raise TranscodeFailedError(f"ffmpeg binary not found: {self.ffmpeg_bin}") from exc
        except subprocess.TimeoutExpired as exc:
            raise ToolTimeoutError("ffmpeg", float(exc.timeout)) from exc

        if result.returncode != 0:
            logger.error(
                "silencedetect failed (code=%s) for %s:\n%s",
                result.returncode,
                path,
                _stderr_tail(result.stderr),
            )
            raise TranscodeFailedError(f"silencedetect failed (code={result.returncode})")
        periods = parse_silence_periods(result.stderr.decode(errors="ignore"))
        logger.info(
            "silence detection: found %d periods (noise=%gdB, d=%gs)",
            len(periods),
            self.silence_threshold_db,
            self.min_silence_s,
        )
        return periods
