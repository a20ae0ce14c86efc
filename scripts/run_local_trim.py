from __future__ import annotations

import argparse
import asyncio
import mimetypes
import shutil
from pathlib import Path

from trimsilence.config import Settings
from trimsilence.models.artifact import StoredArtifact
from trimsilence.providers import get_audio_provider
from trimsilence.services import TrimService
from trimsilence.storage import get_artifact_store
from trimsilence.storage.artifact_store import unique_name
from trimsilence.utils.logging_setup import setup_logging


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Trim silence from a local audio file.")
    parser.add_argument("--audio", required=True, help="Path to local audio file")
    parser.add_argument("--threshold-db", type=float, default=None, help="Silence threshold in dB")
    parser.add_argument("--min-silence-s", type=float, default=None, help="Minimum silence duration")
    parser.add_argument(
        "--bitrate-mode",
        choices=["source", "fixed"],
        default=None,
        help="Keep the source bitrate or re-encode at a fixed rate",
    )
    parser.add_argument(
        "--detect-only",
        action="store_true",
        help="Only list silent periods, do not write a trimmed file",
    )
    return parser.parse_args()


def _print_progress(percent: float | None, message: str) -> None:
    print(f"[{'--' if percent is None else f'{percent:5.1f}'}] {message}")


async def _run() -> int:
    args = _parse_args()
    audio_path = Path(args.audio)
    if not audio_path.is_file():
        raise SystemExit(f"Audio not found: {audio_path}")

    settings = Settings()
    setup_logging(settings.logging, log_dir=settings.log_dir, include_server=False)
    if args.threshold_db is not None:
        settings.audio.silence_threshold_db = float(args.threshold_db)
    if args.min_silence_s is not None:
        settings.audio.min_silence_s = float(args.min_silence_s)
    if args.bitrate_mode is not None:
        settings.audio.bitrate_mode = str(args.bitrate_mode)

    store = get_artifact_store(settings)
    store.ensure_dirs()
    provider = get_audio_provider(settings.audio.model_dump())
    service = TrimService(settings, store, provider)

    # cleanup only ever removes the staged copy
    staged = store.uploads_dir / unique_name(audio_path.name)
    shutil.copyfile(audio_path, staged)
    upload = StoredArtifact(
        filename=staged.name,
        path=staged,
        original_filename=audio_path.name,
        content_type=mimetypes.guess_type(audio_path.name)[0] or "application/octet-stream",
        size_bytes=staged.stat().st_size,
    )

    try:
        if args.detect_only:
            periods = await service.detect_silence(upload)
            for p in periods:
                print(f"silence {p.start:.3f}s -> {p.end:.3f}s ({p.duration:.3f}s)")
            print(f"total_silence={sum(p.duration for p in periods):.3f}s periods={len(periods)}")
            return 0

        result = await service.handle_upload(upload, progress=_print_progress)
        print(
            f"output={store.output_dir / result.output_filename} "
            f"original={result.original_size_bytes} new={result.new_size_bytes} "
            f"reduction={result.size_reduction}"
        )
        return 0
    finally:
        await store.aclose()
        await provider.close()


def main() -> None:
    raise SystemExit(asyncio.run(_run()))


if __name__ == "__main__":
    main()
