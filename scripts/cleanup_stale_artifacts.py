#!/usr/bin/env python3
"""Remove uploads and trimmed outputs left behind by earlier server runs."""

from __future__ import annotations

import argparse
import asyncio

from trimsilence.config import Settings
from trimsilence.storage import get_artifact_store


async def _run(*, dry_run: bool, max_age_s: float | None) -> None:
    settings = Settings()
    store = get_artifact_store(settings)
    age = float(max_age_s if max_age_s is not None else settings.cleanup.stale_after_s)

    stale = await store.sweep_stale(age, dry_run=dry_run)

    print(f"Uploads dir: {store.uploads_dir}")
    print(f"Output dir: {store.output_dir}")
    print(f"Stale artifacts (older than {age:g}s): {len(stale)}")

    if not stale:
        print("No stale artifacts to clean up.")
        return

    for path in stale:
        if dry_run:
            print(f"[DRY-RUN] Would delete: {path}")
        else:
            print(f"Deleted {path}")


def main() -> None:
    parser = argparse.ArgumentParser()
    parser.add_argument("--dry-run", action="store_true", help="Only list, don't delete")
    parser.add_argument(
        "--max-age-s",
        type=float,
        default=None,
        help="Age threshold in seconds (defaults to CLEANUP_STALE_AFTER_S)",
    )
    args = parser.parse_args()
    asyncio.run(_run(dry_run=bool(args.dry_run), max_age_s=args.max_age_s))


if __name__ == "__main__":
    main()
