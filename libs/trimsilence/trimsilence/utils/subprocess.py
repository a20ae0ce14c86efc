"""Async-friendly subprocess helpers.

We prefer blocking `subprocess` calls executed via `asyncio.to_thread()` instead of
`asyncio.create_subprocess_exec()` since some runtime environments have flaky
child watchers that can cause `.wait()`/`.communicate()` to hang.

The child is killed when `timeout_s` expires or when the awaiting task is
cancelled, so a hung ffmpeg never outlives its request. A cancelled child is
reaped before the cancellation propagates.

stdin is always /dev/null: ffmpeg treats bytes on stdin as interactive keys
(`q` ends the encode early with exit code 0).
"""

from __future__ import annotations

import asyncio
import subprocess
import threading
from dataclasses import dataclass
from typing import Callable, Sequence

LineCallback = Callable[[str], None]


@dataclass(frozen=True)
class RunResult:
    returncode: int
    stdout: bytes
    stderr: bytes


def _collect(proc: subprocess.Popen[bytes], on_stdout_line: LineCallback | None) -> tuple[bytes, bytes]:
    if on_stdout_line is None or proc.stdout is None:
        stdout, stderr = proc.communicate()
        return stdout or b"", stderr or b""

    # stderr is drained on a side thread so a chatty child can't block on a full pipe.
    stderr_chunks: list[bytes] = []

    def _drain_stderr() -> None:
        if proc.stderr is not None:
            stderr_chunks.append(proc.stderr.read())

    drain = threading.Thread(target=_drain_stderr, daemon=True)
    drain.start()

    stdout_lines: list[bytes] = []
    for raw in proc.stdout:
        stdout_lines.append(raw)
        on_stdout_line(raw.decode(errors="ignore").rstrip("\r\n"))
    proc.wait()
    drain.join()
    return b"".join(stdout_lines), b"".join(stderr_chunks)


async def run_subprocess(
    args: Sequence[str],
    *,
    capture_output: bool = True,
    check: bool = False,
    timeout_s: float | None = None,
    on_stdout_line: LineCallback | None = None,
) -> RunResult:
    """Run `args` to completion.

    `on_stdout_line` is invoked from a worker thread for every stdout line as it
    arrives (requires `capture_output`).

    Raises:
        FileNotFoundError: the executable does not exist.
        subprocess.TimeoutExpired: `timeout_s` elapsed; the child was killed.
        subprocess.CalledProcessError: `check=True` and the exit code is non-zero.
    """
    argv = [str(a) for a in args]
    proc = subprocess.Popen(
        argv,
        stdin=subprocess.DEVNULL,
        stdout=subprocess.PIPE if capture_output else subprocess.DEVNULL,
        stderr=subprocess.PIPE if capture_output else subprocess.DEVNULL,
    )

    timed_out = threading.Event()

    def _kill_on_timeout() -> None:
        timed_out.set()
        proc.kill()

    timer: threading.Timer | None = None
    if timeout_s is not None:
        timer = threading.Timer(float(timeout_s), _kill_on_timeout)
        timer.daemon = True
        timer.start()

    try:
        stdout, stderr = await asyncio.to_thread(
            _collect, proc, on_stdout_line if capture_output else None
        )
    except asyncio.CancelledError:
        proc.kill()
        await asyncio.to_thread(proc.wait)
        raise
    finally:
        if timer is not None:
            timer.cancel()

    if timed_out.is_set():
        raise subprocess.TimeoutExpired(argv, float(timeout_s or 0), output=stdout, stderr=stderr)

    returncode = int(proc.returncode if proc.returncode is not None else -1)
    if check and returncode != 0:
        raise subprocess.CalledProcessError(returncode, argv, output=stdout, stderr=stderr)
    return RunResult(returncode=returncode, stdout=stdout, stderr=stderr)
