"""Subprocess execution with a hard timeout and bounded output."""

import asyncio
import os
import signal
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Sequence

from src.core.exceptions import ProcessLaunchError
from src.core.logging import get_logger

logger = get_logger("process")

DEFAULT_MAX_OUTPUT_BYTES = 10 * 1024 * 1024
_CHUNK_SIZE = 64 * 1024


@dataclass(frozen=True)
class ProcessResult:
    """Outcome of one subprocess run."""

    stdout: str
    stderr: str
    exit_code: int
    timed_out: bool = False
    output_truncated: bool = False

    @property
    def ok(self) -> bool:
        return self.exit_code == 0 and not self.timed_out and not self.output_truncated


def _kill_group(proc: asyncio.subprocess.Process) -> None:
    """Kill the process and everything it spawned."""
    if proc.returncode is not None:
        return
    try:
        os.killpg(proc.pid, signal.SIGKILL)
    except (ProcessLookupError, PermissionError):
        pass


async def run_process(
    args: Sequence[str],
    cwd: str | Path | None = None,
    timeout: float | None = None,
    max_output_bytes: int = DEFAULT_MAX_OUTPUT_BYTES,
    env: Mapping[str, str] | None = None,
) -> ProcessResult:
    """Run a command and capture its output.

    The process runs in its own session so a timeout or an output overflow
    kills the whole process group. Output collected before the kill is kept.

    Raises:
        ProcessLaunchError: If the executable cannot be started.
    """
    try:
        proc = await asyncio.create_subprocess_exec(
            *args,
            cwd=str(cwd) if cwd else None,
            env=dict(env) if env is not None else None,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            start_new_session=True,
        )
    except OSError as e:
        raise ProcessLaunchError(f"Cannot start {args[0]}: {e}") from e

    stdout = bytearray()
    stderr = bytearray()
    overflow = False

    async def drain(stream: asyncio.StreamReader, buf: bytearray) -> None:
        nonlocal overflow
        while True:
            chunk = await stream.read(_CHUNK_SIZE)
            if not chunk:
                return
            room = max_output_bytes - len(stdout) - len(stderr)
            if len(chunk) > room:
                buf.extend(chunk[: max(room, 0)])
                overflow = True
                _kill_group(proc)
                return
            buf.extend(chunk)

    async def communicate() -> None:
        await asyncio.gather(drain(proc.stdout, stdout), drain(proc.stderr, stderr))
        await proc.wait()

    timed_out = False
    try:
        await asyncio.wait_for(communicate(), timeout=timeout)
    except asyncio.TimeoutError:
        timed_out = True
        logger.warning(f"Process {args[0]} exceeded {timeout:g}s, killing")
        _kill_group(proc)
        await proc.wait()
    except asyncio.CancelledError:
        _kill_group(proc)
        await proc.wait()
        raise

    if overflow:
        logger.warning(f"Process {args[0]} exceeded {max_output_bytes} output bytes, killed")

    return ProcessResult(
        stdout=stdout.decode("utf-8", errors="replace"),
        stderr=stderr.decode("utf-8", errors="replace"),
        exit_code=proc.returncode if proc.returncode is not None else -1,
        timed_out=timed_out,
        output_truncated=overflow,
    )
