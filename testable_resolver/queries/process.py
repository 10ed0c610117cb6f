"""Running external query processes."""

import asyncio
import logging
import os
from collections.abc import Mapping, Sequence
from dataclasses import dataclass

log = logging.getLogger(__name__)


@dataclass(frozen=True, kw_only=True)
class ProcessResult:
    """Captured outcome of a finished process."""

    returncode: int
    stdout: str
    stderr: str


async def run_process(
    argv: Sequence[str],
    *,
    timeout: float,
    env: Mapping[str, str] | None = None,
) -> ProcessResult:
    """Run a process to completion and capture its output.

    Args:
        argv: Executable and its arguments
        timeout: Seconds to wait before the process is killed
        env: Variables added to the current environment

    Raises:
        OSError: If the executable cannot be started
        TimeoutError: If the process does not finish within timeout

    """
    log.debug("Running: %s", " ".join(argv))
    process = await asyncio.create_subprocess_exec(
        *argv,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
        env={**os.environ, **env} if env else None,
    )
    try:
        async with asyncio.timeout(timeout):
            stdout, stderr = await process.communicate()
    except BaseException:
        if process.returncode is None:
            process.kill()
            await process.wait()
        raise

    return ProcessResult(
        returncode=process.returncode if process.returncode is not None else -1,
        stdout=stdout.decode(errors="replace"),
        stderr=stderr.decode(errors="replace"),
    )
