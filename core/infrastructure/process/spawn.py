"""
Subprocess execution with output streamed into a progress log.

No shell is involved: the command and its arguments are passed as a list.
"""
import asyncio
import contextlib
import logging
import os
from pathlib import Path
from typing import Awaitable, Callable, Mapping, Optional, Sequence, Union

from core.application.interfaces import IProgressLog
from core.domain.entities import ProcessResult


logger = logging.getLogger(__name__)

# Decides from the exit code whether the process failed.
ErrorFinder = Callable[[int], bool]

# Exit code reported when the executable cannot be launched at all.
LAUNCH_FAILURE_CODE = 127

READ_CHUNK_SIZE = 64 * 1024


def _non_zero(code: int) -> bool:
    return code != 0


def _redact(text: str, secrets: Sequence[str]) -> str:
    for secret in secrets:
        if secret:
            text = text.replace(secret, "***")
    return text


async def _stream_lines(
    stream: asyncio.StreamReader, emit: Callable[[bytes], Awaitable[None]]
) -> None:
    """Split ``stream`` into lines of any length and pass each to ``emit``."""
    pending = bytearray()
    while True:
        chunk = await stream.read(READ_CHUNK_SIZE)
        if not chunk:
            break
        pending.extend(chunk)
        *lines, rest = pending.split(b"\n")
        pending = bytearray(rest)
        for line in lines:
            await emit(bytes(line))
    if pending:
        await emit(bytes(pending))


async def spawn_and_watch(
    command: str,
    args: Sequence[str],
    cwd: Union[str, Path],
    log: IProgressLog,
    error_finder: Optional[ErrorFinder] = None,
    env: Optional[Mapping[str, str]] = None,
    secrets: Sequence[str] = (),
) -> ProcessResult:
    """
    Run a command to completion, writing each output line to ``log``.

    Args:
        command: Executable name or path
        args: Arguments
        cwd: Working directory
        log: Progress log receiving the command line and its output
        error_finder: Failure predicate on the exit code (non-zero by default)
        env: Extra environment variables
        secrets: Values masked wherever they would be echoed to the log

    Returns:
        ProcessResult with the exit code; ``code`` is 0 only when the error
        finder does not flag the exit code.
    """
    error_finder = error_finder or _non_zero
    command_line = _redact(" ".join([command, *args]), secrets)
    await log.write(f"Running: {command_line}")
    logger.info("Running '%s' in %s", command_line, cwd)

    process_env = None
    if env:
        process_env = {**os.environ, **env}

    try:
        process = await asyncio.create_subprocess_exec(
            command,
            *args,
            cwd=str(cwd),
            env=process_env,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.STDOUT,
        )
    except OSError as e:
        message = f"Unable to launch '{command}': {e}"
        logger.warning(message)
        await log.write(message)
        return ProcessResult(code=LAUNCH_FAILURE_CODE, message=message)

    async def emit(raw: bytes) -> None:
        await log.write(_redact(raw.decode(errors="replace").rstrip("\r"), secrets))

    try:
        await _stream_lines(process.stdout, emit)
        exit_code = await process.wait()
    finally:
        if process.returncode is None:
            with contextlib.suppress(ProcessLookupError):
                process.kill()
            await process.wait()

    if error_finder(exit_code):
        message = f"'{command_line}' failed with exit code {exit_code}"
        await log.write(message)
        logger.warning(message)
        return ProcessResult(code=exit_code if exit_code != 0 else 1, message=message)

    return ProcessResult(code=0, message=None)
