"""Runs external commands, capturing their diagnostic output."""

import asyncio
from collections.abc import Mapping, Sequence
from pathlib import Path
import signal

import structlog

from .exceptions import ProcessError

logger = structlog.get_logger(__name__)


def _describe_exit(returncode: int) -> str:
    if returncode < 0:
        try:
            return f"signal {signal.Signals(-returncode).name}"
        except ValueError:
            return f"signal {-returncode}"
    return f"exit code {returncode}"


def _failure(
    cause: str,
    command: str,
    args: list[str],
    returncode: int | None = None,
    stderr: str = "",
) -> ProcessError:
    message = (
        f"Error executing command ({cause}): \n"
        f"{' '.join([command, *args])}\n"
        f"{stderr}"
    )
    return ProcessError(message, command, args, returncode=returncode, stderr=stderr)


async def run_command(
    command: str,
    args: Sequence[str],
    *,
    env: Mapping[str, str] | None = None,
    cwd: Path | str | None = None,
) -> str:
    """
    Runs `command` with `args` and returns whatever it wrote to stderr.

    Raises ProcessError when the command cannot be spawned, exits non-zero or
    is killed by a signal. Stdout is discarded.
    """
    args = [str(arg) for arg in args]
    logger.info(f"Running command: {' '.join([command, *args])}")
    try:
        process = await asyncio.create_subprocess_exec(
            command,
            *args,
            stdout=asyncio.subprocess.DEVNULL,
            stderr=asyncio.subprocess.PIPE,
            env=dict(env) if env is not None else None,
            cwd=cwd,
        )
    except OSError as e:
        raise _failure(str(e), command, args) from e

    _, stderr_bytes = await process.communicate()
    stderr = stderr_bytes.decode(errors="replace")
    if process.returncode != 0:
        raise _failure(
            _describe_exit(process.returncode),
            command,
            args,
            returncode=process.returncode,
            stderr=stderr,
        )
    if stderr:
        logger.debug("Command stderr", output=stderr.strip())
    return stderr
