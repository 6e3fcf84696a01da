"""
Command runner for N7 Telemetry probes.

Every probe reaches the host through a single primitive: run an external
command and get back success/failure plus captured stdout/stderr as text.
The runner never raises. A missing binary, permission error, nonzero exit
or timeout all come back as `succeeded=False`.
"""
import asyncio
import logging
from typing import Optional, Protocol, Sequence

import psutil
from pydantic import BaseModel, ConfigDict

from .config import settings

logger = logging.getLogger("n7-telemetry.command-runner")


class CommandResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    succeeded: bool
    stdout: str = ""
    stderr: str = ""


class CommandRunner(Protocol):
    async def run(self, args: Sequence[str]) -> CommandResult:
        ...


class SubprocessCommandRunner:
    """
    Runs commands with asyncio subprocesses (no shell).
    Each call is bounded by a timeout; the number of live child processes is
    bounded by a semaphore so a fan-out over many probes stays polite.
    """

    def __init__(self, timeout: Optional[float] = None, max_concurrency: Optional[int] = None):
        self.timeout = timeout if timeout is not None else settings.COMMAND_TIMEOUT_SECONDS
        self._semaphore = asyncio.Semaphore(max_concurrency or settings.MAX_CONCURRENT_COMMANDS)

    async def run(self, args: Sequence[str]) -> CommandResult:
        args = [str(a) for a in args]
        if not args:
            return CommandResult(succeeded=False, stderr="empty command")

        async with self._semaphore:
            try:
                return await self._execute(args)
            except Exception as e:
                logger.error(f"Unexpected error running {args[0]}: {e}", exc_info=True)
                return CommandResult(succeeded=False, stderr=str(e))

    async def _execute(self, args: list) -> CommandResult:
        try:
            process = await asyncio.create_subprocess_exec(
                *args,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except (FileNotFoundError, PermissionError) as e:
            logger.debug(f"{args[0]} unavailable: {e}")
            return CommandResult(succeeded=False, stderr=str(e))
        except OSError as e:
            logger.warning(f"Could not start {args[0]}: {e}")
            return CommandResult(succeeded=False, stderr=str(e))

        try:
            stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=self.timeout)
        except asyncio.TimeoutError:
            logger.warning(f"Command timed out after {self.timeout}s: {' '.join(args)}")
            _kill_process_tree(process.pid)
            await process.wait()
            return CommandResult(succeeded=False, stderr=f"timed out after {self.timeout}s")

        result = CommandResult(
            succeeded=process.returncode == 0,
            stdout=_decode(stdout),
            stderr=_decode(stderr),
        )
        if not result.succeeded:
            logger.debug(f"{' '.join(args)} exited with {process.returncode}")
        return result


def _decode(data: Optional[bytes]) -> str:
    if not data:
        return ""
    return data.decode("utf-8", errors="replace")


def _kill_process_tree(pid: int) -> None:
    """Kill a timed-out child and anything it spawned."""
    try:
        parent = psutil.Process(pid)
    except psutil.Error:
        return

    try:
        children = parent.children(recursive=True)
    except psutil.Error as e:
        logger.debug(f"Could not list children of pid {pid}: {e}")
        children = []

    for proc in children + [parent]:
        try:
            proc.kill()
        except psutil.Error:
            continue
