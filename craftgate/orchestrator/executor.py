"""Runs resolved commands against the container runtime binary."""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Optional

from .commands import Command
from .errors import CommandTimeoutError, ExecutionFailure, GatewayError, SpawnError

log = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 300.0


@dataclass(frozen=True)
class ExecutionOutcome:
    exited_normally: bool
    exit_code: Optional[int]
    stdout: str = ""
    stderr: str = ""
    spawn_failed: bool = False
    timed_out: bool = False
    spawn_error: Optional[str] = None
    timeout: Optional[float] = None
    duration: float = 0.0

    @property
    def ok(self) -> bool:
        return self.exited_normally and self.exit_code == 0

    def as_error(self) -> Optional[GatewayError]:
        """Classify a failed run; None when the run succeeded."""
        if self.spawn_failed:
            return SpawnError(f"Container runtime could not be started: {self.spawn_error}")
        if self.timed_out:
            after = f" after {self.timeout:g}s" if self.timeout is not None else ""
            return CommandTimeoutError(f"Container runtime command timed out{after}")
        if not self.exited_normally:
            return ExecutionFailure(
                f"Docker command was terminated by signal {-(self.exit_code or 0)}",
                exit_code=self.exit_code,
            )
        if self.exit_code != 0:
            return ExecutionFailure(
                f"Docker command failed with exit code {self.exit_code}",
                exit_code=self.exit_code,
            )
        return None


def _decode(data: Optional[bytes]) -> str:
    return (data or b"").decode("utf-8", errors="replace")


async def _kill_and_reap(process: asyncio.subprocess.Process) -> None:
    if process.returncode is None:
        try:
            process.kill()
        except ProcessLookupError:
            pass
    # Drain the pipes so the transport closes and the child is reaped.
    await process.communicate()


class CommandExecutor:
    """
    Spawns the runtime binary directly (no shell) and captures its output.

    Every failure mode is reported through ExecutionOutcome rather than raised,
    so callers always get something they can normalize.
    """

    def __init__(self, default_timeout: float = DEFAULT_TIMEOUT) -> None:
        if default_timeout <= 0:
            raise ValueError("default_timeout must be positive")
        self.default_timeout = default_timeout

    async def run(self, command: Command, timeout: Optional[float] = None) -> ExecutionOutcome:
        budget = self.default_timeout if timeout is None else timeout
        log.info("Executing command: %s", command.describe())
        started = time.monotonic()

        try:
            process = await asyncio.create_subprocess_exec(
                *command.argv,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as exc:
            # FileNotFoundError and PermissionError land here as well.
            log.error("Failed to spawn %s: %s", command.binary, exc)
            return ExecutionOutcome(
                exited_normally=False,
                exit_code=None,
                spawn_failed=True,
                spawn_error=str(exc),
                duration=time.monotonic() - started,
            )

        try:
            stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=budget)
        except asyncio.TimeoutError:
            log.warning("Command timed out after %ss, killing pid %s: %s", budget, process.pid, command)
            await _kill_and_reap(process)
            return ExecutionOutcome(
                exited_normally=False,
                exit_code=None,
                timed_out=True,
                timeout=budget,
                duration=time.monotonic() - started,
            )
        except asyncio.CancelledError:
            log.warning("Command cancelled, killing pid %s: %s", process.pid, command)
            await asyncio.shield(_kill_and_reap(process))
            raise

        returncode = process.returncode
        duration = time.monotonic() - started
        log.debug("Command exited with %s after %.2fs: %s", returncode, duration, command)
        return ExecutionOutcome(
            exited_normally=returncode is not None and returncode >= 0,
            exit_code=returncode,
            stdout=_decode(stdout),
            stderr=_decode(stderr),
            duration=duration,
        )
