"""
Command Runner - the only way wwand talks to the host.

Every external tool (mmcli, ip, qmicli, ping) is invoked through a
CommandRunner so tests can substitute canned output for real executables.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional, Sequence

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CommandResult:
    """Combined stdout/stderr and exit status of one command."""

    output: str
    returncode: int
    timed_out: bool = False

    @property
    def ok(self) -> bool:
        return self.returncode == 0 and not self.timed_out


class CommandRunner(ABC):
    """Abstract capability to run an external command."""

    @abstractmethod
    async def run(self, name: str, args: Sequence[str], timeout: Optional[float] = None) -> CommandResult:
        """
        Run ``name`` with ``args`` and return its combined output.

        Args:
            name: Executable name or path
            args: Arguments (never passed through a shell)
            timeout: Seconds before the child is killed (None = unbounded)
        """
        pass


class SubprocessRunner(CommandRunner):
    """Runs commands as asyncio subprocesses with stderr merged into stdout."""

    async def run(self, name: str, args: Sequence[str], timeout: Optional[float] = None) -> CommandResult:
        cmd: List[str] = [name, *args]
        try:
            proc = await asyncio.create_subprocess_exec(
                *cmd, stdout=asyncio.subprocess.PIPE, stderr=asyncio.subprocess.STDOUT
            )
        except OSError as e:
            logger.error(f"Error running command {cmd}: {e}")
            return CommandResult(output=str(e), returncode=127)

        try:
            stdout, _ = await asyncio.wait_for(proc.communicate(), timeout=timeout)
        except asyncio.TimeoutError:
            logger.error(f"Command {cmd} timed out after {timeout}s")
            await self._kill(proc)
            return CommandResult(output=f"Command timed out after {timeout}s", returncode=-1, timed_out=True)
        except asyncio.CancelledError:
            await self._kill(proc)
            raise

        return CommandResult(output=stdout.decode("utf-8", errors="replace").strip(), returncode=proc.returncode)

    @staticmethod
    async def _kill(proc: asyncio.subprocess.Process) -> None:
        try:
            proc.kill()
        except ProcessLookupError:
            return
        await proc.wait()
