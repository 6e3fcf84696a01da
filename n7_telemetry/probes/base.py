import logging
from abc import ABC, abstractmethod
from typing import Any, Optional, Sequence

from ..command_runner import CommandRunner

logger = logging.getLogger("n7-telemetry.probes")


class BaseProbe(ABC):
    """
    Abstract Base Class for Telemetry Probes.

    A probe turns the output of one or more host commands into a normalized
    record (or a list of records). Subclasses name the Snapshot field they
    fill via `snapshot_field`.
    """

    snapshot_field: str = ""

    def __init__(self, name: str, runner: CommandRunner):
        self.name = name
        self.runner = runner

    @abstractmethod
    async def collect(self) -> Any:
        """
        Collects data from the host.
        Returns a normalized record, or a list of records.
        """
        pass

    @abstractmethod
    def default(self) -> Any:
        """
        The result reported when nothing could be collected.
        """
        pass

    async def run(self) -> Any:
        """
        collect(), with any unexpected error replaced by default().
        """
        try:
            return await self.collect()
        except Exception as e:
            logger.error(f"{self.name} failed, reporting defaults: {e}", exc_info=True)
            return self.default()

    async def output(self, args: Sequence[str]) -> Optional[str]:
        """stdout of a successful command, None otherwise."""
        result = await self.runner.run(args)
        return result.stdout if result.succeeded else None

    async def read_file(self, path: str) -> Optional[str]:
        return await self.output(["cat", path])
