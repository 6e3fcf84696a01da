import logging
from typing import Iterable, List, Optional

from .base import BaseProbe
from ..command_runner import CommandRunner
from ..config import settings
from ..parsing import parse_percent, parse_size_gb
from ..schemas.snapshot import DiskInfo

logger = logging.getLogger("n7-telemetry.probes.disk")

DF_COMMAND = ["df", "-h", "--output=source,fstype,size,used,avail,pcent,target"]


class DiskProbe(BaseProbe):
    """
    Disk Probe.
    Responsibility: Usage of every mounted, non-virtual filesystem.
    """

    snapshot_field = "disks"

    def __init__(self, runner: CommandRunner, virtual_filesystems: Optional[Iterable[str]] = None):
        super().__init__("DiskProbe", runner)
        if virtual_filesystems is None:
            virtual_filesystems = settings.VIRTUAL_FILESYSTEMS
        self.virtual_filesystems = {fs.lower() for fs in virtual_filesystems}

    async def collect(self) -> List[DiskInfo]:
        out = await self.output(DF_COMMAND)
        if out is None:
            return []
        return self.parse(out)

    def default(self) -> List[DiskInfo]:
        return []

    def parse(self, text: str) -> List[DiskInfo]:
        disks: List[DiskInfo] = []
        lines = text.strip().split("\n")[1:]  # Skip header

        for line in lines:
            disk = self._parse_line(line)
            if disk is not None:
                disks.append(disk)
        return disks

    def _parse_line(self, line: str) -> Optional[DiskInfo]:
        parts = line.split()
        if len(parts) < 7:
            return None

        device, filesystem = parts[0], parts[1]
        if filesystem.lower() in self.virtual_filesystems or device.startswith("tmpfs"):
            return None

        try:
            size_gb = parse_size_gb(parts[2])
            used_gb = parse_size_gb(parts[3])
            available_gb = parse_size_gb(parts[4])
            usage_percent = parse_percent(parts[5])
        except ValueError:
            logger.debug(f"Skipping malformed df row: {line!r}")
            return None

        return DiskInfo(
            device=device,
            # Mount points may contain spaces
            mount_point=" ".join(parts[6:]),
            filesystem=filesystem,
            size_gb=size_gb,
            used_gb=used_gb,
            available_gb=available_gb,
            usage_percent=usage_percent,
        )
