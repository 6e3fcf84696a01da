from typing import List, Optional

from .base import BaseProbe
from ..command_runner import CommandRunner
from ..parsing import clamp_percent, safe_int
from ..schemas.snapshot import MemoryInfo


class MemoryProbe(BaseProbe):
    """
    Memory Probe.
    Responsibility: RAM and swap usage from `free -m`.

    Expected layout:
                  total   used   free   shared  buff/cache  available
        Mem:      16000    8000   2000      100        6000       7900
        Swap:      2000     100   1900
    """

    snapshot_field = "memory"

    def __init__(self, runner: CommandRunner):
        super().__init__("MemoryProbe", runner)

    async def collect(self) -> MemoryInfo:
        out = await self.output(["free", "-m"])
        if out is None:
            return self.default()
        return parse_free_output(out)

    def default(self) -> MemoryInfo:
        return MemoryInfo()


def parse_free_output(text: str) -> MemoryInfo:
    lines = text.split("\n")

    total_mb = used_mb = available_mb = 0
    swap_total_mb = swap_used_mb = 0

    # Line 1 is the header
    if len(lines) > 1:
        parts = lines[1].split()
        total_mb = _column(parts, 1)
        used_mb = _column(parts, 2)
        # Prefer "available" over plain "free" when the column exists
        available_mb = _column(parts, 6) if len(parts) > 6 else _column(parts, 3)

    swap_line = _swap_line(lines)
    if swap_line is not None:
        parts = swap_line.split()
        swap_total_mb = _column(parts, 1)
        swap_used_mb = _column(parts, 2)

    usage_percent = clamp_percent(used_mb / total_mb * 100) if total_mb > 0 else 0.0

    return MemoryInfo(
        total_mb=total_mb,
        available_mb=available_mb,
        used_mb=used_mb,
        usage_percent=usage_percent,
        swap_total_mb=swap_total_mb,
        swap_used_mb=swap_used_mb,
    )


def _swap_line(lines: List[str]) -> Optional[str]:
    for line in lines[2:]:
        if line.strip().lower().startswith("swap"):
            return line
    if len(lines) > 2 and lines[2].strip():
        return lines[2]
    return None


def _column(parts: List[str], index: int) -> int:
    return safe_int(parts[index]) if len(parts) > index else 0
