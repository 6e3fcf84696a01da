import logging
from typing import List

from .base import BaseProbe
from ..command_runner import CommandRunner
from ..parsing import clamp_percent, safe_int
from ..schemas.snapshot import UNKNOWN, GpuInfo

logger = logging.getLogger("n7-telemetry.probes.gpu")

NVIDIA_QUERY = [
    "nvidia-smi",
    "--query-gpu=name,driver_version,memory.total,memory.used,temperature.gpu,utilization.gpu",
    "--format=csv,noheader,nounits",
]


class GpuProbe(BaseProbe):
    """
    GPU Probe.
    Responsibility: Per-device telemetry from nvidia-smi. When no NVIDIA
    device answers, a VGA controller in the PCI listing is reported as a single
    "Integrated" placeholder: a GPU exists but no telemetry is available.
    An empty list means no GPU was detected at all.
    """

    snapshot_field = "gpus"

    def __init__(self, runner: CommandRunner):
        super().__init__("GpuProbe", runner)

    async def collect(self) -> List[GpuInfo]:
        gpus: List[GpuInfo] = []

        out = await self.output(NVIDIA_QUERY)
        if out is not None:
            gpus = parse_nvidia_smi(out)

        if not gpus:
            lspci = await self.output(["lspci", "-nn"])
            if lspci is not None and "vga" in lspci.lower():
                logger.debug("No NVIDIA telemetry, reporting integrated VGA controller")
                gpus.append(GpuInfo(
                    vendor="Integrated",
                    model=UNKNOWN,
                    driver_version=UNKNOWN,
                    memory_total_mb=0,
                    memory_used_mb=0,
                    temperature_c=0,
                    utilization_percent=0,
                ))

        return gpus

    def default(self) -> List[GpuInfo]:
        return []


def parse_nvidia_smi(text: str) -> List[GpuInfo]:
    gpus: List[GpuInfo] = []
    for line in text.strip().split("\n"):
        parts = [p.strip() for p in line.split(",")]
        if len(parts) < 6:
            continue
        gpus.append(GpuInfo(
            vendor="NVIDIA",
            model=parts[0],
            driver_version=parts[1],
            memory_total_mb=safe_int(parts[2]),
            memory_used_mb=safe_int(parts[3]),
            temperature_c=safe_int(parts[4]),
            utilization_percent=int(clamp_percent(safe_int(parts[5]))),
        ))
    return gpus
