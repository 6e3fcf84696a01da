import asyncio

from .base import BaseProbe
from ..command_runner import CommandRunner
from ..parsing import first_value, safe_float, safe_int
from ..schemas.snapshot import UNKNOWN, CpuInfo

MAX_FREQ_PATH = "/sys/devices/system/cpu/cpu0/cpufreq/cpuinfo_max_freq"


class CpuProbe(BaseProbe):
    """
    CPU Probe.
    Responsibility: Processor model, core count and clock frequencies.

    usage_percent stays 0: a real reading needs two samples spaced in time,
    which a single-shot probe does not take.
    """

    snapshot_field = "cpu"

    def __init__(self, runner: CommandRunner):
        super().__init__("CpuProbe", runner)

    async def collect(self) -> CpuInfo:
        cpuinfo, nproc, max_freq = await asyncio.gather(
            self.read_file("/proc/cpuinfo"),
            self.output(["nproc", "--all"]),
            self.read_file(MAX_FREQ_PATH),
        )

        model = UNKNOWN
        current_freq_mhz = 0.0
        if cpuinfo is not None:
            model = first_value(cpuinfo, "model name") or UNKNOWN
            current_freq_mhz = safe_float(first_value(cpuinfo, "cpu MHz"))

        cores = safe_int(nproc.strip()) if nproc is not None else 0
        # kHz → MHz
        max_freq_mhz = safe_int(max_freq.strip()) / 1000 if max_freq is not None else 0.0

        return CpuInfo(
            model=model,
            cores=cores,
            threads=cores,
            current_freq_mhz=current_freq_mhz,
            max_freq_mhz=max_freq_mhz,
            usage_percent=0.0,
        )

    def default(self) -> CpuInfo:
        return CpuInfo()
