import asyncio
import logging
import time
from typing import Iterable, List, Optional
from uuid import uuid4

from ..command_runner import CommandRunner
from ..probes.base import BaseProbe
from ..probes.cpu_probe import CpuProbe
from ..probes.disk_probe import DiskProbe
from ..probes.gpu_probe import GpuProbe
from ..probes.memory_probe import MemoryProbe
from ..probes.network_probe import NetworkProbe
from ..probes.service_probe import ServiceProbe
from ..probes.system import SystemIdentityProbe
from ..schemas.snapshot import Snapshot, utc_now

logger = logging.getLogger("n7-telemetry.aggregator")


def default_probes(runner: CommandRunner, watched_services: Optional[Iterable[str]] = None) -> List[BaseProbe]:
    return [
        SystemIdentityProbe(runner),
        CpuProbe(runner),
        MemoryProbe(runner),
        DiskProbe(runner),
        NetworkProbe(runner),
        GpuProbe(runner),
        ServiceProbe(runner, services=watched_services),
    ]


class SnapshotAggregator:
    """
    Snapshot Aggregator.
    Responsibility: Fan out to every probe concurrently, join, and assemble one
    Snapshot. A probe that fails contributes its defaults; it never stops the
    others or the Snapshot.
    """

    def __init__(
        self,
        runner: CommandRunner,
        watched_services: Optional[Iterable[str]] = None,
        probes: Optional[List[BaseProbe]] = None,
    ):
        self.probes = probes if probes is not None else default_probes(runner, watched_services)

    async def collect(self) -> Snapshot:
        run_id = uuid4()
        captured_at = utc_now()
        started = time.monotonic()

        results = await asyncio.gather(*(probe.run() for probe in self.probes))
        fields = {probe.snapshot_field: result for probe, result in zip(self.probes, results)}

        snapshot = Snapshot(run_id=run_id, captured_at=captured_at, **fields)

        logger.info(
            f"Snapshot {run_id} collected in {time.monotonic() - started:.2f}s: "
            f"{len(snapshot.disks)} disks, {len(snapshot.network)} interfaces, "
            f"{len(snapshot.gpus)} GPUs, {len(snapshot.services)} services"
        )
        return snapshot
