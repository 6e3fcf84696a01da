import asyncio
import logging
from typing import Optional

from ..aggregator.service import SnapshotAggregator
from ..persistence.service import PersistenceService, WriteReport
from ..schemas.snapshot import Snapshot
from ..service_manager.base_service import BaseService

logger = logging.getLogger("n7-telemetry.collector")


class CollectorService(BaseService):
    """
    Collector Service.
    Responsibility: Drive collection cycles (aggregate, then persist), either
    once on demand or periodically with retention cleanup after each cycle.
    """

    def __init__(
        self,
        aggregator: SnapshotAggregator,
        persistence: PersistenceService,
        interval_seconds: int,
        retention_days: Optional[int] = None,
    ):
        super().__init__("CollectorService")
        self.aggregator = aggregator
        self.persistence = persistence
        self.interval_seconds = interval_seconds
        self.retention_days = retention_days
        self._running = False
        self._task: Optional[asyncio.Task] = None
        self.last_report: Optional[WriteReport] = None

    async def start(self):
        self._running = True
        self._task = asyncio.create_task(self._collect_loop())
        logger.info(f"CollectorService started (every {self.interval_seconds}s).")

    async def stop(self):
        self._running = False
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        logger.info("CollectorService stopped.")

    async def run_once(self) -> Snapshot:
        """One collection cycle: aggregate every probe and persist the Snapshot."""
        snapshot = await self.aggregator.collect()
        self.last_report = await self.persistence.write_snapshot(snapshot)
        if not self.last_report.ok:
            logger.warning(
                f"Run {snapshot.run_id} partially persisted; failed tables: "
                f"{', '.join(sorted(self.last_report.failed))}"
            )
        return snapshot

    async def _collect_loop(self):
        while self._running:
            try:
                await self.run_once()
                if self.retention_days:
                    await self.persistence.purge_older_than(self.retention_days)
            except Exception as e:
                logger.error(f"Collection cycle failed: {e}", exc_info=True)
            await asyncio.sleep(self.interval_seconds)
