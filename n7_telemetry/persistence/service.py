import logging
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Dict, List, Optional, Sequence, Tuple, Type
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError

from ..database.base import Base, utcnow
from ..database.session import build_engine, build_session_factory, init_schema
from ..models.telemetry import (
    CpuInfoRow,
    DiskInfoRow,
    GpuInfoRow,
    MemoryInfoRow,
    NetworkInfoRow,
    ServiceInfoRow,
    SystemInfoRow,
)
from ..schemas.snapshot import Snapshot
from ..service_manager.base_service import BaseService

logger = logging.getLogger("n7-telemetry.persistence")

# Snapshot field → ORM table. Single-record fields hold one record, the rest a list.
TABLES: Dict[str, Type[Base]] = {
    "system": SystemInfoRow,
    "cpu": CpuInfoRow,
    "memory": MemoryInfoRow,
    "disks": DiskInfoRow,
    "network": NetworkInfoRow,
    "gpus": GpuInfoRow,
    "services": ServiceInfoRow,
}
SINGLE_RECORD_FIELDS = ("system", "cpu", "memory")


@dataclass
class WriteReport:
    run_id: UUID
    written: Dict[str, int] = field(default_factory=dict)  # table → rows
    failed: Dict[str, str] = field(default_factory=dict)   # table → error

    @property
    def ok(self) -> bool:
        return not self.failed


class PersistenceService(BaseService):
    """
    Persistence Service.
    Responsibility: Append each Snapshot into the per-subsystem time-series
    tables, rebuild stored Snapshots by run id, and purge expired rows.

    Every table is written in its own transaction: a failure on one table is
    logged and reported, and the remaining tables are still written.
    """

    def __init__(self, database_url: str):
        super().__init__("PersistenceService")
        self.database_url = database_url
        self.engine = build_engine(database_url)
        self._session_factory = build_session_factory(self.engine)

    async def start(self):
        await init_schema(self.engine)
        logger.info("PersistenceService started.")

    async def stop(self):
        await self.engine.dispose()
        logger.info("PersistenceService stopped.")

    # ------------------------------------------------------------------
    # Write path
    # ------------------------------------------------------------------

    async def write_snapshot(self, snapshot: Snapshot) -> WriteReport:
        report = WriteReport(run_id=snapshot.run_id)

        for snapshot_field, table in TABLES.items():
            records = _records(snapshot, snapshot_field)
            if not records:
                continue

            table_name = table.__tablename__
            try:
                async with self._session_factory() as session:
                    async with session.begin():
                        session.add_all([table.from_record(r, snapshot.run_id) for r in records])
                report.written[table_name] = len(records)
            except SQLAlchemyError as e:
                logger.error(f"Failed to write {table_name} for run {snapshot.run_id}: {e}")
                report.failed[table_name] = str(e)

        logger.info(
            f"Persisted run {snapshot.run_id}: "
            f"{sum(report.written.values())} rows across {len(report.written)} tables"
            + (f", {len(report.failed)} tables failed" if report.failed else "")
        )
        return report

    # ------------------------------------------------------------------
    # Read path
    # ------------------------------------------------------------------

    async def latest_run_id(self) -> Optional[UUID]:
        """Run id of the most recently written row across all tables."""
        latest: Optional[Tuple] = None
        async with self._session_factory() as session:
            for table in TABLES.values():
                stmt = select(table.timestamp, table.id, table.run_id).order_by(
                    table.timestamp.desc(), table.id.desc()
                ).limit(1)
                row = (await session.execute(stmt)).first()
                if row is not None and (latest is None or row[0] > latest[0]):
                    latest = tuple(row)
        return latest[2] if latest else None

    async def load_snapshot(self, run_id: UUID) -> Optional[Snapshot]:
        """
        Rebuild the Snapshot persisted under `run_id`.
        Single-record tables without a row come back as defaults.
        """
        fields = {}
        timestamps = []

        async with self._session_factory() as session:
            for snapshot_field, table in TABLES.items():
                stmt = select(table).where(table.run_id == run_id).order_by(table.id)
                rows: Sequence = (await session.execute(stmt)).scalars().all()
                timestamps.extend(row.timestamp for row in rows)

                if snapshot_field in SINGLE_RECORD_FIELDS:
                    if rows:
                        fields[snapshot_field] = rows[0].to_record()
                else:
                    fields[snapshot_field] = [row.to_record() for row in rows]

        if not timestamps:
            return None
        return Snapshot(run_id=run_id, captured_at=min(timestamps), **fields)

    async def load_latest_snapshot(self) -> Optional[Snapshot]:
        run_id = await self.latest_run_id()
        if run_id is None:
            return None
        return await self.load_snapshot(run_id)

    # ------------------------------------------------------------------
    # Retention
    # ------------------------------------------------------------------

    async def purge_older_than(self, days: int) -> Dict[str, int]:
        """Delete rows written more than `days` days ago. Returns deleted rows per table."""
        cutoff = utcnow() - timedelta(days=days)
        deleted: Dict[str, int] = {}

        for table in TABLES.values():
            table_name = table.__tablename__
            try:
                async with self._session_factory() as session:
                    async with session.begin():
                        result = await session.execute(delete(table).where(table.timestamp < cutoff))
                deleted[table_name] = result.rowcount or 0
            except SQLAlchemyError as e:
                logger.error(f"Failed to purge {table_name}: {e}")

        logger.info(f"Cleaned up {sum(deleted.values())} rows older than {days} days")
        return deleted


def _records(snapshot: Snapshot, snapshot_field: str) -> List:
    value = getattr(snapshot, snapshot_field)
    if snapshot_field in SINGLE_RECORD_FIELDS:
        return [value]
    return list(value)
