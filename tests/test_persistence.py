from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import func, select, text, update

from n7_telemetry.database.base import utcnow
from n7_telemetry.models.telemetry import (
    CpuInfoRow,
    DiskInfoRow,
    GpuInfoRow,
    MemoryInfoRow,
    NetworkInfoRow,
    ServiceInfoRow,
    SystemInfoRow,
)
from n7_telemetry.persistence.service import PersistenceService
from n7_telemetry.schemas.snapshot import (
    CpuInfo,
    DiskInfo,
    GpuInfo,
    MemoryInfo,
    NetworkInterface,
    ServiceStatus,
    Snapshot,
    SystemIdentity,
    utc_now,
)


def _snapshot(**overrides) -> Snapshot:
    fields = dict(
        system=SystemIdentity(hostname="workstation", kernel="6.8.0", os_name="Ubuntu", os_version="24.04",
                              architecture="x86_64", uptime_seconds=120),
        cpu=CpuInfo(model="Ryzen 7", cores=16, threads=16, current_freq_mhz=3400.0, max_freq_mhz=4900.0),
        memory=MemoryInfo(total_mb=32000, available_mb=20000, used_mb=12000, usage_percent=37.5),
        disks=[
            DiskInfo(device="/dev/nvme0n1p2", mount_point="/", filesystem="ext4",
                     size_gb=468.0, used_gb=210.0, available_gb=235.0, usage_percent=48.0),
            DiskInfo(device="/dev/sda1", mount_point="/data", filesystem="xfs",
                     size_gb=2048.0, used_gb=1024.0, available_gb=1024.0, usage_percent=50.0),
        ],
        network=[NetworkInterface(name="eth0", ip_address="10.0.0.5", mac_address="aa:bb:cc:dd:ee:ff",
                                  state="UP", rx_bytes=5_000_000_000, tx_bytes=12)],
        gpus=[GpuInfo(vendor="NVIDIA", model="RTX 3080", driver_version="550", memory_total_mb=10240)],
        services=[ServiceStatus(name="nginx", state="active", enabled=True, load_state="loaded",
                                active_state="active", sub_state="running"),
                  ServiceStatus(name="mysql")],
    )
    fields.update(overrides)
    return Snapshot(**fields)


async def _count(persistence: PersistenceService, table) -> int:
    async with persistence._session_factory() as session:
        return (await session.execute(select(func.count()).select_from(table))).scalar_one()


@pytest.mark.asyncio
async def test_start_is_idempotent(database_url):
    persistence = PersistenceService(database_url)
    try:
        await persistence.start()
        await persistence.start()
        assert await persistence.latest_run_id() is None
    finally:
        await persistence.stop()


@pytest.mark.asyncio
async def test_write_snapshot_appends_rows_per_table(database_url):
    persistence = PersistenceService(database_url)
    await persistence.start()
    try:
        report = await persistence.write_snapshot(_snapshot())

        assert report.ok
        assert report.written == {
            "system_info": 1,
            "cpu_info": 1,
            "memory_info": 1,
            "disk_info": 2,
            "network_info": 1,
            "gpu_info": 1,
            "service_info": 2,
        }
        assert await _count(persistence, DiskInfoRow) == 2
        assert await _count(persistence, ServiceInfoRow) == 2

        # Append-only: a second pass adds rows
        await persistence.write_snapshot(_snapshot())
        assert await _count(persistence, SystemInfoRow) == 2
        assert await _count(persistence, DiskInfoRow) == 4
    finally:
        await persistence.stop()


@pytest.mark.asyncio
async def test_empty_lists_write_no_rows(database_url):
    persistence = PersistenceService(database_url)
    await persistence.start()
    try:
        report = await persistence.write_snapshot(_snapshot(disks=[], network=[], gpus=[], services=[]))

        assert report.ok
        assert set(report.written) == {"system_info", "cpu_info", "memory_info"}
        assert await _count(persistence, DiskInfoRow) == 0
        assert await _count(persistence, GpuInfoRow) == 0
    finally:
        await persistence.stop()


@pytest.mark.asyncio
async def test_rows_share_the_snapshot_run_id(database_url):
    persistence = PersistenceService(database_url)
    await persistence.start()
    snapshot = _snapshot()
    try:
        await persistence.write_snapshot(snapshot)

        async with persistence._session_factory() as session:
            for table in (SystemInfoRow, CpuInfoRow, MemoryInfoRow, DiskInfoRow, NetworkInfoRow, ServiceInfoRow):
                run_ids = (await session.execute(select(table.run_id).distinct())).scalars().all()
                assert run_ids == [snapshot.run_id]
    finally:
        await persistence.stop()


@pytest.mark.asyncio
async def test_load_snapshot_rebuilds_records(database_url):
    persistence = PersistenceService(database_url)
    await persistence.start()
    original = _snapshot()
    try:
        await persistence.write_snapshot(original)

        loaded = await persistence.load_snapshot(original.run_id)

        assert loaded.run_id == original.run_id
        assert loaded.system == original.system
        assert loaded.system.boot_time.tzinfo is not None
        assert loaded.cpu == original.cpu
        assert loaded.memory == original.memory
        assert loaded.disks == original.disks
        assert loaded.network == original.network
        assert loaded.network[0].rx_bytes == 5_000_000_000
        assert loaded.gpus == original.gpus
        assert loaded.services == original.services
    finally:
        await persistence.stop()


@pytest.mark.asyncio
async def test_loaded_times_are_utc_aware(database_url):
    persistence = PersistenceService(database_url)
    await persistence.start()
    paris = timezone(timedelta(hours=2))
    boot = datetime(2026, 10, 18, 9, 30, 15, 250000, tzinfo=paris)
    original = _snapshot(system=SystemIdentity(hostname="h", uptime_seconds=60, boot_time=boot))
    try:
        await persistence.write_snapshot(original)

        loaded = await persistence.load_snapshot(original.run_id)

        assert loaded.system == original.system
        assert loaded.system.boot_time.utcoffset() == timedelta(0)
        assert loaded.system.boot_time == boot
        assert loaded.captured_at.tzinfo is not None
        assert original.captured_at <= loaded.captured_at <= utc_now()
    finally:
        await persistence.stop()


@pytest.mark.asyncio
async def test_load_latest_snapshot(database_url):
    persistence = PersistenceService(database_url)
    await persistence.start()
    try:
        assert await persistence.load_latest_snapshot() is None

        await persistence.write_snapshot(_snapshot())
        newer = _snapshot(system=SystemIdentity(hostname="renamed-host"))
        await persistence.write_snapshot(newer)

        latest = await persistence.load_latest_snapshot()

        assert latest.run_id == newer.run_id
        assert latest.system.hostname == "renamed-host"
    finally:
        await persistence.stop()


@pytest.mark.asyncio
async def test_unknown_run_id_loads_nothing(database_url):
    persistence = PersistenceService(database_url)
    await persistence.start()
    try:
        assert await persistence.load_snapshot(_snapshot().run_id) is None
    finally:
        await persistence.stop()


@pytest.mark.asyncio
async def test_failed_table_does_not_block_the_others(database_url):
    persistence = PersistenceService(database_url)
    await persistence.start()
    try:
        async with persistence.engine.begin() as conn:
            await conn.execute(text("DROP TABLE gpu_info"))

        report = await persistence.write_snapshot(_snapshot())

        assert not report.ok
        assert set(report.failed) == {"gpu_info"}
        assert report.written["disk_info"] == 2
        assert await _count(persistence, ServiceInfoRow) == 2
    finally:
        await persistence.stop()


@pytest.mark.asyncio
async def test_purge_older_than_removes_expired_rows(database_url):
    persistence = PersistenceService(database_url)
    await persistence.start()
    try:
        old = _snapshot()
        await persistence.write_snapshot(old)
        await persistence.write_snapshot(_snapshot())

        async with persistence._session_factory() as session:
            async with session.begin():
                for table in (SystemInfoRow, DiskInfoRow):
                    await session.execute(
                        update(table).where(table.run_id == old.run_id).values(timestamp=utcnow() - timedelta(days=120))
                    )

        deleted = await persistence.purge_older_than(90)

        assert deleted["system_info"] == 1
        assert deleted["disk_info"] == 2
        assert deleted["cpu_info"] == 0
        assert await _count(persistence, SystemInfoRow) == 1
        assert await _count(persistence, DiskInfoRow) == 2
    finally:
        await persistence.stop()
