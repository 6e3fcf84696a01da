"""
Append-only time-series tables, one per telemetry subsystem.
Column names follow the historical collector schema.
"""
from datetime import datetime

from sqlalchemy import BigInteger, Boolean, Float, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from ..database.base import Base, CaptureMixin, UTCDateTime
from ..schemas.snapshot import (
    CpuInfo,
    DiskInfo,
    GpuInfo,
    MemoryInfo,
    NetworkInterface,
    ServiceStatus,
    SystemIdentity,
)


class SystemInfoRow(Base, CaptureMixin):
    __tablename__ = "system_info"

    hostname: Mapped[str] = mapped_column(String)
    kernel: Mapped[str] = mapped_column(String)
    os_name: Mapped[str] = mapped_column(String)
    os_version: Mapped[str] = mapped_column(String)
    architecture: Mapped[str] = mapped_column(String)
    uptime_seconds: Mapped[int] = mapped_column(Integer)
    boot_time: Mapped[datetime] = mapped_column(UTCDateTime)
    timezone: Mapped[str] = mapped_column(String)

    @classmethod
    def from_record(cls, record: SystemIdentity, run_id) -> "SystemInfoRow":
        return cls(run_id=run_id, **record.model_dump())

    def to_record(self) -> SystemIdentity:
        return SystemIdentity(
            hostname=self.hostname,
            kernel=self.kernel,
            os_name=self.os_name,
            os_version=self.os_version,
            architecture=self.architecture,
            uptime_seconds=self.uptime_seconds,
            boot_time=self.boot_time,
            timezone=self.timezone,
        )


class CpuInfoRow(Base, CaptureMixin):
    __tablename__ = "cpu_info"

    model: Mapped[str] = mapped_column(String)
    cores: Mapped[int] = mapped_column(Integer)
    threads: Mapped[int] = mapped_column(Integer)
    current_freq_mhz: Mapped[float] = mapped_column(Float)
    max_freq_mhz: Mapped[float] = mapped_column(Float)
    usage_percent: Mapped[float] = mapped_column(Float)

    @classmethod
    def from_record(cls, record: CpuInfo, run_id) -> "CpuInfoRow":
        return cls(run_id=run_id, **record.model_dump())

    def to_record(self) -> CpuInfo:
        return CpuInfo(
            model=self.model,
            cores=self.cores,
            threads=self.threads,
            current_freq_mhz=self.current_freq_mhz,
            max_freq_mhz=self.max_freq_mhz,
            usage_percent=self.usage_percent,
        )


class MemoryInfoRow(Base, CaptureMixin):
    __tablename__ = "memory_info"

    total_mb: Mapped[int] = mapped_column(Integer)
    available_mb: Mapped[int] = mapped_column(Integer)
    used_mb: Mapped[int] = mapped_column(Integer)
    usage_percent: Mapped[float] = mapped_column(Float)
    swap_total_mb: Mapped[int] = mapped_column(Integer)
    swap_used_mb: Mapped[int] = mapped_column(Integer)

    @classmethod
    def from_record(cls, record: MemoryInfo, run_id) -> "MemoryInfoRow":
        return cls(run_id=run_id, **record.model_dump())

    def to_record(self) -> MemoryInfo:
        return MemoryInfo(
            total_mb=self.total_mb,
            available_mb=self.available_mb,
            used_mb=self.used_mb,
            usage_percent=self.usage_percent,
            swap_total_mb=self.swap_total_mb,
            swap_used_mb=self.swap_used_mb,
        )


class DiskInfoRow(Base, CaptureMixin):
    __tablename__ = "disk_info"

    device: Mapped[str] = mapped_column(String)
    mount_point: Mapped[str] = mapped_column(String)
    filesystem: Mapped[str] = mapped_column(String)
    size_gb: Mapped[float] = mapped_column(Float)
    used_gb: Mapped[float] = mapped_column(Float)
    available_gb: Mapped[float] = mapped_column(Float)
    usage_percent: Mapped[float] = mapped_column(Float)

    @classmethod
    def from_record(cls, record: DiskInfo, run_id) -> "DiskInfoRow":
        return cls(run_id=run_id, **record.model_dump())

    def to_record(self) -> DiskInfo:
        return DiskInfo(
            device=self.device,
            mount_point=self.mount_point,
            filesystem=self.filesystem,
            size_gb=self.size_gb,
            used_gb=self.used_gb,
            available_gb=self.available_gb,
            usage_percent=self.usage_percent,
        )


class NetworkInfoRow(Base, CaptureMixin):
    __tablename__ = "network_info"

    interface_name: Mapped[str] = mapped_column(String)
    ip_address: Mapped[str] = mapped_column(String)
    mac_address: Mapped[str] = mapped_column(String)
    state: Mapped[str] = mapped_column(String)
    speed_mbps: Mapped[int] = mapped_column(Integer)
    rx_bytes: Mapped[int] = mapped_column(BigInteger)
    tx_bytes: Mapped[int] = mapped_column(BigInteger)

    @classmethod
    def from_record(cls, record: NetworkInterface, run_id) -> "NetworkInfoRow":
        data = record.model_dump()
        return cls(run_id=run_id, interface_name=data.pop("name"), **data)

    def to_record(self) -> NetworkInterface:
        return NetworkInterface(
            name=self.interface_name,
            ip_address=self.ip_address,
            mac_address=self.mac_address,
            state=self.state,
            speed_mbps=self.speed_mbps,
            rx_bytes=self.rx_bytes,
            tx_bytes=self.tx_bytes,
        )


class GpuInfoRow(Base, CaptureMixin):
    __tablename__ = "gpu_info"

    vendor: Mapped[str] = mapped_column(String)
    model: Mapped[str] = mapped_column(String)
    driver_version: Mapped[str] = mapped_column(String)
    memory_total_mb: Mapped[int] = mapped_column(Integer)
    memory_used_mb: Mapped[int] = mapped_column(Integer)
    temperature_c: Mapped[int] = mapped_column(Integer)
    utilization_percent: Mapped[int] = mapped_column(Integer)

    @classmethod
    def from_record(cls, record: GpuInfo, run_id) -> "GpuInfoRow":
        return cls(run_id=run_id, **record.model_dump())

    def to_record(self) -> GpuInfo:
        return GpuInfo(
            vendor=self.vendor,
            model=self.model,
            driver_version=self.driver_version,
            memory_total_mb=self.memory_total_mb,
            memory_used_mb=self.memory_used_mb,
            temperature_c=self.temperature_c,
            utilization_percent=self.utilization_percent,
        )


class ServiceInfoRow(Base, CaptureMixin):
    __tablename__ = "service_info"

    service_name: Mapped[str] = mapped_column(String)
    state: Mapped[str] = mapped_column(String)
    enabled: Mapped[bool] = mapped_column(Boolean)
    load_state: Mapped[str] = mapped_column(String)
    active_state: Mapped[str] = mapped_column(String)
    sub_state: Mapped[str] = mapped_column(String)

    @classmethod
    def from_record(cls, record: ServiceStatus, run_id) -> "ServiceInfoRow":
        data = record.model_dump()
        return cls(run_id=run_id, service_name=data.pop("name"), **data)

    def to_record(self) -> ServiceStatus:
        return ServiceStatus(
            name=self.service_name,
            state=self.state,
            enabled=self.enabled,
            load_state=self.load_state,
            active_state=self.active_state,
            sub_state=self.sub_state,
        )
