from datetime import datetime, timezone
from typing import List
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field

UNKNOWN = "Unknown"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class _Record(BaseModel):
    """Immutable telemetry record. Every field has a neutral default."""
    model_config = ConfigDict(frozen=True, from_attributes=True)


class SystemIdentity(_Record):
    hostname: str = UNKNOWN
    kernel: str = UNKNOWN
    os_name: str = UNKNOWN
    os_version: str = UNKNOWN
    architecture: str = UNKNOWN
    uptime_seconds: int = Field(default=0, ge=0)
    boot_time: datetime = Field(default_factory=utc_now)  # now - uptime
    timezone: str = "UTC"


class CpuInfo(_Record):
    model: str = UNKNOWN
    cores: int = Field(default=0, ge=0)
    threads: int = Field(default=0, ge=0)  # mirrors cores
    current_freq_mhz: float = Field(default=0.0, ge=0)
    max_freq_mhz: float = Field(default=0.0, ge=0)
    usage_percent: float = Field(default=0.0, ge=0, le=100)  # reserved


class MemoryInfo(_Record):
    total_mb: int = Field(default=0, ge=0)
    available_mb: int = Field(default=0, ge=0)
    used_mb: int = Field(default=0, ge=0)
    usage_percent: float = Field(default=0.0, ge=0, le=100)
    swap_total_mb: int = Field(default=0, ge=0)
    swap_used_mb: int = Field(default=0, ge=0)


class DiskInfo(_Record):
    device: str = ""
    mount_point: str = ""
    filesystem: str = ""
    size_gb: float = Field(default=0.0, ge=0)
    used_gb: float = Field(default=0.0, ge=0)
    available_gb: float = Field(default=0.0, ge=0)
    usage_percent: float = Field(default=0.0, ge=0, le=100)


class NetworkInterface(_Record):
    name: str = ""
    ip_address: str = ""
    mac_address: str = ""
    state: str = ""
    speed_mbps: int = Field(default=0, ge=0)  # reserved
    rx_bytes: int = Field(default=0, ge=0)
    tx_bytes: int = Field(default=0, ge=0)


class GpuInfo(_Record):
    vendor: str = UNKNOWN
    model: str = UNKNOWN
    driver_version: str = UNKNOWN
    memory_total_mb: int = Field(default=0, ge=0)
    memory_used_mb: int = Field(default=0, ge=0)
    temperature_c: int = Field(default=0, ge=0)
    utilization_percent: int = Field(default=0, ge=0, le=100)


class ServiceStatus(_Record):
    name: str
    state: str = "inactive"
    enabled: bool = False
    load_state: str = "unknown"
    active_state: str = "unknown"
    sub_state: str = "unknown"


class Snapshot(BaseModel):
    """
    Everything one collection pass produced.
    `run_id` ties together the rows persisted from this pass.
    """
    model_config = ConfigDict(frozen=True)

    run_id: UUID = Field(default_factory=uuid4)
    captured_at: datetime = Field(default_factory=utc_now)
    system: SystemIdentity = Field(default_factory=SystemIdentity)
    cpu: CpuInfo = Field(default_factory=CpuInfo)
    memory: MemoryInfo = Field(default_factory=MemoryInfo)
    disks: List[DiskInfo] = Field(default_factory=list)
    network: List[NetworkInterface] = Field(default_factory=list)
    gpus: List[GpuInfo] = Field(default_factory=list)
    services: List[ServiceStatus] = Field(default_factory=list)
