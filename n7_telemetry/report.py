from typing import List

from .schemas.snapshot import Snapshot


def render_report(snapshot: Snapshot) -> str:
    """Human-readable summary of a Snapshot."""
    lines: List[str] = [
        "=" * 80,
        "SYSTEM INFORMATION SUMMARY",
        f"Run: {snapshot.run_id}  Captured: {snapshot.captured_at:%Y-%m-%d %H:%M:%S}",
        "=" * 80,
        "",
    ]

    system = snapshot.system
    lines += [
        f"Hostname: {system.hostname}",
        f"OS: {system.os_name} {system.os_version}",
        f"Kernel: {system.kernel}",
        f"Architecture: {system.architecture}",
        f"Uptime: {_duration(system.uptime_seconds)} (booted {system.boot_time:%Y-%m-%d %H:%M:%S} UTC, TZ {system.timezone})",
    ]

    cpu = snapshot.cpu
    lines += [
        "",
        f"CPU: {cpu.model}",
        f"Cores/Threads: {cpu.cores}/{cpu.threads}",
        f"Frequency: {cpu.current_freq_mhz:.0f} MHz (max {cpu.max_freq_mhz:.0f} MHz)",
    ]

    mem = snapshot.memory
    lines += [
        "",
        f"Memory: {mem.used_mb}MB / {mem.total_mb}MB ({mem.usage_percent:.1f}%), {mem.available_mb}MB available",
        f"Swap: {mem.swap_used_mb}MB / {mem.swap_total_mb}MB",
    ]

    if snapshot.disks:
        lines += ["", "Disks:"]
        for disk in snapshot.disks:
            lines.append(
                f"  {disk.mount_point:<20} {disk.device:<24} {disk.filesystem:<8} "
                f"{disk.used_gb:8.1f}G / {disk.size_gb:8.1f}G ({disk.usage_percent:.0f}%)"
            )

    if snapshot.network:
        lines += ["", "Network:"]
        for iface in snapshot.network:
            lines.append(
                f"  {iface.name:<16} {iface.state:<8} {iface.ip_address or '-':<16} "
                f"{iface.mac_address or '-':<18} rx={iface.rx_bytes} tx={iface.tx_bytes}"
            )

    if snapshot.gpus:
        lines += ["", "GPUs:"]
        for gpu in snapshot.gpus:
            lines.append(
                f"  {gpu.vendor} {gpu.model} (driver {gpu.driver_version}) "
                f"{gpu.memory_used_mb}/{gpu.memory_total_mb}MB {gpu.temperature_c}C {gpu.utilization_percent}%"
            )

    if snapshot.services:
        lines += ["", "Services:"]
        for svc in snapshot.services:
            enabled = "enabled" if svc.enabled else "disabled"
            lines.append(f"  {svc.name:<12} {svc.state:<10} {enabled:<9} {svc.load_state}/{svc.sub_state}")

    lines += ["", "=" * 80]
    return "\n".join(lines)


def _duration(seconds: int) -> str:
    days, rem = divmod(seconds, 86400)
    hours, rem = divmod(rem, 3600)
    minutes = rem // 60
    if days:
        return f"{days}d {hours:02d}h {minutes:02d}m"
    return f"{hours:02d}h {minutes:02d}m"
