import asyncio
from typing import List, Optional, Tuple

from .base import BaseProbe
from ..command_runner import CommandRunner
from ..parsing import safe_int
from ..schemas.snapshot import NetworkInterface

SYSFS_NET = "/sys/class/net"


class NetworkProbe(BaseProbe):
    """
    Network Probe.
    Responsibility: Address, state, MAC and byte counters of every interface
    reported by `ip -brief addr`.
    """

    snapshot_field = "network"

    def __init__(self, runner: CommandRunner):
        super().__init__("NetworkProbe", runner)

    async def collect(self) -> List[NetworkInterface]:
        out = await self.output(["ip", "-brief", "addr"])
        if out is None:
            return []

        listed = [entry for entry in map(parse_brief_line, out.strip().split("\n")) if entry]
        # Per-interface sysfs reads run concurrently; order follows the listing
        return list(await asyncio.gather(*(self._interface(*entry) for entry in listed)))

    def default(self) -> List[NetworkInterface]:
        return []

    async def _interface(self, name: str, state: str, ip_address: str) -> NetworkInterface:
        # veth pairs are listed as "veth0@if5"; sysfs only knows "veth0"
        sysfs_name = name.split("@", 1)[0]
        base = f"{SYSFS_NET}/{sysfs_name}"

        mac, rx, tx = await asyncio.gather(
            self.read_file(f"{base}/address"),
            self.read_file(f"{base}/statistics/rx_bytes"),
            self.read_file(f"{base}/statistics/tx_bytes"),
        )

        return NetworkInterface(
            name=name,
            ip_address=ip_address,
            mac_address=mac.strip() if mac is not None else "",
            state=state,
            speed_mbps=0,
            rx_bytes=safe_int(rx.strip()) if rx is not None else 0,
            tx_bytes=safe_int(tx.strip()) if tx is not None else 0,
        )


def parse_brief_line(line: str) -> Optional[Tuple[str, str, str]]:
    """
    "eth0  UP  192.168.1.20/24 fe80::1/64" → ("eth0", "UP", "192.168.1.20")
    Lines without at least a name and a state are rejected.
    """
    parts = line.split()
    if len(parts) < 2:
        return None
    ip_address = parts[2].split("/", 1)[0] if len(parts) > 2 else ""
    return parts[0], parts[1], ip_address
