import asyncio
import logging
from typing import Dict, Iterable, List, Optional

from .base import BaseProbe
from ..command_runner import CommandRunner
from ..config import settings
from ..schemas.snapshot import ServiceStatus

logger = logging.getLogger("n7-telemetry.probes.service")

_SHOW_KEYS = {
    "LoadState": "load_state",
    "ActiveState": "active_state",
    "SubState": "sub_state",
}


class ServiceProbe(BaseProbe):
    """
    Service Probe.
    Responsibility: systemd state of every service on the watch-list.

    The watch-list is configuration, never discovered. A service missing from
    the host is a normal observation and still yields one record.
    """

    snapshot_field = "services"

    def __init__(self, runner: CommandRunner, services: Optional[Iterable[str]] = None):
        super().__init__("ServiceProbe", runner)
        if services is None:
            services = settings.WATCHED_SERVICES
        # Drop duplicates, keep configured order
        self.services: List[str] = list(dict.fromkeys(services))

    async def collect(self) -> List[ServiceStatus]:
        logger.debug(f"Checking {len(self.services)} watched services")
        return list(await asyncio.gather(*(self._status(name) for name in self.services)))

    def default(self) -> List[ServiceStatus]:
        return [ServiceStatus(name=name) for name in self.services]

    async def _status(self, name: str) -> ServiceStatus:
        active, enabled, details = await asyncio.gather(
            self.output(["systemctl", "is-active", name]),
            self.output(["systemctl", "is-enabled", name]),
            self.output(["systemctl", "show", name, "--no-pager"]),
        )

        return ServiceStatus(
            name=name,
            state=active.strip() if active is not None and active.strip() else "inactive",
            enabled=enabled is not None and enabled.strip() == "enabled",
            **parse_show_output(details or ""),
        )


def parse_show_output(text: str) -> Dict[str, str]:
    """
    Extract LoadState / ActiveState / SubState from `systemctl show`.
    Missing keys come back as "unknown".
    """
    states = {field: "unknown" for field in _SHOW_KEYS.values()}
    for line in text.split("\n"):
        for key, field in _SHOW_KEYS.items():
            if line.startswith(f"{key}="):
                states[field] = line.split("=", 1)[1].strip() or "unknown"
    return states
