import asyncio
import logging
import os
from datetime import timedelta
from typing import Tuple

from .base import BaseProbe
from ..command_runner import CommandRunner
from ..parsing import safe_int
from ..schemas.snapshot import UNKNOWN, SystemIdentity, utc_now

logger = logging.getLogger("n7-telemetry.probes.system")


class SystemIdentityProbe(BaseProbe):
    """
    Probe for host identity: hostname, kernel, distribution, architecture, uptime.
    """

    snapshot_field = "system"

    def __init__(self, runner: CommandRunner):
        super().__init__("SystemIdentityProbe", runner)

    async def collect(self) -> SystemIdentity:
        hostname, kernel, architecture, (os_name, os_version), uptime = await asyncio.gather(
            self._text(["hostname"]),
            self._text(["uname", "-r"]),
            self._text(["uname", "-m"]),
            self._distribution(),
            self.read_file("/proc/uptime"),
        )

        uptime_seconds = safe_int(uptime.split()[0]) if uptime and uptime.split() else 0

        return SystemIdentity(
            hostname=hostname,
            kernel=kernel,
            os_name=os_name,
            os_version=os_version,
            architecture=architecture,
            uptime_seconds=uptime_seconds,
            boot_time=utc_now() - timedelta(seconds=uptime_seconds),
            timezone=os.environ.get("TZ") or "UTC",
        )

    def default(self) -> SystemIdentity:
        return SystemIdentity(timezone=os.environ.get("TZ") or "UTC")

    async def _text(self, args) -> str:
        out = await self.output(args)
        if out is None or not out.strip():
            return UNKNOWN
        return out.strip()

    async def _distribution(self) -> Tuple[str, str]:
        """
        Distribution name and version from lsb_release, falling back to
        /etc/os-release on hosts without lsb_release.
        """
        os_name, os_version = await asyncio.gather(
            self._text(["lsb_release", "-i", "-s"]),
            self._text(["lsb_release", "-r", "-s"]),
        )
        if os_name != UNKNOWN and os_version != UNKNOWN:
            return os_name, os_version

        logger.debug("lsb_release unavailable, reading /etc/os-release")
        os_release = await self.read_file("/etc/os-release")
        if os_release:
            fields = _parse_os_release(os_release)
            if os_name == UNKNOWN:
                os_name = fields.get("NAME") or UNKNOWN
            if os_version == UNKNOWN:
                os_version = fields.get("VERSION_ID") or UNKNOWN
        return os_name, os_version


def _parse_os_release(text: str) -> dict:
    fields = {}
    for line in text.splitlines():
        key, sep, value = line.partition("=")
        if sep and key.strip():
            fields[key.strip()] = _unquote(value.strip())
    return fields


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
        value = value[1:-1]
    return value
