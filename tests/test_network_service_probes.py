import pytest

from n7_telemetry.command_runner import CommandResult
from n7_telemetry.config import DEFAULT_WATCHED_SERVICES
from n7_telemetry.probes.network_probe import NetworkProbe, parse_brief_line
from n7_telemetry.probes.service_probe import ServiceProbe, parse_show_output

IP_BRIEF = """lo               UNKNOWN        127.0.0.1/8 ::1/128
eth0             UP             192.168.1.20/24 fe80::1c2b:3aff:fe4d:5e6f/64
wlan0            DOWN
veth12ab@if5     UP             fe80::a0b1:c2ff:fed3:e4f5/64
"""


def _sysfs(name, mac, rx, tx):
    base = f"/sys/class/net/{name}"
    return {
        ("cat", f"{base}/address"): f"{mac}\n",
        ("cat", f"{base}/statistics/rx_bytes"): f"{rx}\n",
        ("cat", f"{base}/statistics/tx_bytes"): f"{tx}\n",
    }


# --- NetworkProbe ---

@pytest.mark.asyncio
async def test_network_probe_lists_interfaces(make_runner):
    responses = {("ip", "-brief", "addr"): IP_BRIEF}
    responses.update(_sysfs("lo", "00:00:00:00:00:00", 1000, 1000))
    responses.update(_sysfs("eth0", "1e:2b:3a:4d:5e:6f", 123456789, 987654))
    responses.update(_sysfs("veth12ab", "a2:b1:c2:d3:e4:f5", 10, 20))

    interfaces = await NetworkProbe(make_runner(responses)).collect()

    assert [i.name for i in interfaces] == ["lo", "eth0", "wlan0", "veth12ab@if5"]

    eth0 = interfaces[1]
    assert eth0.state == "UP"
    assert eth0.ip_address == "192.168.1.20"
    assert eth0.mac_address == "1e:2b:3a:4d:5e:6f"
    assert eth0.rx_bytes == 123456789
    assert eth0.tx_bytes == 987654
    assert eth0.speed_mbps == 0

    veth = interfaces[3]
    assert veth.ip_address == "fe80::a0b1:c2ff:fed3:e4f5"
    assert veth.mac_address == "a2:b1:c2:d3:e4:f5"
    assert veth.tx_bytes == 20


@pytest.mark.asyncio
async def test_network_probe_interface_without_address_or_sysfs(make_runner):
    responses = {("ip", "-brief", "addr"): "wlan0            DOWN\n"}

    interfaces = await NetworkProbe(make_runner(responses)).collect()

    assert len(interfaces) == 1
    wlan = interfaces[0]
    assert wlan.ip_address == ""
    assert wlan.mac_address == ""
    assert wlan.rx_bytes == 0
    assert wlan.tx_bytes == 0


@pytest.mark.asyncio
async def test_network_probe_failing_ip_is_empty(failing_runner):
    assert await NetworkProbe(failing_runner).run() == []


def test_parse_brief_line():
    assert parse_brief_line("eth0  UP  10.0.0.5/16") == ("eth0", "UP", "10.0.0.5")
    assert parse_brief_line("eth1  DOWN") == ("eth1", "DOWN", "")
    assert parse_brief_line("lonely") is None
    assert parse_brief_line("") is None


# --- ServiceProbe ---

NGINX_SHOW = """Id=nginx.service
LoadState=loaded
ActiveState=active
SubState=running
UnitFileState=enabled
"""


@pytest.mark.asyncio
async def test_service_probe_reports_every_watched_service(make_runner):
    runner = make_runner({
        ("systemctl", "is-active", "nginx"): "active\n",
        ("systemctl", "is-enabled", "nginx"): "enabled\n",
        ("systemctl", "show", "nginx", "--no-pager"): NGINX_SHOW,
        # is-active exits non-zero for inactive units
        ("systemctl", "is-active", "redis"): CommandResult(succeeded=False, stdout="inactive\n"),
        ("systemctl", "is-enabled", "redis"): CommandResult(succeeded=False, stdout="disabled\n"),
    })

    watched = [*DEFAULT_WATCHED_SERVICES, "redis"]

    services = await ServiceProbe(runner, services=watched).collect()

    assert len(services) == 9
    assert [s.name for s in services] == watched
    nginx = next(s for s in services if s.name == "nginx")
    assert nginx.state == "active"
    assert nginx.enabled is True
    assert nginx.load_state == "loaded"
    assert nginx.active_state == "active"
    assert nginx.sub_state == "running"

    redis = next(s for s in services if s.name == "redis")
    assert redis.state == "inactive"
    assert redis.enabled is False
    assert redis.load_state == "unknown"


@pytest.mark.asyncio
async def test_service_probe_all_failing_still_one_record_each(failing_runner):
    services = await ServiceProbe(failing_runner, services=DEFAULT_WATCHED_SERVICES).run()

    assert len(services) == 8
    for svc in services:
        assert svc.state == "inactive"
        assert svc.enabled is False
        assert (svc.load_state, svc.active_state, svc.sub_state) == ("unknown", "unknown", "unknown")


@pytest.mark.asyncio
async def test_service_probe_enabled_requires_exact_word(make_runner):
    runner = make_runner({("systemctl", "is-enabled", "docker"): "enabled-runtime\n"})

    services = await ServiceProbe(runner, services=["docker"]).collect()

    assert services[0].enabled is False


def test_service_probe_dedupes_watch_list():
    probe = ServiceProbe(None, services=["nginx", "redis", "nginx"])

    assert probe.services == ["nginx", "redis"]
    assert [s.name for s in probe.default()] == ["nginx", "redis"]


def test_parse_show_output_missing_keys():
    states = parse_show_output("LoadState=not-found\nActiveState=\n")

    assert states == {"load_state": "not-found", "active_state": "unknown", "sub_state": "unknown"}
