from datetime import datetime

def print_banner(service_name: str, version: str = "1.0.0"):
    """
    Print the Naga-7 startup banner.

    Args:
        service_name: Name of the service starting up (e.g., "N7-Telemetry")
        version: Version number of the service (default: "1.0.0")
    """
    print("=" * 80)
    print(f"  NAGA-7 (N7) - Host Telemetry Collector")
    print("=" * 80)
    print(f"  Service:        {service_name}")
    print(f"  Version:        {version}")
    print(f"  Started:        {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
    print("-" * 80)
    print(f"  Description:    Point-in-time hardware and service snapshots")
    print(f"  Collects:       System | CPU | Memory | Disks | Network | GPUs | Services")
    print("=" * 80)
    print()
