# Must be imported first: installs the colored formatter before any other module logs
import n7_telemetry.logger  # noqa: F401

import argparse
import asyncio
import logging

from n7_telemetry.aggregator.service import SnapshotAggregator
from n7_telemetry.collector.service import CollectorService
from n7_telemetry.command_runner import SubprocessCommandRunner
from n7_telemetry.config import resolve_database_url, settings
from n7_telemetry.persistence.service import PersistenceService
from n7_telemetry.report import render_report
from n7_telemetry.utils import print_banner

logger = logging.getLogger("n7-telemetry")


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="N7 host telemetry collector")
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument("--loop", action="store_true", help="collect every COLLECT_INTERVAL_SECONDS until interrupted")
    mode.add_argument("--report", action="store_true", help="summarize the latest stored snapshot")
    mode.add_argument("--cleanup", action="store_true", help="delete rows older than RETENTION_DAYS")
    parser.add_argument("--show", action="store_true", help="log a summary after collecting")
    parser.add_argument("--json", action="store_true", help="print the collected snapshot as JSON")
    return parser.parse_args(argv)


async def main(argv=None):
    """
    Main entry point for N7-Telemetry.
    Collects one snapshot by default; see --help for the other modes.
    """
    args = parse_args(argv)
    if not args.json:
        print_banner("N7-Telemetry")

    persistence = PersistenceService(resolve_database_url(settings))
    await persistence.start()

    try:
        if args.cleanup:
            await persistence.purge_older_than(settings.RETENTION_DAYS)
            return

        if args.report:
            snapshot = await persistence.load_latest_snapshot()
            if snapshot is None:
                logger.warning("No snapshots stored yet.")
            else:
                logger.info("\n" + render_report(snapshot))
            return

        aggregator = SnapshotAggregator(SubprocessCommandRunner(), watched_services=settings.WATCHED_SERVICES)
        collector = CollectorService(
            aggregator,
            persistence,
            interval_seconds=settings.COLLECT_INTERVAL_SECONDS,
            retention_days=settings.RETENTION_DAYS,
        )

        if args.loop:
            await collector.start()
            try:
                while True:
                    await asyncio.sleep(1)
            except asyncio.CancelledError:
                logger.info("N7-Telemetry shutting down...")
            finally:
                await collector.stop()
            return

        snapshot = await collector.run_once()
        if args.show:
            logger.info("\n" + render_report(snapshot))
        if args.json:
            print(snapshot.model_dump_json(indent=2))
    finally:
        await persistence.stop()


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("N7-Telemetry stopped by user.")
