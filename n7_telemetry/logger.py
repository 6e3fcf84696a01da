import logging
import sys
from datetime import datetime, timezone

from .config import settings

# ANSI escape codes
_RESET    = "\033[0m"
_BOLD     = "\033[1m"
_DIM      = "\033[2m"

# Level → color
_LEVEL_COLORS = {
    "DEBUG":    "\033[36m",    # Cyan
    "INFO":     "\033[32m",    # Green
    "WARNING":  "\033[33m",    # Yellow
    "ERROR":    "\033[31m",    # Red
    "CRITICAL": "\033[35;1m",  # Bright Magenta
}

# Component badge: blue for the telemetry collector
_COMPONENT_COLOR = "\033[94m"
_COMPONENT_TAG   = "TELEMETRY"


class N7TelemetryFormatter(logging.Formatter):
    """
    Human-readable colored formatter for N7-Telemetry.

    Example output:
      [2026-10-18 09:12:04.118]  [TELEMETRY]  [INFO    ]  n7-telemetry.aggregator   » Snapshot 3f2a... collected in 0.42s
      [2026-10-18 09:12:04.120]  [TELEMETRY]  [WARNING ]  n7-telemetry.command-runner  » Command timed out after 5.0s: nvidia-smi
      [2026-10-18 09:12:04.131]  [TELEMETRY]  [ERROR   ]  n7-telemetry.persistence  » Failed to write gpu_info
    """

    def format(self, record: logging.LogRecord) -> str:
        # --- Timestamp [YYYY-MM-DD HH:MM:SS.mmm] ---
        ts = datetime.fromtimestamp(record.created, tz=timezone.utc).strftime(
            "%Y-%m-%d %H:%M:%S.%f"
        )[:-3]  # trim microseconds → milliseconds
        ts_part = f"{_DIM}[{ts}]{_RESET}"

        # --- Component badge [TELEMETRY] ---
        badge = f"{_COMPONENT_COLOR}{_BOLD}[{_COMPONENT_TAG}]{_RESET}"

        # --- Level tag [INFO    ] padded to 8 chars inside brackets ---
        level      = record.levelname
        lcolor     = _LEVEL_COLORS.get(level, "")
        level_part = f"{lcolor}{_BOLD}[{level:<8}]{_RESET}"

        # --- Logger name (dimmed) ---
        name_part = f"{_DIM}{record.name}{_RESET}"

        # --- Message ---
        msg = record.getMessage()
        if record.exc_info:
            msg = msg + "\n" + self.formatException(record.exc_info)

        return f"{ts_part}  {badge}  {level_part}  {name_part}  » {msg}"


def setup_logging() -> logging.Logger:
    """
    Configure logging for N7-Telemetry.

    Development  → colored, human-readable lines to stderr
    Production   → plain structured lines to stderr (no color codes)

    Logs go to stderr so `main.py --json` keeps stdout clean.
    Log level is controlled by settings.LOG_LEVEL (default: INFO).
    """
    root = logging.getLogger()

    # Remove handlers added by imported libraries before us
    for h in root.handlers[:]:
        root.removeHandler(h)

    handler = logging.StreamHandler(sys.stderr)

    if settings.ENVIRONMENT == "production":
        # Plain structured format for log aggregators (no ANSI codes)
        plain_fmt = logging.Formatter(
            fmt="[%(asctime)s]  [TELEMETRY]  [%(levelname)-8s]  %(name)s  » %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        handler.setFormatter(plain_fmt)
    else:
        handler.setFormatter(N7TelemetryFormatter())

    root.addHandler(handler)
    root.setLevel(settings.LOG_LEVEL)

    # Suppress chatty third-party loggers
    logging.getLogger("asyncio").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy").setLevel(logging.WARNING)

    return root


logger = setup_logging()
