from pathlib import Path
from typing import List, Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Resolve .env relative to the project root (one level up from this package)
_ENV_FILE = Path(__file__).resolve().parent.parent / ".env"

DEFAULT_WATCHED_SERVICES = [
    "pipewire",
    "pulseaudio",
    "docker",
    "ssh",
    "nginx",
    "apache2",
    "mysql",
    "postgresql",
]


class Settings(BaseSettings):
    """
    Configuration for the N7 Telemetry collector.
    Reads from environment variables and .env file.
    """
    model_config = SettingsConfigDict(env_file=str(_ENV_FILE), env_file_encoding="utf-8", case_sensitive=False, extra="ignore")

    ENVIRONMENT: Literal["development", "production", "testing"] = "development"
    LOG_LEVEL: str = "INFO"
    DEBUG: bool = False  # Echo SQL statements

    # Storage: DATABASE_URL wins over DB_PATH when set
    DB_PATH: str = "~/.local/share/n7-telemetry/telemetry.db"
    DATABASE_URL: str = ""

    # Collection schedule
    COLLECT_INTERVAL_SECONDS: int = Field(default=3600, ge=60)
    RETENTION_DAYS: int = Field(default=90, ge=1)

    # Command runner limits
    COMMAND_TIMEOUT_SECONDS: float = Field(default=5.0, gt=0)
    MAX_CONCURRENT_COMMANDS: int = Field(default=8, ge=1)

    # Probe configuration
    WATCHED_SERVICES: List[str] = Field(default_factory=lambda: list(DEFAULT_WATCHED_SERVICES))
    VIRTUAL_FILESYSTEMS: List[str] = Field(default_factory=lambda: ["tmpfs", "devtmpfs"])


def resolve_database_url(cfg: "Settings") -> str:
    """
    Return the SQLAlchemy async URL for the telemetry store.
    For the default SQLite file, expands ~ and creates the parent directory.
    """
    if cfg.DATABASE_URL:
        return cfg.DATABASE_URL

    db_path = Path(cfg.DB_PATH).expanduser()
    db_path.parent.mkdir(parents=True, exist_ok=True)
    return f"sqlite+aiosqlite:///{db_path}"


settings = Settings()
