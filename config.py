"""Runtime configuration, read from the environment (and a local .env)."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

BASE_DIR = Path(__file__).parent


def _get_db_path() -> Path:
    """Get database path from environment variable or default location."""
    if env_path := os.environ.get("TIMESHEET_DB"):
        return Path(env_path)
    return BASE_DIR / "data" / "timesheet.db"


def _get_seed_path() -> Path:
    if env_path := os.environ.get("TIMESHEET_SEED"):
        return Path(env_path)
    return BASE_DIR / "data" / "seed.json"


@dataclass
class Settings:
    db_path: Path
    seed_path: Path
    api_url: str = "http://127.0.0.1:8000"
    host: str = "127.0.0.1"
    port: int = 8000
    log_level: str = "INFO"
    log_file: str | None = None


def load_settings() -> Settings:
    return Settings(
        db_path=_get_db_path(),
        seed_path=_get_seed_path(),
        api_url=os.environ.get("TIMESHEET_API_URL", "http://127.0.0.1:8000").rstrip("/"),
        host=os.environ.get("TIMESHEET_HOST", "127.0.0.1"),
        port=int(os.environ.get("TIMESHEET_PORT", "8000")),
        log_level=os.environ.get("TIMESHEET_LOG_LEVEL", "INFO").upper(),
        log_file=os.environ.get("TIMESHEET_LOG_FILE") or None,
    )


def configure_logging(settings: Settings, log_file: str | None = None) -> None:
    """Set up root logging; pass ``log_file`` to keep output off the terminal."""
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        filename=log_file or settings.log_file,
    )
