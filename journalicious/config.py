# -*- coding: utf-8 -*-
"""Configuration, data-directory paths and logging for Journalicious.

The JSON config file only holds UI preferences and an optional data
directory override. Journal entries and secrets live in the data directory.
"""
from __future__ import annotations

from dataclasses import dataclass
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Dict, Optional
import json
import logging
import os

# ---------------------------------------------------------------------
# Config management (JSON on disk)
# ---------------------------------------------------------------------

APP_NAME = "journalicious"

DB_FILENAME = "journals.db"
SECRETS_FILENAME = "secrets.txt"
LOG_FILENAME = "journalicious.log"

THEMES = ("ink", "paper")

DEFAULT_CONFIG: Dict[str, object] = {
    "active_theme": "ink",
    # Empty means "use the platform default".
    "data_dir": "",
    "log_level": "INFO",
}


def _config_dir() -> Path:
    """Return the config directory path for this platform."""
    if os.name == "nt":
        base = os.environ.get("APPDATA", os.path.expanduser("~\\AppData\\Roaming"))
        return Path(base) / APP_NAME
    base = os.environ.get("XDG_CONFIG_HOME", os.path.expanduser("~/.config"))
    return Path(base) / APP_NAME


def _config_path() -> Path:
    override = os.environ.get("JOURNALICIOUS_CONFIG")
    if override:
        return Path(override).expanduser()
    return _config_dir() / "config.json"


def load_config() -> Dict[str, object]:
    """Load the merged configuration (defaults + file)."""
    path = _config_path()
    if not path.exists():
        save_config(DEFAULT_CONFIG)
        return json.loads(json.dumps(DEFAULT_CONFIG))
    with path.open("r", encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"{path}: expected a JSON object")
    merged = json.loads(json.dumps(DEFAULT_CONFIG))
    merged.update(data)
    return merged


def save_config(cfg: Dict[str, object]) -> None:
    """Persist *cfg* to the JSON config file."""
    path = _config_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        json.dump(cfg, f, indent=2)


# ---------------------------------------------------------------------
# Data directory
# ---------------------------------------------------------------------

def _default_data_dir() -> Path:
    if os.name == "nt":
        base = os.environ.get("APPDATA", os.path.expanduser("~\\AppData\\Roaming"))
        return Path(base) / APP_NAME / "data"
    base = os.environ.get("XDG_DATA_HOME", os.path.expanduser("~/.local/share"))
    return Path(base) / APP_NAME


@dataclass(frozen=True)
class AppPaths:
    """Files that make up one data directory."""

    data_dir: Path

    @property
    def db_path(self) -> Path:
        return self.data_dir / DB_FILENAME

    @property
    def secrets_path(self) -> Path:
        return self.data_dir / SECRETS_FILENAME

    @property
    def log_path(self) -> Path:
        return self.data_dir / LOG_FILENAME


def resolve_paths(cfg: Optional[Dict[str, object]] = None) -> AppPaths:
    """Pick the data directory: env var, then config key, then platform default."""
    env_dir = os.environ.get("JOURNALICIOUS_DATA_DIR")
    if env_dir:
        return AppPaths(Path(env_dir).expanduser())
    configured = str((cfg or {}).get("data_dir") or "")
    if configured:
        return AppPaths(Path(configured).expanduser())
    return AppPaths(_default_data_dir())


# ---------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------

def setup_logging(paths: AppPaths, level: str = "INFO") -> logging.Logger:
    """Attach a rotating file handler to the application logger.

    The terminal belongs to the UI, so nothing is logged to the console.
    Calling this twice does not add a second handler.
    """
    logger = logging.getLogger(APP_NAME)
    logger.setLevel(getattr(logging, str(level).upper(), logging.INFO))

    if not logger.handlers:
        paths.data_dir.mkdir(parents=True, exist_ok=True)
        handler = RotatingFileHandler(
            paths.log_path,
            maxBytes=2_000_000,
            backupCount=3,
            encoding="utf-8",
        )
        handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )
        logger.addHandler(handler)

    return logger
