"""User configuration for wslreclaim."""

import json
import os
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, ValidationError

from wslreclaim.logging_setup import logger

CONFIG_DIR = Path(os.path.expanduser("~/.wslreclaim"))
CONFIG_FILE = CONFIG_DIR / "config.json"

DEFAULT_EXCLUDES = ["/mnt", "/usr/lib/wsl"]


class Settings(BaseModel):
    """Settings read from ~/.wslreclaim/config.json."""

    threshold_mb: int = Field(255, gt=0, description="Minimum directory size in the interactive report")
    excludes: list[str] = Field(
        default_factory=lambda: list(DEFAULT_EXCLUDES),
        description="Subpaths never scanned (Windows drive mounts, WSL runtime)",
    )
    max_depth: int = Field(3, ge=1, description="Report depth below the scan root")
    top_packages: int = Field(16, gt=0, description="Number of largest packages to list")
    log_level: str = Field("WARNING", description="Logging level name")
    log_file: Optional[str] = Field(None, description="Optional log file path")


def load_settings(path: Path | None = None) -> Settings:
    """
    Load settings from disk.

    A missing or unreadable file yields the defaults. A file with invalid
    values also yields the defaults, with a warning.
    """
    config_file = path or CONFIG_FILE
    if not config_file.exists():
        return Settings()

    try:
        with open(config_file) as f:
            data = json.load(f)
    except (json.JSONDecodeError, OSError) as e:
        logger.warning(f"Ignoring unreadable config {config_file}: {e}")
        return Settings()

    try:
        return Settings.model_validate(data)
    except ValidationError as e:
        logger.warning(f"Ignoring invalid config {config_file}: {e.error_count()} error(s)")
        return Settings()
