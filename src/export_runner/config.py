"""Environment-variable-based configuration for the export runner."""

from __future__ import annotations

import os
from pathlib import Path

GARMIN_EMAIL: str = os.environ.get("GARMIN_EMAIL", "")
GARMIN_PASSWORD: str = os.environ.get("GARMIN_PASSWORD", "")
TOKEN_DIR: Path = Path(os.environ.get("GARMIN_TOKEN_DIR", "~/.garminconnect")).expanduser()
OUTPUT_DIR: Path = Path(os.environ.get("EXPORT_OUTPUT_DIR", ".")).expanduser()
MAX_WORKOUTS: int = int(os.environ.get("EXPORT_MAX_WORKOUTS", "1000"))
