"""Paths and defaults shared across the tracker."""
import os
from pathlib import Path

APP_DIR = Path.home() / ".immersion_tracker"

DEFAULT_DB_PATH = os.environ.get("IMMERSION_TRACKER_DB", str(APP_DIR / "tracker.db"))
DEFAULT_LOG_PATH = str(APP_DIR / "tracker.log")

# Cap on never-reviewed cards added to a review session.
DEFAULT_NEW_CARD_LIMIT = 10
