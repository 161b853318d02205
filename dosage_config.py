"""Runtime settings, overridable from the environment.

    DOSAGE_DATA_DIR      data directory (default: $XDG_DATA_HOME/dosage)
    DOSAGE_LOG_LEVEL     logging level name (default: INFO)
    DOSAGE_PRIORITY      notification priority: normal | urgent
    DOSAGE_CLOCK_FORMAT  12h | 24h; unset means follow the locale
    DOSAGE_SUMMARY_DAYS  days covered by the summary chart (default: 7)
"""

import os
from datetime import datetime
from pathlib import Path


def _default_data_dir() -> Path:
    base = os.environ.get("XDG_DATA_HOME") or Path.home() / ".local" / "share"
    return Path(base) / "dosage"


DATA_DIR = Path(os.environ.get("DOSAGE_DATA_DIR") or _default_data_dir())
LOG_FILE = "dosage.log"
LOG_LEVEL = os.environ.get("DOSAGE_LOG_LEVEL", "INFO").upper()
NOTIFY_PRIORITY = os.environ.get("DOSAGE_PRIORITY", "normal").lower()
CLOCK_FORMAT = os.environ.get("DOSAGE_CLOCK_FORMAT", "").lower()
HISTORY_SUMMARY_DAYS = int(os.environ.get("DOSAGE_SUMMARY_DAYS", "7"))


def clock_is_12(clock_format: str = CLOCK_FORMAT) -> bool:
    """Whether times should be shown (and today's list sectioned) as AM/PM.

    With no explicit setting, the locale decides: a ``%X`` time ending in
    AM or PM means a 12-hour clock.
    """
    if clock_format in ("12h", "24h"):
        return clock_format == "12h"
    return datetime.now().strftime("%X")[-2:].upper() in ("AM", "PM")


def ensure_data_dir(path: Path = DATA_DIR) -> Path:
    path.mkdir(parents=True, exist_ok=True)
    return path
