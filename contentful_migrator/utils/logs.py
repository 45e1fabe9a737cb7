"""
Plain-text progress logging for the migration.

Every component reports progress through :func:`log_message`, which prints a
timestamped line and appends the same line to ``reports/migration/migration.log``
so a supervised run leaves a readable trail behind it.
"""

from __future__ import annotations

import os
from datetime import datetime

LOG_DIR = os.path.join("reports", "migration")
LOG_FILE = os.path.join(LOG_DIR, "migration.log")


def log_message(message: str, level: str = "INFO") -> None:
    """Print ``message`` with a timestamp and append it to the migration log."""
    timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
    log_entry = f"[{timestamp}] {level}: {message}"
    print(log_entry)

    os.makedirs(LOG_DIR, exist_ok=True)
    with open(LOG_FILE, "a", encoding="utf-8") as f:
        f.write(log_entry + "\n")
