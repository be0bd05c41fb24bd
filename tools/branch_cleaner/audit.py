"""CSV audit log of deleted branches."""

import csv
from datetime import datetime
from pathlib import Path
from typing import List, Sequence, Tuple

from shared.logger import get_logger

from .models import LogEntry

logger = get_logger(__name__)

LOG_FILE_PREFIX = "deleted_branches_log_"

# (attribute, header title) in output order
COLUMNS: Tuple[Tuple[str, str], ...] = (
    ("branch", "Branch Name"),
    ("last_commit_date", "Last Commit Date"),
    ("deleted_at", "Date Deleted"),
    ("commit_hash", "Last Commit Hash"),
    ("commit_message", "Last Commit Message"),
    ("author", "Author"),
    ("merged_to_main", "Merged to Main"),
)


def build_log_filename(started_at: datetime) -> str:
    """
    Build the audit log filename for a run.

    Colons and periods in the timestamp are replaced with hyphens so the
    name is valid on every filesystem.

    Args:
        started_at: Wall-clock start of the run

    Returns:
        Filename such as "deleted_branches_log_2025-07-01T10-00-00-000000+00-00.csv"
    """
    stamp = started_at.isoformat().replace(":", "-").replace(".", "-")
    return f"{LOG_FILE_PREFIX}{stamp}.csv"


def _format_value(value) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, datetime):
        return value.isoformat()
    return str(value)


def entry_to_row(entry: LogEntry) -> List[str]:
    """Render a log entry as CSV cells in column order."""
    return [_format_value(getattr(entry, attr)) for attr, _ in COLUMNS]


def write_audit_log(entries: Sequence[LogEntry], path: Path) -> Path:
    """
    Write log entries to a CSV file with a header row.

    Args:
        entries: Entries to write, one row each
        path: Destination file (parent directories are created)

    Returns:
        Path of the written file
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, "w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow([title for _, title in COLUMNS])
        for entry in entries:
            writer.writerow(entry_to_row(entry))

    logger.info(f"Audit log written to {path} ({len(entries)} entries)")
    return path
