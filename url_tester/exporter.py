"""CSV export of probe results."""

import csv
import logging
from dataclasses import asdict
from pathlib import Path
from typing import Any

from url_tester.reporter import Report

log = logging.getLogger(__name__)

EXPORT_FIELDS = (
    "environment_name",
    "url",
    "status_code",
    "response_body_preview",
    "passed",
    "error_message",
    "duration_secs",
    "state_param",
)


class ExportWriteError(Exception):
    """Raised when the export file cannot be written."""


def format_cell(value: Any) -> str:
    """Render a field value; missing values become empty cells."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def export_csv(report: Report, output_path: Path) -> int:
    """Write every result, passing first, to a CSV file.

    Args:
        report: Sorted report to export
        output_path: Destination file, overwritten if present

    Returns:
        Number of data rows written

    Raises:
        ExportWriteError: On any I/O or CSV error; a partial file may remain

    """
    rows = 0
    try:
        with open(output_path, "w", newline="", encoding="utf-8") as f:
            writer = csv.DictWriter(f, fieldnames=EXPORT_FIELDS)
            writer.writeheader()
            for result in report.ordered:
                record = asdict(result)
                writer.writerow(
                    {name: format_cell(record[name]) for name in EXPORT_FIELDS}
                )
                rows += 1
    except (OSError, csv.Error) as e:
        raise ExportWriteError(f"Failed to write CSV report {output_path}: {e}") from e

    log.debug("Wrote %d row(s) to %s", rows, output_path)
    return rows
