"""JSON and CSV export of scan reports."""

from __future__ import annotations

import csv
import io
import json
import logging
from pathlib import Path
from typing import Any

from volscan.core.view import display_size
from volscan.models.scan_result import ScanReport

log = logging.getLogger(__name__)

JSON_FILE = "disk_usage.json"
CSV_FILE = "disk_usage.csv"

FORMATS = ("json", "csv")


class ExportError(Exception):
    """Raised when an export file cannot be created or written."""


def report_to_dicts(report: ScanReport) -> list[dict[str, Any]]:
    """Serializable form of a report: sizes in GiB for volumes, MiB for files."""
    return [
        {
            "name": vr.volume.name,
            "total_space": vr.volume.total_gib,
            "used_space": vr.volume.used_gib,
            "files": [{"path": f.path, "size_mb": f.size_mb} for f in vr.files],
        }
        for vr in report.volumes
    ]


def _target(directory: Path | str | None, filename: str) -> Path:
    return Path(directory if directory is not None else Path.cwd()) / filename


def export_json(report: ScanReport, directory: Path | str | None = None) -> Path:
    """Write the full report to ``disk_usage.json``, replacing any existing file.

    Raises:
        ExportError: If the file cannot be written or a path cannot be encoded.
    """
    path = _target(directory, JSON_FILE)
    try:
        data = (json.dumps(report_to_dicts(report), indent=2, ensure_ascii=False) + "\n").encode("utf-8")
        with open(path, "wb") as f:
            f.write(data)
    except (OSError, UnicodeError) as e:
        raise ExportError(f"Failed to export {path}: {e}") from e
    log.info("Exported %d volumes to %s", len(report.volumes), path)
    return path


def export_csv(report: ScanReport, directory: Path | str | None = None) -> Path:
    """Write one headerless CSV row per file to ``disk_usage.csv``.

    Columns: volume name, total GiB, used GiB, file path, size, unit.

    Raises:
        ExportError: If the file cannot be written or a path cannot be encoded.
    """
    path = _target(directory, CSV_FILE)
    buf = io.StringIO(newline="")
    writer = csv.writer(buf, lineterminator="\n")
    for vr in report.volumes:
        total = f"{vr.volume.total_gib:.2f}"
        used = f"{vr.volume.used_gib:.2f}"
        for file in vr.files:
            size, unit = display_size(file.size_mb)
            writer.writerow([vr.volume.name, total, used, file.path, f"{size:.2f}", unit])
    try:
        data = buf.getvalue().encode("utf-8")
        with open(path, "wb") as f:
            f.write(data)
    except (OSError, UnicodeError) as e:
        raise ExportError(f"Failed to export {path}: {e}") from e
    log.info("Exported %d volumes to %s", len(report.volumes), path)
    return path


def export(report: ScanReport, fmt: str, directory: Path | str | None = None) -> Path:
    """Export *report* as ``"json"`` or ``"csv"``."""
    match fmt:
        case "json":
            return export_json(report, directory)
        case "csv":
            return export_csv(report, directory)
        case _:
            raise ValueError(f"Unknown export format: {fmt!r}")


def load_json(path: Path | str) -> list[dict[str, Any]]:
    """Read back a JSON export."""
    with open(path, encoding="utf-8") as f:
        return json.load(f)
