"""Filtering and top-N ranking over a finished scan report."""

from __future__ import annotations

from dataclasses import dataclass

from volscan.core.collector import sort_by_size
from volscan.models.scan_result import FileEntry, ScanReport, VolumeReport
from volscan.models.volume import Volume

DEFAULT_TOP_N = 5

# Sizes at or above this many MiB are shown in GiB.
_GB_THRESHOLD_MB = 1000.0


@dataclass(frozen=True, slots=True)
class VolumeView:
    """Display projection of one volume: its largest matching files."""

    volume: Volume
    files: tuple[FileEntry, ...]
    match_count: int


def display_size(size_mb: float) -> tuple[float, str]:
    """Return ``(value, unit)`` for a size in MiB, switching to GiB at 1000 MiB."""
    if size_mb >= _GB_THRESHOLD_MB:
        return size_mb / 1024, "GB"
    return size_mb, "MB"


def format_size(size_mb: float) -> str:
    """Format a size in MiB as reports show it, e.g. ``1.95 GB``."""
    value, unit = display_size(size_mb)
    return f"{value:.2f} {unit}"


def matches(entry: FileEntry, extension: str = "", name: str = "") -> bool:
    """Literal suffix and substring tests on the path. Empty text matches all."""
    return entry.path.endswith(extension) and name in entry.path


def filter_files(volume_report: VolumeReport, extension: str = "", name: str = "") -> list[FileEntry]:
    """Return the volume's files matching both filters, largest first."""
    return sort_by_size(f for f in volume_report.files if matches(f, extension, name))


def top_files(files: list[FileEntry], limit: int = DEFAULT_TOP_N) -> list[FileEntry]:
    return sort_by_size(files)[:limit]


def filter_report(
    report: ScanReport,
    extension: str = "",
    name: str = "",
    limit: int = DEFAULT_TOP_N,
) -> list[VolumeView]:
    """Build one view per volume with at most *limit* matching files."""
    views: list[VolumeView] = []
    for volume_report in report.volumes:
        matching = filter_files(volume_report, extension, name)
        views.append(
            VolumeView(
                volume=volume_report.volume,
                files=tuple(matching[:limit]),
                match_count=len(matching),
            )
        )
    return views
