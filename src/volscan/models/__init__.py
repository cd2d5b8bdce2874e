"""volscan data models."""

from volscan.models.volume import Volume
from volscan.models.scan_result import FileEntry, ScanReport, VolumeReport

__all__ = [
    "FileEntry",
    "ScanReport",
    "Volume",
    "VolumeReport",
]
