"""Scan result dataclasses."""

from __future__ import annotations

from dataclasses import dataclass

from volscan.models.volume import Volume
from volscan.utils import MIB


@dataclass(frozen=True, slots=True)
class FileEntry:
    """Single regular file found during a scan.

    ``size_bytes`` is the canonical size; ``size_mb`` is derived for
    display and export.
    """

    path: str
    size_bytes: int

    @property
    def size_mb(self) -> float:
        return self.size_bytes / MIB


@dataclass(frozen=True, slots=True)
class VolumeReport:
    """A volume and its files, largest first."""

    volume: Volume
    files: tuple[FileEntry, ...] = ()

    @property
    def file_count(self) -> int:
        return len(self.files)

    @property
    def total_file_bytes(self) -> int:
        return sum(f.size_bytes for f in self.files)


@dataclass(frozen=True, slots=True)
class ScanReport:
    """Result of scanning every qualifying volume once."""

    volumes: tuple[VolumeReport, ...] = ()
    duration: float = 0.0

    @classmethod
    def empty(cls) -> ScanReport:
        """Report used before any scan has completed."""
        return cls()
