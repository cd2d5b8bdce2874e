"""Volume dataclass."""

from __future__ import annotations

from dataclasses import dataclass

from volscan.utils import GIB


@dataclass(frozen=True, slots=True)
class Volume:
    """A mounted storage volume as reported by the OS."""

    name: str
    mount_point: str
    total_bytes: int
    used_bytes: int
    fstype: str = ""

    @property
    def total_gib(self) -> float:
        return self.total_bytes / GIB

    @property
    def used_gib(self) -> float:
        return self.used_bytes / GIB

    @property
    def usage_percent(self) -> float:
        """Used space as a percentage of capacity (0 for empty volumes)."""
        if self.total_bytes <= 0:
            return 0.0
        return self.used_bytes / self.total_bytes * 100
