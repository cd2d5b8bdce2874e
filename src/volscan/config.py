"""Runtime scan configuration."""

from __future__ import annotations

from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any


@dataclass(frozen=True, slots=True)
class ScanConfig:
    """Options for one scanner instance.

    Built from CLI options or constructor arguments and never written to
    disk. ``export_dir=None`` means the working directory at export time.
    """

    max_workers: int | None = None
    one_file_system: bool = False
    top_n: int = 5
    tick_interval: float = 1.0
    export_dir: Path | None = None

    def __post_init__(self) -> None:
        if self.max_workers is not None and self.max_workers < 1:
            raise ValueError(f"max_workers must be positive, got {self.max_workers}")
        if self.top_n < 0:
            raise ValueError(f"top_n must not be negative, got {self.top_n}")
        if self.tick_interval <= 0:
            raise ValueError(f"tick_interval must be positive, got {self.tick_interval}")

    def with_options(self, **changes: Any) -> ScanConfig:
        """Return a copy with the non-None *changes* applied."""
        return replace(self, **{k: v for k, v in changes.items() if v is not None})
