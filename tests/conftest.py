"""Shared test fixtures."""

from __future__ import annotations

import os
from pathlib import Path
from stat import S_IFDIR, S_IFREG

import pytest

from volscan.models.scan_result import FileEntry, ScanReport, VolumeReport
from volscan.models.volume import Volume
from volscan.utils import GIB, MIB


def _fake_stat(size: int = 0, is_dir: bool = False) -> os.stat_result:
    """Build an ``os.stat_result`` without touching the filesystem."""
    mode = (S_IFDIR | 0o755) if is_dir else (S_IFREG | 0o644)
    return os.stat_result((mode, 0, 0, 1, 0, 0, size, 0, 0, 0))


def _mib(count: float) -> int:
    return int(count * MIB)


@pytest.fixture
def fake_stat():
    return _fake_stat


@pytest.fixture
def make_tree(tmp_path):
    """Create sparse files under a fresh root: ``make_tree({"a/b.txt": 10})``."""
    counter = 0

    def _make(files: dict[str, int], name: str | None = None) -> Path:
        nonlocal counter
        counter += 1
        root = tmp_path / (name or f"tree{counter}")
        root.mkdir(parents=True, exist_ok=True)
        for rel, size in files.items():
            path = root / rel
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, "wb") as f:
                f.truncate(size)
        return root

    return _make


@pytest.fixture
def scenario_report() -> ScanReport:
    """One 100 GiB volume, 40 GiB used, holding files of 2000, 500 and 10 MiB."""
    volume = Volume(name="/dev/sda1", mount_point="/", total_bytes=100 * GIB, used_bytes=40 * GIB)
    files = (
        FileEntry(path="/data/video.mkv", size_bytes=_mib(2000)),
        FileEntry(path="/data/archive.zip", size_bytes=_mib(500)),
        FileEntry(path="/home/user/report.txt", size_bytes=_mib(10)),
    )
    return ScanReport(volumes=(VolumeReport(volume=volume, files=files),), duration=1.5)


@pytest.fixture
def volume_for():
    """Build a Volume rooted at a directory."""

    def _make(root: Path | str, name: str = "disk", total: int = 100 * GIB, used: int = 40 * GIB) -> Volume:
        return Volume(name=name, mount_point=str(root), total_bytes=total, used_bytes=used)

    return _make


@pytest.fixture
def undecodable_tree(tmp_path) -> Path:
    """A root holding ``bad\\xff.bin`` (3 MiB, not valid UTF-8) and ``ok.txt`` (1 MiB)."""
    root = tmp_path / "undecodable"
    root.mkdir()
    try:
        with open(os.path.join(os.fsencode(root), b"bad\xff.bin"), "wb") as f:
            f.truncate(_mib(3))
    except (OSError, UnicodeError):
        pytest.skip("filesystem rejects non-UTF-8 names")
    with open(root / "ok.txt", "wb") as f:
        f.truncate(_mib(1))
    return root
