"""Accumulates regular files from a walk into a sorted list."""

from __future__ import annotations

import logging
import threading
from typing import Iterable

from volscan.core.walker import TreeWalker, WalkEntry
from volscan.models.scan_result import FileEntry
from volscan.utils import display_path

log = logging.getLogger(__name__)


def sort_by_size(files: Iterable[FileEntry]) -> list[FileEntry]:
    """Return *files* largest first. Ties keep no particular order."""
    return sorted(files, key=lambda f: f.size_bytes, reverse=True)


class FileCollector:
    """Thread-safe sink that keeps only regular files.

    Many walker threads may call :meth:`accept` at once; the lock is held
    for a single append. :meth:`finish` must only be called after every
    writer has returned.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._files: list[FileEntry] = []

    def __len__(self) -> int:
        with self._lock:
            return len(self._files)

    def accept(self, entry: WalkEntry) -> None:
        """Record *entry* if it is a regular file; drop anything else."""
        if not entry.is_file:
            return
        file = FileEntry(path=display_path(entry.path), size_bytes=entry.stat.st_size)
        with self._lock:
            self._files.append(file)

    def finish(self) -> list[FileEntry]:
        """Sort the buffer once and return it."""
        with self._lock:
            self._files = sort_by_size(self._files)
            return list(self._files)

    def collect(self, entries: Iterable[WalkEntry]) -> list[FileEntry]:
        """Accept every entry of a stream, then finish."""
        for entry in entries:
            self.accept(entry)
        return self.finish()

    def collect_tree(self, walker: TreeWalker, root: str) -> list[FileEntry]:
        """Walk *root* with *walker*, accepting entries from its worker threads."""
        walker.for_each(root, self.accept)
        files = self.finish()
        log.debug("Collected %d files under %s", len(files), root)
        return files
