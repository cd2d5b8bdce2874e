"""Parallel, error-tolerant filesystem tree walker."""

from __future__ import annotations

import logging
import os
import queue
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from stat import S_ISDIR, S_ISREG
from typing import Callable, Iterator

from volscan.utils import default_workers

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class WalkEntry:
    """One filesystem entry discovered during a walk.

    Exactly one of ``stat`` and ``error`` is set.
    """

    path: str
    stat: os.stat_result | None = None
    error: OSError | None = None

    @property
    def is_file(self) -> bool:
        return self.stat is not None and S_ISREG(self.stat.st_mode)

    @property
    def is_dir(self) -> bool:
        return self.stat is not None and S_ISDIR(self.stat.st_mode)


EntrySink = Callable[[WalkEntry], None]

_DONE = object()


class TreeWalker:
    """Walks a directory tree on a thread pool.

    Every directory listing is a separate task; workers push the
    subdirectories they find back onto the pool, so a slow branch never
    stalls the others. Symbolic links are resolved for metadata but never
    descended. Entries that cannot be listed or statted are reported as
    error entries and the walk carries on.
    """

    def __init__(self, max_workers: int | None = None, one_file_system: bool = False) -> None:
        self.max_workers = max_workers or default_workers()
        self.one_file_system = one_file_system

    def for_each(
        self,
        root: str,
        sink: EntrySink,
        cancel: threading.Event | None = None,
    ) -> None:
        """Call *sink* for every entry under *root*, from worker threads.

        Returns once every listing task has finished. Setting *cancel*
        stops workers from listing further directories.
        """
        cancel = cancel or threading.Event()
        try:
            root_stat = os.stat(root)
        except OSError as e:
            sink(WalkEntry(root, error=e))
            return
        sink(WalkEntry(root, stat=root_stat))
        if not S_ISDIR(root_stat.st_mode):
            return

        root_dev = root_stat.st_dev
        lock = threading.Lock()
        finished = threading.Event()
        pending = 0
        failures: list[BaseException] = []

        with ThreadPoolExecutor(max_workers=self.max_workers, thread_name_prefix="volscan-walk") as executor:

            def submit(path: str) -> None:
                nonlocal pending
                with lock:
                    pending += 1
                executor.submit(visit, path)

            def visit(path: str) -> None:
                nonlocal pending
                try:
                    if not cancel.is_set():
                        self._list_dir(path, root_dev, submit, sink)
                except Exception as e:
                    with lock:
                        failures.append(e)
                    cancel.set()
                finally:
                    with lock:
                        pending -= 1
                        if pending == 0:
                            finished.set()

            submit(root)
            finished.wait()

        if failures:
            raise failures[0]

    def walk(self, root: str) -> Iterator[WalkEntry]:
        """Lazily yield every entry under *root*, in no particular order."""
        entries: queue.Queue = queue.Queue()
        cancel = threading.Event()

        def produce() -> None:
            try:
                self.for_each(root, entries.put, cancel)
            except Exception:
                log.exception("Walk of %s failed", root)
            finally:
                entries.put(_DONE)

        threading.Thread(target=produce, name="volscan-walk-producer", daemon=True).start()
        try:
            while True:
                item = entries.get()
                if item is _DONE:
                    return
                yield item
        finally:
            cancel.set()

    def _list_dir(
        self,
        path: str,
        root_dev: int,
        submit: Callable[[str], None],
        sink: EntrySink,
    ) -> None:
        """List one directory, report its entries and queue its subdirectories."""
        try:
            with os.scandir(path) as it:
                for entry in it:
                    try:
                        descend = entry.is_dir(follow_symlinks=False)
                        entry_stat = entry.stat()
                    except OSError as e:
                        sink(WalkEntry(entry.path, error=e))
                        continue
                    sink(WalkEntry(entry.path, stat=entry_stat))
                    if descend and not (self.one_file_system and entry_stat.st_dev != root_dev):
                        submit(entry.path)
        except OSError as e:
            log.debug("Cannot list %s: %s", path, e)
            sink(WalkEntry(path, error=e))
