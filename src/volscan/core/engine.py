"""Scan orchestration engine."""

from __future__ import annotations

import enum
import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Callable

from volscan.config import ScanConfig
from volscan.core.collector import FileCollector
from volscan.core.volumes import list_volumes
from volscan.core.walker import TreeWalker
from volscan.models.scan_result import ScanReport, VolumeReport
from volscan.models.volume import Volume

log = logging.getLogger(__name__)

SCAN_FAILED_MESSAGE = "Failed to retrieve disk information"

VolumeLister = Callable[[], list[Volume]]
CompletedCallback = Callable[[ScanReport], None]
FailedCallback = Callable[[str], None]
TickCallback = Callable[[int], None]  # (elapsed_seconds)


class ScanError(Exception):
    """Raised when a scan yields no volume reports."""


class ScanState(enum.Enum):
    IDLE = "idle"
    SCANNING = "scanning"
    COMPLETED = "completed"
    FAILED = "failed"


class ScanCounter:
    """Monotonic count of finished scan pipelines, shared across threads."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._value = 0

    @property
    def value(self) -> int:
        with self._lock:
            return self._value

    def increment(self) -> int:
        with self._lock:
            self._value += 1
            return self._value


class Ticker:
    """Calls *callback* every *interval* seconds on a daemon thread until stopped."""

    def __init__(self, interval: float, callback: Callable[[], None]) -> None:
        self._interval = interval
        self._callback = callback
        self._stopped = threading.Event()
        self._thread: threading.Thread | None = None

    def start(self) -> None:
        self._thread = threading.Thread(target=self._run, name="volscan-ticker", daemon=True)
        self._thread.start()

    def stop(self) -> None:
        self._stopped.set()

    def _run(self) -> None:
        while not self._stopped.wait(self._interval):
            try:
                self._callback()
            except Exception:
                log.exception("Tick callback failed")


class ScanAggregator:
    """Runs volume scans off the caller's thread and tracks their state.

    ``scan()`` returns immediately; the outcome arrives through
    ``on_completed`` or ``on_failed``, both called from the background
    thread. ``stop()`` only clears the scanning state: work already in
    flight runs to the end and its result is dropped.
    """

    def __init__(
        self,
        config: ScanConfig | None = None,
        volume_lister: VolumeLister = list_volumes,
        on_completed: CompletedCallback | None = None,
        on_failed: FailedCallback | None = None,
        on_tick: TickCallback | None = None,
    ) -> None:
        self.config = config or ScanConfig()
        self.scan_count = ScanCounter()
        self.on_completed = on_completed
        self.on_failed = on_failed
        self.on_tick = on_tick
        self._volume_lister = volume_lister
        self._lock = threading.Lock()
        self._state = ScanState.IDLE
        self._generation = 0
        self._report: ScanReport | None = None
        self._error: str | None = None
        self._duration: float | None = None
        self._elapsed = 0
        self._thread: threading.Thread | None = None
        self._ticker: Ticker | None = None

    # ── state ─────────────────────────────────────────────────────────────

    @property
    def state(self) -> ScanState:
        return self._state

    @property
    def is_scanning(self) -> bool:
        return self._state is ScanState.SCANNING

    @property
    def report(self) -> ScanReport | None:
        """Last completed report, kept until a refresh or a newer completion."""
        return self._report

    @property
    def error(self) -> str | None:
        return self._error

    @property
    def duration(self) -> float | None:
        return self._duration

    @property
    def elapsed_seconds(self) -> int:
        """Ticks counted since the current scan started."""
        return self._elapsed

    # ── pipeline ──────────────────────────────────────────────────────────

    def run_scan(self, counter: ScanCounter | None = None) -> ScanReport:
        """Scan every volume with positive capacity and return the merged report.

        Runs synchronously on the calling thread.

        Raises:
            ScanError: If no volume produced a report.
        """
        start = time.monotonic()
        volumes = self._volume_lister()
        qualifying = [v for v in volumes if v.total_bytes > 0]
        if len(qualifying) < len(volumes):
            log.debug("Skipping %d volumes without capacity", len(volumes) - len(qualifying))

        reports = self._scan_volumes(qualifying)
        duration = time.monotonic() - start
        if counter is not None:
            counter.increment()

        if not reports:
            raise ScanError(SCAN_FAILED_MESSAGE)
        log.info("Scanned %d volumes in %.2f seconds", len(reports), duration)
        return ScanReport(volumes=tuple(reports), duration=duration)

    def _scan_volumes(self, volumes: list[Volume]) -> list[VolumeReport]:
        """Scan volumes concurrently, keeping enumeration order."""
        if len(volumes) < 2:
            return [self._scan_volume(v) for v in volumes]
        with ThreadPoolExecutor(max_workers=len(volumes), thread_name_prefix="volscan-volume") as executor:
            return list(executor.map(self._scan_volume, volumes))

    def _scan_volume(self, volume: Volume) -> VolumeReport:
        walker = TreeWalker(
            max_workers=self.config.max_workers,
            one_file_system=self.config.one_file_system,
        )
        files = FileCollector().collect_tree(walker, volume.mount_point)
        log.info("Volume %s: %d files", volume.name, len(files))
        return VolumeReport(volume=volume, files=tuple(files))

    # ── triggers ──────────────────────────────────────────────────────────

    def scan(self) -> None:
        """Start a scan in the background. Never blocks."""
        with self._lock:
            self._generation += 1
            generation = self._generation
            self._state = ScanState.SCANNING
            self._error = None
            self._duration = None
            self._elapsed = 0
            self._stop_ticker()
            self._ticker = Ticker(self.config.tick_interval, lambda: self._tick(generation))
            self._ticker.start()
            self._thread = threading.Thread(
                target=self._run_background,
                args=(generation,),
                name="volscan-scan",
                daemon=True,
            )
            thread = self._thread
        log.info("Scan %d started", generation)
        thread.start()

    def stop(self) -> None:
        """Leave the scanning state now; the running scan's result will be ignored."""
        with self._lock:
            if self._state is not ScanState.SCANNING:
                return
            self._generation += 1
            self._state = ScanState.IDLE
            self._stop_ticker()
        log.info("Scan stopped, in-flight work will be discarded")

    def refresh(self) -> None:
        """Drop the previous report and duration, then scan again."""
        with self._lock:
            self._report = None
            self._duration = None
        self.scan()

    def wait(self, timeout: float | None = None) -> bool:
        """Block until the latest background scan thread exits.

        Returns False if *timeout* expired first. Never call this from an
        interactive thread.
        """
        thread = self._thread
        if thread is None:
            return True
        thread.join(timeout)
        return not thread.is_alive()

    # ── background ────────────────────────────────────────────────────────

    def _run_background(self, generation: int) -> None:
        try:
            report = self.run_scan(self.scan_count)
        except ScanError as e:
            self._finish(generation, error=str(e))
        except Exception:
            log.exception("Scan %d crashed", generation)
            self._finish(generation, error=SCAN_FAILED_MESSAGE)
        else:
            self._finish(generation, report=report)

    def _finish(self, generation: int, report: ScanReport | None = None, error: str | None = None) -> None:
        with self._lock:
            if generation != self._generation or self._state is not ScanState.SCANNING:
                log.debug("Discarding result of superseded scan %d", generation)
                return
            self._stop_ticker()
            if report is not None:
                self._state = ScanState.COMPLETED
                self._report = report
                self._duration = report.duration
            else:
                self._state = ScanState.FAILED
                self._error = error

        if report is not None:
            if self.on_completed:
                self.on_completed(report)
        elif self.on_failed:
            self.on_failed(error or SCAN_FAILED_MESSAGE)

    def _tick(self, generation: int) -> None:
        with self._lock:
            if generation != self._generation or self._state is not ScanState.SCANNING:
                return
            self._elapsed += 1
            elapsed = self._elapsed
        if self.on_tick:
            self.on_tick(elapsed)

    def _stop_ticker(self) -> None:
        if self._ticker is not None:
            self._ticker.stop()
            self._ticker = None
