"""Front-end session: scan triggers, filters, exports and the error slot."""

from __future__ import annotations

import logging
import threading
from typing import Callable

from volscan.config import ScanConfig
from volscan.core.engine import ScanAggregator, ScanState, VolumeLister
from volscan.core.exporter import ExportError, export
from volscan.core.view import VolumeView, filter_report
from volscan.core.volumes import list_volumes
from volscan.models.scan_result import ScanReport

log = logging.getLogger(__name__)

ExportCallback = Callable[[bool, str], None]  # (success, message)


class Session:
    """Everything a front end needs to drive scans.

    Holds the filter text and a single error message slot: starting a
    scan clears it, a failed scan or export overwrites it. Listener
    callbacks run on whichever thread produced the event.
    """

    def __init__(
        self,
        config: ScanConfig | None = None,
        volume_lister: VolumeLister = list_volumes,
        on_completed: Callable[[ScanReport], None] | None = None,
        on_failed: Callable[[str], None] | None = None,
        on_export: ExportCallback | None = None,
        on_tick: Callable[[int], None] | None = None,
    ) -> None:
        self.config = config or ScanConfig()
        self.on_completed = on_completed
        self.on_failed = on_failed
        self.on_export = on_export
        self.extension_filter = ""
        self.name_filter = ""
        self.error_message: str | None = None
        self.closed = False
        self._lock = threading.Lock()
        self.aggregator = ScanAggregator(
            self.config,
            volume_lister=volume_lister,
            on_completed=self._on_scan_completed,
            on_failed=self._on_scan_failed,
            on_tick=on_tick,
        )

    @property
    def report(self) -> ScanReport:
        return self.aggregator.report or ScanReport.empty()

    @property
    def is_scanning(self) -> bool:
        return self.aggregator.is_scanning

    # ── triggers ──────────────────────────────────────────────────────────

    def scan(self) -> None:
        if self.closed:
            return
        with self._lock:
            self.aggregator.scan()
            self.error_message = None

    def stop_scan(self) -> None:
        self.aggregator.stop()

    def refresh(self) -> None:
        if self.closed:
            return
        with self._lock:
            self.aggregator.refresh()
            self.error_message = None

    def set_extension_filter(self, text: str) -> None:
        self.extension_filter = text

    def set_name_filter(self, text: str) -> None:
        self.name_filter = text

    def export_json(self) -> bool:
        return self._export("json")

    def export_csv(self) -> bool:
        return self._export("csv")

    def quit(self) -> None:
        """Stop any scan and ignore every later trigger."""
        self.aggregator.stop()
        self.closed = True

    def view(self) -> list[VolumeView]:
        """Top files per volume under the current filters."""
        return filter_report(
            self.report,
            extension=self.extension_filter,
            name=self.name_filter,
            limit=self.config.top_n,
        )

    # ── results ───────────────────────────────────────────────────────────

    def _export(self, fmt: str) -> bool:
        if self.closed:
            return False
        try:
            path = export(self.report, fmt, self.config.export_dir)
        except ExportError as e:
            log.warning("%s", e)
            with self._lock:
                self.error_message = str(e)
            if self.on_export:
                self.on_export(False, str(e))
            return False
        with self._lock:
            self.error_message = None
        if self.on_export:
            self.on_export(True, str(path))
        return True

    def _on_scan_completed(self, report: ScanReport) -> None:
        if self.on_completed:
            self.on_completed(report)

    def _on_scan_failed(self, message: str) -> None:
        # A newer scan may have started since this failure was recorded.
        with self._lock:
            if self.aggregator.state is not ScanState.FAILED or self.aggregator.error != message:
                log.debug("Ignoring failure of superseded scan: %s", message)
                return
            self.error_message = message
        if self.on_failed:
            self.on_failed(message)
