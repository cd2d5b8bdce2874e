"""D-Bus service for front-end communication.

D-Bus methods use PascalCase per D-Bus convention, and type signatures
like "s" and "(bs)" are D-Bus protocol types, not Python syntax.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Callable

from dbus_next.aio import MessageBus
from dbus_next.service import ServiceInterface, method, signal
from dbus_next import BusType

from volscan.core.exporter import report_to_dicts
from volscan.models.scan_result import ScanReport
from volscan.session import Session

log = logging.getLogger(__name__)

_BUS_NAME = "io.github.volscan"
_OBJECT_PATH = "/io/github/volscan"
_INTERFACE = "io.github.volscan.Scanner"


# noinspection PyPep8Naming
class VolscanDBusService(ServiceInterface):
    """D-Bus service interface for volscan.

    Scan results, ticks and export outcomes arrive on worker threads and
    are re-emitted as signals on the event loop.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None, on_quit: Callable[[], None] | None = None):
        super().__init__(_INTERFACE)
        self._loop = loop
        self._on_quit = on_quit
        self._session = Session(
            on_completed=lambda report: self._emit(self.ScanCompleted, self._report_json(report)),
            on_failed=lambda message: self._emit(self.ScanFailed, message),
            on_export=lambda ok, message: self._emit(self.ExportCompleted, ok, message),
            on_tick=lambda seconds: self._emit(self.TickElapsed, seconds),
        )

    def _emit(self, signal_fn: Callable[..., Any], *args: Any) -> None:
        if self._loop is not None:
            self._loop.call_soon_threadsafe(signal_fn, *args)
        else:
            signal_fn(*args)

    def _report_json(self, report: ScanReport) -> str:
        return json.dumps(
            {
                "duration": report.duration,
                "scan_count": self._session.aggregator.scan_count.value,
                "volumes": report_to_dicts(report),
            }
        )

    @method()
    def Scan(self):  # type: ignore[override]
        """Start a background scan of all volumes."""
        self._session.scan()

    @method()
    def StopScan(self):  # type: ignore[override]
        self._session.stop_scan()

    @method()
    def Refresh(self):  # type: ignore[override]
        self._session.refresh()

    @method()
    def SetFilters(self, extension: "s", name: "s") -> "s":  # type: ignore[override]
        """Apply filters and return the top files per volume as JSON."""
        self._session.set_extension_filter(extension)
        self._session.set_name_filter(name)
        data = [
            {
                "name": v.volume.name,
                "total_space": v.volume.total_gib,
                "used_space": v.volume.used_gib,
                "match_count": v.match_count,
                "files": [{"path": f.path, "size_mb": f.size_mb} for f in v.files],
            }
            for v in self._session.view()
        ]
        return json.dumps(data)

    @method()
    def GetStatus(self) -> "s":  # type: ignore[override]
        """Scanner state, error slot and counters as JSON."""
        aggregator = self._session.aggregator
        return json.dumps(
            {
                "state": aggregator.state.value,
                "error": self._session.error_message,
                "duration": aggregator.duration,
                "elapsed_seconds": aggregator.elapsed_seconds,
                "scan_count": aggregator.scan_count.value,
            }
        )

    @method()
    def GetReport(self) -> "s":  # type: ignore[override]
        """Full unfiltered report of the last completed scan."""
        return self._report_json(self._session.report)

    @method()
    def ExportAsJson(self) -> "b":  # type: ignore[override]
        return self._session.export_json()

    @method()
    def ExportAsCsv(self) -> "b":  # type: ignore[override]
        return self._session.export_csv()

    @method()
    def Quit(self):  # type: ignore[override]
        self._session.quit()
        if self._on_quit:
            self._on_quit()

    @signal()
    def ScanCompleted(self, report_json: str) -> "s":  # type: ignore[override]
        return report_json

    @signal()
    def ScanFailed(self, message: str) -> "s":  # type: ignore[override]
        return message

    @signal()
    def ExportCompleted(self, success: bool, message: str) -> "(bs)":  # type: ignore[override]
        return [success, message]

    @signal()
    def TickElapsed(self, seconds: int) -> "t":  # type: ignore[override]
        return seconds


async def run_service() -> None:
    """Start the D-Bus service."""
    bus = await MessageBus(bus_type=BusType.SESSION).connect()
    service = VolscanDBusService(loop=asyncio.get_running_loop(), on_quit=bus.disconnect)
    bus.export(_OBJECT_PATH, service)
    await bus.request_name(_BUS_NAME)
    log.info("D-Bus service started on %s", _BUS_NAME)
    await bus.wait_for_disconnect()


def start_service() -> None:
    """Entry point to start the D-Bus service."""
    asyncio.run(run_service())
