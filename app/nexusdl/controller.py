"""Control surface for one tracker page: scan, start and stop a batch."""

from __future__ import annotations

import logging
import threading
from typing import Callable, List, Optional

from . import config
from .document import PageDocument
from .extraction import Item, dedupe, extract
from .layouts import PageType, classify
from .queue_runner import QueueRunner, Sleeper, StatusListener
from .resolver import AcquisitionOutcome, AcquisitionResolver
from .run_state import RunSnapshot, RunStatus
from .telemetry import RunTelemetry
from .utils import get_current_log_path, log_line, save_json_file

DelayProvider = Callable[[], int]


class BatchController:
    """Owns the single run of a page session.

    The UI layer (web app, CLI) talks to this object only. ``delay_provider``
    is consulted each time a run starts; ``on_status`` receives a snapshot on
    every state change. Setting ``stop_requested`` (see ``request_stop``)
    cancels the run even while the page is still being scanned; the runner
    is stopped as soon as it reports itself running.
    """

    def __init__(
        self,
        document: PageDocument,
        *,
        delay_provider: Optional[DelayProvider] = None,
        sleep: Optional[Sleeper] = None,
        on_status: Optional[StatusListener] = None,
        write_reports: Optional[bool] = None,
        stop_requested: Optional[threading.Event] = None,
    ) -> None:
        self.document = document
        self.on_status = on_status
        self.stop_requested = stop_requested or threading.Event()
        self.delay_provider = delay_provider or config.load_download_delay_ms
        self.write_reports = config.WRITE_RUN_REPORTS if write_reports is None else write_reports
        self._telemetry: Optional[RunTelemetry] = None
        self.runner = QueueRunner(
            AcquisitionResolver(document),
            delay_ms=config.DOWNLOAD_DELAY_MS,
            sleep=sleep,
            on_change=self._on_runner_change,
            on_outcome=self._record_outcome,
        )

    @property
    def page_type(self) -> PageType:
        return classify(self.document.location)

    def _find_items(self) -> List[Item]:
        page_type = self.page_type
        raw = extract(self.document.snapshot(), page_type)
        unique = dedupe(raw)
        log_line(
            f"[SCAN] {page_type.value} page: {len(raw)} row(s), "
            f"{len(unique)} unique torrent(s)"
        )
        return unique

    def scan(self) -> List[Item]:
        """List the torrents on the page without touching the run state."""

        items = self._find_items()
        log_line(f"[SCAN] Scan finished: found {len(items)} torrent(s)")
        for index, item in enumerate(items, start=1):
            log_line(f"[SCAN] {index}. {item.title}")
        return items

    def snapshot(self) -> RunSnapshot:
        return self.runner.snapshot()

    @property
    def is_running(self) -> bool:
        return self.runner.state.is_running

    def start_run(self) -> RunSnapshot:
        """Download every torrent on the page; no-op if running or nothing found."""

        if self.is_running:
            log_line("[RUN][WARN] Downloader is already running", level=logging.WARNING)
            return self.snapshot()

        if self._consume_stop_request():
            return self.snapshot()

        items = self._find_items()
        if not items:
            log_line("[RUN][WARN] No downloadable torrents found", level=logging.WARNING)
            return self.snapshot()

        page_type = self.page_type
        self.runner.delay_ms = max(0, int(self.delay_provider()))
        self._telemetry = RunTelemetry(page_type.value, self.document.location)

        state = self.runner.start(items, page_type)
        self.stop_requested.clear()
        if state.status in (RunStatus.COMPLETED, RunStatus.STOPPED):
            self._write_reports()
        return state.snapshot()

    def stop_run(self) -> None:
        self.runner.stop()

    def request_stop(self) -> None:
        """Stop the current run, or the one about to start on this controller."""

        self.stop_requested.set()
        if self.is_running:
            self.runner.stop()

    def _consume_stop_request(self) -> bool:
        if not self.stop_requested.is_set():
            return False
        self.stop_requested.clear()
        log_line("[RUN] Stop requested before the run started; nothing downloaded")
        return True

    def _on_runner_change(self, snapshot: RunSnapshot) -> None:
        if snapshot.status is RunStatus.RUNNING and self.stop_requested.is_set():
            self.stop_requested.clear()
            # stop() notifies again with the stopped snapshot.
            self.runner.stop()
            return
        if self.on_status is not None:
            self.on_status(snapshot)

    def _record_outcome(self, item: Item, outcome: AcquisitionOutcome) -> None:
        if self._telemetry is None:
            return
        self._telemetry.add(
            "succeeded" if outcome.ok else "failed",
            outcome.error_code,
            {
                "id": item.id,
                "title": item.title,
                "url": outcome.url or "",
                "error_message": outcome.error_message or "",
            },
        )

    def _write_reports(self) -> None:
        telemetry, self._telemetry = self._telemetry, None
        if telemetry is None or not self.write_reports:
            return
        summary = self.snapshot().to_dict()
        try:
            report_path = telemetry.finalize({"result": summary})
            save_json_file(
                config.SUMMARY_FILE,
                {
                    "run_id": telemetry.run_id,
                    "report": str(report_path),
                    "log_file": str(get_current_log_path()),
                    **summary,
                },
            )
        except OSError as exc:
            log_line(f"[RUN][WARN] Could not write run report: {exc}", level=logging.WARNING)
            return
        log_line(f"[RUN] Run report written to {report_path}")


__all__ = ["BatchController"]
