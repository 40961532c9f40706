"""Sequential, delay-paced download queue.

Items are processed strictly one at a time. Between items the runner waits
for the configured delay; ``stop()`` is honoured at the next boundary, so an
attempt already in flight always finishes. A failed item is counted and the
run moves on.
"""
from __future__ import annotations

import logging
import threading
from typing import Callable, Iterable, Optional, Protocol

from .error_codes import ErrorCode
from .extraction import Item, dedupe
from .layouts import PageType
from .logging_utils import _downloader_event
from .resolver import AcquisitionOutcome
from .run_state import RunSnapshot, RunState, RunStatus
from .utils import log_line

Sleeper = Callable[[float], None]
StatusListener = Callable[[RunSnapshot], None]
OutcomeListener = Callable[[Item, AcquisitionOutcome], None]


class Resolver(Protocol):
    def resolve(self, item: Item, page_type: PageType) -> AcquisitionOutcome: ...


class QueueRunner:
    def __init__(
        self,
        resolver: Resolver,
        *,
        delay_ms: int,
        sleep: Optional[Sleeper] = None,
        on_change: Optional[StatusListener] = None,
        on_outcome: Optional[OutcomeListener] = None,
    ) -> None:
        self.resolver = resolver
        self.delay_ms = max(0, int(delay_ms))
        self._wake = threading.Event()
        self._sleep = sleep or self._wake.wait
        self._on_change = on_change
        self._on_outcome = on_outcome
        self._state = RunState()

    @property
    def state(self) -> RunState:
        return self._state

    def snapshot(self) -> RunSnapshot:
        return self._state.snapshot()

    def _notify(self) -> None:
        if self._on_change is None:
            return
        try:
            self._on_change(self._state.snapshot())
        except Exception as exc:  # noqa: BLE001
            log_line(f"[RUN][WARN] Status listener failed: {exc}")

    def start(self, items: Iterable[Item], page_type: PageType) -> RunState:
        """Process *items* to completion unless stopped; returns the final state."""

        if self._state.is_running:
            log_line("[RUN][WARN] Downloader is already running", level=logging.WARNING)
            return self._state

        unique = dedupe(items)
        if not unique:
            log_line("[RUN][WARN] No downloadable torrents found", level=logging.WARNING)
            return self._state

        self._wake.clear()
        self._state = RunState.running(unique)
        log_line(f"[RUN] Starting batch download of {len(unique)} torrent(s)")
        _downloader_event("state", phase="run", kind="start", total=len(unique), page_type=page_type.value)
        self._notify()

        self._run_loop(self._state, page_type)
        return self._state

    def stop(self) -> None:
        """Cancel the run at its next boundary and drop everything still queued."""

        state = self._state
        if not state.is_running:
            log_line("[RUN] Stop requested while no run is active")
            return
        state.status = RunStatus.STOPPED
        state.queue.clear()
        self._wake.set()
        log_line("[RUN] Download stopped")
        _downloader_event("state", phase="run", kind="stop", processed=state.processed_count)
        self._notify()

    def _run_loop(self, state: RunState, page_type: PageType) -> None:
        delay_seconds = self.delay_ms / 1000

        while state.is_running and state.queue:
            item = state.queue.popleft()
            state.active_count = 1
            self._notify()
            log_line(
                f"[RUN] Processing ({state.processed_count + 1}/{state.total_count}): {item.title}"
            )

            try:
                outcome = self.resolver.resolve(item, page_type)
            except Exception as exc:  # noqa: BLE001
                outcome = AcquisitionOutcome(
                    ok=False, error_code=ErrorCode.INTERNAL, error_message=str(exc)
                )

            if outcome.ok:
                state.success_count += 1
            else:
                state.failure_count += 1
            state.processed_count += 1
            state.active_count = 0

            if outcome.ok:
                log_line(f"[RUN] Download #{state.processed_count} succeeded: {item.title}")
            else:
                log_line(
                    f"[RUN][ERROR] Download #{state.processed_count} failed: {item.title} "
                    f"({outcome.error_code})"
                )
            if self._on_outcome is not None:
                try:
                    self._on_outcome(item, outcome)
                except Exception as exc:  # noqa: BLE001
                    log_line(f"[RUN][WARN] Outcome listener failed: {exc}")
            self._notify()

            if state.queue and state.is_running:
                log_line(f"[RUN] Waiting {delay_seconds:.1f}s before the next torrent...")
                self._sleep(delay_seconds)

        if state.is_running:
            state.status = RunStatus.COMPLETED
        state.active_count = 0
        self._notify()

        _downloader_event(
            "state",
            phase="run",
            kind="end",
            status=state.status.value,
            processed=state.processed_count,
            succeeded=state.success_count,
            failed=state.failure_count,
        )
        log_line(
            f"[RUN] Batch finished ({state.status.value}). Total: {state.processed_count}, "
            f"succeeded: {state.success_count}, failed: {state.failure_count}"
        )
        if state.failure_count:
            log_line(
                f"[RUN][WARN] {state.failure_count} torrent(s) failed to download; "
                "check them manually.",
                level=logging.WARNING,
            )
        if state.success_count:
            log_line("[RUN] Check the browser download folder for the results.")


__all__ = ["QueueRunner", "Resolver"]
