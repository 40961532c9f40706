from __future__ import annotations

import threading
from typing import Any, Dict

from flask import Flask, Response, jsonify, request, send_file

from app.nexusdl.browser import open_page
from app.nexusdl.config_validation import coerce_delay_ms, validate_runtime_config
from app.nexusdl.controller import BatchController
from app.nexusdl.export_excel import export_latest_run_to_excel
from app.nexusdl.healthcheck import run_health_checks
from app.nexusdl.run_state import RunSnapshot, RunState
from app.nexusdl.utils import ensure_dirs, log_line, setup_run_logger

app = Flask(__name__)

# Initialise storage paths on import so WSGI entrypoints also have the
# expected environment ready.
ensure_dirs()

app.config["CONTROLLER"] = None
app.config["LAST_STATUS"] = RunState().snapshot().to_dict()
_START_LOCK = threading.Lock()
_RUN_ACTIVE = threading.Event()
app.config["STOP_REQUESTED"] = threading.Event()


def _request_params() -> Dict[str, Any]:
    payload = request.get_json(silent=True)
    if isinstance(payload, dict):
        return payload
    return request.form.to_dict()


def _page_url(params: Dict[str, Any]) -> str:
    return str(params.get("url") or "").strip()


def _store_status(snapshot: RunSnapshot) -> None:
    app.config["LAST_STATUS"] = snapshot.to_dict()


def _current_controller() -> BatchController | None:
    return app.config.get("CONTROLLER")


@app.get("/api/status")
def api_status() -> Response:
    """Return the latest run snapshot pushed by the running controller."""

    controller = _current_controller()
    status = controller.snapshot().to_dict() if controller is not None else app.config["LAST_STATUS"]
    return jsonify(status)


@app.post("/scan")
def scan() -> Response:
    """Open the page and report the torrents found on it."""

    url = _page_url(_request_params())
    if not url:
        return jsonify({"ok": False, "error": "url is required"}), 400

    with open_page(url) as document:
        items = BatchController(document, write_reports=False).scan()

    return jsonify(
        {
            "ok": True,
            "count": len(items),
            "items": [{"id": item.id, "title": item.title} for item in items],
        }
    )


@app.post("/start")
def start_run() -> Response:
    """Start a batch download for the given page in a background thread."""

    params = _request_params()
    url = _page_url(params)
    if not url:
        return jsonify({"ok": False, "error": "url is required"}), 400

    try:
        validate_runtime_config("ui")
        delay_ms = coerce_delay_ms(params.get("delay_ms"), entrypoint="ui")
    except ValueError as exc:
        return jsonify({"ok": False, "error": str(exc)}), 400

    with _START_LOCK:
        # The flag covers browser start-up and page scanning, before the
        # controller itself reports a running state.
        if _RUN_ACTIVE.is_set():
            return jsonify({"ok": False, "error": "a run is already in progress"}), 409
        _RUN_ACTIVE.set()
        stop_requested = threading.Event()
        app.config["STOP_REQUESTED"] = stop_requested
        app.config["CONTROLLER"] = None

    def _run() -> None:
        try:
            setup_run_logger()
            with open_page(url) as document:
                current = BatchController(
                    document,
                    delay_provider=lambda: delay_ms,
                    on_status=_store_status,
                    stop_requested=stop_requested,
                )
                app.config["CONTROLLER"] = current
                current.start_run()
        except Exception as exc:  # noqa: BLE001
            log_line(f"Run thread failed: {exc}")
        finally:
            _RUN_ACTIVE.clear()

    try:
        threading.Thread(target=_run, daemon=True).start()
    except RuntimeError:
        _RUN_ACTIVE.clear()
        raise

    return jsonify({"ok": True, "url": url, "delay_ms": delay_ms}), 202


@app.post("/stop")
def stop_run() -> Response:
    """Stop the current run at its next safe point.

    A stop that arrives while the browser is still opening or scanning the
    page is kept and applied as soon as the run starts.
    """

    with _START_LOCK:
        if not _RUN_ACTIVE.is_set():
            return jsonify({"ok": False, "error": "no run in progress"}), 409
        app.config["STOP_REQUESTED"].set()
        controller = _current_controller()

    if controller is not None:
        controller.request_stop()
        status = controller.snapshot().to_dict()
    else:
        status = app.config["LAST_STATUS"]
    return jsonify({"ok": True, "status": status})


@app.get("/api/health")
def api_health() -> Response:
    result = run_health_checks(entrypoint="ui")
    return jsonify({"ok": result.ok, "checks": result.checks}), (200 if result.ok else 503)


@app.get("/api/exports/latest.xlsx")
def api_export_latest_xlsx() -> Response:
    try:
        path = export_latest_run_to_excel()
    except FileNotFoundError as exc:
        return jsonify({"ok": False, "error": str(exc)}), 404
    return send_file(path, as_attachment=True)
