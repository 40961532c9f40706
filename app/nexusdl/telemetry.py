"""Run telemetry and report helpers."""

from __future__ import annotations

import os
import time
import uuid
from collections import defaultdict
from pathlib import Path
from typing import Any, Dict, List, Optional

from . import config
from .utils import save_json_file


def _ts() -> str:
    return time.strftime("%Y%m%d_%H%M%S")


class RunTelemetry:
    """Collect per-item outcomes of one run for reporting and export."""

    def __init__(self, page_type: str, location: str) -> None:
        self.run_id = f"{_ts()}_{uuid.uuid4().hex[:8]}"
        self.page_type = page_type
        self.location = location
        self.started_at = time.time()
        self.entries: List[Dict[str, Any]] = []
        self.summary: Dict[str, Any] = defaultdict(int)

    def add(self, status: str, reason: Optional[str], meta: Dict[str, Any]) -> None:
        self.entries.append(
            {
                "status": status,
                "reason": reason or "",
                **meta,
            }
        )
        self.summary[f"count_{status}"] += 1

    def finalize(self, extra: Optional[Dict[str, Any]] = None) -> Path:
        payload = {
            "run_id": self.run_id,
            "page_type": self.page_type,
            "location": self.location,
            "started_at": self.started_at,
            "ended_at": time.time(),
            "summary": dict(self.summary),
            "entries": self.entries,
            **(extra or {}),
        }
        path = Path(config.RUNS_DIR) / f"run_{self.run_id}.json"
        save_json_file(path, payload)
        return path


def prune_old_exports() -> None:
    exports_dir = Path(config.EXPORTS_DIR)
    if not exports_dir.is_dir():
        return
    files = sorted(str(p) for p in exports_dir.iterdir() if p.suffix == ".xlsx")
    while len(files) > config.EXPORTS_KEEP_MAX:
        old = files.pop(0)
        try:
            os.remove(old)
        except OSError:
            continue


__all__ = [
    "RunTelemetry",
    "prune_old_exports",
]
