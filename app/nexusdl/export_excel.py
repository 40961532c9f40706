"""Excel export helpers for run telemetry."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

import pandas as pd

from . import config
from .telemetry import prune_old_exports


def _latest_run_json_path() -> Optional[Path]:
    """Return the most recent run telemetry JSON path, if any."""

    runs_dir = Path(config.RUNS_DIR)
    if not runs_dir.is_dir():
        return None

    runs = sorted(p for p in runs_dir.iterdir() if p.suffix == ".json")
    return runs[-1] if runs else None


def export_latest_run_to_excel(dest_path: Optional[str] = None) -> str:
    """Create an Excel workbook from the most recent run report."""

    run_path = _latest_run_json_path()
    if not run_path:
        raise FileNotFoundError("No run telemetry available to export")

    with run_path.open("r", encoding="utf-8") as handle:
        payload = json.load(handle)

    df = pd.DataFrame(payload.get("entries", []))
    if df.empty:
        df = pd.DataFrame([{"info": "No entries in latest run"}])
        succeeded = failed = summary_status = pd.DataFrame()
    else:
        succeeded = df[df["status"] == "succeeded"].copy()
        failed = df[df["status"] == "failed"].copy()
        summary_status = df.groupby("status").size().reset_index(name="count")

    Path(config.EXPORTS_DIR).mkdir(parents=True, exist_ok=True)
    if not dest_path:
        dest_path = str(Path(config.EXPORTS_DIR) / f"torrents_{payload['run_id']}.xlsx")

    with pd.ExcelWriter(dest_path, engine="openpyxl") as writer:
        df.to_excel(writer, index=False, sheet_name="All")
        succeeded.to_excel(writer, index=False, sheet_name="Succeeded")
        failed.to_excel(writer, index=False, sheet_name="Failed")
        summary_status.to_excel(writer, index=False, sheet_name="Summary_Status")

    prune_old_exports()
    return dest_path


__all__ = ["export_latest_run_to_excel"]
