from __future__ import annotations

"""Error code taxonomy for per-item acquisition failures.

Codes appear in structured logs and run reports. None of them is fatal to a
batch: every failure is counted and the run moves on to the next item.
"""


class ErrorCode:
    EXTRACTION_GAP = "extraction_gap"
    ACTION_NOT_FOUND = "action_not_found"
    ACTION_TRIGGER_ERROR = "action_trigger_error"
    POLLING_EXHAUSTED = "polling_exhausted"
    INTERNAL = "internal_error"


__all__ = ["ErrorCode"]
