from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Deque, Dict

from .extraction import Item


class RunStatus(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    STOPPED = "stopped"
    COMPLETED = "completed"


@dataclass(frozen=True)
class RunSnapshot:
    """Read-only view of a run handed to status displays."""

    status: RunStatus
    queue_length: int
    total_count: int
    processed_count: int
    success_count: int
    failure_count: int
    active_count: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status.value,
            "queue": self.queue_length,
            "total": self.total_count,
            "processed": self.processed_count,
            "succeeded": self.success_count,
            "failed": self.failure_count,
            "active": self.active_count,
        }


@dataclass
class RunState:
    """Mutable progress of one run. Only the queue runner writes to it."""

    status: RunStatus = RunStatus.IDLE
    queue: Deque[Item] = field(default_factory=deque)
    total_count: int = 0
    processed_count: int = 0
    success_count: int = 0
    failure_count: int = 0
    active_count: int = 0

    @classmethod
    def running(cls, items: "list[Item]") -> "RunState":
        return cls(status=RunStatus.RUNNING, queue=deque(items), total_count=len(items))

    @property
    def is_running(self) -> bool:
        return self.status is RunStatus.RUNNING

    def snapshot(self) -> RunSnapshot:
        return RunSnapshot(
            status=self.status,
            queue_length=len(self.queue),
            total_count=self.total_count,
            processed_count=self.processed_count,
            success_count=self.success_count,
            failure_count=self.failure_count,
            active_count=self.active_count,
        )


__all__ = ["RunStatus", "RunState", "RunSnapshot"]
