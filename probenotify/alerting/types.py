"""Domain types for the alerting subsystem."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from probenotify.core.types import Endpoint


class AlertInfo(BaseModel):
    """Snapshot of a fired alert — immutable once built."""

    model_config = ConfigDict(frozen=True)

    name: str
    probe_name: str
    condition_id: str
    target: Endpoint
    failures: int = Field(ge=0)
    total: int = Field(ge=0)
    failing_since: datetime


@dataclass
class TargetState:
    """Per-target alert state for a single condition.

    Owned by the AlertHandler; ``alerted`` is flipped by the notifier and
    cleared again when the target recovers.
    """

    alerted: bool = False
    failing_since: datetime | None = None
    condition_id: str = ""
    # (timestamp, success) for the most recent attempts.
    results: deque[tuple[datetime, bool]] = field(default_factory=deque)

    @property
    def failures(self) -> int:
        return sum(1 for _, ok in self.results if not ok)

    def reset(self) -> None:
        """Return to NOT_ALERTED after the failure streak ends."""
        self.alerted = False
        self.failing_since = None
        self.condition_id = ""
