"""Per-phase result counters shared by the migration phases."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional


@dataclass
class PhaseResult:
    """Outcome of one migration phase."""
    phase: str
    total_attempted: int = 0
    total_succeeded: int = 0
    total_skipped: int = 0
    total_failed: int = 0
    errors: List[Dict[str, Any]] = field(default_factory=list)
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    def start(self) -> "PhaseResult":
        self.started_at = datetime.now()
        return self

    def finish(self) -> "PhaseResult":
        self.completed_at = datetime.now()
        return self

    def add_error(self, key: str, operation: str, exc: BaseException) -> None:
        self.total_failed += 1
        self.errors.append({"key": key, "operation": operation, "error": str(exc)})

    @property
    def duration_seconds(self) -> Optional[float]:
        if self.started_at and self.completed_at:
            return (self.completed_at - self.started_at).total_seconds()
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "phase": self.phase,
            "total_attempted": self.total_attempted,
            "total_succeeded": self.total_succeeded,
            "total_skipped": self.total_skipped,
            "total_failed": self.total_failed,
            "duration_seconds": self.duration_seconds,
            "errors": self.errors,
        }
