from __future__ import annotations

"""Session configuration and live state for one quiz attempt."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Set

from ..bank.schema import Question

MODES = ("test", "learning")
PAPERS = ("gs1", "csat")


@dataclass(frozen=True)
class SessionConfig:
    subject: str
    count: int
    mode: str = "test"
    paper: str = "gs1"

    def __post_init__(self) -> None:
        if isinstance(self.count, bool) or not isinstance(self.count, int) or self.count <= 0:
            raise ValueError(f"count must be a positive integer, got {self.count!r}")
        if self.mode not in MODES:
            raise ValueError(f"mode must be one of {MODES}, got {self.mode!r}")
        if self.paper not in PAPERS:
            raise ValueError(f"paper must be one of {PAPERS}, got {self.paper!r}")

    @property
    def timed(self) -> bool:
        return self.mode == "test"

    def to_dict(self) -> Dict[str, Any]:
        return {"subject": self.subject, "count": self.count, "mode": self.mode, "paper": self.paper}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SessionConfig":
        return cls(
            subject=str(data.get("subject", "")),
            count=int(data["count"]),
            mode=str(data.get("mode", "test")),
            paper=str(data.get("paper", "gs1")),
        )


@dataclass
class Session:
    """Live state of the active attempt.

    `answers` is keyed by position in `questions`, not by question id; a
    missing key means the question is unattempted. `start_time` is a reading
    of the engine clock that the countdown is measured from.
    """

    config: SessionConfig
    questions: List[Question]
    answers: Dict[int, int] = field(default_factory=dict)
    current_idx: int = 0
    time_left: int = 0
    total_duration: int = 0
    start_time: float = 0.0
    started_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    bookmarks: Set[int] = field(default_factory=set)

    @property
    def current(self) -> Question:
        return self.questions[self.current_idx]

    @property
    def answered_count(self) -> int:
        return len(self.answers)

    def answer_for(self, index: int) -> Optional[int]:
        return self.answers.get(index)

    def to_snapshot(self) -> Dict[str, Any]:
        """Minimum needed to rebuild the session and its countdown after a restart."""
        return {
            "config": self.config.to_dict(),
            "questions": [q.to_dict() for q in self.questions],
            "answers": {str(k): v for k, v in self.answers.items()},
            "currentIdx": self.current_idx,
            "totalDuration": self.total_duration,
            "timeLeft": self.time_left,
            "startedAt": self.started_at.isoformat(),
            "bookmarks": sorted(self.bookmarks),
        }
