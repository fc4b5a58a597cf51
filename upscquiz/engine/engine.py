from __future__ import annotations

"""Session Engine: sampling, countdown, answer capture and final scoring.

One engine instance owns at most one active Session. The engine detects
timer expiry and announces it on its EventBus ("time_up", with the expired
Session as payload), but never scores on its own; the controller reacts by
calling `calculate_final()`. Callbacks from a replaced session are dropped.
"""

import random
import time
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional, Sequence

from ..app.events import TICK, TIME_UP, EventBus
from ..app.explain import trace as xtrace
from ..bank.schema import Question
from ..errors import CallerMisuseError
from ..policy.mistake_manager import Decision, policy_for
from ..util.randomness import sample
from .scoring import Result, scheme_for, score_answers
from .session import Session, SessionConfig
from .timer import CountdownTimer

DEFAULT_TIME_PER_QUESTION = {"gs1": 72, "csat": 90}

IDLE = "idle"
ACTIVE = "active"
FINISHED = "finished"


class SessionEngine:
    def __init__(
        self,
        *,
        events: Optional[EventBus] = None,
        rng: Optional[random.Random] = None,
        clock: Callable[[], float] = time.monotonic,
        time_per_question: Optional[Dict[str, int]] = None,
        tick_interval_s: float = 0.25,
        background_timer: bool = True,
    ) -> None:
        self.events = events or EventBus()
        self.rng = rng
        self.clock = clock
        self.time_per_question = dict(DEFAULT_TIME_PER_QUESTION)
        self.time_per_question.update(time_per_question or {})
        self.tick_interval_s = tick_interval_s
        self.background_timer = background_timer
        self.session: Optional[Session] = None
        self.state = IDLE
        self._timer: Optional[CountdownTimer] = None

    # Lifecycle

    def start_session(self, config: SessionConfig, questions: Sequence[Question]) -> Session:
        """Sample the bank and make a fresh session the active one.

        `questions` must already have passed validation.
        """
        if config.count <= 0:
            raise CallerMisuseError("count must be positive")
        if not questions:
            raise CallerMisuseError("cannot start a session with an empty bank")
        self._stop_timer()

        picked = sample(questions, config.count, self.rng)
        per_q = int(self.time_per_question[config.paper])
        total = len(picked) * per_q
        self.session = Session(
            config=config,
            questions=picked,
            time_left=total,
            total_duration=total,
            start_time=self.clock(),
        )
        self.state = ACTIVE
        if config.timed:
            self._run_timer(self.session.start_time)
        xtrace("session_started", {**config.to_dict(), "sampled": len(picked), "duration_s": total})
        return self.session

    def resume(self, snapshot: Dict[str, Any]) -> Session:
        """Rebuild a session saved by `snapshot()`, re-anchoring its countdown."""
        self._stop_timer()
        config = SessionConfig.from_dict(snapshot["config"])
        questions = [Question.from_dict(q) for q in snapshot["questions"]]
        if not questions:
            raise CallerMisuseError("snapshot has no questions")
        total = int(snapshot.get("totalDuration", 0))
        time_left = max(0, min(total, int(snapshot.get("timeLeft", total))))
        elapsed = total - time_left
        started_at = snapshot.get("startedAt")
        self.session = Session(
            config=config,
            questions=questions,
            answers={int(k): int(v) for k, v in (snapshot.get("answers") or {}).items()},
            current_idx=max(0, min(int(snapshot.get("currentIdx", 0)), len(questions) - 1)),
            time_left=time_left,
            total_duration=total,
            start_time=self.clock() - elapsed,
            started_at=datetime.fromisoformat(started_at) if started_at else datetime.now(timezone.utc),
            bookmarks={int(b) for b in snapshot.get("bookmarks", [])},
        )
        self.state = ACTIVE
        if config.timed:
            self._run_timer(self.session.start_time)
        xtrace("session_resumed", {"time_left": time_left, "answered": len(self.session.answers)})
        return self.session

    def snapshot(self) -> Dict[str, Any]:
        s = self._require_active()
        if self._timer is not None:
            s.time_left = self._timer.remaining()
        return s.to_snapshot()

    def cancel(self) -> None:
        """Abandon the active session (user navigated away)."""
        self._stop_timer()
        if self.session is not None:
            xtrace("session_cancelled", {"answered": len(self.session.answers)})
        self.session = None
        self.state = IDLE

    @property
    def active(self) -> bool:
        return self.session is not None and self.state == ACTIVE

    # Answers and navigation

    def save_answer(self, option_index: int) -> Decision:
        """Record an answer for the current question, replacing any earlier one."""
        s = self._require_active()
        q = s.current
        if isinstance(option_index, bool) or not isinstance(option_index, int):
            raise ValueError(f"option index must be an int, got {option_index!r}")
        if not 0 <= option_index < len(q.options):
            raise ValueError(f"option {option_index} out of range for {len(q.options)} options")
        s.answers[s.current_idx] = option_index
        is_correct = option_index == q.correct
        xtrace("answered", {"index": s.current_idx, "option": option_index})
        penalty = 0.0 if is_correct else scheme_for(s.config.paper).negative
        return policy_for(s.config.mode).decide(q, option_index, is_correct, penalty)

    def clear_answer(self) -> bool:
        s = self._require_active()
        return s.answers.pop(s.current_idx, None) is not None

    def move_to(self, index: int) -> bool:
        s = self._require_active()
        if 0 <= index < len(s.questions):
            s.current_idx = index
            return True
        return False

    def move(self, delta: int) -> bool:
        s = self._require_active()
        return self.move_to(s.current_idx + delta)

    def toggle_bookmark(self, index: Optional[int] = None) -> bool:
        """Flag or unflag a question for review; returns the new flag state."""
        s = self._require_active()
        idx = s.current_idx if index is None else index
        if not 0 <= idx < len(s.questions):
            raise ValueError(f"no question at position {idx}")
        if idx in s.bookmarks:
            s.bookmarks.discard(idx)
            return False
        s.bookmarks.add(idx)
        return True

    # Timer

    def _run_timer(self, started_at: float) -> None:
        s = self.session
        assert s is not None
        self._stop_timer()
        # Callbacks carry their own session; a replaced session's timer must stay silent
        self._timer = CountdownTimer(
            s.total_duration,
            on_tick=lambda left, owner=s: self._on_tick(owner, left),
            on_expire=lambda owner=s: self._on_expire(owner),
            clock=self.clock,
            interval_s=self.tick_interval_s,
            background=self.background_timer,
        )
        self._timer.start(started_at)

    def _stop_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _on_tick(self, owner: Session, left: int) -> None:
        if owner is not self.session:
            return
        owner.time_left = left
        self.events.emit(TICK, left)

    def _on_expire(self, owner: Session) -> None:
        if owner is not self.session or self.state != ACTIVE:
            xtrace("stale_timer_ignored", {})
            return
        xtrace("time_up", {})
        self.events.emit(TIME_UP, owner)

    def tick(self) -> int:
        """Drive one timer tick (used when the timer is not on a background thread)."""
        s = self._require_active()
        if self._timer is None:
            return s.time_left
        return self._timer.tick()

    @property
    def timer_running(self) -> bool:
        return self._timer is not None and self._timer.running

    # Scoring

    def calculate_final(self) -> Result:
        """Score the active session and end it.

        Persisting the Result is the caller's job.
        """
        s = self._require_active()
        if self._timer is not None:
            s.time_left = self._timer.remaining()
        self._stop_timer()
        time_taken = s.total_duration - s.time_left if s.config.timed else None
        result = score_answers(
            s.questions,
            s.answers,
            paper=s.config.paper,
            subject=s.config.subject,
            mode=s.config.mode,
            time_taken=time_taken,
        )
        self.session = None
        self.state = FINISHED
        xtrace("session_scored", {"score": result.score, "accuracy": result.accuracy, "attempted": result.attempted})
        return result

    def _require_active(self) -> Session:
        if self.session is None or self.state != ACTIVE:
            raise CallerMisuseError(f"no active session (state: {self.state})")
        return self.session
