from __future__ import annotations

"""Quiz controller: wires bank loading, the session engine, and the store.

Front-end agnostic. The CLI (or any other front end) calls these methods in
response to user actions and re-renders from `engine.session`.
"""

import sys
import threading
from typing import Any, Callable, Dict, List, Optional, Tuple

from ..bank.loader import BankLoader
from ..bank.normalizer import normalize_with_report
from ..bank.schema import Question
from ..bank.validator import validate
from ..config.config import MISTAKES_SUBJECT, time_per_question
from ..engine.engine import SessionEngine
from ..engine.scoring import Result
from ..engine.session import Session, SessionConfig
from ..errors import CallerMisuseError
from ..policy.mistake_manager import Decision, extract_mistakes
from ..storage.store import Store
from .events import TIME_UP
from .explain import trace as xtrace


class QuizController:
    def __init__(
        self,
        cfg: Dict[str, Any],
        store: Store,
        *,
        engine: Optional[SessionEngine] = None,
        loader: Optional[BankLoader] = None,
        on_time_up: Optional[Callable[[Result, Optional[str]], None]] = None,
    ) -> None:
        self.cfg = cfg
        self.store = store
        quiz = cfg.get("quiz", {})
        self.engine = engine or SessionEngine(
            time_per_question={p: time_per_question(cfg, p) for p in ("gs1", "csat")},
            tick_interval_s=float(quiz.get("tick_interval_s", 0.25)),
        )
        self.loader = loader or BankLoader(cfg)
        self.on_time_up = on_time_up
        self.last_result: Optional[Result] = None
        self.last_result_id: Optional[str] = None
        self.dropped_items = 0
        self._lock = threading.RLock()
        self.engine.events.subscribe(TIME_UP, self._on_time_up)

    def load_bank(self, subject: str) -> List[Question]:
        """Fetch (or read the mistake bank), normalize and validate.

        Raises NetworkError or ValidationError; nothing is started on failure.
        """
        if subject == MISTAKES_SUBJECT:
            raw: Any = self.store.mistakes()
        else:
            raw = self.loader.load(subject)
        questions, dropped = normalize_with_report(raw)
        self.dropped_items = dropped
        validate(questions, int(self.cfg.get("quiz", {}).get("validate_sample", 10)))
        return questions

    def start(
        self,
        subject: str,
        *,
        count: Optional[int] = None,
        mode: Optional[str] = None,
        paper: Optional[str] = None,
    ) -> Session:
        quiz = self.cfg.get("quiz", {})
        config = SessionConfig(
            subject=subject,
            count=int(count if count is not None else quiz.get("count", 10)),
            mode=mode or quiz.get("mode", "test"),
            paper=paper or quiz.get("paper", "gs1"),
        )
        questions = self.load_bank(subject)
        with self._lock:
            self.last_result = None
            self.last_result_id = None
            session = self.engine.start_session(config, questions)
            self._checkpoint()
        return session

    def resume(self) -> Optional[Session]:
        """Restore a session saved before the last exit, if any."""
        snap = self.store.load_session()
        if not snap:
            return None
        with self._lock:
            try:
                session = self.engine.resume(snap)
            except (KeyError, TypeError, ValueError, CallerMisuseError) as e:
                print(f"[WARN] Discarding unreadable saved session: {e}", file=sys.stderr)
                self.store.clear_session()
                return None
        return session

    def answer(self, option_index: int) -> Optional[Decision]:
        with self._lock:
            if not self.engine.active:
                return None
            decision = self.engine.save_answer(option_index)
            self._checkpoint()
            return decision

    def clear_answer(self) -> bool:
        with self._lock:
            if not self.engine.active:
                return False
            cleared = self.engine.clear_answer()
            self._checkpoint()
            return cleared

    def move_to(self, index: int) -> bool:
        with self._lock:
            if not self.engine.active:
                return False
            moved = self.engine.move_to(index)
            self._checkpoint()
            return moved

    def move(self, delta: int) -> bool:
        with self._lock:
            if not self.engine.active:
                return False
            return self.move_to(self.engine.session.current_idx + delta)

    def toggle_bookmark(self) -> bool:
        with self._lock:
            if not self.engine.active:
                return False
            flagged = self.engine.toggle_bookmark()
            self._checkpoint()
            return flagged

    def finish(self) -> Tuple[Result, Optional[str]]:
        """Score, persist the result and new mistakes, forget the saved session."""
        with self._lock:
            result = self.engine.calculate_final()
            rid = self.store.save_result(result)
            self.store.save_mistakes(extract_mistakes(result))
            self.store.clear_session()
            self.last_result, self.last_result_id = result, rid
            xtrace("quiz_finished", {"result_id": rid, "mistakes": len(result.mistakes)})
            return result, rid

    def abandon(self) -> None:
        with self._lock:
            self.engine.cancel()
            self.store.clear_session()

    def _checkpoint(self) -> None:
        if self.engine.active:
            self.store.save_session(self.engine.snapshot())

    def _on_time_up(self, expired: Any) -> None:
        with self._lock:
            # The payload is the session whose countdown ran out
            if not self.engine.active or expired is not self.engine.session:
                return
            result, rid = self.finish()
        if self.on_time_up:
            self.on_time_up(result, rid)
