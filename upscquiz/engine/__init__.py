from .scoring import MARKING, MarkingScheme, QuestionOutcome, Result, score_answers
from .session import Session, SessionConfig
from .timer import CountdownTimer, format_time
from .engine import SessionEngine

__all__ = [
    "MARKING",
    "MarkingScheme",
    "QuestionOutcome",
    "Result",
    "score_answers",
    "Session",
    "SessionConfig",
    "CountdownTimer",
    "format_time",
    "SessionEngine",
]
