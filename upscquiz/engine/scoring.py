from __future__ import annotations

"""UPSC Prelims marking scheme and result assembly.

GS Paper I awards +2 per correct answer and deducts a third of that (0.666)
per wrong answer; CSAT awards +2.5 and deducts 0.833. Unattempted questions
score nothing. A negative total is reported as 0.
"""

import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence

from ..bank.schema import Question


@dataclass(frozen=True)
class MarkingScheme:
    positive: float
    negative: float


MARKING = {
    "gs1": MarkingScheme(positive=2.0, negative=0.666),
    "csat": MarkingScheme(positive=2.5, negative=0.833),
}


def scheme_for(paper: str) -> MarkingScheme:
    try:
        return MARKING[paper]
    except KeyError:
        raise ValueError(f"Unknown paper: {paper}")


@dataclass
class QuestionOutcome:
    question: Question
    user_answer: Optional[int]
    is_correct: bool
    attempted: bool

    def to_dict(self) -> Dict[str, Any]:
        d = self.question.to_dict()
        d.update({"userAns": self.user_answer, "isCorrect": self.is_correct, "attempted": self.attempted})
        return d


@dataclass
class Result:
    score: float
    correct: int
    wrong: int
    skipped: int
    attempted: int
    accuracy: int
    total: int
    subject: str
    paper: str
    mode: str = "test"
    full_data: List[QuestionOutcome] = field(default_factory=list)
    time_taken: Optional[int] = None

    @property
    def mistakes(self) -> List[QuestionOutcome]:
        return [o for o in self.full_data if o.attempted and not o.is_correct]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "score": self.score,
            "correct": self.correct,
            "wrong": self.wrong,
            "skipped": self.skipped,
            "attempted": self.attempted,
            "accuracy": self.accuracy,
            "total": self.total,
            "subject": self.subject,
            "paper": self.paper,
            "mode": self.mode,
            "timeTaken": self.time_taken,
            "fullData": [o.to_dict() for o in self.full_data],
        }


def round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))


def score_answers(
    questions: Sequence[Question],
    answers: Mapping[int, int],
    *,
    paper: str,
    subject: str = "",
    mode: str = "test",
    time_taken: Optional[int] = None,
) -> Result:
    """Score a finished attempt. `answers` maps question position to option index."""
    weights = scheme_for(paper)
    correct = wrong = attempted = 0
    outcomes: List[QuestionOutcome] = []
    for i, q in enumerate(questions):
        user = answers.get(i)
        is_attempted = user is not None
        is_correct = is_attempted and user == q.correct
        if is_attempted:
            attempted += 1
            if is_correct:
                correct += 1
            else:
                wrong += 1
        outcomes.append(QuestionOutcome(question=q, user_answer=user, is_correct=is_correct, attempted=is_attempted))

    raw = correct * weights.positive - wrong * weights.negative
    score = round(max(0.0, raw), 2)
    accuracy = round_half_up(100 * correct / attempted) if attempted > 0 else 0
    return Result(
        score=score,
        correct=correct,
        wrong=wrong,
        skipped=len(questions) - attempted,
        attempted=attempted,
        accuracy=accuracy,
        total=len(questions),
        subject=subject,
        paper=paper,
        mode=mode,
        full_data=outcomes,
        time_taken=time_taken,
    )
