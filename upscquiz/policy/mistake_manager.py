from __future__ import annotations

"""Answer-feedback policies and mistake extraction."""

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Dict, List, Literal, Optional, Protocol

from ..bank.schema import Question

if TYPE_CHECKING:
    from ..engine.scoring import Result


@dataclass(frozen=True)
class Decision:
    action: Literal["next", "reveal"]
    penalty: float
    feedback: str = ""
    correct_index: Optional[int] = None


class FeedbackPolicy(Protocol):
    def decide(self, question: Question, user_answer: int, is_correct: bool, penalty: float) -> Decision: ...


class DeferredFeedback:
    """Test mode: nothing is revealed until the attempt is scored."""

    def decide(self, question: Question, user_answer: int, is_correct: bool, penalty: float) -> Decision:
        return Decision(action="next", penalty=0.0)


class ImmediateReveal:
    """Learning mode: correct -> next; wrong -> reveal the answer and explanation.

    Answers can still be changed afterwards; the penalty is what the current
    choice would cost if the attempt were scored now.
    """

    def decide(self, question: Question, user_answer: int, is_correct: bool, penalty: float) -> Decision:
        if is_correct:
            return Decision(action="next", penalty=0.0, feedback="Correct!", correct_index=question.correct)
        label = "ABCDEFGH"[question.correct] if question.correct < 8 else str(question.correct + 1)
        return Decision(
            action="reveal",
            penalty=penalty,
            feedback=f"Incorrect. Answer was {label}. {question.explanation}",
            correct_index=question.correct,
        )


def policy_for(mode: str) -> FeedbackPolicy:
    return ImmediateReveal() if mode == "learning" else DeferredFeedback()


def extract_mistakes(result: "Result") -> List[Dict[str, Any]]:
    """Attempted-and-wrong questions as mistake-bank entries (question + userAns)."""
    out: List[Dict[str, Any]] = []
    for o in result.mistakes:
        entry = o.question.to_dict()
        entry["userAns"] = o.user_answer
        out.append(entry)
    return out
