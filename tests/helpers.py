"""Shared fixtures for the test modules."""

from typing import List

from upscquiz.bank.schema import Question, QuestionMeta


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def make_question(i: int, correct: int = 0, topic: str = "Polity", n_options: int = 4) -> Question:
    return Question(
        id=f"q{i}",
        text=f"Question number {i}?",
        options=[f"opt {k}" for k in range(n_options)],
        correct=correct,
        explanation=f"Because of reason {i}.",
        metadata=QuestionMeta(year="2020", topic=topic),
    )


def make_bank(n: int, correct: int = 0) -> List[Question]:
    return [make_question(i, correct=correct) for i in range(n)]


def raw_bank(n: int) -> List[dict]:
    return [
        {
            "id": f"raw{i}",
            "question_text": f"Raw question {i}?",
            "options": ["A1", "B1", "C1", "D1"],
            "correct_option_label": "B",
            "explanation": f"Explained {i}.",
            "topic": "History" if i % 2 else "Polity",
        }
        for i in range(n)
    ]
