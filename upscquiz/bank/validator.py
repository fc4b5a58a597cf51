from __future__ import annotations

"""Pre-session sanity check over normalized questions."""

from typing import List, Sequence

from ..errors import ValidationError
from .schema import MISSING_TEXT, Question

DEFAULT_SAMPLE_SIZE = 10


def question_problems(q: Question, position: int) -> List[str]:
    """Return human-readable problems for one question (1-based position)."""
    label = f"Q{position} (id={q.id})"
    problems: List[str] = []
    if not q.text or not q.text.strip() or q.text == MISSING_TEXT:
        problems.append(f"{label}: text missing")
    n = len(q.options) if isinstance(q.options, list) else 0
    if n < 2:
        problems.append(f"{label}: needs at least 2 options, found {n}")
    if not isinstance(q.correct, int) or isinstance(q.correct, bool) or not (0 <= q.correct < max(n, 0)):
        problems.append(f"{label}: correct answer {q.correct!r} is out of range for {n} options")
    return problems


def validate(questions: Sequence[Question], sample_size: int = DEFAULT_SAMPLE_SIZE) -> None:
    """Raise ValidationError unless the bank is usable.

    Only the first `sample_size` items are inspected (never fewer than 10) so
    huge banks stay cheap to open.
    """
    if not questions:
        raise ValidationError(["Question bank is empty or invalid."])
    limit = max(DEFAULT_SAMPLE_SIZE, int(sample_size))
    problems: List[str] = []
    for i, q in enumerate(questions[:limit], start=1):
        problems.extend(question_problems(q, i))
    if problems:
        raise ValidationError(problems)
