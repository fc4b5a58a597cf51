from __future__ import annotations

"""Canonical question dataclasses produced by the normalizer."""

from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, List

MISSING_TEXT = "Question content missing"
DEFAULT_EXPLANATION = "No explanation provided for this question."
DEFAULT_YEAR = "N/A"
DEFAULT_EXAM = "UPSC Prelims"
DEFAULT_DIFFICULTY = "Moderate"
DEFAULT_TOPIC = "General Studies"


@dataclass(frozen=True)
class QuestionMeta:
    year: str = DEFAULT_YEAR
    exam: str = DEFAULT_EXAM
    difficulty: str = DEFAULT_DIFFICULTY
    topic: str = DEFAULT_TOPIC
    subtopic: str = ""
    tags: FrozenSet[str] = frozenset()
    concepts: FrozenSet[str] = frozenset()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "year": self.year,
            "exam": self.exam,
            "difficulty": self.difficulty,
            "topic": self.topic,
            "subtopic": self.subtopic,
            "tags": sorted(self.tags),
            "concepts": sorted(self.concepts),
        }


@dataclass
class Question:
    """A bank item after normalization.

    `correct` is only trustworthy once the Validator has range-checked it.
    """

    id: str
    text: str
    options: List[str]
    correct: int
    explanation: str = DEFAULT_EXPLANATION
    metadata: QuestionMeta = field(default_factory=QuestionMeta)
    notes: str = ""
    synthetic_id: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "text": self.text,
            "options": list(self.options),
            "correct": self.correct,
            "explanation": self.explanation,
            "metadata": self.metadata.to_dict(),
            "notes": self.notes,
            "synthetic_id": self.synthetic_id,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Question":
        """Rebuild a Question written by `to_dict` (history, mistakes, snapshots)."""
        meta = data.get("metadata") or {}
        return cls(
            id=str(data["id"]),
            text=str(data["text"]),
            options=[str(o) for o in data.get("options", [])],
            correct=int(data.get("correct", 0)),
            explanation=str(data.get("explanation", DEFAULT_EXPLANATION)),
            metadata=QuestionMeta(
                year=str(meta.get("year", DEFAULT_YEAR)),
                exam=str(meta.get("exam", DEFAULT_EXAM)),
                difficulty=str(meta.get("difficulty", DEFAULT_DIFFICULTY)),
                topic=str(meta.get("topic", DEFAULT_TOPIC)),
                subtopic=str(meta.get("subtopic", "")),
                tags=frozenset(str(t) for t in meta.get("tags", [])),
                concepts=frozenset(str(c) for c in meta.get("concepts", [])),
            ),
            notes=str(data.get("notes", "")),
            synthetic_id=bool(data.get("synthetic_id", False)),
        )
