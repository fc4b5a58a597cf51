from __future__ import annotations

"""Normalize heterogeneous question-bank JSON into canonical Questions.

Accepted shapes:
- a list of raw question records
- an object wrapping that list under "questions"
- a single bare record

Each field is resolved and defaulted independently. A record that cannot be
mapped at all is dropped; it never aborts the rest of the bank.
"""

import re
import sys
import time
from typing import Any, List, Mapping, Optional, Tuple

from ..app.explain import trace as xtrace
from ..errors import DataShapeError
from .schema import (
    DEFAULT_DIFFICULTY,
    DEFAULT_EXAM,
    DEFAULT_EXPLANATION,
    DEFAULT_TOPIC,
    DEFAULT_YEAR,
    MISSING_TEXT,
    Question,
    QuestionMeta,
)

ID_NAMESPACE = "upsc"
LABEL_TO_INDEX = {"A": 0, "B": 1, "C": 2, "D": 3}

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def _warn(msg: str) -> None:
    print(f"[WARN] {msg}", file=sys.stderr)


def parse_index(value: Any) -> Optional[int]:
    """Lenient integer parse: 2, 2.0, "2", " 3 " and "1st" all parse; bools do not.

    Returns None when nothing usable is found or the result is negative.
    """
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, int):
        parsed = value
    elif isinstance(value, float):
        if value != value or value in (float("inf"), float("-inf")):
            return None
        parsed = int(value)
    elif isinstance(value, str):
        m = _LEADING_INT.match(value)
        if not m:
            return None
        parsed = int(m.group(1))
    else:
        return None
    return parsed if parsed >= 0 else None


def extract_correct(item: Mapping[str, Any]) -> int:
    """Resolve the correct option index.

    Priority: correct_option_index, correct, correct_option_label (A-D).
    Falls back to 0 with a warning; that default is unverified data.
    """
    if "correct_option_index" in item:
        parsed = parse_index(item.get("correct_option_index"))
        if parsed is not None:
            return parsed
    if "correct" in item:
        parsed = parse_index(item.get("correct"))
        if parsed is not None:
            return parsed
    label = item.get("correct_option_label")
    label = "" if label is None else str(label).strip().upper()
    if label in LABEL_TO_INDEX:
        return LABEL_TO_INDEX[label]
    _warn(f"Could not extract correct answer for question id: {item.get('id') or 'unknown'}")
    xtrace("correct_defaulted", {"id": str(item.get("id") or "")})
    return 0


def _text(item: Mapping[str, Any]) -> str:
    for key in ("question_text", "text"):
        val = item.get(key)
        if isinstance(val, (str, int, float)) and not isinstance(val, bool):
            s = str(val).strip()
            if s:
                return s
    return MISSING_TEXT


def _as_str(val: Any, default: str) -> str:
    if val is None or isinstance(val, (dict, list)):
        return default
    s = str(val).strip()
    return s or default


def _str_set(value: Any) -> frozenset:
    if not isinstance(value, list):
        return frozenset()
    return frozenset(str(v) for v in value if v is not None and not isinstance(v, (dict, list)))


def _metadata(item: Mapping[str, Any]) -> QuestionMeta:
    # Canonical dumps nest these under "metadata"; raw banks keep them top-level.
    nested = item.get("metadata")
    if not isinstance(nested, dict):
        nested = {}
    source = item.get("source")
    if not isinstance(source, dict):
        source = {}

    def pick(*keys: str) -> Any:
        for k in keys:
            if item.get(k) not in (None, ""):
                return item.get(k)
        for k in keys:
            if nested.get(k) not in (None, ""):
                return nested.get(k)
        return None

    year = pick("year")
    if year is None:
        year = source.get("year")
    if year in (None, ""):
        year = DEFAULT_YEAR

    exam = source.get("exam")
    if isinstance(exam, str) and exam.strip():
        exam = exam.replace("_", " ")
    else:
        exam = _as_str(nested.get("exam"), DEFAULT_EXAM)

    return QuestionMeta(
        year=str(year),
        exam=exam,
        difficulty=_as_str(pick("difficulty"), DEFAULT_DIFFICULTY),
        topic=_as_str(pick("topic"), DEFAULT_TOPIC),
        subtopic=_as_str(pick("subtopic"), ""),
        tags=_str_set(pick("tags")),
        concepts=_str_set(pick("linked_concepts", "concepts")),
    )


def normalize_item(item: Any, index: int, *, stamp_ms: int) -> Question:
    """Map one raw record to a Question. Raises DataShapeError for non-records."""
    if not isinstance(item, dict):
        raise DataShapeError(f"item {index} is {type(item).__name__}, expected an object")

    raw_id = item.get("id")
    if raw_id is not None and str(raw_id).strip():
        qid, synthetic = str(raw_id).strip(), False
    else:
        qid, synthetic = f"{ID_NAMESPACE}_{stamp_ms}_{index}", True

    options = item.get("options")
    options = [str(o) for o in options] if isinstance(options, list) else []

    return Question(
        id=qid,
        text=_text(item),
        options=options,
        correct=extract_correct(item),
        explanation=_as_str(item.get("explanation"), DEFAULT_EXPLANATION),
        metadata=_metadata(item),
        notes=_as_str(item.get("notes"), ""),
        synthetic_id=synthetic,
    )


def _as_list(raw: Any) -> List[Any]:
    if raw is None:
        return []
    if isinstance(raw, list):
        return raw
    if isinstance(raw, dict):
        wrapped = raw.get("questions")
        if isinstance(wrapped, list):
            return wrapped
        if "questions" in raw:
            return []
        return [raw] if raw else []
    return []


def normalize_with_report(raw: Any) -> Tuple[List[Question], int]:
    """Normalize and also report how many records were dropped."""
    items = _as_list(raw)
    stamp_ms = int(time.time() * 1000)
    out: List[Question] = []
    dropped = 0
    for i, item in enumerate(items):
        try:
            out.append(normalize_item(item, i, stamp_ms=stamp_ms))
        except Exception as e:
            dropped += 1
            _warn(f"Dropped bank item {i}: {e}")
    if dropped:
        xtrace("bank_items_dropped", {"dropped": dropped, "kept": len(out)})
    return out, dropped


def normalize(raw: Any) -> List[Question]:
    """Convert a parsed JSON value into canonical Questions. Never returns None."""
    questions, _ = normalize_with_report(raw)
    return questions
