from __future__ import annotations

"""Turn stored history into typed DataFrames."""

from typing import Any, Dict, List

import pandas as pd

from ..engine.scoring import MARKING

DTYPES = {
    "id": "string",
    "saved_at": pd.DatetimeTZDtype(tz="UTC"),
    "subject": "category",
    "paper": "category",
    "mode": "category",
    "score": "float32",
    "correct": "UInt16",
    "wrong": "UInt16",
    "skipped": "UInt16",
    "attempted": "UInt16",
    "total": "UInt16",
    "accuracy": "UInt8",
}


def _empty_df() -> pd.DataFrame:
    return pd.DataFrame({k: pd.Series(dtype=v) for k, v in DTYPES.items()})


def history_frame(history: List[Dict[str, Any]]) -> pd.DataFrame:
    """One row per saved attempt, oldest first, with a stable `session_idx`.

    Adds `max_score` (all correct) and `penalty` (marks lost to wrong answers).
    """
    rows = [
        {
            "id": h.get("id"),
            "saved_at": h.get("savedAt"),
            "subject": h.get("subject") or "Mixed",
            "paper": h.get("paper", "gs1"),
            "mode": h.get("mode", "test"),
            "score": h.get("score", 0),
            "correct": h.get("correct", 0),
            "wrong": h.get("wrong", 0),
            "skipped": h.get("skipped", 0),
            "attempted": h.get("attempted", 0),
            "total": h.get("total", 0),
            "accuracy": h.get("accuracy", 0),
        }
        for h in history
        if isinstance(h, dict)
    ]
    df = pd.DataFrame(rows) if rows else _empty_df()
    df["saved_at"] = pd.to_datetime(df["saved_at"], utc=True, errors="coerce")
    for col, dt in DTYPES.items():
        if col != "saved_at":
            df[col] = df[col].astype(dt)
    df = df.sort_values(["saved_at", "id"], kind="stable").reset_index(drop=True)
    pos = df["paper"].astype("string").map(lambda p: MARKING.get(p, MARKING["gs1"]).positive).astype("float32")
    neg = df["paper"].astype("string").map(lambda p: MARKING.get(p, MARKING["gs1"]).negative).astype("float32")
    df["max_score"] = (df["total"].astype("float32") * pos).astype("float32")
    df["penalty"] = (df["wrong"].astype("float32") * neg).astype("float32")
    df["session_idx"] = range(len(df))
    return df


def outcomes_frame(history: List[Dict[str, Any]]) -> pd.DataFrame:
    """One row per attempted question across all saved results."""
    rows = []
    for h in history:
        if not isinstance(h, dict):
            continue
        for o in h.get("fullData") or []:
            if not o.get("attempted"):
                continue
            meta = o.get("metadata") or {}
            rows.append(
                {
                    "result_id": h.get("id"),
                    "subject": h.get("subject") or "Mixed",
                    "topic": meta.get("topic", "General Studies"),
                    "difficulty": meta.get("difficulty", "Moderate"),
                    "year": str(meta.get("year", "N/A")),
                    "is_correct": bool(o.get("isCorrect")),
                }
            )
    if not rows:
        return pd.DataFrame(
            {
                "result_id": pd.Series(dtype="string"),
                "subject": pd.Series(dtype="category"),
                "topic": pd.Series(dtype="category"),
                "difficulty": pd.Series(dtype="category"),
                "year": pd.Series(dtype="string"),
                "is_correct": pd.Series(dtype="boolean"),
            }
        )
    df = pd.DataFrame(rows)
    for col in ("subject", "topic", "difficulty"):
        df[col] = df[col].astype("category")
    df["year"] = df["year"].astype("string")
    df["is_correct"] = df["is_correct"].astype("boolean")
    return df
