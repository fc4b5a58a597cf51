from __future__ import annotations

"""Aggregate stats over saved attempts, and text formatting for the CLI."""

from typing import Any, Dict, List


def summarize_history(history: List[Dict[str, Any]]) -> Dict[str, Any]:
    """Totals across all saved results plus a per-subject breakdown."""
    stats: Dict[str, Any] = {
        "attempts": 0,
        "questions": 0,
        "attempted": 0,
        "correct": 0,
        "wrong": 0,
        "best_score": 0.0,
        "avg_accuracy": 0,
        "per_subject": {},
    }
    acc_total = 0
    for r in history:
        if not isinstance(r, dict):
            continue
        stats["attempts"] += 1
        stats["questions"] += int(r.get("total", 0))
        stats["attempted"] += int(r.get("attempted", 0))
        stats["correct"] += int(r.get("correct", 0))
        stats["wrong"] += int(r.get("wrong", 0))
        stats["best_score"] = max(stats["best_score"], float(r.get("score", 0) or 0))
        acc_total += int(r.get("accuracy", 0))
        subj = str(r.get("subject") or "Mixed")
        bucket = stats["per_subject"].setdefault(subj, {"attempts": 0, "accuracy_sum": 0})
        bucket["attempts"] += 1
        bucket["accuracy_sum"] += int(r.get("accuracy", 0))
    if stats["attempts"]:
        stats["avg_accuracy"] = round(acc_total / stats["attempts"])
    for bucket in stats["per_subject"].values():
        bucket["avg_accuracy"] = round(bucket.pop("accuracy_sum") / bucket["attempts"])
    return stats


def format_summary(stats: Dict[str, Any]) -> str:
    """Return a human-readable summary of history stats."""
    if not stats.get("attempts"):
        return "No attempts yet."
    lines = [
        f"Attempts: {stats['attempts']}  Questions seen: {stats['questions']}",
        f"Correct: {stats['correct']}  Wrong: {stats['wrong']}  Avg accuracy: {stats['avg_accuracy']}%",
        f"Best score: {stats['best_score']:.2f}",
    ]
    for subj in sorted(stats.get("per_subject", {})):
        b = stats["per_subject"][subj]
        lines.append(f"  {subj}: {b['attempts']} attempts, {b['avg_accuracy']}% avg")
    return "\n".join(lines)


def format_result(result: Dict[str, Any]) -> str:
    lines = [
        f"Score: {float(result.get('score', 0)):.2f}  Accuracy: {result.get('accuracy', 0)}%",
        f"Correct: {result.get('correct', 0)}  Wrong: {result.get('wrong', 0)}  "
        f"Skipped: {result.get('skipped', 0)}  of {result.get('total', 0)}",
    ]
    if result.get("timeTaken") is not None:
        m, s = divmod(int(result["timeTaken"]), 60)
        lines.append(f"Time taken: {m}:{s:02d}")
    return "\n".join(lines)
