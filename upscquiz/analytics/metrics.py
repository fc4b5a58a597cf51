from __future__ import annotations

"""Aggregate metrics over prepared history frames."""

import numpy as np
import pandas as pd

from .config import AnalyticsConfig


def compute_metrics(df: pd.DataFrame) -> pd.DataFrame:
    """Add per-attempt ratios.

    - score_pct: score as a share of the maximum possible score
    - attempt_rate: attempted / total
    """
    out = df.copy()
    max_score = out["max_score"].astype("float32").where(out["max_score"] > 0, other=1.0)
    out["score_pct"] = (out["score"].astype("float32") / max_score * 100).clip(0, 100).astype("float32")
    total = out["total"].astype("float32").where(out["total"] > 0, other=1.0)
    out["attempt_rate"] = (out["attempted"].astype("float32") / total).astype("float32")
    return out


def subject_summary(df: pd.DataFrame) -> pd.DataFrame:
    """Per-subject attempts, mean accuracy, mean score_pct, and marks lost."""
    if df.empty:
        return pd.DataFrame(columns=["attempts", "accuracy", "score_pct", "penalty"])
    g = compute_metrics(df).groupby("subject", observed=True)
    return pd.DataFrame(
        {
            "attempts": g.size(),
            "accuracy": g["accuracy"].mean().astype("float32"),
            "score_pct": g["score_pct"].mean().astype("float32"),
            "penalty": g["penalty"].sum().astype("float32"),
        }
    ).sort_index()


def weak_topics(outcomes: pd.DataFrame, cfg: AnalyticsConfig) -> pd.DataFrame:
    """Topics with the lowest accuracy among those with enough attempts."""
    if outcomes.empty:
        return pd.DataFrame(columns=["attempted", "accuracy"])
    g = outcomes.groupby("topic", observed=True)["is_correct"]
    table = pd.DataFrame({"attempted": g.size(), "accuracy": (g.mean().astype("float64") * 100)})
    table = table[table["attempted"] >= cfg.min_topic_questions].copy()
    table["accuracy"] = np.round(table["accuracy"]).astype("int64")
    return table.sort_values(["accuracy", "attempted"], ascending=[True, False]).head(cfg.weak_topics)
