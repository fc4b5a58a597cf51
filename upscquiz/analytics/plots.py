from __future__ import annotations

"""Matplotlib plots for score and accuracy trends."""

import os
from typing import Optional

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt  # noqa: E402
import pandas as pd  # noqa: E402


def plot_trend(
    df: pd.DataFrame,
    *,
    subject: Optional[str] = None,
    value_col: str = "accuracy",
    save_path: Optional[str | os.PathLike[str]] = None,
) -> bool:
    """Scatter of value_col per attempt, plus its EWMA line when present.

    Returns False when there is nothing to plot.
    """
    g = df.copy()
    if subject is not None:
        g = g[g["subject"].astype("string") == subject]
    if g.empty:
        return False
    g = g.sort_values("session_idx")
    plt.figure()
    plt.plot(g["session_idx"], g[value_col].astype("float64"), marker="o", linestyle="", label=value_col)
    smooth_col = f"{value_col}_smooth"
    if smooth_col in g.columns:
        plt.plot(g["session_idx"], g[smooth_col].astype("float64"), linewidth=2, label=f"{value_col} (EWMA)")
    plt.xlabel("Attempt")
    plt.ylabel(value_col)
    plt.title(f"Trend: {subject}" if subject else "Trend")
    plt.legend()
    if save_path:
        plt.savefig(save_path, bbox_inches="tight", dpi=150)
    plt.close()
    return True


def plot_subject_bars(
    summary: pd.DataFrame,
    *,
    value_col: str = "accuracy",
    save_path: Optional[str | os.PathLike[str]] = None,
) -> bool:
    if summary.empty:
        return False
    plt.figure()
    plt.barh(summary.index.astype(str), summary[value_col].astype("float64"))
    plt.xlabel(value_col)
    plt.title(f"{value_col} by subject")
    if save_path:
        plt.savefig(save_path, bbox_inches="tight", dpi=150)
    plt.close()
    return True
