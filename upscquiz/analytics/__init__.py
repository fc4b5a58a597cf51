from .config import AnalyticsConfig
from .export import export_ndjson, export_parquet
from .metrics import compute_metrics, subject_summary, weak_topics
from .prepare import history_frame, outcomes_frame
from .smoothing import ewma_by_session
from .plots import plot_subject_bars, plot_trend

__all__ = [
    "AnalyticsConfig",
    "export_ndjson",
    "export_parquet",
    "compute_metrics",
    "subject_summary",
    "weak_topics",
    "history_frame",
    "outcomes_frame",
    "ewma_by_session",
    "plot_subject_bars",
    "plot_trend",
]
