import tempfile
import unittest
from pathlib import Path

import pandas as pd

from upscquiz.analytics import (
    AnalyticsConfig,
    ewma_by_session,
    export_ndjson,
    export_parquet,
    history_frame,
    outcomes_frame,
    plot_subject_bars,
    plot_trend,
    subject_summary,
    weak_topics,
)
from upscquiz.engine.scoring import score_answers

from helpers import make_question


def saved(result, rid: str, saved_at: str) -> dict:
    d = result.to_dict()
    d.update({"id": rid, "savedAt": saved_at})
    return d


def sample_history() -> list:
    gs_bank = [make_question(0, topic="Polity"), make_question(1, topic="Polity"),
               make_question(2, topic="History"), make_question(3, topic="History")]
    csat_bank = [make_question(10, topic="Reasoning"), make_question(11, topic="Reasoning")]
    first = score_answers(gs_bank, {0: 0, 1: 0, 2: 1, 3: 1}, paper="gs1", subject="polity")
    second = score_answers(csat_bank, {0: 0}, paper="csat", subject="reasoning", time_taken=50)
    # Stored newest first
    return [
        saved(second, "result_2", "2026-03-02T10:00:00+00:00"),
        saved(first, "result_1", "2026-03-01T10:00:00+00:00"),
    ]


class HistoryFrameTests(unittest.TestCase):
    def setUp(self) -> None:
        self.df = history_frame(sample_history())

    def test_oldest_first_with_marking_columns(self) -> None:
        self.assertEqual(list(self.df["id"]), ["result_1", "result_2"])
        self.assertEqual(list(self.df["session_idx"]), [0, 1])
        self.assertAlmostEqual(float(self.df.loc[0, "max_score"]), 8.0)
        self.assertAlmostEqual(float(self.df.loc[1, "max_score"]), 5.0)
        self.assertAlmostEqual(float(self.df.loc[0, "penalty"]), 1.332, places=3)
        self.assertIsInstance(self.df["saved_at"].dtype, pd.DatetimeTZDtype)

    def test_empty_history(self) -> None:
        df = history_frame([])
        self.assertTrue(df.empty)
        self.assertIn("max_score", df.columns)
        self.assertTrue(subject_summary(df).empty)

    def test_subject_summary(self) -> None:
        summary = subject_summary(self.df)
        self.assertEqual(list(summary.index), ["polity", "reasoning"])
        self.assertEqual(int(summary.loc["polity", "attempts"]), 1)
        self.assertAlmostEqual(float(summary.loc["reasoning", "score_pct"]), 50.0, places=3)

    def test_ewma_adds_smooth_column(self) -> None:
        smooth = ewma_by_session(self.df, "accuracy", span=3)
        self.assertIn("accuracy_smooth", smooth.columns)
        self.assertAlmostEqual(float(smooth["accuracy_smooth"].iloc[0]), 50.0)
        per_subject = ewma_by_session(self.df, "accuracy", span=3, group_cols=["subject"])
        self.assertEqual(list(per_subject["accuracy_smooth"]), [50.0, 100.0])


class OutcomeTests(unittest.TestCase):
    def test_weak_topics_rank_lowest_accuracy_first(self) -> None:
        outcomes = outcomes_frame(sample_history())
        self.assertEqual(len(outcomes), 5)
        table = weak_topics(outcomes, AnalyticsConfig(min_topic_questions=1))
        self.assertEqual(list(table.index), ["History", "Polity", "Reasoning"])
        self.assertEqual(int(table.loc["History", "accuracy"]), 0)

    def test_min_question_filter(self) -> None:
        table = weak_topics(outcomes_frame(sample_history()), AnalyticsConfig(min_topic_questions=2))
        self.assertNotIn("Reasoning", table.index)

    def test_no_outcomes(self) -> None:
        self.assertTrue(weak_topics(outcomes_frame([]), AnalyticsConfig()).empty)


class OutputTests(unittest.TestCase):
    def test_plots_and_exports_write_files(self) -> None:
        df = ewma_by_session(history_frame(sample_history()), "accuracy", span=3)
        with tempfile.TemporaryDirectory() as d:
            trend = Path(d) / "trend.png"
            bars = Path(d) / "bars.png"
            self.assertTrue(plot_trend(df, save_path=trend))
            self.assertTrue(plot_subject_bars(subject_summary(df), save_path=bars))
            self.assertFalse(plot_trend(df, subject="geography"))
            self.assertTrue(trend.exists() and bars.exists())

            export_ndjson(df, Path(d) / "out" / "history.ndjson")
            lines = (Path(d) / "out" / "history.ndjson").read_text(encoding="utf-8").splitlines()
            self.assertEqual(len(lines), 2)
            export_parquet(df, Path(d) / "history.parquet")
            back = pd.read_parquet(Path(d) / "history.parquet")
            self.assertEqual(list(back["id"]), ["result_1", "result_2"])


if __name__ == "__main__":
    unittest.main()
