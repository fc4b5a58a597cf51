from __future__ import annotations

"""Analytics configuration (hyperparameters) using Pydantic."""

from pydantic import BaseModel, Field


class AnalyticsConfig(BaseModel):
    """Hyperparameters for history analytics.

    - smoothing_span: EWMA span in attempts (>1)
    - min_topic_questions: topics with fewer attempted questions are left out
      of the weak-topic ranking
    - weak_topics: how many weakest topics to report
    """

    smoothing_span: int = Field(5, gt=1)
    min_topic_questions: int = Field(3, ge=1)
    weak_topics: int = Field(5, ge=1)
