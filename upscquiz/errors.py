from __future__ import annotations

"""Exception taxonomy shared by the bank, engine, and storage layers."""

from typing import List, Optional


class QuizError(Exception):
    """Base class for all quiz engine errors."""


class DataShapeError(QuizError):
    """A single raw bank item could not be coerced into a Question.

    Raised and recovered inside the normalizer; the offending item is dropped.
    """


class ValidationError(QuizError):
    """A normalized bank failed the pre-session sanity check."""

    MAX_SHOWN = 3

    def __init__(self, problems: List[str]) -> None:
        self.problems = list(problems)
        shown = self.problems[: self.MAX_SHOWN]
        lines = ["Data integrity error:"] + shown
        extra = len(self.problems) - len(shown)
        if extra > 0:
            lines.append(f"... and {extra} more")
        super().__init__("\n".join(lines))


class StorageQuotaError(QuizError):
    """A write would exceed the store's size budget or the disk is full."""


class NetworkError(QuizError):
    """A bank fetch failed after all retries."""

    def __init__(self, url: str, reason: str, attempts: Optional[int] = None) -> None:
        self.url = url
        self.reason = reason
        self.attempts = attempts
        msg = f"Could not load {url}: {reason}"
        if attempts:
            msg += f" (after {attempts} attempts)"
        super().__init__(msg)


class CallerMisuseError(QuizError):
    """The controller called the engine in a state that does not allow it."""
