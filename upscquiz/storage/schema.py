from __future__ import annotations

"""Pydantic models for records persisted in the store."""

from datetime import datetime, timezone
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


# --- Constants ---

HISTORY_KEY = "history"
MISTAKES_KEY = "mistakes"
SETTINGS_KEY = "settings"
VISITED_KEY = "visited"
SESSION_KEY = "current_session"
APP_KEYS = (HISTORY_KEY, MISTAKES_KEY, SETTINGS_KEY, VISITED_KEY, SESSION_KEY)

HISTORY_CAP = 50
MISTAKES_CAP = 100


# --- Pydantic models ---

class StoredQuestion(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str
    text: str = Field(min_length=1)
    options: List[str] = Field(default_factory=list)
    correct: int = Field(ge=0)


class OutcomeRecord(StoredQuestion):
    userAns: Optional[int] = Field(default=None, ge=0)
    isCorrect: bool = False
    attempted: bool = False


class MistakeEntry(StoredQuestion):
    userAns: Optional[int] = Field(default=None, ge=0)


class ResultRecord(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str
    savedAt: datetime
    score: float = Field(ge=0)
    correct: int = Field(ge=0)
    wrong: int = Field(ge=0)
    skipped: int = Field(ge=0)
    attempted: int = Field(ge=0)
    accuracy: int = Field(ge=0, le=100)
    total: int = Field(ge=0)
    subject: str = ""
    paper: Literal["gs1", "csat"]
    mode: Literal["test", "learning"] = "test"
    timeTaken: Optional[int] = Field(default=None, ge=0)
    fullData: List[OutcomeRecord] = Field(default_factory=list)

    @field_validator("savedAt")
    @classmethod
    def _ensure_utc(cls, v: datetime) -> datetime:
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v.astimezone(timezone.utc)

    @model_validator(mode="after")
    def _counts_add_up(self) -> "ResultRecord":
        if self.correct + self.wrong != self.attempted:
            raise ValueError("correct + wrong must equal attempted")
        if self.attempted + self.skipped != self.total:
            raise ValueError("attempted + skipped must equal total")
        return self
