from datetime import datetime, timezone
from pydantic import BaseModel, ConfigDict, Field


class Question(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)
    question: str
    choices: list[str]
    answer_index: int = Field(alias="answerIndex")
    explain: str = ""


class Entry(BaseModel):
    name: str
    ip: str = "0.0.0.0"
    ts: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class Winner(BaseModel):
    model_config = ConfigDict(frozen=True)
    name: str
    ts: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class ArchiveItem(BaseModel):
    day_index: int
    winner: Winner


# request bodies
class AnswerIn(BaseModel):
    choice: int


class EntryIn(BaseModel):
    day: int
    name: str = ""


class OverrideIn(BaseModel):
    date: str | None = None
    time: str | None = None


class BackendCall(BaseModel):
    action: str
    payload: dict = Field(default_factory=dict)
