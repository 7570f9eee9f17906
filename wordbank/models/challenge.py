from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel

from wordbank.utils.time import parse_datetime


class ChallengeState(str, Enum):
    NotStarted = "NotStarted"
    Resumable = "Resumable"
    InProgress = "InProgress"
    Finished = "Finished"


@dataclass
class ChallengeCheckpoint:
    itemIds: list[str]
    startedAt: datetime
    currentIndex: int = 0
    correctCount: int = 0
    incorrectCount: int = 0

    @classmethod
    def from_doc(cls, doc: dict[str, Any], now: datetime) -> "ChallengeCheckpoint":
        item_ids = [str(item_id) for item_id in (doc.get("itemIds") or []) if item_id]
        current_index = int(doc.get("currentIndex", 0) or 0)
        return cls(
            itemIds=item_ids,
            startedAt=parse_datetime(doc.get("startedAt"), now),
            currentIndex=min(max(0, current_index), len(item_ids)),
            correctCount=max(0, int(doc.get("correctCount", 0) or 0)),
            incorrectCount=max(0, int(doc.get("incorrectCount", 0) or 0)),
        )

    def to_doc(self) -> dict[str, Any]:
        return {
            "itemIds": list(self.itemIds),
            "startedAt": self.startedAt,
            "currentIndex": self.currentIndex,
            "correctCount": self.correctCount,
            "incorrectCount": self.incorrectCount,
        }


@dataclass(frozen=True)
class ChallengeSummary:
    total: int
    correctCount: int
    incorrectCount: int

    @property
    def accuracy(self) -> int:
        if self.total <= 0:
            return 0
        return round(self.correctCount / self.total * 100)


class ChallengeAnswerCreate(BaseModel):
    itemId: str
    correct: bool


class ChallengeSummaryOut(BaseModel):
    total: int
    correctCount: int
    incorrectCount: int
    accuracy: int


class ChallengeStatusOut(BaseModel):
    state: ChallengeState
    currentItemId: str | None = None
    currentIndex: int = 0
    total: int = 0
    correctCount: int = 0
    incorrectCount: int = 0
    options: list[str] = []
    summary: ChallengeSummaryOut | None = None
