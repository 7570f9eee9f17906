from dataclasses import asdict, dataclass, replace
from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel


class WordStatus(str, Enum):
    New = "New"
    Learning = "Learning"
    Mastered = "Mastered"


@dataclass
class ProgressRecord:
    itemId: str
    nextReviewDate: datetime
    status: WordStatus = WordStatus.New
    easiness: float = 2.5
    interval: int = 0
    repetitions: int = 0
    lastCorrect: bool | None = None
    addedFromCapture: bool = False

    def copy(self, **changes: Any) -> "ProgressRecord":
        return replace(self, **changes)

    def is_due(self, now: datetime) -> bool:
        return self.nextReviewDate <= now

    def to_doc(self) -> dict[str, Any]:
        doc = asdict(self)
        doc["status"] = self.status.value
        return doc


class StatsOut(BaseModel):
    newCount: int
    learningCount: int
    masteredCount: int
