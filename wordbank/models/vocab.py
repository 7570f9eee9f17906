from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from wordbank.models.progress import ProgressRecord


@dataclass(frozen=True)
class ExampleSentence:
    sentence: str
    translation: str

    @classmethod
    def from_doc(cls, doc: Any) -> "ExampleSentence | None":
        if not isinstance(doc, dict):
            return None
        sentence = str(doc.get("sentence") or "").strip()
        if not sentence:
            return None
        return cls(sentence=sentence, translation=str(doc.get("translation") or "").strip())

    def to_doc(self) -> dict[str, str]:
        return {"sentence": self.sentence, "translation": self.translation}


@dataclass(frozen=True)
class VocabularyItem:
    id: str
    sourceText: str
    targetText: str
    contextTag: str | None = None
    example: ExampleSentence | None = None

    @property
    def has_example(self) -> bool:
        return self.example is not None and bool(self.example.sentence.strip())

    def edited(self, **changes: Any) -> "VocabularyItem":
        return replace(self, **changes)

    @classmethod
    def from_doc(cls, doc: dict[str, Any]) -> "VocabularyItem":
        return cls(
            id=str(doc["id"]),
            sourceText=str(doc.get("sourceText") or ""),
            targetText=str(doc.get("targetText") or ""),
            contextTag=doc.get("contextTag") or None,
            example=ExampleSentence.from_doc(doc.get("example")),
        )

    def to_doc(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "sourceText": self.sourceText,
            "targetText": self.targetText,
            "contextTag": self.contextTag,
            "example": self.example.to_doc() if self.example else None,
        }


class ExampleIn(BaseModel):
    sentence: str = Field(min_length=1)
    translation: str = ""

    def to_example(self) -> ExampleSentence:
        return ExampleSentence(sentence=self.sentence.strip(), translation=self.translation.strip())


class VocabCreate(BaseModel):
    sourceText: str = Field(min_length=1)
    targetText: str = Field(min_length=1)
    contextTag: str | None = None
    example: ExampleIn | None = None


class VocabUpdate(BaseModel):
    sourceText: str | None = None
    targetText: str | None = None
    contextTag: str | None = None
    example: ExampleIn | None = None


class VocabOut(BaseModel):
    id: str
    sourceText: str
    targetText: str
    contextTag: str | None
    example: dict[str, str] | None
    status: str
    easiness: float
    interval: int
    repetitions: int
    nextReviewDate: datetime
    lastCorrect: bool | None
    addedFromCapture: bool


class MutationOut(BaseModel):
    applied: bool
    vocab: VocabOut | None = None


def vocab_to_out(item: VocabularyItem, record: ProgressRecord) -> VocabOut:
    return VocabOut(
        id=item.id,
        sourceText=item.sourceText,
        targetText=item.targetText,
        contextTag=item.contextTag,
        example=item.example.to_doc() if item.example else None,
        status=record.status.value,
        easiness=float(record.easiness),
        interval=int(record.interval),
        repetitions=int(record.repetitions),
        nextReviewDate=record.nextReviewDate,
        lastCorrect=record.lastCorrect,
        addedFromCapture=record.addedFromCapture,
    )
