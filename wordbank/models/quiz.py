from dataclasses import dataclass, field
from enum import Enum
from typing import Literal

from pydantic import BaseModel, Field, model_validator

from wordbank.models.vocab import VocabularyItem


class QuizVariant(str, Enum):
    plain = "plain"
    withExample = "withExample"


class QuizDirection(str, Enum):
    sourceToTarget = "sourceToTarget"
    targetToSource = "targetToSource"


@dataclass
class QuizItem:
    item: VocabularyItem
    variant: QuizVariant
    direction: QuizDirection = QuizDirection.sourceToTarget
    options: list[str] = field(default_factory=list)

    @property
    def prompt(self) -> str:
        if self.direction is QuizDirection.sourceToTarget:
            return self.item.sourceText
        return self.item.targetText

    @property
    def answer(self) -> str:
        if self.direction is QuizDirection.sourceToTarget:
            return self.item.targetText
        return self.item.sourceText


class QuizItemOut(BaseModel):
    itemId: str
    variant: QuizVariant
    direction: QuizDirection
    prompt: str
    answer: str
    options: list[str]
    example: dict[str, str] | None


class QuizSessionOut(BaseModel):
    items: list[QuizItemOut]
    empty: bool


class AnswerCreate(BaseModel):
    itemId: str = Field(min_length=1)
    correct: bool | None = None
    answer: str | None = None
    direction: QuizDirection | None = None

    @model_validator(mode="after")
    def _require_outcome(self) -> "AnswerCreate":
        if self.correct is None and self.answer is None:
            raise ValueError("Either 'correct' or 'answer' must be provided")
        # A typed answer is graded against the side the quiz item asked for.
        if self.correct is None and self.direction is None:
            raise ValueError("'direction' is required when grading a typed 'answer'")
        return self


class AnswerOut(BaseModel):
    applied: bool
    correct: bool
    result: Literal["correct", "near", "incorrect"]
    vocab: dict | None = None


def quiz_item_to_out(quiz_item: QuizItem) -> QuizItemOut:
    item = quiz_item.item
    show_example = quiz_item.variant is QuizVariant.withExample and item.example is not None
    return QuizItemOut(
        itemId=item.id,
        variant=quiz_item.variant,
        direction=quiz_item.direction,
        prompt=quiz_item.prompt,
        answer=quiz_item.answer,
        options=list(quiz_item.options),
        example=item.example.to_doc() if show_example else None,
    )
