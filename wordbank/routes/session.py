from fastapi import APIRouter, Depends, Query

from wordbank.config import get_settings
from wordbank.models.quiz import QuizSessionOut, quiz_item_to_out
from wordbank.models.vocab import VocabOut, vocab_to_out
from wordbank.services.registry import current_scheduler
from wordbank.services.scheduler import Scheduler

router = APIRouter(prefix="/session", tags=["session"])


def _limit_or_default(limit: int | None) -> int:
    return limit if limit is not None else get_settings().quiz_session_size


@router.get("/due", response_model=list[VocabOut])
async def due_words(
    limit: int | None = Query(default=None, ge=1, le=200),
    scheduler: Scheduler = Depends(current_scheduler),
):
    words = scheduler.get_due_words(_limit_or_default(limit))
    return [vocab_to_out(item, scheduler.get_progress(item.id)) for item in words]


@router.get("/quiz", response_model=QuizSessionOut)
async def quiz_session(
    limit: int | None = Query(default=None, ge=1, le=200),
    scheduler: Scheduler = Depends(current_scheduler),
):
    due = scheduler.get_due_words(_limit_or_default(limit))
    items = scheduler.build_quiz_session(due)
    return QuizSessionOut(items=[quiz_item_to_out(quiz_item) for quiz_item in items], empty=not items)
