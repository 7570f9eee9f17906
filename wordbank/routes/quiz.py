from fastapi import APIRouter, Depends

from wordbank.models.quiz import AnswerCreate, AnswerOut, QuizDirection
from wordbank.models.vocab import vocab_to_out
from wordbank.services.answer_judge import judge_answer
from wordbank.services.registry import current_scheduler
from wordbank.services.scheduler import Scheduler

router = APIRouter(prefix="/quiz", tags=["quiz"])


@router.post("/answer", response_model=AnswerOut)
async def submit_answer(payload: AnswerCreate, scheduler: Scheduler = Depends(current_scheduler)):
    item = scheduler.get_item(payload.itemId)

    if payload.correct is not None:
        verdict = "correct" if payload.correct else "incorrect"
    elif item is None:
        verdict = "incorrect"
    else:
        expected = item.targetText if payload.direction is QuizDirection.sourceToTarget else item.sourceText
        verdict = judge_answer(payload.answer or "", expected)

    correct = verdict != "incorrect"
    record = scheduler.submit_answer(payload.itemId, correct)
    if record is None or item is None:
        return AnswerOut(applied=False, correct=correct, result=verdict)

    return AnswerOut(
        applied=True,
        correct=correct,
        result=verdict,
        vocab=vocab_to_out(item, record).model_dump(),
    )
