from fastapi import APIRouter, Depends

from wordbank.models.challenge import ChallengeAnswerCreate, ChallengeStatusOut, ChallengeSummaryOut
from wordbank.models.quiz import QuizDirection
from wordbank.models.vocab import MutationOut, VocabOut, vocab_to_out
from wordbank.services.registry import current_scheduler
from wordbank.services.scheduler import Scheduler
from wordbank.services.session import OPTION_COUNT, build_options

router = APIRouter(prefix="/challenge", tags=["challenge"])


def _status(scheduler: Scheduler) -> ChallengeStatusOut:
    run = scheduler.challenge
    checkpoint = run.checkpoint
    summary = run.summary
    out = ChallengeStatusOut(
        state=run.state,
        currentItemId=run.current_item_id,
        currentIndex=checkpoint.currentIndex if checkpoint else 0,
        total=len(checkpoint.itemIds) if checkpoint else 0,
        correctCount=checkpoint.correctCount if checkpoint else 0,
        incorrectCount=checkpoint.incorrectCount if checkpoint else 0,
        summary=(
            ChallengeSummaryOut(
                total=summary.total,
                correctCount=summary.correctCount,
                incorrectCount=summary.incorrectCount,
                accuracy=summary.accuracy,
            )
            if summary
            else None
        ),
    )

    # Four-way choice needs a working set of at least four words.
    current = scheduler.get_item(run.current_item_id) if run.current_item_id else None
    if current is not None and out.total >= OPTION_COUNT:
        out.options = build_options(current, QuizDirection.targetToSource, list(scheduler.words), scheduler.rng)
    return out


@router.get("/set", response_model=list[VocabOut])
async def challenge_set(scheduler: Scheduler = Depends(current_scheduler)):
    return [vocab_to_out(item, scheduler.get_progress(item.id)) for item in scheduler.get_challenge_set()]


@router.get("", response_model=ChallengeStatusOut)
async def challenge_status(scheduler: Scheduler = Depends(current_scheduler)):
    return _status(scheduler)


@router.post("/start", response_model=ChallengeStatusOut)
async def start_challenge(scheduler: Scheduler = Depends(current_scheduler)):
    scheduler.start_challenge()
    return _status(scheduler)


@router.post("/resume", response_model=ChallengeStatusOut)
async def resume_challenge(scheduler: Scheduler = Depends(current_scheduler)):
    scheduler.resume_challenge()
    return _status(scheduler)


@router.post("/answer", response_model=ChallengeStatusOut)
async def answer_challenge(payload: ChallengeAnswerCreate, scheduler: Scheduler = Depends(current_scheduler)):
    scheduler.answer_challenge(payload.itemId, payload.correct)
    return _status(scheduler)


@router.post("/{item_id}/reset", response_model=MutationOut)
async def reset_after_failure(item_id: str, scheduler: Scheduler = Depends(current_scheduler)):
    record = scheduler.reset_on_challenge_failure(item_id)
    item = scheduler.get_item(item_id)
    if record is None or item is None:
        return MutationOut(applied=False)
    return MutationOut(applied=True, vocab=vocab_to_out(item, record))
