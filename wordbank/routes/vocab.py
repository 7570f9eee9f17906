from fastapi import APIRouter, Depends, HTTPException, Query

from wordbank.models.progress import ProgressRecord
from wordbank.models.vocab import MutationOut, VocabCreate, VocabOut, VocabUpdate, vocab_to_out
from wordbank.services.registry import current_scheduler
from wordbank.services.scheduler import DEFAULT_CONTEXT_TAG, Scheduler
from wordbank.utils.normalize import normalize_term

router = APIRouter(prefix="/vocab", tags=["vocab"])


def _mutation(scheduler: Scheduler, item_id: str, record: ProgressRecord | None) -> MutationOut:
    item = scheduler.get_item(item_id)
    if record is None or item is None:
        return MutationOut(applied=False)
    return MutationOut(applied=True, vocab=vocab_to_out(item, record))


@router.get("", response_model=list[VocabOut])
async def list_vocab(
    search: str | None = None,
    status: str | None = None,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=50, ge=1, le=500),
    scheduler: Scheduler = Depends(current_scheduler),
):
    rows = scheduler.list_items()

    if search and normalize_term(search):
        needle = normalize_term(search)
        rows = [
            (item, record)
            for item, record in rows
            if needle in normalize_term(item.sourceText) or needle in normalize_term(item.targetText)
        ]
    if status:
        rows = [(item, record) for item, record in rows if record.status.value.lower() == status.strip().lower()]

    skip = (page - 1) * limit
    return [vocab_to_out(item, record) for item, record in rows[skip : skip + limit]]


@router.post("", response_model=MutationOut)
async def create_vocab(payload: VocabCreate, scheduler: Scheduler = Depends(current_scheduler)):
    if not normalize_term(payload.sourceText):
        raise HTTPException(status_code=422, detail="Source text is empty after normalization")

    item = scheduler.add_item(
        payload.sourceText,
        payload.targetText,
        example=payload.example.to_example() if payload.example else None,
        context_tag=payload.contextTag or DEFAULT_CONTEXT_TAG,
    )
    if item is None:
        return MutationOut(applied=False)
    return _mutation(scheduler, item.id, scheduler.get_progress(item.id))


@router.get("/{item_id}", response_model=VocabOut)
async def get_vocab(item_id: str, scheduler: Scheduler = Depends(current_scheduler)):
    item = scheduler.get_item(item_id)
    record = scheduler.get_progress(item_id)
    if item is None or record is None:
        raise HTTPException(status_code=404, detail="Vocab not found")
    return vocab_to_out(item, record)


@router.put("/{item_id}", response_model=MutationOut)
async def update_vocab(item_id: str, payload: VocabUpdate, scheduler: Scheduler = Depends(current_scheduler)):
    fields = payload.model_dump(exclude_unset=True)
    changes = {}
    if "contextTag" in fields:
        changes["context_tag"] = fields["contextTag"]
    if "example" in fields:
        changes["example"] = payload.example.to_example() if payload.example else None

    item = scheduler.update_item(
        item_id,
        source_text=payload.sourceText,
        target_text=payload.targetText,
        **changes,
    )
    if item is None:
        return MutationOut(applied=False)
    return _mutation(scheduler, item_id, scheduler.get_progress(item_id))


@router.delete("/{item_id}")
async def delete_vocab(item_id: str, scheduler: Scheduler = Depends(current_scheduler)):
    return {"deleted": scheduler.delete_item(item_id)}


@router.post("/{item_id}/mastered", response_model=MutationOut)
async def mark_vocab_mastered(item_id: str, scheduler: Scheduler = Depends(current_scheduler)):
    return _mutation(scheduler, item_id, scheduler.mark_mastered(item_id))


@router.post("/{item_id}/learning", response_model=MutationOut)
async def mark_vocab_learning(item_id: str, scheduler: Scheduler = Depends(current_scheduler)):
    return _mutation(scheduler, item_id, scheduler.mark_learning(item_id))
