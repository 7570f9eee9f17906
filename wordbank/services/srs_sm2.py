import math
from datetime import datetime
from typing import Any

from loguru import logger

from wordbank.models.progress import ProgressRecord, WordStatus
from wordbank.utils.time import add_days, parse_datetime

INITIAL_EASINESS = 2.5
MIN_EASINESS = 1.3
MAX_EASINESS = 5.0
CORRECT_ANSWER_THRESHOLD = 3
LEARNING_INTERVALS = (1, 6)
MASTERY_INTERVAL_DAYS = 60
MASTERED_OVERRIDE_DAYS = 365
LEARNING_OVERRIDE_EASINESS_PENALTY = 0.2

QUALITY_CORRECT = 5
QUALITY_INCORRECT = 1


def quality_for(correct: bool) -> int:
    return QUALITY_CORRECT if correct else QUALITY_INCORRECT


def next_easiness(easiness: float, quality: int) -> float:
    # EF' = EF + (0.1 - (5 - q) * (0.08 + (5 - q) * 0.02))
    miss = 5 - quality
    return max(MIN_EASINESS, easiness + 0.1 - miss * (0.08 + miss * 0.02))


def initial_progress(item_id: str, now: datetime, added_from_capture: bool = False) -> ProgressRecord:
    return ProgressRecord(
        itemId=item_id,
        status=WordStatus.New,
        easiness=INITIAL_EASINESS,
        interval=0,
        repetitions=0,
        nextReviewDate=now,
        lastCorrect=None,
        addedFromCapture=added_from_capture,
    )


def apply_outcome(record: ProgressRecord, correct: bool, now: datetime) -> ProgressRecord:
    """Advance a progress record after a normal quiz answer.

    Two-level quality (5 for correct, 1 for incorrect) on the SM-2 recurrence.
    The interval on success grows from the easiness held *before* this answer;
    the easiness is then recomputed in both branches.
    """
    quality = quality_for(correct)
    updated = record.copy()

    if quality >= CORRECT_ANSWER_THRESHOLD:
        updated.lastCorrect = True
        if updated.repetitions < len(LEARNING_INTERVALS):
            updated.interval = LEARNING_INTERVALS[updated.repetitions]
        else:
            updated.interval = math.ceil(updated.interval * updated.easiness)
        updated.repetitions += 1
        updated.status = WordStatus.Learning
    else:
        updated.lastCorrect = False
        updated.repetitions = 0
        updated.interval = 0
        updated.status = WordStatus.Learning

    updated.easiness = next_easiness(updated.easiness, quality)
    updated.nextReviewDate = add_days(now, updated.interval)

    if updated.interval >= MASTERY_INTERVAL_DAYS:
        updated.status = WordStatus.Mastered

    return updated


def reset_on_challenge_failure(record: ProgressRecord, now: datetime) -> ProgressRecord:
    # Easiness and status are left alone here, unlike the normal incorrect path.
    return record.copy(
        lastCorrect=False,
        repetitions=0,
        interval=0,
        nextReviewDate=now,
    )


def mark_mastered(record: ProgressRecord, now: datetime) -> ProgressRecord:
    return record.copy(
        status=WordStatus.Mastered,
        interval=MASTERED_OVERRIDE_DAYS,
        easiness=MAX_EASINESS,
        nextReviewDate=add_days(now, MASTERED_OVERRIDE_DAYS),
    )


def mark_learning(record: ProgressRecord, now: datetime) -> ProgressRecord:
    return record.copy(
        status=WordStatus.Learning,
        interval=0,
        repetitions=0,
        easiness=max(INITIAL_EASINESS, record.easiness - LEARNING_OVERRIDE_EASINESS_PENALTY),
        nextReviewDate=now,
    )


def _as_float(value: Any, default: float) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    if math.isnan(number) or math.isinf(number):
        return default
    return number


def _as_int(value: Any, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError):
        return default


def _as_status(value: Any) -> WordStatus:
    try:
        return WordStatus(value)
    except ValueError:
        return WordStatus.New


def _as_tristate(value: Any) -> bool | None:
    if value is None or isinstance(value, bool):
        return value
    return None


def normalize_record(doc: dict[str, Any], item_id: str, now: datetime) -> ProgressRecord:
    """Build a progress record from stored data, clamping anything out of range.

    A corrupted record is repaired rather than rejected so the rest of the
    catalog still loads.
    """
    easiness = _as_float(doc.get("easiness"), INITIAL_EASINESS)
    interval = _as_int(doc.get("interval"), 0)
    repetitions = _as_int(doc.get("repetitions"), 0)

    record = ProgressRecord(
        itemId=item_id,
        status=_as_status(doc.get("status")),
        easiness=max(MIN_EASINESS, easiness),
        interval=max(0, interval),
        repetitions=max(0, repetitions),
        nextReviewDate=parse_datetime(doc.get("nextReviewDate"), now),
        lastCorrect=_as_tristate(doc.get("lastCorrect")),
        addedFromCapture=bool(doc.get("addedFromCapture", doc.get("addedFromChat", False))),
    )

    repaired = [
        name
        for name, raw, fixed in (
            ("easiness", doc.get("easiness"), record.easiness),
            ("interval", doc.get("interval"), record.interval),
            ("repetitions", doc.get("repetitions"), record.repetitions),
            ("status", doc.get("status"), record.status.value),
        )
        if raw != fixed
    ]
    if repaired:
        logger.warning("Normalized progress record {} (fields: {})", item_id, ", ".join(repaired))
    return record
