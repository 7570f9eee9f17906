import random
from collections.abc import Iterable, Mapping, Sequence
from datetime import datetime

from wordbank.models.progress import ProgressRecord, WordStatus
from wordbank.models.quiz import QuizDirection, QuizItem, QuizVariant
from wordbank.models.vocab import VocabularyItem

OPTION_COUNT = 4


def shuffled(items: Iterable[VocabularyItem], rng: random.Random) -> list[VocabularyItem]:
    out = list(items)
    rng.shuffle(out)
    return out


def select_due(
    items: Mapping[str, VocabularyItem],
    progress: Iterable[ProgressRecord],
    limit: int,
    now: datetime,
    rng: random.Random,
) -> list[VocabularyItem]:
    """Pick the ``limit`` longest-overdue items, returned in random order.

    Due-date order decides which items make the cut; the learner sees them
    shuffled.
    """
    if limit <= 0:
        return []

    due = sorted(
        (record for record in progress if record.itemId in items and record.is_due(now)),
        key=lambda record: record.nextReviewDate,
    )
    return shuffled((items[record.itemId] for record in due[:limit]), rng)


def select_challenge_set(
    items: Mapping[str, VocabularyItem],
    progress: Iterable[ProgressRecord],
    rng: random.Random,
) -> list[VocabularyItem]:
    learning = [
        items[record.itemId]
        for record in progress
        if record.status is WordStatus.Learning and record.itemId in items
    ]
    return shuffled(learning, rng)


def _answer_text(item: VocabularyItem, direction: QuizDirection) -> str:
    if direction is QuizDirection.sourceToTarget:
        return item.targetText
    return item.sourceText


def build_options(
    item: VocabularyItem,
    direction: QuizDirection,
    catalog: Iterable[VocabularyItem],
    rng: random.Random,
    count: int = OPTION_COUNT,
) -> list[str]:
    correct = _answer_text(item, direction)
    seen = {correct}
    pool: list[str] = []
    for other in catalog:
        if other.id == item.id:
            continue
        text = _answer_text(other, direction)
        if text and text not in seen:
            seen.add(text)
            pool.append(text)

    rng.shuffle(pool)
    options = [correct, *pool[: max(0, count - 1)]]
    rng.shuffle(options)
    return options


def _new_quiz_item(
    item: VocabularyItem,
    variant: QuizVariant,
    catalog: Sequence[VocabularyItem],
    rng: random.Random,
) -> QuizItem:
    direction = rng.choice((QuizDirection.sourceToTarget, QuizDirection.targetToSource))
    return QuizItem(
        item=item,
        variant=variant,
        direction=direction,
        options=build_options(item, direction, catalog, rng),
    )


def build_session(
    due_items: Sequence[VocabularyItem],
    rng: random.Random,
    catalog: Sequence[VocabularyItem] | None = None,
) -> list[QuizItem]:
    """Compose an ordered quiz session from due items.

    Items with an example sentence appear twice: the example-augmented
    question lands at a random position and the plain one somewhere after it.
    Items without an example appear once at a random position.
    """
    distractor_pool = list(catalog) if catalog is not None else list(due_items)
    session: list[QuizItem] = []

    for item in due_items:
        if item.has_example:
            example_index = rng.randint(0, len(session))
            session.insert(example_index, _new_quiz_item(item, QuizVariant.withExample, distractor_pool, rng))
            plain_index = rng.randint(example_index + 1, len(session))
            session.insert(plain_index, _new_quiz_item(item, QuizVariant.plain, distractor_pool, rng))
        else:
            index = rng.randint(0, len(session))
            session.insert(index, _new_quiz_item(item, QuizVariant.plain, distractor_pool, rng))

    return session
