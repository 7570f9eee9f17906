import random
import uuid
from collections.abc import Callable
from datetime import datetime
from typing import Any

from loguru import logger

from wordbank.models.challenge import ChallengeCheckpoint, ChallengeState, ChallengeSummary
from wordbank.models.progress import ProgressRecord, WordStatus
from wordbank.models.quiz import QuizItem
from wordbank.models.vocab import ExampleSentence, VocabularyItem
from wordbank.seed import seed_starter_words
from wordbank.services import session as session_rules
from wordbank.services import srs_sm2
from wordbank.services.challenge import ChallengeRun
from wordbank.services.persistence import CatalogSnapshot, PersistenceAdapter
from wordbank.services.stores import ProgressStore, WordStore
from wordbank.services.write_queue import WriteBehindQueue
from wordbank.utils.time import now_local

DEFAULT_CONTEXT_TAG = "seen in chat"

_UNSET: Any = object()


class Scheduler:
    """Owns one learner's catalog and progress and exposes the review operations.

    Every operation updates the in-memory stores first and then hands the
    durable write to the write-behind queue without waiting for it. Operations
    on unknown item ids do nothing.
    """

    def __init__(
        self,
        user_id: str,
        words: WordStore | None = None,
        progress: ProgressStore | None = None,
        adapter: PersistenceAdapter | None = None,
        rng: random.Random | None = None,
        clock: Callable[[], datetime] = now_local,
        challenge: ChallengeRun | None = None,
    ):
        self.user_id = user_id
        self.words = words if words is not None else WordStore()
        self.progress = progress if progress is not None else ProgressStore()
        self.adapter = adapter
        self.rng = rng or random.Random()
        self.clock = clock
        self.challenge = challenge if challenge is not None else ChallengeRun()
        self.writes = WriteBehindQueue(label=f"user:{user_id}")

    @classmethod
    async def load(
        cls,
        user_id: str,
        adapter: PersistenceAdapter,
        rng: random.Random | None = None,
        clock: Callable[[], datetime] = now_local,
        seed_starter: bool = True,
    ) -> "Scheduler":
        snapshot = await adapter.load_catalog_and_progress(user_id)
        checkpoint_doc = await adapter.load_checkpoint(user_id)
        now = clock()

        scheduler = cls(user_id=user_id, adapter=adapter, rng=rng, clock=clock)
        repaired = scheduler.hydrate(snapshot, now)
        # Starter words go in once per learner; later deletions and edits stick.
        seed_now = seed_starter and not snapshot.starterSeeded
        if seed_now and not len(scheduler.words):
            repaired.extend(seed_starter_words(scheduler.words, scheduler.progress, now))
        for item_id in dict.fromkeys(repaired):
            scheduler._persist_item(item_id)
        if seed_now:
            scheduler.writes.enqueue("mark starter seeded", lambda: adapter.mark_starter_seeded(user_id))

        if checkpoint_doc:
            scheduler.challenge = ChallengeRun(ChallengeCheckpoint.from_doc(checkpoint_doc, now))

        logger.info(
            "Loaded {} items for user {} (challenge: {})",
            len(scheduler.words),
            user_id,
            scheduler.challenge.state.value,
        )
        return scheduler

    def hydrate(self, snapshot: CatalogSnapshot, now: datetime) -> list[str]:
        """Fill the stores from stored documents; returns ids that were repaired."""
        repaired: list[str] = []
        for doc in snapshot.items:
            try:
                item = VocabularyItem.from_doc(doc)
            except KeyError:
                logger.warning("Skipping stored item without id: {}", doc)
                continue
            self.words.put(item)

        for doc in snapshot.progress:
            item_id = str(doc.get("itemId") or doc.get("wordId") or "")
            if item_id not in self.words:
                logger.warning("Dropping progress without a catalog item: {}", item_id or "<blank>")
                continue
            self.progress.put(srs_sm2.normalize_record(doc, item_id, now))

        for item in self.words:
            if item.id not in self.progress:
                logger.warning("Item {} had no progress record, starting it as New", item.id)
                self.progress.put(srs_sm2.initial_progress(item.id, now))
                repaired.append(item.id)
        return repaired

    # -- reads ---------------------------------------------------------------

    def get_item(self, item_id: str) -> VocabularyItem | None:
        return self.words.get(item_id)

    def get_progress(self, item_id: str) -> ProgressRecord | None:
        return self.progress.get(item_id)

    def list_items(self) -> list[tuple[VocabularyItem, ProgressRecord]]:
        return [(item, self.progress.get(item.id)) for item in self.words if item.id in self.progress]

    def get_due_words(self, limit: int) -> list[VocabularyItem]:
        return session_rules.select_due(self.words.by_id, self.progress, limit, self.clock(), self.rng)

    def build_quiz_session(self, due_words: list[VocabularyItem]) -> list[QuizItem]:
        return session_rules.build_session(due_words, self.rng, catalog=list(self.words))

    def get_stats(self) -> dict[str, int]:
        counts = self.progress.count_by_status()
        return {
            "newCount": counts[WordStatus.New],
            "learningCount": counts[WordStatus.Learning],
            "masteredCount": counts[WordStatus.Mastered],
        }

    def get_challenge_set(self) -> list[VocabularyItem]:
        return session_rules.select_challenge_set(self.words.by_id, self.progress, self.rng)

    # -- progress mutations --------------------------------------------------

    def submit_answer(self, item_id: str, correct: bool) -> ProgressRecord | None:
        return self._update_progress(item_id, lambda record, now: srs_sm2.apply_outcome(record, correct, now))

    def reset_on_challenge_failure(self, item_id: str) -> ProgressRecord | None:
        return self._update_progress(item_id, srs_sm2.reset_on_challenge_failure)

    def mark_mastered(self, item_id: str) -> ProgressRecord | None:
        return self._update_progress(item_id, srs_sm2.mark_mastered)

    def mark_learning(self, item_id: str) -> ProgressRecord | None:
        return self._update_progress(item_id, srs_sm2.mark_learning)

    def _update_progress(
        self,
        item_id: str,
        transform: Callable[[ProgressRecord, datetime], ProgressRecord],
    ) -> ProgressRecord | None:
        record = self.progress.get(item_id)
        if record is None or item_id not in self.words:
            logger.debug("Ignoring progress update for unknown item {}", item_id)
            return None
        updated = transform(record, self.clock())
        self.progress.put(updated)
        self._persist_item(item_id)
        return updated

    # -- catalog mutations ---------------------------------------------------

    def add_item(
        self,
        source_text: str,
        target_text: str,
        example: ExampleSentence | None = None,
        context_tag: str | None = DEFAULT_CONTEXT_TAG,
    ) -> VocabularyItem | None:
        if self.words.find_by_source_text(source_text) is not None:
            return None

        item = VocabularyItem(
            id=f"word_{uuid.uuid4().hex}",
            sourceText=source_text.strip(),
            targetText=target_text.strip(),
            contextTag=context_tag,
            example=example,
        )
        self.words.put(item)
        self.progress.put(srs_sm2.initial_progress(item.id, self.clock(), added_from_capture=True))
        self._persist_item(item.id)
        logger.debug("Added item {} ({})", item.id, item.sourceText)
        return item

    def update_item(
        self,
        item_id: str,
        source_text: str | None = None,
        target_text: str | None = None,
        context_tag: Any = _UNSET,
        example: Any = _UNSET,
    ) -> VocabularyItem | None:
        item = self.words.get(item_id)
        if item is None:
            return None

        changes: dict[str, Any] = {}
        if source_text is not None and source_text.strip():
            changes["sourceText"] = source_text.strip()
        if target_text is not None and target_text.strip():
            changes["targetText"] = target_text.strip()
        if context_tag is not _UNSET:
            changes["contextTag"] = context_tag
        if example is not _UNSET:
            changes["example"] = example
        if not changes:
            return item

        updated = item.edited(**changes)
        self.words.put(updated)
        self._persist_item(item_id)
        return updated

    def delete_item(self, item_id: str) -> bool:
        if item_id not in self.words and item_id not in self.progress:
            return False
        self.words.remove(item_id)
        self.progress.remove(item_id)
        if self.adapter is not None:
            adapter = self.adapter
            self.writes.enqueue(f"delete {item_id}", lambda: adapter.delete_item(self.user_id, item_id))
        return True

    # -- review challenge ----------------------------------------------------

    def start_challenge(self) -> ChallengeRun:
        item_ids = [item.id for item in self.get_challenge_set()]
        self.challenge.start(item_ids, self.clock())
        self._persist_challenge()
        return self.challenge

    def resume_challenge(self) -> ChallengeRun:
        if self.challenge.resume(self.words):
            self._persist_challenge()
        return self.challenge

    def answer_challenge(self, item_id: str, correct: bool) -> bool:
        if not self.challenge.record_answer(item_id, correct):
            return False
        if not correct:
            self.reset_on_challenge_failure(item_id)
        self._persist_challenge()
        return True

    @property
    def challenge_summary(self) -> ChallengeSummary | None:
        return self.challenge.summary

    # -- durability ----------------------------------------------------------

    def _persist_item(self, item_id: str) -> None:
        if self.adapter is None:
            return
        item = self.words.get(item_id)
        record = self.progress.get(item_id)
        if item is None or record is None:
            return
        snapshot_record = record.copy()
        adapter = self.adapter
        self.writes.enqueue(
            f"save {item_id}",
            lambda: adapter.save_item(self.user_id, item, snapshot_record),
        )

    def _persist_challenge(self) -> None:
        if self.adapter is None:
            return
        adapter = self.adapter
        if self.challenge.state is ChallengeState.InProgress and self.challenge.checkpoint is not None:
            doc = self.challenge.checkpoint.to_doc()
            self.writes.enqueue("save challenge checkpoint", lambda: adapter.save_checkpoint(self.user_id, doc))
        elif self.challenge.state is ChallengeState.Finished:
            self.writes.enqueue("clear challenge checkpoint", lambda: adapter.clear_checkpoint(self.user_id))

    async def flush(self) -> None:
        await self.writes.flush()