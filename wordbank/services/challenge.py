from collections.abc import Container
from datetime import datetime

from loguru import logger

from wordbank.models.challenge import ChallengeCheckpoint, ChallengeState, ChallengeSummary


class ChallengeRun:
    """Resumable review-challenge run over a frozen, ordered working set.

    NotStarted -> InProgress -> Finished. A stored checkpoint while no run is
    active puts the run in Resumable; resuming continues from it, starting
    afresh discards it.
    """

    def __init__(self, checkpoint: ChallengeCheckpoint | None = None):
        self.checkpoint = checkpoint
        self.summary: ChallengeSummary | None = None
        self._active = False
        self._finished = False

    @property
    def state(self) -> ChallengeState:
        if self._active:
            return ChallengeState.InProgress
        if self.checkpoint is not None:
            return ChallengeState.Resumable
        if self._finished:
            return ChallengeState.Finished
        return ChallengeState.NotStarted

    @property
    def current_item_id(self) -> str | None:
        if not self._active or self.checkpoint is None:
            return None
        if self.checkpoint.currentIndex >= len(self.checkpoint.itemIds):
            return None
        return self.checkpoint.itemIds[self.checkpoint.currentIndex]

    def start(self, item_ids: list[str], now: datetime) -> ChallengeCheckpoint:
        self.checkpoint = ChallengeCheckpoint(itemIds=list(item_ids), startedAt=now)
        self.summary = None
        self._active = True
        self._finished = False
        logger.debug("Challenge started with {} items", len(item_ids))
        if not item_ids:
            self._finish()
        return self.checkpoint

    def resume(self, known_ids: Container[str]) -> bool:
        """Continue from the stored checkpoint, skipping items deleted since it was saved."""
        if self._active:
            return True
        if self.checkpoint is None:
            return False

        checkpoint = self.checkpoint
        answered = [item_id for item_id in checkpoint.itemIds[: checkpoint.currentIndex] if item_id in known_ids]
        remaining = [item_id for item_id in checkpoint.itemIds[checkpoint.currentIndex :] if item_id in known_ids]
        checkpoint.itemIds = answered + remaining
        checkpoint.currentIndex = len(answered)

        self._active = True
        self._finished = False
        logger.debug("Challenge resumed at {}/{}", checkpoint.currentIndex, len(checkpoint.itemIds))
        if not remaining:
            self._finish()
        return True

    def record_answer(self, item_id: str, correct: bool) -> bool:
        """Count an answer for the current item; returns False when it does not apply."""
        if item_id != self.current_item_id or self.checkpoint is None:
            return False

        if correct:
            self.checkpoint.correctCount += 1
        else:
            self.checkpoint.incorrectCount += 1
        self.checkpoint.currentIndex += 1

        if self.checkpoint.currentIndex >= len(self.checkpoint.itemIds):
            self._finish()
        return True

    def _finish(self) -> None:
        checkpoint = self.checkpoint
        if checkpoint is not None:
            self.summary = ChallengeSummary(
                total=len(checkpoint.itemIds),
                correctCount=checkpoint.correctCount,
                incorrectCount=checkpoint.incorrectCount,
            )
        self.checkpoint = None
        self._active = False
        self._finished = True
        logger.info(
            "Challenge finished: {}",
            f"{self.summary.correctCount}/{self.summary.total} correct" if self.summary else "empty",
        )
