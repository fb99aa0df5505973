"""Review session state: Idle -> InProgress -> Complete."""
import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional

from immersion_tracker.config import DEFAULT_NEW_CARD_LIMIT
from immersion_tracker.errors import NoCardsToReviewError, SessionStateError
from immersion_tracker.models import Difficulty, as_utc
from immersion_tracker.review_queue import build_session_queue
from immersion_tracker.scheduler import DEFAULT_CONFIG, SchedulerConfig, compute_next_review

logger = logging.getLogger(__name__)


class SessionState(Enum):
    IDLE = "idle"
    IN_PROGRESS = "in_progress"
    COMPLETE = "complete"


@dataclass
class SessionStats:
    started_at: Optional[datetime] = None
    reviewed: int = 0
    correct: int = 0

    @property
    def accuracy(self) -> int:
        """Percentage of good/easy answers, 0 before any answer."""
        if self.reviewed == 0:
            return 0
        return round(self.correct / self.reviewed * 100)

    def elapsed_minutes(self, now: datetime) -> int:
        if self.started_at is None:
            return 0
        return round((as_utc(now) - self.started_at).total_seconds() / 60)


@dataclass
class ReviewSession:
    """Walks a fixed queue of cards, scheduling each answer.

    The queue is built once by :meth:`start`; answers produce scheduling
    updates for the caller to persist but never reorder or refill the queue.
    """

    cards: list
    new_card_limit: int = DEFAULT_NEW_CARD_LIMIT
    config: SchedulerConfig = DEFAULT_CONFIG
    state: SessionState = SessionState.IDLE
    queue: list = field(default_factory=list)
    position: int = 0
    stats: SessionStats = field(default_factory=SessionStats)

    def start(self, now: datetime) -> list:
        if self.state is not SessionState.IDLE:
            raise SessionStateError(f"Cannot start a session that is {self.state.value}")
        now = as_utc(now)
        queue = build_session_queue(self.cards, now, self.new_card_limit)
        if not queue:
            raise NoCardsToReviewError("No cards available for review")
        self.queue = queue
        self.position = 0
        self.stats = SessionStats(started_at=now)
        self.state = SessionState.IN_PROGRESS
        logger.info("Started review session with %d cards", len(queue))
        return list(queue)

    @property
    def total(self) -> int:
        return len(self.queue)

    @property
    def remaining(self) -> int:
        return len(self.queue) - self.position

    @property
    def current(self):
        if self.state is not SessionState.IN_PROGRESS:
            return None
        return self.queue[self.position]

    def answer(self, difficulty: Difficulty | str, now: datetime) -> tuple:
        """Schedule the current card and move to the next one.

        Returns:
            (card, delta) where delta holds the fields to persist.
        """
        if self.state is not SessionState.IN_PROGRESS:
            raise SessionStateError(f"Cannot answer in a session that is {self.state.value}")
        difficulty = Difficulty(difficulty)
        card = self.queue[self.position]
        delta = compute_next_review(card, difficulty, now, self.config)
        self.position += 1
        self.stats.reviewed += 1
        if difficulty.is_correct:
            self.stats.correct += 1
        if self.position == len(self.queue):
            self.state = SessionState.COMPLETE
            logger.info(
                "Completed review session: %d reviewed, %d%% correct",
                self.stats.reviewed, self.stats.accuracy,
            )
        return card, delta
