"""Data classes for decks and flashcards."""
import sqlite3
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


class Difficulty(str, Enum):
    """How hard the learner found a card when answering it."""

    AGAIN = "again"
    HARD = "hard"
    GOOD = "good"
    EASY = "easy"

    @property
    def is_correct(self) -> bool:
        return self in (Difficulty.GOOD, Difficulty.EASY)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Return an aware datetime; naive values are taken as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def to_timestamp(value: datetime) -> str:
    """Serialize a datetime for storage as ISO-8601 in UTC."""
    return as_utc(value).astimezone(timezone.utc).isoformat()


def from_timestamp(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    return as_utc(datetime.fromisoformat(value))


@dataclass
class Deck:
    id: int
    name: str
    description: str = ""
    card_count: int = 0
    created_at: Optional[datetime] = None

    @classmethod
    def from_row(cls, row: sqlite3.Row) -> "Deck":
        return cls(
            id=row["id"],
            name=row["name"],
            description=row["description"] or "",
            card_count=row["card_count"],
            created_at=from_timestamp(row["created_at"]),
        )


@dataclass
class Flashcard:
    id: int
    deck_id: int
    front: str
    back: str
    context: str = ""
    video_title: str = ""
    created_at: Optional[datetime] = None
    last_reviewed: Optional[datetime] = None
    next_review: Optional[datetime] = None
    ease_factor: float = 2.5
    interval: int = 0
    repetitions: int = 0
    difficulty: Difficulty = Difficulty.GOOD

    @property
    def is_new(self) -> bool:
        return self.repetitions == 0

    @classmethod
    def from_row(cls, row: sqlite3.Row) -> "Flashcard":
        return cls(
            id=row["id"],
            deck_id=row["deck_id"],
            front=row["front"],
            back=row["back"],
            context=row["context"] or "",
            video_title=row["video_title"] or "",
            created_at=from_timestamp(row["created_at"]),
            last_reviewed=from_timestamp(row["last_reviewed"]),
            next_review=from_timestamp(row["next_review"]),
            ease_factor=row["ease_factor"],
            interval=row["interval"],
            repetitions=row["repetitions"],
            difficulty=Difficulty(row["difficulty"]),
        )
