"""Deck and flashcard storage, and persisting review results."""
import logging
from datetime import datetime
from typing import Optional

from immersion_tracker.db import get_connection
from immersion_tracker.errors import CardNotFoundError, DeckNotFoundError
from immersion_tracker.models import Deck, Difficulty, Flashcard, to_timestamp, utc_now
from immersion_tracker.review_queue import select_due, select_new
from immersion_tracker.scheduler import DEFAULT_CONFIG, compute_next_review

logger = logging.getLogger(__name__)


# --- Decks ---


def create_deck(db_path: str, name: str, description: str = "") -> int:
    name = name.strip()
    if not name:
        raise ValueError("Deck name must not be empty")
    conn = get_connection(db_path)
    cursor = conn.execute(
        "INSERT INTO decks (name, description, created_at) VALUES (?, ?, ?)",
        (name, description, to_timestamp(utc_now())),
    )
    conn.commit()
    conn.close()
    logger.info("Created deck %s (%s)", cursor.lastrowid, name)
    return cursor.lastrowid


def get_decks(db_path: str) -> list[Deck]:
    conn = get_connection(db_path)
    rows = conn.execute("SELECT * FROM decks ORDER BY id").fetchall()
    conn.close()
    return [Deck.from_row(r) for r in rows]


def get_deck(db_path: str, deck_id: int) -> Deck:
    conn = get_connection(db_path)
    row = conn.execute("SELECT * FROM decks WHERE id = ?", (deck_id,)).fetchone()
    conn.close()
    if row is None:
        raise DeckNotFoundError(deck_id)
    return Deck.from_row(row)


def update_deck(db_path: str, deck_id: int, name: Optional[str] = None,
                description: Optional[str] = None) -> Deck:
    deck = get_deck(db_path, deck_id)
    if name is not None:
        if not name.strip():
            raise ValueError("Deck name must not be empty")
        deck.name = name.strip()
    if description is not None:
        deck.description = description
    conn = get_connection(db_path)
    conn.execute(
        "UPDATE decks SET name = ?, description = ? WHERE id = ?",
        (deck.name, deck.description, deck_id),
    )
    conn.commit()
    conn.close()
    return deck


def delete_deck(db_path: str, deck_id: int) -> None:
    """Delete a deck together with its cards and their review history."""
    get_deck(db_path, deck_id)
    conn = get_connection(db_path)
    conn.execute("DELETE FROM decks WHERE id = ?", (deck_id,))
    conn.commit()
    conn.close()
    logger.info("Deleted deck %s", deck_id)


# --- Cards ---


def add_flashcard(db_path: str, deck_id: int, front: str, back: str,
                  context: str = "", video_title: str = "") -> int:
    """Add a card in its initial, never-reviewed state."""
    if not front.strip() or not back.strip():
        raise ValueError("Card front and back must not be empty")
    get_deck(db_path, deck_id)
    conn = get_connection(db_path)
    cursor = conn.execute(
        """INSERT INTO flashcards
        (deck_id, front, back, context, video_title, created_at, ease_factor, interval, repetitions, difficulty)
        VALUES (?, ?, ?, ?, ?, ?, ?, 0, 0, 'good')""",
        (deck_id, front.strip(), back.strip(), context, video_title,
         to_timestamp(utc_now()), DEFAULT_CONFIG.initial_ease_factor),
    )
    conn.execute("UPDATE decks SET card_count = card_count + 1 WHERE id = ?", (deck_id,))
    conn.commit()
    conn.close()
    return cursor.lastrowid


def get_flashcard(db_path: str, card_id: int) -> Flashcard:
    conn = get_connection(db_path)
    row = conn.execute("SELECT * FROM flashcards WHERE id = ?", (card_id,)).fetchone()
    conn.close()
    if row is None:
        raise CardNotFoundError(card_id)
    return Flashcard.from_row(row)


def get_deck_cards(db_path: str, deck_id: int) -> list[Flashcard]:
    conn = get_connection(db_path)
    rows = conn.execute(
        "SELECT * FROM flashcards WHERE deck_id = ? ORDER BY id", (deck_id,)
    ).fetchall()
    conn.close()
    return [Flashcard.from_row(r) for r in rows]


def update_flashcard_content(db_path: str, card_id: int, front: Optional[str] = None,
                             back: Optional[str] = None, context: Optional[str] = None) -> Flashcard:
    """Edit a card's text. Scheduling fields only change through reviews."""
    card = get_flashcard(db_path, card_id)
    if front is not None:
        card.front = front.strip()
    if back is not None:
        card.back = back.strip()
    if context is not None:
        card.context = context
    if not card.front or not card.back:
        raise ValueError("Card front and back must not be empty")
    conn = get_connection(db_path)
    conn.execute(
        "UPDATE flashcards SET front = ?, back = ?, context = ? WHERE id = ?",
        (card.front, card.back, card.context, card_id),
    )
    conn.commit()
    conn.close()
    return card


def delete_flashcard(db_path: str, card_id: int) -> None:
    card = get_flashcard(db_path, card_id)
    conn = get_connection(db_path)
    conn.execute("DELETE FROM flashcards WHERE id = ?", (card_id,))
    conn.execute(
        "UPDATE decks SET card_count = MAX(card_count - 1, 0) WHERE id = ?", (card.deck_id,)
    )
    conn.commit()
    conn.close()


# --- Reviews ---


def apply_review(db_path: str, card_id: int, delta: dict) -> None:
    """Write a scheduling update and log the answer."""
    conn = get_connection(db_path)
    cursor = conn.execute(
        """UPDATE flashcards SET ease_factor=?, interval=?, repetitions=?, difficulty=?,
        last_reviewed=?, next_review=?
        WHERE id=?""",
        (
            delta["ease_factor"], delta["interval"], delta["repetitions"],
            Difficulty(delta["difficulty"]).value,
            to_timestamp(delta["last_reviewed"]), to_timestamp(delta["next_review"]),
            card_id,
        ),
    )
    if cursor.rowcount == 0:
        conn.close()
        raise CardNotFoundError(card_id)
    conn.execute(
        """INSERT INTO review_log (flashcard_id, difficulty, interval, ease_factor, reviewed_at)
        VALUES (?, ?, ?, ?, ?)""",
        (card_id, Difficulty(delta["difficulty"]).value, delta["interval"],
         delta["ease_factor"], to_timestamp(delta["last_reviewed"])),
    )
    conn.commit()
    conn.close()
    logger.info(
        "Card %s answered %s, next review in %s days",
        card_id, Difficulty(delta["difficulty"]).value, delta["interval"],
    )


def record_review(db_path: str, card_id: int, difficulty: Difficulty | str,
                  now: Optional[datetime] = None) -> dict:
    """Schedule a card from its stored state and persist the result."""
    card = get_flashcard(db_path, card_id)
    delta = compute_next_review(card, difficulty, now or utc_now())
    apply_review(db_path, card_id, delta)
    return delta


def get_review_count(db_path: str, card_id: Optional[int] = None) -> int:
    conn = get_connection(db_path)
    if card_id is None:
        count = conn.execute("SELECT COUNT(*) FROM review_log").fetchone()[0]
    else:
        count = conn.execute(
            "SELECT COUNT(*) FROM review_log WHERE flashcard_id = ?", (card_id,)
        ).fetchone()[0]
    conn.close()
    return count


def get_deck_summary(db_path: str, deck_id: int, now: Optional[datetime] = None) -> dict:
    """Total, due and new card counts for a deck."""
    cards = get_deck_cards(db_path, deck_id)
    now = now or utc_now()
    return {
        "total": len(cards),
        "due": len(select_due(cards, now)),
        "new": len(select_new(cards, len(cards))),
    }
