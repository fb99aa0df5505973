from datetime import datetime, timezone

import pytest

from immersion_tracker.models import Flashcard

NOW = datetime(2025, 7, 15, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def tmp_db(tmp_path):
    """Provide a temporary SQLite database path for tests."""
    db_path = str(tmp_path / "test_tracker.db")
    return db_path


@pytest.fixture
def now():
    return NOW


def make_card(card_id, repetitions=0, next_review=None, ease_factor=2.5, interval=0, deck_id=1):
    return Flashcard(
        id=card_id, deck_id=deck_id, front=f"front {card_id}", back=f"back {card_id}",
        repetitions=repetitions, next_review=next_review, ease_factor=ease_factor, interval=interval,
    )
