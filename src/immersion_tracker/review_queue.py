"""Selection of due and new cards for a review session."""
from datetime import datetime
from typing import Iterable

from immersion_tracker.models import as_utc


def select_due(cards: Iterable, now: datetime) -> list:
    """Cards whose next review is at or before ``now``, in input order.

    Cards that were never scheduled (``next_review`` is None) are not due;
    they reach a session through :func:`select_new`.
    """
    now = as_utc(now)
    return [card for card in cards if card.next_review is not None and as_utc(card.next_review) <= now]


def select_new(cards: Iterable, limit: int) -> list:
    """The first ``limit`` cards that have never been successfully reviewed."""
    if limit <= 0:
        return []
    selected = []
    for card in cards:
        if card.repetitions == 0:
            selected.append(card)
            if len(selected) == limit:
                break
    return selected


def build_session_queue(cards: Iterable, now: datetime, new_card_limit: int) -> list:
    """Due cards first, then up to ``new_card_limit`` new cards.

    A card that is both due and new (a lapsed card waiting for its relearn)
    only appears once, among the due cards. Returns an empty list when there
    is nothing to review.
    """
    cards = list(cards)
    due = select_due(cards, now)
    due_ids = {id(card) for card in due}
    new = select_new([card for card in cards if id(card) not in due_ids], new_card_limit)
    return due + new
