"""Exceptions raised by the tracker."""


class TrackerError(Exception):
    """Base class for errors the CLI reports to the user."""


class DeckNotFoundError(TrackerError):
    def __init__(self, deck_id: int):
        super().__init__(f"Deck {deck_id} not found")
        self.deck_id = deck_id


class CardNotFoundError(TrackerError):
    def __init__(self, card_id: int):
        super().__init__(f"Flashcard {card_id} not found")
        self.card_id = card_id


class NoCardsToReviewError(TrackerError):
    """The review queue came out empty, so no session can start."""


class SessionStateError(TrackerError):
    """An operation was attempted in the wrong session state."""
