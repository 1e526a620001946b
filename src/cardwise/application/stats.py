"""
Review statistics kept up to date from domain events.

Tallies are held in memory as a projection of the audit log. ``replay``
rebuilds them from a store at startup, and events keep them current after.
"""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime

from cardwise.application.events import EventBus
from cardwise.domain.constants import CORRECT_SCORE
from cardwise.domain.review.models import CardCreated, CardReviewed
from cardwise.domain.review.ports import CardRepository, ReviewStore

logger = logging.getLogger(__name__)


@dataclass
class ReviewTally:
    total_reviews: int = 0
    correct_reviews: int = 0
    card_count: int = 0
    study_days: set[date] = field(default_factory=set)

    @property
    def accuracy(self) -> float:
        if self.total_reviews == 0:
            return 0.0
        return self.correct_reviews / self.total_reviews

    @property
    def days_studied(self) -> int:
        return len(self.study_days)

    @property
    def last_active_date(self) -> date | None:
        return max(self.study_days, default=None)

    def record(self, score: float, occurred_at: datetime) -> None:
        self.total_reviews += 1
        if score >= CORRECT_SCORE:
            self.correct_reviews += 1
        self.study_days.add(occurred_at.date())


class ReviewStatsSubscriber:
    """
    Per-user and per-deck review tallies.

    A review counts as correct when its score is at least 0.7.
    """

    def __init__(self):
        self.users: dict[str, ReviewTally] = {}
        self.decks: dict[str, ReviewTally] = {}

    def attach(self, bus: EventBus) -> "ReviewStatsSubscriber":
        bus.subscribe(CardReviewed, self.on_card_reviewed)
        bus.subscribe(CardCreated, self.on_card_created)
        return self

    def user(self, user_id: str) -> ReviewTally:
        return self.users.setdefault(user_id, ReviewTally())

    def deck(self, deck_id: str) -> ReviewTally:
        return self.decks.setdefault(deck_id, ReviewTally())

    def user_stats(self, user_id: str) -> ReviewTally:
        """Tally for ``user_id``; all zeros for a user who never reviewed."""
        return self.users.get(user_id) or ReviewTally()

    async def replay(self, cards: CardRepository, store: ReviewStore) -> None:
        """Recompute every tally from the stored cards and their audit records."""
        self.users.clear()
        self.decks.clear()

        reviews = 0
        for card in await cards.list_cards():
            if card.deck_id:
                self.deck(card.deck_id).card_count += 1
            for record in await store.list_reviews(card.id):
                self._record(record.user_id, card.deck_id, record.score, record.created_at)
                reviews += 1

        logger.info(f"Statistics rebuilt from {reviews} reviews across {len(self.users)} users")

    async def on_card_reviewed(self, event: CardReviewed) -> None:
        self._record(event.user_id, event.deck_id, event.score, event.occurred_at)
        logger.debug(f"Statistics updated for user {event.user_id} after card {event.card_id}")

    async def on_card_created(self, event: CardCreated) -> None:
        if event.deck_id:
            self.deck(event.deck_id).card_count += 1

    def _record(self, user_id: str, deck_id: str | None, score: float, at: datetime) -> None:
        self.user(user_id).record(score, at)
        if deck_id:
            self.deck(deck_id).record(score, at)
