"""
In-memory store: process-local adapter for cards and review logs.

Implements CardRepository and ReviewStore. Used by the default server and in
tests. Not shared between processes.
"""

import logging
from collections import defaultdict
from dataclasses import replace

from cardwise.domain.errors import NotFound, PersistenceConflict
from cardwise.domain.review.models import Card, ReviewAuditRecord, utcnow
from cardwise.domain.review.ports import CardRepository, ReviewStore
from cardwise.domain.scheduling.models import SchedulingState

logger = logging.getLogger(__name__)


class InMemoryReviewStore(CardRepository, ReviewStore):
    """
    Cards and audit logs held in dictionaries.

    ``commit_review`` never suspends between the version check and the
    writes, so on a single event loop it is atomic without a lock.
    """

    def __init__(self):
        self._cards: dict[str, Card] = {}
        self._reviews: dict[str, list[ReviewAuditRecord]] = defaultdict(list)

    async def find_card(self, card_id: str) -> Card | None:
        card = self._cards.get(card_id)
        return replace(card) if card else None

    async def add_card(self, card: Card) -> str:
        self._cards[card.id] = replace(card, version=0)
        return card.id

    async def list_cards(self) -> list[Card]:
        return sorted((replace(c) for c in self._cards.values()), key=lambda c: c.created_at)

    async def commit_review(
        self,
        card_id: str,
        expected_version: int,
        state: SchedulingState,
        record: ReviewAuditRecord,
    ) -> int:
        current = self._cards.get(card_id)
        if current is None:
            raise NotFound(card_id)
        if current.version != expected_version:
            raise PersistenceConflict(card_id, expected_version, current.version)

        new_version = current.version + 1
        self._cards[card_id] = replace(
            current, state=state, version=new_version, updated_at=utcnow()
        )
        self._reviews[card_id].append(record)
        logger.debug(f"Committed review {record.id} on card {card_id} (v{new_version})")
        return new_version

    async def list_reviews(self, card_id: str) -> list[ReviewAuditRecord]:
        return list(self._reviews.get(card_id, []))

    def close(self) -> None:
        """Nothing to release; present so callers can treat stores uniformly."""
