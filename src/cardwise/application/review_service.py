"""
Review Service: Application layer orchestrator.

load card -> validate answer -> translate score -> schedule -> commit -> notify.
"""

import logging
from collections.abc import Callable
from datetime import datetime

from ulid import ULID

from cardwise.application.rating import score_to_rating
from cardwise.application.validation.cascade import ValidationCascade
from cardwise.domain.constants import DEFAULT_MAX_CONFLICT_RETRIES
from cardwise.domain.errors import NotFound, PersistenceConflict
from cardwise.domain.review.models import (
    Card,
    CardReviewed,
    ReviewAuditRecord,
    ReviewOutcome,
    utcnow,
)
from cardwise.domain.review.ports import CardRepository, EventPublisher, ReviewStore
from cardwise.domain.scheduling.machine import transition

logger = logging.getLogger(__name__)


def generate_review_id() -> str:
    """Time-sortable audit record id."""
    return f"rev_{ULID()}"


class ReviewService:
    """
    Application service for reviewing a card with a free-text answer.

    Follows Dependency Inversion: depends on the repository, store and
    publisher ports, never on concrete adapters.

    Concurrent reviews of the same card are serialized optimistically: the
    commit carries the version stamp seen at load time and a conflicting
    commit is retried on a freshly loaded card. Reviews of different cards
    never wait on each other.
    """

    def __init__(
        self,
        cards: CardRepository,
        store: ReviewStore,
        validator: ValidationCascade,
        publisher: EventPublisher | None = None,
        max_conflict_retries: int = DEFAULT_MAX_CONFLICT_RETRIES,
        clock: Callable[[], datetime] = utcnow,
    ):
        self._cards = cards
        self._store = store
        self._validator = validator
        self._publisher = publisher
        self._max_retries = max_conflict_retries
        self._clock = clock

    async def review(self, card_id: str, user_id: str, submitted_answer: str) -> ReviewOutcome:
        """
        Review a card.

        Args:
            card_id: Card being reviewed.
            user_id: Reviewer, recorded on the audit record.
            submitted_answer: Free-text answer typed by the learner.

        Returns:
            ReviewOutcome with score, method, rating and the next interval.

        Raises:
            NotFound: The card does not exist. Nothing is written or published.
            ValidatorUnavailable: A scoring tier failed under the cascade policy.
            PersistenceConflict: Still conflicting after the retry budget.
            SerializationError: The stored state could not be read or written.
        """
        card = await self._load(card_id)

        outcome = await self._validator.validate(
            expected=card.answer,
            submitted=submitted_answer,
            question=card.question,
            expected_embedding=card.answer_embedding,
        )
        rating = score_to_rating(outcome.score)

        conflicts = 0
        while True:
            now = self._clock()
            new_state = transition(card.state, rating, now=now)
            record = ReviewAuditRecord(
                id=generate_review_id(),
                card_id=card.id,
                user_id=user_id,
                user_answer=submitted_answer,
                expected_answer=card.answer,
                score=outcome.score,
                method=outcome.method,
                rating=rating,
                created_at=now,
            )
            try:
                await self._store.commit_review(card.id, card.version, new_state, record)
                break
            except PersistenceConflict:
                conflicts += 1
                if conflicts > self._max_retries:
                    logger.error(f"Giving up on card {card_id} after {conflicts} conflicts")
                    raise
                logger.info(f"Version conflict on card {card_id}, retrying ({conflicts})")
                card = await self._load(card_id)

        logger.info(
            f"Reviewed card {card_id}: score={outcome.score:.2f} method={outcome.method.value} "
            f"rating={rating.name} next_in={new_state.scheduled_days}d"
        )

        await self._notify(
            CardReviewed(
                card_id=card.id,
                user_id=user_id,
                score=outcome.score,
                rating=rating,
                deck_id=card.deck_id,
                occurred_at=now,
            )
        )

        return ReviewOutcome(
            card_id=card.id,
            score=outcome.score,
            method=outcome.method,
            rating=rating,
            scheduled_days=new_state.scheduled_days,
            state=new_state,
            audit_id=record.id,
        )

    async def history(self, card_id: str) -> list[ReviewAuditRecord]:
        """Audit records for an existing card, oldest first."""
        await self._load(card_id)
        return await self._store.list_reviews(card_id)

    async def _load(self, card_id: str) -> Card:
        card = await self._cards.find_card(card_id)
        if card is None:
            raise NotFound(card_id)
        return card

    async def _notify(self, event: CardReviewed) -> None:
        if self._publisher is None:
            return
        try:
            await self._publisher.publish(event)
        except Exception as e:
            # The review is already committed; notification is best-effort.
            logger.warning(f"Failed to publish {type(event).__name__}: {e}", exc_info=True)
