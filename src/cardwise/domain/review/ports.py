"""
Ports (interfaces) for the review core.

These define the contract that infrastructure adapters must implement.
Application services depend on these abstractions, not concrete implementations.
"""

from abc import ABC, abstractmethod
from typing import Any

from cardwise.domain.scheduling.models import SchedulingState

from .models import Card, ReviewAuditRecord, ValidationMethod, ValidationRequest


class CardRepository(ABC):
    """
    Port for reading and creating cards.

    Implementations:
        - InMemoryReviewStore: Process-local dictionaries.
        - SqliteReviewStore: A single SQLite file.
    """

    @abstractmethod
    async def find_card(self, card_id: str) -> Card | None:
        """
        Fetch a card with its current scheduling state and version stamp.

        Returns:
            The card, or None if it does not exist.
        """
        pass

    @abstractmethod
    async def add_card(self, card: Card) -> str:
        """Store a new card and return its id."""
        pass

    @abstractmethod
    async def list_cards(self) -> list[Card]:
        """All stored cards, oldest first."""
        pass


class ReviewStore(ABC):
    """
    Port for persisting the outcome of a review.

    Saving the new scheduling state and appending the audit record are one
    transaction: either both are visible afterwards or neither is.
    """

    @abstractmethod
    async def commit_review(
        self,
        card_id: str,
        expected_version: int,
        state: SchedulingState,
        record: ReviewAuditRecord,
    ) -> int:
        """
        Replace the card's scheduling state and append the audit record.

        Args:
            card_id: Card being reviewed.
            expected_version: Version stamp observed when the card was loaded.
            state: New scheduling state.
            record: Audit record for this review.

        Returns:
            The card's new version stamp.

        Raises:
            PersistenceConflict: If the stored version differs from ``expected_version``.
            NotFound: If the card vanished since it was loaded.
        """
        pass

    @abstractmethod
    async def list_reviews(self, card_id: str) -> list[ReviewAuditRecord]:
        """Audit records for a card, oldest first."""
        pass


class EventPublisher(ABC):
    """Fire-and-forget notification port."""

    @abstractmethod
    async def publish(self, event: Any) -> None:
        pass


class EmbeddingService(ABC):
    """Turns text into a semantic vector."""

    @abstractmethod
    async def embed(self, text: str) -> list[float]:
        """
        Raises:
            ValidatorUnavailable: If the embedding backend cannot be reached.
        """
        pass


class AnswerJudge(ABC):
    """Scores semantic correctness of an answer given its question."""

    @abstractmethod
    async def judge(self, question: str, expected: str, submitted: str) -> float:
        """
        Returns:
            A score in [0.0, 1.0].

        Raises:
            ValidatorUnavailable: If the judge cannot produce a score.
        """
        pass


class ValidationTier(ABC):
    """
    One strategy in the validation cascade.

    A tier accepts when ``score >= threshold``; the cascade decides what
    happens otherwise.
    """

    method: ValidationMethod
    threshold: float

    @abstractmethod
    async def score(self, request: ValidationRequest) -> float:
        pass
