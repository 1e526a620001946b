"""
Domain models for answer review.

Pure data structures: the card as seen by the review core, the validation
outcome, the append-only audit record and the events published after a review.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from cardwise.domain.scheduling.models import Rating, SchedulingState


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ValidationMethod(str, Enum):
    """Cascade tier that produced the final score."""

    EXACT = "exact"
    EMBEDDING = "embedding"
    GENERATIVE = "llm"


@dataclass
class Card:
    """
    A flashcard as read by the review core.

    The core only reads question/answer/embedding and replaces ``state``.
    ``version`` is the optimistic-concurrency stamp owned by the store.
    """

    id: str
    user_id: str
    question: str
    answer: str
    state: SchedulingState = field(default_factory=SchedulingState)
    answer_embedding: list[float] | None = None
    deck_id: str | None = None
    version: int = 0
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)


@dataclass(frozen=True)
class ValidationRequest:
    """Inputs handed to every validation tier."""

    expected: str
    submitted: str
    question: str = ""
    expected_embedding: list[float] | None = None


@dataclass(frozen=True)
class ValidationOutcome:
    """
    Attributes:
        score: Confidence the answer is correct, in [0.0, 1.0].
        method: Tier that produced the score.
    """

    score: float
    method: ValidationMethod


@dataclass(frozen=True)
class ReviewAuditRecord:
    """One review, written exactly once and never mutated."""

    id: str
    card_id: str
    user_id: str
    user_answer: str
    expected_answer: str
    score: float
    method: ValidationMethod
    rating: Rating
    created_at: datetime = field(default_factory=utcnow)


@dataclass(frozen=True)
class ReviewOutcome:
    """Result of a review, complete enough for the caller to render without a second read."""

    card_id: str
    score: float
    method: ValidationMethod
    rating: Rating
    scheduled_days: int
    state: SchedulingState
    audit_id: str


@dataclass(frozen=True)
class CardReviewed:
    """Published after a review has been committed."""

    card_id: str
    user_id: str
    score: float
    rating: Rating
    deck_id: str | None = None
    occurred_at: datetime = field(default_factory=utcnow)


@dataclass(frozen=True)
class CardCreated:
    """Published after a card has been stored."""

    card_id: str
    user_id: str
    deck_id: str | None = None
    occurred_at: datetime = field(default_factory=utcnow)


@dataclass(frozen=True)
class ImportResult:
    """Outcome of a bulk import; rejected lines are counted, not raised."""

    cards_imported: int
    cards_skipped: int
    card_ids: list[str] = field(default_factory=list)
