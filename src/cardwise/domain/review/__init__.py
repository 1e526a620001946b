# Domain Review Package
from .models import (
    Card,
    CardCreated,
    CardReviewed,
    ImportResult,
    ReviewAuditRecord,
    ReviewOutcome,
    ValidationMethod,
    ValidationOutcome,
    ValidationRequest,
)
from .ports import (
    AnswerJudge,
    CardRepository,
    EmbeddingService,
    EventPublisher,
    ReviewStore,
    ValidationTier,
)

__all__ = [
    "Card",
    "CardCreated",
    "CardReviewed",
    "ImportResult",
    "ReviewAuditRecord",
    "ReviewOutcome",
    "ValidationMethod",
    "ValidationOutcome",
    "ValidationRequest",
    "AnswerJudge",
    "CardRepository",
    "EmbeddingService",
    "EventPublisher",
    "ReviewStore",
    "ValidationTier",
]
