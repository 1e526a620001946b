"""
Service Factory
Centralizes the logic for selecting adapters and wiring the review core.
"""

import logging
from dataclasses import dataclass

from cardwise.application.card_service import CardService
from cardwise.application.config import AppConfig
from cardwise.application.events import EventBus
from cardwise.application.review_service import ReviewService
from cardwise.application.stats import ReviewStatsSubscriber
from cardwise.application.validation.cascade import ValidationCascade
from cardwise.application.validation.tiers import (
    EmbeddingTier,
    ExactTier,
    GenerativeTier,
    OfflineJudge,
)
from cardwise.domain.review.ports import CardRepository, ReviewStore, ValidationTier
from cardwise.infrastructure.adapters.memory_store import InMemoryReviewStore
from cardwise.infrastructure.adapters.openai_scoring import OpenAIScoringClient
from cardwise.infrastructure.adapters.sqlite_store import SqliteReviewStore

logger = logging.getLogger(__name__)


@dataclass
class Services:
    store: InMemoryReviewStore | SqliteReviewStore
    bus: EventBus
    stats: ReviewStatsSubscriber
    reviews: ReviewService
    cards: CardService
    scorer: OpenAIScoringClient | None = None

    async def aclose(self) -> None:
        """Release the model client and the store."""
        try:
            if self.scorer is not None:
                await self.scorer.close()
        finally:
            self.store.close()


def get_store(config: AppConfig) -> InMemoryReviewStore | SqliteReviewStore:
    if config.store == "sqlite":
        logger.info(f"Store: SQLite ({config.database_path})")
        return SqliteReviewStore(config.database_path)
    logger.info("Store: in-memory")
    return InMemoryReviewStore()


def get_scoring_client(config: AppConfig) -> OpenAIScoringClient | None:
    """Returns the OpenAI client, or None when no API key is configured."""
    if not config.has_model_backend:
        logger.warning("No OpenAI API key configured, using offline word-overlap judge")
        return None
    return OpenAIScoringClient(
        api_key=config.openai_api_key.get_secret_value(),
        embedding_model=config.embedding_model,
        judge_model=config.judge_model,
        base_url=config.openai_base_url,
        timeout=config.request_timeout,
    )


def build_cascade(config: AppConfig, scorer: OpenAIScoringClient | None) -> ValidationCascade:
    """Exact -> Embedding -> Generative; the embedding tier needs a model backend."""
    tiers: list[ValidationTier] = [ExactTier()]
    if scorer is not None:
        tiers.append(
            EmbeddingTier(
                scorer,
                threshold=config.embedding_threshold,
                cache_size=config.embedding_cache_size,
            )
        )
        tiers.append(GenerativeTier(scorer))
    else:
        tiers.append(GenerativeTier(OfflineJudge()))

    return ValidationCascade(
        tiers, on_tier_error=config.on_tier_error, tier_timeout=config.tier_timeout
    )


def build_services(
    config: AppConfig,
    store: CardRepository | ReviewStore | None = None,
) -> Services:
    store = store or get_store(config)
    scorer = get_scoring_client(config)
    bus = EventBus()
    stats = ReviewStatsSubscriber().attach(bus)

    reviews = ReviewService(
        cards=store,
        store=store,
        validator=build_cascade(config, scorer),
        publisher=bus,
        max_conflict_retries=config.max_conflict_retries,
    )
    cards = CardService(cards=store, embedder=scorer, publisher=bus)

    return Services(
        store=store, bus=bus, stats=stats, reviews=reviews, cards=cards, scorer=scorer
    )


async def load_services(
    config: AppConfig,
    store: CardRepository | ReviewStore | None = None,
) -> Services:
    """``build_services`` plus statistics rebuilt from what the store already holds."""
    services = build_services(config, store)
    await services.stats.replay(services.store, services.store)
    return services
