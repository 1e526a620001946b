"""Service for creating cards with a precomputed answer embedding."""

import logging

from ulid import ULID

from cardwise.domain.errors import ValidatorUnavailable
from cardwise.domain.review.models import Card, CardCreated, ImportResult
from cardwise.domain.review.ports import CardRepository, EmbeddingService, EventPublisher

logger = logging.getLogger(__name__)


def generate_card_id() -> str:
    return f"card_{ULID()}"


class CardService:
    def __init__(
        self,
        cards: CardRepository,
        embedder: EmbeddingService | None = None,
        publisher: EventPublisher | None = None,
    ):
        self._cards = cards
        self._embedder = embedder
        self._publisher = publisher

    async def create_card(
        self,
        user_id: str,
        question: str,
        answer: str,
        deck_id: str | None = None,
    ) -> Card:
        """
        Create a new card in the New phase.

        The answer embedding is best-effort: if the embedding backend is down
        the card is still created, and the review cascade embeds the answer
        on demand later.
        """
        card = Card(
            id=generate_card_id(),
            user_id=user_id,
            question=question,
            answer=answer,
            deck_id=deck_id,
        )

        if self._embedder is not None:
            try:
                card.answer_embedding = await self._embedder.embed(answer)
                logger.info(f"Generated embedding for card {card.id}")
            except ValidatorUnavailable as e:
                logger.warning(f"Failed to generate embedding: {e}, continuing without it")

        await self._cards.add_card(card)

        if self._publisher is not None:
            try:
                await self._publisher.publish(
                    CardCreated(card_id=card.id, user_id=user_id, deck_id=deck_id)
                )
            except Exception as e:
                logger.warning(f"Failed to publish CardCreated: {e}", exc_info=True)

        return card

    async def import_cards(
        self,
        user_id: str,
        pairs: list[tuple[str, str]],
        deck_id: str | None = None,
        skipped: int = 0,
    ) -> ImportResult:
        """
        Create one card per (question, answer) pair.

        ``skipped`` carries lines the parser already rejected so the result
        reports the whole file.
        """
        card_ids = []
        for question, answer in pairs:
            card = await self.create_card(user_id, question, answer, deck_id=deck_id)
            card_ids.append(card.id)

        logger.info(f"Imported {len(card_ids)} cards into {deck_id}, {skipped} skipped")
        return ImportResult(cards_imported=len(card_ids), cards_skipped=skipped, card_ids=card_ids)
