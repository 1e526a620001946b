"""
Validation tiers, cheapest first.

Each tier implements the ValidationTier port and knows nothing about the
others; ordering and fall-through live in the cascade.
"""

import logging
from collections import OrderedDict

from cardwise.application.utils.text import answers_match, normalize_answer, word_overlap
from cardwise.application.utils.vectors import cosine_similarity
from cardwise.domain.constants import (
    DEFAULT_EMBEDDING_CACHE_SIZE,
    DEFAULT_EMBEDDING_THRESHOLD,
    EXACT_THRESHOLD,
    GENERATIVE_THRESHOLD,
)
from cardwise.domain.review.models import ValidationMethod, ValidationRequest
from cardwise.domain.review.ports import AnswerJudge, EmbeddingService, ValidationTier

logger = logging.getLogger(__name__)


class ExactTier(ValidationTier):
    """Normalized string equality. No I/O."""

    method = ValidationMethod.EXACT
    threshold = EXACT_THRESHOLD

    async def score(self, request: ValidationRequest) -> float:
        return 1.0 if answers_match(request.expected, request.submitted) else 0.0


class EmbeddingTier(ValidationTier):
    """
    Cosine similarity between the expected answer's embedding and the submitted one.

    The card's precomputed embedding is reused when present. Submitted-answer
    embeddings are memoized by normalized text, bounded to ``cache_size`` entries.
    """

    method = ValidationMethod.EMBEDDING

    def __init__(
        self,
        embedder: EmbeddingService,
        threshold: float = DEFAULT_EMBEDDING_THRESHOLD,
        cache_size: int = DEFAULT_EMBEDDING_CACHE_SIZE,
    ):
        self._embedder = embedder
        self.threshold = threshold
        self._cache_size = cache_size
        self._cache: OrderedDict[str, list[float]] = OrderedDict()

    async def score(self, request: ValidationRequest) -> float:
        expected_vec = request.expected_embedding
        if expected_vec is None:
            logger.debug("No precomputed embedding for expected answer, embedding it now")
            expected_vec = await self._embed_cached(request.expected)

        submitted_vec = await self._embed_cached(request.submitted)
        similarity = cosine_similarity(expected_vec, submitted_vec)
        return max(0.0, min(similarity, 1.0))

    async def _embed_cached(self, text: str) -> list[float]:
        key = normalize_answer(text) or text
        cached = self._cache.get(key)
        if cached is not None:
            self._cache.move_to_end(key)
            return cached

        vector = await self._embedder.embed(text)
        if self._cache_size > 0:
            self._cache[key] = vector
            if len(self._cache) > self._cache_size:
                self._cache.popitem(last=False)
        return vector


class GenerativeTier(ValidationTier):
    """Delegates to a judge model. Always accepted; this is the last resort."""

    method = ValidationMethod.GENERATIVE
    threshold = GENERATIVE_THRESHOLD

    def __init__(self, judge: AnswerJudge):
        self._judge = judge

    async def score(self, request: ValidationRequest) -> float:
        raw = await self._judge.judge(request.question, request.expected, request.submitted)
        return max(0.0, min(float(raw), 1.0))


class OfflineJudge(AnswerJudge):
    """
    Word-overlap judge used when no model backend is configured.

    Scores the Jaccard similarity of the normalized word sets, which keeps
    reviews working in development without network access.
    """

    async def judge(self, question: str, expected: str, submitted: str) -> float:
        return word_overlap(expected, submitted)
