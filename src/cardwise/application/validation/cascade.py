"""
Cost-aware validation cascade.

Runs tiers strictly in order and stops at the first one whose score clears its
threshold. The last tier is accepted unconditionally.
"""

import asyncio
import logging
from collections.abc import Sequence
from typing import Literal

from cardwise.domain.errors import ValidatorUnavailable
from cardwise.domain.review.models import ValidationOutcome, ValidationRequest
from cardwise.domain.review.ports import ValidationTier

logger = logging.getLogger(__name__)

TierErrorPolicy = Literal["fallback", "fail"]


class ValidationCascade:
    """
    Fixed-order composition of validation tiers.

    Tiers only need to satisfy the ValidationTier port, so new strategies plug
    in without touching this class.
    """

    def __init__(
        self,
        tiers: Sequence[ValidationTier],
        on_tier_error: TierErrorPolicy = "fallback",
        tier_timeout: float | None = None,
    ):
        """
        Args:
            tiers: Strategies, cheapest first. Must not be empty.
            on_tier_error: What to do when a non-final tier is unavailable:
                "fallback" moves on to the next tier, "fail" surfaces the error.
                A final-tier failure always surfaces.
            tier_timeout: Optional per-tier time limit in seconds. A timeout
                counts as that tier being unavailable.
        """
        if not tiers:
            raise ValueError("ValidationCascade needs at least one tier")
        if on_tier_error not in ("fallback", "fail"):
            raise ValueError(f"Unknown tier error policy: {on_tier_error}")
        self.tiers = list(tiers)
        self.on_tier_error = on_tier_error
        self.tier_timeout = tier_timeout

    async def validate(
        self,
        expected: str,
        submitted: str,
        question: str = "",
        expected_embedding: list[float] | None = None,
    ) -> ValidationOutcome:
        request = ValidationRequest(
            expected=expected,
            submitted=submitted,
            question=question,
            expected_embedding=expected_embedding,
        )
        last = len(self.tiers) - 1

        for index, tier in enumerate(self.tiers):
            try:
                score = await self._run_tier(tier, request)
            except ValidatorUnavailable as e:
                if index == last or self.on_tier_error == "fail":
                    logger.error(f"Validation failed at {tier.method.value} tier: {e.reason}")
                    raise
                logger.warning(
                    f"{tier.method.value} tier unavailable ({e.reason}), falling back"
                )
                continue

            if index == last or score >= tier.threshold:
                logger.debug(f"Accepted by {tier.method.value} tier with score {score:.3f}")
                return ValidationOutcome(score=score, method=tier.method)

            logger.info(
                f"{tier.method.value} score {score:.3f} below threshold "
                f"{tier.threshold:.2f}, escalating"
            )

        # Unreachable: the final tier either returns or raises.
        raise AssertionError("validation cascade exhausted without a result")

    async def _run_tier(self, tier: ValidationTier, request: ValidationRequest) -> float:
        if self.tier_timeout is None:
            return await tier.score(request)
        try:
            return await asyncio.wait_for(tier.score(request), timeout=self.tier_timeout)
        except asyncio.TimeoutError as e:
            raise ValidatorUnavailable(
                tier.method.value, f"timed out after {self.tier_timeout}s"
            ) from e
