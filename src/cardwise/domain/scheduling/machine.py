"""
Scheduling state machine.

A deliberately simplified, closed-form variant of FSRS: each rating maps the
current stability/difficulty to new values through a fixed multiplier, and the
next interval follows directly from the new stability. Pure computation, no I/O.
"""

import math
from dataclasses import replace
from datetime import datetime, timezone

from cardwise.domain.constants import (
    AGAIN_DIFFICULTY_DELTA,
    AGAIN_STABILITY_FACTOR,
    EASY_DIFFICULTY_DELTA,
    EASY_FACTOR,
    GOOD_FACTOR,
    HARD_DIFFICULTY_DELTA,
    HARD_FACTOR,
    INITIAL_DIFFICULTY,
    INITIAL_STABILITY,
    MAX_DIFFICULTY,
    MIN_DIFFICULTY,
    MIN_INTERVAL_DAYS,
    MIN_STABILITY,
)

from .models import Phase, Rating, SchedulingState


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero (2.5 -> 3)."""
    return int(math.floor(value + 0.5))


def elapsed_days_between(last_review: datetime | None, now: datetime) -> int:
    """Whole days between two reviews; 0 for a first review or clock skew."""
    if last_review is None:
        return 0
    if last_review.tzinfo is None:
        last_review = last_review.replace(tzinfo=timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return max(0, (now - last_review).days)


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(value, high))


def _interval(stability: float, factor: float, first_review: bool) -> int:
    # First review graduates on the freshly initialized stability times the
    # multiplier, which is exactly the new stability.
    days = stability if first_review else stability * factor
    return max(MIN_INTERVAL_DAYS, round_half_up(days))


def _progress_phase(reps: int) -> Phase:
    return Phase.LEARNING if reps <= 1 else Phase.REVIEW


def transition(
    state: SchedulingState,
    rating: Rating | int,
    now: datetime | None = None,
    elapsed_days: int | None = None,
) -> SchedulingState:
    """
    Apply one review to a scheduling state.

    Args:
        state: Current state of the card.
        rating: Again/Hard/Good/Easy (1-4).
        now: Review time; defaults to the current UTC time.
        elapsed_days: Days since the previous review. Derived from
            ``state.last_review`` and ``now`` when omitted.

    Returns:
        A new SchedulingState; ``state`` is left untouched.

    Raises:
        ValueError: If ``rating`` is not in 1..4.
    """
    rating = Rating(rating)
    now = now or datetime.now(timezone.utc)
    if elapsed_days is None:
        elapsed_days = elapsed_days_between(state.last_review, now)

    first_review = state.is_new
    stability = INITIAL_STABILITY if first_review else state.stability
    difficulty = INITIAL_DIFFICULTY if first_review else state.difficulty
    reps = state.reps + 1
    lapses = state.lapses

    if rating == Rating.AGAIN:
        stability = max(stability * AGAIN_STABILITY_FACTOR, MIN_STABILITY)
        difficulty = min(difficulty + AGAIN_DIFFICULTY_DELTA, MAX_DIFFICULTY)
        scheduled_days = MIN_INTERVAL_DAYS
        phase = Phase.RELEARNING
        lapses += 1
    elif rating == Rating.HARD:
        stability *= HARD_FACTOR
        difficulty = min(difficulty + HARD_DIFFICULTY_DELTA, MAX_DIFFICULTY)
        scheduled_days = _interval(stability, HARD_FACTOR, first_review)
        phase = _progress_phase(reps)
    elif rating == Rating.GOOD:
        stability *= GOOD_FACTOR
        scheduled_days = _interval(stability, GOOD_FACTOR, first_review)
        phase = _progress_phase(reps)
    else:
        stability *= EASY_FACTOR
        difficulty = max(difficulty + EASY_DIFFICULTY_DELTA, MIN_DIFFICULTY)
        scheduled_days = _interval(stability, EASY_FACTOR, first_review)
        phase = Phase.REVIEW

    return replace(
        state,
        stability=max(stability, MIN_STABILITY),
        difficulty=_clamp(difficulty, MIN_DIFFICULTY, MAX_DIFFICULTY),
        elapsed_days=elapsed_days,
        scheduled_days=scheduled_days,
        reps=reps,
        lapses=lapses,
        phase=phase,
        last_review=now,
    )
