"""Translate a continuous validation score into a scheduler rating."""

from cardwise.domain.constants import EASY_SCORE, GOOD_SCORE, HARD_SCORE
from cardwise.domain.scheduling.models import Rating


def score_to_rating(score: float) -> Rating:
    """
    Map a score in [0, 1] onto Again/Hard/Good/Easy.

    Brackets are closed on their lower bound: 0.9 is Easy, 0.7 Good, 0.5 Hard.
    Out-of-range scores are clamped first.
    """
    score = max(0.0, min(score, 1.0))
    if score >= EASY_SCORE:
        return Rating.EASY
    if score >= GOOD_SCORE:
        return Rating.GOOD
    if score >= HARD_SCORE:
        return Rating.HARD
    return Rating.AGAIN
