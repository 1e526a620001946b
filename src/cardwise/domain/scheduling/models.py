"""
Domain models for card scheduling.

These are pure data structures with no I/O or external dependencies.
"""

from dataclasses import asdict, dataclass
from datetime import datetime
from enum import Enum, IntEnum
from typing import Any

from cardwise.domain.errors import SerializationError


class Rating(IntEnum):
    """Coarse correctness signal consumed by the scheduler."""

    AGAIN = 1
    HARD = 2
    GOOD = 3
    EASY = 4


class Phase(str, Enum):
    """Scheduling phase tag. Non-hierarchical; only New is tied to ``reps``."""

    NEW = "new"
    LEARNING = "learning"
    REVIEW = "review"
    RELEARNING = "relearning"


@dataclass(frozen=True)
class SchedulingState:
    """
    Scheduling state of a single card.

    Attributes:
        stability: Modeled memory retention strength (>= 0.1 once reviewed).
        difficulty: Intrinsic item difficulty, bounded to [1.0, 10.0] once reviewed.
        elapsed_days: Days since the previous review, supplied by the caller.
        scheduled_days: Interval until the next review.
        reps: Completed reviews.
        lapses: Reviews rated Again.
        phase: Scheduling phase tag.
        last_review: UTC timestamp of the latest review.
    """

    stability: float = 0.0
    difficulty: float = 0.0
    elapsed_days: int = 0
    scheduled_days: int = 0
    reps: int = 0
    lapses: int = 0
    phase: Phase = Phase.NEW
    last_review: datetime | None = None

    @property
    def is_new(self) -> bool:
        return self.reps == 0

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["phase"] = self.phase.value
        data["last_review"] = self.last_review.isoformat() if self.last_review else None
        return data

    @classmethod
    def from_dict(cls, data: Any) -> "SchedulingState":
        """Rebuild a state from its persisted shape.

        Raises:
            SerializationError: If ``data`` is not a well-formed state mapping, or
                its phase contradicts ``reps`` (New exactly when no reviews happened).
        """
        if not isinstance(data, dict):
            raise SerializationError(
                f"Scheduling state must be a mapping, got {type(data).__name__}"
            )
        try:
            last_review = data.get("last_review")
            state = cls(
                stability=float(data.get("stability", 0.0)),
                difficulty=float(data.get("difficulty", 0.0)),
                elapsed_days=int(data.get("elapsed_days", 0)),
                scheduled_days=int(data.get("scheduled_days", 0)),
                reps=int(data.get("reps", 0)),
                lapses=int(data.get("lapses", 0)),
                phase=Phase(data.get("phase", Phase.NEW.value)),
                last_review=datetime.fromisoformat(last_review) if last_review else None,
            )
        except (TypeError, ValueError) as e:
            raise SerializationError(f"Malformed scheduling state: {e}") from e

        if state.is_new != (state.phase == Phase.NEW):
            raise SerializationError(
                f"Inconsistent scheduling state: phase {state.phase.value!r} with reps={state.reps}"
            )
        return state
