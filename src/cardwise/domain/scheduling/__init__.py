# Domain Scheduling Package
from .machine import elapsed_days_between, round_half_up, transition
from .models import Phase, Rating, SchedulingState

__all__ = [
    "Phase",
    "Rating",
    "SchedulingState",
    "transition",
    "elapsed_days_between",
    "round_half_up",
]
