"""Centralized constants for cardwise.

Scheduler multipliers, validation thresholds and I/O defaults live here so
every layer imports from a single source of truth.
"""

# ---------- Scheduler ----------
INITIAL_STABILITY = 1.0
INITIAL_DIFFICULTY = 5.0

MIN_STABILITY = 0.1
MIN_DIFFICULTY = 1.0
MAX_DIFFICULTY = 10.0

AGAIN_STABILITY_FACTOR = 0.5
AGAIN_DIFFICULTY_DELTA = 1.0

HARD_FACTOR = 1.2
HARD_DIFFICULTY_DELTA = 0.15

GOOD_FACTOR = 2.5

EASY_FACTOR = 4.0
EASY_DIFFICULTY_DELTA = -0.15

MIN_INTERVAL_DAYS = 1

# ---------- Rating translator ----------
EASY_SCORE = 0.9
GOOD_SCORE = 0.7
HARD_SCORE = 0.5

# ---------- Validation ----------
EXACT_THRESHOLD = 1.0
DEFAULT_EMBEDDING_THRESHOLD = 0.85
GENERATIVE_THRESHOLD = 0.0
DEFAULT_EMBEDDING_CACHE_SIZE = 1024

# ---------- Review orchestration ----------
DEFAULT_MAX_CONFLICT_RETRIES = 3
CORRECT_SCORE = 0.7  # review counts as correct in statistics

# ---------- External scoring ----------
DEFAULT_EMBEDDING_MODEL = "text-embedding-3-small"
DEFAULT_JUDGE_MODEL = "gpt-4o-mini"
REQUEST_TIMEOUT = 30.0

# ---------- Deck import ----------
MAX_DECK_BYTES = 10 * 1024 * 1024
MAX_DECK_CARDS = 2_000
