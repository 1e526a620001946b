"""
SQLite Store: Infrastructure adapter persisting cards and review logs in one file.

Implements CardRepository and ReviewStore. Scheduling state is stored as JSON;
the review commit is a single transaction guarded by a version compare-and-swap.
"""

import json
import logging
import sqlite3
from datetime import datetime
from pathlib import Path

from cardwise.domain.errors import NotFound, PersistenceConflict, SerializationError
from cardwise.domain.review.models import (
    Card,
    ReviewAuditRecord,
    ValidationMethod,
    utcnow,
)
from cardwise.domain.review.ports import CardRepository, ReviewStore
from cardwise.domain.scheduling.models import Rating, SchedulingState

logger = logging.getLogger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS cards (
    id TEXT PRIMARY KEY,
    user_id TEXT NOT NULL,
    deck_id TEXT,
    question TEXT NOT NULL,
    answer TEXT NOT NULL,
    answer_embedding TEXT,
    state TEXT NOT NULL,
    version INTEGER NOT NULL DEFAULT 0,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS review_logs (
    id TEXT PRIMARY KEY,
    card_id TEXT NOT NULL REFERENCES cards(id) ON DELETE CASCADE,
    user_id TEXT NOT NULL,
    user_answer TEXT NOT NULL,
    expected_answer TEXT NOT NULL,
    ai_score REAL NOT NULL,
    validation_method TEXT NOT NULL,
    fsrs_rating INTEGER NOT NULL CHECK (fsrs_rating >= 1 AND fsrs_rating <= 4),
    created_at TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_review_logs_card_id ON review_logs(card_id, created_at);
"""


def _dump_state(state: SchedulingState) -> str:
    try:
        return json.dumps(state.to_dict())
    except (TypeError, ValueError) as e:
        raise SerializationError(f"Cannot serialize scheduling state: {e}") from e


def _load_state(raw: str) -> SchedulingState:
    try:
        data = json.loads(raw)
    except (TypeError, json.JSONDecodeError) as e:
        raise SerializationError(f"Stored scheduling state is not valid JSON: {e}") from e
    return SchedulingState.from_dict(data)


def _row_to_card(row: sqlite3.Row) -> Card:
    embedding = None
    if row["answer_embedding"]:
        try:
            embedding = json.loads(row["answer_embedding"])
        except json.JSONDecodeError as e:
            raise SerializationError(f"Stored embedding for {row['id']} is corrupt: {e}") from e

    return Card(
        id=row["id"],
        user_id=row["user_id"],
        question=row["question"],
        answer=row["answer"],
        state=_load_state(row["state"]),
        answer_embedding=embedding,
        deck_id=row["deck_id"],
        version=row["version"],
        created_at=datetime.fromisoformat(row["created_at"]),
        updated_at=datetime.fromisoformat(row["updated_at"]),
    )


class SqliteReviewStore(CardRepository, ReviewStore):
    """
    Cards and review logs in a SQLite database.

    Use as a context manager or call ``close()`` when done.

    The ``async`` methods call ``sqlite3`` directly and block the event loop
    for the duration of each query. A local single-file database answers in
    well under a millisecond, so the server runs them inline; every statement
    runs on the loop thread, which is also what keeps the shared connection
    safe with ``check_same_thread=False``.
    """

    def __init__(self, path: Path | str = ":memory:"):
        if isinstance(path, Path):
            path.parent.mkdir(parents=True, exist_ok=True)
        self.path = path
        self._conn = sqlite3.connect(str(path), check_same_thread=False)
        self._conn.row_factory = sqlite3.Row
        self._conn.execute("PRAGMA foreign_keys = ON")
        self._conn.executescript(SCHEMA)
        logger.debug(f"SqliteReviewStore opened at {path}")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def close(self) -> None:
        self._conn.close()

    async def find_card(self, card_id: str) -> Card | None:
        row = self._conn.execute("SELECT * FROM cards WHERE id = ?", (card_id,)).fetchone()
        return _row_to_card(row) if row is not None else None

    async def list_cards(self) -> list[Card]:
        rows = self._conn.execute("SELECT * FROM cards ORDER BY created_at ASC, id ASC").fetchall()
        return [_row_to_card(row) for row in rows]

    async def add_card(self, card: Card) -> str:
        embedding = json.dumps(card.answer_embedding) if card.answer_embedding else None
        with self._conn:
            self._conn.execute(
                "INSERT INTO cards (id, user_id, deck_id, question, answer, answer_embedding, "
                "state, version, created_at, updated_at) VALUES (?, ?, ?, ?, ?, ?, ?, 0, ?, ?)",
                (
                    card.id,
                    card.user_id,
                    card.deck_id,
                    card.question,
                    card.answer,
                    embedding,
                    _dump_state(card.state),
                    card.created_at.isoformat(),
                    card.updated_at.isoformat(),
                ),
            )
        return card.id

    async def commit_review(
        self,
        card_id: str,
        expected_version: int,
        state: SchedulingState,
        record: ReviewAuditRecord,
    ) -> int:
        payload = _dump_state(state)

        # Both writes share one transaction; any raise below rolls back.
        with self._conn:
            cur = self._conn.execute(
                "UPDATE cards SET state = ?, version = version + 1, updated_at = ? "
                "WHERE id = ? AND version = ?",
                (payload, utcnow().isoformat(), card_id, expected_version),
            )
            if cur.rowcount == 0:
                row = self._conn.execute(
                    "SELECT version FROM cards WHERE id = ?", (card_id,)
                ).fetchone()
                if row is None:
                    raise NotFound(card_id)
                raise PersistenceConflict(card_id, expected_version, row["version"])

            self._conn.execute(
                "INSERT INTO review_logs (id, card_id, user_id, user_answer, expected_answer, "
                "ai_score, validation_method, fsrs_rating, created_at) "
                "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)",
                (
                    record.id,
                    record.card_id,
                    record.user_id,
                    record.user_answer,
                    record.expected_answer,
                    record.score,
                    record.method.value,
                    int(record.rating),
                    record.created_at.isoformat(),
                ),
            )

        return expected_version + 1

    async def list_reviews(self, card_id: str) -> list[ReviewAuditRecord]:
        rows = self._conn.execute(
            "SELECT * FROM review_logs WHERE card_id = ? ORDER BY created_at ASC, id ASC",
            (card_id,),
        ).fetchall()

        return [
            ReviewAuditRecord(
                id=row["id"],
                card_id=row["card_id"],
                user_id=row["user_id"],
                user_answer=row["user_answer"],
                expected_answer=row["expected_answer"],
                score=row["ai_score"],
                method=ValidationMethod(row["validation_method"]),
                rating=Rating(row["fsrs_rating"]),
                created_at=datetime.fromisoformat(row["created_at"]),
            )
            for row in rows
        ]
