from datetime import datetime, timezone

import pytest

from cardwise.domain.errors import ValidatorUnavailable
from cardwise.domain.review.models import Card
from cardwise.domain.review.ports import AnswerJudge, EmbeddingService
from cardwise.infrastructure.adapters.memory_store import InMemoryReviewStore

FIXED_NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


class FakeJudge(AnswerJudge):
    """Returns a fixed score and records every call."""

    def __init__(self, score: float = 0.5, error: Exception | None = None):
        self.score = score
        self.error = error
        self.calls: list[tuple[str, str, str]] = []

    async def judge(self, question: str, expected: str, submitted: str) -> float:
        self.calls.append((question, expected, submitted))
        if self.error:
            raise self.error
        return self.score


class FakeEmbedder(EmbeddingService):
    """Looks vectors up in a table; unknown text raises ValidatorUnavailable."""

    def __init__(self, vectors: dict[str, list[float]] | None = None):
        self.vectors = vectors or {}
        self.calls: list[str] = []

    async def embed(self, text: str) -> list[float]:
        self.calls.append(text)
        if text not in self.vectors:
            raise ValidatorUnavailable("embedding", f"no vector for {text!r}")
        return self.vectors[text]


@pytest.fixture
def store():
    return InMemoryReviewStore()


@pytest.fixture
def make_card():
    def _make(card_id="c1", question="Hello in Spanish?", answer="hola", **kwargs):
        return Card(id=card_id, user_id="u1", question=question, answer=answer, **kwargs)

    return _make


@pytest.fixture
def mock_home(tmp_path, monkeypatch):
    """Mocks Path.home() to point to a temp dir."""
    home = tmp_path / "home"
    home.mkdir()

    # Mocking HOME to a temp directory to isolate config files
    monkeypatch.setenv("HOME", str(home))
    return home
