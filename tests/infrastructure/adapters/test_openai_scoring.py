from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import httpx
import openai
import pytest

from cardwise.domain.errors import ValidatorUnavailable
from cardwise.infrastructure.adapters.openai_scoring import (
    OpenAIScoringClient,
    parse_judge_score,
)


@pytest.fixture
def mock_client():
    client = MagicMock()
    client.embeddings.create = AsyncMock()
    client.chat.completions.create = AsyncMock()
    client.close = AsyncMock()
    return client


@pytest.fixture
def scorer(mock_client):
    return OpenAIScoringClient(api_key="test-key", client=mock_client)


def chat_reply(content):
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


def connection_error():
    request = httpx.Request("POST", "https://api.openai.com/v1/embeddings")
    return openai.APIConnectionError(request=request)


@pytest.mark.parametrize(
    "text,expected",
    [("0.85", 0.85), (" 1 ", 1.0), ("Score: 0.4", 0.4), ("1.7", 1.0), (".5", 0.5)],
)
def test_parse_judge_score(text, expected):
    assert parse_judge_score(text) == pytest.approx(expected)


@pytest.mark.parametrize("text", [None, "", "excellent"])
def test_parse_judge_score_rejects_garbage(text):
    with pytest.raises(ValueError):
        parse_judge_score(text)


@pytest.mark.asyncio
async def test_embed(scorer, mock_client):
    mock_client.embeddings.create.return_value = SimpleNamespace(
        data=[SimpleNamespace(embedding=[0.1, 0.2])]
    )

    assert await scorer.embed("hola") == [0.1, 0.2]
    mock_client.embeddings.create.assert_awaited_once_with(
        model="text-embedding-3-small", input="hola"
    )


@pytest.mark.asyncio
async def test_embed_api_error(scorer, mock_client):
    mock_client.embeddings.create.side_effect = connection_error()

    with pytest.raises(ValidatorUnavailable) as exc:
        await scorer.embed("hola")

    assert exc.value.tier == "embedding"


@pytest.mark.asyncio
async def test_embed_empty_response(scorer, mock_client):
    mock_client.embeddings.create.return_value = SimpleNamespace(data=[])

    with pytest.raises(ValidatorUnavailable):
        await scorer.embed("hola")


@pytest.mark.asyncio
async def test_judge(scorer, mock_client):
    mock_client.chat.completions.create.return_value = chat_reply("0.9")

    score = await scorer.judge("Hello in Spanish?", "hola", "ola")

    assert score == pytest.approx(0.9)
    kwargs = mock_client.chat.completions.create.await_args.kwargs
    assert kwargs["model"] == "gpt-4o-mini"
    assert kwargs["temperature"] == 0.0
    user_prompt = kwargs["messages"][1]["content"]
    assert "Question: Hello in Spanish?" in user_prompt
    assert "Expected Answer: hola" in user_prompt
    assert "Student Answer: ola" in user_prompt


@pytest.mark.asyncio
async def test_judge_unparseable_reply(scorer, mock_client):
    mock_client.chat.completions.create.return_value = chat_reply("pretty good!")

    with pytest.raises(ValidatorUnavailable, match="unparseable"):
        await scorer.judge("Q", "A", "B")


@pytest.mark.asyncio
async def test_judge_api_error(scorer, mock_client):
    mock_client.chat.completions.create.side_effect = connection_error()

    with pytest.raises(ValidatorUnavailable) as exc:
        await scorer.judge("Q", "A", "B")

    assert exc.value.tier == "llm"


@pytest.mark.asyncio
async def test_close(scorer, mock_client):
    await scorer.close()
    mock_client.close.assert_awaited_once()
