"""
OpenAI scoring adapter.

Implements both EmbeddingService and AnswerJudge on top of the OpenAI API.
Every library failure is translated into ValidatorUnavailable so the cascade
can apply its error policy.
"""

import logging
import re

import openai
from openai import AsyncOpenAI

from cardwise.domain.constants import (
    DEFAULT_EMBEDDING_MODEL,
    DEFAULT_JUDGE_MODEL,
    REQUEST_TIMEOUT,
)
from cardwise.domain.errors import ValidatorUnavailable
from cardwise.domain.review.ports import AnswerJudge, EmbeddingService

logger = logging.getLogger(__name__)

JUDGE_SYSTEM_PROMPT = """You are an expert language tutor evaluating student answers.
Compare the student's answer with the expected answer in the context of the question.
Rate the answer from 0.0 to 1.0 based on semantic correctness and completeness.
Consider:
- Meaning and intent (more important than exact wording)
- Grammatical correctness
- Completeness of the response

Respond with ONLY a number between 0.0 and 1.0, nothing else."""

_NUMBER_RE = re.compile(r"[-+]?\d*\.?\d+")


def parse_judge_score(text: str | None) -> float:
    """
    Extract the score from a judge reply and clamp it to [0, 1].

    Raises:
        ValueError: If the reply contains no number.
    """
    if not text:
        raise ValueError("empty reply")
    match = _NUMBER_RE.search(text.strip())
    if not match:
        raise ValueError(f"no score in reply {text!r}")
    return max(0.0, min(float(match.group()), 1.0))


class OpenAIScoringClient(EmbeddingService, AnswerJudge):
    """Embeddings and semantic judgment via the OpenAI API."""

    def __init__(
        self,
        api_key: str,
        embedding_model: str = DEFAULT_EMBEDDING_MODEL,
        judge_model: str = DEFAULT_JUDGE_MODEL,
        base_url: str | None = None,
        timeout: float = REQUEST_TIMEOUT,
        client: AsyncOpenAI | None = None,
    ):
        self.embedding_model = embedding_model
        self.judge_model = judge_model
        self._client = client or AsyncOpenAI(
            api_key=api_key, base_url=base_url, timeout=timeout, max_retries=1
        )
        logger.debug(
            f"OpenAIScoringClient initialized (embedding={embedding_model}, judge={judge_model})"
        )

    async def embed(self, text: str) -> list[float]:
        try:
            response = await self._client.embeddings.create(
                model=self.embedding_model, input=text
            )
        except openai.APIError as e:
            raise ValidatorUnavailable("embedding", str(e)) from e

        if not response.data:
            raise ValidatorUnavailable("embedding", "no embedding returned")
        return list(response.data[0].embedding)

    async def judge(self, question: str, expected: str, submitted: str) -> float:
        user_prompt = (
            f"Question: {question}\n\n"
            f"Expected Answer: {expected}\n\n"
            f"Student Answer: {submitted}\n\n"
            "Score:"
        )
        try:
            response = await self._client.chat.completions.create(
                model=self.judge_model,
                messages=[
                    {"role": "system", "content": JUDGE_SYSTEM_PROMPT},
                    {"role": "user", "content": user_prompt},
                ],
                temperature=0.0,
                max_tokens=10,
            )
        except openai.APIError as e:
            raise ValidatorUnavailable("llm", str(e)) from e

        if not response.choices:
            raise ValidatorUnavailable("llm", "no response from model")

        content = response.choices[0].message.content
        try:
            return parse_judge_score(content)
        except ValueError as e:
            raise ValidatorUnavailable("llm", f"unparseable score: {e}") from e

    async def close(self) -> None:
        await self._client.close()
