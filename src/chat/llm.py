"""Chat-completion client for any OpenAI-compatible endpoint."""

from __future__ import annotations

import logging

from openai import AsyncOpenAI

logger = logging.getLogger(__name__)

EMPTY_ANSWER = "No response"


class LLMClient:
    """Single non-streaming completion: system prompt plus one user message."""

    def __init__(self, client: AsyncOpenAI, model: str) -> None:
        self._client = client
        self._model = model

    @property
    def model(self) -> str:
        return self._model

    async def complete(self, system_prompt: str, user_message: str) -> str:
        logger.debug(
            "llm request",
            extra={"model": self._model, "system_chars": len(system_prompt), "user_chars": len(user_message)},
        )
        completion = await self._client.chat.completions.create(
            model=self._model,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_message},
            ],
        )
        answer = completion.choices[0].message.content if completion.choices else None
        usage = getattr(completion, "usage", None)
        logger.info(
            "llm response received",
            extra={
                "model": self._model,
                "prompt_tokens": getattr(usage, "prompt_tokens", 0),
                "completion_tokens": getattr(usage, "completion_tokens", 0),
            },
        )
        return answer or EMPTY_ANSWER

    async def aclose(self) -> None:
        await self._client.close()


def create_llm_client(api_key: str, base_url: str, model: str) -> LLMClient:
    logger.info("creating llm client", extra={"base_url": base_url, "model": model})
    return LLMClient(AsyncOpenAI(api_key=api_key, base_url=base_url), model=model)
