import json
import logging

import httpx

from coach.ai.adapter import CoachGenerationError, CoachMessage, CoachMessageGenerator
from coach.ai.parsing import parse_guidance
from coach.ai.prompts import describe_context, get_prompt


logger = logging.getLogger(__name__)

_CHAT_FALLBACK = "I apologize, I cannot respond at this time."


class OpenAICoachGenerator(CoachMessageGenerator):
    name = "openai"

    def __init__(
        self,
        api_key: str,
        model: str,
        base_url: str = "https://api.openai.com/v1",
        timeout: float = 30,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._api_key = api_key
        self._model = model
        self._base_url = base_url.rstrip("/")
        self._client = client or httpx.AsyncClient(timeout=timeout)

    def _headers(self) -> dict:
        return {"Authorization": f"Bearer {self._api_key}"}

    async def _complete(
        self, messages: list[dict], temperature: float, max_tokens: int
    ) -> str | None:
        payload = {
            "model": self._model,
            "messages": messages,
            "temperature": temperature,
            "max_tokens": max_tokens,
        }
        try:
            response = await self._client.post(
                f"{self._base_url}/chat/completions",
                headers=self._headers(),
                json=payload,
            )
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.exception("Completion request failed", extra={"model": self._model})
            raise CoachGenerationError("Failed to generate AI coach response") from exc

        choices = data.get("choices") or []
        if not choices:
            return None
        return (choices[0].get("message") or {}).get("content")

    async def generate_guidance(self, user_context: dict) -> CoachMessage:
        messages = [
            {"role": "system", "content": get_prompt("coach_introduction")},
            {
                "role": "user",
                "content": f"{get_prompt('daily_guidance')}\n\n{describe_context(user_context)}",
            },
        ]
        raw = await self._complete(messages, temperature=0.8, max_tokens=400)
        return parse_guidance(raw, user_context)

    async def chat(self, message: str, context: dict | None = None) -> str:
        user_content = message
        if context:
            user_content = f"{message}\n\nContext: {json.dumps(context, default=str)}"
        messages = [
            {"role": "system", "content": get_prompt("coach_introduction")},
            {"role": "user", "content": user_content},
        ]
        reply = await self._complete(messages, temperature=0.7, max_tokens=500)
        return reply or _CHAT_FALLBACK

    async def aclose(self) -> None:
        await self._client.aclose()
