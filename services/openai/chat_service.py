"""Chat completion helper for spoken assistant replies."""

import logging
from typing import Optional

from openai import AsyncOpenAI

from services.openai.prompts import assistant_system_prompt
from services.realtime.errors import CompletionFailed

log = logging.getLogger(__name__)

CHAT_MODEL = "gpt-4o-mini"


class ChatCompletionService:
    """Answer a single user utterance; no conversation memory is kept."""

    def __init__(
        self,
        client: AsyncOpenAI,
        *,
        model: str = CHAT_MODEL,
        max_tokens: int = 500,
        temperature: float = 0.7,
        system_prompt: Optional[str] = None,
    ) -> None:
        if client is None:
            raise ValueError("AsyncOpenAI client is required.")
        self.client = client
        self.model = model
        self.max_tokens = max_tokens
        self.temperature = temperature
        self.system_prompt = system_prompt or assistant_system_prompt()

    async def complete(self, user_text: str) -> str:
        """Return the assistant reply for ``user_text``.

        Raises:
            CompletionFailed: if the request fails or returns no content.
        """
        try:
            completion = await self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": self.system_prompt},
                    {"role": "user", "content": user_text},
                ],
                max_tokens=self.max_tokens,
                temperature=self.temperature,
            )
        except Exception as exc:
            log.error("OpenAI chat completion failed: %s", exc)
            raise CompletionFailed(str(exc)) from exc

        try:
            content = completion.choices[0].message.content
        except (AttributeError, IndexError, TypeError) as exc:
            raise CompletionFailed("Malformed completion response.") from exc
        reply = (content or "").strip()
        if not reply:
            raise CompletionFailed("Completion response did not include text.")
        return reply
