"""
OpenAI language model adapter.

Chat completions through the async OpenAI client.
"""
from typing import Optional
import logging

from openai import AsyncOpenAI, OpenAIError

from core.application.interfaces import ILanguageModel
from core.domain.exceptions import GenerationError


logger = logging.getLogger(__name__)


class OpenAILanguageModel(ILanguageModel):
    """ILanguageModel backed by OpenAI chat completions."""

    def __init__(
        self,
        model: str = "gpt-4",
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        client: Optional[AsyncOpenAI] = None,
    ):
        self.model = model
        self._client = client or AsyncOpenAI(api_key=api_key, base_url=base_url)

    async def generate(self, prompt: str, max_tokens: int) -> str:
        if not prompt.strip():
            raise GenerationError("Empty prompt", reason="malformed_input")

        try:
            completion = await self._client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": prompt}],
                max_tokens=max_tokens,
            )
        except OpenAIError as e:
            raise GenerationError(f"OpenAI request failed: {e}", collaborator="openai") from e

        usage = getattr(completion, "usage", None)
        if usage is not None:
            logger.info(f"OpenAI {self.model} used {getattr(usage, 'total_tokens', 0)} tokens")

        if not completion.choices:
            return ""
        return (completion.choices[0].message.content or "").strip()
