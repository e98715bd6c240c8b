"""
Mock Language Model.

Echoes a short canned reply so runs can be exercised without an API key.
"""
import asyncio
from typing import List, Optional
import logging

from core.application.interfaces import ILanguageModel
from core.domain.exceptions import GenerationError


logger = logging.getLogger(__name__)

DEFAULT_REPLY = (
    "Hi there!\n\n"
    "Thanks for reaching out about your order. It is on its way and we will "
    "keep you posted as it moves.\n\n"
    "Best regards,\nCustomer Service Team"
)


class MockLanguageModel(ILanguageModel):
    """Mock implementation of the language model; prompts are kept in `prompts`."""

    def __init__(
        self,
        reply: str = DEFAULT_REPLY,
        fail_with: Optional[str] = None,
        delay_seconds: float = 0.0,
    ):
        self.reply = reply
        self.fail_with = fail_with
        self.delay_seconds = delay_seconds
        self.prompts: List[str] = []

    async def generate(self, prompt: str, max_tokens: int) -> str:
        self.prompts.append(prompt)
        if self.delay_seconds:
            await asyncio.sleep(self.delay_seconds)
        if self.fail_with:
            raise GenerationError(self.fail_with, collaborator="language_model")
        logger.info(f"Mock generation ({len(prompt)} char prompt, max {max_tokens} tokens)")
        return self.reply
