"""OpenAI infrastructure adapter."""

from .language_model import OpenAILanguageModel
from .mock_language_model import MockLanguageModel

__all__ = ["MockLanguageModel", "OpenAILanguageModel"]
