"""AWS Comprehend infrastructure adapter."""

from .sentiment_service import ComprehendSentimentService

__all__ = ["ComprehendSentimentService"]
