"""Outbound reply adapters."""
from .mock_reply_sender import MockReplySender

__all__ = ["MockReplySender"]
