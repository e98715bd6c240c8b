"""
Domain exception hierarchy.

Explicit types let the orchestrator apply the right step policy:
not-found halts, degraded enrichment continues, generation failure falls
back to a template, and anything else is treated as fatal.
"""

from __future__ import annotations

from typing import Optional


class OrderDeskError(Exception):
    """Base class for all agent errors."""

    reason: str = "error"

    def __init__(self, message: str, reason: Optional[str] = None) -> None:
        super().__init__(message)
        if reason:
            self.reason = reason


class OrderNotFoundError(OrderDeskError):
    """Order or customer could not be resolved in the store system."""

    reason = "order_not_found_in_store"


class CollaboratorError(OrderDeskError):
    """An external system failed (transport, auth, timeout, bad payload)."""

    reason = "collaborator_error"

    def __init__(
        self,
        message: str,
        reason: Optional[str] = None,
        collaborator: Optional[str] = None,
    ) -> None:
        super().__init__(message, reason)
        self.collaborator = collaborator


class TrackingUnavailableError(CollaboratorError):
    """Carrier tracking service could not be queried."""

    reason = "tracking_service_error"


class UsageLimitExceededError(TrackingUnavailableError):
    """Caller exhausted its tracking quota."""

    reason = "tracking_usage_limit_exceeded"


class GenerationError(CollaboratorError):
    """Language model unavailable or returned unusable output."""

    reason = "generation_failed"


class DeliveryError(CollaboratorError):
    """Outbound reply could not be sent."""

    reason = "delivery_failed"


class SentimentUnavailableError(CollaboratorError):
    """Sentiment service could not score the text."""

    reason = "sentiment_unavailable"


class PersistenceError(OrderDeskError):
    """Audit, queue, rule or metrics store failed."""

    reason = "persistence_error"


class DuplicateExecutionError(PersistenceError):
    """A run record already exists for this (user, message) pair."""

    reason = "duplicate_execution"


class DuplicateStepLogError(PersistenceError):
    """A step log with this (execution_id, step_order) is already stored."""

    reason = "duplicate_step_log"


class RunTimeoutError(OrderDeskError):
    """Run exceeded its overall wall-clock budget."""

    reason = "run_timeout"


__all__ = [
    "OrderDeskError",
    "OrderNotFoundError",
    "CollaboratorError",
    "TrackingUnavailableError",
    "UsageLimitExceededError",
    "GenerationError",
    "DeliveryError",
    "SentimentUnavailableError",
    "PersistenceError",
    "DuplicateExecutionError",
    "DuplicateStepLogError",
    "RunTimeoutError",
]
