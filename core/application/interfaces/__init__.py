"""Application layer interfaces."""
from abc import ABC, abstractmethod
from typing import List, Optional

from core.application.dtos import SentimentResult, TrackingInfo
from core.domain.entities import OrderRecord


class IOrderManagementClient(ABC):
    """
    Interface for the store's order-management system.

    Implementations translate transport and auth failures into
    CollaboratorError and report unknown orders as None / empty lists.
    """

    @abstractmethod
    async def lookup_order_by_number(self, order_number: str) -> Optional[OrderRecord]:
        """
        Get an order by its customer-facing number.

        Args:
            order_number: Order number as quoted by the customer

        Returns:
            OrderRecord if found, None otherwise

        Raises:
            CollaboratorError: If the store could not be queried
        """
        pass

    @abstractmethod
    async def lookup_orders_by_customer(self, customer_address: str) -> List[OrderRecord]:
        """
        Get the orders placed by a customer.

        Args:
            customer_address: Customer e-mail address

        Returns:
            Orders in any order; empty if the customer has none

        Raises:
            CollaboratorError: If the store could not be queried
        """
        pass


class ITrackingService(ABC):
    """Interface for the carrier tracking service."""

    @abstractmethod
    async def get_tracking(
        self,
        tracking_number: str,
        carrier_hint: Optional[str],
        caller_id: str,
    ) -> TrackingInfo:
        """
        Look up tracking data for a shipment.

        Args:
            tracking_number: Carrier tracking number
            carrier_hint: Carrier name or slug, if the store knows it
            caller_id: User whose quota the lookup is charged to

        Returns:
            TrackingInfo; `usage_limit_exceeded` is set when the quota is spent

        Raises:
            CollaboratorError: On transport, auth or timeout failures
        """
        pass


class ILanguageModel(ABC):
    """Interface for text generation."""

    @abstractmethod
    async def generate(self, prompt: str, max_tokens: int) -> str:
        """
        Generate a completion for a prompt.

        Raises:
            GenerationError: If the model is unavailable
        """
        pass


class ISentimentService(ABC):
    """Interface for sentiment scoring."""

    @abstractmethod
    async def score_sentiment(self, text: str) -> SentimentResult:
        """
        Score the sentiment of a text.

        Raises:
            SentimentUnavailableError: If the service cannot score the text
        """
        pass


class IReplySender(ABC):
    """
    Interface for outbound replies.

    Only the seam is provided here; real mail transport lives outside
    this package.
    """

    @abstractmethod
    async def send(
        self,
        to_address: str,
        subject: str,
        body: str,
        execution_id: str,
    ) -> None:
        """
        Send a reply to the customer.

        Raises:
            DeliveryError: If the reply could not be sent
        """
        pass


__all__ = [
    "IOrderManagementClient",
    "ITrackingService",
    "ILanguageModel",
    "ISentimentService",
    "IReplySender",
]
