"""
Order Enrichment Adapter.

Fetches the canonical order from the order-management collaborator,
either directly by number or from the customer's order history.
"""
import asyncio
import logging
from datetime import datetime, timezone
from typing import Optional

from core.application.interfaces import IOrderManagementClient
from core.domain.entities import EnrichedOrder, OrderRecord
from core.domain.exceptions import CollaboratorError


logger = logging.getLogger(__name__)

_OLDEST = datetime.min.replace(tzinfo=timezone.utc)


def _order_sort_key(order: OrderRecord) -> datetime:
    if order.order_date is None:
        return _OLDEST
    if order.order_date.tzinfo is None:
        return order.order_date.replace(tzinfo=timezone.utc)
    return order.order_date


class OrderEnrichmentAdapter:
    """
    Fetch an order by number, or the most recent order of a customer.

    Not found is returned as None. Transport, auth and timeout failures
    are raised as CollaboratorError.
    """

    def __init__(self, client: IOrderManagementClient, timeout_seconds: float = 10.0):
        self._client = client
        self._timeout = timeout_seconds

    async def fetch(
        self,
        order_number: Optional[str] = None,
        customer_address: Optional[str] = None,
    ) -> Optional[EnrichedOrder]:
        if not order_number and not customer_address:
            raise ValueError("Either order_number or customer_address is required")

        if order_number:
            logger.info(f"Looking up order {order_number}")
            order = await self._call(self._client.lookup_order_by_number(order_number))
        else:
            logger.info(f"Looking up most recent order for {customer_address}")
            orders = await self._call(self._client.lookup_orders_by_customer(customer_address))
            order = max(orders, key=_order_sort_key) if orders else None

        if order is None:
            logger.warning(
                f"No order found for {order_number or customer_address}"
            )
            return None
        return EnrichedOrder(order=order)

    async def _call(self, coro):
        try:
            return await asyncio.wait_for(coro, timeout=self._timeout)
        except asyncio.TimeoutError as e:
            raise CollaboratorError(
                f"Order management system timed out after {self._timeout}s",
                reason="order_lookup_timeout",
                collaborator="order_management",
            ) from e
