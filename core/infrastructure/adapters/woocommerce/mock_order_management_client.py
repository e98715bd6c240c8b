"""
Mock Order Management Client.

In-memory store for demos and tests; no WooCommerce store needed.
"""
import asyncio
from typing import Dict, List, Optional
import logging

from core.application.interfaces import IOrderManagementClient
from core.domain.entities import OrderRecord
from core.domain.exceptions import CollaboratorError


logger = logging.getLogger(__name__)


class MockOrderManagementClient(IOrderManagementClient):
    """
    Mock implementation of the order-management client.

    Orders are seeded with `add_order`. Set `fail_with` to make every
    lookup raise CollaboratorError, or `delay_seconds` to simulate a slow
    store.
    """

    def __init__(
        self,
        orders: Optional[List[OrderRecord]] = None,
        fail_with: Optional[str] = None,
        delay_seconds: float = 0.0,
    ):
        self._orders: Dict[str, OrderRecord] = {}
        self.fail_with = fail_with
        self.delay_seconds = delay_seconds
        self.calls: List[tuple] = []
        for order in orders or []:
            self.add_order(order)
        logger.info("MockOrderManagementClient initialized (in-memory)")

    def add_order(self, order: OrderRecord) -> None:
        """Add an order to the mock store."""
        self._orders[order.order_number] = order

    async def lookup_order_by_number(self, order_number: str) -> Optional[OrderRecord]:
        self.calls.append(("by_number", order_number))
        await self._simulate()
        order = self._orders.get(str(order_number).lstrip("#"))
        logger.info(f"Mock lookup order {order_number}: {'found' if order else 'not found'}")
        return order

    async def lookup_orders_by_customer(self, customer_address: str) -> List[OrderRecord]:
        self.calls.append(("by_customer", customer_address))
        await self._simulate()
        address = customer_address.strip().lower()
        orders = [
            order
            for order in self._orders.values()
            if order.customer_email and order.customer_email.lower() == address
        ]
        logger.info(f"Mock lookup orders for {customer_address}: {len(orders)} found")
        return orders

    async def _simulate(self) -> None:
        if self.delay_seconds:
            await asyncio.sleep(self.delay_seconds)
        if self.fail_with:
            raise CollaboratorError(self.fail_with, collaborator="order_management")
