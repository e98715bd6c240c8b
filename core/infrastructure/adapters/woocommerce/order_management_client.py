"""
WooCommerce order-management adapter.

Implements IOrderManagementClient on top of the raw WooCommerce client.
"""
from typing import List, Optional
import logging

from core.application.interfaces import IOrderManagementClient
from core.domain.entities import OrderRecord
from core.domain.exceptions import CollaboratorError
from core.infrastructure.adapters.woocommerce.mapper import WooCommerceOrderMapper
from orderdesk_sdk.errors import WooCommerceAPIError
from orderdesk_sdk.woocommerce import WooCommerceClient


logger = logging.getLogger(__name__)


class WooCommerceOrderManagementClient(IOrderManagementClient):
    """Order lookups against a WooCommerce store."""

    def __init__(self, client: WooCommerceClient):
        self._client = client

    async def lookup_order_by_number(self, order_number: str) -> Optional[OrderRecord]:
        try:
            data = await self._client.find_order_by_number(order_number)
        except WooCommerceAPIError as e:
            raise CollaboratorError(str(e), collaborator="woocommerce") from e

        if data is None:
            logger.info(f"WooCommerce order {order_number} not found")
            return None
        return WooCommerceOrderMapper.to_order_record(data)

    async def lookup_orders_by_customer(self, customer_address: str) -> List[OrderRecord]:
        try:
            orders = await self._client.find_orders_by_email(customer_address)
        except WooCommerceAPIError as e:
            raise CollaboratorError(str(e), collaborator="woocommerce") from e

        logger.info(f"WooCommerce returned {len(orders)} order(s) for {customer_address}")
        return WooCommerceOrderMapper.to_order_records(orders)
