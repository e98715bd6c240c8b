"""WooCommerce infrastructure adapter."""

from .mapper import WooCommerceOrderMapper
from .mock_order_management_client import MockOrderManagementClient
from .order_management_client import WooCommerceOrderManagementClient

__all__ = ["MockOrderManagementClient", "WooCommerceOrderMapper", "WooCommerceOrderManagementClient"]
