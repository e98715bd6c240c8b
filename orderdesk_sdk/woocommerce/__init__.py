from .client import WooCommerceClient

__all__ = ["WooCommerceClient"]
