from orderdesk_sdk.logging import get_logger
from orderdesk_sdk.errors import WooCommerceAPIError
logger = get_logger("WooCommerceAPI")

# ====================== 🛒 WOOCOMMERCE API ======================
import asyncio
from typing import Any, Dict, List, Optional

import aiohttp


class WooCommerceClient:
    """
    WooCommerce REST API (v3) client.

    Pure order read operations, no knowledge of the agent pipeline.
    Returns raw order dicts exactly as WooCommerce serializes them.
    """

    API_PREFIX = "/wp-json/wc/v3"

    def __init__(
        self,
        store_url: str,
        consumer_key: str,
        consumer_secret: str,
        timeout_seconds: float = 10.0,
    ) -> None:
        """
        Args:
            store_url: Shop base URL (e.g. https://shop.example.com)
            consumer_key: REST API consumer key
            consumer_secret: REST API consumer secret
            timeout_seconds: Total timeout for a single HTTP request
        """
        self.store_url = store_url.rstrip("/")
        self._auth = aiohttp.BasicAuth(consumer_key, consumer_secret)
        self._timeout = aiohttp.ClientTimeout(total=timeout_seconds)

    async def get_order(self, order_id: str) -> Optional[Dict[str, Any]]:
        """
        Fetch a single order by its WooCommerce ID.

        Returns:
            Raw order dict, or None when WooCommerce answers 404.
        """
        status, payload = await self._request("GET", f"/orders/{order_id}")
        if status == 404:
            return None
        return payload

    async def search_orders(
        self,
        search: str,
        per_page: int = 20,
    ) -> List[Dict[str, Any]]:
        """
        Full-text order search, newest first.

        WooCommerce matches the term against order number, billing email
        and customer names.
        """
        params = {
            "search": search,
            "per_page": str(per_page),
            "orderby": "date",
            "order": "desc",
        }
        status, payload = await self._request("GET", "/orders", params=params)
        if status == 404 or not payload:
            return []
        return list(payload)

    async def find_order_by_number(self, order_number: str) -> Optional[Dict[str, Any]]:
        """
        Resolve a customer-facing order number.

        Tries the direct ID lookup first, then a search restricted to exact
        `number` matches (stores with sequential order number plugins).
        """
        order = await self.get_order(order_number)
        if order is not None:
            return order

        for candidate in await self.search_orders(order_number):
            if str(candidate.get("number")) == str(order_number):
                return candidate
        return None

    async def find_orders_by_email(self, email: str) -> List[Dict[str, Any]]:
        """Orders whose billing email matches `email` exactly (case-insensitive)."""
        target = email.strip().lower()
        return [
            order for order in await self.search_orders(target, per_page=50)
            if (order.get("billing") or {}).get("email", "").strip().lower() == target
        ]

    async def _request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, str]] = None,
    ) -> tuple[int, Any]:
        url = f"{self.store_url}{self.API_PREFIX}{path}"
        logger.info(f"WooCommerce API Request: {method} {path}")

        try:
            async with aiohttp.ClientSession(auth=self._auth, timeout=self._timeout) as session:
                async with session.request(
                    method,
                    url,
                    params=params,
                    headers={"Content-Type": "application/json"},
                ) as response:
                    if response.status == 404:
                        return 404, None
                    if response.status >= 400:
                        error_text = await response.text()
                        raise WooCommerceAPIError(
                            f"WooCommerce API error: {response.status} - {error_text[:200]}",
                            status_code=response.status,
                        )
                    return response.status, await response.json()
        except asyncio.TimeoutError as e:
            raise WooCommerceAPIError(f"WooCommerce request timed out: {method} {path}") from e
        except aiohttp.ClientError as e:
            raise WooCommerceAPIError(f"WooCommerce request failed: {e}") from e
