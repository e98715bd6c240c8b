from orderdesk_sdk.logging import get_logger
from orderdesk_sdk.errors import (
    AfterShipAPIError,
    AfterShipNotFoundError,
    AfterShipRateLimitError,
    AfterShipTrackingExistsError,
)
logger = get_logger("AfterShipAPI")

# ====================== 🚚 AFTERSHIP API ======================
import asyncio
from typing import Any, Dict, Iterable, Optional

import aiohttp

# meta.code values AfterShip uses for "tracking already exists"
_ALREADY_EXISTS_CODES = {4003, 4005}


class AfterShipClient:
    """
    AfterShip tracking API (v4) client.

    Registers tracking numbers and reads back carrier checkpoints and
    delivery estimates. Returns the raw `data.tracking` object.
    """

    BASE_URL = "https://api.aftership.com/v4"

    def __init__(
        self,
        api_key: str,
        base_url: str = BASE_URL,
        timeout_seconds: float = 10.0,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._headers = {"as-api-key": api_key, "Content-Type": "application/json"}
        self._timeout = aiohttp.ClientTimeout(total=timeout_seconds)

    async def create_tracking(
        self,
        tracking_number: str,
        slug: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Register a tracking number. AfterShip auto-detects the carrier when
        `slug` is omitted.

        Raises:
            AfterShipTrackingExistsError: tracking already registered
        """
        tracking: Dict[str, Any] = {"tracking_number": tracking_number}
        if slug:
            tracking["slug"] = slug
        data = await self._request("POST", "/trackings", json={"tracking": tracking})
        return data["tracking"]

    async def get_tracking(self, slug: str, tracking_number: str) -> Dict[str, Any]:
        """
        Read an existing tracking.

        Raises:
            AfterShipNotFoundError: no tracking for this slug/number pair
        """
        data = await self._request("GET", f"/trackings/{slug}/{tracking_number}")
        return data["tracking"]

    async def get_or_create_tracking(
        self,
        tracking_number: str,
        slug: Optional[str] = None,
        fallback_slugs: Iterable[str] = ("usps", "ups", "fedex", "dhl"),
    ) -> Optional[Dict[str, Any]]:
        """
        Create-then-read flow.

        When the tracking already exists the hinted carrier is tried first,
        then each of `fallback_slugs`. Returns None if no carrier knows it.
        """
        try:
            return await self.create_tracking(tracking_number, slug=slug)
        except AfterShipTrackingExistsError:
            logger.info(f"Tracking {tracking_number} already exists, retrieving it")

        candidates = [slug] if slug else []
        candidates.extend(s for s in fallback_slugs if s != slug)
        for candidate in candidates:
            try:
                return await self.get_tracking(candidate, tracking_number)
            except AfterShipNotFoundError:
                continue
        return None

    async def _request(
        self,
        method: str,
        path: str,
        json: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        url = f"{self.base_url}{path}"
        logger.info(f"AfterShip API Request: {method} {path}")

        try:
            async with aiohttp.ClientSession(headers=self._headers, timeout=self._timeout) as session:
                async with session.request(method, url, json=json) as response:
                    body = await response.json(content_type=None)
        except asyncio.TimeoutError as e:
            raise AfterShipAPIError(f"AfterShip request timed out: {method} {path}") from e
        except aiohttp.ClientError as e:
            raise AfterShipAPIError(f"AfterShip request failed: {e}") from e

        meta = (body or {}).get("meta", {})
        code = meta.get("code", response.status)
        message = meta.get("message", "")

        if response.status == 429:
            raise AfterShipRateLimitError(
                f"AfterShip rate limit exceeded: {message}", status_code=429
            )
        if code in _ALREADY_EXISTS_CODES or "already exists" in message.lower():
            raise AfterShipTrackingExistsError(message, status_code=response.status)
        if response.status == 404:
            raise AfterShipNotFoundError(message or "Tracking not found", status_code=404)
        if response.status >= 400:
            raise AfterShipAPIError(
                f"AfterShip API error: {response.status} {code} - {message}",
                status_code=response.status,
            )
        return body.get("data", {})
