"""WooCommerce REST order JSON to domain OrderRecord mapper."""

from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from core.domain.entities import OrderLineItem, OrderRecord


# Meta keys used by the common shipment tracking plugins, in lookup order
TRACKING_NUMBER_META_KEYS = (
    "_tracking_number",
    "_shipment_tracking_number",
    "_tracking_code",
    "tracking_number",
    "shipstation_tracking_number",
)
CARRIER_META_KEYS = (
    "_tracking_provider",
    "_shipment_tracking_provider",
    "_shipping_carrier",
    "tracking_provider",
    "carrier",
)
SHIPMENT_TRACKING_ITEMS_KEY = "_wc_shipment_tracking_items"

# (substring of the shipping method title, carrier name)
SHIPPING_METHOD_CARRIERS = (
    ("ups", "UPS"),
    ("fedex", "FedEx"),
    ("usps", "USPS"),
    ("postal", "USPS"),
    ("dhl", "DHL"),
)


class WooCommerceOrderMapper:
    """Mapper for converting WooCommerce order JSON to OrderRecord."""

    @staticmethod
    def to_order_record(data: Dict[str, Any]) -> OrderRecord:
        """Convert a WooCommerce order to an OrderRecord.

        Args:
            data: Raw order JSON from /wp-json/wc/v3/orders

        Returns:
            OrderRecord domain entity

        Raises:
            ValueError: If the order has neither a number nor an id
        """
        number = data.get("number") or data.get("id")
        if number in (None, ""):
            raise ValueError("WooCommerce order data must contain 'number' or 'id'")

        billing = data.get("billing") or {}
        name = " ".join(
            part for part in (billing.get("first_name"), billing.get("last_name")) if part
        ).strip()

        meta = _meta_dict(data.get("meta_data") or [])
        shipping_lines = data.get("shipping_lines") or []
        shipping_method = shipping_lines[0].get("method_title") if shipping_lines else None

        return OrderRecord(
            order_number=str(number),
            status=str(data.get("status") or "unknown"),
            order_date=_parse_date(data.get("date_created_gmt") or data.get("date_created")),
            customer_name=name or None,
            customer_email=billing.get("email") or None,
            line_items=tuple(
                OrderLineItem(
                    name=str(item.get("name") or ""),
                    quantity=int(item.get("quantity") or 1),
                    price=str(item["price"]) if item.get("price") is not None else None,
                )
                for item in data.get("line_items") or []
            ),
            tracking_number=WooCommerceOrderMapper.tracking_number(meta),
            carrier=WooCommerceOrderMapper.carrier(meta, shipping_method),
            shipping_method=shipping_method,
            store_order_id=str(data["id"]) if data.get("id") is not None else None,
        )

    @staticmethod
    def to_order_records(orders: Iterable[Dict[str, Any]]) -> List[OrderRecord]:
        return [WooCommerceOrderMapper.to_order_record(o) for o in orders]

    @staticmethod
    def tracking_number(meta: Dict[str, Any]) -> Optional[str]:
        for key in TRACKING_NUMBER_META_KEYS:
            value = meta.get(key)
            if isinstance(value, str) and value.strip():
                return value.strip()

        first = _first_tracking_item(meta)
        if first and first.get("tracking_number"):
            return str(first["tracking_number"]).strip()
        return None

    @staticmethod
    def carrier(meta: Dict[str, Any], shipping_method: Optional[str]) -> Optional[str]:
        for key in CARRIER_META_KEYS:
            value = meta.get(key)
            if isinstance(value, str) and value.strip():
                return value.strip()

        first = _first_tracking_item(meta)
        if first and first.get("tracking_provider"):
            return str(first["tracking_provider"]).strip()

        if shipping_method:
            method = shipping_method.lower()
            for needle, carrier in SHIPPING_METHOD_CARRIERS:
                if needle in method:
                    return carrier
        return None


def _meta_dict(meta_data: List[Dict[str, Any]]) -> Dict[str, Any]:
    # First occurrence wins when a key is repeated
    meta: Dict[str, Any] = {}
    for entry in meta_data:
        key = entry.get("key")
        if key and key not in meta:
            meta[key] = entry.get("value")
    return meta


def _first_tracking_item(meta: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    items = meta.get(SHIPMENT_TRACKING_ITEMS_KEY)
    if isinstance(items, list) and items and isinstance(items[0], dict):
        return items[0]
    return None


def _parse_date(value: Any) -> Optional[datetime]:
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        return None
    # WooCommerce *_gmt fields carry no offset
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed
