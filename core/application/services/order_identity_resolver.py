"""
Order Identity Resolver.

Finds the order a customer is asking about in the message text.

Patterns are tried in a fixed priority order against "<subject> <body>";
the first pattern that matches anywhere wins. When a message mentions
several numbers nothing tries to work out which one is the order: the
priority list is the only tie-break.
"""
import logging
import re
from typing import Optional, Pattern, Tuple

from core.domain.entities import OrderLookupResult


logger = logging.getLogger(__name__)


# (name, compiled pattern) in priority order; group 1 is the order number
EXTRACTION_PATTERNS: Tuple[Tuple[str, Pattern[str]], ...] = (
    ("hash_marker", re.compile(r"#(\d+)")),
    ("order_phrase", re.compile(r"order[:\s]*(\d+)", re.IGNORECASE)),
    ("bare_digits", re.compile(r"(\d{4,6})")),
)


class OrderIdentityResolver:
    """Extract an order number from an inbound message."""

    def __init__(self, patterns: Tuple[Tuple[str, Pattern[str]], ...] = EXTRACTION_PATTERNS):
        self._patterns = patterns

    def resolve(
        self,
        subject: Optional[str],
        body: Optional[str],
        from_address: Optional[str] = None,
    ) -> OrderLookupResult:
        """
        Resolve the order identity of a message.

        Args:
            subject: Message subject
            body: Message body
            from_address: Sender address (only logged; the history lookup
                keyed by it happens in the order enrichment step)

        Returns:
            OrderLookupResult; found=False with source customer_lookup when
            no pattern matches
        """
        text = f"{subject or ''} {body or ''}"

        for name, pattern in self._patterns:
            match = pattern.search(text)
            if match:
                order_number = match.group(1)
                logger.info(f"Order number {order_number} extracted via {name}")
                return OrderLookupResult.extracted(order_number, name)

        logger.info(f"No order number in message from {from_address}, customer lookup required")
        return OrderLookupResult.needs_customer_lookup()
