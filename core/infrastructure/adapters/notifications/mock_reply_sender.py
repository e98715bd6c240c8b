"""
Mock Reply Sender Implementation.

Logs replies instead of actually sending them.
"""
from typing import Optional
import logging

from core.application.interfaces import IReplySender
from core.domain.exceptions import DeliveryError


logger = logging.getLogger(__name__)


class MockReplySender(IReplySender):
    """
    Mock implementation of the reply sender.

    Records every reply in `replies_sent`. Set `fail_with` to make the
    next sends raise DeliveryError.
    """

    def __init__(self, fail_with: Optional[str] = None):
        """Initialize mock reply sender."""
        self.replies_sent = []
        self.fail_with = fail_with
        logger.info("MockReplySender initialized (console logging)")

    async def send(
        self,
        to_address: str,
        subject: str,
        body: str,
        execution_id: str,
    ) -> None:
        """
        Simulate sending a reply.

        Args:
            to_address: Customer address
            subject: Reply subject
            body: Reply text
            execution_id: Execution ID
        """
        if self.fail_with:
            logger.error(f"❌ Reply to {to_address} failed: {self.fail_with}")
            raise DeliveryError(self.fail_with, collaborator="reply_sender")

        self.replies_sent.append(
            {
                "to": to_address,
                "subject": subject,
                "body": body,
                "execution_id": str(execution_id),
            }
        )

        logger.info(
            f"✅ 📧 REPLY SENT:\n"
            f"   Execution: {execution_id}\n"
            f"   To: {to_address}\n"
            f"   Subject: {subject}"
        )

    def clear(self) -> None:
        """Clear sent replies (for testing)."""
        self.replies_sent.clear()
