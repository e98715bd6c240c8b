"""Approval queue item - a composed reply waiting for human review."""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional
from uuid import uuid4

from ..enums import ApprovalStatus


@dataclass
class ApprovalQueueItem:
    """
    Persisted decision artifact created when the approval gate queues a reply.

    Everything except the review fields (status, reviewed_by, reviewed_at,
    rejection_reason) is fixed at creation time.
    """
    user_id: str
    message_id: str
    agent_type: str
    execution_id: str
    customer_email: str
    subject: str
    body: str
    proposed_response: str
    confidence: int
    classification: str = "order_status"
    audit_trail: List[Dict[str, Any]] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)
    status: ApprovalStatus = ApprovalStatus.PENDING
    id: str = field(default_factory=lambda: str(uuid4()))
    created_at: Optional[datetime] = None
    reviewed_by: Optional[str] = None
    reviewed_at: Optional[datetime] = None
    rejection_reason: Optional[str] = None

    REVIEW_FIELDS = frozenset({"status", "reviewed_by", "reviewed_at", "rejection_reason"})

    def __post_init__(self):
        self.status = ApprovalStatus(self.status)
        if not 0 <= self.confidence <= 100:
            raise ValueError(f"confidence must be within 0-100, got: {self.confidence}")

    @property
    def is_pending(self) -> bool:
        return self.status is ApprovalStatus.PENDING

    def apply_review(self, patch: Dict[str, Any]) -> None:
        """Apply a reviewer patch; only review fields may change."""
        illegal = set(patch) - self.REVIEW_FIELDS
        if illegal:
            raise ValueError(f"Approval items are immutable except review fields: {sorted(illegal)}")
        for key, value in patch.items():
            if key == "status":
                value = ApprovalStatus(value)
            setattr(self, key, value)
