"""
Execution Status Enums.

Status values for step logs, runs and approval items.
"""
from enum import Enum


class StepStatus(str, Enum):
    """Lifecycle of a single pipeline step."""

    STARTED = "started"
    COMPLETED = "completed"
    FAILED = "failed"
    SKIPPED = "skipped"

    @property
    def is_terminal(self) -> bool:
        return self is not StepStatus.STARTED


TERMINAL_STEP_STATUSES = frozenset(
    {StepStatus.COMPLETED, StepStatus.FAILED, StepStatus.SKIPPED}
)


class ExecutionOutcome(str, Enum):
    """How a run terminated."""

    RESOLVED = "resolved"
    ESCALATED = "escalated"
    FATAL = "fatal"


class LookupSource(str, Enum):
    """Provenance of a resolved order identity."""

    EXTRACTED = "extracted"
    CUSTOMER_LOOKUP = "customer_lookup"


class ApprovalStatus(str, Enum):
    """Review state of a queued reply."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class GateAction(str, Enum):
    """Approval gate decision."""

    AUTO_SEND = "auto_send"
    QUEUE = "queue"
