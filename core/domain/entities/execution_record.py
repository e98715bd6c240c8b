"""Execution record - the persisted summary of one agent run."""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Tuple

from ..enums import ExecutionOutcome, GateAction
from .step_log import StepLog


@dataclass(frozen=True)
class ExecutionRecord:
    """
    One row per (user_id, message_id).

    Written once when the run's audit scope is released; a second record for
    the same message is rejected so replays resolve to the first run.
    """
    execution_id: str
    user_id: str
    message_id: str
    agent_type: str
    outcome: ExecutionOutcome
    started_at: datetime
    finished_at: datetime
    reply: Optional[str] = None
    escalation_reason: Optional[str] = None
    action: Optional[GateAction] = None
    approval_item_id: Optional[str] = None
    steps: Tuple[StepLog, ...] = field(default_factory=tuple)

    @property
    def success(self) -> bool:
        return self.outcome is ExecutionOutcome.RESOLVED
