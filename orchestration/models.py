"""Orchestration models - ExecutionContext, RunOutcome, ExecutionResult."""

from dataclasses import dataclass, field
from datetime import datetime

from core.domain.entities import ExecutionRecord, StepLog
from core.domain.enums import ExecutionOutcome, GateAction
from core.domain.value_objects import ExecutionID
from orderdesk_sdk.utils.datetime import utc_now


@dataclass
class ExecutionContext:
    """State of one run. Owned by a single orchestrator call, never shared."""

    execution_id: ExecutionID
    user_id: str
    message_id: str
    from_address: str
    subject: str
    body: str
    agent_type: str
    started_at: datetime
    steps: list[StepLog] = field(default_factory=list)

    @classmethod
    def create(
        cls,
        user_id: str,
        message_id: str,
        from_address: str,
        subject: str | None,
        body: str | None,
        agent_type: str,
    ) -> "ExecutionContext":
        return cls(
            execution_id=ExecutionID.generate(),
            user_id=user_id,
            message_id=message_id,
            from_address=from_address,
            subject=subject or "",
            body=body or "",
            agent_type=agent_type,
            started_at=utc_now(),
        )


@dataclass
class RunOutcome:
    """How a run ended; filled in by the pipeline, read by the audit flush."""

    outcome: ExecutionOutcome | None = None
    reply: str | None = None
    escalation_reason: str | None = None
    action: GateAction | None = None
    approval_item_id: str | None = None

    @property
    def decided(self) -> bool:
        return self.outcome is not None

    @property
    def success(self) -> bool:
        return self.outcome is ExecutionOutcome.RESOLVED

    def resolve(self, reply: str, action: GateAction, approval_item_id: str | None = None) -> None:
        self.outcome = ExecutionOutcome.RESOLVED
        self.reply = reply
        self.action = action
        self.approval_item_id = approval_item_id

    def escalate(self, reason: str) -> None:
        self.outcome = ExecutionOutcome.ESCALATED
        self.escalation_reason = reason

    def fatal(self, reason: str) -> None:
        self.outcome = ExecutionOutcome.FATAL
        self.escalation_reason = reason


@dataclass(frozen=True)
class ExecutionResult:
    """What the caller gets back from a run."""

    execution_id: str
    success: bool
    reply: str | None = None
    escalation_reason: str | None = None
    audit_trail: tuple[StepLog, ...] = ()
    action: GateAction | None = None
    approval_item_id: str | None = None
    replayed: bool = False

    @classmethod
    def from_run(cls, context: ExecutionContext, outcome: RunOutcome) -> "ExecutionResult":
        return cls(
            execution_id=str(context.execution_id),
            success=outcome.success,
            reply=outcome.reply,
            escalation_reason=outcome.escalation_reason,
            audit_trail=tuple(context.steps),
            action=outcome.action,
            approval_item_id=outcome.approval_item_id,
        )

    @classmethod
    def from_record(cls, record: ExecutionRecord, replayed: bool = True) -> "ExecutionResult":
        return cls(
            execution_id=str(record.execution_id),
            success=record.success,
            reply=record.reply,
            escalation_reason=record.escalation_reason,
            audit_trail=tuple(record.steps),
            action=record.action,
            approval_item_id=record.approval_item_id,
            replayed=replayed,
        )

    def step_names(self) -> list[str]:
        return [step.step_name for step in self.audit_trail]
