from .execution_status import (
    ApprovalStatus,
    ExecutionOutcome,
    GateAction,
    LookupSource,
    StepStatus,
    TERMINAL_STEP_STATUSES,
)

__all__ = [
    "ApprovalStatus",
    "ExecutionOutcome",
    "GateAction",
    "LookupSource",
    "StepStatus",
    "TERMINAL_STEP_STATUSES",
]
