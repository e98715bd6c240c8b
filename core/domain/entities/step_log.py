"""
Step log entity.

One immutable record per attempted pipeline step. A StepLog only exists
once the step reached a terminal status; the in-flight ("started") state
lives in the orchestration layer and is never persisted.
"""
from dataclasses import dataclass, field, fields, is_dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Optional
from uuid import UUID

from ..enums import StepStatus, TERMINAL_STEP_STATUSES


def to_jsonable(value: Any) -> Any:
    """Convert snapshots (dataclasses, enums, datetimes) into plain JSON types."""
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, (UUID, Decimal)):
        return str(value)
    if is_dataclass(value) and not isinstance(value, type):
        return {f.name: to_jsonable(getattr(value, f.name)) for f in fields(value)}
    if isinstance(value, dict):
        return {str(k): to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [to_jsonable(v) for v in value]
    return str(value)


@dataclass(frozen=True)
class StepLog:
    """Terminal audit record of a single pipeline step."""

    step_name: str
    step_order: int
    status: StepStatus
    started_at: datetime
    ended_at: datetime
    input_data: Dict[str, Any] = field(default_factory=dict)
    output_data: Optional[Dict[str, Any]] = None
    error_details: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None

    def __post_init__(self):
        status = StepStatus(self.status)
        if status not in TERMINAL_STEP_STATUSES:
            raise ValueError(
                f"StepLog requires a terminal status, got: {status.value}"
            )
        if self.step_order < 1:
            raise ValueError(f"step_order must be >= 1, got: {self.step_order}")
        if self.ended_at < self.started_at:
            raise ValueError("ended_at cannot precede started_at")

        # Snapshots are copied so later mutation by the caller cannot leak in
        object.__setattr__(self, "status", status)
        object.__setattr__(self, "input_data", to_jsonable(self.input_data or {}))
        object.__setattr__(self, "output_data", to_jsonable(self.output_data))
        object.__setattr__(self, "metadata", to_jsonable(self.metadata))

    @property
    def duration_ms(self) -> int:
        return int((self.ended_at - self.started_at).total_seconds() * 1000)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "step_name": self.step_name,
            "step_order": self.step_order,
            "status": self.status.value,
            "started_at": self.started_at.isoformat(),
            "ended_at": self.ended_at.isoformat(),
            "duration_ms": self.duration_ms,
            "input_data": self.input_data,
            "output_data": self.output_data,
            "error_details": self.error_details,
            "metadata": self.metadata,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "StepLog":
        return cls(
            step_name=data["step_name"],
            step_order=int(data["step_order"]),
            status=StepStatus(data["status"]),
            started_at=_parse_datetime(data["started_at"]),
            ended_at=_parse_datetime(data["ended_at"]),
            input_data=data.get("input_data") or {},
            output_data=data.get("output_data"),
            error_details=data.get("error_details"),
            metadata=data.get("metadata"),
        )


def _parse_datetime(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value))
