"""Domain value objects - pure Python immutable types."""

from dataclasses import dataclass
from uuid import UUID, uuid4


@dataclass(frozen=True)
class ExecutionID:
    """Unique identifier of one agent run; keys every audit record it produces."""

    value: UUID

    @classmethod
    def generate(cls) -> "ExecutionID":
        """Generate a new ExecutionID."""
        return cls(value=uuid4())

    @classmethod
    def parse(cls, raw: str) -> "ExecutionID":
        """Rebuild an ExecutionID from its string form."""
        return cls(value=UUID(str(raw)))

    def __str__(self) -> str:
        """Return string representation."""
        return str(self.value)
