"""Per-user agent configuration and aggregate counters."""
from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class AgentRule:
    """
    Behaviour switch for one agent type of one user.

    Read-only to the pipeline. Auto-send requires an enabled rule with
    requires_approval explicitly set to False.
    """
    user_id: str
    agent_type: str
    is_enabled: bool = True
    requires_approval: bool = True
    name: Optional[str] = None

    @property
    def allows_auto_send(self) -> bool:
        return self.is_enabled and not self.requires_approval


@dataclass
class AgentMetrics:
    """Advisory run counters; the audit trail is the authoritative record."""
    user_id: str
    agent_type: str
    attempts: int = 0
    successes: int = 0
    failures: int = 0
    last_activity_at: Optional[datetime] = None

    COUNTER_FIELDS = ("attempts", "successes", "failures")

    @property
    def success_rate(self) -> float:
        if not self.attempts:
            return 0.0
        return round(self.successes / self.attempts * 100, 2)
