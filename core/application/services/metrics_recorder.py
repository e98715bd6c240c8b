"""
Metrics Recorder.

Per-user, per-agent counters. Metrics are advisory: the audit trail is
the authoritative record, so a failed increment is logged and dropped.
"""
import asyncio
import logging
from collections import OrderedDict
from typing import Optional

from core.domain.entities import AgentMetrics
from core.domain.enums import ExecutionOutcome
from core.domain.repositories import MetricsRepository


logger = logging.getLogger(__name__)


class MetricsRecorder:
    """Record one outcome per execution id."""

    def __init__(
        self,
        store: MetricsRepository,
        max_tracked_executions: int = 10_000,
        timeout_seconds: float = 5.0,
    ):
        self._store = store
        self._timeout = timeout_seconds
        self._recorded: "OrderedDict[str, None]" = OrderedDict()
        self._max_tracked = max_tracked_executions

    def already_recorded(self, execution_id: str) -> bool:
        return str(execution_id) in self._recorded

    async def record(
        self,
        user_id: str,
        agent_type: str,
        outcome: ExecutionOutcome,
        execution_id: str,
    ) -> bool:
        """
        Increment attempts plus successes or failures.

        Returns:
            True if the counters were incremented, False if this execution
            was already recorded or the store failed
        """
        key = str(execution_id)
        if key in self._recorded:
            logger.debug(f"Metrics already recorded for execution {key}")
            return False
        self._remember(key)

        outcome_field = "successes" if outcome is ExecutionOutcome.RESOLVED else "failures"
        try:
            await self._increment(user_id, agent_type, "attempts")
            await self._increment(user_id, agent_type, outcome_field)
        except asyncio.TimeoutError:
            logger.warning(
                f"Metrics store timed out after {self._timeout}s for {user_id}/{agent_type}"
            )
            return False
        except Exception as e:
            logger.warning(f"Failed to update {agent_type} metrics for {user_id}: {e}")
            return False

        logger.info(f"Metrics updated for {user_id}/{agent_type}: {outcome_field} +1")
        return True

    async def get(self, user_id: str, agent_type: str) -> Optional[AgentMetrics]:
        return await self._store.get(user_id, agent_type)

    async def _increment(self, user_id: str, agent_type: str, field: str) -> None:
        await asyncio.wait_for(
            self._store.increment(user_id, agent_type, field), timeout=self._timeout
        )

    def _remember(self, key: str) -> None:
        self._recorded[key] = None
        while len(self._recorded) > self._max_tracked:
            self._recorded.popitem(last=False)
