"""SQLAlchemy agent rule and metrics repositories."""
from typing import Optional
import logging

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from core.domain.entities import AgentMetrics, AgentRule
from core.domain.exceptions import PersistenceError
from core.domain.repositories import AgentRuleRepository, MetricsRepository
from core.infrastructure.database.models import AgentMetricsModel, AgentRuleModel
from orderdesk_sdk.utils.datetime import utc_now


logger = logging.getLogger(__name__)


class SQLAlchemyAgentRuleRepository(AgentRuleRepository):
    """Read access to agent_rules."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def get_rule(self, user_id: str, agent_type: str) -> Optional[AgentRule]:
        try:
            async with self._session_factory() as session:
                result = await session.execute(
                    select(AgentRuleModel).where(
                        AgentRuleModel.user_id == user_id,
                        AgentRuleModel.agent_type == agent_type,
                    )
                )
                model = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to load agent rule: {e}") from e

        if model is None:
            return None
        return AgentRule(
            user_id=model.user_id,
            agent_type=model.agent_type,
            is_enabled=model.is_enabled,
            requires_approval=model.requires_approval,
            name=model.name,
        )


class SQLAlchemyMetricsRepository(MetricsRepository):
    """
    Counters in agent_metrics.

    Increments are a single `UPDATE ... SET col = col + n` so concurrent
    runs never lose updates. The row is created on first use; a racing
    insert from another writer is ignored.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def increment(self, user_id: str, agent_type: str, field: str, amount: int = 1) -> None:
        if field not in AgentMetrics.COUNTER_FIELDS:
            raise ValueError(f"Unknown metrics counter: {field}")

        column = getattr(AgentMetricsModel, field)
        try:
            await self._ensure_row(user_id, agent_type)
            async with self._session_factory() as session:
                await session.execute(
                    update(AgentMetricsModel)
                    .where(
                        AgentMetricsModel.user_id == user_id,
                        AgentMetricsModel.agent_type == agent_type,
                    )
                    .values({column: column + amount, AgentMetricsModel.last_activity_at: utc_now()})
                )
                await session.commit()
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to increment {field}: {e}") from e

    async def get(self, user_id: str, agent_type: str) -> Optional[AgentMetrics]:
        try:
            async with self._session_factory() as session:
                model = await self._find(session, user_id, agent_type)
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to load metrics: {e}") from e

        if model is None:
            return None
        return AgentMetrics(
            user_id=model.user_id,
            agent_type=model.agent_type,
            attempts=model.attempts,
            successes=model.successes,
            failures=model.failures,
            last_activity_at=model.last_activity_at,
        )

    async def _ensure_row(self, user_id: str, agent_type: str) -> None:
        async with self._session_factory() as session:
            if await self._find(session, user_id, agent_type) is not None:
                return
            session.add(
                AgentMetricsModel(
                    user_id=user_id,
                    agent_type=agent_type,
                    attempts=0,
                    successes=0,
                    failures=0,
                )
            )
            try:
                await session.commit()
            except IntegrityError:
                # Another writer created the row first
                await session.rollback()

    @staticmethod
    async def _find(session: AsyncSession, user_id: str, agent_type: str) -> Optional[AgentMetricsModel]:
        result = await session.execute(
            select(AgentMetricsModel).where(
                AgentMetricsModel.user_id == user_id,
                AgentMetricsModel.agent_type == agent_type,
            )
        )
        return result.scalar_one_or_none()
