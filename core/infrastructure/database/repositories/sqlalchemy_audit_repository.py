"""
SQLAlchemy audit repositories.

Step logs and run records. Each call runs in its own short transaction so
a step log is durable as soon as the step ends.
"""
from typing import List, Optional
import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from core.domain.entities import ExecutionRecord, StepLog
from core.domain.enums import ExecutionOutcome, GateAction, StepStatus
from core.domain.exceptions import DuplicateExecutionError, DuplicateStepLogError, PersistenceError
from core.domain.repositories import AuditLogRepository, ExecutionRepository
from core.infrastructure.database.models import AgentExecutionLogModel, AgentExecutionModel


logger = logging.getLogger(__name__)


def _log_to_domain(model: AgentExecutionLogModel) -> StepLog:
    return StepLog(
        step_name=model.step_name,
        step_order=model.step_order,
        status=StepStatus(model.status),
        started_at=model.started_at,
        ended_at=model.ended_at,
        input_data=model.input_data or {},
        output_data=model.output_data,
        error_details=model.error_details,
        metadata=model.step_metadata,
    )


class SQLAlchemyAuditLogRepository(AuditLogRepository):
    """Insert-only step log store."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def append(
        self,
        execution_id: str,
        user_id: str,
        agent_type: str,
        message_id: str,
        step: StepLog,
    ) -> None:
        model = AgentExecutionLogModel(
            execution_id=str(execution_id),
            user_id=user_id,
            agent_type=agent_type,
            message_id=message_id,
            step_name=step.step_name,
            step_order=step.step_order,
            status=step.status.value,
            started_at=step.started_at,
            ended_at=step.ended_at,
            duration_ms=step.duration_ms,
            input_data=step.input_data,
            output_data=step.output_data,
            error_details=step.error_details,
            step_metadata=step.metadata,
        )
        try:
            async with self._session_factory() as session:
                session.add(model)
                await session.commit()
        except IntegrityError as e:
            logger.error(f"Step {step.step_order} of {execution_id} already persisted: {e}")
            raise DuplicateStepLogError(
                f"Step log ({execution_id}, {step.step_order}) already exists"
            ) from e
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to append step log: {e}") from e

    async def list_for_execution(self, execution_id: str) -> List[StepLog]:
        try:
            async with self._session_factory() as session:
                result = await session.execute(
                    select(AgentExecutionLogModel)
                    .where(AgentExecutionLogModel.execution_id == str(execution_id))
                    .order_by(AgentExecutionLogModel.step_order)
                )
                return [_log_to_domain(m) for m in result.scalars().all()]
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to load step logs: {e}") from e


class SQLAlchemyExecutionRepository(ExecutionRepository):
    """Run summary store, one row per (user_id, message_id)."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def save(self, record: ExecutionRecord) -> None:
        model = AgentExecutionModel(
            execution_id=str(record.execution_id),
            user_id=record.user_id,
            message_id=record.message_id,
            agent_type=record.agent_type,
            outcome=record.outcome.value,
            reply=record.reply,
            escalation_reason=record.escalation_reason,
            action=record.action.value if record.action else None,
            approval_item_id=record.approval_item_id,
            started_at=record.started_at,
            finished_at=record.finished_at,
        )
        try:
            async with self._session_factory() as session:
                session.add(model)
                await session.commit()
        except IntegrityError as e:
            raise DuplicateExecutionError(
                f"Message {record.message_id} already has an execution record"
            ) from e
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to save execution record: {e}") from e

        logger.info(f"✅ Execution {record.execution_id} saved ({record.outcome.value})")

    async def find_by_message(self, user_id: str, message_id: str) -> Optional[ExecutionRecord]:
        try:
            async with self._session_factory() as session:
                result = await session.execute(
                    select(AgentExecutionModel).where(
                        AgentExecutionModel.user_id == user_id,
                        AgentExecutionModel.message_id == message_id,
                    )
                )
                model = result.scalar_one_or_none()
                if model is None:
                    return None

                logs = await session.execute(
                    select(AgentExecutionLogModel)
                    .where(AgentExecutionLogModel.execution_id == model.execution_id)
                    .order_by(AgentExecutionLogModel.step_order)
                )
                steps = tuple(_log_to_domain(m) for m in logs.scalars().all())
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to load execution record: {e}") from e

        return ExecutionRecord(
            execution_id=model.execution_id,
            user_id=model.user_id,
            message_id=model.message_id,
            agent_type=model.agent_type,
            outcome=ExecutionOutcome(model.outcome),
            started_at=model.started_at,
            finished_at=model.finished_at,
            reply=model.reply,
            escalation_reason=model.escalation_reason,
            action=GateAction(model.action) if model.action else None,
            approval_item_id=model.approval_item_id,
            steps=steps,
        )
