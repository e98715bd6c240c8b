"""SQLAlchemy approval queue repository."""
from typing import Any, Dict, List, Optional
import logging

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from core.domain.entities import ApprovalQueueItem
from core.domain.enums import ApprovalStatus
from core.domain.exceptions import PersistenceError
from core.domain.repositories import ApprovalQueueRepository
from core.infrastructure.database.models import ApprovalQueueModel


logger = logging.getLogger(__name__)


def _to_domain(model: ApprovalQueueModel) -> ApprovalQueueItem:
    return ApprovalQueueItem(
        id=model.id,
        user_id=model.user_id,
        message_id=model.message_id,
        agent_type=model.agent_type,
        execution_id=model.execution_id,
        customer_email=model.customer_email,
        subject=model.subject or "",
        body=model.body or "",
        proposed_response=model.proposed_response,
        confidence=model.confidence,
        classification=model.classification,
        audit_trail=list(model.audit_trail or []),
        metadata=dict(model.item_metadata or {}),
        status=ApprovalStatus(model.status),
        created_at=model.created_at,
        reviewed_by=model.reviewed_by,
        reviewed_at=model.reviewed_at,
        rejection_reason=model.rejection_reason,
    )


class SQLAlchemyApprovalQueueRepository(ApprovalQueueRepository):
    """Approval queue backed by the automation_approval_queue table."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def create(self, item: ApprovalQueueItem) -> ApprovalQueueItem:
        model = ApprovalQueueModel(
            id=item.id,
            user_id=item.user_id,
            message_id=item.message_id,
            agent_type=item.agent_type,
            execution_id=item.execution_id,
            customer_email=item.customer_email,
            subject=item.subject,
            body=item.body,
            proposed_response=item.proposed_response,
            confidence=item.confidence,
            classification=item.classification,
            audit_trail=item.audit_trail,
            item_metadata=item.metadata,
            status=item.status.value,
        )
        if item.created_at is not None:
            model.created_at = item.created_at
        try:
            async with self._session_factory() as session:
                session.add(model)
                await session.commit()
                await session.refresh(model)
                return _to_domain(model)
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to queue approval item: {e}") from e

    async def get(self, item_id: str) -> Optional[ApprovalQueueItem]:
        try:
            async with self._session_factory() as session:
                model = await session.get(ApprovalQueueModel, item_id)
                return _to_domain(model) if model else None
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to load approval item: {e}") from e

    async def update(self, item_id: str, patch: Dict[str, Any]) -> Optional[ApprovalQueueItem]:
        try:
            async with self._session_factory() as session:
                model = await session.get(ApprovalQueueModel, item_id)
                if model is None:
                    return None

                # Validate through the entity so only review fields can change
                item = _to_domain(model)
                item.apply_review(patch)

                model.status = item.status.value
                model.reviewed_by = item.reviewed_by
                model.reviewed_at = item.reviewed_at
                model.rejection_reason = item.rejection_reason
                await session.commit()
                return item
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to update approval item: {e}") from e

    async def list_pending(self, user_id: str) -> List[ApprovalQueueItem]:
        try:
            async with self._session_factory() as session:
                result = await session.execute(
                    select(ApprovalQueueModel)
                    .where(
                        ApprovalQueueModel.user_id == user_id,
                        ApprovalQueueModel.status == ApprovalStatus.PENDING.value,
                    )
                    .order_by(ApprovalQueueModel.created_at)
                )
                return [_to_domain(m) for m in result.scalars().all()]
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to list approval items: {e}") from e
