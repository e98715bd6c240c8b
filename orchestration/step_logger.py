"""
Step logger and audit scope.

StepLogger hands out step ordinals, turns each attempted step into exactly
one terminal StepLog, and writes it through to the audit store. AuditScope
wraps a whole run and flushes it exactly once on every exit path.
"""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any

from core.application.services import MetricsRecorder
from core.domain.entities import ExecutionRecord, StepLog
from core.domain.enums import ExecutionOutcome, StepStatus
from core.domain.exceptions import DuplicateExecutionError, DuplicateStepLogError, PersistenceError
from core.domain.repositories import AuditLogRepository, ExecutionRepository
from orderdesk_sdk.logging import get_logger
from orderdesk_sdk.utils.datetime import utc_now

from .models import ExecutionContext, RunOutcome
from .workflow import FATAL_ERROR, RetryPolicy, policy_for


class StepScope:
    """An in-flight step. Exactly one of complete/fail/skip may be called."""

    def __init__(self, name: str, order: int, input_data: dict[str, Any] | None = None) -> None:
        self.name = name
        self.order = order
        self.input_data = input_data or {}
        self.started_at = utc_now()
        self.status: StepStatus | None = None
        self.output: dict[str, Any] | None = None
        self.error: str | None = None
        self.metadata: dict[str, Any] | None = None

    @property
    def done(self) -> bool:
        return self.status is not None

    def complete(self, output: dict[str, Any] | None = None, metadata: dict[str, Any] | None = None) -> None:
        self._finish(StepStatus.COMPLETED, output=output, metadata=metadata)

    def fail(
        self,
        error: str,
        metadata: dict[str, Any] | None = None,
        output: dict[str, Any] | None = None,
    ) -> None:
        self._finish(StepStatus.FAILED, output=output, error=error, metadata=metadata)

    def skip(self, reason: str, metadata: dict[str, Any] | None = None) -> None:
        self._finish(StepStatus.SKIPPED, metadata={"reason": reason, **(metadata or {})})

    def _finish(
        self,
        status: StepStatus,
        output: dict[str, Any] | None = None,
        error: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> None:
        if self.done:
            raise RuntimeError(f"Step {self.name} already {self.status.value}")
        self.status = status
        self.output = output
        self.error = error
        self.metadata = metadata

    def build(self) -> StepLog:
        return StepLog(
            step_name=self.name,
            step_order=self.order,
            status=self.status,
            started_at=self.started_at,
            ended_at=utc_now(),
            input_data=self.input_data,
            output_data=self.output,
            error_details=self.error,
            metadata=self.metadata,
        )


class StepLogger:
    """Audit trail writer for one run."""

    def __init__(
        self,
        context: ExecutionContext,
        audit_log: AuditLogRepository,
        retry_policy: RetryPolicy | None = None,
        timeout_seconds: float = 5.0,
    ) -> None:
        self._context = context
        self._audit_log = audit_log
        self._retry_policy = retry_policy or RetryPolicy()
        self._timeout = timeout_seconds
        self._order = 0
        self._pending: list[StepLog] = []
        self._logger = get_logger("orchestration.step_logger")

    @property
    def pending(self) -> list[StepLog]:
        """Step logs whose write-through failed and await the flush."""
        return list(self._pending)

    def next_order(self) -> int:
        self._order += 1
        return self._order

    @asynccontextmanager
    async def step(self, name: str, input_data: dict[str, Any] | None = None) -> AsyncIterator[StepScope]:
        """
        Run a step. Leaving the block without a terminal call completes it;
        an exception (cancellation included) fails it and propagates.
        """
        scope = StepScope(name, self.next_order(), input_data)
        self._logger.info(f"Step {scope.order} - {name}: started")
        try:
            yield scope
        except BaseException as exc:
            if not scope.done:
                error = str(exc) or exc.__class__.__name__
                if isinstance(exc, asyncio.CancelledError):
                    error = "Step cancelled before completion"
                scope.fail(error, metadata={"error_type": exc.__class__.__name__})
            await self._commit(scope.build())
            raise
        else:
            if not scope.done:
                scope.complete()
            await self._commit(scope.build())

    async def record(
        self,
        name: str,
        status: StepStatus,
        input_data: dict[str, Any] | None = None,
        output: dict[str, Any] | None = None,
        error: str | None = None,
        metadata: dict[str, Any] | None = None,
        started_at: datetime | None = None,
    ) -> StepLog:
        """Record a step that has no meaningful duration (or was timed by the caller)."""
        step = StepLog(
            step_name=name,
            step_order=self.next_order(),
            status=status,
            started_at=started_at or utc_now(),
            ended_at=utc_now(),
            input_data=input_data or {},
            output_data=output,
            error_details=error,
            metadata=metadata,
        )
        await self._commit(step)
        return step

    async def flush_pending(self) -> list[StepLog]:
        """
        Retry step logs whose write-through failed.

        Returns:
            Step logs that still could not be written
        """
        for step in list(self._pending):
            if await self._append_with_retry(step):
                self._pending.remove(step)
        return self.pending

    async def _commit(self, step: StepLog) -> None:
        self._context.steps.append(step)
        self._log_transition(step)
        try:
            await self._append(step)
        except asyncio.CancelledError:
            self._pending.append(step)
            raise
        except Exception as e:
            self._logger.warning(
                f"Audit write for step {step.step_order} ({step.step_name}) failed, will retry at flush: {e}"
            )
            self._pending.append(step)

    async def _append_with_retry(self, step: StepLog) -> bool:
        policy = self._retry_policy
        for attempt in range(1, policy.max_attempts + 1):
            try:
                await self._append(step)
                return True
            except DuplicateStepLogError:
                # an earlier attempt committed before it reported failure
                self._logger.info(f"Step {step.step_order} ({step.step_name}) was already persisted")
                return True
            except Exception as e:
                self._logger.warning(
                    f"Audit flush attempt {attempt}/{policy.max_attempts} for step "
                    f"{step.step_order} failed: {e}"
                )
                if attempt < policy.max_attempts and policy.backoff_seconds > 0:
                    await asyncio.sleep(policy.backoff_seconds)
        self._logger.error(
            f"❌ Step {step.step_order} ({step.step_name}) of {self._context.execution_id} was not persisted"
        )
        return False

    async def _append(self, step: StepLog) -> None:
        try:
            await asyncio.wait_for(
                self._audit_log.append(
                    str(self._context.execution_id),
                    self._context.user_id,
                    self._context.agent_type,
                    self._context.message_id,
                    step,
                ),
                timeout=self._timeout,
            )
        except asyncio.TimeoutError as e:
            raise PersistenceError(
                f"Audit store timed out after {self._timeout}s", reason="persistence_timeout"
            ) from e

    def _log_transition(self, step: StepLog) -> None:
        message = f"Step {step.step_order} - {step.step_name}: {step.status.value}"
        if step.status is StepStatus.FAILED:
            policy = policy_for(step.step_name)
            self._logger.error(f"{message} ({policy.value}) - {step.error_details}")
        elif step.status is StepStatus.SKIPPED:
            self._logger.warning(f"{message} - {(step.metadata or {}).get('reason')}")
        else:
            self._logger.info(f"{message} ({step.duration_ms}ms)")


class AuditScope:
    """
    Scoped resource for one run. On exit, whatever the exit path:
    record a fatal_error step if the run left with an exception and no
    outcome, record a failure in metrics if the run did not resolve,
    retry step logs that failed to write, then persist the run record.

    Every store call is bounded by `timeout_seconds` and the retry of
    pending step logs by `flush_timeout_seconds`. Flush errors are
    logged, never raised.
    """

    def __init__(
        self,
        context: ExecutionContext,
        step_logger: StepLogger,
        executions: ExecutionRepository,
        metrics: MetricsRecorder,
        outcome: RunOutcome,
        timeout_seconds: float = 5.0,
        flush_timeout_seconds: float = 30.0,
    ) -> None:
        self._context = context
        self._step_logger = step_logger
        self._executions = executions
        self._metrics = metrics
        self.outcome = outcome
        self._timeout = timeout_seconds
        self._flush_timeout = flush_timeout_seconds
        self._flushed = False
        self._logger = get_logger("orchestration.audit")

    @property
    def flushed(self) -> bool:
        return self._flushed

    async def __aenter__(self) -> "AuditScope":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> bool:
        if self._flushed:
            return False
        self._flushed = True

        if not self.outcome.decided:
            reason = "run ended without an outcome"
            if exc is not None:
                reason = _describe(exc)
                if not self._has_fatal_step():
                    await self._step_logger.record(
                        FATAL_ERROR,
                        StepStatus.FAILED,
                        error=reason,
                        metadata={"error_type": exc.__class__.__name__},
                    )
            self.outcome.fatal(f"System error during WISMO processing: {reason}")

        try:
            await self._flush()
        except Exception as e:
            self._logger.error(f"❌ Audit flush for {self._context.execution_id} failed: {e}")
        return False

    def _has_fatal_step(self) -> bool:
        return any(step.step_name == FATAL_ERROR for step in self._context.steps)

    async def _flush(self) -> None:
        context = self._context

        if not self.outcome.success:
            await self._metrics.record(
                context.user_id,
                context.agent_type,
                self.outcome.outcome,
                str(context.execution_id),
            )

        try:
            unwritten = await asyncio.wait_for(
                self._step_logger.flush_pending(), timeout=self._flush_timeout
            )
        except asyncio.TimeoutError:
            unwritten = self._step_logger.pending
            self._logger.error(
                f"Retrying step logs of {context.execution_id} exceeded {self._flush_timeout}s"
            )
        if unwritten:
            self._logger.error(
                f"{len(unwritten)} step log(s) of {context.execution_id} could not be persisted"
            )

        record = ExecutionRecord(
            execution_id=str(context.execution_id),
            user_id=context.user_id,
            message_id=context.message_id,
            agent_type=context.agent_type,
            outcome=self.outcome.outcome or ExecutionOutcome.FATAL,
            started_at=context.started_at,
            finished_at=utc_now(),
            reply=self.outcome.reply,
            escalation_reason=self.outcome.escalation_reason,
            action=self.outcome.action,
            approval_item_id=self.outcome.approval_item_id,
            steps=tuple(context.steps),
        )
        try:
            await asyncio.wait_for(self._executions.save(record), timeout=self._timeout)
        except DuplicateExecutionError:
            self._logger.warning(
                f"Message {context.message_id} already has a run record; "
                f"{context.execution_id} kept in the audit log only"
            )
        except asyncio.TimeoutError:
            self._logger.error(
                f"❌ Run record {context.execution_id} not persisted: store timed out after {self._timeout}s"
            )
        except Exception as e:
            self._logger.error(f"❌ Failed to persist run record {context.execution_id}: {e}")
        else:
            self._logger.info(
                f"Run {context.execution_id} flushed: {record.outcome.value}, {len(record.steps)} step(s)"
            )


def _describe(exc: BaseException) -> str:
    if isinstance(exc, asyncio.CancelledError):
        return "run cancelled before completion"
    return str(exc) or exc.__class__.__name__
