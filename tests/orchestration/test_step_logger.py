"""Tests for StepLogger and AuditScope."""

import asyncio

import pytest

from core.application.services import MetricsRecorder
from core.domain.enums import ExecutionOutcome, StepStatus
from core.infrastructure.adapters.persistence import (
    InMemoryAuditLogRepository,
    InMemoryExecutionRepository,
    InMemoryMetricsRepository,
)
from orchestration import AuditScope, ExecutionContext, RetryPolicy, RunOutcome, StepLogger

from tests.fakes import (
    CommitThenFailAuditLogRepository,
    FlakyAuditLogRepository,
    HangingAuditLogRepository,
    HangingExecutionRepository,
)


def _context() -> ExecutionContext:
    return ExecutionContext.create(
        user_id="user-1",
        message_id="msg-1",
        from_address="test@example.com",
        subject="Where is my order #12345?",
        body=None,
        agent_type="wismo",
    )


@pytest.mark.asyncio
async def test_step_completes_when_block_exits_normally():
    context = _context()
    audit_log = InMemoryAuditLogRepository()
    logger = StepLogger(context, audit_log)

    async with logger.step("order_extraction", {"subject": context.subject}):
        pass

    step = context.steps[0]
    assert step.status is StepStatus.COMPLETED
    assert step.step_order == 1
    assert step.input_data == {"subject": "Where is my order #12345?"}
    assert audit_log.owners[str(context.execution_id)] == ("user-1", "wismo", "msg-1")


@pytest.mark.asyncio
async def test_step_skip_records_reason():
    context = _context()
    logger = StepLogger(context, InMemoryAuditLogRepository())

    async with logger.step("tracking_lookup") as step:
        step.skip("no_tracking_number")

    assert context.steps[0].status is StepStatus.SKIPPED
    assert context.steps[0].metadata == {"reason": "no_tracking_number"}


@pytest.mark.asyncio
async def test_exception_fails_step_and_propagates():
    context = _context()
    logger = StepLogger(context, InMemoryAuditLogRepository())

    with pytest.raises(KeyError):
        async with logger.step("order_details_lookup"):
            raise KeyError("line_items")

    step = context.steps[0]
    assert step.status is StepStatus.FAILED
    assert step.metadata == {"error_type": "KeyError"}


@pytest.mark.asyncio
async def test_cancellation_fails_step():
    context = _context()
    logger = StepLogger(context, InMemoryAuditLogRepository())

    async def slow_step():
        async with logger.step("tracking_lookup"):
            await asyncio.sleep(10)

    task = asyncio.create_task(slow_step())
    await asyncio.sleep(0)
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task

    assert context.steps[0].status is StepStatus.FAILED
    assert context.steps[0].error_details == "Step cancelled before completion"


@pytest.mark.asyncio
async def test_second_terminal_call_is_rejected():
    context = _context()
    logger = StepLogger(context, InMemoryAuditLogRepository())

    with pytest.raises(RuntimeError):
        async with logger.step("response_generation") as step:
            step.complete()
            step.fail("too late")

    # Exactly one terminal record, the first one
    assert len(context.steps) == 1
    assert context.steps[0].status is StepStatus.COMPLETED


@pytest.mark.asyncio
async def test_ordinals_are_monotonic_across_step_and_record():
    context = _context()
    logger = StepLogger(context, InMemoryAuditLogRepository())

    await logger.record("email_received", StepStatus.COMPLETED)
    async with logger.step("order_extraction"):
        pass
    await logger.record("fatal_error", StepStatus.FAILED, error="boom")

    assert [s.step_order for s in context.steps] == [1, 2, 3]


@pytest.mark.asyncio
async def test_failed_write_is_kept_pending_until_flush():
    context = _context()
    audit_log = FlakyAuditLogRepository(failures=1)
    logger = StepLogger(context, audit_log)

    await logger.record("email_received", StepStatus.COMPLETED)

    assert len(logger.pending) == 1
    assert audit_log.count() == 0

    assert await logger.flush_pending() == []
    assert logger.pending == []
    assert audit_log.count() == 1


@pytest.mark.asyncio
async def test_audit_scope_flushes_once_and_marks_undecided_run_fatal():
    context = _context()
    executions = InMemoryExecutionRepository()
    metrics_store = InMemoryMetricsRepository()
    outcome = RunOutcome()
    scope = AuditScope(
        context,
        StepLogger(context, InMemoryAuditLogRepository()),
        executions,
        MetricsRecorder(metrics_store),
        outcome,
    )

    with pytest.raises(ValueError):
        async with scope:
            raise ValueError("bad payload")

    assert scope.flushed is True
    assert outcome.outcome is ExecutionOutcome.FATAL
    assert outcome.escalation_reason == "System error during WISMO processing: bad payload"
    assert context.steps[-1].step_name == "fatal_error"
    assert context.steps[-1].error_details == "bad payload"
    assert len(executions.all()) == 1

    # A second exit is a no-op
    await scope.__aexit__(None, None, None)
    assert len(executions.all()) == 1
    metrics = await metrics_store.get("user-1", "wismo")
    assert metrics.failures == 1


@pytest.mark.asyncio
async def test_stalled_write_times_out_and_stays_pending():
    context = _context()
    logger = StepLogger(
        context, HangingAuditLogRepository(), RetryPolicy(max_attempts=1), timeout_seconds=0.05
    )

    await asyncio.wait_for(logger.record("email_received", StepStatus.COMPLETED), timeout=1)

    assert [s.step_name for s in logger.pending] == ["email_received"]
    unwritten = await asyncio.wait_for(logger.flush_pending(), timeout=1)
    assert [s.step_order for s in unwritten] == [1]


@pytest.mark.asyncio
async def test_write_committed_before_failing_counts_as_persisted():
    context = _context()
    audit_log = CommitThenFailAuditLogRepository(failures=1)
    logger = StepLogger(context, audit_log)

    await logger.record("email_received", StepStatus.COMPLETED)
    assert len(logger.pending) == 1
    assert audit_log.count() == 1

    assert await logger.flush_pending() == []
    assert logger.pending == []
    assert audit_log.count() == 1


@pytest.mark.asyncio
async def test_cancelled_run_ends_with_fatal_error_step():
    context = _context()
    audit_log = InMemoryAuditLogRepository()
    executions = InMemoryExecutionRepository()
    step_logger = StepLogger(context, audit_log)
    outcome = RunOutcome()

    async def run():
        async with AuditScope(
            context, step_logger, executions, MetricsRecorder(InMemoryMetricsRepository()), outcome
        ):
            async with step_logger.step("tracking_lookup"):
                await asyncio.sleep(10)

    task = asyncio.create_task(run())
    await asyncio.sleep(0)
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task

    assert [s.step_name for s in context.steps] == ["tracking_lookup", "fatal_error"]
    fatal = context.steps[-1]
    assert fatal.status is StepStatus.FAILED
    assert fatal.error_details == "run cancelled before completion"
    assert fatal.metadata == {"error_type": "CancelledError"}
    assert outcome.escalation_reason == "System error during WISMO processing: run cancelled before completion"

    persisted = await audit_log.list_for_execution(context.execution_id)
    assert [s.step_name for s in persisted] == ["tracking_lookup", "fatal_error"]
    assert executions.all()[0].steps[-1].step_name == "fatal_error"


@pytest.mark.asyncio
async def test_audit_scope_flush_is_bounded_when_stores_stall():
    context = _context()
    step_logger = StepLogger(context, HangingAuditLogRepository(), timeout_seconds=0.05)
    executions = HangingExecutionRepository(stalled=("save",))
    outcome = RunOutcome()
    scope = AuditScope(
        context,
        step_logger,
        executions,
        MetricsRecorder(InMemoryMetricsRepository()),
        outcome,
        timeout_seconds=0.05,
        flush_timeout_seconds=0.1,
    )

    async def run():
        async with scope:
            await step_logger.record("email_received", StepStatus.COMPLETED)

    await asyncio.wait_for(run(), timeout=2)

    assert scope.flushed is True
    assert outcome.outcome is ExecutionOutcome.FATAL
    assert len(step_logger.pending) == 1
    assert executions.all() == []
