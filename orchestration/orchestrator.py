"""Orchestrator - runs the WISMO pipeline with a guaranteed audit trail."""

import asyncio

from core.application.interfaces import IReplySender
from core.application.services import (
    ApprovalGate,
    ComposedReply,
    MetricsRecorder,
    OrderEnrichmentAdapter,
    OrderIdentityResolver,
    ResponseComposer,
    TrackingEnrichmentAdapter,
)
from core.domain.entities import EnrichedOrder, OrderLookupResult, TrackingSnapshot
from core.domain.enums import ExecutionOutcome, GateAction, StepStatus
from core.domain.exceptions import (
    CollaboratorError,
    GenerationError,
    OrderDeskError,
    OrderNotFoundError,
    RunTimeoutError,
    TrackingUnavailableError,
)
from core.domain.repositories import AuditLogRepository, ExecutionRepository
from orderdesk_sdk.logging import get_logger
from orderdesk_sdk.utils.datetime import utc_now

from .models import ExecutionContext, ExecutionResult, RunOutcome
from .step_logger import AuditScope, StepLogger
from .workflow import (
    CUSTOMER_LOOKUP,
    EMAIL_RECEIVED,
    FALLBACK_RESPONSE,
    FATAL_ERROR,
    METRICS_UPDATED,
    ORDER_DETAILS_LOOKUP,
    ORDER_EXTRACTION,
    QUEUED_FOR_APPROVAL,
    RESPONSE_GENERATION,
    RESPONSE_SENT,
    TRACKING_LOOKUP,
    RetryPolicy,
    StepPolicy,
    policy_for,
)

SYSTEM_ERROR_PREFIX = "System error during WISMO processing"


class WismoOrchestrator:
    """
    Pipeline controller for "where is my order" inquiries.

    Every collaborator is injected. `run` always returns an ExecutionResult;
    the audit trail of every run is flushed exactly once, including runs that
    halt, time out or crash.
    """

    def __init__(
        self,
        resolver: OrderIdentityResolver,
        order_enrichment: OrderEnrichmentAdapter,
        tracking_enrichment: TrackingEnrichmentAdapter,
        composer: ResponseComposer,
        gate: ApprovalGate,
        metrics: MetricsRecorder,
        reply_sender: IReplySender,
        audit_log: AuditLogRepository,
        executions: ExecutionRepository,
        agent_type: str = "wismo",
        run_budget_seconds: float = 60.0,
        send_timeout_seconds: float = 10.0,
        persistence_timeout_seconds: float = 5.0,
        flush_timeout_seconds: float = 30.0,
        flush_retry_policy: RetryPolicy | None = None,
    ) -> None:
        self._resolver = resolver
        self._order_enrichment = order_enrichment
        self._tracking_enrichment = tracking_enrichment
        self._composer = composer
        self._gate = gate
        self._metrics = metrics
        self._reply_sender = reply_sender
        self._audit_log = audit_log
        self._executions = executions
        self.agent_type = agent_type
        self._run_budget = run_budget_seconds
        self._send_timeout = send_timeout_seconds
        self._persistence_timeout = persistence_timeout_seconds
        self._flush_timeout = flush_timeout_seconds
        self._flush_retry_policy = flush_retry_policy or RetryPolicy()
        self._logger = get_logger("orchestration.orchestrator")

    async def run(
        self,
        user_id: str,
        message_id: str,
        from_address: str,
        subject: str,
        body: str,
    ) -> ExecutionResult:
        """Process one inbound inquiry. Never raises."""
        existing = await self._find_existing(user_id, message_id)
        if existing is not None:
            self._logger.info(
                f"Message {message_id} already processed by {existing.execution_id}, returning stored result"
            )
            return ExecutionResult.from_record(existing, replayed=True)

        context = ExecutionContext.create(
            user_id=user_id,
            message_id=message_id,
            from_address=from_address,
            subject=subject,
            body=body,
            agent_type=self.agent_type,
        )
        step_logger = StepLogger(
            context, self._audit_log, self._flush_retry_policy, timeout_seconds=self._persistence_timeout
        )
        outcome = RunOutcome()

        self._logger.info(
            f"Run {context.execution_id} starting for user {user_id}, message {message_id}"
        )

        async with AuditScope(
            context,
            step_logger,
            self._executions,
            self._metrics,
            outcome,
            timeout_seconds=self._persistence_timeout,
            flush_timeout_seconds=self._flush_timeout,
        ):
            try:
                await asyncio.wait_for(
                    self._pipeline(context, step_logger, outcome),
                    timeout=self._run_budget,
                )
            except asyncio.TimeoutError:
                await self._record_fatal(
                    step_logger, outcome, RunTimeoutError(f"run exceeded its {self._run_budget}s budget")
                )
            except Exception as exc:
                self._logger.exception(f"Run {context.execution_id} crashed")
                await self._record_fatal(step_logger, outcome, exc)

        result = ExecutionResult.from_run(context, outcome)
        self._logger.info(
            f"Run {context.execution_id} finished: success={result.success}, "
            f"steps={len(result.audit_trail)}, escalation={result.escalation_reason}"
        )
        return result

    # ------------------------------------------------------------------
    # Pipeline
    # ------------------------------------------------------------------

    async def _pipeline(
        self,
        context: ExecutionContext,
        step_logger: StepLogger,
        outcome: RunOutcome,
    ) -> None:
        await step_logger.record(
            EMAIL_RECEIVED,
            StepStatus.COMPLETED,
            input_data={
                "from_address": context.from_address,
                "subject": context.subject,
                "body_length": len(context.body),
            },
            output={"message_id": context.message_id},
        )

        lookup = await self._resolve_identity(context, step_logger)

        enriched = await self._enrich_order(context, step_logger, lookup, outcome)
        if enriched is None:
            return

        tracking = await self._enrich_tracking(context, step_logger, enriched)

        reply = await self._compose(context, step_logger, enriched, tracking)

        if not await self._route_reply(context, step_logger, reply, enriched, tracking, outcome):
            return

        async with step_logger.step(
            METRICS_UPDATED,
            {"user_id": context.user_id, "agent_type": context.agent_type},
        ) as step:
            recorded = await self._metrics.record(
                context.user_id,
                context.agent_type,
                ExecutionOutcome.RESOLVED,
                str(context.execution_id),
            )
            step.complete(output={"outcome": ExecutionOutcome.RESOLVED.value, "recorded": recorded})

    async def _resolve_identity(
        self, context: ExecutionContext, step_logger: StepLogger
    ) -> OrderLookupResult:
        async with step_logger.step(
            ORDER_EXTRACTION,
            {"subject": context.subject, "body_length": len(context.body)},
        ) as step:
            lookup = self._resolver.resolve(context.subject, context.body, context.from_address)
            step.complete(
                output={
                    "found": lookup.found,
                    "order_number": lookup.order_number,
                    "source": lookup.source.value,
                },
                metadata={"matched_pattern": lookup.matched_pattern} if lookup.matched_pattern else None,
            )
        return lookup

    async def _enrich_order(
        self,
        context: ExecutionContext,
        step_logger: StepLogger,
        lookup: OrderLookupResult,
        outcome: RunOutcome,
    ) -> EnrichedOrder | None:
        if lookup.found:
            name = ORDER_DETAILS_LOOKUP
            step_input = {"order_number": lookup.order_number}
            not_found = f"Order {lookup.order_number} not found in store system"
            not_found_reason = "order_not_found_in_store"
        else:
            name = CUSTOMER_LOOKUP
            step_input = {"customer_address": context.from_address}
            not_found = f"Unable to identify order for customer {context.from_address}"
            not_found_reason = "no_customer_order_history"

        async with step_logger.step(name, step_input) as step:
            try:
                enriched = await self._order_enrichment.fetch(
                    order_number=lookup.order_number if lookup.found else None,
                    customer_address=None if lookup.found else context.from_address,
                )
            except CollaboratorError as exc:
                step.fail(
                    str(exc),
                    metadata={"reason": exc.reason, "collaborator": exc.collaborator},
                )
                self._halt(outcome, name, f"Order lookup failed for {context.from_address}: {exc}")
                return None

            if enriched is None:
                missing = OrderNotFoundError(not_found, reason=not_found_reason)
                step.fail(str(missing), metadata={"reason": missing.reason})
                self._halt(outcome, name, str(missing))
                return None

            step.complete(
                output={**enriched.display_fields(), "line_item_count": len(enriched.order.line_items)},
                metadata={"source": lookup.source.value},
            )
        return enriched

    async def _enrich_tracking(
        self,
        context: ExecutionContext,
        step_logger: StepLogger,
        enriched: EnrichedOrder,
    ) -> TrackingSnapshot | None:
        order = enriched.order
        async with step_logger.step(
            TRACKING_LOOKUP,
            {"tracking_number": order.tracking_number, "carrier_hint": order.carrier},
        ) as step:
            if not order.has_tracking:
                step.skip("no_tracking_number")
                return None

            try:
                tracking = await self._tracking_enrichment.fetch(
                    order.tracking_number, order.carrier, context.user_id
                )
            except TrackingUnavailableError as exc:
                step.fail(str(exc), metadata={"reason": exc.reason, "policy": StepPolicy.CONTINUE.value})
                return None

            if tracking is None:
                step.complete(output={"found": False})
                return None

            step.complete(
                output={
                    "found": True,
                    "carrier": tracking.carrier,
                    "delivery_status": tracking.delivery_status,
                    "delivered": tracking.delivered,
                    "estimated_delivery": tracking.prediction.estimated_date if tracking.prediction else None,
                    "checkpoint_count": len(tracking.checkpoints),
                }
            )
        return tracking

    async def _compose(
        self,
        context: ExecutionContext,
        step_logger: StepLogger,
        enriched: EnrichedOrder,
        tracking: TrackingSnapshot | None,
    ) -> ComposedReply:
        error: GenerationError | None = None
        async with step_logger.step(
            RESPONSE_GENERATION,
            {"order_number": enriched.order_number, "has_tracking": tracking is not None},
        ) as step:
            try:
                reply = await self._composer.generate(context, enriched, tracking)
            except GenerationError as exc:
                error = exc
                step.fail(str(exc), metadata={"reason": exc.reason, "policy": StepPolicy.FALLBACK.value})
            else:
                step.complete(output={"source": reply.source, "reply_length": len(reply.text)})
                return reply

        async with step_logger.step(
            FALLBACK_RESPONSE,
            {"order_number": enriched.order_number, "has_tracking": tracking is not None},
        ) as step:
            reply = self._composer.fallback(enriched, tracking, error=str(error))
            step.complete(output={"source": reply.source, "reply_length": len(reply.text)})
        return reply

    async def _route_reply(
        self,
        context: ExecutionContext,
        step_logger: StepLogger,
        reply: ComposedReply,
        enriched: EnrichedOrder,
        tracking: TrackingSnapshot | None,
        outcome: RunOutcome,
    ) -> bool:
        started_at = utc_now()
        try:
            decision = await self._gate.decide(
                context.user_id, context.agent_type, reply.text, context, enriched, tracking
            )
        except OrderDeskError as exc:
            await step_logger.record(
                QUEUED_FOR_APPROVAL,
                StepStatus.FAILED,
                input_data={"reply_length": len(reply.text)},
                error=str(exc),
                metadata={"reason": exc.reason},
                started_at=started_at,
            )
            self._halt(outcome, QUEUED_FOR_APPROVAL, f"Failed to queue reply for approval: {exc}")
            return False

        if decision.auto_send:
            async with step_logger.step(
                RESPONSE_SENT,
                {"to_address": context.from_address, "reply_length": len(reply.text)},
            ) as step:
                try:
                    await asyncio.wait_for(
                        self._reply_sender.send(
                            context.from_address,
                            f"Re: {context.subject}" if context.subject else "Your order",
                            reply.text,
                            str(context.execution_id),
                        ),
                        timeout=self._send_timeout,
                    )
                except (CollaboratorError, asyncio.TimeoutError) as exc:
                    step.fail(
                        str(exc) or "Reply sender timed out",
                        metadata={"reason": getattr(exc, "reason", "delivery_timeout")},
                    )
                    self._halt(outcome, RESPONSE_SENT, f"Failed to send reply to {context.from_address}")
                    return False
                step.complete(output={"action": GateAction.AUTO_SEND.value, "rule_found": decision.rule_found})
            outcome.resolve(reply.text, GateAction.AUTO_SEND)
            return True

        item = decision.item
        await step_logger.record(
            QUEUED_FOR_APPROVAL,
            StepStatus.COMPLETED,
            input_data={"reply_length": len(reply.text), "reply_source": reply.source},
            output={
                "action": GateAction.QUEUE.value,
                "approval_item_id": item.id,
                "confidence": item.confidence,
                "rule_found": decision.rule_found,
            },
            started_at=started_at,
        )
        outcome.resolve(reply.text, GateAction.QUEUE, approval_item_id=item.id)
        return True

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _halt(self, outcome: RunOutcome, step_name: str, reason: str) -> None:
        self._logger.warning(f"Run halted at {step_name} ({policy_for(step_name).value}): {reason}")
        outcome.escalate(reason)

    async def _record_fatal(
        self,
        step_logger: StepLogger,
        outcome: RunOutcome,
        exc: Exception,
    ) -> None:
        message = str(exc) or exc.__class__.__name__
        await step_logger.record(
            FATAL_ERROR,
            StepStatus.FAILED,
            error=message,
            metadata={"error_type": exc.__class__.__name__},
        )
        outcome.fatal(f"{SYSTEM_ERROR_PREFIX}: {message}")

    async def _find_existing(self, user_id: str, message_id: str):
        try:
            return await asyncio.wait_for(
                self._executions.find_by_message(user_id, message_id),
                timeout=self._persistence_timeout,
            )
        except asyncio.TimeoutError:
            self._logger.warning(
                f"Replay lookup for message {message_id} timed out after {self._persistence_timeout}s"
            )
            return None
        except Exception as exc:
            # A failed replay lookup never blocks a new run
            self._logger.warning(f"Replay lookup for message {message_id} failed: {exc}")
            return None


async def run_agent(
    orchestrator: WismoOrchestrator,
    user_id: str,
    message_id: str,
    from_address: str,
    subject: str,
    body: str,
) -> ExecutionResult:
    """Single entry point for one inbound inquiry."""
    return await orchestrator.run(user_id, message_id, from_address, subject, body)
