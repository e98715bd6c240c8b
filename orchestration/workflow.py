"""Workflow definitions - step names, failure policies, RetryPolicy."""

from dataclasses import dataclass
from enum import Enum


class StepPolicy(str, Enum):
    """What a step failure does to the rest of the run."""

    HALT = "halt"            # no further steps, run escalates
    CONTINUE = "continue"    # recorded, run proceeds with reduced data
    FALLBACK = "fallback"    # deterministic substitute output is used


@dataclass(frozen=True)
class RetryPolicy:
    """Retry policy for audit writes that failed during the run."""

    max_attempts: int = 3
    backoff_seconds: float = 0.0


@dataclass(frozen=True)
class StepDefinition:
    """A single step of the WISMO workflow."""

    name: str
    policy: StepPolicy


# Step names as they appear in the audit trail
EMAIL_RECEIVED = "email_received"
ORDER_EXTRACTION = "order_extraction"
ORDER_DETAILS_LOOKUP = "order_details_lookup"
CUSTOMER_LOOKUP = "customer_lookup"
TRACKING_LOOKUP = "tracking_lookup"
RESPONSE_GENERATION = "response_generation"
FALLBACK_RESPONSE = "fallback_response"
QUEUED_FOR_APPROVAL = "queued_for_approval"
RESPONSE_SENT = "response_sent"
METRICS_UPDATED = "metrics_updated"
FATAL_ERROR = "fatal_error"


WISMO_STEPS: dict[str, StepDefinition] = {
    step.name: step
    for step in (
        StepDefinition(EMAIL_RECEIVED, StepPolicy.HALT),
        StepDefinition(ORDER_EXTRACTION, StepPolicy.HALT),
        StepDefinition(ORDER_DETAILS_LOOKUP, StepPolicy.HALT),
        StepDefinition(CUSTOMER_LOOKUP, StepPolicy.HALT),
        StepDefinition(TRACKING_LOOKUP, StepPolicy.CONTINUE),
        StepDefinition(RESPONSE_GENERATION, StepPolicy.FALLBACK),
        StepDefinition(FALLBACK_RESPONSE, StepPolicy.HALT),
        StepDefinition(QUEUED_FOR_APPROVAL, StepPolicy.HALT),
        StepDefinition(RESPONSE_SENT, StepPolicy.HALT),
        StepDefinition(METRICS_UPDATED, StepPolicy.CONTINUE),
    )
}


def policy_for(step_name: str) -> StepPolicy:
    """Failure policy of a step; unknown steps halt."""
    step = WISMO_STEPS.get(step_name)
    return step.policy if step else StepPolicy.HALT
