"""Status transitions for workflows and steps."""

from datetime import datetime

from deploy_guide.core.exceptions import InvalidStateTransitionError
from deploy_guide.models.deployment import (
    DeploymentStatus,
    DeploymentStep,
    DeploymentWorkflow,
)

ALLOWED_TRANSITIONS: dict[DeploymentStatus, set[DeploymentStatus]] = {
    DeploymentStatus.PENDING: {
        DeploymentStatus.IN_PROGRESS,
        DeploymentStatus.CANCELLED,
    },
    DeploymentStatus.IN_PROGRESS: {
        DeploymentStatus.COMPLETED,
        DeploymentStatus.FAILED,
        DeploymentStatus.CANCELLED,
    },
}

# A failed step may go back to PENDING while it still has retry budget
STEP_RETRY_TRANSITIONS: dict[DeploymentStatus, set[DeploymentStatus]] = {
    DeploymentStatus.FAILED: {DeploymentStatus.PENDING},
}

# A step waiting out its retry backoff has already run and can be failed
STEP_BACKOFF_TRANSITIONS: dict[DeploymentStatus, set[DeploymentStatus]] = {
    DeploymentStatus.PENDING: {DeploymentStatus.FAILED},
}


def _seconds_between(start: datetime | None, end: datetime) -> int:
    if start is None:
        return 1
    return max(1, round((end - start).total_seconds()))


class StepStateMachine:
    @staticmethod
    def transition(
        step: DeploymentStep,
        new_status: DeploymentStatus,
        *,
        now: datetime | None = None,
    ) -> DeploymentStep:
        now = now or datetime.utcnow()
        current = step.status

        allowed = ALLOWED_TRANSITIONS.get(current, set())
        if new_status not in allowed:
            retrying = (
                new_status in STEP_RETRY_TRANSITIONS.get(current, set())
                and step.can_retry
            )
            backing_off = (
                new_status in STEP_BACKOFF_TRANSITIONS.get(current, set())
                and step.retry_count > 0
            )
            if not (retrying or backing_off):
                raise InvalidStateTransitionError(
                    current.value, new_status.value, subject=f"step '{step.title}'"
                )

        if new_status == DeploymentStatus.IN_PROGRESS:
            if step.started_at is None:
                step.started_at = now
            step.ended_at = None

        elif new_status == DeploymentStatus.PENDING:
            step.retry_count += 1

        elif new_status.is_terminal:
            step.ended_at = now
            if new_status == DeploymentStatus.COMPLETED:
                step.duration = _seconds_between(step.started_at, now)
                step.error = None

        step.status = new_status
        return step


class WorkflowStateMachine:
    @staticmethod
    def transition(
        workflow: DeploymentWorkflow,
        new_status: DeploymentStatus,
        *,
        now: datetime | None = None,
    ) -> DeploymentWorkflow:
        now = now or datetime.utcnow()
        current = workflow.status

        if new_status not in ALLOWED_TRANSITIONS.get(current, set()):
            raise InvalidStateTransitionError(current.value, new_status.value)

        if new_status == DeploymentStatus.IN_PROGRESS:
            workflow.started_at = now

        elif new_status.is_terminal:
            workflow.ended_at = now
            workflow.total_duration = _seconds_between(workflow.started_at, now)

        workflow.status = new_status
        return workflow
