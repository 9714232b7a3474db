"""Unit tests for workflow and step transitions."""

from datetime import datetime, timedelta

import pytest

from deploy_guide.core.exceptions import InvalidStateTransitionError
from deploy_guide.core.state_machine import StepStateMachine, WorkflowStateMachine
from deploy_guide.models.deployment import (
    DeploymentConfig,
    DeploymentStatus,
    DeploymentStep,
    DeploymentWorkflow,
    StepAction,
)
from deploy_guide.models.project import DeploymentPlatform


@pytest.fixture
def step() -> DeploymentStep:
    return DeploymentStep(
        action=StepAction.DEPLOY,
        title="Deploy Application",
        description="Build and deploy the application",
        max_retries=2,
    )


@pytest.fixture
def workflow(step: DeploymentStep, project) -> DeploymentWorkflow:
    return DeploymentWorkflow(
        project_id=project.id,
        config=DeploymentConfig(platform=DeploymentPlatform.VERCEL, project=project),
        steps=[step],
    )


class TestStepStateMachine:
    """Tests for StepStateMachine."""

    def test_successful_run_records_duration(self, step: DeploymentStep):
        start = datetime(2024, 1, 1, 12, 0, 0)

        StepStateMachine.transition(step, DeploymentStatus.IN_PROGRESS, now=start)
        StepStateMachine.transition(
            step, DeploymentStatus.COMPLETED, now=start + timedelta(seconds=4.4)
        )

        assert step.started_at == start
        assert step.duration == 4
        assert step.ended_at == start + timedelta(seconds=4.4)

    def test_instant_step_lasts_at_least_one_second(self, step: DeploymentStep):
        now = datetime(2024, 1, 1)

        StepStateMachine.transition(step, DeploymentStatus.IN_PROGRESS, now=now)
        StepStateMachine.transition(step, DeploymentStatus.COMPLETED, now=now)

        assert step.duration == 1

    def test_retry_increments_count_and_keeps_start(self, step: DeploymentStep):
        first = datetime(2024, 1, 1, 12, 0, 0)
        StepStateMachine.transition(step, DeploymentStatus.IN_PROGRESS, now=first)
        StepStateMachine.transition(step, DeploymentStatus.FAILED)

        StepStateMachine.transition(step, DeploymentStatus.PENDING)
        StepStateMachine.transition(step, DeploymentStatus.IN_PROGRESS)

        assert step.retry_count == 1
        assert step.started_at == first
        assert step.ended_at is None

    def test_retry_budget_enforced(self, step: DeploymentStep):
        for _ in range(step.max_retries):
            StepStateMachine.transition(step, DeploymentStatus.IN_PROGRESS)
            StepStateMachine.transition(step, DeploymentStatus.FAILED)
            StepStateMachine.transition(step, DeploymentStatus.PENDING)
        StepStateMachine.transition(step, DeploymentStatus.IN_PROGRESS)
        StepStateMachine.transition(step, DeploymentStatus.FAILED)

        with pytest.raises(InvalidStateTransitionError):
            StepStateMachine.transition(step, DeploymentStatus.PENDING)
        assert step.retry_count == step.max_retries

    def test_completed_clears_previous_error(self, step: DeploymentStep):
        step.error = "deploy failed"
        StepStateMachine.transition(step, DeploymentStatus.IN_PROGRESS)
        StepStateMachine.transition(step, DeploymentStatus.COMPLETED)

        assert step.error is None

    def test_step_in_backoff_can_fail(self, step: DeploymentStep):
        StepStateMachine.transition(step, DeploymentStatus.IN_PROGRESS)
        StepStateMachine.transition(step, DeploymentStatus.FAILED)
        StepStateMachine.transition(step, DeploymentStatus.PENDING)

        StepStateMachine.transition(step, DeploymentStatus.FAILED)

        assert step.status == DeploymentStatus.FAILED
        assert step.ended_at is not None
        assert step.retry_count == 1

    @pytest.mark.parametrize(
        "status",
        [DeploymentStatus.COMPLETED, DeploymentStatus.FAILED],
    )
    def test_pending_cannot_finish_without_running(
        self, step: DeploymentStep, status: DeploymentStatus
    ):
        with pytest.raises(InvalidStateTransitionError, match="step"):
            StepStateMachine.transition(step, status)


class TestWorkflowStateMachine:
    """Tests for WorkflowStateMachine."""

    def test_full_lifecycle(self, workflow: DeploymentWorkflow):
        start = datetime(2024, 1, 1, 12, 0, 0)

        WorkflowStateMachine.transition(
            workflow, DeploymentStatus.IN_PROGRESS, now=start
        )
        WorkflowStateMachine.transition(
            workflow,
            DeploymentStatus.COMPLETED,
            now=start + timedelta(minutes=2),
        )

        assert workflow.started_at == start
        assert workflow.total_duration == 120

    def test_pending_can_be_cancelled(self, workflow: DeploymentWorkflow):
        WorkflowStateMachine.transition(workflow, DeploymentStatus.CANCELLED)

        assert workflow.status == DeploymentStatus.CANCELLED
        assert workflow.total_duration == 1

    @pytest.mark.parametrize(
        "terminal",
        [
            DeploymentStatus.COMPLETED,
            DeploymentStatus.FAILED,
            DeploymentStatus.CANCELLED,
        ],
    )
    def test_terminal_states_are_final(
        self, workflow: DeploymentWorkflow, terminal: DeploymentStatus
    ):
        WorkflowStateMachine.transition(workflow, DeploymentStatus.IN_PROGRESS)
        WorkflowStateMachine.transition(workflow, terminal)

        with pytest.raises(InvalidStateTransitionError):
            WorkflowStateMachine.transition(workflow, DeploymentStatus.IN_PROGRESS)

    def test_workflow_cannot_retry(self, workflow: DeploymentWorkflow):
        WorkflowStateMachine.transition(workflow, DeploymentStatus.IN_PROGRESS)
        WorkflowStateMachine.transition(workflow, DeploymentStatus.FAILED)

        with pytest.raises(InvalidStateTransitionError):
            WorkflowStateMachine.transition(workflow, DeploymentStatus.PENDING)
