"""Deployment workflow engine.

Drives a workflow through its fixed six-step plan:

1. validate - score project readiness
2. authenticate - sign in to the platform
3. provision - create the project on the platform
4. deploy - build and publish
5. configure_production - apply production settings
6. verify - probe the live deployment

Steps run strictly in order because later steps consume what earlier ones
produce (platform project id, deployment URL). A failing step is retried
with a linear backoff until its budget is spent, then the workflow fails and
no later step starts.
"""

import asyncio
from dataclasses import dataclass
from typing import Awaitable, Callable

from deploy_guide.adapters.base import PlatformAdapter, Probe
from deploy_guide.adapters.http_probe import HttpProbe
from deploy_guide.adapters.simulated import SimulatedPlatformAdapter, SimulatedProbe
from deploy_guide.config import settings
from deploy_guide.core.events import EventBus, WorkflowEventType, get_event_bus
from deploy_guide.core.exceptions import (
    DeployGuideError,
    InvalidConfigError,
    InvalidStateTransitionError,
    RetriesExhaustedError,
    StepActionError,
    WorkflowNotFoundError,
    WorkflowTimeoutError,
)
from deploy_guide.core.guidance import GuidanceGenerator
from deploy_guide.core.repository import WorkflowRepository, get_workflow_repository
from deploy_guide.core.state_machine import StepStateMachine, WorkflowStateMachine
from deploy_guide.core.validation import ValidationScorer
from deploy_guide.models.deployment import (
    DeploymentConfig,
    DeploymentStatus,
    DeploymentStep,
    DeploymentWorkflow,
    StepAction,
)
from deploy_guide.models.project import ProjectConfig
from deploy_guide.utils.logging import get_logger

StepHandler = Callable[[DeploymentWorkflow, DeploymentStep], Awaitable[None]]


@dataclass(frozen=True)
class StepBlueprint:
    action: StepAction
    title: str
    description: str
    max_retries: int


STEP_PLAN: tuple[StepBlueprint, ...] = (
    StepBlueprint(
        StepAction.VALIDATE,
        "Validate Configuration",
        "Check project settings and build configuration",
        1,
    ),
    StepBlueprint(
        StepAction.AUTHENTICATE,
        "Authenticate Platform",
        "Authenticate with {platform}",
        2,
    ),
    StepBlueprint(
        StepAction.PROVISION,
        "Provision Project",
        "Create and configure project on {platform}",
        2,
    ),
    StepBlueprint(
        StepAction.DEPLOY,
        "Deploy Application",
        "Build and deploy the application",
        3,
    ),
    StepBlueprint(
        StepAction.CONFIGURE_PRODUCTION,
        "Configure Production Settings",
        "Apply production configuration and optimizations",
        2,
    ),
    StepBlueprint(
        StepAction.VERIFY,
        "Verify Deployment",
        "Test deployed application and verify functionality",
        2,
    ),
)


def backoff_delay(base_seconds: float, attempt: int) -> float:
    """Pause before retry number ``attempt``. Linear: base x attempt."""
    return base_seconds * attempt


def require_known_kind(project: ProjectConfig) -> None:
    """Reject projects whose kind matches no site builder.

    Raises:
        InvalidConfigError: If the kind is unknown.
    """
    if not project.has_known_kind:
        raise InvalidConfigError(
            f"Unknown project kind: {project.kind}",
            {"kind": project.kind, "project_id": project.id},
        )


class _ActionAbandoned(Exception):
    """Raised internally when a cancel interrupts an in-flight action."""


class WorkflowEngine:
    """Creates, executes and cancels deployment workflows."""

    def __init__(
        self,
        adapter: PlatformAdapter | None = None,
        scorer: ValidationScorer | None = None,
        repository: WorkflowRepository | None = None,
        events: EventBus | None = None,
        guidance: GuidanceGenerator | None = None,
    ):
        self.adapter = adapter or SimulatedPlatformAdapter()
        self.scorer = scorer or ValidationScorer(probe=SimulatedProbe())
        self.repository = repository or get_workflow_repository()
        self.events = events or get_event_bus()
        self.guidance = guidance or GuidanceGenerator()
        self.logger = get_logger("engine")

        self._cancel_events: dict[str, asyncio.Event] = {}
        self._active_steps: dict[str, DeploymentStep] = {}
        self._handlers: dict[StepAction, StepHandler] = {
            StepAction.VALIDATE: self._validate_project,
            StepAction.AUTHENTICATE: self._authenticate,
            StepAction.PROVISION: self._provision,
            StepAction.DEPLOY: self._deploy,
            StepAction.CONFIGURE_PRODUCTION: self._configure_production,
            StepAction.VERIFY: self._verify_deployment,
        }

    # -- public API ----------------------------------------------------------

    async def create(self, config: DeploymentConfig) -> DeploymentWorkflow:
        """Build a PENDING workflow and register it.

        Raises:
            InvalidConfigError: If the project kind is not recognised.
        """
        project = config.project
        require_known_kind(project)

        workflow = DeploymentWorkflow(
            project_id=project.id,
            config=config.model_copy(deep=True),
            steps=self._build_steps(config),
        )
        await self.repository.put(workflow)

        self.logger.info(
            "engine.workflow.created",
            workflow_id=workflow.id,
            project_id=project.id,
            platform=config.platform.value,
        )
        await self.events.publish_workflow_event(
            WorkflowEventType.WORKFLOW_CREATED, workflow
        )
        return workflow.snapshot()

    async def execute(self, workflow_id: str) -> DeploymentWorkflow:
        """Run a PENDING workflow to a terminal state and return a snapshot.

        Step failures never raise here; they end up in the step's ``error``
        and logs and in the workflow's terminal status.

        Raises:
            WorkflowNotFoundError: If the id is unknown.
            InvalidStateTransitionError: If the workflow is not PENDING.
        """
        workflow = await self._require(workflow_id)

        async with self.repository.lock(workflow_id):
            if workflow.status != DeploymentStatus.PENDING:
                raise InvalidStateTransitionError(
                    workflow.status.value, DeploymentStatus.IN_PROGRESS.value
                )
            WorkflowStateMachine.transition(workflow, DeploymentStatus.IN_PROGRESS)
            cancel_event = asyncio.Event()
            self._cancel_events[workflow_id] = cancel_event
            await self.repository.put(workflow)

        self.logger.info("engine.workflow.started", workflow_id=workflow_id)
        await self.events.publish_workflow_event(
            WorkflowEventType.WORKFLOW_STARTED, workflow
        )

        options = workflow.config.options
        try:
            await asyncio.wait_for(
                self._run_steps(workflow, cancel_event),
                timeout=options.timeout_minutes * 60,
            )
        except asyncio.TimeoutError:
            error = WorkflowTimeoutError(workflow_id, options.timeout_minutes)
            await self._fail_workflow(workflow, error.message)
        except Exception as e:
            self.logger.exception(
                "engine.workflow.crashed", workflow_id=workflow_id, error=str(e)
            )
            await self._fail_workflow(workflow, str(e) or type(e).__name__)
        finally:
            self._cancel_events.pop(workflow_id, None)
            self._active_steps.pop(workflow_id, None)

        return workflow.snapshot()

    async def cancel(self, workflow_id: str) -> DeploymentWorkflow:
        """Cancel a workflow; no-op if it already reached a terminal state.

        Raises:
            WorkflowNotFoundError: If the id is unknown.
        """
        workflow = await self._require(workflow_id)

        async with self.repository.lock(workflow_id):
            if workflow.status.is_terminal:
                return workflow.snapshot()

            for step in workflow.steps:
                if step.status == DeploymentStatus.IN_PROGRESS:
                    StepStateMachine.transition(step, DeploymentStatus.CANCELLED)
                    step.log("Step cancelled")
            WorkflowStateMachine.transition(workflow, DeploymentStatus.CANCELLED)

            cancel_event = self._cancel_events.get(workflow_id)
            if cancel_event is not None:
                cancel_event.set()
            await self.repository.put(workflow)

        self.logger.info("engine.workflow.cancelled", workflow_id=workflow_id)
        await self.events.publish_workflow_event(
            WorkflowEventType.WORKFLOW_CANCELLED, workflow
        )
        return workflow.snapshot()

    async def get_status(self, workflow_id: str) -> DeploymentWorkflow:
        """Return a defensive copy of the workflow.

        Raises:
            WorkflowNotFoundError: If the id is unknown.
        """
        workflow = await self._require(workflow_id)
        return workflow.snapshot()

    async def list_workflows(
        self,
        status: DeploymentStatus | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> tuple[list[DeploymentWorkflow], int]:
        workflows, total = await self.repository.list_workflows(
            status=status, limit=limit, offset=offset
        )
        return [w.snapshot() for w in workflows], total

    async def discard(self, workflow_id: str) -> None:
        """Forget a workflow, cancelling it first if it is still running."""
        workflow = await self._require(workflow_id)
        if not workflow.status.is_terminal:
            await self.cancel(workflow_id)
        await self.repository.delete(workflow_id)
        self.logger.info("engine.workflow.discarded", workflow_id=workflow_id)

    # -- execution -----------------------------------------------------------

    def _build_steps(self, config: DeploymentConfig) -> list[DeploymentStep]:
        cap = config.options.max_retry_attempts
        return [
            DeploymentStep(
                action=blueprint.action,
                title=blueprint.title,
                description=blueprint.description.format(
                    platform=config.platform.value
                ),
                max_retries=min(blueprint.max_retries, cap),
            )
            for blueprint in STEP_PLAN
        ]

    async def _require(self, workflow_id: str) -> DeploymentWorkflow:
        workflow = await self.repository.get(workflow_id)
        if workflow is None:
            raise WorkflowNotFoundError(workflow_id)
        return workflow

    async def _run_steps(
        self, workflow: DeploymentWorkflow, cancel_event: asyncio.Event
    ) -> None:
        for step in workflow.steps:
            self._active_steps[workflow.id] = step
            outcome = await self._run_step(workflow, step, cancel_event)
            if outcome != DeploymentStatus.COMPLETED:
                return

        async with self.repository.lock(workflow.id):
            if workflow.status != DeploymentStatus.IN_PROGRESS:
                return
            WorkflowStateMachine.transition(workflow, DeploymentStatus.COMPLETED)
            await self.repository.put(workflow)

        self.logger.info(
            "engine.workflow.completed",
            workflow_id=workflow.id,
            total_duration=workflow.total_duration,
            deployment_url=workflow.deployment_url,
        )
        await self.events.publish_workflow_event(
            WorkflowEventType.WORKFLOW_COMPLETED, workflow
        )

    async def _run_step(
        self,
        workflow: DeploymentWorkflow,
        step: DeploymentStep,
        cancel_event: asyncio.Event,
    ) -> DeploymentStatus:
        """Run one step with retries and return its final status."""
        handler = self._handlers[step.action]
        options = workflow.config.options

        while True:
            async with self.repository.lock(workflow.id):
                if cancel_event.is_set():
                    return DeploymentStatus.CANCELLED
                StepStateMachine.transition(step, DeploymentStatus.IN_PROGRESS)
                await self.repository.put(workflow)

            self.logger.info(
                "engine.step.started",
                workflow_id=workflow.id,
                step=step.action.value,
                attempt=step.attempts,
            )
            await self.events.publish_workflow_event(
                WorkflowEventType.STEP_STARTED, workflow, step
            )

            try:
                await self._race_cancel(handler(workflow, step), cancel_event)
            except _ActionAbandoned:
                return DeploymentStatus.CANCELLED
            except Exception as e:
                error = e.message if isinstance(e, DeployGuideError) else str(e)
                error = error or type(e).__name__

                async with self.repository.lock(workflow.id):
                    if cancel_event.is_set():
                        return DeploymentStatus.CANCELLED

                    step.error = error
                    step.log(f"Error: {error}")
                    StepStateMachine.transition(step, DeploymentStatus.FAILED)

                    retrying = step.can_retry
                    if retrying:
                        StepStateMachine.transition(step, DeploymentStatus.PENDING)
                        step.log(
                            f"Retrying step (attempt {step.retry_count + 1}/"
                            f"{step.max_retries + 1})"
                        )
                    else:
                        exhausted = RetriesExhaustedError(
                            step.title, step.attempts, error
                        )
                        workflow.error = exhausted.message
                        WorkflowStateMachine.transition(
                            workflow, DeploymentStatus.FAILED
                        )
                    await self.repository.put(workflow)

                if retrying:
                    delay = backoff_delay(options.retry_base_delay, step.retry_count)
                    self.logger.warning(
                        "engine.step.retrying",
                        workflow_id=workflow.id,
                        step=step.action.value,
                        retry_count=step.retry_count,
                        max_retries=step.max_retries,
                        delay_seconds=delay,
                        error=error,
                    )
                    if await self._wait_or_cancel(delay, cancel_event):
                        return DeploymentStatus.CANCELLED
                    continue

                self.logger.error(
                    "engine.step.failed",
                    workflow_id=workflow.id,
                    step=step.action.value,
                    attempts=step.attempts,
                    error=error,
                )
                await self.events.publish_workflow_event(
                    WorkflowEventType.STEP_FAILED, workflow, step, error=error
                )
                await self.events.publish_workflow_event(
                    WorkflowEventType.WORKFLOW_FAILED,
                    workflow,
                    error=workflow.error,
                )
                return DeploymentStatus.FAILED

            async with self.repository.lock(workflow.id):
                if cancel_event.is_set():
                    return DeploymentStatus.CANCELLED
                StepStateMachine.transition(step, DeploymentStatus.COMPLETED)
                await self.repository.put(workflow)

            self.logger.info(
                "engine.step.completed",
                workflow_id=workflow.id,
                step=step.action.value,
                duration=step.duration,
                retry_count=step.retry_count,
            )
            await self.events.publish_workflow_event(
                WorkflowEventType.STEP_COMPLETED, workflow, step
            )
            return DeploymentStatus.COMPLETED

    async def _race_cancel(
        self, action: Awaitable[None], cancel_event: asyncio.Event
    ) -> None:
        """Await ``action`` unless the workflow is cancelled first."""
        action_task = asyncio.ensure_future(action)
        cancel_task = asyncio.ensure_future(cancel_event.wait())
        try:
            done, _ = await asyncio.wait(
                {action_task, cancel_task},
                return_when=asyncio.FIRST_COMPLETED,
            )
        finally:
            cancel_task.cancel()
            if not action_task.done():
                action_task.cancel()

        if action_task not in done:
            raise _ActionAbandoned()
        action_task.result()

    async def _wait_or_cancel(self, delay: float, cancel_event: asyncio.Event) -> bool:
        """Sleep for ``delay`` seconds. Returns True if cancelled meanwhile."""
        if cancel_event.is_set():
            return True
        try:
            await asyncio.wait_for(cancel_event.wait(), timeout=delay)
        except asyncio.TimeoutError:
            return False
        return True

    async def _fail_workflow(self, workflow: DeploymentWorkflow, error: str) -> None:
        """Force FAILED from outside the per-step retry loop."""
        async with self.repository.lock(workflow.id):
            if workflow.status.is_terminal:
                return
            failed_step = self._active_steps.get(workflow.id)
            if failed_step is not None and (
                failed_step.status.is_terminal or failed_step.started_at is None
            ):
                failed_step = None
            if failed_step is not None:
                failed_step.error = error
                failed_step.log(f"Error: {error}")
                StepStateMachine.transition(failed_step, DeploymentStatus.FAILED)
            workflow.error = error
            WorkflowStateMachine.transition(workflow, DeploymentStatus.FAILED)
            await self.repository.put(workflow)

        self.logger.error(
            "engine.workflow.failed", workflow_id=workflow.id, error=error
        )
        if failed_step is not None:
            await self.events.publish_workflow_event(
                WorkflowEventType.STEP_FAILED, workflow, failed_step, error=error
            )
        await self.events.publish_workflow_event(
            WorkflowEventType.WORKFLOW_FAILED, workflow, error=error
        )

    # -- step actions --------------------------------------------------------

    async def _validate_project(
        self, workflow: DeploymentWorkflow, step: DeploymentStep
    ) -> None:
        if not workflow.config.options.enable_validation:
            step.log("Validation disabled, skipping readiness checks")
            return

        step.log("Validating project configuration...")
        validation = self.scorer.validate_readiness(workflow.project)
        step.log(f"Readiness score: {validation.overall_score}/100")

        if not validation.is_valid:
            raise StepActionError(
                step.title,
                f"Validation failed: {', '.join(validation.recommendations)}",
            )
        step.log("Project validation completed successfully")

    async def _authenticate(
        self, workflow: DeploymentWorkflow, step: DeploymentStep
    ) -> None:
        platform = workflow.platform
        step.log(f"Authenticating with {platform.value}...")

        if not await self.adapter.authenticate(platform):
            raise StepActionError(
                step.title, f"Authentication failed for {platform.value}"
            )
        step.log("Authentication completed successfully")

    async def _provision(
        self, workflow: DeploymentWorkflow, step: DeploymentStep
    ) -> None:
        step.log("Setting up project on platform...")
        platform_project_id = await self.adapter.provision(
            workflow.platform, workflow.project
        )
        workflow.platform_project_id = platform_project_id
        step.log(f"Project setup completed successfully ({platform_project_id})")

    async def _deploy(self, workflow: DeploymentWorkflow, step: DeploymentStep) -> None:
        step.log("Starting deployment...")
        result = await self.adapter.deploy(workflow.platform, workflow.project)

        workflow.build_logs.extend(result.build_logs)
        workflow.deployment_url = result.deployment_url
        workflow.preview_url = result.preview_url or result.deployment_url
        workflow.deployment_logs.append(
            f"Deployed {result.deployment_id or 'build'} to {result.deployment_url}"
        )
        step.log(f"Deployment completed: {result.deployment_url}")

    async def _configure_production(
        self, workflow: DeploymentWorkflow, step: DeploymentStep
    ) -> None:
        step.log("Configuring production settings...")
        production_steps = self.guidance.production_guidance(
            workflow.platform, workflow.project
        )
        for production_step in production_steps:
            step.log(f"Applying: {production_step.title}")

        await self.adapter.configure_production(workflow.platform, workflow.project)
        step.log(f"Applied {len(production_steps)} production settings")

        custom_domain = workflow.project.custom_domain
        if custom_domain:
            workflow.deployment_url = f"https://{custom_domain}"
            workflow.deployment_logs.append(
                f"Custom domain configured: {workflow.deployment_url}"
            )
            step.log(f"Custom domain configured: {workflow.deployment_url}")

        step.log("Production configuration completed successfully")

    async def _verify_deployment(
        self, workflow: DeploymentWorkflow, step: DeploymentStep
    ) -> None:
        if not workflow.config.options.enable_validation:
            step.log("Validation disabled, skipping deployment tests")
            return

        step.log("Testing deployed application...")
        if not workflow.deployment_url:
            raise StepActionError(
                step.title, "Deployment URL not available for testing"
            )

        results = await self.scorer.validate_post_deploy(
            workflow.deployment_url, workflow.project
        )
        if not results.is_valid:
            summary = ", ".join(results.recommendations)
            step.log(f"Deployment tests failed: {summary}")
            raise StepActionError(
                step.title, f"Deployment validation failed: {summary}"
            )
        step.log(
            "Deployment validation completed successfully "
            f"(Score: {results.overall_score}/100)"
        )


def build_probe() -> Probe:
    """Probe selected by ``settings.probe_mode``."""
    if settings.probe_mode == "http":
        return HttpProbe(timeout_seconds=settings.probe_timeout_seconds)
    return SimulatedProbe()


# Singleton instance
_engine: WorkflowEngine | None = None


def get_workflow_engine() -> WorkflowEngine:
    """Get the workflow engine singleton."""
    global _engine
    if _engine is None:
        _engine = WorkflowEngine(scorer=ValidationScorer(probe=build_probe()))
    return _engine
