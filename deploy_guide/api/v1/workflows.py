"""Deployment workflow endpoints."""

import asyncio
import json
from typing import Annotated

from fastapi import APIRouter, BackgroundTasks, Query, status
from pydantic import BaseModel, Field
from sse_starlette.sse import EventSourceResponse

from deploy_guide.api.deps import EngineDep, EventsDep, RecommenderDep, WorkflowDep
from deploy_guide.core.engine import WorkflowEngine, require_known_kind
from deploy_guide.core.events import Event
from deploy_guide.core.exceptions import DeployGuideError, InvalidStateTransitionError
from deploy_guide.models.deployment import (
    DeploymentConfig,
    DeploymentStatus,
    DeploymentWorkflow,
    WorkflowOptions,
)
from deploy_guide.models.platform import PlatformPreferences
from deploy_guide.models.project import DeploymentPlatform, ProjectConfig
from deploy_guide.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter()

KEEPALIVE_SECONDS = 30.0


class WorkflowCreate(BaseModel):
    """Request to create a workflow.

    When ``platform`` is omitted the recommender picks one from
    ``preferences``.
    """

    project: ProjectConfig
    platform: DeploymentPlatform | None = None
    preferences: PlatformPreferences = Field(default_factory=PlatformPreferences)
    options: WorkflowOptions = Field(default_factory=WorkflowOptions)
    branch_to_deploy: str | None = None
    auto_deploy_enabled: bool = False


class WorkflowListResponse(BaseModel):
    """Response for listing workflows."""

    workflows: list[DeploymentWorkflow]
    total: int
    limit: int
    offset: int


async def run_workflow_background(engine: WorkflowEngine, workflow_id: str) -> None:
    """Background task driving a workflow to completion."""
    try:
        await engine.execute(workflow_id)
    except DeployGuideError as e:
        # Cancelled or discarded before the task got to run
        logger.warning(
            "workflow.background_skipped",
            workflow_id=workflow_id,
            error=e.message,
        )


@router.post(
    "",
    response_model=DeploymentWorkflow,
    status_code=status.HTTP_201_CREATED,
    summary="Create a deployment workflow",
)
async def create_workflow(
    data: WorkflowCreate,
    engine: EngineDep,
    recommender: RecommenderDep,
) -> DeploymentWorkflow:
    require_known_kind(data.project)
    platform = data.platform or recommender.recommend(data.project, data.preferences)
    config = DeploymentConfig(
        platform=platform,
        project=data.project,
        options=data.options,
        branch_to_deploy=data.branch_to_deploy,
        auto_deploy_enabled=data.auto_deploy_enabled,
    )
    return await engine.create(config)


@router.get(
    "",
    response_model=WorkflowListResponse,
    summary="List workflows",
)
async def list_workflows(
    engine: EngineDep,
    status_filter: Annotated[DeploymentStatus | None, Query(alias="status")] = None,
    limit: Annotated[int, Query(ge=1, le=100)] = 10,
    offset: Annotated[int, Query(ge=0)] = 0,
) -> WorkflowListResponse:
    workflows, total = await engine.list_workflows(
        status=status_filter,
        limit=limit,
        offset=offset,
    )
    return WorkflowListResponse(
        workflows=workflows,
        total=total,
        limit=limit,
        offset=offset,
    )


@router.get(
    "/{workflow_id}",
    response_model=DeploymentWorkflow,
    summary="Get workflow status",
)
async def get_workflow(workflow: WorkflowDep) -> DeploymentWorkflow:
    return workflow


@router.post(
    "/{workflow_id}/execute",
    response_model=DeploymentWorkflow,
    status_code=status.HTTP_202_ACCEPTED,
    summary="Start executing a workflow",
    description="Returns immediately while the steps run in the background.",
)
async def execute_workflow(
    workflow: WorkflowDep,
    engine: EngineDep,
    background_tasks: BackgroundTasks,
) -> DeploymentWorkflow:
    if workflow.status != DeploymentStatus.PENDING:
        raise InvalidStateTransitionError(
            workflow.status.value, DeploymentStatus.IN_PROGRESS.value
        )
    background_tasks.add_task(run_workflow_background, engine, workflow.id)
    return workflow


@router.post(
    "/{workflow_id}/cancel",
    response_model=DeploymentWorkflow,
    summary="Cancel a workflow",
)
async def cancel_workflow(workflow: WorkflowDep, engine: EngineDep) -> DeploymentWorkflow:
    return await engine.cancel(workflow.id)


@router.delete(
    "/{workflow_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Discard a workflow",
)
async def delete_workflow(workflow: WorkflowDep, engine: EngineDep) -> None:
    """Cancel a running workflow if needed and forget it."""
    await engine.discard(workflow.id)


@router.get(
    "/{workflow_id}/stream",
    summary="Stream workflow events (SSE)",
)
async def stream_workflow_events(
    workflow: WorkflowDep,
    events: EventsDep,
) -> EventSourceResponse:
    """Stream lifecycle events until the workflow reaches a terminal state."""

    async def event_generator():
        queue = events.subscribe(workflow.id)

        try:
            yield {
                "event": "connected",
                "data": json.dumps(
                    {"workflow_id": workflow.id, "status": workflow.status.value}
                ),
            }
            if workflow.status.is_terminal:
                return

            while True:
                try:
                    event: Event = await asyncio.wait_for(
                        queue.get(), timeout=KEEPALIVE_SECONDS
                    )
                    yield {
                        "event": event.event_type,
                        "data": json.dumps(event.data, default=str),
                    }
                    if event.is_terminal:
                        break

                except asyncio.TimeoutError:
                    yield {"event": "keepalive", "data": "{}"}

        finally:
            events.unsubscribe(queue)

    return EventSourceResponse(event_generator())
