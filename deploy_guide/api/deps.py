"""Dependency injection for API endpoints."""

from typing import Annotated

from fastapi import Depends

from deploy_guide.core.engine import WorkflowEngine, get_workflow_engine
from deploy_guide.core.events import EventBus, get_event_bus
from deploy_guide.core.guidance import GuidanceGenerator
from deploy_guide.core.recommender import PlatformRecommender
from deploy_guide.models.deployment import DeploymentWorkflow


async def get_engine() -> WorkflowEngine:
    """Get the workflow engine."""
    return get_workflow_engine()


async def get_events() -> EventBus:
    """Get the event bus."""
    return get_event_bus()


async def get_recommender() -> PlatformRecommender:
    return PlatformRecommender()


async def get_guidance() -> GuidanceGenerator:
    return GuidanceGenerator()


async def get_workflow_by_id(
    workflow_id: str,
    engine: Annotated[WorkflowEngine, Depends(get_engine)],
) -> DeploymentWorkflow:
    """Get a workflow snapshot by ID; unknown ids surface as 404."""
    return await engine.get_status(workflow_id)


# Type aliases for cleaner signatures
EngineDep = Annotated[WorkflowEngine, Depends(get_engine)]
EventsDep = Annotated[EventBus, Depends(get_events)]
RecommenderDep = Annotated[PlatformRecommender, Depends(get_recommender)]
GuidanceDep = Annotated[GuidanceGenerator, Depends(get_guidance)]
WorkflowDep = Annotated[DeploymentWorkflow, Depends(get_workflow_by_id)]
