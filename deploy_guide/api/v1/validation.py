"""Readiness and post-deploy validation endpoints."""

from fastapi import APIRouter
from pydantic import BaseModel

from deploy_guide.api.deps import EngineDep
from deploy_guide.models.project import ProjectConfig
from deploy_guide.models.validation import DeploymentValidation

router = APIRouter()


class PostDeployRequest(BaseModel):
    """A live URL and the project deployed to it."""

    url: str
    project: ProjectConfig


@router.post(
    "/readiness",
    response_model=DeploymentValidation,
    summary="Score a project's readiness for deployment",
)
async def validate_readiness(
    project: ProjectConfig,
    engine: EngineDep,
) -> DeploymentValidation:
    return engine.scorer.validate_readiness(project)


@router.post(
    "/post-deploy",
    response_model=DeploymentValidation,
    summary="Probe a deployed site",
)
async def validate_post_deploy(
    data: PostDeployRequest,
    engine: EngineDep,
) -> DeploymentValidation:
    """Run connectivity, SSL, performance, SEO and functionality probes."""
    return await engine.scorer.validate_post_deploy(data.url, data.project)
