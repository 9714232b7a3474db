"""Deployment guidance endpoints."""

from fastapi import APIRouter
from pydantic import BaseModel

from deploy_guide.api.deps import GuidanceDep
from deploy_guide.models.guidance import GuidanceStep
from deploy_guide.models.project import DeploymentPlatform, ProjectConfig

router = APIRouter()


class GuidanceRequest(BaseModel):
    platform: DeploymentPlatform
    project: ProjectConfig


class GuidanceResponse(BaseModel):
    platform: DeploymentPlatform
    steps: list[GuidanceStep]
    estimated_minutes: int

    @classmethod
    def from_steps(
        cls, platform: DeploymentPlatform, steps: list[GuidanceStep]
    ) -> "GuidanceResponse":
        return cls(
            platform=platform,
            steps=steps,
            estimated_minutes=sum(s.estimated_minutes for s in steps),
        )


@router.post(
    "/deployment",
    response_model=GuidanceResponse,
    summary="Step-by-step deployment instructions",
)
async def deployment_guidance(
    data: GuidanceRequest,
    guidance: GuidanceDep,
) -> GuidanceResponse:
    steps = guidance.deployment_guidance(data.platform, data.project)
    return GuidanceResponse.from_steps(data.platform, steps)


@router.post(
    "/production",
    response_model=GuidanceResponse,
    summary="Production hardening instructions",
)
async def production_guidance(
    data: GuidanceRequest,
    guidance: GuidanceDep,
) -> GuidanceResponse:
    steps = guidance.production_guidance(data.platform, data.project)
    return GuidanceResponse.from_steps(data.platform, steps)
