"""Platform catalog and recommendation endpoints."""

from typing import Annotated

from fastapi import APIRouter, Query
from pydantic import BaseModel, Field

from deploy_guide.api.deps import RecommenderDep
from deploy_guide.models.platform import (
    PlatformCapabilities,
    PlatformPreferences,
    PlatformScore,
)
from deploy_guide.models.project import DeploymentPlatform, ProjectConfig

router = APIRouter()


class PlatformListResponse(BaseModel):
    platforms: list[PlatformCapabilities]
    total: int


class RecommendRequest(BaseModel):
    """Project plus optional preferences to score platforms against."""

    project: ProjectConfig
    preferences: PlatformPreferences = Field(default_factory=PlatformPreferences)


class RecommendResponse(BaseModel):
    platform: DeploymentPlatform
    ranking: list[PlatformScore]


@router.get(
    "",
    response_model=PlatformListResponse,
    summary="List known hosting platforms",
)
async def list_platforms(recommender: RecommenderDep) -> PlatformListResponse:
    platforms = recommender.catalog.all()
    return PlatformListResponse(platforms=platforms, total=len(platforms))


@router.get(
    "/compatible",
    response_model=PlatformListResponse,
    summary="List platforms supporting a project kind",
)
async def list_compatible_platforms(
    recommender: RecommenderDep,
    kind: Annotated[str, Query(min_length=1)],
) -> PlatformListResponse:
    """Platforms for ``kind``, easiest setup first."""
    platforms = recommender.compatible_with_kind(kind)
    return PlatformListResponse(platforms=platforms, total=len(platforms))


@router.post(
    "/recommend",
    response_model=RecommendResponse,
    summary="Recommend a platform for a project",
)
async def recommend_platform(
    data: RecommendRequest,
    recommender: RecommenderDep,
) -> RecommendResponse:
    """Rank compatible platforms; 409 when none supports the project kind."""
    ranking = recommender.rank(data.project, data.preferences)
    return RecommendResponse(platform=ranking[0].platform, ranking=ranking)
