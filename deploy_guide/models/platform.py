"""Hosting platform capability models."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from deploy_guide.models.project import DeploymentPlatform

PricingTier = Literal["free", "paid", "enterprise"]
SetupComplexity = Literal["easy", "medium", "complex"]

# Ordering used when sorting platforms by how hard they are to set up
COMPLEXITY_RANK: dict[str, int] = {"easy": 1, "medium": 2, "complex": 3}


class PlatformFeature(BaseModel):
    """A named platform feature."""

    model_config = ConfigDict(frozen=True)

    name: str
    description: str = ""
    available: bool = True
    requires_paid_plan: bool = False


class PlatformCapabilities(BaseModel):
    """What a hosting platform supports and what it costs to adopt."""

    model_config = ConfigDict(frozen=True)

    platform: DeploymentPlatform
    display_name: str
    supported_kinds: frozenset[str]
    features: tuple[PlatformFeature, ...] = ()
    limitations: tuple[str, ...] = ()
    pricing_tier: PricingTier = "free"
    setup_complexity: SetupComplexity = "easy"

    def supports(self, kind: str) -> bool:
        return kind in self.supported_kinds

    def has_feature(self, keyword: str) -> bool:
        """True if an available feature's name contains ``keyword``."""
        keyword = keyword.lower()
        return any(f.available and keyword in f.name.lower() for f in self.features)


class PlatformPreferences(BaseModel):
    """User preferences that steer platform recommendation."""

    prefer_free: bool = False
    prefer_easy_setup: bool = False
    require_custom_domain: bool = False
    require_ssl: bool = False
    expected_traffic: Literal["low", "medium", "high"] | None = None
    technical_expertise: Literal["beginner", "intermediate", "advanced"] | None = None


class PlatformScore(BaseModel):
    """Recommendation score for one compatible platform."""

    platform: DeploymentPlatform
    score: int = 0
    reasons: list[str] = Field(default_factory=list)
