"""Platform recommendation by additive preference scoring."""

from deploy_guide.core.catalog import PlatformCatalog, get_platform_catalog
from deploy_guide.core.exceptions import NoCompatiblePlatformError
from deploy_guide.models.platform import (
    COMPLEXITY_RANK,
    PlatformCapabilities,
    PlatformPreferences,
    PlatformScore,
)
from deploy_guide.models.project import DeploymentPlatform, ProjectConfig
from deploy_guide.utils.logging import get_logger

FREE_TIER_BONUS = 30
EASY_SETUP_BONUS = 25
REQUIRED_FEATURE_BONUS = 20
MISSING_CUSTOM_DOMAIN_PENALTY = 50
MISSING_SSL_PENALTY = 40
BEGINNER_EASY_BONUS = 20
ADVANCED_COMPLEX_BONUS = 10


class PlatformRecommender:
    """Picks the compatible platform that best fits user preferences."""

    def __init__(self, catalog: PlatformCatalog | None = None):
        self.catalog = catalog or get_platform_catalog()
        self.logger = get_logger("recommender")

    def list_compatible(self, config: ProjectConfig) -> list[PlatformCapabilities]:
        """Platforms supporting the project's kind, easiest setup first."""
        return self.compatible_with_kind(config.kind)

    def compatible_with_kind(self, kind: str) -> list[PlatformCapabilities]:
        compatible = self.catalog.supporting(kind)
        # sorted() is stable, so equal complexity keeps catalog order
        return sorted(compatible, key=lambda c: COMPLEXITY_RANK[c.setup_complexity])

    def score(
        self,
        capabilities: PlatformCapabilities,
        preferences: PlatformPreferences,
    ) -> PlatformScore:
        """Additive preference score for one platform."""
        result = PlatformScore(platform=capabilities.platform)

        def adjust(points: int, reason: str) -> None:
            result.score += points
            result.reasons.append(f"{points:+d} {reason}")

        if preferences.prefer_free and capabilities.pricing_tier == "free":
            adjust(FREE_TIER_BONUS, "free tier available")

        if preferences.prefer_easy_setup and capabilities.setup_complexity == "easy":
            adjust(EASY_SETUP_BONUS, "easy setup")

        if preferences.require_custom_domain:
            if capabilities.has_feature("custom domain"):
                adjust(REQUIRED_FEATURE_BONUS, "supports custom domains")
            else:
                adjust(-MISSING_CUSTOM_DOMAIN_PENALTY, "no custom domain support")

        if preferences.require_ssl:
            if capabilities.has_feature("ssl"):
                adjust(REQUIRED_FEATURE_BONUS, "provides SSL")
            else:
                adjust(-MISSING_SSL_PENALTY, "no SSL support")

        if (
            preferences.technical_expertise == "beginner"
            and capabilities.setup_complexity == "easy"
        ):
            adjust(BEGINNER_EASY_BONUS, "beginner friendly")
        elif (
            preferences.technical_expertise == "advanced"
            and capabilities.setup_complexity == "complex"
        ):
            # Advanced users may want the extra control
            adjust(ADVANCED_COMPLEX_BONUS, "full control for advanced users")

        return result

    def rank(
        self,
        config: ProjectConfig,
        preferences: PlatformPreferences | None = None,
    ) -> list[PlatformScore]:
        """Score every compatible platform, best first.

        Raises:
            NoCompatiblePlatformError: If no platform supports the kind.
        """
        preferences = preferences or PlatformPreferences()
        compatible = self.list_compatible(config)
        if not compatible:
            raise NoCompatiblePlatformError(config.kind)

        scored = [self.score(c, preferences) for c in compatible]
        # Stable sort: ties keep list_compatible order
        return sorted(scored, key=lambda s: s.score, reverse=True)

    def recommend(
        self,
        config: ProjectConfig,
        preferences: PlatformPreferences | None = None,
    ) -> DeploymentPlatform:
        """Return the highest scoring compatible platform."""
        ranking = self.rank(config, preferences)
        best = ranking[0]

        self.logger.info(
            "recommender.platform_recommended",
            project_id=config.id,
            platform=best.platform.value,
            score=best.score,
            alternatives=[
                {"platform": s.platform.value, "score": s.score} for s in ranking[1:]
            ],
        )
        return best.platform
