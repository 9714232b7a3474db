"""Registry of hosting platform capabilities."""

from functools import lru_cache
from typing import Iterable, Iterator

from deploy_guide.models.platform import PlatformCapabilities, PlatformFeature
from deploy_guide.models.project import DeploymentPlatform, ProjectKind

_WEB_BUILDERS = frozenset(
    {
        ProjectKind.BUILDER_IO.value,
        ProjectKind.LOVABLE.value,
        ProjectKind.BOLT_NEW.value,
    }
)

DEFAULT_CAPABILITIES: tuple[PlatformCapabilities, ...] = (
    PlatformCapabilities(
        platform=DeploymentPlatform.VERCEL,
        display_name="Vercel",
        supported_kinds=_WEB_BUILDERS,
        features=(
            PlatformFeature(name="Custom Domain", description="Use your own domain"),
            PlatformFeature(name="SSL Certificate", description="Automatic HTTPS"),
            PlatformFeature(
                name="Edge Functions",
                description="Serverless functions at the edge",
            ),
            PlatformFeature(
                name="Analytics",
                description="Built-in analytics",
                requires_paid_plan=True,
            ),
        ),
        limitations=("Limited build minutes on free plan",),
        pricing_tier="free",
        setup_complexity="easy",
    ),
    PlatformCapabilities(
        platform=DeploymentPlatform.NETLIFY,
        display_name="Netlify",
        supported_kinds=_WEB_BUILDERS,
        features=(
            PlatformFeature(name="Custom Domain", description="Use your own domain"),
            PlatformFeature(name="SSL Certificate", description="Automatic HTTPS"),
            PlatformFeature(
                name="Form Handling", description="Built-in form processing"
            ),
            PlatformFeature(
                name="Split Testing",
                description="A/B testing",
                requires_paid_plan=True,
            ),
        ),
        limitations=("Limited bandwidth on free plan",),
        pricing_tier="free",
        setup_complexity="easy",
    ),
    PlatformCapabilities(
        platform=DeploymentPlatform.CLOUDFLARE_PAGES,
        display_name="Cloudflare Pages",
        supported_kinds=_WEB_BUILDERS,
        features=(
            PlatformFeature(name="Custom Domain", description="Use your own domain"),
            PlatformFeature(name="SSL Certificate", description="Automatic HTTPS"),
            PlatformFeature(
                name="Pages Functions", description="Workers-based server code"
            ),
        ),
        limitations=("500 builds per month on free plan",),
        pricing_tier="free",
        setup_complexity="easy",
    ),
    PlatformCapabilities(
        platform=DeploymentPlatform.GITHUB_PAGES,
        display_name="GitHub Pages",
        supported_kinds=frozenset(
            {ProjectKind.BUILDER_IO.value, ProjectKind.LOVABLE.value}
        ),
        features=(
            PlatformFeature(name="Custom Domain", description="Use your own domain"),
            PlatformFeature(name="SSL Certificate", description="Enforced HTTPS"),
            PlatformFeature(
                name="Serverless Functions",
                description="Server-side code",
                available=False,
            ),
        ),
        limitations=(
            "Static content only",
            "1 GB repository size limit",
        ),
        pricing_tier="free",
        setup_complexity="easy",
    ),
    PlatformCapabilities(
        platform=DeploymentPlatform.FIREBASE_HOSTING,
        display_name="Firebase Hosting",
        supported_kinds=frozenset(
            {
                ProjectKind.FIREBASE_STUDIO.value,
                ProjectKind.BUILDER_IO.value,
                ProjectKind.LOVABLE.value,
            }
        ),
        features=(
            PlatformFeature(name="Custom Domain", description="Use your own domain"),
            PlatformFeature(
                name="SSL Certificate", description="Provisioned certificates"
            ),
            PlatformFeature(
                name="Cloud Functions",
                description="Backend functions",
                requires_paid_plan=True,
            ),
        ),
        limitations=("10 GB storage on free plan",),
        pricing_tier="free",
        setup_complexity="medium",
    ),
    PlatformCapabilities(
        platform=DeploymentPlatform.HEROKU,
        display_name="Heroku",
        supported_kinds=frozenset(
            {ProjectKind.REPLIT.value, ProjectKind.BOLT_NEW.value}
        ),
        features=(
            PlatformFeature(
                name="Custom Domain",
                description="Use your own domain",
                requires_paid_plan=True,
            ),
            PlatformFeature(
                name="SSL Certificate",
                description="Automated certificate management",
                requires_paid_plan=True,
            ),
            PlatformFeature(name="Add-ons", description="Managed databases and tools"),
        ),
        limitations=("No free tier", "Dynos sleep on eco plan"),
        pricing_tier="paid",
        setup_complexity="medium",
    ),
    PlatformCapabilities(
        platform=DeploymentPlatform.AWS_S3,
        display_name="AWS S3",
        supported_kinds=frozenset(
            {
                ProjectKind.BUILDER_IO.value,
                ProjectKind.LOVABLE.value,
                ProjectKind.BOLT_NEW.value,
                ProjectKind.REPLIT.value,
            }
        ),
        features=(
            PlatformFeature(name="Custom Domain", description="Route 53 or external DNS"),
            PlatformFeature(
                name="SSL Certificate",
                description="Only through a CloudFront distribution",
                available=False,
            ),
            PlatformFeature(name="CDN", description="CloudFront integration"),
        ),
        limitations=(
            "Static website endpoints are HTTP only",
            "Pay per request and storage",
        ),
        pricing_tier="paid",
        setup_complexity="complex",
    ),
)


class PlatformCatalog:
    """Queryable registry of platform capabilities in registration order."""

    def __init__(self, capabilities: Iterable[PlatformCapabilities] = DEFAULT_CAPABILITIES):
        self._capabilities: dict[DeploymentPlatform, PlatformCapabilities] = {}
        for entry in capabilities:
            self._capabilities[entry.platform] = entry

    def __iter__(self) -> Iterator[PlatformCapabilities]:
        return iter(self._capabilities.values())

    def __len__(self) -> int:
        return len(self._capabilities)

    def __contains__(self, platform: object) -> bool:
        return platform in self._capabilities

    def get(self, platform: DeploymentPlatform) -> PlatformCapabilities | None:
        return self._capabilities.get(platform)

    def all(self) -> list[PlatformCapabilities]:
        return list(self._capabilities.values())

    def supporting(self, kind: str) -> list[PlatformCapabilities]:
        """Entries whose supported kinds include ``kind``, in catalog order."""
        return [c for c in self._capabilities.values() if c.supports(kind)]


@lru_cache
def get_platform_catalog() -> PlatformCatalog:
    """Get the default platform catalog."""
    return PlatformCatalog()
