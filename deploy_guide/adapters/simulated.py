"""Offline adapter and probe used when no real provider is wired in."""

import asyncio
import uuid

from deploy_guide.adapters.base import PlatformAdapter, Probe
from deploy_guide.adapters.checks import (
    connectivity_check,
    functionality_check,
    seo_check,
    ssl_check,
)
from deploy_guide.models.deployment import DeploymentResult
from deploy_guide.models.project import DeploymentPlatform, ProjectConfig
from deploy_guide.models.validation import ValidationCheck

PLATFORM_DOMAINS: dict[DeploymentPlatform, str] = {
    DeploymentPlatform.VERCEL: "vercel.app",
    DeploymentPlatform.NETLIFY: "netlify.app",
    DeploymentPlatform.FIREBASE_HOSTING: "web.app",
    DeploymentPlatform.GITHUB_PAGES: "github.io",
    DeploymentPlatform.HEROKU: "herokuapp.com",
    DeploymentPlatform.AWS_S3: "s3-website.amazonaws.com",
    DeploymentPlatform.CLOUDFLARE_PAGES: "pages.dev",
}


def platform_domain(platform: DeploymentPlatform) -> str:
    return PLATFORM_DOMAINS.get(platform, "example.com")


class SimulatedPlatformAdapter(PlatformAdapter):
    """Pretends to talk to the platform and always succeeds."""

    def __init__(self, delay_seconds: float = 0.0):
        super().__init__()
        self.delay_seconds = delay_seconds

    @property
    def name(self) -> str:
        return "simulated"

    async def _pause(self) -> None:
        if self.delay_seconds:
            await asyncio.sleep(self.delay_seconds)

    async def authenticate(self, platform: DeploymentPlatform) -> bool:
        await self._pause()
        self.logger.info("simulated_adapter.authenticated", platform=platform.value)
        return True

    async def provision(
        self, platform: DeploymentPlatform, project: ProjectConfig
    ) -> str:
        await self._pause()
        platform_project_id = f"{platform.value}-project-{project.id}"
        self.logger.info(
            "simulated_adapter.provisioned",
            platform=platform.value,
            platform_project_id=platform_project_id,
        )
        return platform_project_id

    async def deploy(
        self, platform: DeploymentPlatform, project: ProjectConfig
    ) -> DeploymentResult:
        await self._pause()

        deployment_id = f"dpl_{uuid.uuid4().hex[:12]}"
        url = f"https://{project.slug}.{platform_domain(platform)}"
        build_command = project.build_command or "default build"

        self.logger.info(
            "simulated_adapter.deployed",
            url=url,
            deployment_id=deployment_id,
        )

        return DeploymentResult(
            deployment_url=url,
            preview_url=url,
            deployment_id=deployment_id,
            build_logs=[
                f"Running {build_command}",
                f"Uploading {project.output_directory or 'platform default output'}",
                "Build completed",
            ],
        )

    async def configure_production(
        self, platform: DeploymentPlatform, project: ProjectConfig
    ) -> None:
        await self._pause()
        self.logger.info(
            "simulated_adapter.production_configured",
            platform=platform.value,
            custom_domain=project.custom_domain,
        )


class SimulatedProbe(Probe):
    """Deterministic probe that judges a URL by its shape alone."""

    def __init__(self, performance_score: int = 90):
        self.performance_score = performance_score

    async def test_connectivity(self, url: str) -> ValidationCheck:
        return connectivity_check(url.startswith(("http://", "https://")))

    async def test_ssl(self, url: str) -> ValidationCheck:
        return ssl_check(url)

    async def test_performance(self, url: str) -> int:
        return self.performance_score

    async def test_seo(self, url: str) -> ValidationCheck:
        return seo_check(url)

    async def test_functionality(self, url: str, kind: str) -> ValidationCheck:
        return functionality_check(kind)
