"""Pytest configuration and fixtures."""

import asyncio
from collections import defaultdict

import pytest
from httpx import ASGITransport, AsyncClient

from deploy_guide.adapters.simulated import SimulatedPlatformAdapter, SimulatedProbe
from deploy_guide.api.deps import get_engine, get_events
from deploy_guide.core.engine import WorkflowEngine
from deploy_guide.core.events import EventBus
from deploy_guide.core.repository import InMemoryWorkflowRepository
from deploy_guide.core.validation import ValidationScorer
from deploy_guide.main import app
from deploy_guide.models.deployment import (
    DeploymentConfig,
    DeploymentResult,
    WorkflowOptions,
)
from deploy_guide.models.project import DeploymentPlatform, ProjectConfig

ALWAYS = -1


class ScriptedAdapter(SimulatedPlatformAdapter):
    """Simulated adapter whose operations can be told to fail or hang.

    ``failures`` maps an operation name to how many calls should raise
    before it starts succeeding; ``ALWAYS`` makes it raise forever.
    """

    def __init__(
        self,
        failures: dict[str, int] | None = None,
        reject_auth: bool = False,
        hang: set[str] | None = None,
    ):
        super().__init__()
        self.failures = dict(failures or {})
        self.reject_auth = reject_auth
        self.hang = hang or set()
        self.calls: dict[str, int] = defaultdict(int)

    @property
    def name(self) -> str:
        return "scripted"

    async def _script(self, operation: str) -> None:
        self.calls[operation] += 1
        if operation in self.hang:
            await asyncio.Event().wait()

        remaining = self.failures.get(operation, 0)
        if remaining == ALWAYS:
            raise RuntimeError(f"{operation} unavailable")
        if remaining > 0:
            self.failures[operation] = remaining - 1
            raise RuntimeError(f"{operation} failed (transient)")

    async def authenticate(self, platform: DeploymentPlatform) -> bool:
        await self._script("authenticate")
        if self.reject_auth:
            return False
        return await super().authenticate(platform)

    async def provision(
        self, platform: DeploymentPlatform, project: ProjectConfig
    ) -> str:
        await self._script("provision")
        return await super().provision(platform, project)

    async def deploy(
        self, platform: DeploymentPlatform, project: ProjectConfig
    ) -> DeploymentResult:
        await self._script("deploy")
        return await super().deploy(platform, project)

    async def configure_production(
        self, platform: DeploymentPlatform, project: ProjectConfig
    ) -> None:
        await self._script("configure_production")
        await super().configure_production(platform, project)


@pytest.fixture
def project() -> ProjectConfig:
    """A project that passes readiness validation."""
    return ProjectConfig(
        id="proj-1",
        name="Portfolio Site",
        kind="lovable",
        source_url="https://github.com/acme/portfolio",
        build_command="npm run build",
        output_directory="dist",
        ssl_enabled=True,
    )


@pytest.fixture
def fast_options() -> WorkflowOptions:
    """Workflow options with no retry backoff."""
    return WorkflowOptions(
        enable_validation=True,
        max_retry_attempts=3,
        timeout_minutes=1,
        retry_base_delay=0,
    )


@pytest.fixture
def deployment_config(
    project: ProjectConfig, fast_options: WorkflowOptions
) -> DeploymentConfig:
    return DeploymentConfig(
        platform=DeploymentPlatform.VERCEL,
        project=project,
        options=fast_options,
    )


@pytest.fixture
def repository() -> InMemoryWorkflowRepository:
    """Create a fresh workflow repository."""
    return InMemoryWorkflowRepository()


@pytest.fixture
def events() -> EventBus:
    """Create a fresh event bus."""
    return EventBus()


@pytest.fixture
def make_engine(repository: InMemoryWorkflowRepository, events: EventBus):
    """Factory for engines whose adapter follows a failure script.

    Keyword arguments go to ``ScriptedAdapter``; the adapter is reachable
    as ``engine.adapter``.
    """

    def _make(probe=None, **script) -> WorkflowEngine:
        return WorkflowEngine(
            adapter=ScriptedAdapter(**script),
            scorer=ValidationScorer(probe=probe or SimulatedProbe()),
            repository=repository,
            events=events,
        )

    return _make


@pytest.fixture
def engine(make_engine) -> WorkflowEngine:
    """Engine wired to test doubles that always succeed."""
    return make_engine()


@pytest.fixture
async def client(engine: WorkflowEngine, events: EventBus) -> AsyncClient:
    """Create an async test client backed by a fresh engine."""
    app.dependency_overrides[get_engine] = lambda: engine
    app.dependency_overrides[get_events] = lambda: events

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
