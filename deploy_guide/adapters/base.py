"""Collaborator interfaces used by the workflow engine."""

from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from typing import AsyncIterator

from deploy_guide.models.deployment import DeploymentResult
from deploy_guide.models.project import DeploymentPlatform, ProjectConfig
from deploy_guide.models.validation import ValidationCheck
from deploy_guide.utils.logging import get_logger


class PlatformAdapter(ABC):
    """Performs the real interactions with a hosting provider.

    Any method may raise; the engine treats every failure as retryable up
    to the step's budget.
    """

    def __init__(self):
        self.logger = get_logger(f"adapter.{self.name}")

    @property
    @abstractmethod
    def name(self) -> str:
        """Adapter identifier."""
        pass

    @abstractmethod
    async def authenticate(self, platform: DeploymentPlatform) -> bool:
        """Authenticate with the platform. False means rejected credentials."""
        pass

    @abstractmethod
    async def provision(
        self, platform: DeploymentPlatform, project: ProjectConfig
    ) -> str:
        """Create the project on the platform and return its platform id."""
        pass

    @abstractmethod
    async def deploy(
        self, platform: DeploymentPlatform, project: ProjectConfig
    ) -> DeploymentResult:
        """Build and publish the project."""
        pass

    @abstractmethod
    async def configure_production(
        self, platform: DeploymentPlatform, project: ProjectConfig
    ) -> None:
        """Apply production settings (domains, HTTPS, env vars)."""
        pass


class Probe(ABC):
    """Inspects a live URL for health and quality signals."""

    @asynccontextmanager
    async def session(self) -> AsyncIterator[None]:
        """Scope shared resources across the checks of one validation."""
        yield

    @abstractmethod
    async def test_connectivity(self, url: str) -> ValidationCheck:
        pass

    @abstractmethod
    async def test_ssl(self, url: str) -> ValidationCheck:
        pass

    @abstractmethod
    async def test_performance(self, url: str) -> int:
        """Return a 0-100 performance score."""
        pass

    @abstractmethod
    async def test_seo(self, url: str) -> ValidationCheck:
        pass

    @abstractmethod
    async def test_functionality(self, url: str, kind: str) -> ValidationCheck:
        pass
