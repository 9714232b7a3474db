"""Deployment workflow data models."""

from datetime import datetime
from enum import Enum
from uuid import uuid4

from pydantic import BaseModel, Field

from deploy_guide.config import settings
from deploy_guide.models.project import DeploymentPlatform, ProjectConfig


class DeploymentStatus(str, Enum):
    """Status shared by workflows and their steps."""

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES


TERMINAL_STATUSES = frozenset(
    {DeploymentStatus.COMPLETED, DeploymentStatus.FAILED, DeploymentStatus.CANCELLED}
)


class StepAction(str, Enum):
    """Unit of work a deployment step performs."""

    VALIDATE = "validate"
    AUTHENTICATE = "authenticate"
    PROVISION = "provision"
    DEPLOY = "deploy"
    CONFIGURE_PRODUCTION = "configure_production"
    VERIFY = "verify"


class WorkflowOptions(BaseModel):
    """Optional knobs for a workflow run.

    Attributes:
        enable_validation: When False the validate and verify steps log a
            skip and complete without scoring. Default from settings (True).
        max_retry_attempts: Upper bound applied to every step's retry
            budget. Default from settings (3).
        timeout_minutes: Ceiling on a whole ``execute`` call; exceeding it
            fails the workflow. Default from settings (30).
        retry_base_delay: Seconds multiplied by the attempt number to get
            the pause before a retry. Default from settings (2.0).
    """

    enable_validation: bool = Field(default_factory=lambda: settings.enable_validation)
    max_retry_attempts: int = Field(
        default_factory=lambda: settings.max_retry_attempts, ge=0
    )
    timeout_minutes: float = Field(
        default_factory=lambda: settings.workflow_timeout_minutes, gt=0
    )
    retry_base_delay: float = Field(
        default_factory=lambda: settings.retry_base_delay_seconds, ge=0
    )


class DeploymentConfig(BaseModel):
    """Everything needed to build a workflow."""

    platform: DeploymentPlatform
    project: ProjectConfig
    options: WorkflowOptions = Field(default_factory=WorkflowOptions)
    branch_to_deploy: str | None = None
    auto_deploy_enabled: bool = False


class DeploymentResult(BaseModel):
    """Result of a platform deploy call."""

    deployment_url: str
    preview_url: str | None = None
    deployment_id: str = ""
    build_logs: list[str] = Field(default_factory=list)


class DeploymentStep(BaseModel):
    """One step of a workflow. Mutated only by the engine."""

    id: str = Field(default_factory=lambda: f"step_{uuid4().hex[:12]}")
    action: StepAction
    title: str
    description: str
    status: DeploymentStatus = DeploymentStatus.PENDING
    logs: list[str] = Field(default_factory=list)
    retry_count: int = Field(default=0, ge=0)
    max_retries: int = Field(default=0, ge=0)
    started_at: datetime | None = None
    ended_at: datetime | None = None
    duration: int | None = None
    error: str | None = None

    @property
    def attempts(self) -> int:
        return self.retry_count + 1

    @property
    def can_retry(self) -> bool:
        return self.retry_count < self.max_retries

    def log(self, line: str) -> None:
        self.logs.append(line)


class DeploymentWorkflow(BaseModel):
    """A deployment run. Owned by the engine for its lifetime."""

    id: str = Field(default_factory=lambda: f"wf_{uuid4().hex}")
    project_id: str
    config: DeploymentConfig
    steps: list[DeploymentStep] = Field(min_length=1)
    status: DeploymentStatus = DeploymentStatus.PENDING

    created_at: datetime = Field(default_factory=datetime.utcnow)
    started_at: datetime | None = None
    ended_at: datetime | None = None
    total_duration: int | None = None

    build_logs: list[str] = Field(default_factory=list)
    deployment_logs: list[str] = Field(default_factory=list)

    platform_project_id: str | None = None
    deployment_url: str | None = None
    preview_url: str | None = None
    error: str | None = None

    @property
    def platform(self) -> DeploymentPlatform:
        return self.config.platform

    @property
    def project(self) -> ProjectConfig:
        return self.config.project

    @property
    def current_step(self) -> DeploymentStep | None:
        """The step currently in progress, if any."""
        return next(
            (s for s in self.steps if s.status == DeploymentStatus.IN_PROGRESS), None
        )

    def get_step(self, action: StepAction) -> DeploymentStep:
        return next(s for s in self.steps if s.action == action)

    def snapshot(self) -> "DeploymentWorkflow":
        """Deep copy safe to hand to callers and subscribers."""
        return self.model_copy(deep=True)
