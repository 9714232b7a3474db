"""Data models for the deployment guidance engine."""

from deploy_guide.models.deployment import (
    DeploymentConfig,
    DeploymentResult,
    DeploymentStatus,
    DeploymentStep,
    DeploymentWorkflow,
    StepAction,
    WorkflowOptions,
)
from deploy_guide.models.guidance import GuidanceStep, TroubleshootingTip
from deploy_guide.models.platform import (
    PlatformCapabilities,
    PlatformFeature,
    PlatformPreferences,
    PlatformScore,
)
from deploy_guide.models.project import (
    DeploymentPlatform,
    ProjectConfig,
    ProjectKind,
)
from deploy_guide.models.validation import (
    CheckStatus,
    DeploymentValidation,
    ValidationCheck,
)

__all__ = [
    # Project models
    "DeploymentPlatform",
    "ProjectConfig",
    "ProjectKind",
    # Platform models
    "PlatformCapabilities",
    "PlatformFeature",
    "PlatformPreferences",
    "PlatformScore",
    # Validation models
    "CheckStatus",
    "DeploymentValidation",
    "ValidationCheck",
    # Workflow models
    "DeploymentConfig",
    "DeploymentResult",
    "DeploymentStatus",
    "DeploymentStep",
    "DeploymentWorkflow",
    "StepAction",
    "WorkflowOptions",
    # Guidance models
    "GuidanceStep",
    "TroubleshootingTip",
]
