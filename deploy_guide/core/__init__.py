"""Core functionality for the deployment guidance engine."""

from deploy_guide.core.catalog import PlatformCatalog, get_platform_catalog
from deploy_guide.core.engine import WorkflowEngine, get_workflow_engine
from deploy_guide.core.events import EventBus, get_event_bus
from deploy_guide.core.exceptions import (
    DeployGuideError,
    InvalidConfigError,
    InvalidStateTransitionError,
    NoCompatiblePlatformError,
    RetriesExhaustedError,
    StepActionError,
    WorkflowNotFoundError,
    WorkflowTimeoutError,
)
from deploy_guide.core.guidance import GuidanceGenerator
from deploy_guide.core.recommender import PlatformRecommender
from deploy_guide.core.validation import ValidationScorer

__all__ = [
    "DeployGuideError",
    "InvalidConfigError",
    "InvalidStateTransitionError",
    "NoCompatiblePlatformError",
    "RetriesExhaustedError",
    "StepActionError",
    "WorkflowNotFoundError",
    "WorkflowTimeoutError",
    "EventBus",
    "get_event_bus",
    "GuidanceGenerator",
    "PlatformCatalog",
    "get_platform_catalog",
    "PlatformRecommender",
    "ValidationScorer",
    "WorkflowEngine",
    "get_workflow_engine",
]
