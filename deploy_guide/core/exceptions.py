"""Custom exceptions for the deployment guidance engine."""

from typing import Any


class DeployGuideError(Exception):
    """Base exception for the deployment guidance engine."""

    status_code: int = 500

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class InvalidConfigError(DeployGuideError):
    """Bad input at workflow creation. Never retried."""

    status_code = 400


class WorkflowNotFoundError(DeployGuideError):
    """Workflow not found."""

    status_code = 404

    def __init__(self, workflow_id: str):
        super().__init__(
            f"Workflow not found: {workflow_id}",
            {"workflow_id": workflow_id},
        )
        self.workflow_id = workflow_id


class NoCompatiblePlatformError(DeployGuideError):
    """No catalog platform supports the project kind."""

    status_code = 409

    def __init__(self, kind: str):
        super().__init__(
            f"No compatible platforms found for {kind}",
            {"kind": kind},
        )
        self.kind = kind


class InvalidStateTransitionError(DeployGuideError):
    """Illegal status transition for a step or workflow."""

    status_code = 409

    def __init__(self, current: str, requested: str, subject: str = "workflow"):
        super().__init__(
            f"Cannot transition {subject} from {current} to {requested}",
            {"subject": subject, "current": current, "requested": requested},
        )


class StepActionError(DeployGuideError):
    """A step action failed. Retried up to the step's budget."""

    def __init__(self, step: str, message: str):
        super().__init__(message, {"step": step})
        self.step = step


class RetriesExhaustedError(StepActionError):
    """Terminal form of StepActionError once the retry budget is spent."""

    def __init__(self, step: str, attempts: int, last_error: str):
        super().__init__(
            step,
            f"Step '{step}' failed after {attempts} attempts: {last_error}",
        )
        self.details["attempts"] = attempts
        self.attempts = attempts
        self.last_error = last_error


class WorkflowTimeoutError(DeployGuideError):
    """Workflow exceeded its execution ceiling."""

    status_code = 504

    def __init__(self, workflow_id: str, timeout_minutes: float):
        super().__init__(
            f"Workflow {workflow_id} timed out after {timeout_minutes:g} minutes",
            {"workflow_id": workflow_id, "timeout_minutes": timeout_minutes},
        )
