"""Unit tests for data models."""

import pytest
from pydantic import ValidationError

from deploy_guide.models.deployment import (
    DeploymentConfig,
    DeploymentStatus,
    DeploymentStep,
    DeploymentWorkflow,
    StepAction,
    WorkflowOptions,
)
from deploy_guide.models.guidance import GuidanceStep
from deploy_guide.models.project import DeploymentPlatform, ProjectConfig, ProjectKind
from deploy_guide.models.validation import (
    CheckStatus,
    DeploymentValidation,
    ValidationCheck,
)


def make_check(check_id: str, status: CheckStatus, score: int, **extra) -> ValidationCheck:
    return ValidationCheck(
        id=check_id,
        name=check_id,
        description="",
        status=status,
        score=score,
        message=f"{check_id} message",
        **extra,
    )


class TestProjectConfig:
    """Tests for ProjectConfig."""

    def test_known_kinds(self):
        assert ProjectKind.is_known("bolt.new")
        assert not ProjectKind.is_known("static")

    def test_project_is_frozen(self, project: ProjectConfig):
        with pytest.raises(ValidationError):
            project.name = "changed"

    @pytest.mark.parametrize(
        "name,expected",
        [
            ("Portfolio Site", "portfolio-site"),
            ("  My  App!! v2 ", "my-app-v2"),
            ("***", "proj-x"),
        ],
    )
    def test_slug(self, name: str, expected: str):
        project = ProjectConfig(id="proj-x", name=name, kind="lovable")

        assert project.slug == expected


class TestWorkflowModels:
    """Tests for workflow and step models."""

    def test_options_default_from_settings(self):
        options = WorkflowOptions()

        assert options.enable_validation is True
        assert options.max_retry_attempts == 3
        assert options.timeout_minutes == 30
        assert options.retry_base_delay == 2.0

    def test_options_reject_non_positive_timeout(self):
        with pytest.raises(ValidationError):
            WorkflowOptions(timeout_minutes=0)

    def test_step_retry_budget(self):
        step = DeploymentStep(
            action=StepAction.DEPLOY,
            title="Deploy Application",
            description="",
            max_retries=1,
        )

        assert step.id.startswith("step_")
        assert step.attempts == 1
        assert step.can_retry
        step.retry_count = 1
        assert step.attempts == 2
        assert not step.can_retry

    def test_workflow_requires_steps(self, project: ProjectConfig):
        with pytest.raises(ValidationError):
            DeploymentWorkflow(
                project_id=project.id,
                config=DeploymentConfig(
                    platform=DeploymentPlatform.VERCEL, project=project
                ),
                steps=[],
            )

    def test_terminal_statuses(self):
        assert DeploymentStatus.CANCELLED.is_terminal
        assert not DeploymentStatus.IN_PROGRESS.is_terminal


class TestDeploymentValidation:
    """Tests for DeploymentValidation aggregation."""

    def test_from_checks(self):
        result = DeploymentValidation.from_checks(
            [
                make_check("a", CheckStatus.PASSED, 100),
                make_check("b", CheckStatus.WARNING, 61, fix_suggestion="fix b"),
                make_check("c", CheckStatus.PASSED, 90),
            ]
        )

        assert result.is_valid is True
        assert result.overall_score == 84
        assert result.recommendations == ["fix b"]

    def test_failed_check_invalidates(self):
        result = DeploymentValidation.from_checks(
            [make_check("a", CheckStatus.FAILED, 0)]
        )

        assert result.is_valid is False
        assert result.recommendations == ["a message"]

    def test_empty(self):
        result = DeploymentValidation.from_checks([])

        assert result.is_valid is True
        assert result.overall_score == 0

    def test_score_bounds(self):
        with pytest.raises(ValidationError):
            make_check("a", CheckStatus.PASSED, 101)


def test_guidance_step_requires_instructions():
    with pytest.raises(ValidationError):
        GuidanceStep(
            id="x",
            title="Nothing",
            description="",
            instructions=[],
            expected_outcome="",
            estimated_minutes=5,
        )
