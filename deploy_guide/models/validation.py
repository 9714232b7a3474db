"""Validation result models."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class CheckStatus(str, Enum):
    """Verdict of a single validation check."""

    PASSED = "passed"
    WARNING = "warning"
    FAILED = "failed"


class ValidationCheck(BaseModel):
    """Result of one rule group. Never mutated after creation."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    description: str
    status: CheckStatus
    score: int = Field(ge=0, le=100)
    message: str
    details: str | None = None
    fix_suggestion: str | None = None


class DeploymentValidation(BaseModel):
    """Aggregate of a validation run."""

    is_valid: bool
    checks: list[ValidationCheck] = Field(default_factory=list)
    overall_score: int = 0
    recommendations: list[str] = Field(default_factory=list)

    @classmethod
    def from_checks(cls, checks: list[ValidationCheck]) -> "DeploymentValidation":
        """Aggregate checks: mean score, valid unless a check failed."""
        overall = round(sum(c.score for c in checks) / len(checks)) if checks else 0
        recommendations = [
            c.fix_suggestion or c.message
            for c in checks
            if c.status != CheckStatus.PASSED
        ]
        return cls(
            is_valid=all(c.status != CheckStatus.FAILED for c in checks),
            checks=list(checks),
            overall_score=overall,
            recommendations=[r for r in recommendations if r],
        )

    def get_check(self, check_id: str) -> ValidationCheck | None:
        return next((c for c in self.checks if c.id == check_id), None)
