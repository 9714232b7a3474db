"""Readiness and post-deploy scoring.

Each rule group is data: a baseline score, thresholds and a table of rules.
A rule inspects the project and returns the issues it found; every issue
deducts the rule's amount once. Groups are scored independently so that a
caller gets precise, additive feedback instead of one opaque number.
"""

import asyncio
import re
from dataclasses import dataclass, field
from typing import Callable

from pydantic import AnyUrl, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from deploy_guide.adapters.base import Probe
from deploy_guide.models.project import ProjectConfig, ProjectKind
from deploy_guide.models.validation import (
    CheckStatus,
    DeploymentValidation,
    ValidationCheck,
)
from deploy_guide.utils.logging import get_logger

logger = get_logger(__name__)

IssueCheck = Callable[[ProjectConfig], list[str]]

DOMAIN_PATTERN = re.compile(
    r"^(?=.{4,253}$)(?:[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?\.)+[a-zA-Z]{2,}$"
)
_URL_ADAPTER = TypeAdapter(AnyUrl)

# Kinds whose builders ship no default build command
KINDS_REQUIRING_BUILD_COMMAND = frozenset(
    {ProjectKind.BOLT_NEW.value, ProjectKind.REPLIT.value}
)
SENSITIVE_KEY_MARKERS = ("password", "secret")
MIN_SECRET_LENGTH = 8


@dataclass(frozen=True)
class Rule:
    """A single deduction: ``check`` returns one entry per violation."""

    id: str
    deduction: int
    check: IssueCheck


@dataclass(frozen=True)
class RuleGroup:
    """A validation category scored into one ``ValidationCheck``.

    ``warning_at`` of None means the group never reports ``failed``: a score
    below ``passed_at`` is only a warning.
    """

    id: str
    name: str
    description: str
    baseline: int
    passed_at: int
    warning_at: int | None
    rules: tuple[Rule, ...] = ()
    ok_message: str = ""
    issue_prefix: str = "Issues found"
    suggestion_prefix: str = "Fix the following issues"
    details: str | None = None

    def status_for(self, score: int) -> CheckStatus:
        if score >= self.passed_at:
            return CheckStatus.PASSED
        if self.warning_at is None or score >= self.warning_at:
            return CheckStatus.WARNING
        return CheckStatus.FAILED

    def evaluate(self, config: ProjectConfig) -> ValidationCheck:
        issues: list[str] = []
        score = self.baseline

        for rule in self.rules:
            found = rule.check(config)
            issues.extend(found)
            score -= rule.deduction * len(found)

        joined = ", ".join(issues)
        return ValidationCheck(
            id=self.id,
            name=self.name,
            description=self.description,
            status=self.status_for(score),
            score=max(0, min(100, score)),
            message=f"{self.issue_prefix}: {joined}" if issues else self.ok_message,
            details=self.details,
            fix_suggestion=f"{self.suggestion_prefix}: {joined}" if issues else None,
        )


def _is_url(value: str) -> bool:
    try:
        _URL_ADAPTER.validate_python(value)
    except PydanticValidationError:
        return False
    return True


def _env_items(config: ProjectConfig) -> list[tuple[str, str]]:
    return list((config.environment_variables or {}).items())


# -- project configuration ---------------------------------------------------


def _missing_name(config: ProjectConfig) -> list[str]:
    return [] if config.name.strip() else ["Project name is required"]


def _short_name(config: ProjectConfig) -> list[str]:
    length = len(config.name.strip())
    if 0 < length < 3:
        return ["Project name should be at least 3 characters"]
    return []


def _unknown_kind(config: ProjectConfig) -> list[str]:
    return [] if config.has_known_kind else ["Invalid project kind specified"]


def _bad_source_url(config: ProjectConfig) -> list[str]:
    if config.source_url and not _is_url(config.source_url):
        return ["Invalid source URL format"]
    return []


def _bad_custom_domain(config: ProjectConfig) -> list[str]:
    if config.custom_domain and not DOMAIN_PATTERN.match(config.custom_domain):
        return ["Invalid custom domain format"]
    return []


# -- build settings ----------------------------------------------------------


def _missing_build_command(config: ProjectConfig) -> list[str]:
    if not config.build_command and config.kind in KINDS_REQUIRING_BUILD_COMMAND:
        return ["Build command should be specified for this project kind"]
    return []


def _missing_output_directory(config: ProjectConfig) -> list[str]:
    if not config.output_directory:
        return ["Output directory not specified (will use platform defaults)"]
    return []


def _empty_env_keys(config: ProjectConfig) -> list[str]:
    return [
        "Empty environment variable key found"
        for key, _ in _env_items(config)
        if not key.strip()
    ]


def _env_keys_with_spaces(config: ProjectConfig) -> list[str]:
    return [
        f'Environment variable key "{key}" contains spaces'
        for key, _ in _env_items(config)
        if " " in key
    ]


# -- security ----------------------------------------------------------------


def _ssl_disabled(config: ProjectConfig) -> list[str]:
    if config.ssl_enabled is False:
        return ["SSL is disabled - HTTPS is recommended for production"]
    return []


def _weak_secrets(config: ProjectConfig) -> list[str]:
    return [
        f"Weak {key} detected"
        for key, value in _env_items(config)
        if any(marker in key.lower() for marker in SENSITIVE_KEY_MARKERS)
        and len(value) < MIN_SECRET_LENGTH
    ]


# -- performance -------------------------------------------------------------


def _performance_hints(config: ProjectConfig) -> list[str]:
    if config.kind == ProjectKind.BUILDER_IO.value:
        return ["Consider enabling Builder.io's built-in performance optimizations"]
    if config.kind == ProjectKind.LOVABLE.value:
        return ["Ensure images are optimized for web delivery"]
    return []


def _missing_build_optimization(config: ProjectConfig) -> list[str]:
    if config.kind == ProjectKind.BOLT_NEW.value and "optimize" not in (
        config.build_command or ""
    ):
        return ["Consider adding build optimization flags"]
    return []


# -- SEO ---------------------------------------------------------------------


def _missing_custom_domain(config: ProjectConfig) -> list[str]:
    if not config.custom_domain:
        return ["Custom domain not configured (recommended for SEO)"]
    return []


def _ssl_disabled_for_seo(config: ProjectConfig) -> list[str]:
    if config.ssl_enabled is False:
        return ["SSL disabled (required for good SEO ranking)"]
    return []


READINESS_RULE_GROUPS: tuple[RuleGroup, ...] = (
    RuleGroup(
        id="project-config",
        name="Project Configuration",
        description="Validate basic project configuration",
        baseline=100,
        passed_at=80,
        warning_at=50,
        rules=(
            Rule("name-required", 100, _missing_name),
            Rule("name-length", 10, _short_name),
            Rule("known-kind", 40, _unknown_kind),
            Rule("source-url", 20, _bad_source_url),
            Rule("custom-domain", 15, _bad_custom_domain),
        ),
        ok_message="Project configuration is valid",
    ),
    RuleGroup(
        id="build-settings",
        name="Build Settings",
        description="Validate build configuration",
        baseline=100,
        passed_at=80,
        warning_at=50,
        rules=(
            Rule("build-command", 20, _missing_build_command),
            Rule("output-directory", 10, _missing_output_directory),
            Rule("env-key-empty", 15, _empty_env_keys),
            Rule("env-key-spaces", 10, _env_keys_with_spaces),
        ),
        ok_message="Build settings are properly configured",
        suggestion_prefix="Address the following",
    ),
    RuleGroup(
        id="security-settings",
        name="Security Settings",
        description="Validate security configuration",
        baseline=100,
        passed_at=80,
        warning_at=50,
        rules=(
            Rule("ssl-enabled", 30, _ssl_disabled),
            Rule("weak-secret", 20, _weak_secrets),
        ),
        ok_message="Security settings are properly configured",
        issue_prefix="Security issues",
        suggestion_prefix="Improve security",
    ),
    RuleGroup(
        id="performance-settings",
        name="Performance Settings",
        description="Validate performance optimization",
        baseline=90,
        passed_at=80,
        warning_at=None,
        rules=(
            Rule("kind-hints", 0, _performance_hints),
            Rule("build-optimization", 10, _missing_build_optimization),
        ),
        ok_message="Performance settings are optimized",
        issue_prefix="Performance recommendations",
        suggestion_prefix="Consider",
    ),
    RuleGroup(
        id="seo-settings",
        name="SEO Settings",
        description="Validate SEO optimization",
        baseline=80,
        passed_at=70,
        warning_at=None,
        rules=(
            Rule("custom-domain", 20, _missing_custom_domain),
            Rule("ssl-enabled", 30, _ssl_disabled_for_seo),
        ),
        ok_message="SEO settings are optimized",
        issue_prefix="SEO recommendations",
        suggestion_prefix="For better SEO",
    ),
    RuleGroup(
        id="accessibility-settings",
        name="Accessibility Settings",
        description="Validate accessibility compliance",
        baseline=85,
        passed_at=80,
        warning_at=None,
        ok_message="Basic accessibility requirements met",
        details="Full accessibility audit recommended after deployment",
    ),
)


def performance_check(score: int) -> ValidationCheck:
    """Turn a probe's raw performance score into a check."""
    score = max(0, min(100, score))
    passed = score >= 80
    return ValidationCheck(
        id="performance-test",
        name="Site Performance",
        description="Test site loading speed and performance",
        status=CheckStatus.PASSED if passed else CheckStatus.WARNING,
        score=score,
        message=f"Performance score: {score}/100",
        fix_suggestion=(
            None
            if passed
            else "Consider optimizing images, enabling compression, and using CDN"
        ),
    )


@dataclass
class ValidationScorer:
    """Scores projects before deployment and live sites after it."""

    probe: Probe
    rule_groups: tuple[RuleGroup, ...] = field(default=READINESS_RULE_GROUPS)

    def validate_readiness(self, config: ProjectConfig) -> DeploymentValidation:
        """Run every readiness rule group against ``config``."""
        checks = [group.evaluate(config) for group in self.rule_groups]
        validation = DeploymentValidation.from_checks(checks)

        logger.debug(
            "validation.readiness",
            project_id=config.id,
            is_valid=validation.is_valid,
            overall_score=validation.overall_score,
        )
        return validation

    async def validate_post_deploy(
        self, url: str, config: ProjectConfig
    ) -> DeploymentValidation:
        """Probe a live deployment and aggregate like ``validate_readiness``."""
        async with self.probe.session():
            connectivity, ssl, performance, seo, functionality = await asyncio.gather(
                self.probe.test_connectivity(url),
                self.probe.test_ssl(url),
                self.probe.test_performance(url),
                self.probe.test_seo(url),
                self.probe.test_functionality(url, config.kind),
            )
        checks = [
            connectivity,
            ssl,
            performance_check(performance),
            seo,
            functionality,
        ]
        validation = DeploymentValidation.from_checks(checks)

        logger.info(
            "validation.post_deploy",
            url=url,
            is_valid=validation.is_valid,
            overall_score=validation.overall_score,
        )
        return validation
