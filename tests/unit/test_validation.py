"""Unit tests for readiness and post-deploy scoring."""

import pytest

from deploy_guide.adapters.simulated import SimulatedProbe
from deploy_guide.core.validation import (
    READINESS_RULE_GROUPS,
    ValidationScorer,
    performance_check,
)
from deploy_guide.models.project import ProjectConfig
from deploy_guide.models.validation import CheckStatus


@pytest.fixture
def scorer() -> ValidationScorer:
    return ValidationScorer(probe=SimulatedProbe())


class TestReadinessValidation:
    """Tests for ValidationScorer.validate_readiness."""

    def test_runs_every_rule_group(self, scorer: ValidationScorer, project):
        result = scorer.validate_readiness(project)

        assert [c.id for c in result.checks] == [g.id for g in READINESS_RULE_GROUPS]
        assert len(result.checks) == 6

    @pytest.mark.parametrize("kind", ["lovable", "static"])
    def test_same_config_scores_identically(
        self, scorer: ValidationScorer, project, kind: str
    ):
        config = project.model_copy(update={"kind": kind, "build_command": None})

        first = scorer.validate_readiness(config)
        second = scorer.validate_readiness(config)

        assert first.checks == second.checks
        assert first.overall_score == second.overall_score
        assert first.recommendations == second.recommendations

    def test_well_configured_project(self, scorer: ValidationScorer, project):
        result = scorer.validate_readiness(project)

        assert result.is_valid is True
        assert result.get_check("project-config").score == 100
        assert result.get_check("build-settings").score == 100
        assert result.get_check("security-settings").score == 100
        assert result.get_check("performance-settings").score == 90
        # No custom domain costs 20 points of SEO
        seo = result.get_check("seo-settings")
        assert seo.score == 60
        assert seo.status == CheckStatus.WARNING
        assert result.get_check("accessibility-settings").score == 85
        assert result.overall_score == round((100 + 100 + 100 + 90 + 60 + 85) / 6)

    def test_short_name_and_unknown_kind(self, scorer: ValidationScorer):
        result = scorer.validate_readiness(
            ProjectConfig(id="p", name="Ab", kind="static")
        )

        check = result.get_check("project-config")
        assert check.score == 50
        assert check.status == CheckStatus.WARNING
        assert "Project name should be at least 3 characters" in check.message
        assert "Invalid project kind specified" in check.message

    def test_missing_name_fails(self, scorer: ValidationScorer):
        result = scorer.validate_readiness(
            ProjectConfig(id="p", name="  ", kind="lovable")
        )

        check = result.get_check("project-config")
        assert check.score == 0
        assert check.status == CheckStatus.FAILED
        assert result.is_valid is False
        assert check.fix_suggestion in result.recommendations

    def test_invalid_urls_and_domain(self, scorer: ValidationScorer):
        result = scorer.validate_readiness(
            ProjectConfig(
                id="p",
                name="Landing",
                kind="builder.io",
                source_url="not a url",
                custom_domain="no_dots",
            )
        )

        check = result.get_check("project-config")
        assert check.score == 100 - 20 - 15
        assert check.status == CheckStatus.WARNING

    def test_subdomain_accepted(self, scorer: ValidationScorer, project):
        result = scorer.validate_readiness(
            project.model_copy(update={"custom_domain": "www.shop.example.co"})
        )

        assert result.get_check("project-config").score == 100
        assert result.get_check("seo-settings").status == CheckStatus.PASSED

    def test_build_settings_deductions(self, scorer: ValidationScorer):
        result = scorer.validate_readiness(
            ProjectConfig(
                id="p",
                name="Chat Bot",
                kind="bolt.new",
                environment_variables={"": "x", "API KEY": "abc", "TOKEN": "t"},
            )
        )

        check = result.get_check("build-settings")
        # build command 20, output directory 10, empty key 15, spaced key 10
        assert check.score == 45
        assert check.status == CheckStatus.FAILED
        assert check.fix_suggestion.startswith("Address the following")

    def test_security_deductions(self, scorer: ValidationScorer, project):
        result = scorer.validate_readiness(
            project.model_copy(
                update={
                    "ssl_enabled": False,
                    "environment_variables": {
                        "DB_PASSWORD": "short",
                        "JWT_SECRET": "1234",
                        "STRIPE_SECRET": "sk_live_long_enough",
                    },
                }
            )
        )

        security = result.get_check("security-settings")
        assert security.score == 100 - 30 - 20 - 20
        assert security.status == CheckStatus.FAILED
        assert "Weak DB_PASSWORD detected" in security.message
        seo = result.get_check("seo-settings")
        assert seo.score == 80 - 20 - 30

    def test_ssl_unspecified_is_not_penalised(self, scorer: ValidationScorer):
        result = scorer.validate_readiness(
            ProjectConfig(id="p", name="Docs", kind="replit", build_command="make")
        )

        assert result.get_check("security-settings").score == 100

    def test_bolt_performance_hint(self, scorer: ValidationScorer):
        result = scorer.validate_readiness(
            ProjectConfig(
                id="p", name="Bolt App", kind="bolt.new", build_command="vite build"
            )
        )

        check = result.get_check("performance-settings")
        assert check.score == 80
        assert check.status == CheckStatus.PASSED
        assert "Consider adding build optimization flags" in check.message

    def test_accessibility_recommends_audit(self, scorer: ValidationScorer, project):
        check = scorer.validate_readiness(project).get_check("accessibility-settings")

        assert check.status == CheckStatus.PASSED
        assert check.details == "Full accessibility audit recommended after deployment"


class TestPostDeployValidation:
    """Tests for ValidationScorer.validate_post_deploy."""

    @pytest.mark.asyncio
    async def test_healthy_https_site(self, scorer: ValidationScorer, project):
        result = await scorer.validate_post_deploy(
            "https://portfolio-site.vercel.app", project
        )

        assert result.is_valid is True
        assert [c.id for c in result.checks] == [
            "connectivity-test",
            "ssl-test",
            "performance-test",
            "seo-test",
            "builder-functionality-test",
        ]
        assert result.overall_score == round((100 + 100 + 90 + 90 + 90) / 5)

    @pytest.mark.asyncio
    async def test_plain_http_site_gets_warnings(
        self, scorer: ValidationScorer, project
    ):
        result = await scorer.validate_post_deploy("http://portfolio.test", project)

        assert result.is_valid is True
        assert result.get_check("ssl-test").status == CheckStatus.WARNING
        seo = result.get_check("seo-test")
        assert seo.score == 70
        assert "Not using HTTPS" in seo.message

    @pytest.mark.asyncio
    async def test_slow_site_warns(self, project):
        scorer = ValidationScorer(probe=SimulatedProbe(performance_score=55))

        result = await scorer.validate_post_deploy("https://slow.example.com", project)

        check = result.get_check("performance-test")
        assert check.status == CheckStatus.WARNING
        assert check.fix_suggestion is not None


def test_performance_check_clamps_score():
    assert performance_check(140).score == 100
    assert performance_check(-5).score == 0
    assert performance_check(80).status == CheckStatus.PASSED
    assert performance_check(79).status == CheckStatus.WARNING
