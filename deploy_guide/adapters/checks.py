"""Check builders shared by the probe implementations."""

from deploy_guide.models.project import ProjectKind
from deploy_guide.models.validation import CheckStatus, ValidationCheck

# (display name, score) of the kind-specific functionality check
FUNCTIONALITY_PROFILES: dict[str, tuple[str, int]] = {
    ProjectKind.BUILDER_IO.value: ("Builder.io", 95),
    ProjectKind.LOVABLE.value: ("Lovable", 90),
    ProjectKind.BOLT_NEW.value: ("Bolt.new", 88),
}


def connectivity_check(reachable: bool, details: str | None = None) -> ValidationCheck:
    if reachable:
        return ValidationCheck(
            id="connectivity-test",
            name="Site Connectivity",
            description="Test if site is accessible",
            status=CheckStatus.PASSED,
            score=100,
            message="Site is accessible and responding",
            details=details,
        )
    return ValidationCheck(
        id="connectivity-test",
        name="Site Connectivity",
        description="Test if site is accessible",
        status=CheckStatus.FAILED,
        score=0,
        message="Site is not accessible",
        details=details,
        fix_suggestion="Check deployment status and DNS configuration",
    )


def ssl_check(url: str, certificate_ok: bool = True) -> ValidationCheck:
    if url.startswith("https://") and certificate_ok:
        return ValidationCheck(
            id="ssl-test",
            name="SSL Configuration",
            description="Test SSL certificate validity",
            status=CheckStatus.PASSED,
            score=100,
            message="SSL certificate is valid and properly configured",
        )
    message = (
        "Site is not using HTTPS"
        if not url.startswith("https://")
        else "SSL certificate could not be verified"
    )
    return ValidationCheck(
        id="ssl-test",
        name="SSL Configuration",
        description="Test SSL certificate validity",
        status=CheckStatus.WARNING,
        score=60,
        message=message,
        fix_suggestion="Enable SSL certificate and configure HTTPS redirects",
    )


def seo_check(url: str, issues: list[str] | None = None) -> ValidationCheck:
    """SEO check starting at 90; HTTPS absence costs 20, other issues 10."""
    issues = list(issues or [])
    score = 90 - 10 * len(issues)
    if not url.startswith("https://"):
        issues.insert(0, "Not using HTTPS")
        score -= 20
    score = max(0, score)

    return ValidationCheck(
        id="seo-test",
        name="SEO Configuration",
        description="Test SEO optimization",
        status=CheckStatus.PASSED if score >= 80 else CheckStatus.WARNING,
        score=score,
        message=(
            "SEO configuration looks good"
            if not issues
            else f"SEO issues: {', '.join(issues)}"
        ),
        fix_suggestion=f"Fix SEO issues: {', '.join(issues)}" if issues else None,
    )


def functionality_check(kind: str, working: bool = True) -> ValidationCheck:
    label, score = FUNCTIONALITY_PROFILES.get(kind, ("Application", 85))
    description = (
        f"Test {label} specific features"
        if kind in FUNCTIONALITY_PROFILES
        else "Test general application functionality"
    )
    if not working:
        return ValidationCheck(
            id="builder-functionality-test",
            name=f"{label} Functionality",
            description=description,
            status=CheckStatus.FAILED,
            score=0,
            message="Application did not return a usable page",
            fix_suggestion="Check the build output and runtime logs on the platform",
        )
    return ValidationCheck(
        id="builder-functionality-test",
        name=f"{label} Functionality",
        description=description,
        status=CheckStatus.PASSED,
        score=score,
        message=f"{label} application is functioning correctly",
    )
