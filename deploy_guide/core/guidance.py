"""Step-by-step deployment instructions per platform.

Output is a pure function of (platform, project): step ids are derived from
the platform and step title, never random.
"""

import re

from deploy_guide.core.catalog import PlatformCatalog, get_platform_catalog
from deploy_guide.models.guidance import GuidanceStep, TroubleshootingTip
from deploy_guide.models.project import DeploymentPlatform, ProjectConfig


def _step_id(platform: DeploymentPlatform | str, title: str) -> str:
    prefix = platform.value if isinstance(platform, DeploymentPlatform) else platform
    slug = re.sub(r"[^a-z0-9]+", "-", title.lower()).strip("-")
    return f"{prefix}-{slug}"


def _build_settings_instruction(project: ProjectConfig) -> str:
    parts = []
    if project.build_command:
        parts.append(f'build command "{project.build_command}"')
    if project.output_directory:
        parts.append(f'output directory "{project.output_directory}"')
    if not parts:
        return "Keep the detected build settings unless your builder requires otherwise"
    return f"Set the {' and '.join(parts)}"


class GuidanceGenerator:
    """Produces human-readable instructions consumed by the UI."""

    def __init__(self, catalog: PlatformCatalog | None = None):
        self.catalog = catalog or get_platform_catalog()

    def display_name(self, platform: DeploymentPlatform) -> str:
        entry = self.catalog.get(platform)
        return entry.display_name if entry else platform.value

    def deployment_guidance(
        self, platform: DeploymentPlatform, project: ProjectConfig
    ) -> list[GuidanceStep]:
        """Instructions to get the project live on ``platform``."""
        builders = {
            DeploymentPlatform.VERCEL: self._vercel,
            DeploymentPlatform.NETLIFY: self._netlify,
            DeploymentPlatform.FIREBASE_HOSTING: self._firebase,
            DeploymentPlatform.GITHUB_PAGES: self._github_pages,
        }
        builder = builders.get(platform)
        if builder is None:
            return self._generic(platform, project)
        return builder(project)

    def production_guidance(
        self, platform: DeploymentPlatform, project: ProjectConfig
    ) -> list[GuidanceStep]:
        """Instructions to harden a deployed project for production."""
        steps = [
            GuidanceStep(
                id=_step_id(platform, "Configure Environment Variables"),
                title="Configure Environment Variables",
                description="Set up production environment variables",
                instructions=[
                    "Identify all environment variables needed for production",
                    "Remove any development-specific variables",
                    "Ensure sensitive data is properly secured",
                    "Set up different values for production vs development",
                ],
                expected_outcome=(
                    "All necessary environment variables configured for production"
                ),
                troubleshooting=[
                    TroubleshootingTip(
                        issue="Application not working after deployment",
                        solution=(
                            "Check if all required environment variables are set "
                            "in production"
                        ),
                    )
                ],
                estimated_minutes=15,
                difficulty="medium",
                prerequisites=["List of required environment variables"],
            ),
            GuidanceStep(
                id=_step_id(platform, "Enable SSL/HTTPS"),
                title="Enable SSL/HTTPS",
                description="Configure secure connections for production",
                instructions=[
                    "Enable SSL certificate in platform settings",
                    "Configure automatic HTTPS redirects",
                    "Test SSL certificate validity",
                    "Update any hardcoded HTTP URLs to HTTPS",
                ],
                expected_outcome="Site accessible via HTTPS with valid SSL certificate",
                troubleshooting=[
                    TroubleshootingTip(
                        issue="SSL certificate not working",
                        solution=(
                            "Check domain DNS settings and certificate "
                            "provisioning status"
                        ),
                    )
                ],
                estimated_minutes=10,
                difficulty="easy",
                prerequisites=["Domain configured"],
            ),
        ]

        if project.custom_domain:
            steps.append(
                GuidanceStep(
                    id=_step_id(platform, "Configure Custom Domain"),
                    title="Configure Custom Domain",
                    description=f"Point {project.custom_domain} at the deployment",
                    instructions=[
                        f"Add {project.custom_domain} in platform settings",
                        "Update DNS records to point to platform",
                        "Wait for DNS propagation (up to 48 hours)",
                        "Verify domain is working correctly",
                    ],
                    expected_outcome="Site accessible via custom domain",
                    troubleshooting=[
                        TroubleshootingTip(
                            issue="Domain not resolving",
                            solution="Check DNS records and wait for propagation",
                        )
                    ],
                    estimated_minutes=30,
                    difficulty="medium",
                    prerequisites=["Domain ownership", "DNS access"],
                )
            )

        steps.extend(self._platform_production_steps(platform))
        return steps

    def _platform_production_steps(
        self, platform: DeploymentPlatform
    ) -> list[GuidanceStep]:
        profiles: dict[DeploymentPlatform, tuple[list[str], int, str]] = {
            DeploymentPlatform.VERCEL: (
                [
                    "Enable automatic deployments from main branch",
                    "Configure preview deployments for pull requests",
                    "Set up monitoring and analytics",
                    "Configure edge functions if needed",
                ],
                20,
                "medium",
            ),
            DeploymentPlatform.NETLIFY: (
                [
                    "Set up form handling if needed",
                    "Configure redirects and rewrites",
                    "Enable split testing if required",
                    "Set up build notifications",
                ],
                25,
                "medium",
            ),
            DeploymentPlatform.FIREBASE_HOSTING: (
                [
                    "Set up Firebase security rules",
                    "Configure caching headers",
                    "Enable Firebase Analytics if needed",
                    "Set up monitoring and alerts",
                ],
                30,
                "hard",
            ),
        }
        if platform not in profiles:
            return []

        instructions, minutes, difficulty = profiles[platform]
        name = self.display_name(platform)
        title = f"Configure {name} Production Settings"
        return [
            GuidanceStep(
                id=_step_id(platform, title),
                title=title,
                description=f"Optimize {name} for production use",
                instructions=instructions,
                expected_outcome=f"{name} optimized for production deployment",
                estimated_minutes=minutes,
                difficulty=difficulty,
                prerequisites=[f"{name} project configured"],
            )
        ]

    def _vercel(self, project: ProjectConfig) -> list[GuidanceStep]:
        platform = DeploymentPlatform.VERCEL
        return [
            GuidanceStep(
                id=_step_id(platform, "Create Vercel Account"),
                title="Create Vercel Account",
                description="Sign up for a Vercel account if you don't have one",
                instructions=[
                    "Go to vercel.com",
                    'Click "Sign Up"',
                    "Choose GitHub, GitLab, or Bitbucket to sign up",
                    "Complete the verification process",
                ],
                expected_outcome="You should have a verified Vercel account",
                troubleshooting=[
                    TroubleshootingTip(
                        issue="Email verification not received",
                        solution=(
                            "Check spam folder and request a new verification email"
                        ),
                    )
                ],
                estimated_minutes=5,
                difficulty="easy",
                prerequisites=["GitHub account (recommended)"],
            ),
            GuidanceStep(
                id=_step_id(platform, "Connect Repository"),
                title="Connect Repository",
                description=f"Connect {project.name} to Vercel",
                instructions=[
                    'Click "New Project" in Vercel dashboard',
                    "Import your Git repository",
                    _build_settings_instruction(project),
                    'Click "Deploy"',
                ],
                expected_outcome="Your project should be connected and ready to deploy",
                troubleshooting=[
                    TroubleshootingTip(
                        issue="Repository not found",
                        solution=(
                            "Make sure the repository is public or you have granted "
                            "Vercel access"
                        ),
                    )
                ],
                estimated_minutes=10,
                difficulty="easy",
                prerequisites=["Git repository with your project"],
            ),
        ]

    def _netlify(self, project: ProjectConfig) -> list[GuidanceStep]:
        platform = DeploymentPlatform.NETLIFY
        return [
            GuidanceStep(
                id=_step_id(platform, "Create Netlify Account"),
                title="Create Netlify Account",
                description="Sign up for a Netlify account",
                instructions=[
                    "Go to netlify.com",
                    'Click "Sign up"',
                    "Choose your preferred sign-up method",
                    "Verify your email address",
                ],
                expected_outcome="You should have access to Netlify dashboard",
                estimated_minutes=5,
                difficulty="easy",
            ),
            GuidanceStep(
                id=_step_id(platform, "Import Site"),
                title="Import Site",
                description=f"Create a Netlify site for {project.name}",
                instructions=[
                    'Click "Add new site" and pick "Import an existing project"',
                    "Authorize your Git provider and select the repository",
                    _build_settings_instruction(project),
                    'Click "Deploy site"',
                ],
                expected_outcome="Netlify builds the site and shows a live URL",
                troubleshooting=[
                    TroubleshootingTip(
                        issue="Build fails with missing dependencies",
                        solution="Check the deploy log and commit your lock file",
                    )
                ],
                estimated_minutes=10,
                difficulty="easy",
                prerequisites=["Git repository with your project"],
            ),
        ]

    def _firebase(self, project: ProjectConfig) -> list[GuidanceStep]:
        platform = DeploymentPlatform.FIREBASE_HOSTING
        return [
            GuidanceStep(
                id=_step_id(platform, "Setup Firebase Project"),
                title="Setup Firebase Project",
                description="Create a new Firebase project for hosting",
                instructions=[
                    "Go to console.firebase.google.com",
                    'Click "Create a project"',
                    f'Enter "{project.name}" as the project name',
                    "Enable Firebase Hosting",
                ],
                expected_outcome="Firebase project created with hosting enabled",
                estimated_minutes=10,
                difficulty="medium",
                prerequisites=["Google account"],
            ),
            GuidanceStep(
                id=_step_id(platform, "Deploy with Firebase CLI"),
                title="Deploy with Firebase CLI",
                description="Publish the build output with the Firebase CLI",
                instructions=[
                    "Install the CLI with npm install -g firebase-tools",
                    "Run firebase login",
                    (
                        "Run firebase init hosting and set the public directory to "
                        f'"{project.output_directory or "dist"}"'
                    ),
                    "Run firebase deploy --only hosting",
                ],
                expected_outcome="Hosting URL printed by the CLI serves your site",
                troubleshooting=[
                    TroubleshootingTip(
                        issue="Blank page after deploy",
                        solution="Make sure the public directory points at the build output",
                    )
                ],
                estimated_minutes=15,
                difficulty="medium",
                prerequisites=["Node.js installed"],
            ),
        ]

    def _github_pages(self, project: ProjectConfig) -> list[GuidanceStep]:
        platform = DeploymentPlatform.GITHUB_PAGES
        return [
            GuidanceStep(
                id=_step_id(platform, "Enable GitHub Pages"),
                title="Enable GitHub Pages",
                description="Configure GitHub Pages for your repository",
                instructions=[
                    "Go to your repository settings",
                    'Scroll to "Pages" section',
                    "Select source branch (usually main or gh-pages)",
                    "Save settings",
                ],
                expected_outcome="GitHub Pages should be enabled with a public URL",
                estimated_minutes=5,
                difficulty="easy",
                prerequisites=["GitHub repository"],
            )
        ]

    def _generic(
        self, platform: DeploymentPlatform, project: ProjectConfig
    ) -> list[GuidanceStep]:
        name = self.display_name(platform)
        return [
            GuidanceStep(
                id=_step_id(platform, f"Setup {name}"),
                title=f"Setup {name}",
                description=f"Configure {name} for deployment",
                instructions=[
                    "Create account on the platform",
                    "Connect your project repository",
                    _build_settings_instruction(project),
                    "Deploy your application",
                ],
                expected_outcome="Application deployed successfully",
                estimated_minutes=15,
                difficulty="medium",
                prerequisites=["Project repository"],
            )
        ]
