"""Project-related data models."""

from enum import Enum

from pydantic import BaseModel, ConfigDict


class ProjectKind(str, Enum):
    """Site builder that produced the project."""

    BUILDER_IO = "builder.io"
    FIREBASE_STUDIO = "firebase_studio"
    LOVABLE = "lovable"
    BOLT_NEW = "bolt.new"
    REPLIT = "replit"

    @classmethod
    def is_known(cls, kind: str) -> bool:
        """Check whether a raw kind string names a supported builder."""
        return kind in cls._value2member_map_


class DeploymentPlatform(str, Enum):
    """Hosting platforms the engine can target."""

    VERCEL = "vercel"
    NETLIFY = "netlify"
    FIREBASE_HOSTING = "firebase_hosting"
    GITHUB_PAGES = "github_pages"
    HEROKU = "heroku"
    AWS_S3 = "aws_s3"
    CLOUDFLARE_PAGES = "cloudflare_pages"


class ProjectConfig(BaseModel):
    """Caller-owned project description. Read-only to the engine.

    ``kind`` is kept as a plain string so that readiness validation can
    score an unrecognised kind instead of rejecting it outright.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    kind: str
    source_url: str | None = None
    build_command: str | None = None
    output_directory: str | None = None
    custom_domain: str | None = None
    environment_variables: dict[str, str] | None = None
    ssl_enabled: bool | None = None

    @property
    def has_known_kind(self) -> bool:
        return ProjectKind.is_known(self.kind)

    @property
    def slug(self) -> str:
        """Lowercase, hyphenated name usable as a subdomain."""
        chars = [c if c.isalnum() else "-" for c in self.name.strip().lower()]
        slug = "-".join(part for part in "".join(chars).split("-") if part)
        return slug or self.id
