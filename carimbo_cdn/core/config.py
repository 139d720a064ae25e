from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from carimbo_cdn.bundles.service import DEFAULT_BUNDLE_URL
from carimbo_cdn.runtimes.cache import DEFAULT_RUNTIME_URL
from carimbo_cdn.upstream.client import DEFAULT_TIMEOUT


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    PORT is the only variable a deployment normally sets; the upstream URL
    templates exist so tests and mirrors can point the proxy elsewhere.

    URL template placeholders
    ─────────────────────────
    • RUNTIME_URL_TEMPLATE   {version}
    • BUNDLE_URL_TEMPLATE    {org} {repo} {release}
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Listener
    host: str = "0.0.0.0"
    port: int = 8080

    # Upstream artifact host
    runtime_url_template: str = DEFAULT_RUNTIME_URL
    bundle_url_template: str = DEFAULT_BUNDLE_URL
    upstream_timeout: float = DEFAULT_TIMEOUT

    # Reject non-2xx upstream answers instead of decoding the error page.
    upstream_strict_status: bool = True

    @field_validator("runtime_url_template")
    @classmethod
    def runtime_template_has_version(cls, v: str) -> str:
        return _check_template("runtime_url_template", v, ("version",))

    @field_validator("bundle_url_template")
    @classmethod
    def bundle_template_has_coordinates(cls, v: str) -> str:
        return _check_template("bundle_url_template", v, ("org", "repo", "release"))

    # CORS — JSON list of allowed origins. Runtime modules are
    # loaded by games hosted on other origins, so the default is open.
    cors_origins: list[str] = ["*"]

    # Sentry — leave blank to disable error capture.
    sentry_dsn: str = ""

    # App
    debug: bool = False


def get_settings() -> Settings:
    return Settings()


def _check_template(setting: str, template: str, fields: tuple[str, ...]) -> str:
    """Require every placeholder in *fields* and no others."""
    for field in fields:
        if f"{{{field}}}" not in template:
            raise ValueError(f"{setting} must contain {{{field}}}")
    try:
        template.format(**dict.fromkeys(fields, ""))
    except (KeyError, IndexError, ValueError) as exc:
        raise ValueError(f"{setting} has an unusable placeholder: {exc}") from exc
    return template
