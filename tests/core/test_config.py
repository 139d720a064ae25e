"""Tests for environment-driven settings."""

import pytest
from pydantic import ValidationError

from carimbo_cdn.core.config import Settings


class TestSettings:
    def test_defaults_point_at_github(self, monkeypatch) -> None:
        monkeypatch.delenv("PORT", raising=False)
        settings = Settings(_env_file=None)

        assert settings.port == 8080
        assert settings.runtime_url_template.startswith(
            "https://github.com/carimbolabs/carimbo/releases/download/"
        )
        assert settings.bundle_url_template == (
            "https://github.com/{org}/{repo}/archive/refs/tags/v{release}.zip"
        )
        assert settings.upstream_strict_status is True

    def test_port_from_environment(self, monkeypatch) -> None:
        monkeypatch.setenv("PORT", "3000")

        assert Settings(_env_file=None).port == 3000

    def test_non_numeric_port_is_rejected(self, monkeypatch) -> None:
        monkeypatch.setenv("PORT", "http")

        with pytest.raises(ValidationError):
            Settings(_env_file=None)

    def test_strict_status_can_be_disabled(self, monkeypatch) -> None:
        monkeypatch.setenv("UPSTREAM_STRICT_STATUS", "false")

        assert Settings(_env_file=None).upstream_strict_status is False

    def test_runtime_template_requires_version_placeholder(self) -> None:
        with pytest.raises(ValidationError):
            Settings(_env_file=None, runtime_url_template="https://example.test/latest.zip")

    def test_bundle_template_rejects_unknown_placeholder(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            Settings(
                _env_file=None,
                bundle_url_template="https://example.test/{owner}/{org}/{repo}/v{release}.zip",
            )

        assert "bundle_url_template" in str(exc_info.value)

    def test_bundle_template_requires_every_coordinate(self) -> None:
        with pytest.raises(ValidationError):
            Settings(_env_file=None, bundle_url_template="https://example.test/{org}/{repo}.zip")

    def test_runtime_template_rejects_unknown_placeholder(self) -> None:
        with pytest.raises(ValidationError):
            Settings(_env_file=None, runtime_url_template="https://example.test/{tag}/v{version}.zip")

    def test_custom_templates_are_accepted(self) -> None:
        settings = Settings(
            _env_file=None,
            runtime_url_template="https://mirror.test/runtime/{version}.zip",
            bundle_url_template="https://mirror.test/{org}/{repo}/{release}.zip",
        )

        assert settings.bundle_url_template.format(org="a", repo="b", release="1") == (
            "https://mirror.test/a/b/1.zip"
        )
