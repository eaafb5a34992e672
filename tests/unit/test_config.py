"""Unit tests for configuration."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from repo_control_plane.config import ControlPlaneSettings
from repo_control_plane.server.config import ServerSettings

_ENV_VARS = (
    "CONTROL_PLANE_GITHUB_TOKEN",
    "GITHUB_BASE_URL",
    "LOG_LEVEL",
    "CONTROL_PLANE_REPO",
    "CONTROL_PLANE_REGISTRY_VARIABLE",
    "CONTROL_PLANE_DEFAULT_TEMPLATE",
    "CONTROL_PLANE_DEPLOY_RECENCY_DAYS",
    "CONTROL_PLANE_CORS_ORIGINS",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)


def test_settings_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    """Only the token is required."""
    monkeypatch.setenv("CONTROL_PLANE_GITHUB_TOKEN", "test-token")
    settings = ControlPlaneSettings()

    assert settings.github_token == "test-token"
    assert settings.github_base_url == "https://api.github.com"
    assert settings.log_level == "INFO"
    assert settings.control_repo == ""
    assert settings.registry_variable == "LC_REGISTRY"
    assert settings.default_template == "container-service"
    assert settings.deploy_recency_days == 90


def test_settings_require_token() -> None:
    with pytest.raises(ValidationError, match="CONTROL_PLANE_GITHUB_TOKEN is required"):
        ControlPlaneSettings()


def test_settings_load_from_dotenv(tmp_path: Path) -> None:
    (tmp_path / ".env").write_text(
        "CONTROL_PLANE_GITHUB_TOKEN=from-file\n"
        "CONTROL_PLANE_REPO=acme/control\n"
        "CONTROL_PLANE_REGISTRY_VARIABLE=UNITS\n"
        "CONTROL_PLANE_DEPLOY_RECENCY_DAYS=30\n"
        "UNRELATED_SETTING=ignored\n",
        encoding="utf-8",
    )
    settings = ControlPlaneSettings()

    assert settings.github_token == "from-file"
    assert settings.control_repo == "acme/control"
    assert settings.registry_variable == "UNITS"
    assert settings.deploy_recency_days == 30


def test_environment_overrides_dotenv(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    (tmp_path / ".env").write_text("CONTROL_PLANE_GITHUB_TOKEN=from-file\n", encoding="utf-8")
    monkeypatch.setenv("CONTROL_PLANE_GITHUB_TOKEN", "from-env")
    assert ControlPlaneSettings().github_token == "from-env"


def test_recency_window_must_be_positive(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CONTROL_PLANE_GITHUB_TOKEN", "t")
    monkeypatch.setenv("CONTROL_PLANE_DEPLOY_RECENCY_DAYS", "0")
    with pytest.raises(ValidationError):
        ControlPlaneSettings()


def test_server_settings_do_not_require_token(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CONTROL_PLANE_CORS_ORIGINS", "https://a.example, ,https://b.example")
    settings = ServerSettings()

    assert settings.github_token == ""
    assert settings.parsed_cors_origins() == ["https://a.example", "https://b.example"]
