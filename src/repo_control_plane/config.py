"""Configuration for the control plane CLI.

Configuration is loaded from:
- environment variables
- and a local `.env` file (if present)

The token variable is namespaced (`CONTROL_PLANE_GITHUB_TOKEN`) so it does not
collide with a `GITHUB_TOKEN` other tools may export.
"""

from __future__ import annotations

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_REGISTRY_VARIABLE = "LC_REGISTRY"


class ControlPlaneSettings(BaseSettings):
    """Settings for the control plane CLI.

    Environment variables:
    - CONTROL_PLANE_GITHUB_TOKEN
    - GITHUB_BASE_URL                    (optional)
    - LOG_LEVEL                          (optional)
    - CONTROL_PLANE_REPO                 (optional)
    - CONTROL_PLANE_REGISTRY_VARIABLE    (optional)
    - CONTROL_PLANE_DEFAULT_TEMPLATE     (optional)
    - CONTROL_PLANE_DEPLOY_RECENCY_DAYS  (optional)

    Notes:
        Tests can point at a specific env file with
        `ControlPlaneSettings(_env_file=path_to_env)`.
    """

    # Empty default keeps `ControlPlaneSettings()` type-correct; the validator
    # below still rejects a missing token.
    github_token: str = Field(
        default="",
        validation_alias="CONTROL_PLANE_GITHUB_TOKEN",
        description="GitHub token used for API authentication",
    )
    github_base_url: str = Field(
        default="https://api.github.com",
        validation_alias="GITHUB_BASE_URL",
        description="GitHub API base URL (useful for GitHub Enterprise)",
    )

    log_level: str = Field(
        default="INFO",
        validation_alias="LOG_LEVEL",
        description="Root logging level",
    )

    control_repo: str = Field(
        default="",
        validation_alias="CONTROL_PLANE_REPO",
        description="Repository ('owner/repo') whose variable store holds the registry",
    )
    registry_variable: str = Field(
        default=DEFAULT_REGISTRY_VARIABLE,
        validation_alias="CONTROL_PLANE_REGISTRY_VARIABLE",
        description="Name of the repository variable holding the serialized registry",
    )
    default_template: str = Field(
        default="container-service",
        validation_alias="CONTROL_PLANE_DEFAULT_TEMPLATE",
        description="Template id used when none is given on the command line",
    )
    deploy_recency_days: int = Field(
        default=90,
        ge=1,
        validation_alias="CONTROL_PLANE_DEPLOY_RECENCY_DAYS",
        description="A push older than this is not reported as the last deploy",
    )

    model_config = SettingsConfigDict(
        env_prefix="",
        env_file=".env",
        extra="ignore",
    )

    @model_validator(mode="after")
    def _require_github_auth(self) -> ControlPlaneSettings:
        if not self.github_token.strip():
            raise ValueError("CONTROL_PLANE_GITHUB_TOKEN is required")
        return self
