"""Configuration for the REST server.

The server can start without a GitHub token so that the template catalog is
browsable offline. Endpoints that reach GitHub validate credentials per request.
"""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from repo_control_plane.config import DEFAULT_REGISTRY_VARIABLE


class ServerSettings(BaseSettings):
    """Settings for the REST API.

    Notes:
        - Unlike :class:`repo_control_plane.config.ControlPlaneSettings`, this
          does NOT require a GitHub token at startup.
    """

    github_token: str = Field(default="", validation_alias="CONTROL_PLANE_GITHUB_TOKEN")
    github_base_url: str = Field(
        default="https://api.github.com", validation_alias="GITHUB_BASE_URL"
    )

    control_repo: str = Field(default="", validation_alias="CONTROL_PLANE_REPO")
    registry_variable: str = Field(
        default=DEFAULT_REGISTRY_VARIABLE, validation_alias="CONTROL_PLANE_REGISTRY_VARIABLE"
    )
    default_template: str = Field(
        default="container-service", validation_alias="CONTROL_PLANE_DEFAULT_TEMPLATE"
    )
    deploy_recency_days: int = Field(
        default=90, ge=1, validation_alias="CONTROL_PLANE_DEPLOY_RECENCY_DAYS"
    )

    # Dev-friendly CORS (Vite). Override via CONTROL_PLANE_CORS_ORIGINS=...
    cors_origins: str = Field(
        default="http://localhost:5173,http://127.0.0.1:5173",
        validation_alias="CONTROL_PLANE_CORS_ORIGINS",
        description="Comma-separated list of allowed CORS origins.",
    )

    model_config = SettingsConfigDict(env_prefix="", env_file=".env", extra="ignore")

    def parsed_cors_origins(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]
