"""FastAPI app factory.

Endpoints are thin wrappers over the control plane services. All routes are
mounted under `/api`.
"""

from __future__ import annotations

import logging

import requests
from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from github import GithubException

from repo_control_plane import __version__
from repo_control_plane.control.environments import EnvironmentProvisioner
from repo_control_plane.control.registry import RegistryStore
from repo_control_plane.control.scaffold import ScaffoldOrchestrator
from repo_control_plane.control.status import RepoSnapshot, infer_status
from repo_control_plane.control.templates import is_known_template, list_templates
from repo_control_plane.github.client import HostingClient, NotFound, RepoContext
from repo_control_plane.server.config import ServerSettings
from repo_control_plane.server.models import (
    ApiTemplate,
    EnvironmentRequest,
    EnvironmentResponse,
    ScaffoldRequest,
    ScaffoldResponse,
)

logger = logging.getLogger(__name__)


def _settings(request: Request) -> ServerSettings:
    settings = getattr(request.app.state, "settings", None)
    if not isinstance(settings, ServerSettings):
        raise HTTPException(status_code=500, detail="Server settings not configured")
    return settings


def _github_client(settings: ServerSettings) -> HostingClient:
    if not settings.github_token.strip():
        raise HTTPException(
            status_code=503, detail="CONTROL_PLANE_GITHUB_TOKEN is not configured"
        )
    return HostingClient(token=settings.github_token, base_url=settings.github_base_url)


def _context(value: str | None, settings: ServerSettings) -> RepoContext:
    repository = (value or "").strip() or settings.control_repo.strip()
    if not repository:
        raise HTTPException(status_code=400, detail="No repository configured")
    try:
        return RepoContext.parse(repository)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e


def _upstream_error(e: Exception) -> HTTPException:
    if isinstance(e, NotFound):
        return HTTPException(status_code=404, detail=str(e))
    if isinstance(e, ValueError):
        return HTTPException(status_code=400, detail=str(e))
    logger.exception("GitHub call failed")
    return HTTPException(status_code=502, detail=f"GitHub error: {e}")


def create_app() -> FastAPI:
    settings = ServerSettings()

    app = FastAPI(
        title="Repository Control Plane",
        version=__version__,
        description="REST API over the repository control plane services.",
        openapi_url="/api/openapi.json",
        docs_url="/api/docs",
        redoc_url="/api/redoc",
    )
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.parsed_cors_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/api/health")
    def health(request: Request) -> dict[str, object]:
        s = _settings(request)
        return {
            "status": "ok",
            "version": __version__,
            "controlRepo": s.control_repo,
            "githubConfigured": bool(s.github_token.strip()),
        }

    @app.get("/api/templates")
    def templates() -> list[ApiTemplate]:
        return [
            ApiTemplate(
                id=t.id,
                name=t.name,
                version=t.version,
                language=t.language,
                deployTarget=t.deploy_target,
                description=t.description,
                secrets=list(t.secrets),
                files=[f.path for f in t.files],
            )
            for t in list_templates()
        ]

    @app.get("/api/registry")
    def registry(request: Request, repository: str | None = None) -> list[dict[str, object]]:
        s = _settings(request)
        ctx = _context(repository, s)
        github = _github_client(s)
        try:
            store = RegistryStore(github, ctx, variable_name=s.registry_variable)
            entries = store.fetch()
        except (requests.RequestException, GithubException) as e:
            raise _upstream_error(e) from e
        finally:
            github.close()
        return [e.model_dump(mode="json", by_alias=True) for e in entries]

    @app.post("/api/registry/scaffold", status_code=201)
    def scaffold(
        request: Request, body: ScaffoldRequest, repository: str | None = None
    ) -> ScaffoldResponse:
        s = _settings(request)
        ctx = _context(repository, s)
        template_id = body.templateId or s.default_template
        github = _github_client(s)
        try:
            store = RegistryStore(github, ctx, variable_name=s.registry_variable)
            orchestrator = ScaffoldOrchestrator(
                github=github, registry=store, organization=body.organization
            )
            result = orchestrator.scaffold_repository(
                body.name, body.description, template_id, private=body.private
            )
        except (NotFound, ValueError, requests.RequestException, GithubException) as e:
            raise _upstream_error(e) from e
        finally:
            github.close()

        return ScaffoldResponse(
            repoUrl=result.repo.html_url,
            fullName=result.repo.full_name,
            templateId=result.template.id,
            templateVersion=result.template.version,
            fallbackTemplate=not is_known_template(template_id),
            files=result.files,
            registryEntry=result.registry_entry.model_dump(mode="json", by_alias=True),
            deployCommands=result.deploy_commands,
            verifySteps=result.verify_steps,
        )

    @app.post("/api/registry/{owner}/{repo_name}/archive")
    def archive(
        request: Request, owner: str, repo_name: str, repository: str | None = None
    ) -> dict[str, object]:
        s = _settings(request)
        ctx = _context(repository, s)
        github = _github_client(s)
        try:
            store = RegistryStore(github, ctx, variable_name=s.registry_variable)
            entry = store.archive_entry(owner, repo_name)
        except (NotFound, requests.RequestException, GithubException) as e:
            raise _upstream_error(e) from e
        finally:
            github.close()
        return entry.model_dump(mode="json", by_alias=True)

    @app.post("/api/environments", status_code=201)
    def create_environment(request: Request, body: EnvironmentRequest) -> EnvironmentResponse:
        s = _settings(request)
        ctx = _context(body.repository, s)
        github = _github_client(s)
        try:
            provisioner = EnvironmentProvisioner(github=github)
            result = provisioner.create_environment(
                ctx, body.slug, body.description, body.baseBranch
            )
            commented = False
            if body.issueNumber is not None:
                github.comment_on_issue(
                    owner=ctx.owner,
                    repo=ctx.repo,
                    issue_number=body.issueNumber,
                    body=result.issue_comment,
                )
                commented = True
        except (NotFound, ValueError, requests.RequestException, GithubException) as e:
            raise _upstream_error(e) from e
        finally:
            github.close()

        return EnvironmentResponse(
            branch=result.branch,
            files=result.files,
            issueComment=result.issue_comment,
            commented=commented,
        )

    @app.get("/api/repos/{owner}/{repo_name}/status")
    def repo_status(request: Request, owner: str, repo_name: str) -> dict[str, object]:
        s = _settings(request)
        github = _github_client(s)
        try:
            data = github.get_repository(owner=owner, repo=repo_name)
        except (NotFound, requests.RequestException, GithubException) as e:
            raise _upstream_error(e) from e
        finally:
            github.close()
        meta = infer_status(RepoSnapshot.from_api(data), recency_days=s.deploy_recency_days)
        return meta.to_json()

    return app
