"""Environment branch provisioning.

An environment is a short-lived `env/<slug>` branch cut from the default
branch and carrying three scaffold files under `environments/<slug>/`.
Like repository scaffolding, the steps are ordered and not transactional.
"""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime

from repo_control_plane.github.client import HostingClient, NotFound, RepoContext

logger = logging.getLogger(__name__)

ENV_BRANCH_PREFIX = "env/"
ENVIRONMENTS_ROOT = "environments"


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


def sanitize_slug(raw: str) -> str:
    """Normalize free text into a branch-safe slug (`Staging EU` -> `staging-eu`)."""

    slug = re.sub(r"[^a-z0-9-]", "-", raw.strip().lower())
    slug = re.sub(r"-+", "-", slug)
    return slug.strip("-")


@dataclass(frozen=True, slots=True)
class EnvironmentProvisionResult:
    branch: str
    files: list[str]
    issue_comment: str


class EnvironmentProvisioner:
    def __init__(
        self,
        *,
        github: HostingClient,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self._github = github
        self._clock = clock

    def create_environment(
        self,
        ctx: RepoContext,
        slug: str,
        description: str,
        default_branch: str,
    ) -> EnvironmentProvisionResult:
        """Cut `env/<slug>` from `default_branch` and commit the scaffold files.

        Raises:
            NotFound if `default_branch` does not exist. Nothing is created in
            that case.
        """

        normalized = sanitize_slug(slug)
        if not normalized:
            raise ValueError(f"Environment slug is empty after normalization: {slug!r}")

        branches = self._github.list_branches(owner=ctx.owner, repo=ctx.repo)
        base = next((b for b in branches if b.name == default_branch), None)
        if base is None:
            raise NotFound(f'Cannot find branch "{default_branch}"')

        branch = f"{ENV_BRANCH_PREFIX}{normalized}"
        self._github.create_branch(
            owner=ctx.owner, repo=ctx.repo, name=branch, from_sha=base.head_commit_sha
        )

        created_at = self._clock().isoformat()
        root = f"{ENVIRONMENTS_ROOT}/{normalized}"
        readme_path = f"{root}/README.md"
        config_path = f"{root}/config.json"
        env_path = f"{root}/.env.example"

        scaffold = (
            (
                readme_path,
                _readme(normalized, description, branch, default_branch, created_at),
                f"env({normalized}): scaffold environment",
            ),
            (
                config_path,
                _config(normalized, description, branch, default_branch, created_at),
                f"env({normalized}): add config",
            ),
            (
                env_path,
                _env_example(normalized),
                f"env({normalized}): add .env.example",
            ),
        )
        for path, content, message in scaffold:
            self._github.put_file_content(
                owner=ctx.owner,
                repo=ctx.repo,
                path=path,
                content=content,
                message=message,
                branch=branch,
            )

        logger.info(
            "Environment provisioned",
            extra={"repo": ctx.full_name, "branch": branch, "base_branch": default_branch},
        )
        return EnvironmentProvisionResult(
            branch=branch,
            files=[readme_path, config_path, env_path],
            issue_comment=(
                "**Environment created**\n\n"
                f"- Branch: `{branch}`\n"
                f"- Config: `{config_path}`\n"
                "- Status: provisioning\n\n"
                "Scaffolded automatically by the repository control plane."
            ),
        )


def _readme(slug: str, description: str, branch: str, base: str, created_at: str) -> str:
    return (
        f"# Environment: {slug}\n\n"
        f"{description or slug}\n\n"
        f"Branch: `{branch}`\n"
        f"Base branch: `{base}`\n"
        f"Date: {created_at}\n\n"
        "## Status\n\n"
        "- [ ] Environment provisioned\n"
        "- [ ] Configuration set\n"
        "- [ ] Ready for development\n"
    )


def _config(slug: str, description: str, branch: str, base: str, created_at: str) -> str:
    document = {
        "slug": slug,
        "description": description,
        "branch": branch,
        "baseBranch": base,
        "created": created_at,
        "status": "provisioning",
        "vault": {},
    }
    return json.dumps(document, indent=2) + "\n"


def _env_example(slug: str) -> str:
    return f"# Environment: {slug}\n# Copy to .env and fill in values\n\nENV_NAME={slug}\n"
