"""Repository scaffolding from catalog templates.

The sequence is strictly ordered and not transactional:

1. resolve the template
2. create the repository
3. commit each template file, in order
4. record the unit in the registry

A failure at step 2 or 3 propagates immediately. Anything already created
stays in place (no rollback) and no registry entry is written.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime

from repo_control_plane.control.commands import deploy_commands, verify_steps
from repo_control_plane.control.registry import RegistryEntry, RegistryStore
from repo_control_plane.control.templates import RepoTemplate, resolve_template
from repo_control_plane.github.client import CreatedRepository, HostingClient

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


@dataclass(frozen=True, slots=True)
class ScaffoldResult:
    repo: CreatedRepository
    template: RepoTemplate
    registry_entry: RegistryEntry
    deploy_commands: list[str]
    verify_steps: list[str]

    @property
    def files(self) -> list[str]:
        return [f.path for f in self.template.files]


class ScaffoldOrchestrator:
    """Create a repository from a template and register it."""

    def __init__(
        self,
        *,
        github: HostingClient,
        registry: RegistryStore,
        organization: str | None = None,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self._github = github
        self._registry = registry
        self._organization = organization
        self._clock = clock

    def scaffold_repository(
        self,
        name: str,
        description: str,
        template_id: str,
        private: bool = True,
    ) -> ScaffoldResult:
        """Run the scaffold sequence and return what was created.

        The template is recorded under its catalog id: the registry's
        `template_name` and every `scaffold(<template_name>): add <path>`
        commit message carry the same value.
        """

        if not name.strip():
            raise ValueError("Repository name is required")

        template = resolve_template(template_id, name, description)
        template_name = template.id
        logger.info(
            "Scaffolding repository",
            extra={
                "repo_name": name,
                "template_name": template_name,
                "template_version": template.version,
                "private": private,
            },
        )

        repo = self._github.create_repository(
            name=name,
            description=description,
            private=private,
            organization=self._organization,
        )

        for template_file in template.files:
            self._github.put_file_content(
                owner=repo.owner,
                repo=repo.name,
                path=template_file.path,
                content=template_file.content,
                message=f"scaffold({template_name}): add {template_file.path}",
            )

        entry = RegistryEntry(
            repo_name=repo.name,
            owner=repo.owner,
            template_name=template_name,
            template_version=template.version,
            deploy_target=template.deploy_target,
            required_config=list(template.secrets),
            status="active",
            upgrade_path=None,
            created_at=self._clock().isoformat(),
        )
        self._registry.save_entry(entry)

        logger.info(
            "Repository scaffolded",
            extra={"repo": repo.full_name, "files": len(template.files)},
        )
        return ScaffoldResult(
            repo=repo,
            template=template,
            registry_entry=entry,
            deploy_commands=deploy_commands(entry),
            verify_steps=verify_steps(entry),
        )
