"""Registry of provisioned units, persisted in a repository variable.

There is no database. The whole registry is one JSON array stored under a
well-known Actions variable of the control repository; every mutation reads
the array, changes it in memory and writes the whole array back.

Concurrent writers race: the last write wins over the entire collection.
"""

from __future__ import annotations

import json
import logging
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from repo_control_plane.config import DEFAULT_REGISTRY_VARIABLE
from repo_control_plane.github.client import HostingClient, NotFound, RepoContext

logger = logging.getLogger(__name__)

RegistryStatus = Literal["provisioning", "active", "archived"]


class RegistryEntry(BaseModel):
    """One provisioned unit. Identity is the `(owner, repo_name)` pair."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    repo_name: str
    owner: str
    template_name: str
    template_version: str
    deploy_target: str
    required_config: list[str] = Field(default_factory=list)
    status: RegistryStatus = Field(default="active")
    upgrade_path: str | None = Field(default=None)
    created_at: str

    @property
    def key(self) -> tuple[str, str]:
        return (self.owner, self.repo_name)


class RegistryStore:
    """Read/modify/write access to the serialized registry collection."""

    def __init__(
        self,
        github: HostingClient,
        ctx: RepoContext,
        *,
        variable_name: str = DEFAULT_REGISTRY_VARIABLE,
    ) -> None:
        self._github = github
        self._ctx = ctx
        self._variable_name = variable_name

    def fetch(self) -> list[RegistryEntry]:
        """Return the current collection.

        A missing variable is an empty registry. A variable that is present
        but unreadable is also treated as empty, with a warning so the
        corruption is visible.
        """

        try:
            raw_value = self._github.get_variable(
                owner=self._ctx.owner, repo=self._ctx.repo, name=self._variable_name
            )
        except NotFound:
            logger.debug(
                "Registry variable not initialized; treating as empty",
                extra={"repo": self._ctx.full_name, "variable": self._variable_name},
            )
            return []

        if not raw_value.strip():
            return []

        try:
            raw = json.loads(raw_value)
        except json.JSONDecodeError:
            logger.warning(
                "Registry variable is not valid JSON; treating as empty",
                extra={"repo": self._ctx.full_name, "variable": self._variable_name},
            )
            return []

        if not isinstance(raw, list):
            logger.warning(
                "Registry variable has unexpected shape; treating as empty",
                extra={"repo": self._ctx.full_name, "variable": self._variable_name},
            )
            return []

        try:
            return [RegistryEntry.model_validate(item) for item in raw]
        except ValidationError as e:
            logger.warning(
                "Registry variable holds invalid entries; treating as empty",
                extra={
                    "repo": self._ctx.full_name,
                    "variable": self._variable_name,
                    "errors": e.error_count(),
                },
            )
            return []

    def find(self, owner: str, repo_name: str) -> RegistryEntry | None:
        for entry in self.fetch():
            if entry.key == (owner, repo_name):
                return entry
        return None

    def save_entry(self, entry: RegistryEntry) -> list[RegistryEntry]:
        """Replace the entry with the same key, or append it. Returns the written collection."""

        entries = self.fetch()
        for idx, existing in enumerate(entries):
            if existing.key == entry.key:
                entries[idx] = entry
                break
        else:
            entries.append(entry)
        self._write(entries)
        logger.info(
            "Registry entry saved",
            extra={"repo": self._ctx.full_name, "unit": f"{entry.owner}/{entry.repo_name}"},
        )
        return entries

    def archive_entry(self, owner: str, repo_name: str) -> RegistryEntry:
        """Mark an entry archived and return it.

        Raises:
            NotFound if no entry has the given key.
        """

        entries = self.fetch()
        for idx, existing in enumerate(entries):
            if existing.key == (owner, repo_name):
                archived = existing.model_copy(update={"status": "archived"})
                entries[idx] = archived
                self._write(entries)
                logger.info(
                    "Registry entry archived",
                    extra={"repo": self._ctx.full_name, "unit": f"{owner}/{repo_name}"},
                )
                return archived
        raise NotFound(f"Registry entry not found: {owner}/{repo_name}")

    def _write(self, entries: list[RegistryEntry]) -> None:
        payload = [e.model_dump(mode="json", by_alias=True) for e in entries]
        self._github.upsert_variable(
            owner=self._ctx.owner,
            repo=self._ctx.repo,
            name=self._variable_name,
            value=json.dumps(payload, ensure_ascii=False),
        )


def fetch_registry(github: HostingClient, ctx: RepoContext) -> list[RegistryEntry]:
    return RegistryStore(github, ctx).fetch()


def save_registry_entry(
    github: HostingClient, ctx: RepoContext, entry: RegistryEntry
) -> list[RegistryEntry]:
    return RegistryStore(github, ctx).save_entry(entry)


def archive_registry_entry(
    github: HostingClient, ctx: RepoContext, owner: str, repo_name: str
) -> RegistryEntry:
    return RegistryStore(github, ctx).archive_entry(owner, repo_name)
