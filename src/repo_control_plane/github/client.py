"""GitHub API client wrapper for the control plane.

This wraps the handful of GitHub REST endpoints the control plane mutates
(contents, refs, repository variables) plus PyGithub for repository creation,
so orchestration code never talks HTTP directly and tests can inject a mock.
"""

from __future__ import annotations

import base64
import itertools
import logging
from dataclasses import dataclass
from typing import Any
from urllib.parse import quote

import requests
from github import Auth, Github

logger = logging.getLogger(__name__)


class NotFound(LookupError):
    """The platform (or the control plane) reported that a named object does not exist."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


@dataclass(frozen=True, slots=True)
class RepoContext:
    """The repository an operation is scoped to."""

    owner: str
    repo: str

    @classmethod
    def parse(cls, value: str) -> RepoContext:
        parts = [p for p in value.strip().strip("/").split("/") if p]
        if len(parts) != 2:
            raise ValueError(f"Repository must be in the form 'owner/repo': {value!r}")
        return cls(owner=parts[0], repo=parts[1])

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.repo}"


@dataclass(frozen=True, slots=True)
class CreatedRepository:
    """Minimal repository metadata returned after creation."""

    owner: str
    name: str
    full_name: str
    html_url: str
    default_branch: str
    private: bool


@dataclass(frozen=True, slots=True)
class Branch:
    name: str
    head_commit_sha: str
    protected: bool


@dataclass(frozen=True, slots=True)
class CommitResult:
    """Outcome of a contents API create-or-update call."""

    path: str
    content_sha: str
    commit_sha: str
    html_url: str | None = None


def encode_content(text: str) -> str:
    """Encode text as base64 over its UTF-8 bytes (contents API wire format)."""

    return base64.b64encode(text.encode("utf-8")).decode("ascii")


def decode_content(encoded: str) -> str:
    """Inverse of :func:`encode_content`; tolerates the newlines GitHub inserts."""

    compact = "".join(encoded.split())
    return base64.b64decode(compact.encode("ascii")).decode("utf-8")


class HostingClient:
    """Small wrapper over the GitHub REST API for control plane operations.

    Every call either returns a parsed value, raises :class:`NotFound` for a
    platform 404 where the caller needs to distinguish it, or lets the
    underlying `requests.HTTPError` / `github.GithubException` propagate.
    """

    def __init__(
        self,
        *,
        token: str,
        base_url: str = "https://api.github.com",
        session: requests.Session | None = None,
        github_api: Github | None = None,
    ) -> None:
        if not token:
            raise ValueError("GitHub token is required")

        self._rest_base_url = base_url.rstrip("/")
        self._session = session or requests.Session()
        self._session.headers.update(
            {
                "Authorization": f"Bearer {token}",
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": "2022-11-28",
                "User-Agent": "repo-control-plane",
            }
        )
        self._github = github_api or Github(auth=Auth.Token(token), base_url=self._rest_base_url)

    def _repo_url(self, *, owner: str, repo: str, path: str = "") -> str:
        owner = owner.strip().strip("/")
        repo = repo.strip().strip("/")
        if not owner or not repo:
            raise ValueError("owner and repo are required")
        path = path.lstrip("/")
        base = f"{self._rest_base_url}/repos/{owner}/{repo}"
        return f"{base}/{path}" if path else base

    @staticmethod
    def _raise_for_status(resp: requests.Response, *, missing: str) -> None:
        if resp.status_code == 404:
            raise NotFound(missing)
        resp.raise_for_status()

    def create_repository(
        self,
        *,
        name: str,
        description: str,
        private: bool = True,
        organization: str | None = None,
    ) -> CreatedRepository:
        """Create an empty repository for the authenticated user (or an organization).

        The repository is created without an initial commit so that the first
        contents API write becomes the root commit.
        """

        if not name.strip():
            raise ValueError("Repository name is required")

        if organization:
            owner_api = self._github.get_organization(organization)
        else:
            owner_api = self._github.get_user()
        repo = owner_api.create_repo(
            name=name,
            description=description,
            private=private,
            auto_init=False,
        )

        created = CreatedRepository(
            owner=repo.owner.login,
            name=repo.name,
            full_name=repo.full_name,
            html_url=repo.html_url,
            default_branch=repo.default_branch or "main",
            private=bool(repo.private),
        )
        logger.info(
            "Repository created",
            extra={"repo": created.full_name, "private": created.private},
        )
        return created

    def get_repository(self, *, owner: str, repo: str) -> dict[str, Any]:
        """Return the raw repository JSON (topics, counts, push timestamp)."""

        url = self._repo_url(owner=owner, repo=repo)
        resp = self._session.get(url, timeout=30)
        self._raise_for_status(resp, missing=f"Repository not found: {owner}/{repo}")
        data: dict[str, Any] = resp.json()
        return data

    def list_branches(self, *, owner: str, repo: str) -> list[Branch]:
        """List every branch, following pagination until a short page."""

        url = self._repo_url(owner=owner, repo=repo, path="branches")
        branches: list[Branch] = []
        per_page = 100
        for page in itertools.count(1):
            resp = self._session.get(
                url,
                params={"per_page": per_page, "page": page},
                timeout=30,
            )
            self._raise_for_status(resp, missing=f"Repository not found: {owner}/{repo}")
            payload = resp.json()
            if not isinstance(payload, list):
                break

            for item in payload:
                if not isinstance(item, dict):
                    continue
                name = item.get("name")
                commit = item.get("commit")
                sha = commit.get("sha") if isinstance(commit, dict) else None
                if not isinstance(name, str) or not isinstance(sha, str):
                    continue
                branches.append(
                    Branch(name=name, head_commit_sha=sha, protected=bool(item.get("protected")))
                )

            if len(payload) < per_page:
                break
        return branches

    def create_branch(self, *, owner: str, repo: str, name: str, from_sha: str) -> str:
        """Create `refs/heads/<name>` at `from_sha` and return the full ref."""

        if not name.strip():
            raise ValueError("branch is required")
        if not from_sha.strip():
            raise ValueError("from_sha is required")

        ref = f"refs/heads/{name}"
        url = self._repo_url(owner=owner, repo=repo, path="git/refs")
        resp = self._session.post(url, json={"ref": ref, "sha": from_sha}, timeout=30)
        resp.raise_for_status()
        logger.info(
            "Branch created",
            extra={"repo": f"{owner}/{repo}", "branch": name, "from_sha": from_sha},
        )
        return ref

    def put_file_content(
        self,
        *,
        owner: str,
        repo: str,
        path: str,
        content: str,
        message: str,
        branch: str | None = None,
        previous_sha: str | None = None,
    ) -> CommitResult:
        """Create or update a text file via the contents API.

        Omitting `previous_sha` creates the file; supplying it updates exactly
        that version.
        """

        norm = path.lstrip("/")
        if not norm:
            raise ValueError("path is required")
        url = self._repo_url(owner=owner, repo=repo, path=f"contents/{quote(norm, safe='/')}")
        payload: dict[str, Any] = {"message": message, "content": encode_content(content)}
        if branch:
            payload["branch"] = branch
        if previous_sha:
            payload["sha"] = previous_sha

        resp = self._session.put(url, json=payload, timeout=30)
        resp.raise_for_status()
        data: dict[str, Any] = resp.json()

        content_info = data.get("content")
        commit_info = data.get("commit")
        content_sha = content_info.get("sha") if isinstance(content_info, dict) else None
        commit_sha = commit_info.get("sha") if isinstance(commit_info, dict) else None
        html_url = content_info.get("html_url") if isinstance(content_info, dict) else None

        logger.info(
            "File committed",
            extra={"repo": f"{owner}/{repo}", "path": norm, "branch": branch or ""},
        )
        return CommitResult(
            path=norm,
            content_sha=content_sha if isinstance(content_sha, str) else "",
            commit_sha=commit_sha if isinstance(commit_sha, str) else "",
            html_url=html_url if isinstance(html_url, str) else None,
        )

    def get_variable(self, *, owner: str, repo: str, name: str) -> str:
        """Return a repository Actions variable's value.

        Raises:
            NotFound if the variable does not exist.
        """

        url = self._repo_url(owner=owner, repo=repo, path=f"actions/variables/{name}")
        resp = self._session.get(url, timeout=30)
        self._raise_for_status(resp, missing=f"Variable not found: {name}")
        data: dict[str, Any] = resp.json()
        value = data.get("value")
        return value if isinstance(value, str) else ""

    def update_variable(self, *, owner: str, repo: str, name: str, value: str) -> None:
        url = self._repo_url(owner=owner, repo=repo, path=f"actions/variables/{name}")
        resp = self._session.patch(url, json={"name": name, "value": value}, timeout=30)
        self._raise_for_status(resp, missing=f"Variable not found: {name}")
        logger.info("Variable updated", extra={"repo": f"{owner}/{repo}", "variable": name})

    def create_variable(self, *, owner: str, repo: str, name: str, value: str) -> None:
        url = self._repo_url(owner=owner, repo=repo, path="actions/variables")
        resp = self._session.post(url, json={"name": name, "value": value}, timeout=30)
        resp.raise_for_status()
        logger.info("Variable created", extra={"repo": f"{owner}/{repo}", "variable": name})

    def upsert_variable(self, *, owner: str, repo: str, name: str, value: str) -> None:
        """Update a variable, creating it when the update reports it does not exist.

        Only a not-found on the update triggers the create; any other failure
        propagates unchanged.
        """

        try:
            self.update_variable(owner=owner, repo=repo, name=name, value=value)
        except NotFound:
            logger.debug(
                "Variable missing on update; creating it",
                extra={"repo": f"{owner}/{repo}", "variable": name},
            )
            self.create_variable(owner=owner, repo=repo, name=name, value=value)

    def comment_on_issue(self, *, owner: str, repo: str, issue_number: int, body: str) -> int:
        """Post a comment on an issue and return the comment id."""

        if issue_number <= 0:
            raise ValueError("issue_number must be a positive integer")
        url = self._repo_url(owner=owner, repo=repo, path=f"issues/{issue_number}/comments")
        resp = self._session.post(url, json={"body": body}, timeout=30)
        self._raise_for_status(resp, missing=f"Issue not found: #{issue_number}")
        data: dict[str, Any] = resp.json()
        comment_id = data.get("id")
        logger.info(
            "Issue comment posted",
            extra={"repo": f"{owner}/{repo}", "issue_number": issue_number},
        )
        return comment_id if isinstance(comment_id, int) else 0

    def close(self) -> None:
        self._session.close()
        self._github.close()
