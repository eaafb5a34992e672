"""Test configuration and fixtures."""

from __future__ import annotations

import json
from datetime import UTC, datetime
from typing import Any
from unittest.mock import Mock

import pytest
import requests

from repo_control_plane.github.client import Branch, CommitResult, HostingClient, RepoContext

FIXED_NOW = datetime(2025, 6, 1, 12, 0, tzinfo=UTC)


def make_response(status: int, payload: Any = None) -> requests.Response:
    """Build a real `requests.Response` so `raise_for_status` behaves as in production."""

    resp = requests.Response()
    resp.status_code = status
    resp._content = b"" if payload is None else json.dumps(payload).encode("utf-8")
    resp.url = "https://api.github.com/test"
    return resp


class FakeSession:
    """Records requests and replays canned responses in order."""

    def __init__(self, responses: list[requests.Response]) -> None:
        self.headers: dict[str, str] = {}
        self.calls: list[tuple[str, str, dict[str, Any]]] = []
        self._responses = list(responses)
        self.closed = False

    def _next(self, method: str, url: str, **kwargs: Any) -> requests.Response:
        self.calls.append((method, url, kwargs))
        if not self._responses:
            raise AssertionError(f"Unexpected request: {method} {url}")
        return self._responses.pop(0)

    def get(self, url: str, **kwargs: Any) -> requests.Response:
        return self._next("GET", url, **kwargs)

    def post(self, url: str, **kwargs: Any) -> requests.Response:
        return self._next("POST", url, **kwargs)

    def put(self, url: str, **kwargs: Any) -> requests.Response:
        return self._next("PUT", url, **kwargs)

    def patch(self, url: str, **kwargs: Any) -> requests.Response:
        return self._next("PATCH", url, **kwargs)

    def delete(self, url: str, **kwargs: Any) -> requests.Response:
        return self._next("DELETE", url, **kwargs)

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def ctx() -> RepoContext:
    return RepoContext(owner="testorg", repo="testrepo")


@pytest.fixture
def mock_github() -> Mock:
    """A hosting client double whose mutations succeed by default."""

    github = Mock(spec=HostingClient)
    github.list_branches.return_value = [
        Branch(name="main", head_commit_sha="abc123", protected=True),
        Branch(name="develop", head_commit_sha="def456", protected=False),
    ]
    github.create_branch.side_effect = lambda **kw: f"refs/heads/{kw['name']}"
    github.put_file_content.side_effect = lambda **kw: CommitResult(
        path=kw["path"], content_sha="content-sha", commit_sha="commit-sha"
    )
    return github


@pytest.fixture
def fixed_clock() -> Any:
    return lambda: FIXED_NOW


@pytest.fixture
def session_with() -> Any:
    """Factory: `session_with((200, payload), (404, None))` -> FakeSession."""

    def _build(*responses: tuple[int, Any]) -> FakeSession:
        return FakeSession([make_response(status, payload) for status, payload in responses])

    return _build
