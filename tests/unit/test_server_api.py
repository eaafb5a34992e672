from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path
from unittest.mock import Mock

import pytest
from fastapi.testclient import TestClient

import repo_control_plane.server.app as app_module
from repo_control_plane.github.client import CreatedRepository, NotFound
from repo_control_plane.server.app import create_app


@pytest.fixture
def client(monkeypatch: pytest.MonkeyPatch, tmp_path: Path, mock_github: Mock) -> TestClient:
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("CONTROL_PLANE_GITHUB_TOKEN", "test-token")
    monkeypatch.setenv("CONTROL_PLANE_REPO", "testorg/testrepo")
    # Route every GitHub call through the shared double.
    monkeypatch.setattr(app_module, "_github_client", lambda _settings: mock_github)
    return TestClient(create_app())


def test_health_and_docs(client: TestClient) -> None:
    health = client.get("/api/health").json()
    assert health["status"] == "ok"
    assert "version" in health
    assert health["controlRepo"] == "testorg/testrepo"
    assert health["githubConfigured"] is True

    assert client.get("/api/openapi.json").status_code == 200


def test_templates_endpoint(client: TestClient) -> None:
    templates = {t["id"]: t for t in client.get("/api/templates").json()}
    assert set(templates) >= {"container-service", "serverless-app"}
    assert templates["container-service"]["deployTarget"] == "docker"
    assert "Dockerfile" in templates["container-service"]["files"]


def test_registry_empty_when_variable_missing(client: TestClient, mock_github: Mock) -> None:
    mock_github.get_variable.side_effect = NotFound("variable missing")
    resp = client.get("/api/registry")
    assert resp.status_code == 200
    assert resp.json() == []


def test_registry_explicit_repository(client: TestClient, mock_github: Mock) -> None:
    mock_github.get_variable.return_value = "[]"
    assert client.get("/api/registry", params={"repository": "acme/ctl"}).status_code == 200
    mock_github.get_variable.assert_called_once_with(owner="acme", repo="ctl", name="LC_REGISTRY")


def test_registry_rejects_malformed_repository(client: TestClient) -> None:
    assert client.get("/api/registry", params={"repository": "nope"}).status_code == 400


def test_scaffold_endpoint(client: TestClient, mock_github: Mock) -> None:
    mock_github.create_repository.return_value = CreatedRepository(
        owner="acme",
        name="billing",
        full_name="acme/billing",
        html_url="https://github.com/acme/billing",
        default_branch="main",
        private=True,
    )
    mock_github.get_variable.side_effect = NotFound("variable missing")

    resp = client.post(
        "/api/registry/scaffold", json={"name": "billing", "templateId": "missing-template"}
    )

    assert resp.status_code == 201
    body = resp.json()
    assert body["fullName"] == "acme/billing"
    assert body["templateId"] == "container-service"
    assert body["fallbackTemplate"] is True
    assert body["registryEntry"]["repoName"] == "billing"
    assert body["registryEntry"]["status"] == "active"
    assert body["deployCommands"][0] == "docker build -t billing ."
    assert len(body["verifySteps"]) == 4


def test_archive_missing_entry_is_404(client: TestClient, mock_github: Mock) -> None:
    mock_github.get_variable.return_value = "[]"
    resp = client.post("/api/registry/acme/ghost/archive")
    assert resp.status_code == 404
    mock_github.upsert_variable.assert_not_called()


def test_create_environment_endpoint(client: TestClient, mock_github: Mock) -> None:
    resp = client.post(
        "/api/environments",
        json={"slug": "prod", "description": "Production", "issueNumber": 5},
    )

    assert resp.status_code == 201
    body = resp.json()
    assert body["branch"] == "env/prod"
    assert len(body["files"]) == 3
    assert body["commented"] is True
    mock_github.comment_on_issue.assert_called_once_with(
        owner="testorg", repo="testrepo", issue_number=5, body=body["issueComment"]
    )


def test_create_environment_missing_branch_is_404(client: TestClient, mock_github: Mock) -> None:
    resp = client.post("/api/environments", json={"slug": "prod", "baseBranch": "trunk"})
    assert resp.status_code == 404
    assert "trunk" in resp.json()["detail"]
    mock_github.create_branch.assert_not_called()


def test_repo_status_endpoint(client: TestClient, mock_github: Mock) -> None:
    mock_github.get_repository.return_value = {
        "full_name": "acme/web",
        "topics": ["archived", "production"],
        "open_issues_count": 1,
        "pushed_at": datetime(2001, 1, 1, tzinfo=UTC).isoformat(),
    }

    meta = client.get("/api/repos/acme/web/status").json()

    mock_github.get_repository.assert_called_once_with(owner="acme", repo="web")
    assert meta == {
        "tier": "ARCHIVED",
        "deploymentStatus": "PRODUCTION",
        "lastDeployAt": None,
        "openPRCount": 0,
        "openIssueCount": 1,
    }


def test_github_routes_require_token(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("CONTROL_PLANE_GITHUB_TOKEN", raising=False)
    monkeypatch.setenv("CONTROL_PLANE_REPO", "testorg/testrepo")
    client = TestClient(create_app())

    assert client.get("/api/health").json()["githubConfigured"] is False
    assert client.get("/api/templates").status_code == 200
    assert client.get("/api/registry").status_code == 503
