"""Unit tests for the built-in template catalog."""

from __future__ import annotations

import json
import logging

import pytest

from repo_control_plane.control.templates import (
    DEFAULT_TEMPLATE_ID,
    is_known_template,
    list_templates,
    resolve_template,
)


def _files(template) -> dict[str, str]:
    return {f.path: f.content for f in template.files}


def test_catalog_has_container_and_serverless_templates() -> None:
    targets = {t.deploy_target for t in list_templates()}
    assert "docker" in targets
    assert "vercel" in targets
    assert is_known_template(DEFAULT_TEMPLATE_ID)


@pytest.mark.parametrize("template_id", [t.id for t in list_templates()])
def test_every_template_renders_required_files(template_id: str) -> None:
    template = resolve_template(template_id, "my-unit", "Does a thing")
    files = _files(template)

    readme = files["README.md"]
    assert "## Architecture" in readme
    assert "my-unit" in readme

    manifests = [path for path in files if path.endswith(".json")]
    assert len(manifests) == 1
    manifest = json.loads(files[manifests[0]])
    assert manifest["name"] == "my-unit"

    env_example = files[".env.example"]
    for secret in template.secrets:
        assert f"{secret}=" in env_example

    for content in files.values():
        assert "{{name}}" not in content
        assert "{{description}}" not in content


def test_container_template_has_multi_stage_dockerfile() -> None:
    template = resolve_template("container-service", "svc", "")
    dockerfile = _files(template)["Dockerfile"]

    assert template.deploy_target == "docker"
    assert dockerfile.count("FROM ") >= 2
    assert "COPY --from=" in dockerfile


def test_manifest_stays_valid_json_with_quotes_in_description() -> None:
    template = resolve_template("serverless-app", "app", 'says "hi"')
    manifest = json.loads(_files(template)["vercel.json"])
    assert manifest["env"]["APP_DESCRIPTION"] == 'says "hi"'


@pytest.mark.parametrize("unknown", ["nonexistent", "", "Container-Service", "servce"])
def test_unknown_id_resolves_to_default(unknown: str) -> None:
    fallback = resolve_template(unknown, "unit", "desc")
    default = resolve_template(DEFAULT_TEMPLATE_ID, "unit", "desc")
    assert fallback == default


def test_unknown_id_logs_warning(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING, logger="repo_control_plane.control.templates"):
        resolve_template("typo", "unit", "desc")
    assert any("Unknown template" in r.getMessage() for r in caplog.records)
    assert not is_known_template("typo")


def test_resolve_returns_fresh_rendering_per_target() -> None:
    a = resolve_template("library", "alpha", "")
    b = resolve_template("library", "beta", "")
    assert a.version == b.version
    assert a.files != b.files
