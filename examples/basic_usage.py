#!/usr/bin/env python3
"""Programmatic scaffolding example.

This drives the control plane services directly instead of through the CLI:

* load settings from `.env`
* scaffold a repository from a catalog template
* record it in the registry held by the control repository
* print the generated deploy and verify commands

The control repository is passed as an argument (not read from `.env`).
"""

from __future__ import annotations

import argparse
from typing import Sequence

from repo_control_plane.config import ControlPlaneSettings
from repo_control_plane.control import RegistryStore, ScaffoldOrchestrator, list_templates
from repo_control_plane.github import HostingClient, RepoContext
from repo_control_plane.logging import configure_logging


def _parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    template_ids = [t.id for t in list_templates()]
    parser = argparse.ArgumentParser(description="Scaffold a repository (programmatic example).")
    parser.add_argument(
        "--control-repo", required=True, help='Registry repository in the form "owner/repo"'
    )
    parser.add_argument("--name", required=True, help="Name of the repository to create")
    parser.add_argument("--description", default="", help="Repository description")
    parser.add_argument(
        "--template",
        default=template_ids[0],
        help=f"Template id, one of: {', '.join(template_ids)}",
    )
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(argv)

    settings = ControlPlaneSettings()
    configure_logging(settings.log_level)

    github = HostingClient(token=settings.github_token, base_url=settings.github_base_url)
    try:
        store = RegistryStore(
            github,
            RepoContext.parse(args.control_repo),
            variable_name=settings.registry_variable,
        )
        orchestrator = ScaffoldOrchestrator(github=github, registry=store)
        result = orchestrator.scaffold_repository(args.name, args.description, args.template)
    finally:
        github.close()

    print(f"Created: {result.repo.html_url}")
    print(f"Registered: {result.registry_entry.owner}/{result.registry_entry.repo_name}")
    for command in result.deploy_commands:
        print(f"deploy> {command}")
    for step in result.verify_steps:
        print(f"verify> {step}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
