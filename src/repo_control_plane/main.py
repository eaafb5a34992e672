"""CLI entrypoint for the repository control plane."""

from __future__ import annotations

import argparse
import json
import logging
import sys

from pydantic import ValidationError

from repo_control_plane import __version__
from repo_control_plane.config import ControlPlaneSettings
from repo_control_plane.control.environments import EnvironmentProvisioner
from repo_control_plane.control.registry import RegistryStore
from repo_control_plane.control.scaffold import ScaffoldOrchestrator
from repo_control_plane.control.status import RepoSnapshot, infer_status
from repo_control_plane.control.templates import is_known_template, list_templates
from repo_control_plane.github.client import HostingClient, NotFound, RepoContext
from repo_control_plane.logging import configure_logging

logger = logging.getLogger(__name__)


class _UsageError(Exception):
    pass


def _add_repo_argument(parser: argparse.ArgumentParser, *, help_text: str) -> None:
    parser.add_argument(
        "--repo",
        "--repository",
        dest="repository",
        default="",
        help=help_text,
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="control-plane",
        description="Scaffold, register and provision repositories on GitHub",
    )
    parser.add_argument("--version", action="version", version=f"repo-control-plane {__version__}")

    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("templates", help="List the built-in repository templates")

    scaffold = subparsers.add_parser(
        "scaffold", help="Create a repository from a template and register it"
    )
    scaffold.add_argument("--name", required=True, help="Name of the repository to create")
    scaffold.add_argument("--description", default="", help="Repository description")
    scaffold.add_argument(
        "--template",
        default=None,
        help="Template id (defaults to CONTROL_PLANE_DEFAULT_TEMPLATE)",
    )
    scaffold.add_argument(
        "--public", action="store_true", help="Create a public repository (default: private)"
    )
    scaffold.add_argument(
        "--org", default=None, help="Create the repository in this organization"
    )
    _add_repo_argument(
        scaffold,
        help_text="Control repository holding the registry (defaults to CONTROL_PLANE_REPO)",
    )

    registry = subparsers.add_parser("registry", help="Inspect or modify the unit registry")
    registry_sub = registry.add_subparsers(dest="registry_command", required=True)
    registry_list = registry_sub.add_parser("list", help="List registered units")
    _add_repo_argument(
        registry_list,
        help_text="Control repository holding the registry (defaults to CONTROL_PLANE_REPO)",
    )
    registry_archive = registry_sub.add_parser("archive", help="Archive a registered unit")
    registry_archive.add_argument("--owner", required=True, help="Owner of the registered unit")
    registry_archive.add_argument("--name", required=True, help="Repository name of the unit")
    _add_repo_argument(
        registry_archive,
        help_text="Control repository holding the registry (defaults to CONTROL_PLANE_REPO)",
    )

    create_env = subparsers.add_parser(
        "create-env", help="Provision an env/<slug> branch with scaffold configuration"
    )
    _add_repo_argument(
        create_env,
        help_text="Repository to branch (defaults to CONTROL_PLANE_REPO)",
    )
    create_env.add_argument("--slug", required=True, help="Environment name, e.g. 'staging'")
    create_env.add_argument("--description", default="", help="Environment description")
    create_env.add_argument(
        "--base-branch", default="main", help="Branch the environment is cut from"
    )
    create_env.add_argument(
        "--issue-number",
        type=int,
        default=None,
        help="Post the provisioning notification as a comment on this issue",
    )

    status = subparsers.add_parser("status", help="Infer governance status of a repository")
    _add_repo_argument(
        status,
        help_text="Repository to inspect (defaults to CONTROL_PLANE_REPO)",
    )

    return parser


def _resolve_context(value: str, settings: ControlPlaneSettings) -> RepoContext:
    repository = value.strip() or settings.control_repo.strip()
    if not repository:
        raise _UsageError("No repository given; pass --repo or set CONTROL_PLANE_REPO")
    return RepoContext.parse(repository)


def _print_templates() -> int:
    for template in list_templates():
        print(
            f"{template.id} v{template.version} [{template.deploy_target}] {template.description}"
        )
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == "templates":
        return _print_templates()

    try:
        settings = ControlPlaneSettings()
    except ValidationError as e:
        # Logging isn't configured yet.
        print("Configuration error (check your .env):", file=sys.stderr)
        print(e, file=sys.stderr)
        return 2

    configure_logging(settings.log_level)

    github = HostingClient(token=settings.github_token, base_url=settings.github_base_url)
    try:
        if args.command == "scaffold":
            ctx = _resolve_context(args.repository, settings)
            template_id = args.template or settings.default_template
            if not is_known_template(template_id):
                print(
                    f"Unknown template {template_id!r}; using the default template",
                    file=sys.stderr,
                )
            store = RegistryStore(github, ctx, variable_name=settings.registry_variable)
            orchestrator = ScaffoldOrchestrator(
                github=github, registry=store, organization=args.org
            )
            result = orchestrator.scaffold_repository(
                args.name, args.description, template_id, private=not args.public
            )
            print(f"Created {result.repo.html_url} from {result.template.id}")
            for path in result.files:
                print(f"  + {path}")
            print("Deploy:")
            for command in result.deploy_commands:
                print(f"  {command}")
            print("Verify:")
            for step in result.verify_steps:
                print(f"  {step}")
            return 0

        if args.command == "registry":
            ctx = _resolve_context(args.repository, settings)
            store = RegistryStore(github, ctx, variable_name=settings.registry_variable)
            if args.registry_command == "list":
                entries = store.fetch()
                if not entries:
                    print("No registered units")
                for entry in entries:
                    print(
                        f"{entry.owner}/{entry.repo_name} [{entry.status}] "
                        f"{entry.template_name}@{entry.template_version} -> {entry.deploy_target}"
                    )
                return 0

            archived = store.archive_entry(args.owner, args.name)
            print(f"Archived {archived.owner}/{archived.repo_name}")
            return 0

        if args.command == "create-env":
            ctx = _resolve_context(args.repository, settings)
            provisioner = EnvironmentProvisioner(github=github)
            env = provisioner.create_environment(
                ctx, args.slug, args.description, args.base_branch
            )
            print(f"Environment created on {env.branch}")
            for path in env.files:
                print(f"  + {path}")
            if args.issue_number is not None:
                github.comment_on_issue(
                    owner=ctx.owner,
                    repo=ctx.repo,
                    issue_number=args.issue_number,
                    body=env.issue_comment,
                )
                print(f"Posted notification on issue #{args.issue_number}")
            return 0

        if args.command == "status":
            ctx = _resolve_context(args.repository, settings)
            snapshot = RepoSnapshot.from_api(
                github.get_repository(owner=ctx.owner, repo=ctx.repo)
            )
            meta = infer_status(snapshot, recency_days=settings.deploy_recency_days)
            print(json.dumps(meta.to_json(), indent=2))
            return 0

        logger.error("Unknown command", extra={"command": args.command})
        return 2

    except (_UsageError, ValueError) as e:
        print(str(e), file=sys.stderr)
        return 2

    except NotFound as e:
        logger.warning(str(e))
        print(str(e), file=sys.stderr)
        return 4

    except Exception:
        logger.exception("Command failed")
        return 1

    finally:
        github.close()


if __name__ == "__main__":
    raise SystemExit(main())
