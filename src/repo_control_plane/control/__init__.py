"""Repository control plane: templates, registry, scaffolding, environments, status."""

from repo_control_plane.control.commands import deploy_commands, verify_steps
from repo_control_plane.control.environments import (
    EnvironmentProvisioner,
    EnvironmentProvisionResult,
    sanitize_slug,
)
from repo_control_plane.control.registry import (
    RegistryEntry,
    RegistryStore,
    archive_registry_entry,
    fetch_registry,
    save_registry_entry,
)
from repo_control_plane.control.scaffold import ScaffoldOrchestrator, ScaffoldResult
from repo_control_plane.control.status import (
    DeploymentStatus,
    RepoSnapshot,
    RepoStatusMeta,
    RepoTier,
    infer_status,
)
from repo_control_plane.control.templates import (
    DEFAULT_TEMPLATE_ID,
    RepoTemplate,
    TemplateFile,
    is_known_template,
    list_templates,
    resolve_template,
)

__all__ = [
    "DEFAULT_TEMPLATE_ID",
    "DeploymentStatus",
    "EnvironmentProvisionResult",
    "EnvironmentProvisioner",
    "RegistryEntry",
    "RegistryStore",
    "RepoSnapshot",
    "RepoStatusMeta",
    "RepoTemplate",
    "RepoTier",
    "ScaffoldOrchestrator",
    "ScaffoldResult",
    "TemplateFile",
    "archive_registry_entry",
    "deploy_commands",
    "fetch_registry",
    "infer_status",
    "is_known_template",
    "list_templates",
    "resolve_template",
    "sanitize_slug",
    "save_registry_entry",
    "verify_steps",
]
