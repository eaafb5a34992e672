"""Deploy and verify command lists for a registered unit."""

from __future__ import annotations

from repo_control_plane.control.registry import RegistryEntry


def deploy_commands(entry: RegistryEntry) -> list[str]:
    target = entry.deploy_target.strip().lower()
    if target == "vercel":
        return ["vercel --prod"]
    if target == "docker":
        return [
            f"docker build -t {entry.repo_name} .",
            f"docker run -p 3000:3000 {entry.repo_name}",
        ]
    return [f"# Deploy manually to {entry.deploy_target}"]


def verify_steps(entry: RegistryEntry) -> list[str]:
    """Clone, enter, install and build; the same four steps for every target."""

    return [
        f"git clone https://github.com/{entry.owner}/{entry.repo_name}.git",
        f"cd {entry.repo_name}",
        "npm install",
        "npm run build",
    ]
