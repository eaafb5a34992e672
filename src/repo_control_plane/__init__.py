"""Repository Control Plane.

Orchestration over a GitHub-hosted workspace:
- scaffold new repositories from versioned templates
- keep a registry of provisioned units in a repository variable
- provision `env/<slug>` branches with scaffold configuration
- infer governance status (tier, deployment stage) from repo attributes
"""

__version__ = "0.1.0"

from repo_control_plane.config import ControlPlaneSettings

__all__ = ["__version__", "ControlPlaneSettings"]
