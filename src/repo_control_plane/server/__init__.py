"""FastAPI server adapter for the repository control plane.

Design intent:
- Keep business logic in `repo_control_plane.control.*`
- Keep server-specific concerns (routing, CORS, HTTP error mapping) here
"""

from __future__ import annotations

__all__ = ["create_app"]

from repo_control_plane.server.app import create_app
