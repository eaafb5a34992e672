"""GitHub hosting-platform integration."""

from repo_control_plane.github.client import (
    Branch,
    CommitResult,
    CreatedRepository,
    HostingClient,
    NotFound,
    RepoContext,
    decode_content,
    encode_content,
)

__all__ = [
    "Branch",
    "CommitResult",
    "CreatedRepository",
    "HostingClient",
    "NotFound",
    "RepoContext",
    "decode_content",
    "encode_content",
]
