"""Governance status inference.

A repository's tier and deployment stage are never stored; they are derived
from the raw repository attributes every time, so the same snapshot always
yields the same status.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from enum import Enum
from typing import Any

DEFAULT_DEPLOY_RECENCY_DAYS = 90
CORE_STAR_THRESHOLD = 5
CORE_FORK_THRESHOLD = 2


class RepoTier(str, Enum):
    CORE = "CORE"
    PILOT = "PILOT"
    DRAFT = "DRAFT"
    ARCHIVED = "ARCHIVED"
    EXPERIMENTAL = "EXPERIMENTAL"


class DeploymentStatus(str, Enum):
    PRODUCTION = "PRODUCTION"
    STAGING = "STAGING"
    LOCAL = "LOCAL"
    NONE = "NONE"


# First match wins, in order.
_TIER_TOPICS: tuple[tuple[frozenset[str], RepoTier], ...] = (
    (frozenset({"archived"}), RepoTier.ARCHIVED),
    (frozenset({"core", "production"}), RepoTier.CORE),
    (frozenset({"pilot", "beta"}), RepoTier.PILOT),
    (frozenset({"experimental", "spike"}), RepoTier.EXPERIMENTAL),
)

_DEPLOYMENT_TOPICS: tuple[tuple[frozenset[str], DeploymentStatus], ...] = (
    (frozenset({"production", "deployed"}), DeploymentStatus.PRODUCTION),
    (frozenset({"staging", "preview"}), DeploymentStatus.STAGING),
    (frozenset({"local", "dev"}), DeploymentStatus.LOCAL),
)


@dataclass(frozen=True, slots=True)
class RepoSnapshot:
    """The raw repository attributes status inference reads."""

    full_name: str = ""
    topics: tuple[str, ...] = ()
    archived: bool = False
    stargazers_count: int = 0
    forks_count: int = 0
    open_issues_count: int = 0
    pushed_at: datetime | None = None

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> RepoSnapshot:
        """Build a snapshot from GitHub repository JSON.

        Missing or malformed fields fall back to their defaults.
        """

        raw_topics = data.get("topics")
        topics = (
            tuple(t for t in raw_topics if isinstance(t, str))
            if isinstance(raw_topics, list)
            else ()
        )
        full_name = data.get("full_name")
        return cls(
            full_name=full_name if isinstance(full_name, str) else "",
            topics=topics,
            archived=data.get("archived") is True,
            stargazers_count=_as_int(data.get("stargazers_count")),
            forks_count=_as_int(data.get("forks_count")),
            open_issues_count=_as_int(data.get("open_issues_count")),
            pushed_at=_parse_timestamp(data.get("pushed_at")),
        )


@dataclass(frozen=True, slots=True)
class RepoStatusMeta:
    tier: RepoTier
    deployment_status: DeploymentStatus
    last_deploy_at: datetime | None
    open_pr_count: int
    open_issue_count: int

    def to_json(self) -> dict[str, object]:
        return {
            "tier": self.tier.value,
            "deploymentStatus": self.deployment_status.value,
            "lastDeployAt": self.last_deploy_at.isoformat() if self.last_deploy_at else None,
            "openPRCount": self.open_pr_count,
            "openIssueCount": self.open_issue_count,
        }


def _as_int(value: object) -> int:
    if isinstance(value, bool):
        return 0
    return value if isinstance(value, int) else 0


def _as_utc(value: datetime | None) -> datetime | None:
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def _parse_timestamp(value: object) -> datetime | None:
    if not isinstance(value, str) or not value.strip():
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    return _as_utc(parsed)


def infer_tier(repo: RepoSnapshot) -> RepoTier:
    topics = {t.strip().lower() for t in repo.topics}
    if repo.archived:
        return RepoTier.ARCHIVED
    for names, tier in _TIER_TOPICS:
        if topics & names:
            return tier
    if repo.stargazers_count >= CORE_STAR_THRESHOLD or repo.forks_count >= CORE_FORK_THRESHOLD:
        return RepoTier.CORE
    return RepoTier.DRAFT


def infer_deployment_status(repo: RepoSnapshot, tier: RepoTier) -> DeploymentStatus:
    topics = {t.strip().lower() for t in repo.topics}
    for names, status in _DEPLOYMENT_TOPICS:
        if topics & names:
            return status
    if tier is RepoTier.CORE:
        return DeploymentStatus.PRODUCTION
    return DeploymentStatus.NONE


def infer_status(
    repo: RepoSnapshot,
    *,
    now: datetime | None = None,
    recency_days: int = DEFAULT_DEPLOY_RECENCY_DAYS,
) -> RepoStatusMeta:
    """Derive governance status from a repository snapshot.

    Total over its input: every snapshot yields exactly one tier and one
    deployment status. The engine has no pull request data, so
    `open_pr_count` is always 0.
    """

    tier = infer_tier(repo)
    deployment = infer_deployment_status(repo, tier)

    last_deploy_at: datetime | None = None
    pushed_at = _as_utc(repo.pushed_at)
    if deployment is not DeploymentStatus.NONE and pushed_at is not None:
        current = _as_utc(now) or datetime.now(tz=UTC)
        if current - pushed_at < timedelta(days=recency_days):
            last_deploy_at = pushed_at

    return RepoStatusMeta(
        tier=tier,
        deployment_status=deployment,
        last_deploy_at=last_deploy_at,
        open_pr_count=0,
        open_issue_count=repo.open_issues_count,
    )
