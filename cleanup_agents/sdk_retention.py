"""
Retention policy for SDK bundles: keep the newest N per platform.

Pure decision logic. Nothing here touches the filesystem, so the policy can
be exercised with hand-built candidates.
"""
import enum
from collections import defaultdict
from dataclasses import dataclass

from .sdk_discovery import SdkCandidate
from .sdk_version import VersionKey, parse_sdk_version


class Action(str, enum.Enum):
    KEEP = "keep"
    REMOVE = "remove"


@dataclass(frozen=True)
class RetentionDecision:
    candidate: SdkCandidate
    action: Action
    rank: int


def _version_of(candidate: SdkCandidate) -> VersionKey:
    if candidate.version is not None:
        return candidate.version
    return parse_sdk_version(candidate.raw_name)


def group_by_platform(candidates) -> dict:
    groups = defaultdict(list)
    for candidate in candidates:
        groups[candidate.platform].append(candidate)
    return dict(groups)


def rank_group(group) -> list:
    """Order one platform group newest first.

    Equal versions fall back to the name, then the path, so the ranking never
    depends on discovery order. Both sorts are stable.
    """
    ordered = sorted(group, key=lambda c: (c.raw_name, c.path))
    ordered.sort(key=_version_of, reverse=True)
    return ordered


def decide_retention(candidates, keep_count: int) -> list:
    """Mark the top `keep_count` SDKs of every platform KEEP, the rest REMOVE.

    Decisions come back grouped by platform (alphabetical) and in rank order
    within a group, which is also the order they should be executed and
    logged in.
    """
    if keep_count < 0:
        raise ValueError(f"keep_count must be >= 0, got {keep_count}")

    decisions = []
    groups = group_by_platform(candidates)
    for platform in sorted(groups):
        for rank, candidate in enumerate(rank_group(groups[platform]), start=1):
            action = Action.KEEP if rank <= keep_count else Action.REMOVE
            decisions.append(RetentionDecision(candidate=candidate, action=action, rank=rank))
    return decisions
