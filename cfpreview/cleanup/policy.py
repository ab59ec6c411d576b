"""
Selection and safety policy.

The API lists resources newest first and position 0 is the one currently
serving traffic. That entry is never eligible for deletion. List order is
trusted as returned; no separate active flag is consulted.
"""

import logging
from typing import Iterable, List, Optional, Sequence, TypeVar

logger = logging.getLogger(__name__)

R = TypeVar("R")


class NothingToDelete(Exception):
    """Raised when a listing has no deletable entries."""

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


def active_id(resources: Sequence) -> Optional[str]:
    """Return the id of the active (first) resource, if any."""
    return resources[0].id if resources else None


def deletable(resources: Sequence[R]) -> List[R]:
    """All resources except the active one."""
    return list(resources[1:])


def select_all(resources: Sequence[R]) -> List[R]:
    """'Delete all' mode: every entry at position >= 1."""
    return deletable(resources)


def select_ids(resources: Sequence[R], ids: Iterable[str]) -> List[R]:
    """
    Narrow the eligible resources to the caller-chosen ids.

    Returns them in listing order with duplicates collapsed. The active id
    and ids not present in the listing are dropped with a warning.
    """
    wanted = list(dict.fromkeys(ids))
    current = active_id(resources)
    eligible = {r.id: r for r in deletable(resources)}

    for resource_id in wanted:
        if resource_id == current:
            logger.warning(f"Refusing to select active resource {resource_id}")
        elif resource_id not in eligible:
            logger.warning(f"Ignoring unknown resource id {resource_id}")

    chosen = set(wanted)
    return [r for r in deletable(resources) if r.id in chosen]


def require_deletable(resources: Sequence[R], noun: str = "resource") -> List[R]:
    """
    Return the deletable resources or raise NothingToDelete.

    Args:
        resources: Ordered listing, active first
        noun: Singular display noun, e.g. "deployment"
    """
    if not resources:
        raise NothingToDelete(f"No {noun}s found.")
    if len(resources) == 1:
        raise NothingToDelete(
            f"Only the active {noun} exists. Cannot delete the active {noun}."
        )
    return deletable(resources)
