"""
Selection policy and the batch deletion engine.
"""

from .batch import BatchDeleter, delete_resources
from .models import BatchReport, DeletionFailure
from .policy import (
    NothingToDelete,
    active_id,
    deletable,
    require_deletable,
    select_all,
    select_ids,
)

__all__ = [
    "BatchDeleter",
    "delete_resources",
    "BatchReport",
    "DeletionFailure",
    "NothingToDelete",
    "active_id",
    "deletable",
    "require_deletable",
    "select_all",
    "select_ids",
]
