"""
Data models for batch deletion results.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class DeletionFailure:
    """An identifier whose deletion failed, with the (sanitized) reason."""
    id: str
    error: str
    code: Optional[int] = None  # first Cloudflare error code, when the API sent one


@dataclass
class BatchReport:
    """
    Outcome of one batch run.

    Every attempted identifier appears exactly once, either in `succeeded`
    (completion order) or in `failed` (input order). `skipped` holds
    identifiers that were refused before any attempt.
    """
    succeeded: List[str] = field(default_factory=list)
    failed: List[DeletionFailure] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed

    @property
    def attempted(self) -> int:
        return len(self.succeeded) + len(self.failed)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "succeeded": list(self.succeeded),
            "failed": [{"id": f.id, "error": f.error, "code": f.code} for f in self.failed],
            "skipped": list(self.skipped),
        }
