"""
Batch deletion engine.

Deletes identifiers strictly one at a time, pausing between requests and
retrying once when the API reports a rate limit. Per-identifier failures
are collected in the report and never abort the batch.
"""

import logging
import time
from typing import Callable, Iterable, List, Optional, Sequence

from ..api.client import CloudflareClient
from ..api.errors import ApiFailure, CloudflareAPIError, ErrorKind
from ..api.models import ResourceKind
from ..config import DEFAULT_REQUEST_DELAY, DEFAULT_RETRY_AFTER, Settings
from .models import BatchReport, DeletionFailure
from .policy import active_id

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int, str], None]


def _error_code(failure: ApiFailure) -> Optional[int]:
    """First error code from the API envelope, if any."""
    if failure.errors:
        code = failure.errors[0].get("code")
        if isinstance(code, int):
            return code
    return None


class BatchDeleter:
    """
    Drives a `delete(id)` callable over a list of identifiers.

    `delete` must raise CloudflareAPIError on failure; any other exception
    is treated as a bug and propagates.
    """

    def __init__(
        self,
        delete: Callable[[str], None],
        *,
        request_delay: float = DEFAULT_REQUEST_DELAY,
        default_retry_after: int = DEFAULT_RETRY_AFTER,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.delete = delete
        self.request_delay = request_delay
        self.default_retry_after = default_retry_after
        self.sleep = sleep

    @classmethod
    def from_settings(cls, delete: Callable[[str], None], settings: Settings, **kwargs) -> "BatchDeleter":
        return cls(
            delete,
            request_delay=settings.request_delay,
            default_retry_after=settings.default_retry_after,
            **kwargs,
        )

    def _attempt(self, resource_id: str) -> Optional[ApiFailure]:
        try:
            self.delete(resource_id)
        except CloudflareAPIError as e:
            return e.failure
        return None

    def _retry_wait(self, failure: ApiFailure) -> int:
        if failure.retry_after and failure.retry_after > 0:
            return failure.retry_after
        return self.default_retry_after

    def run(
        self,
        ids: Iterable[str],
        *,
        protected: Iterable[str] = (),
        on_progress: Optional[ProgressCallback] = None,
    ) -> BatchReport:
        """
        Delete every identifier in `ids`, in order.

        Args:
            ids: Identifiers to delete; duplicates are dropped
            protected: Identifiers that must never be deleted (the active resource)
            on_progress: Called as (position, total, id) after each success

        Returns:
            BatchReport partitioning the identifiers into succeeded and failed
        """
        report = BatchReport()
        refused = set(protected)

        queue: List[str] = []
        for resource_id in dict.fromkeys(ids):
            if resource_id in refused:
                logger.warning(f"Refusing to delete active resource {resource_id}")
                report.skipped.append(resource_id)
            else:
                queue.append(resource_id)

        total = len(queue)
        for position, resource_id in enumerate(queue, start=1):
            failure = self._attempt(resource_id)

            if failure is not None and failure.kind is ErrorKind.RATE_LIMITED:
                wait = self._retry_wait(failure)
                logger.warning(f"Rate limited deleting {resource_id}; retrying in {wait}s")
                self.sleep(wait)
                failure = self._attempt(resource_id)

            if failure is None:
                report.succeeded.append(resource_id)
                logger.debug(f"Deleted {resource_id} ({position}/{total})")
                if on_progress:
                    on_progress(position, total, resource_id)
            else:
                report.failed.append(DeletionFailure(
                    id=resource_id, error=failure.message, code=_error_code(failure)
                ))
                logger.info(f"Failed to delete {resource_id}: {failure.message}")

            if position < total:
                self.sleep(self.request_delay)

        return report


def delete_resources(
    client: CloudflareClient,
    kind: ResourceKind,
    script_name: str,
    resources: Sequence,
    ids: Iterable[str],
    *,
    settings: Optional[Settings] = None,
    on_progress: Optional[ProgressCallback] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> BatchReport:
    """
    Delete the chosen resources of one kind from a Worker script.

    `resources` is the ordered listing the ids were chosen from; its first
    entry is protected even if it appears in `ids`.
    """
    deleter = BatchDeleter.from_settings(
        client.deleter(kind, script_name),
        settings or Settings(),
        sleep=sleep,
    )
    current = active_id(resources)
    protected = [current] if current else []
    return deleter.run(ids, protected=protected, on_progress=on_progress)
