"""
Error taxonomy for Cloudflare API calls.

Every failure the client reports is one ApiFailure of exactly one ErrorKind.
Only RATE_LIMITED failures carry a retry hint.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


PERMISSION_DENIED_MESSAGE = (
    "Permission denied. Please check your API token has the required "
    "permissions (Workers Scripts: Read and Edit)."
)
NOT_FOUND_MESSAGE = "Resource not found. Please check the script name and account ID."
RATE_LIMITED_MESSAGE = "Rate limit exceeded. Please wait before retrying."
UNKNOWN_API_ERROR = "Unknown API error"


class ErrorKind(Enum):
    """Closed set of failure kinds."""
    NOT_FOUND = "not_found"
    PERMISSION_DENIED = "permission_denied"
    RATE_LIMITED = "rate_limited"
    TRANSPORT = "transport"


@dataclass(frozen=True)
class ApiFailure:
    """A classified API failure. Messages are already sanitized."""
    kind: ErrorKind
    message: str
    status_code: Optional[int] = None
    errors: List[Dict[str, Any]] = field(default_factory=list)
    retry_after: Optional[int] = None

    @classmethod
    def not_found(cls) -> "ApiFailure":
        return cls(ErrorKind.NOT_FOUND, NOT_FOUND_MESSAGE, status_code=404)

    @classmethod
    def permission_denied(cls) -> "ApiFailure":
        return cls(ErrorKind.PERMISSION_DENIED, PERMISSION_DENIED_MESSAGE, status_code=403)

    @classmethod
    def rate_limited(cls, retry_after: Optional[int] = None) -> "ApiFailure":
        return cls(
            ErrorKind.RATE_LIMITED,
            RATE_LIMITED_MESSAGE,
            status_code=429,
            retry_after=retry_after,
        )

    @classmethod
    def transport(
        cls,
        message: str,
        status_code: Optional[int] = None,
        errors: Optional[List[Dict[str, Any]]] = None,
    ) -> "ApiFailure":
        return cls(ErrorKind.TRANSPORT, message, status_code=status_code, errors=list(errors or []))


class CloudflareAPIError(Exception):
    """Raised by the client for any failed call; wraps one ApiFailure."""

    def __init__(self, failure: ApiFailure):
        super().__init__(failure.message)
        self.failure = failure

    @property
    def kind(self) -> ErrorKind:
        return self.failure.kind

    @property
    def status_code(self) -> Optional[int]:
        return self.failure.status_code

    @property
    def retry_after(self) -> Optional[int]:
        return self.failure.retry_after

    @property
    def message(self) -> str:
        return self.failure.message
