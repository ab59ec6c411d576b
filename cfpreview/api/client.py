"""
Cloudflare API client for Workers deployment and version management.
"""

import logging
from functools import partial
from typing import Any, Callable, Dict, List, Optional
from urllib.parse import quote

import requests

from ..config import Credentials
from .errors import UNKNOWN_API_ERROR, ApiFailure, CloudflareAPIError
from .models import Deployment, ResourceKind, Version, resource_from_dict
from .redact import sanitize

logger = logging.getLogger(__name__)

BASE_URL = "https://api.cloudflare.com/client/v4"


def _parse_retry_after(value: Optional[str]) -> Optional[int]:
    """Parse an integer-seconds Retry-After header; anything else is ignored."""
    if value is None:
        return None
    try:
        return int(value.strip())
    except ValueError:
        return None


class CloudflareClient:
    """
    Thin client over the Workers scripts API.

    Each public call issues exactly one HTTP request and raises
    CloudflareAPIError on any failure. No retries happen here.
    """

    def __init__(
        self,
        credentials: Credentials,
        session: Optional[requests.Session] = None,
        base_url: str = BASE_URL,
        timeout: float = 30,
    ):
        self._credentials = credentials
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({
            "Authorization": f"Bearer {credentials.api_token}",
            "Content-Type": "application/json",
        })

    @property
    def account_id(self) -> str:
        return self._credentials.account_id

    def _sanitize(self, message: str) -> str:
        return sanitize(message, secrets=(self._credentials.api_token,))

    def _script_path(self, kind: ResourceKind, script_name: str) -> str:
        return (
            f"/accounts/{quote(self.account_id, safe='')}"
            f"/workers/scripts/{quote(script_name, safe='')}/{kind.path}"
        )

    def _request(self, method: str, path: str) -> Any:
        """Make an authenticated request and unwrap the response envelope."""
        url = f"{self.base_url}{path}"
        logger.debug(f"{method} {path}")

        try:
            response = self.session.request(method, url, timeout=self.timeout)
        except requests.RequestException as e:
            raise CloudflareAPIError(
                ApiFailure.transport(self._sanitize(f"Request failed: {e}"))
            ) from e

        if response.status_code == 429:
            retry_after = _parse_retry_after(response.headers.get("Retry-After"))
            raise CloudflareAPIError(ApiFailure.rate_limited(retry_after))

        if response.status_code == 403:
            raise CloudflareAPIError(ApiFailure.permission_denied())

        if response.status_code == 404:
            raise CloudflareAPIError(ApiFailure.not_found())

        try:
            data = response.json()
        except ValueError:
            data = None

        if not isinstance(data, dict) or "success" not in data:
            raise CloudflareAPIError(ApiFailure.transport(
                self._sanitize(f"Failed to parse API response: {response.reason}"),
                status_code=response.status_code,
            ))

        if not data.get("success") or not 200 <= response.status_code < 300:
            errors = self._sanitize_errors(data.get("errors"))
            message = UNKNOWN_API_ERROR
            if errors and errors[0].get("message"):
                message = errors[0]["message"]
            elif data.get("success"):
                message = f"Unexpected HTTP status {response.status_code}: {response.reason}"
            raise CloudflareAPIError(ApiFailure.transport(
                self._sanitize(message),
                status_code=response.status_code,
                errors=errors,
            ))

        return data.get("result")

    def _sanitize_errors(self, errors: Any) -> List[Dict[str, Any]]:
        """Keep dict entries of an envelope's `errors`, with messages sanitized."""
        if not isinstance(errors, list):
            return []
        return [
            {**e, "message": self._sanitize(str(e.get("message") or ""))}
            for e in errors
            if isinstance(e, dict)
        ]

    def list_resources(self, kind: ResourceKind, script_name: str) -> List[Any]:
        """
        List deployments or versions of a Worker script.

        The API returns them newest first; position 0 is the active one.
        """
        result = self._request("GET", self._script_path(kind, script_name))
        items = result.get(kind.list_key) if isinstance(result, dict) else None
        if not isinstance(items, list):
            raise CloudflareAPIError(ApiFailure.transport(
                f"Unexpected API response: missing '{kind.list_key}' in result"
            ))
        try:
            return [resource_from_dict(kind, item) for item in items]
        except (ValueError, TypeError, AttributeError) as e:
            raise CloudflareAPIError(ApiFailure.transport(
                self._sanitize(f"Unexpected API response: {e}")
            )) from e

    def delete_resource(self, kind: ResourceKind, script_name: str, resource_id: str) -> None:
        """Delete one deployment or version."""
        path = f"{self._script_path(kind, script_name)}/{quote(resource_id, safe='')}"
        self._request("DELETE", path)

    def deleter(self, kind: ResourceKind, script_name: str) -> Callable[[str], None]:
        """Bind `delete_resource` to a kind and script for the batch engine."""
        return partial(self.delete_resource, kind, script_name)

    def list_deployments(self, script_name: str) -> List[Deployment]:
        return self.list_resources(ResourceKind.DEPLOYMENT, script_name)

    def delete_deployment(self, script_name: str, deployment_id: str) -> None:
        """Note: the active deployment (first in the list) cannot be deleted."""
        self.delete_resource(ResourceKind.DEPLOYMENT, script_name, deployment_id)

    def list_versions(self, script_name: str) -> List[Version]:
        return self.list_resources(ResourceKind.VERSION, script_name)

    def delete_version(self, script_name: str, version_id: str) -> None:
        """Note: the version referenced by the active deployment cannot be deleted."""
        self.delete_resource(ResourceKind.VERSION, script_name, version_id)

    def close(self) -> None:
        self.session.close()

    def __enter__(self) -> "CloudflareClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
