"""
Basic tests for the Cloudflare API client.
"""

import pytest
import requests
from unittest.mock import Mock

from cfpreview.api import (
    CloudflareAPIError,
    CloudflareClient,
    Deployment,
    ErrorKind,
    ResourceKind,
    Version,
    sanitize,
)
from cfpreview.api.errors import NOT_FOUND_MESSAGE, PERMISSION_DENIED_MESSAGE
from cfpreview.config import Credentials

TOKEN = "tok-9f8e7d6c5b4a"
INVALID_JSON = object()


def make_response(status=200, body=None, headers=None, reason="OK"):
    response = Mock()
    response.status_code = status
    response.headers = headers or {}
    response.reason = reason
    if body is INVALID_JSON:
        response.json.side_effect = ValueError("Expecting value")
    else:
        response.json.return_value = body
    return response


def envelope(result=None, success=True, errors=None):
    return {"success": success, "result": result, "errors": errors or [], "messages": []}


def make_client(*responses):
    session = Mock()
    session.headers = {}
    session.request.side_effect = list(responses)
    client = CloudflareClient(Credentials(account_id="acct-1", api_token=TOKEN), session=session)
    return client, session


class TestListing:
    """Test listing deployments and versions."""

    def test_list_deployments(self):
        """Deployments are parsed in API order."""
        client, session = make_client(make_response(body=envelope({
            "deployments": [
                {"id": "dep-active", "created_on": "2024-05-01T10:00:00Z", "author_email": "a@example.com",
                 "source": "wrangler", "strategy": "percentage",
                 "versions": [{"version_id": "ver-1", "percentage": 100}]},
                {"id": "dep-old", "created_on": "2024-04-01T10:00:00Z", "author_email": "b@example.com"},
            ]
        })))

        deployments = client.list_deployments("my-worker")

        assert [d.id for d in deployments] == ["dep-active", "dep-old"]
        assert isinstance(deployments[0], Deployment)
        assert deployments[0].versions[0].version_id == "ver-1"
        assert deployments[1].author == "b@example.com"

        method, url = session.request.call_args[0]
        assert method == "GET"
        assert url == "https://api.cloudflare.com/client/v4/accounts/acct-1/workers/scripts/my-worker/deployments"
        assert session.headers["Authorization"] == f"Bearer {TOKEN}"

    def test_list_versions(self):
        """Versions come from result.items and expose metadata."""
        client, session = make_client(make_response(body=envelope({
            "items": [
                {"id": "ver-2", "number": 2, "metadata": {"author_email": "a@example.com",
                                                          "created_on": "2024-05-01T10:00:00Z"},
                 "annotations": {"workers/tag": "v2"}},
                {"id": "ver-1", "number": 1, "metadata": {}},
            ]
        })))

        versions = client.list_versions("my-worker")

        assert [v.id for v in versions] == ["ver-2", "ver-1"]
        assert isinstance(versions[0], Version)
        assert versions[0].label == "#2 [v2]"
        assert versions[1].author == "unknown"
        assert session.request.call_args[0][1].endswith("/workers/scripts/my-worker/versions")

    def test_list_not_found(self):
        """404 on listing raises NOT_FOUND."""
        client, _ = make_client(make_response(status=404))

        with pytest.raises(CloudflareAPIError) as exc_info:
            client.list_deployments("missing")

        assert exc_info.value.kind is ErrorKind.NOT_FOUND
        assert exc_info.value.message == NOT_FOUND_MESSAGE

    def test_list_permission_denied(self):
        """403 on listing raises PERMISSION_DENIED."""
        client, _ = make_client(make_response(status=403))

        with pytest.raises(CloudflareAPIError) as exc_info:
            client.list_versions("my-worker")

        assert exc_info.value.kind is ErrorKind.PERMISSION_DENIED
        assert exc_info.value.message == PERMISSION_DENIED_MESSAGE

    def test_list_missing_items_key(self):
        """A result without the expected list is a transport error."""
        client, _ = make_client(make_response(body=envelope({"something": []})))

        with pytest.raises(CloudflareAPIError) as exc_info:
            client.list_resources(ResourceKind.DEPLOYMENT, "my-worker")

        assert exc_info.value.kind is ErrorKind.TRANSPORT

    def test_list_item_without_id(self):
        """Items lacking an id are rejected."""
        client, _ = make_client(make_response(body=envelope({"items": [{"number": 3}]})))

        with pytest.raises(CloudflareAPIError) as exc_info:
            client.list_versions("my-worker")

        assert exc_info.value.kind is ErrorKind.TRANSPORT


class TestDelete:
    """Test classification of delete responses."""

    def test_delete_success(self):
        client, session = make_client(make_response(body=envelope(None)))

        client.delete_deployment("my-worker", "dep-1")

        method, url = session.request.call_args[0]
        assert method == "DELETE"
        assert url.endswith("/workers/scripts/my-worker/deployments/dep-1")
        assert session.request.call_count == 1

    def test_rate_limited_with_retry_after(self):
        client, _ = make_client(make_response(status=429, headers={"Retry-After": "5"}))

        with pytest.raises(CloudflareAPIError) as exc_info:
            client.delete_version("my-worker", "ver-1")

        assert exc_info.value.kind is ErrorKind.RATE_LIMITED
        assert exc_info.value.retry_after == 5

    def test_rate_limited_without_retry_after(self):
        client, _ = make_client(make_response(status=429))

        with pytest.raises(CloudflareAPIError) as exc_info:
            client.delete_version("my-worker", "ver-1")

        assert exc_info.value.kind is ErrorKind.RATE_LIMITED
        assert exc_info.value.retry_after is None

    def test_rate_limited_with_invalid_retry_after(self):
        client, _ = make_client(make_response(status=429, headers={"Retry-After": "soon"}))

        with pytest.raises(CloudflareAPIError) as exc_info:
            client.delete_version("my-worker", "ver-1")

        assert exc_info.value.retry_after is None

    def test_no_retry_inside_client(self):
        """The client issues exactly one request even when rate limited."""
        client, session = make_client(make_response(status=429), make_response(body=envelope(None)))

        with pytest.raises(CloudflareAPIError):
            client.delete_deployment("my-worker", "dep-1")

        assert session.request.call_count == 1

    def test_delete_permission_denied(self):
        client, _ = make_client(make_response(status=403))

        with pytest.raises(CloudflareAPIError) as exc_info:
            client.delete_deployment("my-worker", "dep-1")

        assert exc_info.value.kind is ErrorKind.PERMISSION_DENIED
        assert exc_info.value.retry_after is None

    def test_delete_not_found(self):
        client, _ = make_client(make_response(status=404))

        with pytest.raises(CloudflareAPIError) as exc_info:
            client.delete_deployment("my-worker", "dep-1")

        assert exc_info.value.kind is ErrorKind.NOT_FOUND

    def test_unparseable_body(self):
        client, _ = make_client(make_response(status=502, body=INVALID_JSON, reason="Bad Gateway"))

        with pytest.raises(CloudflareAPIError) as exc_info:
            client.delete_deployment("my-worker", "dep-1")

        assert exc_info.value.kind is ErrorKind.TRANSPORT
        assert exc_info.value.message == "Failed to parse API response: Bad Gateway"
        assert exc_info.value.status_code == 502

    def test_body_is_not_an_envelope(self):
        client, _ = make_client(make_response(body=["not", "an", "envelope"]))

        with pytest.raises(CloudflareAPIError) as exc_info:
            client.delete_deployment("my-worker", "dep-1")

        assert exc_info.value.kind is ErrorKind.TRANSPORT

    def test_api_reported_failure_surfaces_first_error(self):
        client, _ = make_client(make_response(status=400, body=envelope(
            success=False,
            errors=[{"code": 10007, "message": "deployment is active"}, {"code": 1, "message": "other"}],
        )))

        with pytest.raises(CloudflareAPIError) as exc_info:
            client.delete_deployment("my-worker", "dep-1")

        assert exc_info.value.kind is ErrorKind.TRANSPORT
        assert exc_info.value.message == "deployment is active"
        assert exc_info.value.failure.errors[0]["code"] == 10007

    def test_api_reported_failure_without_errors(self):
        client, _ = make_client(make_response(body=envelope(success=False)))

        with pytest.raises(CloudflareAPIError) as exc_info:
            client.delete_deployment("my-worker", "dep-1")

        assert exc_info.value.message == "Unknown API error"

    def test_non_2xx_success_envelope_is_transport(self):
        """A success envelope on an error status is still a failure."""
        client, _ = make_client(make_response(status=500, reason="Internal Server Error",
                                              body=envelope({"deployments": []})))

        with pytest.raises(CloudflareAPIError) as exc_info:
            client.list_deployments("my-worker")

        assert exc_info.value.kind is ErrorKind.TRANSPORT
        assert exc_info.value.status_code == 500
        assert "500" in exc_info.value.message

    def test_non_2xx_surfaces_first_error(self):
        client, _ = make_client(make_response(status=502, body=envelope(
            success=True, errors=[{"code": 1, "message": "upstream unavailable"}],
        )))

        with pytest.raises(CloudflareAPIError) as exc_info:
            client.delete_version("my-worker", "ver-1")

        assert exc_info.value.kind is ErrorKind.TRANSPORT
        assert exc_info.value.message == "upstream unavailable"

    def test_connection_error_is_transport(self):
        client, session = make_client()
        session.request.side_effect = requests.ConnectionError("connection reset")

        with pytest.raises(CloudflareAPIError) as exc_info:
            client.delete_deployment("my-worker", "dep-1")

        assert exc_info.value.kind is ErrorKind.TRANSPORT
        assert "connection reset" in exc_info.value.message

    def test_deleter_binds_kind_and_script(self):
        client, session = make_client(make_response(body=envelope(None)))

        delete = client.deleter(ResourceKind.VERSION, "my-worker")
        delete("ver-9")

        assert session.request.call_args[0][1].endswith("/workers/scripts/my-worker/versions/ver-9")


class TestRedaction:
    """Credentials never appear in surfaced messages."""

    def test_sanitize_bearer(self):
        cleaned = sanitize("headers: {Authorization: Bearer abc.def-123}")
        assert "abc.def-123" not in cleaned
        assert "Bearer [REDACTED]" in cleaned

    def test_sanitize_is_case_insensitive(self):
        assert sanitize("bearer secretvalue") == "Bearer [REDACTED]"

    def test_sanitize_known_secret(self):
        cleaned = sanitize(f"token {TOKEN} rejected", secrets=[TOKEN])
        assert TOKEN not in cleaned
        assert "[REDACTED]" in cleaned

    def test_api_error_message_is_redacted(self):
        client, _ = make_client(make_response(status=400, body=envelope(
            success=False,
            errors=[{"code": 9109, "message": f"Invalid request header Authorization: Bearer {TOKEN}"}],
        )))

        with pytest.raises(CloudflareAPIError) as exc_info:
            client.delete_deployment("my-worker", "dep-1")

        assert TOKEN not in exc_info.value.message
        assert TOKEN not in str(exc_info.value)
        assert "[REDACTED]" in exc_info.value.message
        assert exc_info.value.failure.errors[0]["code"] == 9109
        assert TOKEN not in exc_info.value.failure.errors[0]["message"]
        assert TOKEN not in repr(exc_info.value.failure)

    def test_transport_error_message_is_redacted(self):
        client, session = make_client()
        session.request.side_effect = requests.ConnectionError(f"failed sending {TOKEN}")

        with pytest.raises(CloudflareAPIError) as exc_info:
            client.delete_deployment("my-worker", "dep-1")

        assert TOKEN not in exc_info.value.message
        assert "[REDACTED]" in exc_info.value.message
