"""
Cloudflare API access: resource models, error taxonomy and the HTTP client.
"""

from .client import CloudflareClient, BASE_URL
from .errors import ApiFailure, CloudflareAPIError, ErrorKind
from .models import Deployment, DeploymentVersion, ResourceKind, Version
from .redact import sanitize

__all__ = [
    "CloudflareClient",
    "BASE_URL",
    "ApiFailure",
    "CloudflareAPIError",
    "ErrorKind",
    "Deployment",
    "DeploymentVersion",
    "ResourceKind",
    "Version",
    "sanitize",
]
