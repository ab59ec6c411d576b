"""
cf-preview-cleaner - Safely delete Cloudflare Workers preview deployments and versions.

This package provides a CLI and a small library for listing the deployments
and versions of a Worker script and bulk-deleting the non-active ones while
respecting the Cloudflare API rate limits.
"""

__version__ = "1.0.0"
__author__ = "cf-preview-cleaner contributors"
