"""
Contentful migrators and helpers.

This subpackage provides the Contentful Management API session, the
rate-limit and version-conflict retry helpers, and one module per remote
migration phase: image asset resolution, linked sub-entry creation and
review post publishing.
"""

from .assets import collect_images, filename_key, find_asset_id, resolve_assets
from .base import PhaseResult
from .contentful_api import (
    ContentfulError,
    ContentfulSession,
    RateLimitExceeded,
    RetryPolicy,
    VersionMismatch,
    update_with_retries,
    with_retries,
)
from .linked_entries import create_linked_entries
from .review_posts import create_review_posts

__all__ = [
    "collect_images",
    "filename_key",
    "find_asset_id",
    "resolve_assets",
    "PhaseResult",
    "ContentfulError",
    "ContentfulSession",
    "RateLimitExceeded",
    "RetryPolicy",
    "VersionMismatch",
    "update_with_retries",
    "with_retries",
    "create_linked_entries",
    "create_review_posts",
]
