from __future__ import annotations

from typing import Any, Dict, Iterable, Mapping, Optional

from contentful_migrator.migrators.assets import find_asset_id
from contentful_migrator.migrators.base import PhaseResult
from contentful_migrator.migrators.contentful_api import ContentfulSession, RetryPolicy, update_with_retries
from contentful_migrator.models import ResourceLink, SourcePost
from contentful_migrator.utils.errors import report_error, report_ok
from contentful_migrator.utils.logs import log_message


def update_seo_featured_images(
    session: ContentfulSession,
    posts: Iterable[SourcePost],
    linked_entries_map: Mapping[str, Any],
    asset_map: Mapping[str, str],
    *,
    max_attempts: int = 3,
    policy: Optional[RetryPolicy] = None,
) -> PhaseResult:
    """Link each post's SEO entry to the asset of its featured image.

    Used to repair ``seo`` entries created before their featured image had
    been resolved.  Posts without a linked ``seo`` entry, without a featured
    image or whose image matches no asset are logged and skipped.

    Args:
        session: The Contentful session.
        posts: Source posts from the export.
        linked_entries_map: Contents of the linked entries checkpoint.
        asset_map: Contents of the asset checkpoint.
        max_attempts: Fetch-modify-update cycles allowed per entry on
            version conflicts.
        policy: Optional rate-limit policy for every API call.

    Returns:
        PhaseResult: Counters for the pass.
    """
    result = PhaseResult(phase="seo_featured_images").start()
    for post in posts:
        linked = linked_entries_map.get(post.id) or {}
        seo_entry_id = linked.get("seoId")
        if not seo_entry_id:
            log_message(f"No SEO entry recorded for post {post.id}", level="WARNING")
            result.total_skipped += 1
            continue
        if not post.seo.featured_image:
            log_message(f"No featured image URL for post {post.id}", level="WARNING")
            result.total_skipped += 1
            continue
        asset_id = find_asset_id(asset_map, post.seo.featured_image)
        if not asset_id:
            log_message(f"No asset found for featured image URL: {post.seo.featured_image}", level="WARNING")
            result.total_skipped += 1
            continue

        result.total_attempted += 1
        link = ResourceLink.asset(asset_id).to_payload()

        def set_featured_image(entry: Dict[str, Any]) -> None:
            entry.setdefault("fields", {})["featured_image"] = session.localize(link)

        try:
            update_with_retries(session, seo_entry_id, set_featured_image, max_attempts=max_attempts, policy=policy)
        except Exception as e:
            log_message(f"Error updating SEO entry {seo_entry_id}: {e}", level="ERROR")
            report_error("SEO_IMAGE_UPDATE", post, e)
            result.add_error(seo_entry_id, "update_seo_entry", e)
            continue
        log_message(f"Updated SEO entry {seo_entry_id} with featured image {asset_id}")
        report_ok("SEO_IMAGE_UPDATED", post, {"seo_id": seo_entry_id, "asset_id": asset_id})
        result.total_succeeded += 1
    return result.finish()
