"""
Creation of the sub-entries every review post links to.

For each source post three entries are created and published right away:
``seo`` (with the featured image when it resolves to an asset),
``productInfo`` (numbers and dates coerced from their export text) and
``scores``.  Their ids are checkpointed together under the post id once all
three exist.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, Mapping

from contentful_migrator.models import LinkedEntryIds, ResourceLink, SourcePost
from contentful_migrator.utils.checkpoints import Checkpoint
from contentful_migrator.utils.errors import report_error, report_ok
from contentful_migrator.utils.fields import convert_to_iso_date, parse_float, parse_int
from contentful_migrator.utils.logs import log_message

from .assets import find_asset_id
from .base import PhaseResult
from .contentful_api import ContentfulSession, RetryPolicy

SEO_CONTENT_TYPE = "seo"
PRODUCT_INFO_CONTENT_TYPE = "productInfo"
SCORES_CONTENT_TYPE = "scores"


def seo_fields(post: SourcePost, asset_map: Mapping[str, str]) -> Dict[str, Any]:
    featured_image_id = find_asset_id(asset_map, post.seo.featured_image)
    return {
        "title": post.seo.title,
        "og_title": post.seo.og_title,
        "description": post.seo.description,
        "featured_image": ResourceLink.asset(featured_image_id).to_payload() if featured_image_id else None,
        "link": post.seo.link,
    }


def product_info_fields(post: SourcePost) -> Dict[str, Any]:
    info = post.product_info
    return {
        "title": f"Product Info for {post.title}",
        "product_type": info.product_type,
        "brand": info.brand,
        "strain": info.strain,
        "price": info.price,
        "cost": parse_float(info.cost),
        "weight": parse_float(info.weight),
        "listed_thc_percentage": parse_float(info.listed_thc_percentage),
        "package_date": convert_to_iso_date(info.package_date),
        "purchase_date": convert_to_iso_date(info.purchase_date),
        "dispensary": info.dispensary,
    }


def scores_fields(post: SourcePost) -> Dict[str, Any]:
    scores = post.scores
    return {
        "title": f"Scores for {post.title}",
        "strength": parse_int(scores.strength),
        "strength_notes": scores.strength_notes,
        "taste": parse_int(scores.taste),
        "taste_notes": scores.taste_notes,
        "quality": parse_int(scores.quality),
        "quality_notes": scores.quality_notes,
        "overall_score": parse_int(scores.overall_score),
        "overall_notes": scores.overall_notes,
    }


def create_published_entry(
    session: ContentfulSession,
    content_type: str,
    fields: Dict[str, Any],
    write_policy: RetryPolicy,
) -> str:
    """Create an entry from plain ``fields``, publish it and return its id."""
    entry = write_policy.run(lambda: session.create_entry(content_type, session.localize_fields(fields)))
    published = write_policy.run(lambda: session.publish_entry(entry))
    return published["sys"]["id"]


def create_linked_entries(
    session: ContentfulSession,
    posts: Iterable[SourcePost],
    asset_map: Mapping[str, str],
    checkpoint: Checkpoint,
    *,
    write_policy: RetryPolicy,
) -> PhaseResult:
    """
    Create the ``seo``, ``productInfo`` and ``scores`` entries of every post
    not yet in ``checkpoint``.

    A failure abandons the remaining work of that post only; the next post
    is still processed.  Entries created before the failure are not
    checkpointed and stay orphaned in the space.

    :return: Counters for the phase.
    """
    result = PhaseResult(phase="linked_entries").start()
    for post in posts:
        if post.id in checkpoint:
            log_message(f"Skipping linked entries creation for post {post.id} (already in cache)", level="DEBUG")
            result.total_skipped += 1
            continue

        result.total_attempted += 1
        operation = f"create_{SEO_CONTENT_TYPE}"
        try:
            seo_id = create_published_entry(session, SEO_CONTENT_TYPE, seo_fields(post, asset_map), write_policy)
            operation = f"create_{PRODUCT_INFO_CONTENT_TYPE}"
            product_info_id = create_published_entry(
                session, PRODUCT_INFO_CONTENT_TYPE, product_info_fields(post), write_policy
            )
            operation = f"create_{SCORES_CONTENT_TYPE}"
            scores_id = create_published_entry(session, SCORES_CONTENT_TYPE, scores_fields(post), write_policy)
            ids = LinkedEntryIds(seo_id=seo_id, product_info_id=product_info_id, scores_id=scores_id)
            operation = "save_cache"
            checkpoint.record(post.id, ids.to_checkpoint())
        except Exception as e:
            log_message(f"Linked entries failed for post {post.id} during {operation}: {e}", level="ERROR")
            report_error("LINKED_ENTRIES", post, e)
            result.add_error(post.id, operation, e)
            continue

        log_message(f"Updated linked entries cache saved for post {post.id}")
        report_ok("LINKED_ENTRIES_CREATED", post, ids.to_checkpoint())
        result.total_succeeded += 1
    return result.finish()
