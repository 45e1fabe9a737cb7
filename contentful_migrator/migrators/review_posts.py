from __future__ import annotations

import time
from typing import Callable, Iterable

from contentful_migrator.models import ReviewPost
from contentful_migrator.utils.checkpoints import Checkpoint
from contentful_migrator.utils.errors import report_error, report_ok
from contentful_migrator.utils.logs import log_message

from .base import PhaseResult
from .contentful_api import ContentfulSession, RetryPolicy

REVIEW_POST_CONTENT_TYPE = "reviewPost"


def create_review_posts(
    session: ContentfulSession,
    review_posts: Iterable[ReviewPost],
    checkpoint: Checkpoint,
    *,
    write_policy: RetryPolicy,
    post_delay: float = 2.0,
    sleep_fn: Callable[[float], None] = time.sleep,
) -> PhaseResult:
    """
    Create and publish every review post whose slug is not yet checkpointed.

    After each attempted post the run pauses for ``post_delay`` seconds,
    independently of any rate-limit backoff.  Posts already in the
    checkpoint are skipped without a pause.

    :return: Counters for the phase.
    """
    result = PhaseResult(phase="blog_posts").start()
    for post in review_posts:
        if post.slug in checkpoint:
            log_message(f"Skipping blog post creation for {post.title} (already in cache)", level="DEBUG")
            result.total_skipped += 1
            continue

        result.total_attempted += 1
        try:
            fields = post.to_contentful_fields(session.locale)
            entry = write_policy.run(lambda: session.create_entry(REVIEW_POST_CONTENT_TYPE, fields))
            published = write_policy.run(lambda: session.publish_entry(entry))
            entry_id = published["sys"]["id"]
            checkpoint.record(post.slug, entry_id)
            log_message(f"Created and published blog post: {post.title}")
            report_ok("REVIEW_POST_PUBLISHED", post, {"entry_id": entry_id})
            result.total_succeeded += 1
        except Exception as e:
            log_message(f"Failed to create blog post: {post.title}: {e}", level="ERROR")
            report_error("REVIEW_POST", post, e)
            result.add_error(post.slug, "create_review_post", e)
        finally:
            sleep_fn(post_delay)
    return result.finish()
