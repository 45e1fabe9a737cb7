"""
Image asset resolution.

The export never recorded Contentful asset ids, so images are matched to
assets by file name: the final path segment of the source URL is compared
with the file name stored on the asset.  Two source URLs that end in the same
file name therefore resolve to the same asset.  Bindings are kept in the
``assets`` checkpoint, keyed by source URL.
"""

from __future__ import annotations

import mimetypes
import posixpath
import time
from dataclasses import dataclass
from typing import Callable, Iterable, List, Mapping, Optional
from urllib.parse import urlparse

from contentful_migrator.models import SourcePost
from contentful_migrator.utils.checkpoints import Checkpoint
from contentful_migrator.utils.errors import report_error, report_ok
from contentful_migrator.utils.logs import log_message

from .base import PhaseResult
from .contentful_api import ContentfulSession, RetryPolicy


@dataclass(frozen=True)
class ImageDescriptor:
    url: str
    title: Optional[str] = None
    filename: Optional[str] = None


def filename_key(url: str) -> str:
    """Final path segment of ``url``, ignoring query string and fragment."""
    return posixpath.basename(urlparse(url).path)


def find_asset_id(asset_map: Mapping[str, str], url: Optional[str]) -> Optional[str]:
    """Return the asset bound to any URL sharing ``url``'s file name."""
    if not url:
        return None
    key = filename_key(url)
    if not key:
        return None
    for bound_url, asset_id in asset_map.items():
        if filename_key(bound_url) == key:
            return asset_id
    return None


def collect_images(posts: Iterable[SourcePost]) -> List[ImageDescriptor]:
    """Photo images and SEO featured images of ``posts``, first occurrence of each URL."""
    seen = set()
    images: List[ImageDescriptor] = []
    for post in posts:
        candidates = [
            ImageDescriptor(url=photo.image.url, title=photo.image.title, filename=photo.image.filename)
            for photo in post.photos
            if photo.image and photo.image.url
        ]
        if post.seo.featured_image:
            candidates.append(ImageDescriptor(url=post.seo.featured_image, title=post.seo.title))
        for image in candidates:
            if image.url not in seen:
                seen.add(image.url)
                images.append(image)
    return images


def _upload(
    session: ContentfulSession,
    image: ImageDescriptor,
    key: str,
    write_policy: RetryPolicy,
    sleep_fn: Callable[[float], None],
) -> str:
    file_name = image.filename or key
    content_type = mimetypes.guess_type(file_name)[0] or "image/jpeg"
    asset = write_policy.run(lambda: session.create_asset(
        title=image.title or "Untitled",
        file_name=file_name,
        upload_url=image.url,
        content_type=content_type,
    ))
    published = session.process_and_publish_asset(asset, policy=write_policy, sleep_fn=sleep_fn)
    return published["sys"]["id"]


def resolve_assets(
    session: ContentfulSession,
    images: Iterable[ImageDescriptor],
    checkpoint: Checkpoint,
    *,
    lookup_policy: RetryPolicy,
    write_policy: RetryPolicy,
    lookup_delay: float = 0.1,
    upload_delay: float = 1.0,
    create_missing: bool = False,
    sleep_fn: Callable[[float], None] = time.sleep,
) -> PhaseResult:
    """
    Bind every image not yet in ``checkpoint`` to a Contentful asset id.

    For each image the file name is derived from its URL.  A binding already
    held for another URL with the same file name is reused without a remote
    call; otherwise the assets are queried by file name.  When nothing
    matches and ``create_missing`` is set, the image is uploaded, processed
    and published.  Every new binding is flushed to the checkpoint at once.

    Misses and failures are logged and skipped; the next run retries them.

    :return: Counters for the phase.
    """
    result = PhaseResult(phase="assets").start()
    for image in images:
        if image.url in checkpoint:
            result.total_skipped += 1
            continue

        result.total_attempted += 1
        key = filename_key(image.url)
        if not key:
            log_message(f"Image URL {image.url} has no file name, skipping", level="WARNING")
            result.total_failed += 1
            continue

        asset_id = find_asset_id(checkpoint.data, image.url)
        if asset_id:
            log_message(f"Reusing asset {asset_id} bound to file name {key} for {image.url}", level="DEBUG")
        else:
            try:
                items = lookup_policy.run(lambda: session.lookup_assets_by_filename(key))
                if items:
                    asset_id = items[0]["sys"]["id"]
                elif create_missing:
                    log_message(f"Uploading {image.url} as a new asset")
                    asset_id = _upload(session, image, key, write_policy, sleep_fn)
                    sleep_fn(upload_delay)
                else:
                    report_error("ASSET_NOT_FOUND", {"id": image.url})
            except Exception as e:
                log_message(f"Error retrieving asset for URL {image.url}: {e}", level="ERROR")
                report_error("ASSET_LOOKUP", {"id": image.url}, e)
                result.add_error(image.url, "resolve_asset", e)
                continue
            finally:
                sleep_fn(lookup_delay)

        if not asset_id:
            result.total_failed += 1
            continue

        try:
            checkpoint.record(image.url, asset_id)
        except OSError as e:
            log_message(f"Could not save asset cache for URL {image.url}: {e}", level="ERROR")
            report_error("CHECKPOINT_WRITE", {"id": image.url}, e)
            result.add_error(image.url, "save_cache", e)
            continue
        report_ok("ASSET_RESOLVED", {"id": image.url}, {"asset_id": asset_id})
        result.total_succeeded += 1
    return result.finish()
