"""
Assembly of ``reviewPost`` entries from source posts.

This step is a pure function of the source posts and the two id maps
produced by the earlier phases: it performs no remote calls, so the same
inputs always yield the same review posts.
"""

from __future__ import annotations

from typing import Any, Iterable, List, Mapping, Optional

from contentful_migrator.migrators.assets import find_asset_id
from contentful_migrator.models import LinkedEntryIds, ResourceLink, ReviewPost, SourcePost
from contentful_migrator.utils.fields import slugify_title


def post_slug(post: SourcePost) -> str:
    return post.slug or slugify_title(post.title)


def transform_post(
    post: SourcePost,
    asset_map: Mapping[str, str],
    linked_entries_map: Mapping[str, Any],
) -> Optional[ReviewPost]:
    """
    Build the review post for ``post``.

    Returns ``None`` when the post has no linked entries yet, since a review
    post may only reference sub-entries that already exist.  Photos whose
    image has no resolved asset are left out.
    """
    linked = linked_entries_map.get(post.id)
    if not linked:
        return None
    ids = LinkedEntryIds.model_validate(linked)

    photos: List[ResourceLink] = []
    for url in post.image_urls():
        asset_id = find_asset_id(asset_map, url)
        if asset_id:
            photos.append(ResourceLink.asset(asset_id))

    return ReviewPost(
        title=post.title,
        date=post.date,
        excerpt=post.excerpt,
        slug=post_slug(post),
        template_name=post.template_name,
        seo=ResourceLink.entry(ids.seo_id),
        product_info=ResourceLink.entry(ids.product_info_id),
        scores=ResourceLink.entry(ids.scores_id),
        short_review=post.review.short_review,
        long_review=post.review.long_review,
        photos=photos,
        previous_post=post.navigation.previous_post,
        next_post=post.navigation.next_post,
        source_id=post.id,
    )


def transform_posts(
    posts: Iterable[SourcePost],
    asset_map: Mapping[str, str],
    linked_entries_map: Mapping[str, Any],
) -> List[ReviewPost]:
    """Review posts for every post that has linked entries, in input order."""
    review_posts: List[ReviewPost] = []
    for post in posts:
        review_post = transform_post(post, asset_map, linked_entries_map)
        if review_post is not None:
            review_posts.append(review_post)
    return review_posts
