"""
Parsers and converters used by the migration pipeline.

This subpackage exposes the pure review-post assembly from
:mod:`contentful_migrator.parsers.post_transformer` and the HTML to Markdown
conversion from :mod:`contentful_migrator.parsers.markdown`.
"""

from .markdown import contains_html, html_to_markdown
from .post_transformer import post_slug, transform_post, transform_posts

__all__ = ["contains_html", "html_to_markdown", "post_slug", "transform_post", "transform_posts"]
