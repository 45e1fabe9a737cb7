"""
Extractors for the static post export.

This subpackage reads ``exported_posts.json`` into validated
:class:`~contentful_migrator.models.SourcePost` records so the rest of the
pipeline works with typed, consistently shaped posts.
"""

from .export_reader import extract_posts

__all__ = ["extract_posts"]
