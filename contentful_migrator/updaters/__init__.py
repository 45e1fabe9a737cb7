"""
Maintenance passes over an already migrated space.

These run separately from the main migration: linking SEO entries to their
featured images, converting score notes to Markdown and clearing every
entry of an environment before a fresh import.
"""

from .cleanup import delete_all_entries
from .notes_markdown import convert_score_notes
from .seo_images import update_seo_featured_images

__all__ = ["delete_all_entries", "convert_score_notes", "update_seo_featured_images"]
