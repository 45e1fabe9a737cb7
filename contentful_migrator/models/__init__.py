"""
Data models for the migration.

:mod:`.source_post` describes the records of the static export and
:mod:`.review_post` the entries assembled from them.
"""

from .review_post import LinkedEntryIds, ResourceLink, ReviewPost
from .source_post import Navigation, Photo, PhotoImage, ProductInfo, Review, Scores, Seo, SourcePost

__all__ = [
    "LinkedEntryIds",
    "ResourceLink",
    "ReviewPost",
    "Navigation",
    "Photo",
    "PhotoImage",
    "ProductInfo",
    "Review",
    "Scores",
    "Seo",
    "SourcePost",
]
