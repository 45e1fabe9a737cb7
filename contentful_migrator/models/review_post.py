from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class ResourceLink(BaseModel):
    """A reference to a remote asset or entry, resolved by id only."""

    model_config = ConfigDict(frozen=True)

    link_type: Literal["Asset", "Entry"]
    id: str

    @classmethod
    def asset(cls, asset_id: str) -> "ResourceLink":
        return cls(link_type="Asset", id=asset_id)

    @classmethod
    def entry(cls, entry_id: str) -> "ResourceLink":
        return cls(link_type="Entry", id=entry_id)

    def to_payload(self) -> Dict[str, Any]:
        return {"sys": {"type": "Link", "linkType": self.link_type, "id": self.id}}


class LinkedEntryIds(BaseModel):
    """Ids of the three sub-entries created for one source post."""

    model_config = ConfigDict(populate_by_name=True)

    seo_id: str = Field(..., alias="seoId")
    product_info_id: str = Field(..., alias="productInfoId")
    scores_id: str = Field(..., alias="scoresId")

    def to_checkpoint(self) -> Dict[str, str]:
        return self.model_dump(by_alias=True)


class ReviewPost(BaseModel):
    """The assembled ``reviewPost`` entry, ready to be created."""

    model_config = ConfigDict(frozen=True)

    title: str
    slug: str
    date: Optional[str] = None
    excerpt: Optional[str] = None
    template_name: Optional[str] = None
    seo: ResourceLink
    product_info: ResourceLink
    scores: ResourceLink
    short_review: Optional[str] = None
    long_review: Optional[str] = None
    photos: List[ResourceLink] = Field(default_factory=list)
    previous_post: Any = None
    next_post: Any = None
    source_id: Optional[str] = Field(None, exclude=True)

    def to_contentful_fields(self, locale: str) -> Dict[str, Dict[str, Any]]:
        """Serialize to CMA entry fields, every value in the ``locale`` slot."""
        values: Dict[str, Any] = {
            "title": self.title,
            "date": self.date,
            "excerpt": self.excerpt,
            "slug": self.slug,
            "template_name": self.template_name,
            "seo": self.seo.to_payload(),
            "product_info": self.product_info.to_payload(),
            "short_review": self.short_review,
            "long_review": self.long_review,
            "photos": [photo.to_payload() for photo in self.photos],
            "scores": self.scores.to_payload(),
            "previous_post": self.previous_post,
            "next_post": self.next_post,
        }
        return {name: {locale: value} for name, value in values.items()}
