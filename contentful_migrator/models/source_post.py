from __future__ import annotations

from typing import Any, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Export values are loosely typed: numbers arrive as strings, numbers or blanks.
Loose = Optional[Union[str, int, float]]


class ExportModel(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)


class PhotoImage(ExportModel):
    url: Optional[str] = None
    title: Optional[str] = None
    filename: Optional[str] = None


class Photo(ExportModel):
    image: Optional[PhotoImage] = None


class Seo(ExportModel):
    title: Optional[str] = None
    og_title: Optional[str] = None
    description: Optional[str] = None
    featured_image: Optional[str] = None
    link: Optional[str] = None


class ProductInfo(ExportModel):
    product_type: Optional[str] = None
    brand: Optional[str] = None
    strain: Optional[str] = None
    price: Loose = None
    cost: Loose = None
    weight: Loose = None
    listed_thc_percentage: Loose = None
    package_date: Optional[str] = None
    purchase_date: Optional[str] = None
    dispensary: Optional[str] = None


class Scores(ExportModel):
    strength: Loose = None
    strength_notes: Optional[str] = None
    taste: Loose = None
    taste_notes: Optional[str] = None
    quality: Loose = None
    quality_notes: Optional[str] = None
    overall_score: Loose = None
    overall_notes: Optional[str] = None


class Review(ExportModel):
    short_review: Optional[str] = None
    long_review: Optional[str] = None


class Navigation(ExportModel):
    previous_post: Any = None
    next_post: Any = None


class SourcePost(ExportModel):
    """One post of the static export, read-only for the whole run."""

    model_config = ConfigDict(extra="allow", populate_by_name=True, frozen=True)

    id: str
    title: str = ""
    date: Optional[str] = None
    excerpt: Optional[str] = None
    slug: Optional[str] = None
    template_name: Optional[str] = None
    photos: List[Photo] = Field(default_factory=list)
    seo: Seo = Field(default_factory=Seo)
    product_info: ProductInfo = Field(default_factory=ProductInfo)
    scores: Scores = Field(default_factory=Scores)
    review: Review = Field(default_factory=Review)
    navigation: Navigation = Field(default_factory=Navigation)

    @field_validator("id", mode="before")
    @classmethod
    def _id_as_text(cls, v: Any) -> Any:
        # Checkpoint keys are JSON object keys, so numeric ids are stored as text.
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(v)
        return v

    @field_validator("title", mode="before")
    @classmethod
    def _title_as_text(cls, v: Any) -> Any:
        if v is None:
            return ""
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(v)
        return v

    @field_validator("photos", mode="before")
    @classmethod
    def _photos_as_list(cls, v: Any) -> Any:
        return [] if v is None else v

    @field_validator("seo", "product_info", "scores", "review", "navigation", mode="before")
    @classmethod
    def _empty_section(cls, v: Any) -> Any:
        return {} if v is None else v

    def image_urls(self) -> List[str]:
        """Photo image URLs in export order, skipping photos without one."""
        return [photo.image.url for photo in self.photos if photo.image and photo.image.url]
