from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


# ---------- Base ----------
class CmsModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class Slug(CmsModel):
    current: str


class AssetReference(CmsModel):
    ref: str = Field(alias="_ref")


class ImageRef(CmsModel):
    asset: AssetReference
    alt: str | None = None


# ---------- Documents ----------
ProductCategory = Literal[
    "saas",
    "e-book",
    "template",
    "course",
    "tool",
    "boilerplate",
    "ecommerce",
    "blog",
    "other",
]


class Product(CmsModel):
    id: str = Field(alias="_id")
    title: str
    slug: Slug
    price: float = Field(ge=0)
    description: str

    category: ProductCategory | None = None
    image: ImageRef | None = None
    preview_images: list[ImageRef] = Field(default_factory=list)
    preview_file_url: str | None = None
    preview_file_ref: str | None = None
    preview_file_mime: str | None = None
    features: list[str] = Field(default_factory=list)
    tech_stack: list[str] = Field(default_factory=list)
    checkout_url: str | None = None
    youtube_url: str | None = None

    # Filled from verified reviews, not stored in the CMS
    avg_rating: float | None = None
    review_count: int = 0


class Review(CmsModel):
    id: str = Field(alias="_id")
    product_id: str
    rating: int = Field(ge=1, le=5)
    verified: bool = False
    author_name: str | None = None
    comment: str | None = None


class ProductRating(BaseModel):
    avg_rating: float | None = None
    review_count: int = 0
