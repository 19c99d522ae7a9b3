"""Product collection domain model."""

from pydantic import Field

from src.domain.record import ImageAsset, Record


class Collection(Record):
    """Product collection record.

    Catalogue columns keep their snake_case storage names.
    """

    name: str = Field(..., description="Collection name")
    image: ImageAsset | None = Field(default=None, description="Collection image metadata")
    description: str | None = Field(default=None, description="Collection description")
    seo_title: str | None = Field(default=None, alias="seo_title", description="Title for search engines")
    seo_description: str | None = Field(
        default=None,
        alias="seo_description",
        description="Description for search engines",
    )
    is_active: bool = Field(default=True, alias="is_active", description="Whether the collection is listed")
