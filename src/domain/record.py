"""Base record model and shared value types."""

from datetime import UTC, datetime
from typing import Any
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field, NonNegativeInt, field_validator
from pydantic.alias_generators import to_camel


def utc_now() -> datetime:
    """Return the current time as an aware UTC datetime."""
    return datetime.now(UTC)


class Record(BaseModel):
    """Persisted record with a generated identifier and auto-managed timestamps.

    Attributes use snake_case; storage columns use the camelCase alias unless a
    field declares its own alias. Records are immutable: changes go through
    EntitySchema.update(), which returns a new record with a fresh updatedAt.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="forbid",
    )

    id: UUID = Field(default_factory=uuid4, description="Unique record ID (UUID v4)")
    created_at: datetime = Field(default_factory=utc_now, description="Creation timestamp")
    updated_at: datetime = Field(
        default_factory=lambda data: data.get("created_at") or utc_now(),
        description="Last update timestamp (equals created_at until the first update)",
    )

    @field_validator("created_at", "updated_at")
    @classmethod
    def validate_utc(cls, v: datetime) -> datetime:
        """Store timestamps as aware UTC; naive values are taken to be UTC."""
        if v.tzinfo is None:
            return v.replace(tzinfo=UTC)
        return v.astimezone(UTC)

    def to_storage(self) -> dict[str, Any]:
        """Dump the record keyed by storage column names."""
        return self.model_dump(by_alias=True)


class ImageAsset(BaseModel):
    """Uploaded image metadata stored as a structured JSON value."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    url: str = Field(..., description="Public URL of the uploaded image")
    filename: str = Field(..., description="Storage key of the uploaded file")
    original_name: str | None = Field(default=None, description="File name as uploaded by the user")
    size: NonNegativeInt | None = Field(default=None, description="File size in bytes")
    mimetype: str | None = Field(default=None, description="MIME type (e.g., 'image/png')")
