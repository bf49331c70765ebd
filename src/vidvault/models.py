"""Domain models for vidvault."""

import secrets
import string
import time
from datetime import datetime, timezone

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

DEFAULT_DESCRIPTION = "No description provided."
IMPORTED_DESCRIPTION = "Video imported from uploads folder"
UNTITLED_TITLE = "Untitled Video"

_BASE36 = string.digits + string.ascii_lowercase
_LOCATION_KEYS = ("storedLocation", "storedPath", "stored_location")


def random_token(length: int) -> str:
    """Random lowercase base36 string."""
    return "".join(secrets.choice(_BASE36) for _ in range(length))


def new_video_id() -> str:
    """Generate a record id: epoch milliseconds plus a random suffix."""
    return f"{time.time_ns() // 1_000_000}-{random_token(7)}"


class VideoRecord(BaseModel):
    """A catalogued video and the location of its bytes.

    Serialized with camelCase keys (``fileName``, ``storedLocation``,
    ``uploadedAt``) so the catalog document keeps its on-disk shape.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str = Field(default_factory=new_video_id)
    title: str
    description: str = DEFAULT_DESCRIPTION
    url: str = ""
    file_name: str
    # Older catalogs stored this field as "storedPath"
    stored_location: str = Field(
        validation_alias=AliasChoices(*_LOCATION_KEYS),
    )
    uploaded_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @model_validator(mode="before")
    @classmethod
    def _default_location_to_url(cls, data):
        # Records written by the remote backend may carry only the blob URL
        if isinstance(data, dict) and not any(k in data for k in _LOCATION_KEYS):
            if data.get("url"):
                data = {**data, "storedLocation": data["url"]}
        return data

    def to_document(self) -> dict:
        """JSON-ready dict in the persisted catalog shape."""
        return self.model_dump(mode="json", by_alias=True)

    def summary(self) -> dict:
        """Public projection handed to clients."""
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "url": self.url,
        }


class VideoPatch(BaseModel):
    """Partial update of a record's editable fields.

    Only fields that are present (not None) override the base record.
    """

    title: str | None = None
    description: str | None = None

    @property
    def is_empty(self) -> bool:
        return self.title is None and self.description is None

    def apply(self, record: VideoRecord) -> VideoRecord:
        """Return a copy of ``record`` with the present fields replaced."""
        changes = self.model_dump(exclude_none=True)
        return record.model_copy(update=changes)
