"""Domain model for indexable records.

The engine never owns the system of record; callers hand it a snapshot of a
contract, user, company, document or template and the engine stores a copy.
Pydantic validates snapshots at the boundary so malformed payloads fail
before they touch the inverted index.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


class DocumentType(str, Enum):
    """Closed set of record kinds the engine accepts."""

    CONTRACT = "contract"
    USER = "user"
    COMPANY = "company"
    DOCUMENT = "document"
    TEMPLATE = "template"


class DocumentStatus(str, Enum):
    """Lifecycle status of an indexed record."""

    ACTIVE = "active"
    INACTIVE = "inactive"
    ARCHIVED = "archived"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def ensure_aware(value: datetime) -> datetime:
    """Interpret naive datetimes as UTC so comparisons never mix kinds."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class Permissions(BaseModel):
    """Read/write principal lists carried alongside a record."""

    model_config = ConfigDict(frozen=True)

    read: list[str] = Field(default_factory=list)
    write: list[str] = Field(default_factory=list)


class SearchDocument(BaseModel):
    """A searchable snapshot of an application record.

    Field names are snake_case; the camelCase names used by the web client
    (``createdAt``, ``updatedAt``, ``createdBy``) are accepted on input and
    produced by ``model_dump(by_alias=True)``.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(min_length=1)
    type: DocumentType
    title: str = ""
    content: str = ""
    metadata: dict[str, Any] = Field(default_factory=dict)
    tags: list[str] = Field(default_factory=list)
    created_at: datetime = Field(
        default_factory=_utcnow,
        validation_alias=AliasChoices("created_at", "createdAt"),
        serialization_alias="createdAt",
    )
    updated_at: datetime = Field(
        default_factory=_utcnow,
        validation_alias=AliasChoices("updated_at", "updatedAt"),
        serialization_alias="updatedAt",
    )
    created_by: str = Field(
        default="",
        validation_alias=AliasChoices("created_by", "createdBy"),
        serialization_alias="createdBy",
    )
    status: DocumentStatus = DocumentStatus.ACTIVE
    permissions: Permissions = Field(default_factory=Permissions)

    @field_validator("created_at", "updated_at")
    @classmethod
    def _normalize_timezone(cls, value: datetime) -> datetime:
        return ensure_aware(value)

    @property
    def searchable_fields(self) -> tuple[str, str]:
        """Title and content, the text that feeds the global inverted index."""
        return (self.title, self.content)

    def field_values(self) -> dict[str, str]:
        """Return the per-field strings indexed into the field indices."""
        values = {
            "title": self.title,
            "content": self.content,
            "tags": " ".join(self.tags),
            "type": self.type.value,
            "status": self.status.value,
            "createdBy": self.created_by,
        }
        for key, value in self.metadata.items():
            values[f"metadata.{key}"] = stringify_metadata(value)
        return values


def stringify_metadata(value: Any) -> str:
    """Render a metadata value the way it is indexed."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple, set)):
        return " ".join(stringify_metadata(item) for item in value)
    return str(value)
