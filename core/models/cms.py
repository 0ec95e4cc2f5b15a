"""Raw Webflow CMS shapes.

These models mirror the JSON returned by the Webflow Data API v2 closely
enough for schema discovery and normalization. Wire names are camelCase;
unknown keys are ignored so API additions never break parsing.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class FieldType(str, Enum):
    """Webflow CMS field types the engine knows about.

    Raw fields keep their type as a plain string, so types outside this enum
    are still accepted.
    """
    DATE_TIME = "DateTime"
    PLAIN_TEXT = "PlainText"
    RICH_TEXT = "RichText"
    REFERENCE = "Reference"
    MULTI_REFERENCE = "MultiReference"
    OPTION = "Option"
    SWITCH = "Switch"
    NUMBER = "Number"
    LINK = "Link"
    IMAGE = "Image"


REFERENCE_TYPES = frozenset({FieldType.REFERENCE.value, FieldType.MULTI_REFERENCE.value})


class CmsBase(BaseModel):
    """Base model for raw CMS payloads."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class RawCollection(CmsBase):
    """A CMS collection as listed for a site."""
    id: str
    display_name: str = Field(default="", alias="displayName")
    singular_name: Optional[str] = Field(default=None, alias="singularName")
    slug: Optional[str] = None

    @field_validator("display_name", mode="before")
    @classmethod
    def _none_to_empty(cls, value):
        return value or ""


class FieldValidations(CmsBase):
    """Validation metadata of a schema field (only the reference target matters)."""
    collection_id: Optional[str] = Field(default=None, alias="collectionId")


class RawField(CmsBase):
    """One schema field of a collection."""
    slug: str = ""
    type: str = ""
    display_name: Optional[str] = Field(default=None, alias="displayName")
    is_required: bool = Field(default=False, alias="isRequired")
    validations: Optional[FieldValidations] = None

    @field_validator("slug", "type", mode="before")
    @classmethod
    def _none_to_empty(cls, value):
        return value or ""

    @property
    def referenced_collection_id(self) -> Optional[str]:
        """Collection a Reference/MultiReference field points at, if any."""
        return self.validations.collection_id if self.validations else None


class CollectionSchema(CmsBase):
    """Body of the "get collection" response: the collection plus its fields."""
    id: Optional[str] = None
    display_name: Optional[str] = Field(default=None, alias="displayName")
    fields: List[RawField] = Field(default_factory=list)

    @field_validator("fields", mode="before")
    @classmethod
    def _none_to_list(cls, value):
        return value or []


class RawItem(CmsBase):
    """A single CMS item with its slug → value field data."""
    id: str
    is_archived: bool = Field(default=False, alias="isArchived")
    is_draft: bool = Field(default=False, alias="isDraft")
    field_data: Dict[str, Any] = Field(default_factory=dict, alias="fieldData")

    @field_validator("is_archived", "is_draft", mode="before")
    @classmethod
    def _none_to_false(cls, value):
        return bool(value)

    @field_validator("field_data", mode="before")
    @classmethod
    def _none_to_dict(cls, value):
        return value or {}
