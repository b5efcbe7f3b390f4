"""
Base schema classes with common fields and configurations.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

__all__ = [
    "BaseSchema",
    "BaseUpdateSchema",
]


class BaseSchema(BaseModel):
    """
    Base schema with common Pydantic configuration.

    Field names are snake_case in Python and camelCase in stored documents
    and JSON responses; both spellings are accepted on input.
    """

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
        alias_generator=to_camel,
        use_enum_values=False,
        str_strip_whitespace=True,
        validate_assignment=True,
    )

    def to_document(self) -> dict:
        """Serialize to the camelCase JSON-compatible form stored in documents."""
        return self.model_dump(mode="json", by_alias=True)


class BaseUpdateSchema(BaseSchema):
    """
    Base schema for partial updates.

    Subclasses declare every field Optional; ``changes()`` returns only the
    fields the caller actually supplied.
    """

    def changes(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_unset=True)
