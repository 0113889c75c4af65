"""Shared model configuration."""

from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class Entity(BaseModel):
    """Base for persisted entities.

    Attributes are snake_case in Python and camelCase in the stored JSON.
    """

    model_config = {
        "frozen": True,
        "alias_generator": to_camel,
        "populate_by_name": True,
    }

    def to_record(self) -> dict:
        """Serialise to the JSON-ready dict written to the store."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
