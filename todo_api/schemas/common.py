"""Shared schema configuration."""

from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Response schema rendered with camelCase keys (``createdAt``, ``listId``)."""

    model_config = ConfigDict(
        from_attributes=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    def to_json(self) -> dict[str, Any]:
        """JSON-compatible dict with camelCase keys."""
        return self.model_dump(mode="json", by_alias=True)
