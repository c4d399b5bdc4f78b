"""Base model shared by every API-facing DTO.

The Relevant API speaks camelCase JSON; models keep snake_case attributes
and accept/emit the camelCase names through aliases.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class APIModel(BaseModel):
    """Pydantic base for API payloads.

    - Validates from camelCase keys or snake_case field names
    - Ignores unknown keys (the backend adds fields between revisions)
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    def to_payload(self) -> dict[str, Any]:
        """Dump to the API's JSON shape (camelCase, no unset optionals)."""
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")
