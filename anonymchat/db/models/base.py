"""Base class for persisted entities."""
from datetime import datetime
from typing import Annotated, Any, Dict

from pydantic import BaseModel, ConfigDict, PlainSerializer
from pydantic.alias_generators import to_camel

from anonymchat.core.utils import format_timestamp

# Written as e.g. 2024-06-10T08:00:00.123Z in the store and in API payloads
Timestamp = Annotated[datetime, PlainSerializer(format_timestamp, return_type=str, when_used="json")]


class StoredModel(BaseModel):
    """Entity stored as a camelCase JSON object."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )

    def to_record(self) -> Dict[str, Any]:
        """Serialize for the JSON store (camelCase keys, unset optionals omitted)."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
