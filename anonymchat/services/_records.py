"""Helpers shared by services that work on raw store records."""
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Type, TypeVar

from pydantic import ValidationError

from anonymchat.core.logging_config import get_logger
from anonymchat.core.utils import to_utc

logger = get_logger(__name__)

T = TypeVar("T")
Record = Dict[str, Any]


def find_record(records: List[Record], record_id: str) -> Optional[Record]:
    return next((record for record in records if record.get("id") == record_id), None)


def parse_records(model: Type[T], records: List[Record]) -> List[T]:
    """Validate raw records into models, skipping (and logging) malformed entries."""
    parsed = []
    for record in records:
        try:
            parsed.append(model.model_validate(record))
        except ValidationError as exc:
            logger.warning("record_skipped", model=model.__name__, id=record.get("id"),
                           errors=exc.error_count())
    return parsed


def sort_by_timestamp(items: List[T], newest_first: bool = True,
                      key: Callable[[T], datetime] = lambda item: item.timestamp) -> List[T]:
    """
    Sort by timestamp; equal timestamps keep store order (oldest write first).

    Store position breaks ties so items created within the same millisecond
    still come out in creation order (or reverse creation order).
    """
    indexed = sorted(enumerate(items), key=lambda pair: (to_utc(key(pair[1])), pair[0]),
                     reverse=newest_first)
    return [item for _, item in indexed]
