"""Poll business logic."""
from typing import List, Optional, Sequence

from anonymchat.core.constants import (
    ADMIN_POLL_AUTHOR,
    MAX_POLL_OPTIONS,
    MIN_POLL_OPTIONS,
    OPTION_ID_PREFIX,
    POLL_ID_PREFIX,
)
from anonymchat.core.logging_config import get_logger
from anonymchat.core.sanitization import sanitize_poll_option, sanitize_poll_question
from anonymchat.core.utils import generate_id, utc_now
from anonymchat.db.models import Poll, PollOption
from anonymchat.db.store import JsonFileStore, StoreKind
from anonymchat.services._records import find_record, parse_records, sort_by_timestamp

logger = get_logger(__name__)


def list_polls(store: JsonFileStore) -> List[Poll]:
    """All polls, newest first."""
    polls = parse_records(Poll, store.read(StoreKind.POLLS))
    return sort_by_timestamp(polls, newest_first=True)


def get_poll(store: JsonFileStore, poll_id: str) -> Optional[Poll]:
    record = find_record(store.read(StoreKind.POLLS), poll_id)
    return Poll.model_validate(record) if record else None


def create_poll(
    store: JsonFileStore,
    question: str,
    option_texts: Sequence[str],
    nickname: str = ADMIN_POLL_AUTHOR,
    ip_address: Optional[str] = None,
) -> Poll:
    """
    Create a new poll.

    Blank option texts are dropped before counting; between 2 and 10 options
    must remain.
    """
    question = sanitize_poll_question(question)
    texts = [text for text in (sanitize_poll_option(option) for option in option_texts) if text]

    if len(texts) < MIN_POLL_OPTIONS:
        raise ValueError(f"Poll must have at least {MIN_POLL_OPTIONS} options")
    if len(texts) > MAX_POLL_OPTIONS:
        raise ValueError(f"Poll can have at most {MAX_POLL_OPTIONS} options")

    poll = Poll(
        id=generate_id(POLL_ID_PREFIX),
        nickname=nickname,
        question=question,
        options=[PollOption(id=generate_id(OPTION_ID_PREFIX), text=text) for text in texts],
        timestamp=utc_now(),
        ip_address=ip_address,
    )

    with store.transaction(StoreKind.POLLS) as records:
        records.append(poll.to_record())

    logger.info("poll_created", poll_id=poll.id, options=len(texts))
    return poll


def vote_in_poll(store: JsonFileStore, poll_id: str, option_id: str) -> Optional[Poll]:
    """
    Count one vote for ``option_id``.

    The option tally and the poll total move together in one rewrite. There is
    no per-voter bookkeeping, so repeated votes all count.

    Returns:
        The updated poll, or None if the poll or option does not exist
    """
    with store.transaction(StoreKind.POLLS) as records:
        record = find_record(records, poll_id)
        if record is None:
            logger.warning("vote_poll_not_found", poll_id=poll_id)
            return None

        option = find_record(record.get("options") or [], option_id)
        if option is None:
            logger.warning("vote_option_not_found", poll_id=poll_id, option_id=option_id)
            return None

        option["votes"] = int(option.get("votes") or 0) + 1
        record["totalVotes"] = int(record.get("totalVotes") or 0) + 1

    return Poll.model_validate(record)


def delete_poll(store: JsonFileStore, poll_id: str) -> bool:
    """Delete a poll. Returns False if it does not exist."""
    with store.transaction(StoreKind.POLLS) as records:
        remaining = [record for record in records if record.get("id") != poll_id]
        if len(remaining) == len(records):
            return False
        records[:] = remaining

    logger.info("poll_deleted", poll_id=poll_id)
    return True
