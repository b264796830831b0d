"""Read-time join of messages and polls with their authors' preferences."""
from typing import Any, Dict, List

from anonymchat.db.models import Message, Poll, UserPreference
from anonymchat.db.store import JsonFileStore
from anonymchat.schemas import AdminMessageDetail, AdminPollDetail, MessageDetail, PollDetail
from anonymchat.services import list_polls, list_top_level_messages, preference_lookup


def present_messages(
    messages: List[Message],
    preferences: Dict[str, UserPreference],
    admin: bool = False,
) -> List[MessageDetail]:
    schema = AdminMessageDetail if admin else MessageDetail
    return [schema.from_message(message, preferences.get(message.nickname)) for message in messages]


def present_polls(
    polls: List[Poll],
    preferences: Dict[str, UserPreference],
    admin: bool = False,
) -> List[PollDetail]:
    schema = AdminPollDetail if admin else PollDetail
    return [schema.from_poll(poll, preferences.get(poll.nickname)) for poll in polls]


def build_feed_snapshot(store: JsonFileStore) -> Dict[str, Any]:
    """JSON-ready public feed: top-level messages and polls, newest first."""
    preferences = preference_lookup(store)
    messages = present_messages(list_top_level_messages(store), preferences)
    polls = present_polls(list_polls(store), preferences)
    return {
        "messages": [message.model_dump(mode="json", by_alias=True) for message in messages],
        "polls": [poll.model_dump(mode="json", by_alias=True) for poll in polls],
    }
