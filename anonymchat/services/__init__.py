from .maintenance import reconcile_counters
from .message import (
    build_attachment,
    create_message,
    delete_message,
    get_message,
    increment_reposts,
    list_all_messages,
    list_replies,
    list_top_level_messages,
)
from .poll import create_poll, delete_poll, get_poll, list_polls, vote_in_poll
from .user_preference import (
    UNSET,
    get_user_preference,
    list_known_nicknames,
    list_user_preferences,
    preference_lookup,
    set_background_gif,
    upsert_user_preference,
)

__all__ = [
    # maintenance
    "reconcile_counters",
    # messages
    "build_attachment",
    "create_message",
    "delete_message",
    "get_message",
    "increment_reposts",
    "list_all_messages",
    "list_replies",
    "list_top_level_messages",
    # polls
    "create_poll",
    "delete_poll",
    "get_poll",
    "list_polls",
    "vote_in_poll",
    # user preferences
    "UNSET",
    "get_user_preference",
    "list_known_nicknames",
    "list_user_preferences",
    "preference_lookup",
    "set_background_gif",
    "upsert_user_preference",
]
