"""Pydantic schemas for request/response validation."""
from anonymchat.schemas.auth import AdminLoginRequest, NicknameRequest
from anonymchat.schemas.common import APIModel, ErrorResponse, SuccessResponse
from anonymchat.schemas.maintenance import ImportantInfo, ReconcileReport
from anonymchat.schemas.message import AdminMessageDetail, MessageDetail
from anonymchat.schemas.poll import (
    AdminPollDetail,
    PollCreate,
    PollDetail,
    PollOptionDetail,
    VoteRequest,
)
from anonymchat.schemas.user_preference import KnownUser, UserPreferenceDetail, UserPreferenceUpdate

__all__ = [
    "AdminLoginRequest",
    "NicknameRequest",
    "APIModel",
    "ErrorResponse",
    "SuccessResponse",
    "ImportantInfo",
    "ReconcileReport",
    "AdminMessageDetail",
    "MessageDetail",
    "AdminPollDetail",
    "PollCreate",
    "PollDetail",
    "PollOptionDetail",
    "VoteRequest",
    "KnownUser",
    "UserPreferenceDetail",
    "UserPreferenceUpdate",
]
