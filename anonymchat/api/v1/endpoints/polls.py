"""Poll endpoints."""
import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Request

from anonymchat.api.deps import Identity, get_identity, get_store, verify_admin_token
from anonymchat.api.presenters import present_polls
from anonymchat.core.cache import invalidate_feed
from anonymchat.core.rate_limit import limiter, RATE_LIMITS
from anonymchat.db.store import JsonFileStore
from anonymchat.schemas import ErrorResponse, PollCreate, PollDetail, VoteRequest
from anonymchat.services import create_poll, get_user_preference, list_polls, preference_lookup, vote_in_poll

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("", response_model=List[PollDetail])
async def get_polls(store: JsonFileStore = Depends(get_store)):
    """All polls with their tallies, newest first."""
    return present_polls(list_polls(store), preference_lookup(store))


@router.post(
    "",
    response_model=PollDetail,
    dependencies=[Depends(verify_admin_token)],
    responses={400: {"model": ErrorResponse}, 401: {"model": ErrorResponse}},
)
async def create_poll_endpoint(
    poll: PollCreate,
    identity: Identity = Depends(get_identity),
    store: JsonFileStore = Depends(get_store),
):
    """
    Create a poll (admin only).

    Blank options are ignored; between 2 and 10 must remain. The poll is
    attributed to "Admin".

    Example:
        Request:
            POST /api/v1/polls
            Cookie: admin_token=eyJhbGc...
            {"question": "Best colour?", "options": ["Red", "Blue"]}

        Response (400):
            {"detail": "Poll must have at least 2 options"}
    """
    try:
        created = create_poll(store, poll.question, poll.options, ip_address=identity.ip_address)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except OSError:
        logger.exception("Error creating poll")
        raise HTTPException(status_code=500, detail="Failed to create poll.")

    invalidate_feed(f"poll created, poll_id={created.id}")
    return PollDetail.from_poll(created, get_user_preference(store, created.nickname))


@router.post(
    "/{poll_id}/votes",
    response_model=PollDetail,
    responses={404: {"model": ErrorResponse}},
)
@limiter.limit(RATE_LIMITS["vote"])
async def vote_endpoint(
    request: Request,
    poll_id: str,
    vote_request: VoteRequest,
    store: JsonFileStore = Depends(get_store),
):
    """
    Cast a vote for one option of a poll.

    Votes are anonymous and not deduplicated: every call counts. The option's
    votes and the poll's totalVotes are incremented together.

    Example:
        Request:
            POST /api/v1/polls/poll_1718000000000_ab12cd3/votes
            {"optionId": "opt_1718000000000_x9y8z7w"}

        Response (404):
            {"detail": "Poll or option not found, or failed to vote."}
    """
    try:
        updated = vote_in_poll(store, poll_id, vote_request.option_id)
    except OSError:
        logger.exception("Error voting on poll")
        raise HTTPException(status_code=500, detail="Failed to vote on poll.")

    if updated is None:
        raise HTTPException(status_code=404, detail="Poll or option not found, or failed to vote.")

    invalidate_feed(f"vote cast, poll_id={poll_id}")
    return PollDetail.from_poll(updated, get_user_preference(store, updated.nickname))
