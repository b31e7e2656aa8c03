"""
Player endpoints for a single learner's conversation.

The client renders the cards; these endpoints carry the learner's actions to
the conversation controller and return session snapshots. Lifecycle messages
for the embedding page are polled from ``/messages``.
"""

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel, Field
from typing import Any, List, Optional
import logging

from core.conversation.integration import PlayerAdapter
from models.schemas import ConversationSession, HostMessage

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/player", tags=["player"])


class SubmitAnswerRequest(BaseModel):
    """Answer submission"""
    answer: Any = None
    handler_id: str = "submit"


class FeedbackRequest(BaseModel):
    """Request to open the feedback form for a card"""
    state_id: str


class ResizeRequest(BaseModel):
    """Content height measured by the client"""
    content_height: int = Field(ge=0)


class ActionResponse(BaseModel):
    """Result of a learner action"""
    accepted: bool
    warning: Optional[str] = None
    session: ConversationSession


class LeaveResponse(BaseModel):
    """Whether the client should warn before leaving"""
    warn: bool
    message: Optional[str] = None


def get_player(request: Request) -> PlayerAdapter:
    player = getattr(request.app.state, "player", None)
    if player is None:
        raise HTTPException(status_code=503, detail="Player is not configured")
    return player


def _require_initialized(player: PlayerAdapter):
    if not player.initialized:
        raise HTTPException(status_code=409, detail="Player has not been initialized")


@router.post("/initialize", response_model=ConversationSession)
async def initialize(request: Request):
    """Load the exploration and start a fresh session"""
    player = get_player(request)
    logger.info("Player initialization requested")
    return player.initialize()


@router.get("/session", response_model=ConversationSession)
async def get_session(request: Request):
    """Current session snapshot"""
    player = get_player(request)
    _require_initialized(player)
    return player.session()


@router.post("/answer", response_model=ActionResponse)
async def submit_answer(body: SubmitAnswerRequest, request: Request):
    """
    Submit a learner answer.

    Duplicate submissions while an answer is in flight are not errors; they
    come back with ``accepted`` set to false.
    """
    player = get_player(request)
    _require_initialized(player)
    result = player.submit_answer(body.answer, body.handler_id)
    if not result["accepted"]:
        logger.info("Answer submission not accepted", extra={"handler_id": body.handler_id})
    return ActionResponse(accepted=result["accepted"], session=result["session"])


@router.post("/feedback-request", response_model=ActionResponse)
async def request_feedback(body: FeedbackRequest, request: Request):
    """Open the feedback form for a card (not available in preview mode)"""
    player = get_player(request)
    _require_initialized(player)
    result = player.request_card_feedback(body.state_id)
    return ActionResponse(**result)


@router.post("/resize", response_model=ConversationSession)
async def resize(body: ResizeRequest, request: Request):
    """Record the client's content height and re-settle"""
    player = get_player(request)
    return player.report_resize(body.content_height)


@router.post("/leave", response_model=LeaveResponse)
async def leave(request: Request):
    """Called from the client's beforeunload handler"""
    player = get_player(request)
    message = player.before_unload()
    return LeaveResponse(warn=message is not None, message=message)


@router.get("/messages", response_model=List[HostMessage])
async def drain_messages(request: Request):
    """Lifecycle messages queued for the embedding page"""
    player = get_player(request)
    return player.drain_messages()
