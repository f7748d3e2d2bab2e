"""Conversation endpoints: creation, lookup and member management."""
from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from ..core import alerts
from ..core.db import get_session
from ..models import Conversation
from ..services import conversations as conversation_service
from ..services.conversations import ENTITY_NAME

router = APIRouter()


class ConversationRequest(BaseModel):
    id: int | None = None
    title: str | None = Field(default=None, max_length=255)
    member_ids: list[int] = Field(default_factory=list)


class ConversationResponse(BaseModel):
    id: int
    title: str | None
    member_ids: list[int]
    created_at: datetime | None


def _to_response(conversation: Conversation) -> ConversationResponse:
    return ConversationResponse(
        id=conversation.id,
        title=conversation.title,
        member_ids=sorted(conversation.member_ids),
        created_at=conversation.created_at,
    )


@router.post("", response_model=ConversationResponse, status_code=status.HTTP_201_CREATED, summary="Start a conversation")
async def create_conversation(
    payload: ConversationRequest,
    response: Response,
    session: Session = Depends(get_session),
) -> ConversationResponse:
    conversation = conversation_service.create_conversation(
        session,
        title=payload.title,
        member_ids=payload.member_ids,
        conversation_id=payload.id,
    )
    response.headers["Location"] = f"/api/conversations/{conversation.id}"
    response.headers.update(alerts.entity_creation_alert(ENTITY_NAME, str(conversation.id)))
    return _to_response(conversation)


@router.get("", response_model=list[ConversationResponse], summary="List conversations")
async def list_conversations(session: Session = Depends(get_session)) -> list[ConversationResponse]:
    return [_to_response(conversation) for conversation in conversation_service.list_conversations(session)]


@router.get("/{conversation_id}", response_model=ConversationResponse, summary="Fetch a conversation")
async def get_conversation(conversation_id: int, session: Session = Depends(get_session)) -> ConversationResponse:
    return _to_response(conversation_service.get_conversation(session, conversation_id))


@router.put(
    "/{conversation_id}/members/{user_holder_id}",
    response_model=ConversationResponse,
    summary="Add a member to a conversation",
)
async def add_member(
    conversation_id: int,
    user_holder_id: int,
    response: Response,
    session: Session = Depends(get_session),
) -> ConversationResponse:
    conversation = conversation_service.add_member(session, conversation_id, user_holder_id)
    response.headers.update(alerts.entity_update_alert(ENTITY_NAME, str(conversation.id)))
    return _to_response(conversation)


@router.delete(
    "/{conversation_id}/members/{user_holder_id}",
    response_model=ConversationResponse,
    summary="Remove a member from a conversation",
)
async def remove_member(
    conversation_id: int,
    user_holder_id: int,
    response: Response,
    session: Session = Depends(get_session),
) -> ConversationResponse:
    conversation = conversation_service.remove_member(session, conversation_id, user_holder_id)
    response.headers.update(alerts.entity_update_alert(ENTITY_NAME, str(conversation.id)))
    return _to_response(conversation)
