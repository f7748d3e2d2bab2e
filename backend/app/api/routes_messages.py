"""Message endpoints scoped to a conversation."""
import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Request, Response, status
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.orm import Session

from ..clients.accounts import AccountLookup, get_account_client
from ..core import alerts
from ..core.config import settings
from ..core.db import get_session
from ..core.rate_limiter import limiter
from ..core.security import get_caller_login
from ..models import Message
from ..models.messages import ENTITY_NAME
from ..services import messages as message_service

logger = logging.getLogger(__name__)

router = APIRouter()


class MessageRequest(BaseModel):
    id: Optional[int] = Field(default=None, description="Must be empty when creating")
    message_text: Optional[str] = Field(default=None, description="Required, checked when the message is stored")
    user_id: Optional[int] = Field(default=None, description="Author user holder identifier")

    def to_entity(self) -> Message:
        return Message(id=self.id, message_text=self.message_text, user_id=self.user_id)


class MessageAuthor(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    login: Optional[str]


class MessageResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    message_text: str
    conversation_id: Optional[int]
    user: Optional[MessageAuthor]
    created_by: str
    created_at: Optional[datetime]
    last_modified_by: Optional[str]
    updated_at: Optional[datetime]


class MessageSummary(BaseModel):
    """List view of a message."""

    id: int
    message_text: str
    user_id: Optional[int]
    login: Optional[str]
    created_at: Optional[datetime]

    @classmethod
    def from_message(cls, message: Message) -> "MessageSummary":
        return cls(
            id=message.id,
            message_text=message.message_text,
            user_id=message.user_id,
            login=message.user.login if message.user is not None else None,
            created_at=message.created_at,
        )


def _created(response: Response, message: Message) -> MessageResponse:
    response.status_code = status.HTTP_201_CREATED
    response.headers["Location"] = f"/api/conversations/{message.conversation_id}/messages/{message.id}"
    response.headers.update(alerts.entity_creation_alert(ENTITY_NAME, str(message.id)))
    return MessageResponse.model_validate(message)


@router.post(
    "/conversations/{conversation_id}/messages",
    response_model=MessageResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a message in a conversation",
)
@limiter.limit(settings.RATE_LIMIT_MESSAGE_WRITE)
async def create_message(
    request: Request,
    response: Response,
    conversation_id: int,
    payload: MessageRequest,
    session: Session = Depends(get_session),
    accounts: AccountLookup = Depends(get_account_client),
) -> MessageResponse:
    """Create a message authored by the calling user."""

    message = await message_service.create_message(
        session, payload.to_entity(), conversation_id, get_caller_login(request), accounts
    )
    return _created(response, message)


@router.put(
    "/conversations/{conversation_id}/messages",
    response_model=MessageResponse,
    summary="Update a message, or create it when no id is given",
)
@limiter.limit(settings.RATE_LIMIT_MESSAGE_WRITE)
async def update_message(
    request: Request,
    response: Response,
    conversation_id: int,
    payload: MessageRequest,
    session: Session = Depends(get_session),
    accounts: AccountLookup = Depends(get_account_client),
) -> MessageResponse:
    """Replace an existing message."""

    message, created = await message_service.update_message(
        session, payload.to_entity(), conversation_id, get_caller_login(request), accounts
    )
    if created:
        return _created(response, message)
    response.headers.update(alerts.entity_update_alert(ENTITY_NAME, str(message.id)))
    return MessageResponse.model_validate(message)


@router.get(
    "/conversations/{conversation_id}/messages",
    response_model=list[MessageSummary],
    summary="List the messages of a conversation",
)
async def list_messages(
    conversation_id: int, session: Session = Depends(get_session)
) -> list[MessageSummary]:
    return [
        MessageSummary.from_message(message)
        for message in message_service.list_messages(session, conversation_id)
    ]


@router.get(
    "/conversations/{conversation_id}/messages/{message_id}",
    response_model=MessageResponse,
    summary="Fetch a single message",
)
async def get_message(
    conversation_id: int, message_id: int, session: Session = Depends(get_session)
) -> MessageResponse:
    return MessageResponse.model_validate(message_service.get_message(session, message_id))


@router.delete(
    "/conversations/{conversation_id}/messages/{message_id}",
    summary="Delete a message",
)
async def delete_message(
    conversation_id: int, message_id: int, session: Session = Depends(get_session)
) -> Response:
    message_service.delete_message(session, message_id, conversation_id)
    return Response(
        status_code=status.HTTP_200_OK,
        headers=alerts.entity_deletion_alert(ENTITY_NAME, str(message_id)),
    )
