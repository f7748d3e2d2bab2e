"""Plain CRUD endpoints for user holders."""
from __future__ import annotations

import logging
from datetime import datetime

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.orm import Session

from ..core import alerts
from ..core.db import get_session
from ..models import UserHolder
from ..services import user_holders as user_holder_service
from ..services.user_holders import ENTITY_NAME

logger = logging.getLogger(__name__)

router = APIRouter()


class UserHolderRequest(BaseModel):
    id: int | None = None
    account_id: int = Field(..., ge=0)
    login: str | None = Field(default=None, max_length=100)
    email: str | None = Field(default=None, max_length=255)

    def to_entity(self) -> UserHolder:
        return UserHolder(id=self.id, account_id=self.account_id, login=self.login, email=self.email)


class UserHolderResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    account_id: int
    login: str | None
    email: str | None
    created_at: datetime | None
    conversation_ids: list[int]


@router.post("", response_model=UserHolderResponse, status_code=status.HTTP_201_CREATED, summary="Create a user holder")
async def create_user_holder(
    payload: UserHolderRequest,
    response: Response,
    session: Session = Depends(get_session),
) -> UserHolderResponse:
    logger.debug("REST request to save UserHolder : %s", payload)
    holder = user_holder_service.create_user_holder(session, payload.to_entity())
    response.headers["Location"] = f"/api/user-holders/{holder.id}"
    response.headers.update(alerts.entity_creation_alert(ENTITY_NAME, str(holder.id)))
    return UserHolderResponse.model_validate(holder)


@router.put("", response_model=UserHolderResponse, summary="Update a user holder")
async def update_user_holder(
    payload: UserHolderRequest,
    response: Response,
    session: Session = Depends(get_session),
) -> UserHolderResponse:
    logger.debug("REST request to update UserHolder : %s", payload)
    holder, created = user_holder_service.update_user_holder(session, payload.to_entity())
    if created:
        response.status_code = status.HTTP_201_CREATED
        response.headers["Location"] = f"/api/user-holders/{holder.id}"
        response.headers.update(alerts.entity_creation_alert(ENTITY_NAME, str(holder.id)))
    else:
        response.headers.update(alerts.entity_update_alert(ENTITY_NAME, str(holder.id)))
    return UserHolderResponse.model_validate(holder)


@router.get("", response_model=list[UserHolderResponse], summary="List user holders")
async def list_user_holders(session: Session = Depends(get_session)) -> list[UserHolderResponse]:
    logger.debug("REST request to get all UserHolders")
    return [UserHolderResponse.model_validate(holder) for holder in user_holder_service.list_user_holders(session)]


@router.get("/{user_holder_id}", response_model=UserHolderResponse, summary="Fetch a user holder")
async def get_user_holder(user_holder_id: int, session: Session = Depends(get_session)) -> UserHolderResponse:
    logger.debug("REST request to get UserHolder : %s", user_holder_id)
    holder = user_holder_service.get_user_holder(session, user_holder_id, eager=True)
    return UserHolderResponse.model_validate(holder)


@router.delete("/{user_holder_id}", summary="Delete a user holder")
async def delete_user_holder(user_holder_id: int, session: Session = Depends(get_session)) -> Response:
    logger.debug("REST request to delete UserHolder : %s", user_holder_id)
    user_holder_service.delete_user_holder(session, user_holder_id)
    return Response(
        status_code=status.HTTP_200_OK,
        headers=alerts.entity_deletion_alert(ENTITY_NAME, str(user_holder_id)),
    )
