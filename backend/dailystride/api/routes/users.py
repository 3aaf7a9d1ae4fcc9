"""User API routes."""
from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from dailystride.api.errors import to_http_exception
from dailystride.api.schemas.user import UserCreateRequest, UserDetailResponse, UserResponse
from dailystride.core.errors import DailyStrideError
from dailystride.db.deps import get_db
from dailystride.observability.tracing import trace
from dailystride.services import user_service

router = APIRouter(prefix="/users", tags=["users"])


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def create_user(
    payload: UserCreateRequest,
    http_request: Request,
    db: Session = Depends(get_db),
) -> UserResponse:
    request_id = getattr(http_request.state, "request_id", None)
    with trace("user.create", metadata={"route": "/users"}, request_id=request_id):
        try:
            user = user_service.create_user(db, payload.email, payload.name)
        except DailyStrideError as exc:
            raise to_http_exception(exc) from exc
    return UserResponse.model_validate(user)


@router.get("/{user_id}", response_model=UserDetailResponse)
def get_user(user_id: UUID, db: Session = Depends(get_db)) -> UserDetailResponse:
    try:
        user = user_service.get_user(db, user_id)
    except DailyStrideError as exc:
        raise to_http_exception(exc) from exc
    return UserDetailResponse.model_validate(user)
