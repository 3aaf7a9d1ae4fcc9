"""Helpers for working with users."""
from __future__ import annotations

import logging
from typing import Optional
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from dailystride.core.errors import Conflict, NotFound
from dailystride.db.models.user import User

logger = logging.getLogger(__name__)


def _normalize_email(email: str) -> str:
    return email.strip().lower()


def get_user(db: Session, user_id: UUID) -> User:
    user = db.get(User, user_id)
    if user is None:
        raise NotFound("User", user_id)
    return user


def get_user_by_email(db: Session, email: str) -> Optional[User]:
    return db.query(User).filter(User.email == _normalize_email(email)).one_or_none()


def create_user(db: Session, email: str, name: Optional[str] = None) -> User:
    """Insert a user; a duplicate email raises ``Conflict``."""
    normalized = _normalize_email(email)
    if get_user_by_email(db, normalized):
        raise Conflict(f"User with email {normalized} already exists")

    user = User(email=normalized, name=name.strip() if name else None)
    db.add(user)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise Conflict(f"User with email {normalized} already exists") from exc
    db.refresh(user)
    logger.info("Created user %s", user.id)
    return user
