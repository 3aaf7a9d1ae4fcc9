"""FastAPI database dependencies."""
from __future__ import annotations

from typing import Iterator

from sqlalchemy.orm import Session

from dailystride.db.session import create_session


def get_db() -> Iterator[Session]:
    """Yield a session per request and always close it."""
    db = create_session()
    try:
        yield db
    finally:
        db.close()
