"""Database utilities and models."""

from dailystride.db.base import Base
from dailystride.db import models  # noqa: F401  (imported for side effects)

__all__ = ["Base"]
