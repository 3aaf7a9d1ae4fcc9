"""ORM models exposed for metadata discovery."""
from dailystride.db.models.daily_task import DailyTask
from dailystride.db.models.goal import Goal
from dailystride.db.models.user import User

__all__ = [
    "DailyTask",
    "Goal",
    "User",
]
