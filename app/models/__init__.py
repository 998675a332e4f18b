"""
Database models.

All tables are SQLModel classes registered on SQLModel.metadata. Schema
changes go through Alembic (alembic/versions).
"""

from app.models.admin_notification import AdminNotifications
from app.models.follow import Follows
from app.models.image import Images
from app.models.profile import Profiles
from app.models.rating import Ratings
from app.models.report import Reports
from app.models.streak import Streaks
from app.models.user_role import UserRoles

__all__ = [
    # Core entity models
    "Profiles",
    "Images",
    # Junction/relationship tables
    "Ratings",
    "Follows",
    "UserRoles",
    # Leaderboard state
    "Streaks",
    # Moderation
    "Reports",
    "AdminNotifications",
]
