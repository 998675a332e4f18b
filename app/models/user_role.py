"""
SQLModel-based UserRole model

Roles are granted out of band (see scripts/grant_role.py); the API only reads them.
"""

from sqlalchemy import ForeignKeyConstraint
from sqlmodel import Field, SQLModel

from app.config import AppRole


class UserRoles(SQLModel, table=True):
    """Database table for user roles. Composite primary key (user_id, role)."""

    __tablename__ = "user_roles"

    __table_args__ = (
        ForeignKeyConstraint(
            ["user_id"],
            ["profiles.user_id"],
            ondelete="CASCADE",
            onupdate="CASCADE",
            name="fk_user_roles_user_id",
        ),
    )

    user_id: str = Field(primary_key=True, max_length=36)
    role: str = Field(default=AppRole.USER, primary_key=True, max_length=20)
