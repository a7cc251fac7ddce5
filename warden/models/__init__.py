"""SQLAlchemy ORM models."""

from warden.models.base import Base
from warden.models.role import Role, RoleName
from warden.models.user import User, user_roles

__all__ = ["Base", "Role", "RoleName", "User", "user_roles"]
