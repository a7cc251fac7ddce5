"""ORM model for authorization roles."""

from enum import Enum

from sqlalchemy import Column, Integer, String

from warden.models.base import Base


class RoleName(str, Enum):
    """Canonical role names; the value is the authority string stored and issued."""

    USER = "ROLE_USER"
    MODERATOR = "ROLE_MODERATOR"
    ADMIN = "ROLE_ADMIN"


class Role(Base):
    """
    A named authorization level. At most one row per name; rows are created by
    role provisioning and never modified afterwards.
    """

    __tablename__ = "roles"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(20), nullable=False, unique=True, index=True)

    def __repr__(self) -> str:
        return f"Role(id={self.id!r}, name={self.name!r})"
