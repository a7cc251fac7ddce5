"""ORM model for application users and their role assignments."""

from sqlalchemy import Column, ForeignKey, Integer, String, Table
from sqlalchemy.orm import relationship

from warden.models.base import Base
from warden.models.role import Role

user_roles = Table(
    "user_roles",
    Base.metadata,
    Column("user_id", Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("role_id", Integer, ForeignKey("roles.id", ondelete="CASCADE"), primary_key=True),
)


class User(Base):
    """
    User account for credential sign-in and role-based access control.

    username and email are each unique; roles is a set, so adding a role the
    user already holds is a no-op.
    """

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(20), nullable=False, unique=True, index=True)
    email = Column(String(50), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)

    roles = relationship(Role, secondary=user_roles, collection_class=set, lazy="selectin")

    @property
    def role_names(self) -> list[str]:
        """Names of the held roles, sorted for stable output."""
        return sorted(role.name for role in self.roles)

    def __repr__(self) -> str:
        return f"User(id={self.id!r}, username={self.username!r})"
