"""
User and role persistence.

The services depend only on the UserStore / RoleStore protocols; SqlUserStore
and SqlRoleStore implement them over a SQLAlchemy session. Uniqueness of
username, email and role name is enforced by database constraints, and a
violation comes back as UniqueViolation naming the offending field.
"""

import logging
from typing import Protocol

from sqlalchemy import exists, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from warden.core.errors import UniqueViolation
from warden.models import Role, User

logger = logging.getLogger(__name__)


class UserStore(Protocol):
    def find_by_username(self, username: str) -> User | None: ...

    def find_by_email(self, email: str) -> User | None: ...

    def find_by_id(self, user_id: int, for_update: bool = False) -> User | None: ...

    def exists_by_username(self, username: str) -> bool: ...

    def exists_by_email(self, email: str) -> bool: ...

    def save(self, user: User) -> User: ...


class RoleStore(Protocol):
    def find_by_name(self, name: str) -> Role | None: ...

    def exists_by_name(self, name: str) -> bool: ...

    def save(self, role: Role) -> Role: ...


def _commit(session: Session, obj: object) -> None:
    session.add(obj)
    session.commit()
    session.refresh(obj)


class SqlUserStore:
    def __init__(self, session: Session) -> None:
        self.session = session

    def find_by_username(self, username: str) -> User | None:
        return self.session.scalars(select(User).where(User.username == username)).first()

    def find_by_email(self, email: str) -> User | None:
        return self.session.scalars(select(User).where(User.email == email)).first()

    def find_by_id(self, user_id: int, for_update: bool = False) -> User | None:
        stmt = select(User).where(User.id == user_id)
        if for_update:
            # Row lock held until save() commits; serializes concurrent role edits.
            stmt = stmt.with_for_update()
        return self.session.scalars(stmt).first()

    def exists_by_username(self, username: str) -> bool:
        return bool(self.session.scalar(select(exists().where(User.username == username))))

    def exists_by_email(self, email: str) -> bool:
        return bool(self.session.scalar(select(exists().where(User.email == email))))

    def save(self, user: User) -> User:
        username = user.username
        try:
            _commit(self.session, user)
        except IntegrityError as e:
            self.session.rollback()
            # The failed row is gone; whichever key is now taken caused the clash.
            taken = self.session.scalar(select(exists().where(User.username == username)))
            field = "username" if taken else "email"
            logger.info("User insert hit unique constraint on %s", field)
            raise UniqueViolation(field) from e
        return user


class SqlRoleStore:
    def __init__(self, session: Session) -> None:
        self.session = session

    def find_by_name(self, name: str) -> Role | None:
        return self.session.scalars(select(Role).where(Role.name == name)).first()

    def exists_by_name(self, name: str) -> bool:
        return bool(self.session.scalar(select(exists().where(Role.name == name))))

    def save(self, role: Role) -> Role:
        try:
            _commit(self.session, role)
        except IntegrityError as e:
            self.session.rollback()
            raise UniqueViolation("name") from e
        return role
