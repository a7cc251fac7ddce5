"""New user registration: uniqueness checks, hashing, role resolution, persistence."""

import logging
from collections.abc import Iterable

from warden.core.errors import DuplicateEmail, DuplicateUsername, UniqueViolation
from warden.core.security import PasswordHasher
from warden.models import User
from warden.services.roles import RoleResolver
from warden.stores import UserStore

logger = logging.getLogger(__name__)


class RegistrationService:
    def __init__(self, users: UserStore, hasher: PasswordHasher, resolver: RoleResolver) -> None:
        self.users = users
        self.hasher = hasher
        self.resolver = resolver

    def register(
        self,
        username: str,
        email: str,
        password: str,
        role_labels: Iterable[str] | None = None,
    ) -> User:
        """
        Create a user. Raises DuplicateUsername / DuplicateEmail if either is taken
        and RoleNotFound if baseline roles were never provisioned; nothing is
        written in any of those cases.

        The exists checks are only a fast path: the store's unique constraints
        decide, and a constraint violation on save is reported the same way.
        """
        if self.users.exists_by_username(username):
            raise DuplicateUsername(username)
        if self.users.exists_by_email(email):
            raise DuplicateEmail(email)

        password_hash = self.hasher.hash(password)
        roles = self.resolver.resolve(role_labels)

        user = User(username=username, email=email, password_hash=password_hash)
        user.roles = roles
        try:
            user = self.users.save(user)
        except UniqueViolation as e:
            if e.field == "username":
                raise DuplicateUsername(username) from e
            raise DuplicateEmail(email) from e

        logger.info("Registered user id=%s username=%r roles=%s", user.id, username, user.role_names)
        return user
