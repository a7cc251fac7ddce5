"""Username/password verification producing an authenticated Principal."""

import logging
from functools import lru_cache

from warden.core.errors import AuthenticationFailure
from warden.core.security import PasswordHasher
from warden.schemas.auth import Principal
from warden.stores import UserStore

logger = logging.getLogger(__name__)


@lru_cache
def _timing_dummy_hash(rounds: int) -> str:
    return PasswordHasher(rounds).hash("warden-timing-dummy")


class CredentialAuthenticator:
    """
    Check a username and password against the stored bcrypt hash.

    An unknown username still pays for one bcrypt check (against a dummy hash
    of the same cost) and fails with the same AuthenticationFailure as a wrong
    password, so neither timing nor error shape reveals which usernames exist.
    """

    def __init__(self, users: UserStore, hasher: PasswordHasher) -> None:
        self.users = users
        self.hasher = hasher

    def authenticate(self, username: str, password: str) -> Principal:
        user = self.users.find_by_username(username)
        if user is None:
            self.hasher.verify(password, _timing_dummy_hash(self.hasher.rounds))
            logger.info("Sign-in failed for username=%r", username)
            raise AuthenticationFailure()
        if not self.hasher.verify(password, user.password_hash):
            logger.info("Sign-in failed for username=%r", username)
            raise AuthenticationFailure()
        return Principal(
            id=user.id,
            username=user.username,
            email=user.email,
            roles=tuple(user.role_names),
        )
