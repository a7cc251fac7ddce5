"""Error taxonomy for authentication, registration and provisioning.

The boundary layer (warden.api) maps each of these to an HTTP response; the
core raises them and never catches its own errors for control flow.
"""

from enum import Enum


class WardenError(Exception):
    """Base class for all errors raised by the auth core."""


class AuthenticationFailure(WardenError):
    """Bad credentials. Deliberately identical for unknown user and wrong password."""

    def __init__(self) -> None:
        super().__init__("Invalid username or password.")


class DuplicateUsername(WardenError):
    def __init__(self, username: str) -> None:
        super().__init__("Error: Username is already taken.")
        self.username = username


class DuplicateEmail(WardenError):
    def __init__(self, email: str) -> None:
        super().__init__("Error: Email is already in use.")
        self.email = email


class RoleNotFound(WardenError):
    """A baseline role record is missing: provisioning was never run."""

    def __init__(self, role_name: str) -> None:
        super().__init__(f"Role {role_name} not found; run role provisioning first")
        self.role_name = role_name


class NotFound(WardenError):
    """A user or role referenced by a provisioning call does not exist."""

    def __init__(self, entity: str, key: object) -> None:
        super().__init__(f"{entity} {key!r} not found")
        self.entity = entity
        self.key = key


class UniqueViolation(WardenError):
    """Raised by a store when the database unique constraint on `field` fires."""

    def __init__(self, field: str) -> None:
        super().__init__(f"unique constraint violated on {field}")
        self.field = field


class TokenRejection(str, Enum):
    """Internal reason a bearer token was rejected (never shown to clients)."""

    MALFORMED = "MALFORMED"
    BAD_SIGNATURE = "BAD_SIGNATURE"
    EXPIRED = "EXPIRED"


class TokenRejected(WardenError):
    reason: TokenRejection

    def __init__(self, detail: str = "") -> None:
        super().__init__(detail or self.reason.value)


class TokenMalformed(TokenRejected):
    reason = TokenRejection.MALFORMED


class TokenBadSignature(TokenRejected):
    reason = TokenRejection.BAD_SIGNATURE


class TokenExpired(TokenRejected):
    reason = TokenRejection.EXPIRED
