"""
Bearer tokens: HS256 JWTs carrying a Principal.

A token is header.payload.signature, each segment base64url encoded. Claims:
sub (username), uid, email, roles, iat and exp (epoch seconds). Validation
first checks the token is well formed (three segments, header and payload
both JSON objects), then checks the signature before any claim is looked at.
Expiry is checked against the injected clock; a token is dead from the second
now >= exp (plus any configured leeway).
"""

import json
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from typing import Any

import jwt
from jwt.utils import base64url_decode, base64url_encode
from pydantic import ValidationError

from warden.core.config import JWT_ALGORITHM, Settings
from warden.core.errors import TokenBadSignature, TokenExpired, TokenMalformed
from warden.schemas.auth import Principal

Clock = Callable[[], datetime]

REQUIRED_CLAIMS = ["sub", "uid", "email", "roles", "iat", "exp"]


def utc_now() -> datetime:
    return datetime.now(UTC)


def _well_formed_signature(token: str) -> str:
    """
    Check that header and payload are base64url JSON objects and return the raw
    signature segment (everything after the second dot). Raises TokenMalformed.
    """
    segments = token.split(".", 2)
    if len(segments) != 3:
        raise TokenMalformed("expected header.payload.signature")
    for name, segment in zip(("header", "payload"), segments[:2]):
        try:
            decoded = json.loads(base64url_decode(segment))
        except ValueError as e:
            raise TokenMalformed(f"{name} is not base64url JSON") from e
        if not isinstance(decoded, dict):
            raise TokenMalformed(f"{name} is not a JSON object")
    return segments[2]


class TokenIssuer:
    """Encode a Principal into a signed, time-bounded token."""

    def __init__(self, secret: str, lifetime: timedelta, clock: Clock = utc_now) -> None:
        if not secret:
            raise ValueError("token signing secret must be non-empty")
        if lifetime <= timedelta(0):
            raise ValueError("token lifetime must be positive")
        self._secret = secret
        self.lifetime = lifetime
        self._clock = clock

    @classmethod
    def from_settings(cls, settings: Settings, clock: Clock = utc_now) -> "TokenIssuer":
        return cls(
            settings.JWT_SECRET.get_secret_value(),
            timedelta(minutes=settings.JWT_EXPIRE_MINUTES),
            clock,
        )

    def issue(self, principal: Principal) -> str:
        issued_at = int(self._clock().timestamp())
        payload: dict[str, Any] = {
            "sub": principal.username,
            "uid": principal.id,
            "email": principal.email,
            "roles": list(principal.roles),
            "iat": issued_at,
            "exp": issued_at + int(self.lifetime.total_seconds()),
        }
        return jwt.encode(payload, self._secret, algorithm=JWT_ALGORITHM)


class TokenValidator:
    """Verify a token and recover its Principal, or raise a TokenRejected subclass."""

    def __init__(
        self,
        secret: str,
        clock: Clock = utc_now,
        leeway: timedelta = timedelta(0),
    ) -> None:
        if not secret:
            raise ValueError("token signing secret must be non-empty")
        self._secret = secret
        self._clock = clock
        self.leeway = leeway

    @classmethod
    def from_settings(cls, settings: Settings, clock: Clock = utc_now) -> "TokenValidator":
        return cls(
            settings.JWT_SECRET.get_secret_value(),
            clock,
            timedelta(seconds=settings.JWT_LEEWAY_SECONDS),
        )

    def validate(self, token: str) -> Principal:
        signature = _well_formed_signature(token)
        # Issued signatures are always canonical base64url.
        try:
            canonical = base64url_encode(base64url_decode(signature)).decode("ascii")
        except ValueError as e:
            raise TokenBadSignature() from e
        if canonical != signature:
            raise TokenBadSignature()

        try:
            # Time claims are checked below against our own clock, not PyJWT's.
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[JWT_ALGORITHM],
                options={
                    "verify_exp": False,
                    "verify_iat": False,
                    "verify_nbf": False,
                    "require": REQUIRED_CLAIMS,
                },
            )
        except jwt.InvalidSignatureError as e:
            raise TokenBadSignature() from e
        except jwt.DecodeError as e:
            # Header and payload already decoded above, so what is left is the signature.
            raise TokenBadSignature() from e
        except jwt.PyJWTError as e:
            raise TokenMalformed(str(e)) from e

        exp = payload["exp"]
        if isinstance(exp, bool) or not isinstance(exp, (int, float)):
            raise TokenMalformed("exp claim is not a number")
        if self._clock().timestamp() >= exp + self.leeway.total_seconds():
            raise TokenExpired()

        roles = payload["roles"]
        if not isinstance(roles, list):
            raise TokenMalformed("roles claim is not a list")
        try:
            return Principal(
                id=payload["uid"],
                username=payload["sub"],
                email=payload["email"],
                roles=tuple(roles),
            )
        except ValidationError as e:
            raise TokenMalformed("claims do not describe a principal") from e
