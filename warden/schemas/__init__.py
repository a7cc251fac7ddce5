"""Pydantic request/response schemas."""

from warden.schemas.auth import (
    JwtResponse,
    MessageResponse,
    Principal,
    SignInRequest,
    SignUpRequest,
)
from warden.schemas.health import HealthResponse

__all__ = [
    "HealthResponse",
    "JwtResponse",
    "MessageResponse",
    "Principal",
    "SignInRequest",
    "SignUpRequest",
]
