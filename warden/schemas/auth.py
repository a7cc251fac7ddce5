"""Request/response schemas for auth endpoints."""

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Loose address shape; deliverability is not our concern.
EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


class SignInRequest(BaseModel):
    """Credentials for sign-in."""

    username: str = Field(..., min_length=1, max_length=255, description="Username")
    password: str = Field(..., min_length=1, max_length=128, description="Password")

    @field_validator("username", "password")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be blank")
        return v


class SignUpRequest(BaseModel):
    """New account details. Omit role entirely to get the default USER role."""

    username: str = Field(..., min_length=3, max_length=20, description="Username")
    email: str = Field(..., max_length=50, pattern=EMAIL_PATTERN, description="Email address")
    password: str = Field(..., min_length=6, max_length=40, description="Password")
    role: set[str] | None = Field(
        default=None,
        description='Requested role labels, e.g. ["admin", "mod"]; unknown labels become USER',
    )


class Principal(BaseModel):
    """Authenticated identity derived from a user at sign-in; never persisted."""

    model_config = ConfigDict(frozen=True)

    id: int
    username: str
    email: str
    roles: tuple[str, ...] = ()


class JwtResponse(BaseModel):
    """Bearer token plus the identity it was issued for."""

    token: str = Field(..., description="Signed bearer token")
    type: str = Field(default="Bearer", description="Token type")
    id: int
    username: str
    email: str
    roles: list[str]


class MessageResponse(BaseModel):
    """Plain confirmation message."""

    message: str
