"""Sign-in, sign-up and role provisioning routes, plus the bearer-token auth dependencies."""

import logging
from collections.abc import Callable
from functools import lru_cache
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from warden.core.config import get_settings
from warden.core.database import get_db
from warden.core.errors import (
    AuthenticationFailure,
    DuplicateEmail,
    DuplicateUsername,
    NotFound,
    RoleNotFound,
    TokenRejected,
)
from warden.core.security import PasswordHasher
from warden.core.tokens import TokenIssuer, TokenValidator
from warden.models import RoleName
from warden.schemas.auth import (
    JwtResponse,
    MessageResponse,
    Principal,
    SignInRequest,
    SignUpRequest,
)
from warden.services import (
    CredentialAuthenticator,
    RegistrationService,
    RoleProvisioningService,
    RoleResolver,
)
from warden.stores import SqlRoleStore, SqlUserStore

logger = logging.getLogger(__name__)

router = APIRouter()
security = HTTPBearer(auto_error=False)


@lru_cache
def get_password_hasher() -> PasswordHasher:
    return PasswordHasher(rounds=get_settings().BCRYPT_ROUNDS)


@lru_cache
def get_token_issuer() -> TokenIssuer:
    return TokenIssuer.from_settings(get_settings())


@lru_cache
def get_token_validator() -> TokenValidator:
    return TokenValidator.from_settings(get_settings())


def _unauthenticated(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_current_principal(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    validator: Annotated[TokenValidator, Depends(get_token_validator)],
) -> Principal:
    """Dependency: require a valid Bearer token and return its Principal. Raises 401 otherwise."""
    if credentials is None:
        raise _unauthenticated("Not authenticated")
    try:
        return validator.validate(credentials.credentials)
    except TokenRejected as e:
        # Reason stays in the logs; every rejection looks the same to the client.
        logger.info("Bearer token rejected: reason=%s", e.reason.value)
        raise _unauthenticated("Invalid or expired token") from e


def require_roles(*role_names: str) -> Callable[[Principal], Principal]:
    """Build a dependency that admits a principal holding any of role_names. Raises 403 otherwise."""

    def dependency(
        principal: Annotated[Principal, Depends(get_current_principal)],
    ) -> Principal:
        if not any(name in principal.roles for name in role_names):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient role",
            )
        return principal

    return dependency


require_admin = require_roles(RoleName.ADMIN.value)


def require_provisioning_access(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    validator: Annotated[TokenValidator, Depends(get_token_validator)],
) -> None:
    """Dependency: admins only, unless PROVISIONING_OPEN is set."""
    if get_settings().PROVISIONING_OPEN:
        return
    require_admin(get_current_principal(credentials, validator))


def _role_not_found(e: RoleNotFound) -> HTTPException:
    logger.error("Role lookup failed: %s", e)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="Error: Role not found.",
    )


@router.post("/signin", response_model=JwtResponse)
def sign_in(
    body: SignInRequest,
    db: Annotated[Session, Depends(get_db)],
    hasher: Annotated[PasswordHasher, Depends(get_password_hasher)],
    issuer: Annotated[TokenIssuer, Depends(get_token_issuer)],
) -> JwtResponse:
    """
    Authenticate with username and password; returns a bearer token and the user's identity.
    Include the token in the Authorization header as: Bearer <token>
    """
    authenticator = CredentialAuthenticator(SqlUserStore(db), hasher)
    try:
        principal = authenticator.authenticate(body.username, body.password)
    except AuthenticationFailure as e:
        raise _unauthenticated(str(e)) from e
    return JwtResponse(
        token=issuer.issue(principal),
        id=principal.id,
        username=principal.username,
        email=principal.email,
        roles=list(principal.roles),
    )


@router.post("/signup", response_model=MessageResponse)
def sign_up(
    body: SignUpRequest,
    db: Annotated[Session, Depends(get_db)],
    hasher: Annotated[PasswordHasher, Depends(get_password_hasher)],
) -> MessageResponse:
    """Register a new user. Requested roles: "admin", "mod"; anything else becomes USER."""
    service = RegistrationService(SqlUserStore(db), hasher, RoleResolver(SqlRoleStore(db)))
    try:
        service.register(body.username, body.email, body.password, body.role)
    except (DuplicateUsername, DuplicateEmail) as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
    except RoleNotFound as e:
        raise _role_not_found(e) from e
    return MessageResponse(message="User registered successfully")


@router.post(
    "/addroles",
    response_model=MessageResponse,
    dependencies=[Depends(require_provisioning_access)],
)
def add_roles(db: Annotated[Session, Depends(get_db)]) -> MessageResponse:
    """Create the USER, MODERATOR and ADMIN role records if missing. Safe to repeat."""
    RoleProvisioningService(SqlUserStore(db), SqlRoleStore(db)).ensure_baseline_roles()
    return MessageResponse(message="Roles added to DB")


@router.post(
    "/addadmin/{user_id}",
    response_model=MessageResponse,
    dependencies=[Depends(require_provisioning_access)],
)
def add_admin(user_id: int, db: Annotated[Session, Depends(get_db)]) -> MessageResponse:
    """Grant ADMIN to a user. 404 if the user or the ADMIN role does not exist."""
    service = RoleProvisioningService(SqlUserStore(db), SqlRoleStore(db))
    try:
        service.promote_to_admin(user_id)
    except NotFound as e:
        logger.info("Admin promotion failed: %s", e)
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="not found") from e
    return MessageResponse(message="Admin role added to user")


@router.get("/me", response_model=Principal)
def me(principal: Annotated[Principal, Depends(get_current_principal)]) -> Principal:
    """Return the identity carried by the presented bearer token."""
    return principal
