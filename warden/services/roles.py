"""Role resolution at sign-up and role provisioning (baseline roles, admin promotion)."""

import logging
from collections.abc import Iterable

from warden.core.errors import NotFound, RoleNotFound, UniqueViolation
from warden.models import Role, RoleName, User
from warden.stores import RoleStore, UserStore

logger = logging.getLogger(__name__)

# Requested label -> canonical role. Anything not listed maps to USER.
ROLE_LABELS: dict[str, RoleName] = {
    "admin": RoleName.ADMIN,
    "mod": RoleName.MODERATOR,
}

DEFAULT_ROLE = RoleName.USER

BASELINE_ROLES = (RoleName.USER, RoleName.MODERATOR, RoleName.ADMIN)


def canonical_role(label: str) -> RoleName:
    """Map a requested label (case-sensitive) to its canonical role, falling back to USER."""
    role = ROLE_LABELS.get(label)
    if role is None:
        logger.warning("Unrecognized role label %r requested; assigning %s", label, DEFAULT_ROLE.value)
        return DEFAULT_ROLE
    return role


class RoleResolver:
    """
    Turn the role labels of a sign-up request into Role records.

    labels=None (no "role" field at all) gives exactly {USER}; an empty
    collection gives no roles. A missing Role record means provisioning never
    ran and raises RoleNotFound.
    """

    def __init__(self, roles: RoleStore) -> None:
        self.roles = roles

    def resolve(self, labels: Iterable[str] | None) -> set[Role]:
        if labels is None:
            names = {DEFAULT_ROLE}
        else:
            names = {canonical_role(label) for label in labels}
        return {self._load(name) for name in names}

    def _load(self, name: RoleName) -> Role:
        role = self.roles.find_by_name(name.value)
        if role is None:
            logger.error("Role %s missing from the role table; run role provisioning", name.value)
            raise RoleNotFound(name.value)
        return role


class RoleProvisioningService:
    """Idempotent role administration: seed the baseline roles and promote users to admin."""

    def __init__(self, users: UserStore, roles: RoleStore) -> None:
        self.users = users
        self.roles = roles

    def ensure_baseline_roles(self) -> list[str]:
        """Create any missing baseline role. Returns the names created by this call."""
        created: list[str] = []
        for name in BASELINE_ROLES:
            if self.roles.exists_by_name(name.value):
                continue
            try:
                self.roles.save(Role(name=name.value))
            except UniqueViolation:
                logger.info("Role %s was created concurrently; leaving it as is", name.value)
                continue
            created.append(name.value)
        if created:
            logger.info("Created baseline roles: %s", ", ".join(created))
        return created

    def promote_to_admin(self, user_id: int) -> User:
        """Add ADMIN to the user's roles. Raises NotFound for an unknown user or missing ADMIN role."""
        admin = self.roles.find_by_name(RoleName.ADMIN.value)
        if admin is None:
            raise NotFound("Role", RoleName.ADMIN.value)
        user = self.users.find_by_id(user_id, for_update=True)
        if user is None:
            raise NotFound("User", user_id)
        if admin in user.roles:
            logger.info("User id=%s already holds %s", user_id, admin.name)
            return user
        user.roles.add(admin)
        self.users.save(user)
        logger.info("Promoted user id=%s to %s", user_id, admin.name)
        return user
