"""Authentication, registration and role provisioning services."""

from warden.services.authentication import CredentialAuthenticator
from warden.services.registration import RegistrationService
from warden.services.roles import RoleProvisioningService, RoleResolver, canonical_role

__all__ = [
    "CredentialAuthenticator",
    "RegistrationService",
    "RoleProvisioningService",
    "RoleResolver",
    "canonical_role",
]
