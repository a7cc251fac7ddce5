"""Warden: credential authentication, bearer tokens and role provisioning."""

__version__ = "0.1.0"
