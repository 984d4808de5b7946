"""Exceptions raised by access control administration (never by access checks)."""


class AccessControlError(Exception):
    """Base class for access control configuration errors."""


class InvalidCapabilitySet(AccessControlError, ValueError):
    """Raised when a capability mapping has unknown keys, non-bool values, or gaps."""


class DuplicateCustomRole(AccessControlError):
    """Raised when a custom role name is already taken."""


__all__ = ["AccessControlError", "InvalidCapabilitySet", "DuplicateCustomRole"]
