"""
Exceptions raised by the identity, scope and camp layers.
"""


class NotFound(ValueError):
    """The external ID matches neither the employee nor the manager directory."""


class InvalidLink(ValueError):
    """An auto-login link parameter could not be decoded."""


class CampValidationError(ValueError):
    """Camp or doctor input is missing or malformed."""


class OutOfScope(ValueError):
    """The requested doctor lies outside the caller's territory scope."""


class StoreError(Exception):
    """The relational store or the blob store rejected an operation."""
