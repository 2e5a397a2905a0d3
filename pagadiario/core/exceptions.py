class SanitizationError(ValueError):
    """Raised when a free-text value fails its allow-list check."""


class AccessDeniedError(Exception):
    """Raised when a role does not satisfy the required role."""
