"""Shared exception classes for the proverbs store.

The API layer maps these onto HTTP status codes:
- ValidationError -> 400
- NotFoundError -> 404
- StoreError -> 500
- DatabaseNotConfiguredError -> 503
"""


class SharedError(Exception):
    """Base exception for shared utilities."""

    pass


class ConfigurationError(SharedError):
    """Raised when configuration is invalid or missing."""

    pass


class DatabaseNotConfiguredError(SharedError):
    """Raised when database connection is not configured.

    API layer should map this to 503 Service Unavailable.
    """

    pass


class ValidationError(SharedError):
    """Raised when caller-supplied input is malformed.

    Never retried; raised before any store call so there is no partial effect.
    """

    pass


class NotFoundError(SharedError):
    """Raised when an item id does not exist."""

    pass


class ProviderError(SharedError):
    """Raised when the embedding provider fails (timeout, rate limit, bad response)."""

    pass


class StoreError(SharedError):
    """Raised when the vector store fails (connection, transaction, constraint)."""

    pass


__all__ = [
    "SharedError",
    "ConfigurationError",
    "DatabaseNotConfiguredError",
    "ValidationError",
    "NotFoundError",
    "ProviderError",
    "StoreError",
]
