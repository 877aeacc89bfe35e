"""Storage service exceptions."""


class StorageError(Exception):
    """Base storage exception."""
    pass


class NotFoundError(StorageError):
    """File not found in storage."""
    pass


class ConfigurationError(StorageError):
    """Storage configuration error."""
    pass


class ValidationError(StorageError):
    """Key rejected before touching storage (traversal, nested path, ...)."""
    pass
