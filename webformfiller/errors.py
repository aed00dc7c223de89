"""Exception types raised by webformfiller."""


class FormFillerError(Exception):
    """Base exception for webformfiller errors."""
    pass


class SemanticMatchError(FormFillerError):
    """Raised when the semantic matching service fails or replies with an unusable payload."""
    pass


class StorageError(FormFillerError):
    """Base exception for storage-related errors."""
    pass


__all__ = ["FormFillerError", "SemanticMatchError", "StorageError"]
