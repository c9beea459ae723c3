"""Custom exceptions for story loading and transport."""


class DataError(Exception):
    """Base exception for the data layer."""


class SchemaError(DataError):
    """Raised when a story document is too malformed to load at all."""


class TransportError(DataError):
    """Raised when a story manifest or document cannot be fetched."""


class StorageError(DataError):
    """Raised when the key-value store cannot be read or written."""
