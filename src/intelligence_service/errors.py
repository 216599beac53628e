"""Exception types raised by the intelligence service."""


class IntelligenceError(Exception):
    """Base exception for the project."""

    status_code = 500


class NotFoundError(IntelligenceError):
    """Raised when a run identifier is unknown."""

    status_code = 404


class StorageError(IntelligenceError):
    """Raised when a run cannot be persisted or read back. Safe to retry."""

    status_code = 503


class UpstreamUnavailable(IntelligenceError):
    """Raised when the catalog service cannot supply a complete snapshot."""

    status_code = 502
