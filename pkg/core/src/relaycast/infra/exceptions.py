"""
Custom exceptions for Relaycast operations.

Only configuration, destination and startup errors are raised to callers.
Process failures are absorbed by the retry watchdog and surface through
engine status and logs instead.
"""


class RelaycastError(Exception):
    """Base exception for all Relaycast errors."""

    pass


class ConfigurationError(RelaycastError, ValueError):
    """Raised when an engine configuration is malformed."""

    pass


class DestinationError(RelaycastError, ValueError):
    """Raised when a sink destination is constructed or updated with bad values."""

    pass


class StartupError(RelaycastError):
    """Raised when the engine cannot enter the streaming state."""

    pass


class PlaceholderMissingError(StartupError):
    """Raised when the placeholder media file does not exist."""

    pass


class CatalogError(RelaycastError):
    """Raised when a source catalog cannot be read."""

    pass
