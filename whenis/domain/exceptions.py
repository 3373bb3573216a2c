"""
Domain-specific exception hierarchy for the whenis application.
"""


class WhenisError(Exception):
    """Base class for all application-level errors."""


class InvalidConfigurationError(WhenisError, ValueError):
    """Raised when a configuration change would break a grid invariant."""


class UnknownParticipantError(WhenisError, ValueError):
    """Raised when a participant name or id cannot be resolved."""
