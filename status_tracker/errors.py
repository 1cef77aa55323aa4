"""
Exceptions raised by the tracker.

Startup problems are ConfigError and stop the whole run.
Everything else is scoped to a single app and is caught by the tracker loop.
"""


class StatusTrackerError(Exception):
    """Base class for every error this package raises."""


class ConfigError(StatusTrackerError):
    """Missing credentials or a missing/empty/invalid apps.json."""


class FetchError(StatusTrackerError):
    """Could not get the current version status for an app."""


class UnauthorizedError(FetchError):
    """HTTP 401: the token has expired or the API key is invalid."""


class AppNotFoundError(FetchError):
    """HTTP 404: App Store Connect does not know this app id."""


class NoVersionFoundError(FetchError):
    """The response had no version record for the iOS platform."""


class DeliveryError(StatusTrackerError):
    """The webhook POST failed."""
