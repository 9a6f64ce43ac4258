"""Errors raised by the departure resolution core.

The transport layer maps these to status codes; nothing here is swallowed.
"""


class TransitDeparturesError(Exception):
    """Base exception for departure resolution failures."""


class FeedFetchError(TransitDeparturesError):
    """Raised when a static or realtime feed cannot be downloaded."""

    def __init__(self, url: str, reason: str, status_code: int | None = None) -> None:
        self.url = url
        self.status_code = status_code
        super().__init__(f"Failed to download {url}: {reason}")


class FeedParseError(TransitDeparturesError):
    """Raised when the static archive is corrupt or misses a required table."""


class RealtimeFeedError(TransitDeparturesError):
    """Raised when a realtime payload cannot be decoded."""


class ExternalProviderError(TransitDeparturesError):
    """Raised when the external scheduling provider fails."""


class MissingCoordinatesError(ExternalProviderError):
    """Raised when a stop has no coordinates for the provider's spatial lookup."""


class LogicalStopNotFoundError(ExternalProviderError):
    """Raised when no provider logical stop can be resolved for a stop."""
