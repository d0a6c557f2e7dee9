"""Custom exception hierarchy for health-data sources."""

from __future__ import annotations


class HealthSourceError(Exception):
    """Base exception for all health_source errors."""


class HealthSourceUnavailableError(HealthSourceError):
    """The source cannot be used at all (no credentials, no session)."""


class HealthSourcePermissionError(HealthSourceError):
    """Authorization was denied or failed (bad credentials, expired tokens, etc.)."""


class HealthSourceMFARequired(HealthSourcePermissionError):
    """Multi-factor authentication is required to complete login."""


class HealthSourceAPIError(HealthSourceError):
    """A source API call returned an error response."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class HealthSourceRateLimitError(HealthSourceAPIError):
    """HTTP 429 — too many requests."""

    def __init__(self, message: str = "Rate limited by health data source") -> None:
        super().__init__(message, status_code=429)
