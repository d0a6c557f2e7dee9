"""Health-data sources — all workout/route/sample I/O lives here."""

from health_source.exceptions import (
    HealthSourceAPIError,
    HealthSourceError,
    HealthSourceMFARequired,
    HealthSourcePermissionError,
    HealthSourceRateLimitError,
    HealthSourceUnavailableError,
)
from health_source.base import HealthDataSource
from health_source.client import GarminHealthSource

__all__ = [
    "GarminHealthSource",
    "HealthDataSource",
    "HealthSourceAPIError",
    "HealthSourceError",
    "HealthSourceMFARequired",
    "HealthSourcePermissionError",
    "HealthSourceRateLimitError",
    "HealthSourceUnavailableError",
]
