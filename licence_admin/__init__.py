"""Client library for the licence applications admin backend."""

from .core.errors import ApiError, ApiRequestFailed, ConfigurationError
from .services.applications import ApplicationsService
from .services.http_client import ApiClient, FetchResult

__version__ = "0.1.0"

__all__ = [
    "ApiClient",
    "ApiError",
    "ApiRequestFailed",
    "ApplicationsService",
    "ConfigurationError",
    "FetchResult",
]
