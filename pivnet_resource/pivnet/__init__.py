"""Pivotal Network release-service client."""

from .client import MockPivnetClient, PivnetAPIClient, PivnetClient
from .http import MockTransport, PivnetError, Transport, UrllibTransport
from .models import ProductFile, Release, ReleaseDependency

__all__ = [
    "MockPivnetClient",
    "PivnetAPIClient",
    "PivnetClient",
    "MockTransport",
    "PivnetError",
    "Transport",
    "UrllibTransport",
    "ProductFile",
    "Release",
    "ReleaseDependency",
]
