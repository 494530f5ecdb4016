"""Check, in and out operations."""

from .check import CheckService
from .fetch import FetchService
from .publish import PublishService

__all__ = ["CheckService", "FetchService", "PublishService"]
