"""pydrawlots package."""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

from .api import RestaurantApi
from .client import Client
from .exceptions import (
    DrawLotsError,
    MalformedLocalDataError,
    NetworkError,
    RemoteDataError,
    RemoteError,
    RemoteRejectedError,
    StorageError,
    ValidationError,
)
from .models import HistoryRecord, OpeningHours, Restaurant, Selection
from .selection import SelectionEngine, choose_restaurant, tier_distribution, tier_for_draw
from .storage import JsonDocument
from .store import RestaurantStore

try:
    __version__ = version("pydrawlots")
except PackageNotFoundError:  # pragma: no cover - not installed
    __version__ = "0.0.0"

__all__ = [
    "Client",
    "DrawLotsError",
    "HistoryRecord",
    "JsonDocument",
    "MalformedLocalDataError",
    "NetworkError",
    "OpeningHours",
    "RemoteDataError",
    "RemoteError",
    "RemoteRejectedError",
    "Restaurant",
    "RestaurantApi",
    "RestaurantStore",
    "Selection",
    "SelectionEngine",
    "StorageError",
    "ValidationError",
    "__version__",
    "choose_restaurant",
    "tier_distribution",
    "tier_for_draw",
]
