"""Restaurant store: remote collection, local mirror and selection history."""

from __future__ import annotations

import asyncio
import logging
import uuid
from collections.abc import Callable, Sequence
from typing import Any

from .api import RestaurantApi
from .exceptions import DrawLotsError, MalformedLocalDataError, StorageError, ValidationError
from .mapping import (
    history_from_json,
    history_to_json,
    restaurant_list_from_json,
    restaurant_from_json,
    restaurant_list_to_json,
    restaurant_to_json,
)
from .models import HistoryRecord, Restaurant
from .storage import JsonDocument
from .util import normalize_maps_url, require_id, utc_now_timestamp, validate_rating

_LOGGER = logging.getLogger(__name__)


class RestaurantStore:
    """Holds the restaurant list and the history log and keeps them on disk.

    All mutations run under one lock so that concurrent refreshes cannot
    overwrite newer data with an older response.
    """

    def __init__(
        self,
        api: RestaurantApi,
        restaurants_document: JsonDocument,
        history_document: JsonDocument,
        *,
        clock: Callable[[], str] = utc_now_timestamp,
        id_factory: Callable[[], str] | None = None,
    ) -> None:
        self._api = api
        self._restaurants_document = restaurants_document
        self._history_document = history_document
        self._clock = clock
        self._id_factory = id_factory or (lambda: str(uuid.uuid4()))
        self._restaurants: list[Restaurant] = []
        self._history: list[HistoryRecord] = []
        self._lock = asyncio.Lock()
        self.last_error: DrawLotsError | None = None

    @property
    def restaurants(self) -> tuple[Restaurant, ...]:
        return tuple(self._restaurants)

    @property
    def history(self) -> tuple[HistoryRecord, ...]:
        """History in insertion order."""
        return tuple(self._history)

    def history_newest_first(self) -> list[HistoryRecord]:
        return sorted(self._history, key=lambda record: record.selected_at, reverse=True)

    def get_history_record(self, record_id: str) -> HistoryRecord | None:
        for record in self._history:
            if record.id == record_id:
                return record
        return None

    async def load_local(self) -> list[MalformedLocalDataError]:
        """Load both local documents, resetting any bad one to empty.

        Returns the problems found; they are warnings, never raised.
        """
        async with self._lock:
            issues: list[MalformedLocalDataError] = []
            restaurants = await self._load_document(
                self._restaurants_document, restaurant_list_from_json, issues
            )
            history = await self._load_document(self._history_document, history_from_json, issues)
            self._restaurants = restaurants
            self._history = self._drop_duplicate_records(history, issues)
            if issues:
                self.last_error = issues[-1]
            _LOGGER.debug(
                "Loaded %s restaurants and %s history records",
                len(self._restaurants),
                len(self._history),
            )
            return issues

    async def refresh_from_remote(self) -> tuple[Restaurant, ...]:
        """Replace the restaurant list with the remote collection and mirror it.

        On any network or decode failure the list and the mirror stay as they
        were and the error is raised.
        """
        async with self._lock:
            try:
                restaurants = await self._api.list_restaurants()
            except DrawLotsError as exc:
                self.last_error = exc
                _LOGGER.debug("Refresh failed: %s", exc)
                raise
            self._restaurants = restaurants
            await self._persist(self._restaurants_document, restaurant_list_to_json(restaurants))
            return tuple(self._restaurants)

    async def add_restaurant(self, maps_url: str, rating: int) -> tuple[Restaurant, ...]:
        """Create a restaurant remotely, then refresh to pick up server fields."""
        normalized_url = normalize_maps_url(maps_url)
        tier = validate_rating(rating)
        try:
            await self._api.create_restaurant(normalized_url, tier)
        except DrawLotsError as exc:
            self.last_error = exc
            raise
        return await self.refresh_from_remote()

    async def record_selection(self, restaurant: Restaurant) -> HistoryRecord:
        if not isinstance(restaurant, Restaurant):
            raise ValidationError("restaurant must be a Restaurant.")
        # Every stored record must decode again on the next load_local().
        restaurant_from_json(restaurant_to_json(restaurant))
        async with self._lock:
            record_id = self._id_factory()
            while any(existing.id == record_id for existing in self._history):
                record_id = self._id_factory()
            record = HistoryRecord(id=record_id, restaurant=restaurant, selected_at=self._clock())
            self._history.append(record)
            await self._persist(self._history_document, history_to_json(self._history))
            return record

    async def delete_history(self, record_id: str) -> bool:
        """Remove one history record; returns False when the id is unknown."""
        record_id = require_id(record_id, "record_id")
        async with self._lock:
            remaining = [record for record in self._history if record.id != record_id]
            if len(remaining) == len(self._history):
                return False
            self._history = remaining
            await self._persist(self._history_document, history_to_json(self._history))
            return True

    async def clear_history(self) -> None:
        async with self._lock:
            self._history = []
            await self._persist(self._history_document, [])

    async def _load_document(
        self,
        document: JsonDocument,
        parse: Callable[[Any], list[Any]],
        issues: list[MalformedLocalDataError],
    ) -> list[Any]:
        try:
            return parse(await document.aread())
        except MalformedLocalDataError as exc:
            issue = exc
        except ValidationError as exc:
            issue = MalformedLocalDataError(
                f"{document.path.name} has invalid content.",
                detail=str(exc),
            )
            issue.__cause__ = exc
        if issue.error_code == "local_data_missing":
            _LOGGER.debug("%s", issue)
        else:
            _LOGGER.warning("Resetting local data: %s", issue.detail)
        issues.append(issue)
        return []

    def _drop_duplicate_records(
        self,
        records: Sequence[HistoryRecord],
        issues: list[MalformedLocalDataError],
    ) -> list[HistoryRecord]:
        seen: set[str] = set()
        unique: list[HistoryRecord] = []
        for record in records:
            if record.id in seen:
                continue
            seen.add(record.id)
            unique.append(record)
        dropped = len(records) - len(unique)
        if dropped:
            _LOGGER.warning("Dropped %s duplicate history records", dropped)
            issues.append(
                MalformedLocalDataError(
                    f"{self._history_document.path.name} contained {dropped} duplicate ids.",
                    error_code="duplicate_history_ids",
                )
            )
        return unique

    async def _persist(self, document: JsonDocument, data: Any) -> None:
        try:
            await document.awrite(data)
        except StorageError as exc:
            self.last_error = exc
            _LOGGER.warning("Could not persist %s: %s", document.path.name, exc)
            raise
