"""Conversion between wire JSON and the public models.

The remote service and the local documents share one camelCase layout, so
the same helpers serve both. Shape problems raise ``ValidationError``;
callers re-raise them as the error kind that fits their source.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from .exceptions import ValidationError
from .models import HistoryRecord, OpeningHours, Restaurant
from .util import ensure_utc_timestamp, validate_rating, validate_record_id

_OPTIONAL_TEXT_FIELDS = (
    ("name", "name"),
    ("address", "address"),
    ("phone", "phone"),
    ("createdAt", "created_at"),
)


def _require_text(item: dict[str, Any], key: str) -> str:
    value = item.get(key)
    if not isinstance(value, str):
        raise ValidationError(f"{key} must be a string.")
    return value


def _optional_text(item: dict[str, Any], key: str) -> str:
    value = item.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValidationError(f"{key} must be a string.")
    return value


def opening_hours_from_json(item: Any) -> OpeningHours:
    if not isinstance(item, dict):
        raise ValidationError("Opening hours entry must be an object.")
    entry_id = item.get("id")
    if isinstance(entry_id, bool) or not isinstance(entry_id, int):
        raise ValidationError("Opening hours id must be an integer.")
    return OpeningHours(
        id=entry_id,
        restaurant_id=validate_record_id(item.get("restaurantId"), "restaurantId"),
        day_of_week=_require_text(item, "dayOfWeek"),
        open_info=_require_text(item, "openInfo"),
    )


def opening_hours_to_json(entry: OpeningHours) -> dict[str, Any]:
    return {
        "id": entry.id,
        "restaurantId": entry.restaurant_id,
        "dayOfWeek": entry.day_of_week,
        "openInfo": entry.open_info,
    }


def restaurant_from_json(item: Any) -> Restaurant:
    if not isinstance(item, dict):
        raise ValidationError("Restaurant must be an object.")
    raw_hours = item.get("openingHours")
    if raw_hours is None:
        raw_hours = []
    if not isinstance(raw_hours, list):
        raise ValidationError("openingHours must be a list.")
    text_fields = {attr: _optional_text(item, key) for key, attr in _OPTIONAL_TEXT_FIELDS}
    return Restaurant(
        id=validate_record_id(item.get("id"), "Restaurant id"),
        maps_url=_require_text(item, "mapsUrl"),
        rating=validate_rating(item.get("rating")),
        opening_hours=tuple(opening_hours_from_json(entry) for entry in raw_hours),
        **text_fields,
    )


def restaurant_to_json(restaurant: Restaurant) -> dict[str, Any]:
    return {
        "id": restaurant.id,
        "mapsUrl": restaurant.maps_url,
        "rating": restaurant.rating,
        "name": restaurant.name,
        "address": restaurant.address,
        "phone": restaurant.phone,
        "createdAt": restaurant.created_at,
        "openingHours": [opening_hours_to_json(entry) for entry in restaurant.opening_hours],
    }


def restaurant_list_from_json(data: Any) -> list[Restaurant]:
    if not isinstance(data, list):
        raise ValidationError("Restaurant collection must be a list.")
    restaurants = [restaurant_from_json(item) for item in data]
    seen: set[int | str] = set()
    for restaurant in restaurants:
        if restaurant.id in seen:
            raise ValidationError(f"Duplicate restaurant id {restaurant.id!r}.")
        seen.add(restaurant.id)
    return restaurants


def restaurant_list_to_json(restaurants: Iterable[Restaurant]) -> list[dict[str, Any]]:
    return [restaurant_to_json(restaurant) for restaurant in restaurants]


def history_record_from_json(item: Any) -> HistoryRecord:
    if not isinstance(item, dict):
        raise ValidationError("History record must be an object.")
    return HistoryRecord(
        id=_require_text(item, "id"),
        restaurant=restaurant_from_json(item.get("restaurant")),
        selected_at=ensure_utc_timestamp(item.get("selectedAt")),
    )


def history_record_to_json(record: HistoryRecord) -> dict[str, Any]:
    return {
        "id": record.id,
        "restaurant": restaurant_to_json(record.restaurant),
        "selectedAt": record.selected_at,
    }


def history_from_json(data: Any) -> list[HistoryRecord]:
    if not isinstance(data, list):
        raise ValidationError("History must be a list.")
    return [history_record_from_json(item) for item in data]


def history_to_json(records: Iterable[HistoryRecord]) -> list[dict[str, Any]]:
    return [history_record_to_json(record) for record in records]
