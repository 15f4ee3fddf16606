"""Public data models."""

from __future__ import annotations

from dataclasses import dataclass, field

from .exceptions import ValidationError
from .util import validate_rating, validate_record_id


def _require_str(value: object, label: str) -> None:
    if not isinstance(value, str):
        raise ValidationError(f"{label} must be a string.")


@dataclass(frozen=True, slots=True)
class OpeningHours:
    id: int
    restaurant_id: int | str
    day_of_week: str
    open_info: str

    def __post_init__(self) -> None:
        if isinstance(self.id, bool) or not isinstance(self.id, int):
            raise ValidationError("Opening hours id must be an integer.")
        validate_record_id(self.restaurant_id, "restaurant_id")
        _require_str(self.day_of_week, "day_of_week")
        _require_str(self.open_info, "open_info")


@dataclass(frozen=True, slots=True)
class Restaurant:
    id: int | str
    maps_url: str
    rating: int
    name: str = ""
    address: str = ""
    phone: str = ""
    created_at: str = ""
    opening_hours: tuple[OpeningHours, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        validate_record_id(self.id, "Restaurant id")
        validate_rating(self.rating)
        _require_str(self.maps_url, "maps_url")
        for label in ("name", "address", "phone", "created_at"):
            _require_str(getattr(self, label), label)
        hours = tuple(self.opening_hours)
        if not all(isinstance(entry, OpeningHours) for entry in hours):
            raise ValidationError("opening_hours must contain OpeningHours entries.")
        object.__setattr__(self, "opening_hours", hours)


@dataclass(frozen=True, slots=True)
class HistoryRecord:
    id: str
    restaurant: Restaurant
    selected_at: str

    def __post_init__(self) -> None:
        _require_str(self.id, "History record id")
        validate_record_id(self.id, "History record id")
        if not isinstance(self.restaurant, Restaurant):
            raise ValidationError("History record restaurant must be a Restaurant.")
        _require_str(self.selected_at, "selected_at")


@dataclass(frozen=True, slots=True)
class Selection:
    restaurant: Restaurant
    record: HistoryRecord
    draw: int
    target_tier: int

    @property
    def selected_at(self) -> str:
        return self.record.selected_at

    @property
    def fell_back(self) -> bool:
        """True when no restaurant matched the target tier."""
        return self.restaurant.rating != self.target_tier
