"""Shared utilities for validation and normalization."""

from __future__ import annotations

from datetime import UTC, datetime
from urllib.parse import urlsplit

from .const import TIERS
from .exceptions import ValidationError


def validate_rating(rating: int) -> int:
    # bool is an int subclass; True must not pass as tier 1.
    if isinstance(rating, bool) or not isinstance(rating, int):
        raise ValidationError("Rating must be an integer.")
    if rating not in TIERS:
        raise ValidationError(f"Rating must be one of {', '.join(str(t) for t in TIERS)}.")
    return rating


def validate_record_id(value: int | str, label: str) -> int | str:
    """Accept an integer or a non-blank string id, kept exactly as given."""
    if isinstance(value, bool):
        raise ValidationError(f"{label} must be an integer or a string.")
    if isinstance(value, int):
        return value
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{label} must be an integer or a non-empty string.")
    if value != value.strip():
        raise ValidationError(f"{label} must not have surrounding whitespace.")
    return value


def normalize_maps_url(maps_url: str) -> str:
    if not isinstance(maps_url, str):
        raise ValidationError("Maps URL must be a string.")
    normalized = maps_url.strip()
    if not normalized:
        raise ValidationError("Maps URL is empty.")
    parts = urlsplit(normalized)
    if parts.scheme not in ("http", "https") or not parts.netloc:
        raise ValidationError("Maps URL must be an absolute http(s) URL.")
    return normalized


def require_id(value: str, label: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{label} must be a non-empty string.")
    return value.strip()


def parse_timestamp(value: str) -> datetime:
    if not isinstance(value, str) or not value:
        raise ValidationError("Timestamp must be a non-empty string.")
    raw = value.strip()
    if raw.endswith("Z"):
        raw = f"{raw[:-1]}+00:00"
    try:
        parsed = datetime.fromisoformat(raw)
    except ValueError as exc:
        raise ValidationError("Timestamp is not a valid ISO 8601 value.") from exc
    if parsed.tzinfo is None:
        raise ValidationError("Timestamp must include timezone information.")
    return parsed.astimezone(UTC)


def format_utc_timestamp(value: datetime) -> str:
    if value.tzinfo is None:
        raise ValidationError("Timestamp must include timezone information.")
    normalized = value.astimezone(UTC).replace(microsecond=0)
    return normalized.isoformat().replace("+00:00", "Z")


def ensure_utc_timestamp(value: str) -> str:
    return format_utc_timestamp(parse_timestamp(value))


def utc_now_timestamp() -> str:
    return format_utc_timestamp(datetime.now(UTC))
