"""HTTP client for the remote restaurant collection."""

from __future__ import annotations

import logging
from typing import Any

import aiohttp

from .const import DEFAULT_API_URI, DEFAULT_HEADERS, RESTAURANTS_ENDPOINT
from .exceptions import (
    NetworkError,
    RemoteDataError,
    RemoteRejectedError,
    ValidationError,
)
from .mapping import restaurant_list_from_json
from .models import Restaurant
from .util import normalize_maps_url, validate_rating

_LOGGER = logging.getLogger(__name__)
_DEFAULT_TIMEOUT = aiohttp.ClientTimeout(total=30)


class RestaurantApi:
    """Thin client for ``GET``/``POST`` on the restaurant collection endpoint."""

    def __init__(
        self,
        session: aiohttp.ClientSession,
        *,
        base_url: str,
        api_uri: str | None = DEFAULT_API_URI,
        timeout: aiohttp.ClientTimeout | None = None,
        retry_count: int = 0,
    ) -> None:
        if session is None:
            raise ValidationError("Session is required.")
        self._session = session
        self._base_url = self._normalize_base_url(base_url)
        self._api_uri = self._normalize_api_uri(api_uri)
        self._timeout = timeout or _DEFAULT_TIMEOUT
        self._retry_count = max(0, retry_count)

    @property
    def restaurants_url(self) -> str:
        return self._build_url(RESTAURANTS_ENDPOINT)

    async def list_restaurants(self) -> list[Restaurant]:
        """Return the full restaurant collection."""
        _LOGGER.debug("list_restaurants started")
        data = await self._request_json("GET", RESTAURANTS_ENDPOINT)
        try:
            restaurants = restaurant_list_from_json(data)
        except ValidationError as exc:
            raise RemoteDataError(
                "Remote service returned an invalid restaurant collection.",
                detail=str(exc),
            ) from exc
        _LOGGER.debug("list_restaurants completed with %s restaurants", len(restaurants))
        return restaurants

    async def create_restaurant(self, maps_url: str, rating: int) -> None:
        """Ask the remote service to create a restaurant for a maps URL.

        The server derives name, address, phone and opening hours itself, so
        the response body is ignored and callers re-read the collection.
        """
        payload = {
            "mapsUrl": normalize_maps_url(maps_url),
            "rating": validate_rating(rating),
        }
        _LOGGER.debug("create_restaurant started for rating %s", payload["rating"])
        await self._request_text("POST", RESTAURANTS_ENDPOINT, json=payload)
        _LOGGER.debug("create_restaurant completed")

    def _build_url(self, path: str) -> str:
        if not isinstance(path, str) or not path:
            raise ValidationError("Path must be a non-empty string.")
        if path.startswith("http://") or path.startswith("https://"):
            raise ValidationError("Use relative paths when building requests.")
        normalized_path = path if path.startswith("/") else f"/{path}"
        return f"{self._base_url}{self._api_uri}{normalized_path}"

    async def _request_json(self, method: str, path: str, **kwargs: Any) -> Any:
        url = self._build_url(path)
        return await self._request(method, url, expect_json=True, **kwargs)

    async def _request_text(self, method: str, path: str, **kwargs: Any) -> str:
        url = self._build_url(path)
        return await self._request(method, url, expect_json=False, **kwargs)

    async def _request(self, method: str, url: str, *, expect_json: bool, **kwargs: Any) -> Any:
        # POST is never retried.
        retries = self._retry_count if method.upper() == "GET" else 0
        attempts = retries + 1
        headers = {**DEFAULT_HEADERS, **kwargs.pop("headers", {})}
        for attempt in range(attempts):
            try:
                async with self._session.request(
                    method,
                    url,
                    headers=headers,
                    timeout=self._timeout,
                    **kwargs,
                ) as response:
                    self._raise_for_status(response)
                    if expect_json:
                        try:
                            return await response.json(content_type=None)
                        except (aiohttp.ContentTypeError, ValueError) as exc:
                            raise RemoteDataError("Response did not contain valid JSON.") from exc
                    return await response.text()
            except (aiohttp.ClientError, TimeoutError) as exc:
                if attempt >= attempts - 1:
                    raise NetworkError("Network request failed.", detail=repr(exc)) from exc
                _LOGGER.debug("%s %s failed on attempt %s, retrying", method, url, attempt + 1)
        raise NetworkError("Network request failed.")

    def _raise_for_status(self, response: aiohttp.ClientResponse) -> None:
        if 200 <= response.status < 300:
            return
        raise RemoteRejectedError(
            f"Remote request failed with status {response.status}.",
            status=response.status,
        )

    def _normalize_base_url(self, base_url: str) -> str:
        if not isinstance(base_url, str) or not base_url.strip():
            raise ValidationError("base_url must be a non-empty string.")
        return base_url.strip().rstrip("/")

    def _normalize_api_uri(self, api_uri: str | None) -> str:
        if api_uri is None:
            return ""
        if not isinstance(api_uri, str):
            raise ValidationError("api_uri must be a string.")
        normalized = api_uri.strip().strip("/")
        if not normalized:
            return ""
        return f"/{normalized}"
