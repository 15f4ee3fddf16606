"""Client facade wiring the HTTP session, store and selection engine."""

from __future__ import annotations

import os
import random

import aiohttp

from .api import RestaurantApi
from .const import DEFAULT_API_URI, HISTORY_FILENAME, RESTAURANTS_FILENAME
from .exceptions import ValidationError
from .selection import SelectionEngine
from .storage import JsonDocument
from .store import RestaurantStore

_DEFAULT_TIMEOUT = aiohttp.ClientTimeout(total=30)


class Client:
    """Entry point owning the restaurant store and the selection engine."""

    def __init__(
        self,
        session: aiohttp.ClientSession | None = None,
        *,
        base_url: str,
        data_dir: str | os.PathLike[str],
        api_uri: str | None = DEFAULT_API_URI,
        timeout: aiohttp.ClientTimeout | None = None,
        retry_count: int = 0,
        rng: random.Random | None = None,
    ) -> None:
        if data_dir is None or not str(data_dir).strip():
            raise ValidationError("data_dir is required.")
        self._session = session
        self._owns_session = session is None
        self._base_url = base_url
        self._api_uri = api_uri
        self._timeout = timeout or _DEFAULT_TIMEOUT
        self._retry_count = max(0, retry_count)
        self._data_dir = os.fspath(data_dir)
        self._rng = rng
        self._store: RestaurantStore | None = None
        self._engine: SelectionEngine | None = None

    async def __aenter__(self) -> Client:
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_session and self._session is not None:
            await self._session.close()
            self._session = None
            # The store's API client is bound to the closed session.
            self._store = None
            self._engine = None

    @property
    def store(self) -> RestaurantStore:
        if self._store is None:
            api = RestaurantApi(
                self._ensure_session(),
                base_url=self._base_url,
                api_uri=self._api_uri,
                timeout=self._timeout,
                retry_count=self._retry_count,
            )
            self._store = RestaurantStore(
                api,
                JsonDocument(os.path.join(self._data_dir, RESTAURANTS_FILENAME)),
                JsonDocument(os.path.join(self._data_dir, HISTORY_FILENAME)),
            )
        return self._store

    @property
    def engine(self) -> SelectionEngine:
        if self._engine is None:
            self._engine = SelectionEngine(self.store, rng=self._rng)
        return self._engine

    def _ensure_session(self) -> aiohttp.ClientSession:
        if self._session is None:
            self._session = aiohttp.ClientSession(timeout=self._timeout)
        return self._session
