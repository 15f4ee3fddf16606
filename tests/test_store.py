from __future__ import annotations

import asyncio
import itertools
import json
from pathlib import Path

import pytest

from pydrawlots.exceptions import (
    DrawLotsError,
    MalformedLocalDataError,
    NetworkError,
    RemoteDataError,
    RemoteRejectedError,
    StorageError,
    ValidationError,
)
from pydrawlots.mapping import restaurant_list_to_json
from pydrawlots.models import Restaurant
from pydrawlots.storage import JsonDocument
from pydrawlots.store import RestaurantStore

RESTAURANTS = [
    Restaurant(id=1, maps_url="https://maps.app.goo.gl/1", rating=1, name="One"),
    Restaurant(id=2, maps_url="https://maps.app.goo.gl/2", rating=2, name="Two"),
    Restaurant(id=3, maps_url="https://maps.app.goo.gl/3", rating=3, name="Three"),
]


class _FakeApi:
    def __init__(self, results: list[object] | None = None) -> None:
        self._results = list(results or [])
        self.created: list[tuple[str, int]] = []
        self.create_error: Exception | None = None
        self.list_calls = 0

    async def list_restaurants(self) -> list[Restaurant]:
        self.list_calls += 1
        result = self._results.pop(0)
        if isinstance(result, Exception):
            raise result
        return list(result)

    async def create_restaurant(self, maps_url: str, rating: int) -> None:
        if self.create_error is not None:
            raise self.create_error
        self.created.append((maps_url, rating))


def _clock() -> str:
    return "2024-12-18T04:00:00Z"


def _store(tmp_path: Path, api: _FakeApi | None = None, **kwargs) -> RestaurantStore:
    return RestaurantStore(
        api or _FakeApi(),  # type: ignore[arg-type]
        JsonDocument(tmp_path / "restaurants.json"),
        JsonDocument(tmp_path / "history.json"),
        clock=kwargs.pop("clock", _clock),
        **kwargs,
    )


def _read(path: Path) -> object:
    return json.loads(path.read_text(encoding="utf-8"))


@pytest.mark.asyncio
async def test_load_local_reports_missing_documents(tmp_path: Path) -> None:
    store = _store(tmp_path)
    issues = await store.load_local()
    assert store.restaurants == ()
    assert store.history == ()
    assert [issue.error_code for issue in issues] == ["local_data_missing", "local_data_missing"]


@pytest.mark.asyncio
async def test_load_local_resets_corrupt_documents(tmp_path: Path) -> None:
    (tmp_path / "restaurants.json").write_text("not json", encoding="utf-8")
    (tmp_path / "history.json").write_text('[{"id": "x"}]', encoding="utf-8")
    store = _store(tmp_path)
    issues = await store.load_local()
    assert store.restaurants == ()
    assert store.history == ()
    assert len(issues) == 2
    assert all(isinstance(issue, MalformedLocalDataError) for issue in issues)
    assert store.last_error is issues[-1]


@pytest.mark.asyncio
async def test_load_local_rejects_invalid_tier(tmp_path: Path) -> None:
    data = restaurant_list_to_json(RESTAURANTS)
    data[0]["rating"] = 7
    (tmp_path / "restaurants.json").write_text(json.dumps(data), encoding="utf-8")
    store = _store(tmp_path)
    issues = await store.load_local()
    assert store.restaurants == ()
    assert issues[0].error_code == "malformed_local_data"


@pytest.mark.asyncio
async def test_load_local_reads_mirror(tmp_path: Path) -> None:
    JsonDocument(tmp_path / "restaurants.json").write(restaurant_list_to_json(RESTAURANTS))
    store = _store(tmp_path)
    issues = await store.load_local()
    assert store.restaurants == tuple(RESTAURANTS)
    assert [issue.error_code for issue in issues] == ["local_data_missing"]


@pytest.mark.asyncio
async def test_refresh_replaces_and_mirrors(tmp_path: Path) -> None:
    api = _FakeApi([RESTAURANTS[:1], RESTAURANTS])
    store = _store(tmp_path, api)
    await store.refresh_from_remote()
    assert store.restaurants == (RESTAURANTS[0],)
    result = await store.refresh_from_remote()
    assert result == tuple(RESTAURANTS)
    assert _read(tmp_path / "restaurants.json") == restaurant_list_to_json(RESTAURANTS)


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "error",
    [
        NetworkError("down"),
        RemoteRejectedError("unavailable", status=503),
        RemoteDataError("invalid collection"),
    ],
)
async def test_failed_refresh_leaves_state_untouched(
    tmp_path: Path, error: DrawLotsError
) -> None:
    JsonDocument(tmp_path / "restaurants.json").write(restaurant_list_to_json(RESTAURANTS))
    api = _FakeApi([error])
    store = _store(tmp_path, api)
    await store.load_local()
    before_disk = (tmp_path / "restaurants.json").read_text(encoding="utf-8")

    with pytest.raises(type(error)):
        await store.refresh_from_remote()

    assert store.restaurants == tuple(RESTAURANTS)
    assert (tmp_path / "restaurants.json").read_text(encoding="utf-8") == before_disk
    assert store.last_error is error
    assert api.list_calls == 1


@pytest.mark.asyncio
async def test_add_restaurant_refreshes(tmp_path: Path) -> None:
    api = _FakeApi([RESTAURANTS])
    store = _store(tmp_path, api)
    result = await store.add_restaurant(" https://maps.app.goo.gl/3 ", 3)
    assert api.created == [("https://maps.app.goo.gl/3", 3)]
    assert result == tuple(RESTAURANTS)
    assert store.restaurants == tuple(RESTAURANTS)


@pytest.mark.asyncio
async def test_add_restaurant_failure_mutates_nothing(tmp_path: Path) -> None:
    api = _FakeApi([])
    api.create_error = RemoteRejectedError("nope", status=400)
    store = _store(tmp_path, api)
    with pytest.raises(RemoteRejectedError):
        await store.add_restaurant("https://maps.app.goo.gl/3", 3)
    assert api.list_calls == 0
    assert store.restaurants == ()
    assert not (tmp_path / "restaurants.json").exists()


@pytest.mark.asyncio
async def test_add_restaurant_rejects_bad_tier(tmp_path: Path) -> None:
    api = _FakeApi([])
    store = _store(tmp_path, api)
    with pytest.raises(ValidationError):
        await store.add_restaurant("https://maps.app.goo.gl/3", 0)
    assert api.created == []


@pytest.mark.asyncio
async def test_record_selection_round_trip(tmp_path: Path) -> None:
    store = _store(tmp_path)
    first = await store.record_selection(RESTAURANTS[1])
    second = await store.record_selection(RESTAURANTS[1])
    assert first.id != second.id
    assert first.selected_at == "2024-12-18T04:00:00Z"

    reloaded = _store(tmp_path)
    await reloaded.load_local()
    assert reloaded.history == (first, second)
    assert reloaded.history[0].restaurant == RESTAURANTS[1]


@pytest.mark.asyncio
async def test_record_selection_skips_colliding_ids(tmp_path: Path) -> None:
    ids = iter(["a", "a", "b"])
    store = _store(tmp_path, id_factory=lambda: next(ids))
    await store.record_selection(RESTAURANTS[0])
    record = await store.record_selection(RESTAURANTS[0])
    assert record.id == "b"


@pytest.mark.asyncio
async def test_load_local_drops_duplicate_history_ids(tmp_path: Path) -> None:
    store = _store(tmp_path, id_factory=itertools.repeat("dup").__next__)
    record = await store.record_selection(RESTAURANTS[0])
    data = _read(tmp_path / "history.json")
    (tmp_path / "history.json").write_text(json.dumps(data + data), encoding="utf-8")

    reloaded = _store(tmp_path)
    issues = await reloaded.load_local()
    assert reloaded.history == (record,)
    assert "duplicate_history_ids" in [issue.error_code for issue in issues]


@pytest.mark.asyncio
async def test_delete_history_keeps_order(tmp_path: Path) -> None:
    ids = iter(["a", "b", "c"])
    store = _store(tmp_path, id_factory=lambda: next(ids))
    for restaurant in RESTAURANTS:
        await store.record_selection(restaurant)

    assert await store.delete_history("b") is True
    assert [record.id for record in store.history] == ["a", "c"]
    assert [item["id"] for item in _read(tmp_path / "history.json")] == ["a", "c"]

    assert await store.delete_history("missing") is False
    assert [record.id for record in store.history] == ["a", "c"]


@pytest.mark.asyncio
async def test_clear_history(tmp_path: Path) -> None:
    store = _store(tmp_path)
    await store.record_selection(RESTAURANTS[0])
    await store.clear_history()
    assert store.history == ()
    assert _read(tmp_path / "history.json") == []


@pytest.mark.asyncio
async def test_history_newest_first(tmp_path: Path) -> None:
    stamps = iter(["2024-12-18T04:00:00Z", "2024-12-19T04:00:00Z"])
    store = _store(tmp_path, clock=lambda: next(stamps))
    older = await store.record_selection(RESTAURANTS[0])
    newer = await store.record_selection(RESTAURANTS[1])
    assert store.history_newest_first() == [newer, older]
    assert store.get_history_record(older.id) == older
    assert store.get_history_record("missing") is None


@pytest.mark.asyncio
async def test_failed_history_write_keeps_memory(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    store = _store(tmp_path)

    async def _fail(data):
        raise StorageError("disk full")

    monkeypatch.setattr(store._history_document, "awrite", _fail)
    with pytest.raises(StorageError):
        await store.record_selection(RESTAURANTS[0])
    assert len(store.history) == 1
    assert isinstance(store.last_error, StorageError)


@pytest.mark.asyncio
async def test_concurrent_refreshes_are_serialized(tmp_path: Path) -> None:
    order: list[str] = []

    class _SlowApi(_FakeApi):
        async def list_restaurants(self) -> list[Restaurant]:
            call = self.list_calls
            self.list_calls += 1
            order.append(f"start{call}")
            await asyncio.sleep(0.01 if call == 0 else 0)
            order.append(f"end{call}")
            return RESTAURANTS[: call + 1]

    store = _store(tmp_path, _SlowApi())
    await asyncio.gather(store.refresh_from_remote(), store.refresh_from_remote())
    assert order == ["start0", "end0", "start1", "end1"]
    assert store.restaurants == tuple(RESTAURANTS[:2])


@pytest.mark.asyncio
async def test_record_selection_refuses_record_that_would_not_reload(tmp_path: Path) -> None:
    ids = iter(["a", "b", "c"])
    store = _store(tmp_path, id_factory=lambda: next(ids))
    await store.record_selection(RESTAURANTS[0])
    await store.record_selection(RESTAURANTS[1])
    broken = Restaurant(id=2, maps_url="https://maps.app.goo.gl/2", rating=2)
    object.__setattr__(broken, "rating", 7)

    with pytest.raises(ValidationError):
        await store.record_selection(broken)

    assert [record.id for record in store.history] == ["a", "b"]
    reloaded = _store(tmp_path)
    issues = await reloaded.load_local()
    assert [record.id for record in reloaded.history] == ["a", "b"]
    assert [issue.error_code for issue in issues] == ["local_data_missing"]


@pytest.mark.asyncio
async def test_record_selection_rejects_non_restaurant(tmp_path: Path) -> None:
    store = _store(tmp_path)
    with pytest.raises(ValidationError):
        await store.record_selection({"id": 1, "rating": 1})  # type: ignore[arg-type]
    assert store.history == ()
    assert not (tmp_path / "history.json").exists()


@pytest.mark.asyncio
async def test_history_with_scheme_less_maps_url_reloads(tmp_path: Path) -> None:
    store = _store(tmp_path)
    restaurant = Restaurant(id="r-1", maps_url="maps.app.goo.gl/b", rating=3)
    record = await store.record_selection(restaurant)

    reloaded = _store(tmp_path)
    await reloaded.load_local()
    assert reloaded.history == (record,)
