"""Unit tests for the in-memory snapshot cache."""

from __future__ import annotations

import json
import threading

import pytest

from app.schemas import LastMeasurement, SensorIcon, SensorReading, StationSnapshot
from datastore.snapshot_cache import InMemorySnapshotCache


class FakeClock:
    def __init__(self, now: float = 1_700_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


def _sample_snapshot(location: str = "Rooftop") -> StationSnapshot:
    return StationSnapshot(
        current_location=location,
        last_measurement_at="2024-01-01T00:00:00Z",
        sensors=[
            SensorReading(
                name="Temperature",
                unit="°C",
                icon=SensorIcon.thermometer,
                last_measurement=LastMeasurement(value="21.5", timestamp="2024-01-01T00:00:00Z"),
            ),
            SensorReading(name="PM10", unit="µg/m³"),
        ],
    )


def test_set_and_get_returns_equal_copy() -> None:
    cache = InMemorySnapshotCache(clock=FakeClock())
    original = _sample_snapshot()

    cache.set("opensensemap_data_abc", original, ttl=300)
    fetched = cache.get("opensensemap_data_abc")

    assert fetched is not None
    assert fetched == original
    assert fetched is not original


def test_get_returns_none_when_missing() -> None:
    cache = InMemorySnapshotCache(clock=FakeClock())

    assert cache.get("opensensemap_data_missing") is None


def test_entries_expire_lazily_at_ttl() -> None:
    clock = FakeClock()
    cache = InMemorySnapshotCache(clock=clock)
    cache.set("key", _sample_snapshot(), ttl=300)

    clock.now += 299.9
    assert cache.get("key") is not None
    assert len(cache) == 1

    clock.now += 0.1
    assert cache.get("key") is None
    assert len(cache) == 0


def test_set_overwrites_and_resets_expiry() -> None:
    clock = FakeClock()
    cache = InMemorySnapshotCache(clock=clock)
    cache.set("key", _sample_snapshot("Old"), ttl=300)

    clock.now += 200
    cache.set("key", _sample_snapshot("New"), ttl=300)
    clock.now += 200

    fetched = cache.get("key")
    assert fetched is not None
    assert fetched.current_location == "New"


def test_set_drops_expired_entries_for_other_stations() -> None:
    clock = FakeClock()
    cache = InMemorySnapshotCache(clock=clock)
    cache.set("stale", _sample_snapshot(), ttl=10)
    cache.set("fresh", _sample_snapshot(), ttl=300)

    clock.now += 60
    cache.set("new", _sample_snapshot("New"), ttl=300)

    assert len(cache) == 2
    assert cache.get("fresh") is not None
    assert cache.get("new") is not None


def test_set_drops_expired_entries_from_persistence_file(tmp_path) -> None:
    path = tmp_path / "snapshots.json"
    clock = FakeClock()
    cache = InMemorySnapshotCache(persistence_path=path, clock=clock)
    cache.set("stale", _sample_snapshot(), ttl=10)

    clock.now += 60
    cache.set("fresh", _sample_snapshot(), ttl=300)

    assert sorted(json.loads(path.read_text())) == ["fresh"]


def test_persists_to_disk_and_reloads_live_entries(tmp_path) -> None:
    path = tmp_path / "cache" / "snapshots.json"
    clock = FakeClock()
    cache = InMemorySnapshotCache(persistence_path=path, clock=clock)
    cache.set("live", _sample_snapshot(), ttl=300)
    cache.set("short", _sample_snapshot("Short"), ttl=5)

    payload = json.loads(path.read_text())
    assert payload["live"]["value"]["currentLocation"] == "Rooftop"
    assert payload["live"]["expires_at"] == clock.now + 300

    clock.now += 10
    reloaded = InMemorySnapshotCache(persistence_path=path, clock=clock)

    assert reloaded.get("live") == _sample_snapshot()
    assert reloaded.get("short") is None
    assert len(reloaded) == 1


def test_unreadable_persistence_file_starts_empty(tmp_path) -> None:
    path = tmp_path / "snapshots.json"
    path.write_text("{not json")

    cache = InMemorySnapshotCache(persistence_path=path, clock=FakeClock())

    assert len(cache) == 0


def test_concurrent_writers_leave_consistent_entries() -> None:
    cache = InMemorySnapshotCache(clock=FakeClock())
    barrier = threading.Barrier(8)

    def writer(index: int) -> None:
        barrier.wait(timeout=5)
        for _ in range(50):
            cache.set("shared", _sample_snapshot(f"writer-{index}"), ttl=300)
            assert cache.get("shared") is not None

    threads = [threading.Thread(target=writer, args=(index,)) for index in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    final = cache.get("shared")
    assert final is not None
    assert final.current_location.startswith("writer-")
    assert len(final.sensors) == 2


@pytest.mark.parametrize("content", ["[]", '"snapshots"', "null"])
def test_wrong_shaped_persistence_file_starts_empty(tmp_path, content: str) -> None:
    path = tmp_path / "snapshots.json"
    path.write_text(content)

    cache = InMemorySnapshotCache(persistence_path=path, clock=FakeClock())

    assert len(cache) == 0


def test_malformed_entries_are_skipped_on_load(tmp_path) -> None:
    path = tmp_path / "snapshots.json"
    clock = FakeClock()
    good = {
        "expires_at": clock.now + 300,
        "value": _sample_snapshot().model_dump(mode="json", by_alias=True),
    }
    path.write_text(
        json.dumps(
            {
                "good": good,
                "no_expiry": {"value": good["value"]},
                "bad_expiry": {"expires_at": None, "value": good["value"]},
                "old_schema": {"expires_at": clock.now + 300, "value": {"sensors": "oops"}},
                "not_an_object": ["x"],
            }
        )
    )

    cache = InMemorySnapshotCache(persistence_path=path, clock=clock)

    assert len(cache) == 1
    assert cache.get("good") == _sample_snapshot()
