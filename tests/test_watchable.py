
# tests/test_watchable.py
"""
Tests for WatchableCollection polling and change detection.
"""
from __future__ import annotations
import asyncio
from typing import Any, List

import pytest

from robotevents.errors import InvalidArgumentError, PollError, RobotEventsError
from robotevents.watchable import WatchableCollection

A = {"id": 1, "name": "A"}
B = {"id": 2, "name": "B"}
C = {"id": 3, "name": "C"}


class ScriptedFetch:
    """Async fetch function returning (or raising) the next scripted result."""
    def __init__(self, *results: Any):
        self.results = list(results)
        self.calls = 0

    async def __call__(self):
        self.calls += 1
        result = self.results.pop(0) if len(self.results) > 1 else self.results[0]
        if isinstance(result, BaseException):
            raise result
        return list(result)


def record_events(collection: WatchableCollection):
    seen = {"add": [], "remove": [], "error": []}
    for name in seen:
        collection.on(name, seen[name].append)
    return seen


# ----------------------- Creation -----------------------
def test_create_populates_current_items():
    async def go():
        fetch = ScriptedFetch([A, B])
        col = await WatchableCollection.create(fetch, interval=60)
        return col, fetch

    col, fetch = asyncio.run(go())
    assert col.current_items() == [A, B]
    assert list(col) == [A, B]
    assert len(col) == 2
    assert col[0] == A
    assert fetch.calls == 1


def test_create_fails_when_initial_fetch_fails():
    async def go():
        await WatchableCollection.create(ScriptedFetch(RuntimeError("down")))

    with pytest.raises(RuntimeError, match="down"):
        asyncio.run(go())


def test_current_items_is_a_copy():
    async def go():
        return await WatchableCollection.create(ScriptedFetch([A, B]), interval=60)

    col = asyncio.run(go())
    items = col.current_items()
    items.clear()
    assert col.current_items() == [A, B]


# ----------------------- Change detection -----------------------
def test_poll_emits_add_and_remove_by_id():
    async def go():
        col = await WatchableCollection.create(ScriptedFetch([A, B], [B, C]), interval=60)
        seen = record_events(col)
        applied = await col.poll()
        return col, seen, applied

    col, seen, applied = asyncio.run(go())
    assert applied is True
    assert seen["add"] == [C]
    assert seen["remove"] == [A]
    assert seen["error"] == []
    assert col.current_items() == [B, C]


def test_changed_fields_on_same_id_are_not_reported():
    b_changed = {"id": 2, "name": "B (renamed)"}

    async def go():
        col = await WatchableCollection.create(ScriptedFetch([A, B], [A, b_changed]), interval=60)
        seen = record_events(col)
        await col.poll()
        return col, seen

    col, seen = asyncio.run(go())
    assert seen["add"] == [] and seen["remove"] == []
    # contents are still replaced wholesale
    assert col.current_items() == [A, b_changed]


def test_failed_poll_keeps_contents_and_emits_one_error():
    cause = RuntimeError("HTTP 503")

    async def go():
        col = await WatchableCollection.create(ScriptedFetch([A, B], cause, [B, C]), interval=60)
        seen = record_events(col)
        failed = await col.poll()
        snapshot = col.current_items()
        errors_after_failure = list(seen["error"])
        recovered = await col.poll()
        return col, seen, failed, snapshot, errors_after_failure, recovered

    col, seen, failed, snapshot, errors, recovered = asyncio.run(go())
    assert failed is False
    assert snapshot == [A, B]
    assert len(errors) == 1
    assert isinstance(errors[0], PollError)
    assert errors[0].cause is cause
    # polling carries on after a failure
    assert recovered is True
    assert seen["add"] == [C]
    assert seen["remove"] == [A]
    assert col.current_items() == [B, C]


def test_async_listeners_are_awaited_and_broken_listeners_are_contained():
    async def go():
        col = await WatchableCollection.create(ScriptedFetch([A], [A, B]), interval=60)
        added: List[Any] = []

        async def on_add(item):
            await asyncio.sleep(0)
            added.append(item)

        def broken(item):
            raise ValueError("listener bug")

        col.on("add", broken)
        col.on("add", on_add)
        await col.poll()
        return added

    assert asyncio.run(go()) == [B]


def test_on_as_decorator_and_off():
    async def go():
        col = await WatchableCollection.create(ScriptedFetch([A], [B]), interval=60)
        removed: List[Any] = []

        @col.on("remove")
        def on_remove(item):
            removed.append(item)

        col.off("remove", on_remove)
        await col.poll()
        return removed

    assert asyncio.run(go()) == []


def test_unknown_event_name_is_rejected():
    async def go():
        col = await WatchableCollection.create(ScriptedFetch([A]), interval=60)
        col.on("update", print)

    with pytest.raises(InvalidArgumentError):
        asyncio.run(go())


def test_non_positive_interval_is_rejected():
    with pytest.raises(InvalidArgumentError):
        WatchableCollection(ScriptedFetch([A]), [A], interval=0)


# ----------------------- Background polling -----------------------
def test_watch_polls_and_applies_changes():
    async def go():
        col = await WatchableCollection.create(ScriptedFetch([A, B], [B, C]), interval=0.01)
        seen = record_events(col)
        col.watch()
        for _ in range(100):
            if seen["add"]:
                break
            await asyncio.sleep(0.01)
        col.unwatch()
        return col, seen

    col, seen = asyncio.run(go())
    assert seen["add"] == [C]
    assert seen["remove"] == [A]
    assert col.current_items() == [B, C]


def test_failed_background_tick_reports_error_and_keeps_polling():
    cause = RuntimeError("HTTP 502")

    async def go():
        col = await WatchableCollection.create(ScriptedFetch([A], cause, [B]), interval=0.01)
        seen = record_events(col)
        col.watch()
        for _ in range(100):
            if seen["add"]:
                break
            await asyncio.sleep(0.01)
        still_watching = col.watching
        col.unwatch()
        return col, seen, still_watching

    col, seen, still_watching = asyncio.run(go())
    assert still_watching is True
    assert len(seen["error"]) == 1
    assert isinstance(seen["error"][0], PollError)
    assert seen["error"][0].cause is cause
    assert seen["add"] == [B]
    assert seen["remove"] == [A]
    assert col.current_items() == [B]


def test_default_interval_is_read_once(monkeypatch):
    monkeypatch.setenv("ROBOTEVENTS_POLL_INTERVAL", "0.5")
    col = WatchableCollection(ScriptedFetch([A]), [A])
    monkeypatch.setenv("ROBOTEVENTS_POLL_INTERVAL", "30")
    assert col.interval == 0.5


def test_watch_twice_starts_one_poller():
    async def go():
        fetch = ScriptedFetch([A])
        col = await WatchableCollection.create(fetch, interval=0.05)
        col.watch()
        ticker = col._ticker
        col.watch()
        same = col._ticker is ticker
        pollers = [t for t in asyncio.all_tasks() if t.get_name() == "WatchableCollection-poller"]
        await asyncio.sleep(0.175)
        col.unwatch()
        return same, len(pollers), fetch.calls

    same, pollers, calls = asyncio.run(go())
    assert same
    assert pollers == 1
    # initial fetch + about three ticks; two pollers would double this
    assert 2 <= calls <= 5


def test_tick_is_skipped_while_poll_in_flight():
    async def go():
        release = asyncio.Event()
        calls = 0

        async def slow_fetch():
            nonlocal calls
            calls += 1
            if calls > 1:
                await release.wait()
            return [A]

        col = await WatchableCollection.create(slow_fetch, interval=0.01)
        col.watch()
        await asyncio.sleep(0.1)
        in_flight_calls = calls
        release.set()
        col.unwatch()
        await asyncio.sleep(0)
        return in_flight_calls

    # initial fetch + one outstanding poll; later ticks were skipped
    assert asyncio.run(go()) == 2


def test_unwatch_without_watch_is_safe():
    async def go():
        col = await WatchableCollection.create(ScriptedFetch([A]), interval=60)
        col.unwatch()
        col.unwatch()
        return col.watching

    assert asyncio.run(go()) is False


def test_closed_collection_discards_late_results():
    async def go():
        release = asyncio.Event()
        calls = 0

        async def slow_fetch():
            nonlocal calls
            calls += 1
            if calls > 1:
                await release.wait()
                return [B]
            return [A]

        col = await WatchableCollection.create(slow_fetch, interval=60)
        adds: List[Any] = []
        col.on("add", adds.append)
        pending = asyncio.ensure_future(col.poll())
        await asyncio.sleep(0)
        col.close()
        release.set()
        applied = await pending
        return col, adds, applied

    col, adds, applied = asyncio.run(go())
    assert applied is False
    assert adds == []
    assert col.current_items() == [A]
    assert col.closed


def test_watch_after_close_raises():
    async def go():
        col = await WatchableCollection.create(ScriptedFetch([A]), interval=60)
        col.close()
        col.watch()

    with pytest.raises(RobotEventsError):
        asyncio.run(go())


def test_scenario_two_polls_by_id():
    first = [{"id": 1, "name": "Q1"}, {"id": 2, "name": "Q2"}]
    second = [{"id": 2, "name": "Q2"}, {"id": 3, "name": "Q3"}]

    async def go():
        col = await WatchableCollection.create(ScriptedFetch(first, second), interval=60)
        seen = record_events(col)
        await col.poll()
        return col, seen

    col, seen = asyncio.run(go())
    assert [r["id"] for r in seen["add"]] == [3]
    assert [r["id"] for r in seen["remove"]] == [1]
    assert [r["id"] for r in col.current_items()] == [2, 3]
