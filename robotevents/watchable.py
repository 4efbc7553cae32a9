
"""
watchable.py
Live objects that keep themselves current by polling the API.

- Watchable: a handle around one fetched record. ``refresh()`` re-fetches it;
  ``watch()`` polls it in the background and fires "update" when it changes.
- WatchableCollection: the current result of a listing endpoint. ``watch()``
  polls it in the background and fires "add"/"remove" for ids that appear or
  disappear between polls.
- ListRequest: the listing request a collection re-runs on every poll.

Both kinds fire "error" with a PollError when a background poll fails; the
failure is logged, the current state is kept and polling continues.

Example
-------
    teams = await event.teams()
    teams.on("add", lambda team: print("Team added", team.number))
    teams.watch()
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from dataclasses import dataclass, field
from typing import (
    Any,
    Awaitable,
    Callable,
    Dict,
    Generic,
    List,
    Optional,
    Sequence,
    Tuple,
    Type,
    TypeVar,
    Union,
    overload,
)

from pydantic import BaseModel

from .client import RobotEventsClient, get_default_client
from .config import get_settings
from .errors import InvalidArgumentError, PollError, RobotEventsError

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R", bound=BaseModel)

Listener = Callable[..., Any]


def identity_of(item: Any) -> Any:
    """Return the ``id`` used to match an item across polls."""
    if isinstance(item, dict):
        return item.get("id")
    return getattr(item, "id", None)


# ------------------------------------------------------------------------------
# Polling base
# ------------------------------------------------------------------------------

class Poller:
    """
    Observer registry plus a background ticker that runs one poll per tick.

    Subclasses implement ``_fetch()`` (may raise) and ``_apply(result)``.
    At most one poll is in flight; a tick that fires while one is still
    outstanding is skipped.
    """

    EVENTS: Tuple[str, ...] = ("error",)

    def __init__(self, interval: Optional[float] = None):
        if interval is not None and interval <= 0:
            raise InvalidArgumentError(f"Poll interval must be positive, got {interval!r}")
        self._interval = interval if interval is not None else get_settings().poll_interval
        self._listeners: Dict[str, List[Listener]] = {name: [] for name in self.EVENTS}
        self._ticker: Optional[asyncio.Task] = None
        self._inflight: Optional[asyncio.Future] = None
        self._closed = False

    # ------------------------ Subscriptions ------------------------

    def on(self, event: str, listener: Optional[Listener] = None):
        """
        Register ``listener`` for ``event``. Without a listener, returns a
        decorator. Listeners may be plain functions or coroutine functions.
        """
        if event not in self._listeners:
            raise InvalidArgumentError(
                f"Unknown event {event!r} for {type(self).__name__}; expected one of {self.EVENTS}"
            )
        if listener is None:
            def decorator(fn: Listener) -> Listener:
                self._listeners[event].append(fn)
                return fn
            return decorator
        self._listeners[event].append(listener)
        return listener

    def off(self, event: str, listener: Listener) -> None:
        try:
            self._listeners.get(event, []).remove(listener)
        except ValueError:
            pass

    async def _emit(self, event: str, *args: Any) -> None:
        for listener in list(self._listeners.get(event, [])):
            try:
                result = listener(*args)
                if inspect.isawaitable(result):
                    await result
            except Exception:
                # a broken listener must not stop the others or the poller
                logger.exception("%s listener for %r failed", type(self).__name__, event)

    # ------------------------ Polling ------------------------

    @property
    def interval(self) -> float:
        return self._interval

    @property
    def watching(self) -> bool:
        return self._ticker is not None and not self._ticker.done()

    @property
    def closed(self) -> bool:
        return self._closed

    def watch(self) -> None:
        """Start background polling. Calling it again while watching is a no-op."""
        if self._closed:
            raise RobotEventsError(f"{type(self).__name__} is closed")
        if self.watching:
            return
        loop = asyncio.get_running_loop()
        self._ticker = loop.create_task(self._tick_loop(), name=f"{type(self).__name__}-poller")
        logger.info("Watching %r every %.1fs", self, self.interval)

    def unwatch(self) -> None:
        """Stop background polling. An in-flight poll still completes."""
        if self._ticker is not None:
            self._ticker.cancel()
            self._ticker = None
            logger.info("Stopped watching %r", self)

    def close(self) -> None:
        """Stop polling for good; late poll results are discarded."""
        self.unwatch()
        self._closed = True
        for listeners in self._listeners.values():
            listeners.clear()

    async def _tick_loop(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            if self._inflight is not None and not self._inflight.done():
                logger.debug("Previous poll of %r still running; skipping tick", self)
                continue
            self._inflight = asyncio.ensure_future(self._poll_once())

    async def poll(self) -> bool:
        """
        Run one poll now and wait for it. Joins the in-flight poll instead of
        starting a second one. Returns True when a fresh result was applied.
        """
        if self._inflight is None or self._inflight.done():
            self._inflight = asyncio.ensure_future(self._poll_once())
        return await asyncio.shield(self._inflight)

    async def _poll_once(self) -> bool:
        try:
            result = await self._fetch()
        except Exception as e:
            if self._closed:
                return False
            logger.warning("Poll of %r failed: %s", self, e)
            await self._emit("error", PollError(f"Poll of {self!r} failed: {e}", cause=e))
            return False
        if self._closed:
            logger.debug("Discarding late poll result for closed %r", self)
            return False
        await self._apply(result)
        return True

    async def _fetch(self) -> Any:
        raise NotImplementedError

    async def _apply(self, result: Any) -> None:
        raise NotImplementedError


# ------------------------------------------------------------------------------
# Single resource handle
# ------------------------------------------------------------------------------

class Watchable(Poller, Generic[R]):
    """
    Base class for resource handles.

    Subclasses set ``record_model``, implement ``_endpoint()`` and copy each
    field of their record in ``_assign()``. Assignment never awaits, so a
    refresh replaces the whole snapshot in one step.
    """

    EVENTS = ("update", "error")
    record_model: Type[R]

    def __init__(
        self,
        data: R,
        *,
        client: Optional[RobotEventsClient] = None,
        interval: Optional[float] = None,
    ):
        super().__init__(interval)
        self._client = client
        if isinstance(data, dict):
            data = self.record_model.model_validate(data)
        self._apply_record(data)

    @property
    def client(self) -> RobotEventsClient:
        return self._client or get_default_client()

    def _endpoint(self) -> str:
        raise NotImplementedError

    def _assign(self, data: R) -> None:
        raise NotImplementedError

    def _apply_record(self, data: R) -> None:
        self._assign(data)
        self.data = data

    async def refresh(self) -> None:
        """
        Re-fetch this resource. On failure the handle keeps its current
        state and the transport error propagates.
        """
        data = await self.client.fetch_one(self._endpoint(), model=self.record_model)
        self._apply_record(data)

    async def _fetch(self) -> R:
        return await self.client.fetch_one(self._endpoint(), model=self.record_model)

    async def _apply(self, data: R) -> None:
        if data == self.data:
            return
        previous = self.data
        self._apply_record(data)
        await self._emit("update", self, previous)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(id={getattr(self, 'id', None)!r})"


# ------------------------------------------------------------------------------
# Listing request
# ------------------------------------------------------------------------------

@dataclass(frozen=True)
class ListRequest:
    """
    A listing endpoint call captured by value: path, encoded params, the
    record model to decode into and an optional wrapper (record -> handle).
    """
    client: RobotEventsClient
    path: str
    params: Dict[str, Any] = field(default_factory=dict)
    model: Optional[Type[BaseModel]] = None
    start_page: int = 1
    wrap: Optional[Callable[[Any], Any]] = None

    async def execute(self) -> List[Any]:
        rows = await self.client.fetch_list(self.path, dict(self.params), self.start_page, self.model)
        if self.wrap is not None:
            return [self.wrap(r) for r in rows]
        return rows


# ------------------------------------------------------------------------------
# Collection
# ------------------------------------------------------------------------------

FetchAll = Callable[[], Awaitable[Sequence[T]]]


class WatchableCollection(Poller, Sequence[T]):
    """
    The result of a listing endpoint, kept current by polling.

    Items are matched across polls by ``id``. Only presence is compared:
    an item whose id persists but whose fields changed fires nothing.
    """

    EVENTS = ("add", "remove", "error")

    def __init__(self, fetch_all: FetchAll, items: Sequence[T], *, interval: Optional[float] = None):
        super().__init__(interval)
        self._fetch_all = fetch_all
        self._items: List[T] = list(items)

    @classmethod
    async def create(
        cls,
        fetch_all: Union[FetchAll, ListRequest],
        *,
        interval: Optional[float] = None,
    ) -> "WatchableCollection[T]":
        """Fetch the initial contents and return the collection."""
        if isinstance(fetch_all, ListRequest):
            fetch_all = fetch_all.execute
        items = await fetch_all()
        return cls(fetch_all, items, interval=interval)

    def current_items(self) -> List[T]:
        return list(self._items)

    @overload
    def __getitem__(self, index: int) -> T: ...

    @overload
    def __getitem__(self, index: slice) -> List[T]: ...

    def __getitem__(self, index):
        return self._items[index]

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self):
        return iter(list(self._items))

    async def _fetch(self) -> List[T]:
        return list(await self._fetch_all())

    async def _apply(self, items: List[T]) -> None:
        old_ids = {identity_of(i) for i in self._items}
        new_ids = {identity_of(i) for i in items}

        added: List[T] = []
        seen = set()
        for item in items:
            key = identity_of(item)
            if key not in old_ids and key not in seen:
                added.append(item)
            seen.add(key)

        removed: List[T] = []
        seen = set()
        for item in self._items:
            key = identity_of(item)
            if key not in new_ids and key not in seen:
                removed.append(item)
            seen.add(key)

        self._items = list(items)

        for item in added:
            await self._emit("add", item)
        for item in removed:
            await self._emit("remove", item)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(len={len(self._items)})"


__all__ = [
    "Poller",
    "Watchable",
    "WatchableCollection",
    "ListRequest",
    "identity_of",
]
