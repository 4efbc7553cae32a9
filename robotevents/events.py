
"""
events.py
The Event resource: handle, search and SKU/ID resolver.

    from robotevents import events

    event = await events.get("RE-VRC-23-1234")
    teams = await event.teams()
    for team in teams:
        print(team.number)

    matches = await event.matches(1)  # division 1
    matches.on("add", lambda m: print("Match", m.name, "scored" if m.scored else "generated"))
    matches.watch()
"""

from __future__ import annotations

import logging
from functools import partial
from typing import List, Optional, Union

from .client import Filter, RobotEventsClient, filter_to_params, get_default_client
from .errors import InvalidArgumentError, NotFoundError
from .models import (
    Award,
    AwardOptionsFromEvent,
    EventData,
    EventSearchOptions,
    Match,
    MatchOptionsFromEvent,
    Ranking,
    RankingOptionsFromEvent,
    Skill,
    SkillOptionsFromEvent,
    TeamData,
    TeamOptionsFromEvent,
)
from .watchable import ListRequest, Watchable, WatchableCollection

logger = logging.getLogger(__name__)


def _require_division(division) -> int:
    if division is None:
        raise InvalidArgumentError("A division id is required")
    if isinstance(division, bool) or not isinstance(division, int):
        raise InvalidArgumentError(
            f"Division id must be an int, got {type(division).__name__}"
        )
    return division


class Event(Watchable[EventData]):
    """A fetched event. Fields mirror :class:`~robotevents.models.EventData`."""

    record_model = EventData

    def _endpoint(self) -> str:
        return f"events/{self.id}"

    def _assign(self, data: EventData) -> None:
        self.id = data.id
        self.sku = data.sku
        self.name = data.name
        self.start = data.start
        self.end = data.end
        self.season = data.season
        self.program = data.program
        self.location = data.location
        self.divisions = data.divisions
        self.level = data.level
        self.ongoing = data.ongoing
        self.awards_finalized = data.awards_finalized

    # ------------------------ Watchable collections ------------------------

    def _list_request(self, path: str, options: Filter, model=None, wrap=None) -> ListRequest:
        return ListRequest(
            client=self.client,
            path=path,
            params=filter_to_params(options),
            model=model,
            wrap=wrap,
        )

    async def teams(
        self,
        options: Union[TeamOptionsFromEvent, dict, None] = None,
        *,
        interval: Optional[float] = None,
    ) -> WatchableCollection:
        """
        Teams registered for the event, as Team handles.

        Example:
            teams = await event.teams({"registered": True})
            teams.on("add", lambda team: print("Team added", team.number))
            teams.on("remove", lambda team: print("Team removed", team.number))
            teams.watch()
        """
        from .teams import Team

        request = self._list_request(
            f"events/{self.id}/teams",
            options,
            model=TeamData,
            wrap=partial(Team, client=self.client),
        )
        return await WatchableCollection.create(request, interval=interval)

    async def skills(
        self,
        options: Union[SkillOptionsFromEvent, dict, None] = None,
        *,
        interval: Optional[float] = None,
    ) -> WatchableCollection:
        """Skills runs at the event."""
        request = self._list_request(f"events/{self.id}/skills", options, model=Skill)
        return await WatchableCollection.create(request, interval=interval)

    async def awards(
        self,
        options: Union[AwardOptionsFromEvent, dict, None] = None,
        *,
        interval: Optional[float] = None,
    ) -> WatchableCollection:
        request = self._list_request(f"events/{self.id}/awards", options, model=Award)
        return await WatchableCollection.create(request, interval=interval)

    async def matches(
        self,
        division: Optional[int] = None,
        options: Union[MatchOptionsFromEvent, dict, None] = None,
        *,
        interval: Optional[float] = None,
    ) -> WatchableCollection:
        """
        Matches in one division. A match shows up as "add" when it is
        generated; score changes on an existing match are not reported.
        """
        division = _require_division(division)
        request = self._list_request(
            f"events/{self.id}/divisions/{division}/matches", options, model=Match
        )
        return await WatchableCollection.create(request, interval=interval)

    async def rankings(
        self,
        division: Optional[int] = None,
        options: Union[RankingOptionsFromEvent, dict, None] = None,
        *,
        interval: Optional[float] = None,
    ) -> WatchableCollection:
        division = _require_division(division)
        request = self._list_request(
            f"events/{self.id}/divisions/{division}/rankings", options, model=Ranking
        )
        return await WatchableCollection.create(request, interval=interval)

    async def finalist_rankings(
        self,
        division: Optional[int] = None,
        options: Union[RankingOptionsFromEvent, dict, None] = None,
        *,
        interval: Optional[float] = None,
    ) -> WatchableCollection:
        """Finalist rankings in one division (VEX IQ only)."""
        division = _require_division(division)
        request = self._list_request(
            f"events/{self.id}/divisions/{division}/finalistRankings", options, model=Ranking
        )
        return await WatchableCollection.create(request, interval=interval)


# ------------------------------------------------------------------------------
# Search & resolve
# ------------------------------------------------------------------------------

async def search(
    options: Union[EventSearchOptions, dict, None] = None,
    *,
    client: Optional[RobotEventsClient] = None,
) -> List[EventData]:
    """Search events; returns raw records in API order."""
    client = client or get_default_client()
    return await client.fetch_list("events", options, model=EventData)


async def get(
    sku_or_id: Union[str, int],
    *,
    client: Optional[RobotEventsClient] = None,
) -> Event:
    """
    Resolve an event by SKU (str) or id (int). The first search result wins.

    Raises:
        InvalidArgumentError: identifier is neither str nor int
        NotFoundError: the search returned nothing
        RobotEventsAPIError: the search request failed
    """
    if isinstance(sku_or_id, str):
        options = EventSearchOptions(sku=[sku_or_id])
    elif isinstance(sku_or_id, int) and not isinstance(sku_or_id, bool):
        options = EventSearchOptions(id=[sku_or_id])
    else:
        raise InvalidArgumentError(
            f"Event identifier must be a SKU (str) or id (int), got {type(sku_or_id).__name__}"
        )

    client = client or get_default_client()
    found = await search(options, client=client)
    if not found:
        raise NotFoundError(f"No event with SKU/ID {sku_or_id}", identifier=sku_or_id)
    if len(found) > 1:
        logger.debug("%d events matched %r; using the first", len(found), sku_or_id)
    return Event(found[0], client=client)


__all__ = ["Event", "search", "get"]
