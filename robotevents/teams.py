
"""
teams.py
The Team resource: handle, search and number/ID resolver.
"""

from __future__ import annotations

import logging
from functools import partial
from typing import List, Optional, Union

from .client import Filter, RobotEventsClient, filter_to_params, get_default_client
from .errors import InvalidArgumentError, NotFoundError
from .models import (
    Award,
    AwardOptionsFromTeam,
    EventData,
    EventOptionsFromTeam,
    Match,
    MatchOptionsFromTeam,
    Ranking,
    RankingOptionsFromTeam,
    Skill,
    SkillOptionsFromTeam,
    TeamData,
    TeamSearchOptions,
)
from .watchable import ListRequest, Watchable, WatchableCollection

logger = logging.getLogger(__name__)


class Team(Watchable[TeamData]):
    """A fetched team. Fields mirror :class:`~robotevents.models.TeamData`."""

    record_model = TeamData

    def _endpoint(self) -> str:
        return f"teams/{self.id}"

    def _assign(self, data: TeamData) -> None:
        self.id = data.id
        self.number = data.number
        self.team_name = data.team_name
        self.robot_name = data.robot_name
        self.organization = data.organization
        self.location = data.location
        self.registered = data.registered
        self.program = data.program
        self.grade = data.grade

    async def _collection(self, path: str, options: Filter, model, interval, wrap=None) -> WatchableCollection:
        request = ListRequest(
            client=self.client,
            path=f"teams/{self.id}/{path}",
            params=filter_to_params(options),
            model=model,
            wrap=wrap,
        )
        return await WatchableCollection.create(request, interval=interval)

    async def events(
        self,
        options: Union[EventOptionsFromTeam, dict, None] = None,
        *,
        interval: Optional[float] = None,
    ) -> WatchableCollection:
        """Events the team is registered for, as Event handles."""
        from .events import Event

        return await self._collection(
            "events", options, EventData, interval, wrap=partial(Event, client=self.client)
        )

    async def matches(
        self,
        options: Union[MatchOptionsFromTeam, dict, None] = None,
        *,
        interval: Optional[float] = None,
    ) -> WatchableCollection:
        return await self._collection("matches", options, Match, interval)

    async def rankings(
        self,
        options: Union[RankingOptionsFromTeam, dict, None] = None,
        *,
        interval: Optional[float] = None,
    ) -> WatchableCollection:
        return await self._collection("rankings", options, Ranking, interval)

    async def skills(
        self,
        options: Union[SkillOptionsFromTeam, dict, None] = None,
        *,
        interval: Optional[float] = None,
    ) -> WatchableCollection:
        return await self._collection("skills", options, Skill, interval)

    async def awards(
        self,
        options: Union[AwardOptionsFromTeam, dict, None] = None,
        *,
        interval: Optional[float] = None,
    ) -> WatchableCollection:
        return await self._collection("awards", options, Award, interval)


async def search(
    options: Union[TeamSearchOptions, dict, None] = None,
    *,
    client: Optional[RobotEventsClient] = None,
) -> List[TeamData]:
    client = client or get_default_client()
    return await client.fetch_list("teams", options, model=TeamData)


async def get(
    number_or_id: Union[str, int],
    program: Optional[int] = None,
    *,
    client: Optional[RobotEventsClient] = None,
) -> Team:
    """
    Resolve a team by number (str, e.g. "1234A") or id (int). Team numbers
    are reused across programs; pass ``program`` to pick one.
    """
    if isinstance(number_or_id, str):
        options = TeamSearchOptions(number=[number_or_id])
    elif isinstance(number_or_id, int) and not isinstance(number_or_id, bool):
        options = TeamSearchOptions(id=[number_or_id])
    else:
        raise InvalidArgumentError(
            f"Team identifier must be a number (str) or id (int), got {type(number_or_id).__name__}"
        )
    if program is not None:
        options.program = [program]

    client = client or get_default_client()
    found = await search(options, client=client)
    if not found:
        raise NotFoundError(f"No team with number/ID {number_or_id}", identifier=number_or_id)
    return Team(found[0], client=client)


__all__ = ["Team", "search", "get"]
