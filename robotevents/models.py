
"""
models.py
Typed data models for the RobotEvents v2 API.

Endpoints covered (examples):
- Search events:
  GET /events?sku[]=RE-VRC-23-1234
- Get an event:
  GET /events/{EVENT_ID}
- Child listings of an event:
  GET /events/{EVENT_ID}/teams
  GET /events/{EVENT_ID}/divisions/{DIVISION_ID}/matches
- Search teams / child listings of a team:
  GET /teams?number[]=1234A
  GET /teams/{TEAM_ID}/events

Design:
- Pydantic v2 models; records are frozen snapshots so a handle can swap one
  snapshot for another in a single assignment.
- Every field has a default so a sparse payload never leaves a field unset.
- Filter models render themselves to query params with ``to_params()``;
  list-valued filters become repeated ``key[]`` params.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional, get_args

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


# ------------------------------------------------------------------------------
# Enumerations
# ------------------------------------------------------------------------------

class Level(str, Enum):
    WORLD = "World"
    NATIONAL = "National"
    STATE = "State"
    SIGNATURE = "Signature"
    OTHER = "Other"


class Grade(str, Enum):
    COLLEGE = "College"
    HIGH_SCHOOL = "High School"
    MIDDLE_SCHOOL = "Middle School"
    ELEMENTARY_SCHOOL = "Elementary School"


class SkillType(str, Enum):
    DRIVER = "driver"
    PROGRAMMING = "programming"
    PACKAGE_DRIVER = "package_driver"
    PACKAGE_PROGRAMMING = "package_programming"


class Record(BaseModel):
    """Base for API records: immutable, tolerant of unknown keys."""
    model_config = ConfigDict(extra="ignore", populate_by_name=True, frozen=True)

    @model_validator(mode="before")
    @classmethod
    def _null_means_default(cls, data: Any) -> Any:
        # explicit null on a non-Optional field falls back to the field default
        if not isinstance(data, dict):
            return data
        cleaned = dict(data)
        for name, info in cls.model_fields.items():
            if type(None) in get_args(info.annotation):
                continue
            for key in {name, info.alias or name}:
                if key in cleaned and cleaned[key] is None:
                    del cleaned[key]
        return cleaned


# ------------------------------------------------------------------------------
# Nested Entities
# ------------------------------------------------------------------------------

class IdInfo(Record):
    """Reference to another resource ({id, name, code})."""
    id: int = 0
    name: str = ""
    code: Optional[str] = None


class Coordinates(Record):
    lat: str = ""
    lon: str = ""

    @field_validator("lat", "lon", mode="before")
    @classmethod
    def _coerce_coordinate(cls, v: Any) -> str:
        # the API has sent both numbers and strings here
        return "" if v is None else str(v)


class Location(Record):
    venue: Optional[str] = ""
    address_1: Optional[str] = None
    address_2: Optional[str] = None
    city: Optional[str] = None
    region: Optional[str] = None
    postcode: Optional[str] = None
    country: Optional[str] = None
    coordinates: Coordinates = Field(default_factory=Coordinates)


class Division(Record):
    id: int = 0
    name: str = ""
    order: int = 0


# ------------------------------------------------------------------------------
# Core Entities
# ------------------------------------------------------------------------------

class EventData(Record):
    id: int = 0
    sku: str = ""
    name: str = ""
    start: Optional[str] = ""
    end: Optional[str] = ""

    season: IdInfo = Field(default_factory=IdInfo)
    program: IdInfo = Field(default_factory=lambda: IdInfo(code=""))
    location: Location = Field(default_factory=Location)
    divisions: List[Division] = Field(default_factory=list)

    level: Level = Level.OTHER
    ongoing: bool = False
    awards_finalized: bool = False

    @field_validator("level", mode="before")
    @classmethod
    def _unknown_level_is_other(cls, v: Any) -> Any:
        if v is None:
            return Level.OTHER
        if isinstance(v, str) and v not in {lvl.value for lvl in Level}:
            return Level.OTHER
        return v


class TeamData(Record):
    id: int = 0
    number: str = ""
    team_name: str = ""
    robot_name: Optional[str] = None
    organization: Optional[str] = None
    location: Location = Field(default_factory=Location)
    registered: bool = False
    program: IdInfo = Field(default_factory=lambda: IdInfo(code=""))
    grade: Optional[str] = None


class AllianceTeam(Record):
    team: IdInfo = Field(default_factory=IdInfo)
    sitting: bool = False


class Alliance(Record):
    color: str = ""
    score: int = 0
    teams: List[AllianceTeam] = Field(default_factory=list)


class Match(Record):
    id: int = 0
    event: IdInfo = Field(default_factory=IdInfo)
    division: IdInfo = Field(default_factory=IdInfo)
    round: int = 0
    instance: int = 0
    matchnum: int = 0
    scheduled: Optional[str] = None
    started: Optional[str] = None
    field: Optional[str] = None
    scored: bool = False
    name: str = ""
    alliances: List[Alliance] = Field(default_factory=list)


class Ranking(Record):
    id: int = 0
    event: IdInfo = Field(default_factory=IdInfo)
    division: IdInfo = Field(default_factory=IdInfo)
    rank: int = 0
    team: IdInfo = Field(default_factory=IdInfo)
    wins: int = 0
    losses: int = 0
    ties: int = 0
    wp: int = 0
    ap: int = 0
    sp: int = 0
    high_score: Optional[float] = None
    average_points: Optional[float] = None
    total_points: Optional[float] = None


class Skill(Record):
    id: int = 0
    event: IdInfo = Field(default_factory=IdInfo)
    team: IdInfo = Field(default_factory=IdInfo)
    type: str = ""
    season: IdInfo = Field(default_factory=IdInfo)
    division: IdInfo = Field(default_factory=IdInfo)
    rank: int = 0
    score: int = 0
    attempts: int = 0


class TeamAwardWinner(Record):
    division: IdInfo = Field(default_factory=IdInfo)
    team: IdInfo = Field(default_factory=IdInfo)


class Award(Record):
    id: int = 0
    event: IdInfo = Field(default_factory=IdInfo)
    order: int = 0
    title: str = ""
    qualifications: List[str] = Field(default_factory=list)
    designation: Optional[str] = None
    classification: Optional[str] = None
    team_winners: List[TeamAwardWinner] = Field(default_factory=list, alias="teamWinners")
    individual_winners: List[str] = Field(default_factory=list, alias="individualWinners")


# ------------------------------------------------------------------------------
# Query Filters
# ------------------------------------------------------------------------------

class QueryFilter(BaseModel):
    """
    Optional constraints narrowing a listing request.

    Unset fields are omitted from the query. Lists are sent as repeated
    ``key[]`` params, booleans as "true"/"false", enums by value.
    """
    model_config = ConfigDict(extra="forbid", populate_by_name=True, use_enum_values=True)

    def to_params(self) -> Dict[str, Any]:
        return encode_params(self.model_dump(by_alias=True, exclude_none=True))


def encode_params(values: Dict[str, Any]) -> Dict[str, Any]:
    """Render a plain dict of filter values into requests-style query params."""
    params: Dict[str, Any] = {}
    for key, value in values.items():
        if value is None:
            continue
        if isinstance(value, (list, tuple, set)):
            name = key if key.endswith("[]") else f"{key}[]"
            params[name] = [_scalar(v) for v in value]
        else:
            params[key] = _scalar(value)
    return params


def _scalar(value: Any) -> Any:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Enum):
        return value.value
    return value


class EventSearchOptions(QueryFilter):
    id: Optional[List[int]] = None
    sku: Optional[List[str]] = None
    team: Optional[List[int]] = None
    season: Optional[List[int]] = None
    start: Optional[str] = None
    end: Optional[str] = None
    region: Optional[str] = None
    level: Optional[List[Level]] = None
    my_events: Optional[bool] = Field(default=None, alias="myEvents")
    event_types: Optional[List[str]] = Field(default=None, alias="eventTypes")


class EventOptionsFromTeam(QueryFilter):
    sku: Optional[List[str]] = None
    season: Optional[List[int]] = None
    start: Optional[str] = None
    end: Optional[str] = None
    level: Optional[List[Level]] = None


class TeamSearchOptions(QueryFilter):
    id: Optional[List[int]] = None
    number: Optional[List[str]] = None
    event: Optional[List[int]] = None
    registered: Optional[bool] = None
    program: Optional[List[int]] = None
    grade: Optional[List[Grade]] = None
    country: Optional[List[str]] = None
    my_teams: Optional[bool] = Field(default=None, alias="myTeams")


class TeamOptionsFromEvent(QueryFilter):
    number: Optional[List[str]] = None
    registered: Optional[bool] = None
    grade: Optional[List[Grade]] = None
    country: Optional[List[str]] = None
    my_teams: Optional[bool] = Field(default=None, alias="myTeams")


class SkillOptionsFromEvent(QueryFilter):
    team: Optional[List[int]] = None
    type: Optional[List[SkillType]] = None


class SkillOptionsFromTeam(QueryFilter):
    event: Optional[List[int]] = None
    type: Optional[List[SkillType]] = None
    season: Optional[List[int]] = None


class AwardOptionsFromEvent(QueryFilter):
    team: Optional[List[int]] = None
    winner: Optional[List[str]] = None


class AwardOptionsFromTeam(QueryFilter):
    event: Optional[List[int]] = None
    season: Optional[List[int]] = None


class MatchOptionsFromEvent(QueryFilter):
    team: Optional[List[int]] = None
    round: Optional[List[int]] = None
    instance: Optional[List[int]] = None
    matchnum: Optional[List[int]] = None


class MatchOptionsFromTeam(QueryFilter):
    event: Optional[List[int]] = None
    season: Optional[List[int]] = None
    round: Optional[List[int]] = None
    instance: Optional[List[int]] = None
    matchnum: Optional[List[int]] = None


class RankingOptionsFromEvent(QueryFilter):
    team: Optional[List[int]] = None
    rank: Optional[List[int]] = None


class RankingOptionsFromTeam(QueryFilter):
    event: Optional[List[int]] = None
    rank: Optional[List[int]] = None
    season: Optional[List[int]] = None


__all__ = [
    "Level",
    "Grade",
    "SkillType",
    "Record",
    "IdInfo",
    "Coordinates",
    "Location",
    "Division",
    "EventData",
    "TeamData",
    "AllianceTeam",
    "Alliance",
    "Match",
    "Ranking",
    "Skill",
    "TeamAwardWinner",
    "Award",
    "QueryFilter",
    "encode_params",
    "EventSearchOptions",
    "EventOptionsFromTeam",
    "TeamSearchOptions",
    "TeamOptionsFromEvent",
    "SkillOptionsFromEvent",
    "SkillOptionsFromTeam",
    "AwardOptionsFromEvent",
    "AwardOptionsFromTeam",
    "MatchOptionsFromEvent",
    "MatchOptionsFromTeam",
    "RankingOptionsFromEvent",
    "RankingOptionsFromTeam",
]
