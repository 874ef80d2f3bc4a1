"""Events consumed by the reducer and commands it emits.

Events flow *into* the reducer through the scheduler inbox: key presses,
spinner ticks, and the terminal result of every fetch unit. Commands flow
*out* of it and are executed by :class:`~rootly_tui.tui.effects.EffectRunner`.
Both are plain frozen dataclasses so reducer tests can compare them with
``==``.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Optional, Union


class Resource(str, Enum):
    INCIDENTS = "incidents"
    ALERTS = "alerts"


# --- Events ---


@dataclass(frozen=True)
class KeyPressed:
    key: str


@dataclass(frozen=True)
class Tick:
    pass


@dataclass(frozen=True)
class ListLoaded:
    """Terminal event of a list fetch.

    ``generation`` is the view's request generation at dispatch time.
    Exactly one of ``page`` and ``error`` is set.
    """

    resource: Resource
    generation: int
    page: Any = None
    error: Optional[str] = None


@dataclass(frozen=True)
class DetailLoaded:
    """Terminal event of a detail fetch.

    ``index`` is where the item was when the fetch started; ``item_id`` is
    authoritative.
    """

    resource: Resource
    index: int
    item_id: str
    generation: int
    record: Any = None
    error: Optional[str] = None


@dataclass(frozen=True)
class CacheCleared:
    error: Optional[str] = None


Event = Union[KeyPressed, Tick, ListLoaded, DetailLoaded, CacheCleared]


# --- Commands ---


@dataclass(frozen=True)
class FetchList:
    resource: Resource
    page: int
    generation: int
    sort: str = ""


@dataclass(frozen=True)
class FetchDetail:
    resource: Resource
    index: int
    item_id: str
    generation: int
    version: Optional[datetime] = None


@dataclass(frozen=True)
class ClearCache:
    pass


@dataclass(frozen=True)
class ScheduleTick:
    delay: float


@dataclass(frozen=True)
class OpenUrl:
    url: str


@dataclass(frozen=True)
class QuitApp:
    pass


Command = Union[FetchList, FetchDetail, ClearCache, ScheduleTick, OpenUrl, QuitApp]
