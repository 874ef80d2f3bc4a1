"""UI state owned by the reducer.

Nothing here is thread-safe, and nothing needs to be: only the reducer,
running on the render thread, mutates these objects.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from rootly_tui.models import PaginationInfo
from rootly_tui.sorting import SortState
from rootly_tui.tui.messages import Resource


class DetailLoadState(str, Enum):
    UNLOADED = "unloaded"
    LOADING = "loading"
    LOADED = "loaded"
    ERROR = "error"


@dataclass
class PaginationState:
    current_page: int = 1
    has_next: bool = False
    has_prev: bool = False

    def update(self, info: PaginationInfo) -> None:
        self.current_page = info.current_page
        self.has_next = info.has_next
        self.has_prev = info.has_prev

    def reset(self) -> None:
        self.current_page = 1
        self.has_next = False
        self.has_prev = False


@dataclass
class ListView:
    """One list pane (incidents or alerts) and its detail load flags.

    ``generation`` increases with every list fetch issued for this view.
    Results carrying an older generation are stale.
    """

    resource: Resource
    items: list[Any] = field(default_factory=list)
    pagination: PaginationState = field(default_factory=PaginationState)
    loading: bool = False
    loaded_once: bool = False
    error: str = ""
    generation: int = 0
    selected: int = 0
    detail_states: dict[str, DetailLoadState] = field(default_factory=dict)
    detail_errors: dict[str, str] = field(default_factory=dict)
    sort: SortState = field(default_factory=SortState)

    def begin_load(self) -> int:
        """Mark a new list fetch in flight and return its generation."""
        self.generation += 1
        self.loading = True
        return self.generation

    @property
    def selected_item(self) -> Optional[Any]:
        if 0 <= self.selected < len(self.items):
            return self.items[self.selected]
        return None

    def detail_state(self, item_id: str) -> DetailLoadState:
        return self.detail_states.get(item_id, DetailLoadState.UNLOADED)

    @property
    def detail_loading(self) -> bool:
        return any(s is DetailLoadState.LOADING for s in self.detail_states.values())

    def index_of(self, item_id: str, hint: int) -> Optional[int]:
        """Find *item_id*, checking position *hint* first."""
        if 0 <= hint < len(self.items) and self.items[hint].id == item_id:
            return hint
        for index, item in enumerate(self.items):
            if item.id == item_id:
                return index
        return None


@dataclass
class AppState:
    incidents: ListView = field(default_factory=lambda: ListView(Resource.INCIDENTS))
    alerts: ListView = field(default_factory=lambda: ListView(Resource.ALERTS))
    active: Resource = Resource.INCIDENTS
    initial_loading: bool = True
    status_message: str = ""
    error_message: str = ""
    show_logs: bool = False
    quitting: bool = False
    ticking: bool = False
    spinner_frame: int = 0

    def view(self, resource: Resource) -> ListView:
        return self.incidents if resource is Resource.INCIDENTS else self.alerts

    @property
    def active_view(self) -> ListView:
        return self.view(self.active)

    @property
    def busy(self) -> bool:
        """Whether anything is loading, which keeps the spinner ticking."""
        return self.initial_loading or any(
            v.loading or v.detail_loading for v in (self.incidents, self.alerts)
        )
