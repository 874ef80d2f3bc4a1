"""Single-threaded state reducer.

:func:`reduce` applies one event to :class:`~rootly_tui.tui.state.AppState`
in place and returns the commands to execute next. It never blocks and never
touches the network or the cache; those happen in fetch units dispatched by
:class:`~rootly_tui.tui.effects.EffectRunner`.

Fetch results can arrive in any order. Every result carries the request
generation of its view, and the reducer ignores results older than the
view's current generation, so a slow page-1 response cannot overwrite
page 2 after the user has moved on.
"""

from __future__ import annotations

from rootly_tui.tui.messages import (
    CacheCleared,
    ClearCache,
    Command,
    DetailLoaded,
    Event,
    FetchDetail,
    FetchList,
    KeyPressed,
    ListLoaded,
    OpenUrl,
    QuitApp,
    Resource,
    ScheduleTick,
    Tick,
)
from rootly_tui.tui.state import AppState, DetailLoadState, ListView

TICK_INTERVAL = 0.1
"""Seconds between spinner frames."""

INCIDENT_URL = "https://rootly.com/account/incidents/{}"
ALERT_URL = "https://rootly.com/account/alerts/{}"


def start(state: AppState) -> list[Command]:
    """Commands that load both lists for the first time."""
    state.initial_loading = True
    return [_fetch_list(state.incidents), _fetch_list(state.alerts), *_ensure_tick(state)]


def reduce(state: AppState, event: Event) -> list[Command]:
    if isinstance(event, KeyPressed):
        return _on_key(state, event.key)
    if isinstance(event, Tick):
        return _on_tick(state)
    if isinstance(event, ListLoaded):
        return _on_list_loaded(state, event)
    if isinstance(event, DetailLoaded):
        return _on_detail_loaded(state, event)
    if isinstance(event, CacheCleared):
        return _on_cache_cleared(state, event)
    return []


# --- Helpers ---


def _fetch_list(view: ListView) -> FetchList:
    generation = view.begin_load()
    sort = view.sort.param() if view.resource is Resource.INCIDENTS else ""
    return FetchList(view.resource, view.pagination.current_page, generation, sort)


def _ensure_tick(state: AppState) -> list[Command]:
    if state.ticking or not state.busy:
        return []
    state.ticking = True
    return [ScheduleTick(TICK_INTERVAL)]


def _reload(state: AppState, view: ListView) -> list[Command]:
    return [_fetch_list(view), *_ensure_tick(state)]


def _item_url(view: ListView) -> str:
    item = view.selected_item
    if item is None:
        return ""
    if view.resource is Resource.INCIDENTS:
        return item.short_url or item.url or (INCIDENT_URL.format(item.id) if item.id else "")
    return ALERT_URL.format(item.short_id) if item.short_id else ""


# --- Keys ---


def _on_key(state: AppState, key: str) -> list[Command]:
    if key in ("q", "ctrl+c"):
        state.quitting = True
        return [QuitApp()]

    if state.show_logs:
        if key in ("l", "esc"):
            state.show_logs = False
        return []

    view = state.active_view

    if key == "l":
        state.show_logs = True
        return []

    if key == "tab":
        state.active = Resource.ALERTS if state.active is Resource.INCIDENTS else Resource.INCIDENTS
        return []

    if key in ("j", "down"):
        if view.selected < len(view.items) - 1:
            view.selected += 1
        return []

    if key in ("k", "up"):
        if view.selected > 0:
            view.selected -= 1
        return []

    if key == "enter":
        return _load_detail(state, view)

    if key == "]":
        if not view.pagination.has_next:
            return []
        view.pagination.current_page += 1
        view.selected = 0
        return _reload(state, view)

    if key == "[":
        if not view.pagination.has_prev or view.pagination.current_page <= 1:
            return []
        view.pagination.current_page -= 1
        view.selected = 0
        return _reload(state, view)

    if key == "r":
        state.status_message = "Refreshing..."
        state.error_message = ""
        state.incidents.loading = True
        state.alerts.loading = True
        return [ClearCache(), *_ensure_tick(state)]

    if key in ("s", "S") and view.resource is Resource.INCIDENTS:
        new_sort = view.sort.next_field() if key == "s" else view.sort.flip()
        if new_sort == view.sort:
            return []
        view.sort = new_sort
        view.pagination.current_page = 1
        view.selected = 0
        state.status_message = f"Sorted by {new_sort.describe()}"
        return _reload(state, view)

    if key == "o":
        url = _item_url(view)
        return [OpenUrl(url)] if url else []

    return []


def _load_detail(state: AppState, view: ListView) -> list[Command]:
    item = view.selected_item
    if item is None:
        return []
    if view.detail_state(item.id) in (DetailLoadState.LOADING, DetailLoadState.LOADED):
        return []
    view.detail_states[item.id] = DetailLoadState.LOADING
    view.detail_errors.pop(item.id, None)
    command = FetchDetail(
        resource=view.resource,
        index=view.selected,
        item_id=item.id,
        generation=view.generation,
        version=item.updated_at,
    )
    return [command, *_ensure_tick(state)]


# --- Results ---


def _on_tick(state: AppState) -> list[Command]:
    state.spinner_frame += 1
    if state.busy:
        return [ScheduleTick(TICK_INTERVAL)]
    state.ticking = False
    return []


def _on_list_loaded(state: AppState, event: ListLoaded) -> list[Command]:
    view = state.view(event.resource)
    if event.generation != view.generation:
        return []

    view.loading = False
    view.loaded_once = True
    if state.incidents.loaded_once and state.alerts.loaded_once:
        state.initial_loading = False

    if event.error is not None:
        view.error = event.error
        state.error_message = event.error
        state.status_message = ""
        return []

    view.items = list(event.page.items)
    view.pagination.update(event.page.pagination)
    view.detail_states.clear()
    view.detail_errors.clear()
    view.error = ""
    if view.selected >= len(view.items):
        view.selected = 0
    if not (state.incidents.loading or state.alerts.loading):
        state.status_message = ""
        state.error_message = ""
    return []


def _on_detail_loaded(state: AppState, event: DetailLoaded) -> list[Command]:
    view = state.view(event.resource)
    if event.generation != view.generation:
        # Issued against a list that has since been replaced or is being
        # replaced; only release the loading flag.
        if view.detail_state(event.item_id) is DetailLoadState.LOADING:
            del view.detail_states[event.item_id]
        return []

    index = view.index_of(event.item_id, event.index)
    if index is None:
        view.detail_states.pop(event.item_id, None)
        return []

    if event.error is not None:
        view.detail_states[event.item_id] = DetailLoadState.ERROR
        view.detail_errors[event.item_id] = event.error
        state.error_message = event.error
        return []

    view.items[index] = event.record
    view.detail_states[event.item_id] = DetailLoadState.LOADED
    state.error_message = ""
    return []


def _on_cache_cleared(state: AppState, event: CacheCleared) -> list[Command]:
    if event.error is not None:
        state.error_message = event.error
    commands: list[Command] = []
    for view in (state.incidents, state.alerts):
        view.pagination.reset()
        view.selected = 0
        commands.append(_fetch_list(view))
    return [*commands, *_ensure_tick(state)]
