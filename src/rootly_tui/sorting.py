"""Sort state for the incident list.

Sorting is done by the API, so a :class:`SortState` only needs to render
itself as the ``sort`` query parameter and as a header indicator.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"

    def flipped(self) -> SortDirection:
        return SortDirection.ASC if self is SortDirection.DESC else SortDirection.DESC


class IncidentSortField(str, Enum):
    """Incident fields the API can sort by."""

    CREATED_AT = "created_at"
    UPDATED_AT = "updated_at"
    STARTED_AT = "started_at"
    RESOLVED_AT = "resolved_at"

    @property
    def label(self) -> str:
        return self.value.replace("_at", "").replace("_", " ").title()


INCIDENT_SORT_FIELDS: tuple[IncidentSortField, ...] = tuple(IncidentSortField)


@dataclass(frozen=True)
class SortState:
    """Current sort field and direction; ``field=None`` means API default order.

    Example::

        state = SortState().toggle(IncidentSortField.CREATED_AT)
        state.param()                  # '-created_at'
        state.toggle(IncidentSortField.CREATED_AT).param()  # 'created_at'
    """

    field: Optional[IncidentSortField] = None
    direction: SortDirection = SortDirection.DESC

    @property
    def enabled(self) -> bool:
        return self.field is not None

    def toggle(self, field: IncidentSortField) -> SortState:
        """Return the state after selecting *field*.

        Selecting the current field flips the direction; a new field starts
        descending.
        """
        if self.field is field:
            return SortState(field, self.direction.flipped())
        return SortState(field, SortDirection.DESC)

    def flip(self) -> SortState:
        if self.field is None:
            return self
        return SortState(self.field, self.direction.flipped())

    def next_field(self) -> SortState:
        """Select the field after the current one, wrapping around."""
        if self.field is None:
            return SortState(INCIDENT_SORT_FIELDS[0], SortDirection.DESC)
        index = INCIDENT_SORT_FIELDS.index(self.field)
        return SortState(INCIDENT_SORT_FIELDS[(index + 1) % len(INCIDENT_SORT_FIELDS)], self.direction)

    def param(self) -> str:
        """The API ``sort`` value, e.g. ``-created_at``; ``""`` when disabled."""
        if self.field is None:
            return ""
        prefix = "-" if self.direction is SortDirection.DESC else ""
        return prefix + self.field.value

    @property
    def indicator(self) -> str:
        if self.field is None:
            return ""
        return "↓" if self.direction is SortDirection.DESC else "↑"

    def describe(self) -> str:
        if self.field is None:
            return ""
        return f"{self.indicator} {self.field.label}"
