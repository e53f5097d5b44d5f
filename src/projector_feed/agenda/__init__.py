"""Agenda item list helpers."""

from projector_feed.agenda.filters import (
    Filter,
    FilterOption,
    apply_filters,
    create_agenda_filters,
    create_visibility_filter_options,
)

__all__ = [
    "Filter",
    "FilterOption",
    "apply_filters",
    "create_agenda_filters",
    "create_visibility_filter_options",
]
