"""Data models for projectors, agenda items and projectable content."""

from projector_feed.models.agenda import ITEM_VISIBILITY_CHOICES, Item, ItemVisibility
from projector_feed.models.content import (
    AgendaContent,
    Submitter,
    ViewAssignment,
    ViewMediafile,
    ViewModel,
    ViewMotion,
    ViewSubmitter,
    ViewTopic,
    ViewUser,
)
from projector_feed.models.projector import ElementDescriptor, Projector, ProjectorElement
from projector_feed.models.summary import AgendaItemSummary, ProjectorSummary

__all__ = [
    # Projector configuration
    "Projector",
    "ProjectorElement",
    "ElementDescriptor",
    # Agenda
    "Item",
    "ItemVisibility",
    "ITEM_VISIBILITY_CHOICES",
    # Content
    "ViewModel",
    "AgendaContent",
    "ViewTopic",
    "ViewMotion",
    "ViewAssignment",
    "ViewUser",
    "ViewMediafile",
    "Submitter",
    "ViewSubmitter",
    # JSON output
    "AgendaItemSummary",
    "ProjectorSummary",
]
