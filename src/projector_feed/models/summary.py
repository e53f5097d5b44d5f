"""Pydantic models for JSON output of projector state."""

from typing import Any

from pydantic import BaseModel, Field

from projector_feed.models.agenda import Item
from projector_feed.models.projector import Projector


class AgendaItemSummary(BaseModel):
    """JSON view of an agenda item.

    Attributes:
        id: Item identifier
        title: Title including the item number
        type: Visibility value (1 public, 2 internal, 3 hidden)
        done: Whether the item is closed
    """

    id: int = Field(..., description="Agenda item id", gt=0)
    title: str = Field(..., description="Title including the item number")
    type: int = Field(..., description="Visibility of the item")
    done: bool = Field(default=False, description="Whether the item is closed")

    @classmethod
    def from_item(cls, item: Item) -> "AgendaItemSummary":
        return cls(id=item.id, title=item.get_title(), type=item.type.value, done=item.done)


class ProjectorSummary(BaseModel):
    """JSON view of a projector and the agenda item currently shown on it.

    Attributes:
        id: Projector identifier
        name: Projector name
        elements: Projector elements in their flat JSON shape
        current_item: Agenda item of the non-stable element, or None
    """

    id: int = Field(..., description="Projector id", gt=0)
    name: str = Field(default="", description="Projector name")
    elements: list[dict[str, Any]] = Field(default_factory=list)
    current_item: AgendaItemSummary | None = Field(
        default=None, description="Agenda item currently shown"
    )

    @classmethod
    def from_projector(cls, projector: Projector, item: Item | None) -> "ProjectorSummary":
        return cls(
            id=projector.id,
            name=projector.name,
            elements=[element.to_dict() for element in projector.elements],
            current_item=AgendaItemSummary.from_item(item) if item is not None else None,
        )
