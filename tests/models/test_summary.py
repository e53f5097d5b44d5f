"""Tests for JSON summary models."""

import pytest
from pydantic import ValidationError

from projector_feed.models import AgendaItemSummary, Item, ItemVisibility, Projector
from projector_feed.models.summary import ProjectorSummary


def test_agenda_item_summary_from_item():
    item = Item(id=3, title="Budget", item_number="TOP 1", type=ItemVisibility.INTERNAL)

    summary = AgendaItemSummary.from_item(item)

    assert summary.id == 3
    assert summary.title == "TOP 1 · Budget"
    assert summary.type == 2
    assert summary.done is False


def test_agenda_item_summary_rejects_invalid_id():
    with pytest.raises(ValidationError):
        AgendaItemSummary(id=0, title="x", type=1)


def test_projector_summary_with_item(clock, topic_element, topic_item):
    """The summary lists elements in their flat shape and the current item."""
    projector = Projector(id=7, elements=(clock, topic_element), name="Side")

    summary = ProjectorSummary.from_projector(projector, topic_item)
    data = summary.model_dump()

    assert data["id"] == 7
    assert data["name"] == "Side"
    assert data["elements"] == [
        {"name": "core/clock", "stable": True},
        {"name": "topics/topic", "stable": False, "id": 3},
    ]
    assert data["current_item"]["id"] == 3


def test_projector_summary_without_item():
    summary = ProjectorSummary.from_projector(Projector(id=1), None)

    assert summary.current_item is None
    assert summary.elements == []
