"""Pytest configuration and fixtures for testing.

This module provides pytest fixtures for:
- Message construction for stream and category reads
- Projectors, agenda items and content used across test modules
- A mocked Message DB client with a scriptable cursor
"""

from datetime import UTC, datetime
from typing import Any
from unittest.mock import MagicMock, Mock
from uuid import uuid4

import pytest

from projector_feed.config import LoggingConfig
from projector_feed.content import ContentRepository
from projector_feed.directory.memory import InMemoryProjectorDirectory
from projector_feed.logging_setup import configure_logging
from projector_feed.models import (
    Item,
    Projector,
    ProjectorElement,
    ViewMotion,
    ViewTopic,
    ViewUser,
)
from projector_feed.slides.manager import SlideManager
from projector_feed.store import Message


@pytest.fixture(autouse=True)
def quiet_logs():
    """Send warnings and errors to stderr so command output on stdout stays clean."""
    configure_logging(LoggingConfig(log_level="WARNING", log_format="json"))


def _build_message(
    type: str,
    data: dict[str, Any] | None = None,
    stream_name: str = "projector:v0-7",
    position: int = 0,
    global_position: int = 100,
) -> Message:
    """Build a Message as returned by read_stream or get_category_messages."""
    return Message(
        id=str(uuid4()),
        stream_name=stream_name,
        type=type,
        position=position,
        global_position=global_position,
        data=data or {},
        metadata=None,
        time=datetime(2024, 1, 1, tzinfo=UTC),
    )


@pytest.fixture
def make_message():
    """Factory fixture building messages, see ``_build_message``."""
    return _build_message


@pytest.fixture
def topic_item() -> Item:
    """Agenda item of topic 3."""
    return Item(id=3, title="Budget", item_number="TOP 1", content_object=("topics/topic", 3))


@pytest.fixture
def motion_item() -> Item:
    """Agenda item of motion 4."""
    return Item(id=8, title="Amend statutes", content_object=("motions/motion", 4))


@pytest.fixture
def content(topic_item: Item, motion_item: Item) -> ContentRepository:
    """Content repository with a topic, a motion without agenda item, a motion and a user."""
    repo = ContentRepository()
    repo.register(ViewTopic(topic_id=3, title="Budget", agenda_item=topic_item))
    repo.register(ViewMotion(motion_id=4, title="Amend statutes", agenda_item=motion_item))
    repo.register(ViewMotion(motion_id=5, title="Unplaced motion"))
    repo.register(ViewUser(user_id=9, full_name="Ada Lovelace"))
    return repo


@pytest.fixture
def slide_manager() -> SlideManager:
    return SlideManager()


@pytest.fixture
def clock() -> ProjectorElement:
    return ProjectorElement(name="core/clock", stable=True)


@pytest.fixture
def topic_element() -> ProjectorElement:
    return ProjectorElement(name="topics/topic", options={"id": 3})


@pytest.fixture
def directory(clock: ProjectorElement) -> InMemoryProjectorDirectory:
    """In-memory directory with projector 1 (empty) and projector 7 (clock only)."""
    return InMemoryProjectorDirectory(
        [
            Projector(id=1, name="Main"),
            Projector(id=7, elements=(clock,), name="Side"),
        ]
    )


@pytest.fixture
def mock_client() -> tuple[MagicMock, Mock, MagicMock]:
    """MessageDBClient mock lending one connection with one reusable cursor.

    Returns:
        (client, conn, cursor) so tests can script fetchone/fetchall and inspect
        execute, commit and rollback
    """
    cursor = MagicMock()
    cursor.__enter__.return_value = cursor
    cursor.__exit__.return_value = False

    conn = Mock()
    conn.cursor.return_value = cursor

    client = MagicMock()
    client.connection.return_value.__enter__.return_value = conn
    client.connection.return_value.__exit__.return_value = False
    return client, conn, cursor
