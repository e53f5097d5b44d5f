"""Tests for MessageDBProjectorDirectory.

Store access is patched; these tests check which events are written with
which expected versions and how streams are folded and fanned out.
"""

from unittest.mock import Mock, patch

import pytest

from projector_feed.config import DirectoryConfig
from projector_feed.directory.events import (
    ELEMENT_PROJECTED,
    ELEMENT_REMOVED,
    PROJECTOR_CLEARED,
    PROJECTOR_CREATED,
)
from projector_feed.directory.messagedb import MessageDBProjectorDirectory
from projector_feed.errors import ProjectionConflictError, ProjectorNotFoundError
from projector_feed.models import ElementDescriptor, Projector, ProjectorElement
from projector_feed.store import OptimisticConcurrencyError
from projector_feed.subscriber import Subscriber

MODULE = "projector_feed.directory.messagedb"


@pytest.fixture
def client():
    return Mock()


@pytest.fixture
def messagedb_directory(client):
    return MessageDBProjectorDirectory(client, DirectoryConfig(batch_size=10))


@pytest.fixture
def side_stream(make_message):
    """Stream of projector 7 holding a clock and topic 3."""
    return [
        make_message(PROJECTOR_CREATED, {"projector_id": 7, "name": "Side"}, position=0),
        make_message(
            ELEMENT_PROJECTED, {"element": {"name": "core/clock", "stable": True}}, position=1
        ),
        make_message(
            ELEMENT_PROJECTED,
            {"element": {"name": "topics/topic", "stable": False, "id": 3}},
            position=2,
        ),
    ]


class TestNaming:
    """Tests for category and stream names."""

    def test_default_config(self, client):
        directory = MessageDBProjectorDirectory(client)

        assert directory.category == "projector:v0"
        assert directory.stream_name(7) == "projector:v0-7"

    def test_custom_config(self, client):
        directory = MessageDBProjectorDirectory(
            client, DirectoryConfig(category="beamer", version="v2")
        )

        assert directory.stream_name(3) == "beamer:v2-3"


class TestLoad:
    """Tests for loading projectors from streams."""

    @patch(f"{MODULE}.read_stream")
    def test_load_returns_snapshot_and_version(
        self, mock_read, messagedb_directory, client, side_stream
    ):
        mock_read.return_value = side_stream

        projector, version = messagedb_directory.load(7)

        assert projector.name == "Side"
        assert [e.name for e in projector.elements] == ["core/clock", "topics/topic"]
        assert version == 2
        mock_read.assert_called_once_with(client, "projector:v0-7", position=0, batch_size=10)

    @patch(f"{MODULE}.read_stream")
    def test_load_reads_all_pages(self, mock_read, messagedb_directory, client, make_message):
        """Full batches are followed by another read from the next position."""
        first_page = [make_message(PROJECTOR_CREATED, {"projector_id": 7}, position=0)]
        first_page += [
            make_message(PROJECTOR_CLEARED, position=i) for i in range(1, 10)
        ]
        second_page = [make_message(PROJECTOR_CLEARED, position=10)]
        mock_read.side_effect = [first_page, second_page]

        _, version = messagedb_directory.load(7)

        assert version == 10
        assert mock_read.call_count == 2
        assert mock_read.call_args.kwargs["position"] == 10

    @patch(f"{MODULE}.read_stream")
    def test_missing_projector_raises(self, mock_read, messagedb_directory):
        mock_read.return_value = []

        with pytest.raises(ProjectorNotFoundError):
            messagedb_directory.get_projector(7)


class TestWrites:
    """Tests for creating projectors and changing elements."""

    @patch(f"{MODULE}.write_message")
    def test_create_projector(self, mock_write, messagedb_directory, client):
        messagedb_directory.create_projector(7, name="Side")

        mock_write.assert_called_once_with(
            client,
            "projector:v0-7",
            PROJECTOR_CREATED,
            {"projector_id": 7, "name": "Side"},
            expected_version=-1,
        )

    @patch(f"{MODULE}.write_message")
    def test_create_existing_projector_conflicts(self, mock_write, messagedb_directory):
        mock_write.side_effect = OptimisticConcurrencyError("projector:v0-7", -1, 0)

        with pytest.raises(ProjectionConflictError, match="already exists"):
            messagedb_directory.create_projector(7)

    @patch(f"{MODULE}.write_message")
    @patch(f"{MODULE}.read_stream")
    def test_clear_projector(self, mock_read, mock_write, messagedb_directory, side_stream):
        mock_read.return_value = side_stream

        messagedb_directory.clear_projector(7)

        args, kwargs = mock_write.call_args
        assert args[1:] == ("projector:v0-7", PROJECTOR_CLEARED, {})
        assert kwargs == {"expected_version": 2}

    @pytest.mark.asyncio
    @patch(f"{MODULE}.write_message")
    @patch(f"{MODULE}.read_stream")
    async def test_project_on(self, mock_read, mock_write, messagedb_directory, side_stream):
        mock_read.return_value = side_stream
        descriptor = ElementDescriptor(name="agenda/current-list-of-speakers-overlay", stable=True)

        await messagedb_directory.project_on(7, descriptor)

        args, kwargs = mock_write.call_args
        assert args[1:] == (
            "projector:v0-7",
            ELEMENT_PROJECTED,
            {"element": {"name": "agenda/current-list-of-speakers-overlay", "stable": True}},
        )
        assert kwargs == {"expected_version": 2}

    @pytest.mark.asyncio
    @patch(f"{MODULE}.write_message")
    @patch(f"{MODULE}.read_stream")
    async def test_project_on_conflict_writes_nothing(
        self, mock_read, mock_write, messagedb_directory, side_stream
    ):
        mock_read.return_value = side_stream

        with pytest.raises(ProjectionConflictError, match="already projected"):
            await messagedb_directory.project_on(7, ElementDescriptor(name="core/clock"))

        mock_write.assert_not_called()

    @pytest.mark.asyncio
    @patch(f"{MODULE}.write_message")
    @patch(f"{MODULE}.read_stream")
    async def test_concurrent_change_propagates(
        self, mock_read, mock_write, messagedb_directory, side_stream
    ):
        """A write against a stale version fails with the store's error."""
        mock_read.return_value = side_stream
        mock_write.side_effect = OptimisticConcurrencyError("projector:v0-7", 2, 3)

        with pytest.raises(OptimisticConcurrencyError):
            await messagedb_directory.project_on(
                7, ElementDescriptor(name="agenda/current-list-of-speakers")
            )

    @pytest.mark.asyncio
    @patch(f"{MODULE}.write_message")
    @patch(f"{MODULE}.read_stream")
    async def test_remove_from(self, mock_read, mock_write, messagedb_directory, side_stream):
        mock_read.return_value = side_stream
        descriptor = ElementDescriptor(
            name="topics/topic", identifiers=("name", "id"), options={"id": 3, "page": 2}
        )

        await messagedb_directory.remove_from(7, descriptor)

        args, kwargs = mock_write.call_args
        assert args[1:] == (
            "projector:v0-7",
            ELEMENT_REMOVED,
            {"element": {"name": "topics/topic", "id": 3}, "identifiers": ["name", "id"]},
        )
        assert kwargs == {"expected_version": 2}

    @pytest.mark.asyncio
    @patch(f"{MODULE}.write_message")
    @patch(f"{MODULE}.read_stream")
    async def test_remove_missing_element_conflicts(
        self, mock_read, mock_write, messagedb_directory, side_stream
    ):
        mock_read.return_value = side_stream

        with pytest.raises(ProjectionConflictError, match="not projected"):
            await messagedb_directory.remove_from(
                7, ElementDescriptor(name="agenda/current-list-of-speakers")
            )

        mock_write.assert_not_called()

    @pytest.mark.asyncio
    @patch(f"{MODULE}.read_stream")
    async def test_is_projected_on(self, mock_read, messagedb_directory, side_stream):
        mock_read.return_value = side_stream

        assert await messagedb_directory.is_projected_on(7, ElementDescriptor(name="core/clock"))
        assert not await messagedb_directory.is_projected_on(
            7, ElementDescriptor(name="agenda/current-list-of-speakers")
        )


class TestChangeFeed:
    """Tests for handle_message and watch."""

    @patch(f"{MODULE}.read_stream")
    def test_handle_message_emits_snapshot(
        self, mock_read, messagedb_directory, side_stream, clock, topic_element
    ):
        mock_read.return_value = side_stream
        listener = Mock()
        messagedb_directory.subscribe(listener)

        messagedb_directory.handle_message(side_stream[-1])

        listener.assert_called_once_with(
            Projector(id=7, elements=(clock, topic_element), name="Side")
        )

    @patch(f"{MODULE}.read_stream")
    def test_handle_message_without_creation(self, mock_read, messagedb_directory, make_message):
        message = make_message(ELEMENT_PROJECTED, {"element": {"name": "core/clock"}})
        mock_read.return_value = [message]
        listener = Mock()
        messagedb_directory.subscribe(listener)

        messagedb_directory.handle_message(message)

        listener.assert_not_called()

    @patch(f"{MODULE}.read_stream")
    def test_unsubscribed_listener_is_not_called(
        self, mock_read, messagedb_directory, side_stream
    ):
        mock_read.return_value = side_stream
        listener = Mock()
        unsubscribe = messagedb_directory.subscribe(listener)

        unsubscribe()
        messagedb_directory.handle_message(side_stream[0])

        listener.assert_not_called()

    def test_watch_creates_subscriber(self, client):
        directory = MessageDBProjectorDirectory(
            client, DirectoryConfig(poll_interval_ms=250, batch_size=50)
        )

        subscriber = directory.watch(position=12)

        assert isinstance(subscriber, Subscriber)
        assert subscriber.category == "projector:v0"
        assert subscriber.store_client is client
        assert subscriber.poll_interval_ms == 250
        assert subscriber.batch_size == 50
        assert subscriber.position == 12
        assert subscriber.is_running is False

    @patch(f"{MODULE}.get_category_head")
    def test_watch_starts_after_existing_events(self, mock_head, messagedb_directory, client):
        """Without a position only events written from now on are delivered."""
        mock_head.return_value = 41

        subscriber = messagedb_directory.watch()

        mock_head.assert_called_once_with(client, "projector:v0")
        assert subscriber.position == 42

    @patch(f"{MODULE}.get_category_head")
    def test_watch_on_empty_category(self, mock_head, messagedb_directory):
        mock_head.return_value = 0

        assert messagedb_directory.next_position() == 1

    @patch(f"{MODULE}.read_stream")
    def test_handle_message_without_listeners_reads_nothing(
        self, mock_read, messagedb_directory, side_stream
    ):
        messagedb_directory.handle_message(side_stream[-1])

        mock_read.assert_not_called()

    @patch(f"{MODULE}.read_stream")
    def test_watch_handler_routes_projector_events(
        self, mock_read, messagedb_directory, side_stream, make_message
    ):
        """Projector events reach the listeners, other message types do not."""
        mock_read.return_value = side_stream
        listener = Mock()
        messagedb_directory.subscribe(listener)
        handler = messagedb_directory.watch(position=0).handler

        handler(side_stream[1])
        handler(make_message("SomethingElse"))

        listener.assert_called_once()
        assert isinstance(listener.call_args.args[0], Projector)
        assert listener.call_args.args[0].elements[0] == ProjectorElement(
            name="core/clock", stable=True
        )
