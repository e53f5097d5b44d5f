"""Content repository: the live view models behind projector elements.

Content is keyed by (collection, id). A descriptor addresses content through
its slide name, used as the collection, and its "id" field.
"""

import json
import threading
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import structlog

from projector_feed.errors import ContentNotFoundError
from projector_feed.models.agenda import Item, ItemVisibility
from projector_feed.models.content import (
    ViewAssignment,
    ViewMediafile,
    ViewModel,
    ViewMotion,
    ViewTopic,
    ViewUser,
)
from projector_feed.models.projector import ElementDescriptor

logger = structlog.get_logger(__name__)


class ContentRepository:
    """In-process registry of view models.

    Example:
        >>> repo = ContentRepository()
        >>> repo.register(ViewTopic(topic_id=3, title="Budget"))
        >>> descriptor = ElementDescriptor("topics/topic", identifiers=("name", "id"),
        ...                                options={"id": 3})
        >>> repo.lookup(descriptor).get_title()
        'Budget'
    """

    def __init__(self) -> None:
        self._content: dict[tuple[str, int], ViewModel] = {}
        self._lock = threading.Lock()

    def register(self, view_model: ViewModel) -> None:
        """Register or replace a view model."""
        key = (view_model.collection, view_model.id)
        with self._lock:
            self._content[key] = view_model
        logger.debug("content_registered", collection=key[0], content_id=key[1])

    def unregister(self, collection: str, content_id: int) -> None:
        """Remove a view model if it is registered."""
        with self._lock:
            removed = self._content.pop((collection, content_id), None)
        if removed is not None:
            logger.debug("content_unregistered", collection=collection, content_id=content_id)

    def get(self, collection: str, content_id: int) -> ViewModel:
        """Return the view model for a collection and id.

        Raises:
            ContentNotFoundError: If nothing is registered under that key
        """
        with self._lock:
            view_model = self._content.get((collection, content_id))
        if view_model is None:
            raise ContentNotFoundError(collection, content_id)
        return view_model

    def lookup(self, descriptor: ElementDescriptor) -> ViewModel:
        """Return the view model currently backing a descriptor.

        Raises:
            ContentNotFoundError: If the descriptor has no id or nothing is registered
        """
        content_id = descriptor.get("id")
        if not isinstance(content_id, int):
            raise ContentNotFoundError(descriptor.name)
        return self.get(descriptor.name, content_id)


def _parse_item(data: Mapping[str, Any] | None) -> Item | None:
    if data is None:
        return None
    content_object = data.get("content_object")
    return Item(
        id=int(data["id"]),
        title=str(data.get("title", "")),
        item_number=str(data.get("item_number", "")),
        type=ItemVisibility(int(data.get("type", ItemVisibility.AGENDA_ITEM.value))),
        done=bool(data.get("done", False)),
        content_object=(str(content_object[0]), int(content_object[1])) if content_object else None,
    )


def _parse_view_model(collection: str, data: Mapping[str, Any]) -> ViewModel:
    content_id = int(data["id"])
    if collection == ViewTopic.collection:
        return ViewTopic(content_id, str(data["title"]), _parse_item(data.get("agenda_item")))
    if collection == ViewMotion.collection:
        return ViewMotion(
            content_id,
            str(data["title"]),
            str(data.get("identifier", "")),
            _parse_item(data.get("agenda_item")),
        )
    if collection == ViewAssignment.collection:
        return ViewAssignment(content_id, str(data["title"]), _parse_item(data.get("agenda_item")))
    if collection == ViewUser.collection:
        return ViewUser(content_id, str(data["full_name"]))
    if collection == ViewMediafile.collection:
        return ViewMediafile(content_id, str(data["filename"]))
    raise ValueError(f"Unsupported content collection '{collection}'")


def load_content(data: Mapping[str, Any]) -> ContentRepository:
    """Build a content repository from a collection -> records mapping.

    Example:
        >>> repo = load_content({
        ...     "topics/topic": [
        ...         {"id": 3, "title": "Budget", "agenda_item": {"id": 3, "title": "Budget"}}
        ...     ]
        ... })

    Raises:
        ValueError: If a collection is unsupported or a record is incomplete
    """
    repo = ContentRepository()
    for collection, records in data.items():
        for record in records:
            try:
                repo.register(_parse_view_model(collection, record))
            except (KeyError, TypeError) as e:
                raise ValueError(f"Invalid record in '{collection}': {e}") from e
    return repo


def load_content_file(path: str | Path) -> ContentRepository:
    """Build a content repository from a JSON file (see ``load_content``).

    Raises:
        OSError: If the file cannot be read
        ValueError: If the file is not valid content JSON
    """
    with open(path, encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"Content file {path} must contain a JSON object")
    logger.info("content_file_loaded", path=str(path), collections=len(data))
    return load_content(data)
