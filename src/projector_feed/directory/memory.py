"""In-memory projector directory.

Keeps projectors in a dict and notifies listeners synchronously on every
change. Used for tests, demos and embedding without Message DB.
"""

import threading
from collections.abc import Iterable

import structlog

from projector_feed.directory.base import ListenerSet, ProjectorListener, Unsubscribe
from projector_feed.directory.projection import (
    add_element,
    check_can_project,
    check_can_remove,
    remove_matching,
)
from projector_feed.errors import ProjectorNotFoundError
from projector_feed.models.projector import ElementDescriptor, Projector, ProjectorElement

logger = structlog.get_logger(__name__)


class InMemoryProjectorDirectory:
    """Projector directory backed by a dict.

    Example:
        >>> directory = InMemoryProjectorDirectory([Projector(id=1, name="Main")])
        >>> unsubscribe = directory.subscribe(print)
        >>> await directory.project_on(1, descriptor)  # prints the new snapshot
    """

    def __init__(self, projectors: Iterable[Projector] = ()) -> None:
        self._projectors: dict[int, Projector] = {p.id: p for p in projectors}
        self._listeners = ListenerSet()
        self._lock = threading.Lock()
        logger.debug("in_memory_directory_initialized", projector_count=len(self._projectors))

    def subscribe(self, listener: ProjectorListener) -> Unsubscribe:
        return self._listeners.add(listener)

    def get_projector(self, projector_id: int) -> Projector:
        with self._lock:
            projector = self._projectors.get(projector_id)
        if projector is None:
            raise ProjectorNotFoundError(projector_id)
        return projector

    def list_projectors(self) -> list[Projector]:
        with self._lock:
            return sorted(self._projectors.values(), key=lambda p: p.id)

    def add_projector(self, projector: Projector) -> None:
        """Add or replace a projector and notify listeners."""
        with self._lock:
            self._projectors[projector.id] = projector
        logger.info("projector_added", projector_id=projector.id)
        self._listeners.emit(projector)

    def update_projector(
        self, projector_id: int, elements: Iterable[ProjectorElement]
    ) -> Projector:
        """Replace the elements of a projector and notify listeners.

        Raises:
            ProjectorNotFoundError: If the projector does not exist
        """
        with self._lock:
            current = self._projectors.get(projector_id)
            if current is None:
                raise ProjectorNotFoundError(projector_id)
            updated = current.with_elements(elements)
            self._projectors[projector_id] = updated
        logger.debug("projector_updated", projector_id=projector_id)
        self._listeners.emit(updated)
        return updated

    async def is_projected_on(self, projector_id: int, descriptor: ElementDescriptor) -> bool:
        projector = self.get_projector(projector_id)
        return any(descriptor.matches(e) for e in projector.elements)

    async def project_on(self, projector_id: int, descriptor: ElementDescriptor) -> None:
        with self._lock:
            current = self._projectors.get(projector_id)
            if current is None:
                raise ProjectorNotFoundError(projector_id)
            check_can_project(current, descriptor)
            updated = current.with_elements(add_element(current.elements, descriptor.to_element()))
            self._projectors[projector_id] = updated
        logger.info("element_projected", projector_id=projector_id, slide=descriptor.name)
        self._listeners.emit(updated)

    async def remove_from(self, projector_id: int, descriptor: ElementDescriptor) -> None:
        with self._lock:
            current = self._projectors.get(projector_id)
            if current is None:
                raise ProjectorNotFoundError(projector_id)
            check_can_remove(current, descriptor)
            updated = current.with_elements(remove_matching(current.elements, descriptor))
            self._projectors[projector_id] = updated
        logger.info("element_removed", projector_id=projector_id, slide=descriptor.name)
        self._listeners.emit(updated)
