"""Projector directory protocol and listener fan-out.

A projector directory is the source of truth for projectors. It publishes a
full projector snapshot to its listeners every time a projector changes and
accepts project/remove mutations for single elements.
"""

import threading
from collections.abc import Callable
from typing import Protocol

import structlog

from projector_feed.models.projector import ElementDescriptor, Projector

logger = structlog.get_logger(__name__)

ProjectorListener = Callable[[Projector], None]
Unsubscribe = Callable[[], None]


class ProjectorDirectory(Protocol):
    """Protocol implemented by projector directories."""

    def subscribe(self, listener: ProjectorListener) -> Unsubscribe:
        """Register a listener for projector snapshots.

        Args:
            listener: Called with the full snapshot of every changed projector

        Returns:
            Function that removes the listener again
        """
        ...

    def get_projector(self, projector_id: int) -> Projector:
        """Return the current snapshot of a projector.

        Raises:
            ProjectorNotFoundError: If the projector does not exist
        """
        ...

    async def is_projected_on(self, projector_id: int, descriptor: ElementDescriptor) -> bool:
        """Return True if an element matching the descriptor is on the projector."""
        ...

    async def project_on(self, projector_id: int, descriptor: ElementDescriptor) -> None:
        """Add the element for a descriptor to the projector.

        Raises:
            ProjectionError: If the projector rejects the element
        """
        ...

    async def remove_from(self, projector_id: int, descriptor: ElementDescriptor) -> None:
        """Remove the elements matching a descriptor from the projector.

        Raises:
            ProjectionError: If the projector rejects the removal
        """
        ...


class ListenerSet:
    """Thread-safe set of projector listeners.

    Listeners are called in registration order. A failing listener is logged
    and does not keep the remaining listeners from seeing the snapshot.
    """

    def __init__(self) -> None:
        self._listeners: list[ProjectorListener] = []
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._listeners)

    def add(self, listener: ProjectorListener) -> Unsubscribe:
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def emit(self, projector: Projector) -> None:
        """Send a projector snapshot to every listener."""
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(projector)
            except Exception as e:
                logger.error(
                    "projector_listener_error",
                    projector_id=projector.id,
                    error=str(e),
                    exc_info=True,
                )
