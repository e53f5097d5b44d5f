"""Element rules and the projector stream projection.

``add_element`` and ``remove_matching`` describe how a projector's elements
change; both directories use them so in-memory and stored projectors behave
alike. ``project_to_projector`` is a pure function folding a projector's event
stream into its current snapshot.

Example:
    >>> messages = read_stream(client, "projector:v0-7")
    >>> projector = project_to_projector(messages, projector_id=7)
    >>> [e.name for e in projector.elements]
    ['core/clock', 'topics/topic']
"""

from collections.abc import Iterable, Sequence

import structlog

from projector_feed.directory.events import (
    ELEMENT_PROJECTED,
    ELEMENT_REMOVED,
    PROJECTOR_CLEARED,
    PROJECTOR_CREATED,
)
from projector_feed.errors import ProjectionConflictError
from projector_feed.models.projector import ElementDescriptor, Projector, ProjectorElement
from projector_feed.store.operations import Message

logger = structlog.get_logger(__name__)


def add_element(
    elements: Sequence[ProjectorElement], element: ProjectorElement
) -> tuple[ProjectorElement, ...]:
    """Return the elements after projecting one more element.

    A projector shows one non-stable element at a time: projecting a
    non-stable element replaces every other non-stable element. Stable
    elements are appended.
    """
    if element.stable:
        return (*elements, element)
    return (*(e for e in elements if e.stable), element)


def remove_matching(
    elements: Sequence[ProjectorElement], descriptor: ElementDescriptor
) -> tuple[ProjectorElement, ...]:
    """Return the elements without those matching a descriptor."""
    return tuple(e for e in elements if not descriptor.matches(e))


def check_can_project(projector: Projector, descriptor: ElementDescriptor) -> None:
    """Reject projecting an element that is already projected.

    Raises:
        ProjectionConflictError: If a matching element is on the projector
    """
    if any(descriptor.matches(e) for e in projector.elements):
        raise ProjectionConflictError(projector.id, descriptor.name, "already projected")


def check_can_remove(projector: Projector, descriptor: ElementDescriptor) -> None:
    """Reject removing an element that is not projected.

    Raises:
        ProjectionConflictError: If no matching element is on the projector
    """
    if not any(descriptor.matches(e) for e in projector.elements):
        raise ProjectionConflictError(projector.id, descriptor.name, "not projected")


def project_to_projector(messages: Iterable[Message], projector_id: int) -> Projector | None:
    """Fold a projector stream into the projector snapshot.

    Args:
        messages: Messages of one projector stream in stream order
        projector_id: Identifier of the projector the stream belongs to

    Returns:
        The projector, or None if the stream holds no ProjectorCreated event
    """
    created = False
    name = ""
    elements: tuple[ProjectorElement, ...] = ()

    for message in messages:
        if message.type == PROJECTOR_CREATED:
            created = True
            name = str(message.data.get("name", ""))
        elif message.type == ELEMENT_PROJECTED:
            elements = add_element(elements, ProjectorElement.from_dict(message.data["element"]))
        elif message.type == ELEMENT_REMOVED:
            identifiers = tuple(message.data.get("identifiers", ["name"]))
            element = message.data["element"]
            descriptor = ElementDescriptor(
                name=element["name"],
                identifiers=identifiers,
                options={k: v for k, v in element.items() if k not in ("name", "stable")},
            )
            elements = remove_matching(elements, descriptor)
        elif message.type == PROJECTOR_CLEARED:
            elements = tuple(e for e in elements if e.stable)
        else:
            logger.debug(
                "projector_event_ignored",
                projector_id=projector_id,
                event_type=message.type,
            )

    if not created:
        return None
    return Projector(id=projector_id, elements=elements, name=name)
