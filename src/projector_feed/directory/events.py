"""Projector event types.

Every projector is stored as its own event stream. The events record the
projector's creation and each change of its elements; folding a stream with
``project_to_projector`` yields the projector snapshot.
"""

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class ProjectorCreatedData:
    """Data payload for ProjectorCreated event.

    Attributes:
        projector_id: Identifier of the new projector
        name: Human readable projector name
    """

    projector_id: int
    name: str = ""

    def __post_init__(self) -> None:
        """Validate projector creation data.

        Raises:
            ValueError: If the projector id is not positive
        """
        if self.projector_id <= 0:
            raise ValueError(f"Projector id must be > 0, got {self.projector_id}")


@dataclass(frozen=True)
class ElementProjectedData:
    """Data payload for ElementProjected event.

    Attributes:
        element: The projected element in its flat JSON shape
    """

    element: dict[str, Any]

    def __post_init__(self) -> None:
        """Validate projected element data.

        Raises:
            ValueError: If the element has no name
        """
        if not self.element.get("name"):
            raise ValueError("Projected element must have a name")


@dataclass(frozen=True)
class ElementRemovedData:
    """Data payload for ElementRemoved event.

    Attributes:
        element: Identifying fields of the removed element
        identifiers: Names of the fields that identify the element
    """

    element: dict[str, Any]
    identifiers: list[str] = field(default_factory=lambda: ["name"])

    def __post_init__(self) -> None:
        """Validate removed element data.

        Raises:
            ValueError: If the element has no name or identifiers lack "name"
        """
        if not self.element.get("name"):
            raise ValueError("Removed element must have a name")
        if "name" not in self.identifiers:
            raise ValueError("Removed element identifiers must include 'name'")


# Event type constants for consistency
PROJECTOR_CREATED = "ProjectorCreated"
ELEMENT_PROJECTED = "ElementProjected"
ELEMENT_REMOVED = "ElementRemoved"
PROJECTOR_CLEARED = "ProjectorCleared"
