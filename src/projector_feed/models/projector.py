"""Projector and projector element models.

A projector shows an ordered list of elements. Every element names the slide
it renders and carries a ``stable`` flag: stable elements (clocks, overlays,
banners) stay on the projector, while the single non-stable element is the
rotating content that is currently "on air".

Example:
    >>> projector = Projector(
    ...     id=7,
    ...     elements=(
    ...         ProjectorElement(name="core/clock", stable=True),
    ...         ProjectorElement(name="topics/topic", options={"id": 3}),
    ...     ),
    ... )
    >>> [e.name for e in projector.non_stable_elements()]
    ['topics/topic']
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class ProjectorElement:
    """One configured content slot on a projector.

    Attributes:
        name: Slide name, e.g. "topics/topic" or "agenda/current-list-of-speakers"
        stable: False for the rotating element, True for fixed elements
        options: Any further fields of the element (e.g. "id" of the shown object)
    """

    name: str
    stable: bool = False
    options: Mapping[str, Any] = field(default_factory=dict, hash=False)

    def __post_init__(self) -> None:
        """Validate the element.

        Raises:
            ValueError: If the name is empty or options shadow name/stable
        """
        if not self.name or not self.name.strip():
            raise ValueError("Projector element name cannot be empty")
        reserved = {"name", "stable"} & set(self.options)
        if reserved:
            raise ValueError(f"Projector element options cannot contain {sorted(reserved)}")

    def get(self, key: str, default: Any = None) -> Any:
        """Return a field of the element, including name and stable."""
        if key == "name":
            return self.name
        if key == "stable":
            return self.stable
        return self.options.get(key, default)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the flat JSON shape used in event payloads."""
        return {"name": self.name, "stable": self.stable, **self.options}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ProjectorElement":
        """Build an element from its flat JSON shape.

        Raises:
            ValueError: If the name is missing or empty
        """
        options = {k: v for k, v in data.items() if k not in ("name", "stable")}
        return cls(
            name=str(data.get("name") or ""),
            stable=bool(data.get("stable", False)),
            options=options,
        )


@dataclass(frozen=True)
class Projector:
    """Snapshot of a projector's configuration.

    Attributes:
        id: Projector identifier (positive integer)
        elements: Configured elements in projection order
        name: Human readable projector name
    """

    id: int
    elements: tuple[ProjectorElement, ...] = ()
    name: str = ""

    def __post_init__(self) -> None:
        """Validate the projector.

        Raises:
            ValueError: If the id is not positive
        """
        if self.id <= 0:
            raise ValueError(f"Projector id must be > 0, got {self.id}")

    def non_stable_elements(self) -> list[ProjectorElement]:
        """Return the non-stable elements in configuration order."""
        return [element for element in self.elements if not element.stable]

    def with_elements(self, elements: Iterable[ProjectorElement]) -> "Projector":
        """Return a copy of this projector with other elements."""
        return Projector(id=self.id, elements=tuple(elements), name=self.name)


@dataclass(frozen=True, eq=False)
class ElementDescriptor:
    """Canonical, identifiable form of a projector element.

    Two descriptors are equal when their names match and the values of all
    identifier fields match. Fields outside ``identifiers`` do not take part
    in identity.

    Attributes:
        name: Slide name
        stable: Whether the element is projected as a stable element
        identifiers: Field names that identify the element (always includes "name")
        options: Further element fields, including identifier values
    """

    name: str
    stable: bool = False
    identifiers: tuple[str, ...] = ("name",)
    options: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.name or not self.name.strip():
            raise ValueError("Element descriptor name cannot be empty")
        if "name" not in self.identifiers:
            raise ValueError("Element descriptor identifiers must include 'name'")

    def get(self, key: str, default: Any = None) -> Any:
        if key == "name":
            return self.name
        if key == "stable":
            return self.stable
        return self.options.get(key, default)

    def key(self) -> tuple[tuple[str, Any], ...]:
        """Return the identity of this descriptor as a hashable tuple."""
        return tuple((identifier, self.get(identifier)) for identifier in sorted(self.identifiers))

    def matches(self, element: ProjectorElement) -> bool:
        """Return True if the element represents this descriptor."""
        return all(
            element.get(identifier) == self.get(identifier) for identifier in self.identifiers
        )

    def to_element(self) -> ProjectorElement:
        """Build the projector element to project for this descriptor."""
        return ProjectorElement(name=self.name, stable=self.stable, options=dict(self.options))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ElementDescriptor):
            return NotImplemented
        return self.key() == other.key()

    def __hash__(self) -> int:
        return hash(self.key())
