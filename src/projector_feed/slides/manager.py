"""Slide manager: turns raw projector elements into element descriptors.

Every slide is described by a manifest naming the element fields that
identify one projection of it. A motion slide is identified by its name and
the motion id, while the clock slide is identified by its name alone.
"""

from collections.abc import Iterable
from dataclasses import dataclass

import structlog

from projector_feed.errors import MalformedElementError
from projector_feed.models.projector import ElementDescriptor, ProjectorElement

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class SlideManifest:
    """Description of a slide.

    Attributes:
        name: Slide name, matching ProjectorElement.name
        element_identifiers: Fields identifying a projection (must include "name")
        verbose_name: Human readable slide name
    """

    name: str
    element_identifiers: tuple[str, ...] = ("name",)
    verbose_name: str = ""

    def __post_init__(self) -> None:
        """Validate the manifest.

        Raises:
            ValueError: If the name is empty or identifiers lack "name"
        """
        if not self.name or not self.name.strip():
            raise ValueError("Slide name cannot be empty")
        if "name" not in self.element_identifiers:
            raise ValueError(f"Slide '{self.name}' identifiers must include 'name'")


DEFAULT_SLIDES: tuple[SlideManifest, ...] = (
    SlideManifest("topics/topic", ("name", "id"), "Topic"),
    SlideManifest("motions/motion", ("name", "id"), "Motion"),
    SlideManifest("assignments/assignment", ("name", "id"), "Election"),
    SlideManifest("users/user", ("name", "id"), "Participant"),
    SlideManifest("mediafiles/mediafile", ("name", "id"), "File"),
    SlideManifest("agenda/item-list", ("name",), "Agenda"),
    SlideManifest("agenda/list-of-speakers", ("name", "id"), "List of speakers"),
    SlideManifest("agenda/current-list-of-speakers", ("name",), "Current list of speakers"),
    SlideManifest(
        "agenda/current-list-of-speakers-overlay", ("name",), "Current list of speakers overlay"
    ),
    SlideManifest("core/clock", ("name",), "Clock"),
    SlideManifest("core/countdown", ("name", "id"), "Countdown"),
    SlideManifest("core/projector-message", ("name", "id"), "Message"),
)


class SlideManager:
    """Registry of slide manifests.

    Example:
        >>> manager = SlideManager()
        >>> element = ProjectorElement(name="motions/motion", options={"id": 4})
        >>> manager.get_identifiable_element(element).key()
        (('id', 4), ('name', 'motions/motion'))
    """

    def __init__(self, manifests: Iterable[SlideManifest] = DEFAULT_SLIDES) -> None:
        self._manifests: dict[str, SlideManifest] = {}
        for manifest in manifests:
            self.register(manifest)

    def register(self, manifest: SlideManifest) -> None:
        """Register a slide, replacing a previous manifest with the same name."""
        self._manifests[manifest.name] = manifest
        logger.debug("slide_registered", slide=manifest.name)

    def get_manifest(self, name: str) -> SlideManifest:
        """Return the manifest of a slide.

        Raises:
            MalformedElementError: If no slide with that name is registered
        """
        manifest = self._manifests.get(name)
        if manifest is None:
            raise MalformedElementError(f"Unknown slide '{name}'")
        return manifest

    def get_identifiable_element(self, element: ProjectorElement) -> ElementDescriptor:
        """Resolve a raw element to its canonical descriptor.

        Args:
            element: Element as configured on a projector

        Returns:
            Descriptor carrying the slide's identifiers and the element's fields

        Raises:
            MalformedElementError: If the slide is unknown or an identifier is missing
        """
        manifest = self.get_manifest(element.name)
        missing = [
            identifier
            for identifier in manifest.element_identifiers
            if element.get(identifier) is None
        ]
        if missing:
            raise MalformedElementError(
                f"Element of slide '{element.name}' lacks identifiers {missing}"
            )
        return ElementDescriptor(
            name=element.name,
            stable=element.stable,
            identifiers=manifest.element_identifiers,
            options=dict(element.options),
        )
