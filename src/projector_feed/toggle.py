"""Toggle the current list of speakers slide or overlay on a projector."""

import structlog

from projector_feed.directory.base import ProjectorDirectory
from projector_feed.models.projector import ElementDescriptor, Projector

logger = structlog.get_logger(__name__)

CURRENT_LIST_OF_SPEAKERS_SLIDE = "agenda/current-list-of-speakers"
CURRENT_LIST_OF_SPEAKERS_OVERLAY = "agenda/current-list-of-speakers-overlay"


class CurrentListOfSpeakersSlide:
    """Projects and removes the current list of speakers.

    The slide is the non-stable variant and takes over the projector; the
    overlay is stable and is shown on top of whatever is projected.
    """

    def __init__(self, directory: ProjectorDirectory) -> None:
        self.directory = directory

    @staticmethod
    def element_for(overlay: bool) -> ElementDescriptor:
        """Return the descriptor of the slide, or of the overlay if ``overlay``."""
        return ElementDescriptor(
            name=CURRENT_LIST_OF_SPEAKERS_OVERLAY if overlay else CURRENT_LIST_OF_SPEAKERS_SLIDE,
            stable=overlay,
            identifiers=("name",),
        )

    async def is_projected_on(self, projector: Projector, overlay: bool) -> bool:
        """Return True if the slide (or overlay) is projected on the projector."""
        return await self.directory.is_projected_on(projector.id, self.element_for(overlay))

    async def toggle_on(self, projector: Projector, overlay: bool) -> None:
        """Remove the slide (or overlay) if it is projected, otherwise project it.

        Exactly one mutation is sent to the directory. Errors raised by the
        mutation propagate unchanged.

        Raises:
            ProjectionError: If the directory rejects the mutation
        """
        element = self.element_for(overlay)
        log = logger.bind(projector_id=projector.id, slide=element.name)
        if await self.directory.is_projected_on(projector.id, element):
            log.info("current_list_of_speakers_removing")
            await self.directory.remove_from(projector.id, element)
        else:
            log.info("current_list_of_speakers_projecting")
            await self.directory.project_on(projector.id, element)
