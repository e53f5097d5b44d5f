"""Current list of speakers slide service.

Bundles the current item channels and the slide toggle behind the API used
by projector controls: observe the agenda item of the content projected on a
projector, and switch the current list of speakers on or off.
"""

from projector_feed.channels import CurrentItemChannels, NotificationChannel
from projector_feed.content import ContentRepository
from projector_feed.directory.base import ProjectorDirectory
from projector_feed.models.agenda import Item
from projector_feed.models.projector import Projector
from projector_feed.slides.manager import SlideManager
from projector_feed.toggle import CurrentListOfSpeakersSlide


class CurrentListOfSpeakersSlideService:
    """Facade over ``CurrentItemChannels`` and ``CurrentListOfSpeakersSlide``.

    Example:
        >>> service = CurrentListOfSpeakersSlideService(directory, content)
        >>> channel = service.get_agenda_item_channel(directory.get_projector(1))
        >>> subscription = channel.subscribe(print)
        >>> await service.toggle_on(directory.get_projector(1), overlay=True)
    """

    def __init__(
        self,
        directory: ProjectorDirectory,
        content: ContentRepository,
        slide_manager: SlideManager | None = None,
    ) -> None:
        self.channels = CurrentItemChannels(directory, slide_manager or SlideManager(), content)
        self.slide = CurrentListOfSpeakersSlide(directory)

    def get_agenda_item_channel(self, projector: Projector) -> NotificationChannel[Item | None]:
        """Return the live agenda item of the projector's non-stable element."""
        return self.channels.get_channel(projector)

    async def is_projected_on(self, projector: Projector, overlay: bool) -> bool:
        return await self.slide.is_projected_on(projector, overlay)

    async def toggle_on(self, projector: Projector, overlay: bool) -> None:
        await self.slide.toggle_on(projector, overlay)

    def close(self) -> None:
        self.channels.close()
