"""View models for projectable content.

Every view model is addressed by its collection name and id, which is how the
content repository finds the content behind a projector element. Content that
is discussed as part of the agenda derives from ``AgendaContent`` and can
report its agenda item; other content (users, mediafiles) cannot.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass

from projector_feed.models.agenda import Item


class ViewModel(ABC):
    """Base class for all view models."""

    collection: str = ""

    @property
    @abstractmethod
    def id(self) -> int:
        """Identifier of the model within its collection."""
        ...

    @abstractmethod
    def get_title(self) -> str:
        """Title used when the model is shown."""
        ...

    def get_list_title(self) -> str:
        """Title used when the model is shown in a list."""
        return self.get_title()


class AgendaContent(ViewModel):
    """View model that belongs to an agenda item."""

    @abstractmethod
    def get_agenda_item(self) -> Item | None:
        """Return the agenda item of this content, or None if it has none."""
        ...


@dataclass(frozen=True)
class ViewTopic(AgendaContent):
    """A topic of the agenda."""

    collection = "topics/topic"

    topic_id: int
    title: str
    agenda_item: Item | None = None

    @property
    def id(self) -> int:
        return self.topic_id

    def get_title(self) -> str:
        return self.title

    def get_agenda_item(self) -> Item | None:
        return self.agenda_item


@dataclass(frozen=True)
class ViewMotion(AgendaContent):
    """A motion, optionally placed on the agenda."""

    collection = "motions/motion"

    motion_id: int
    title: str
    identifier: str = ""
    agenda_item: Item | None = None

    @property
    def id(self) -> int:
        return self.motion_id

    def get_title(self) -> str:
        if self.identifier:
            return f"{self.identifier}: {self.title}"
        return self.title

    def get_agenda_item(self) -> Item | None:
        return self.agenda_item


@dataclass(frozen=True)
class ViewAssignment(AgendaContent):
    """An election, optionally placed on the agenda."""

    collection = "assignments/assignment"

    assignment_id: int
    title: str
    agenda_item: Item | None = None

    @property
    def id(self) -> int:
        return self.assignment_id

    def get_title(self) -> str:
        return self.title

    def get_agenda_item(self) -> Item | None:
        return self.agenda_item


@dataclass(frozen=True)
class ViewUser(ViewModel):
    """A participant. Users are projectable but never part of the agenda."""

    collection = "users/user"

    user_id: int
    full_name: str

    @property
    def id(self) -> int:
        return self.user_id

    def get_title(self) -> str:
        return self.full_name


@dataclass(frozen=True)
class ViewMediafile(ViewModel):
    """An uploaded file, e.g. a presentation."""

    collection = "mediafiles/mediafile"

    mediafile_id: int
    filename: str

    @property
    def id(self) -> int:
        return self.mediafile_id

    def get_title(self) -> str:
        return self.filename


@dataclass(frozen=True)
class Submitter:
    """Raw submitter record linking a user to a motion."""

    id: int
    user_id: int
    motion_id: int
    weight: int = 0


class ViewSubmitter(ViewModel):
    """Submitter of a motion, titled after the related user.

    Example:
        >>> submitter = Submitter(id=1, user_id=5, motion_id=2, weight=1)
        >>> ViewSubmitter(submitter, ViewUser(user_id=5, full_name="Ada")).get_title()
        'Ada'
    """

    collection = "motions/submitter"

    def __init__(self, submitter: Submitter, user: ViewUser | None = None) -> None:
        self._submitter = submitter
        self._user = user

    @property
    def submitter(self) -> Submitter:
        return self._submitter

    @property
    def user(self) -> ViewUser | None:
        return self._user

    @property
    def id(self) -> int:
        return self._submitter.id

    @property
    def user_id(self) -> int:
        return self._submitter.user_id

    @property
    def motion_id(self) -> int:
        return self._submitter.motion_id

    @property
    def weight(self) -> int:
        return self._submitter.weight

    def get_title(self) -> str:
        return self._user.get_title() if self._user else ""
