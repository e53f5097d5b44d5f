"""Agenda item model.

Agenda items are the linked entity behind most projectable content: a topic,
a motion or an election is discussed as one item of the agenda. The item is
what the current list of speakers slide follows.
"""

from dataclasses import dataclass
from enum import Enum


class ItemVisibility(Enum):
    """Visibility of an agenda item.

    Attributes:
        AGENDA_ITEM: Public item, shown on the agenda
        INTERNAL: Internal item, only visible to managers
        HIDDEN: Hidden item, not shown on the agenda
    """

    AGENDA_ITEM = 1
    INTERNAL = 2
    HIDDEN = 3


# Ordered (visibility, display name) pairs, as offered to users
ITEM_VISIBILITY_CHOICES: tuple[tuple[ItemVisibility, str], ...] = (
    (ItemVisibility.AGENDA_ITEM, "Public item"),
    (ItemVisibility.INTERNAL, "Internal item"),
    (ItemVisibility.HIDDEN, "Hidden item"),
)


@dataclass(frozen=True)
class Item:
    """An agenda item.

    Attributes:
        id: Item identifier
        title: Title of the item (usually taken from its content object)
        item_number: Agenda number, e.g. "TOP 1" (empty if not numbered)
        type: Visibility of the item
        done: Whether the item has been closed
        content_object: (collection, id) of the content this item belongs to

    Example:
        >>> item = Item(id=3, title="Budget", content_object=("topics/topic", 12))
        >>> item.get_title()
        'Budget'
    """

    id: int
    title: str
    item_number: str = ""
    type: ItemVisibility = ItemVisibility.AGENDA_ITEM
    done: bool = False
    content_object: tuple[str, int] | None = None

    def __post_init__(self) -> None:
        """Validate the agenda item.

        Raises:
            ValueError: If the id is not positive
        """
        if self.id <= 0:
            raise ValueError(f"Agenda item id must be > 0, got {self.id}")

    def get_title(self) -> str:
        """Return the title, prefixed with the item number if there is one."""
        if self.item_number:
            return f"{self.item_number} · {self.title}"
        return self.title
