"""Filter definitions for agenda item lists.

Filters are declarative: each ``Filter`` names an item property and offers a
list of options, each option being a value the property may take. When
several options of one filter are active, an item matches if it matches any
of them; an item must match every filter that has active options.

Example:
    >>> filters = create_agenda_filters()
    >>> [f.label for f in filters]
    ['Visibility', 'Status']
    >>> open_items = apply_filters(items, filters, {"Status": ["Open"]})
"""

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

import structlog

from projector_feed.models.agenda import ITEM_VISIBILITY_CHOICES, Item

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class FilterOption:
    """One selectable option of a filter.

    Attributes:
        label: Text shown to the user
        condition: Value the filtered property must equal
    """

    label: str
    condition: Any


@dataclass(frozen=True)
class Filter:
    """A filter over one property of agenda items.

    Attributes:
        label: Name of the filter
        property: Attribute of ``Item`` the filter looks at
        options: Selectable options
    """

    label: str
    property: str
    options: tuple[FilterOption, ...]

    def option(self, label: str) -> FilterOption:
        """Return the option with the given label.

        Raises:
            KeyError: If the filter has no such option
        """
        for option in self.options:
            if option.label == label:
                return option
        raise KeyError(f"Filter '{self.label}' has no option '{label}'")


def create_visibility_filter_options() -> tuple[FilterOption, ...]:
    """Build one option per agenda item visibility choice."""
    return tuple(
        FilterOption(label=name, condition=visibility.value)
        for visibility, name in ITEM_VISIBILITY_CHOICES
    )


def create_agenda_filters() -> list[Filter]:
    """Build the filter definitions for agenda item lists."""
    return [
        Filter(
            label="Visibility",
            property="type",
            options=create_visibility_filter_options(),
        ),
        Filter(
            label="Status",
            property="done",
            options=(
                FilterOption(label="Open", condition=False),
                FilterOption(label="Closed", condition=True),
            ),
        ),
    ]


def _property_value(item: Item, name: str) -> Any:
    value = getattr(item, name)
    # Enum properties compare by their raw value
    return getattr(value, "value", value)


def apply_filters(
    items: Iterable[Item],
    filters: Sequence[Filter],
    active: Mapping[str, Sequence[str]],
) -> list[Item]:
    """Keep the items that match all active filters.

    Args:
        items: Agenda items to filter
        filters: Available filter definitions
        active: Filter label -> labels of the selected options

    Returns:
        Matching items in their original order

    Raises:
        KeyError: If an active filter or option does not exist
    """
    by_label = {f.label: f for f in filters}
    selected: list[tuple[str, list[Any]]] = []
    for label, option_labels in active.items():
        if not option_labels:
            continue
        if label not in by_label:
            raise KeyError(f"Unknown filter '{label}'")
        definition = by_label[label]
        conditions = [definition.option(option).condition for option in option_labels]
        selected.append((definition.property, conditions))

    result = [
        item
        for item in items
        if all(_property_value(item, prop) in conditions for prop, conditions in selected)
    ]
    logger.debug("agenda_items_filtered", active_filters=len(selected), matched=len(result))
    return result
