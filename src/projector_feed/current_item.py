"""Resolve the agenda item currently shown on a projector.

The current item is derived from the projector's single non-stable element:
the element is resolved to its descriptor, the descriptor to its content,
and the content to its agenda item. Any step that has nothing to offer makes
the result None; "nothing shown" is a normal state, not an error.

Example:
    >>> item = get_current_agenda_item(projector, SlideManager(), content_repository)
    >>> item.id if item else None
    3
"""

import structlog

from projector_feed.content import ContentRepository
from projector_feed.errors import ContentNotFoundError, MalformedElementError
from projector_feed.models.agenda import Item
from projector_feed.models.content import AgendaContent
from projector_feed.models.projector import Projector
from projector_feed.slides.manager import SlideManager

logger = structlog.get_logger(__name__)


def get_current_agenda_item(
    projector: Projector,
    slide_manager: SlideManager,
    content: ContentRepository,
) -> Item | None:
    """Return the agenda item of the non-stable element on a projector.

    Args:
        projector: Projector snapshot to inspect
        slide_manager: Resolves raw elements to descriptors
        content: Looks up the view model behind a descriptor

    Returns:
        The agenda item, or None if no non-stable element is projected, the
        element cannot be resolved, its content is not registered, or the
        content does not belong to the agenda. Lookup failures other than
        missing content or a malformed element are logged as warnings; they
        never reach the caller.
    """
    non_stable = projector.non_stable_elements()
    if not non_stable:
        return None

    log = logger.bind(projector_id=projector.id, slide=non_stable[0].name)
    if len(non_stable) > 1:
        log.debug("multiple_non_stable_elements", count=len(non_stable))

    try:
        descriptor = slide_manager.get_identifiable_element(non_stable[0])
        view_model = content.lookup(descriptor)
        if isinstance(view_model, AgendaContent):
            return view_model.get_agenda_item()
    except (MalformedElementError, ContentNotFoundError) as e:
        log.debug("current_item_unresolved", reason=str(e))
    except Exception as e:
        log.warning("current_item_resolution_failed", error=str(e), exc_info=True)
    return None
