"""Message handlers that dispatch on message type."""

from collections.abc import Iterable, Mapping

import structlog

from projector_feed.store.operations import Message
from projector_feed.subscriber.base import MessageHandler

logger = structlog.get_logger(__name__)


def event_type_router(handlers_map: Mapping[str, MessageHandler]) -> MessageHandler:
    """Build a handler that dispatches each message by its type.

    Messages of types that have no handler are skipped.

    Example:
        >>> router = event_type_router({
        ...     "ElementProjected": on_projected,
        ...     "ElementRemoved": on_removed,
        ... })
        >>> subscriber = Subscriber("projector:v0", handler=router, store_client=client)
    """
    routes = dict(handlers_map)

    def route(message: Message) -> None:
        target = routes.get(message.type)
        if target is None:
            logger.debug("message_type_skipped", message_type=message.type)
            return None
        return target(message)  # type: ignore[return-value]

    return route


def same_handler_for(event_types: Iterable[str], handler: MessageHandler) -> MessageHandler:
    """Build a handler that passes the listed message types to one handler."""
    return event_type_router(dict.fromkeys(event_types, handler))
