"""Message DB subscriber framework for the projector change feed."""

from projector_feed.subscriber.base import MessageHandler, Subscriber, SubscriberError
from projector_feed.subscriber.handlers import event_type_router, same_handler_for

__all__ = [
    "MessageHandler",
    "Subscriber",
    "SubscriberError",
    "event_type_router",
    "same_handler_for",
]
