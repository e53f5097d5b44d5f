"""
Message store integration with Message DB.

This package provides the client and utilities for reading and writing
projector events to Message DB (PostgreSQL-based message store).
"""

from projector_feed.store.category import get_category_head, get_category_messages
from projector_feed.store.client import MessageDBClient
from projector_feed.store.operations import (
    Message,
    OptimisticConcurrencyError,
    read_stream,
    write_message,
)
from projector_feed.store.stream import (
    build_category_name,
    build_stream_name,
    parse_stream_name,
)

__all__ = [
    "MessageDBClient",
    "Message",
    "OptimisticConcurrencyError",
    "read_stream",
    "write_message",
    "get_category_messages",
    "get_category_head",
    "build_category_name",
    "build_stream_name",
    "parse_stream_name",
]
