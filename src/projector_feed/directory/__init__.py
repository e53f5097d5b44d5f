"""Projector directories: the source of truth for projector configuration."""

from projector_feed.directory.base import (
    ListenerSet,
    ProjectorDirectory,
    ProjectorListener,
    Unsubscribe,
)
from projector_feed.directory.memory import InMemoryProjectorDirectory
from projector_feed.directory.messagedb import MessageDBProjectorDirectory
from projector_feed.directory.projection import project_to_projector

__all__ = [
    "ProjectorDirectory",
    "ProjectorListener",
    "Unsubscribe",
    "ListenerSet",
    "InMemoryProjectorDirectory",
    "MessageDBProjectorDirectory",
    "project_to_projector",
]
