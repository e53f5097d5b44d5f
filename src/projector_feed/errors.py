"""Exception hierarchy for projector-feed.

Lookup and configuration errors are expected transient states and are turned
into "no current item" by the current item resolver. Projection errors are
raised by projector directories when a mutation is rejected and always reach
the caller of a toggle.
"""


class ProjectorFeedError(Exception):
    """Base class for all projector-feed errors."""

    pass


class ContentNotFoundError(ProjectorFeedError):
    """Raised when no content is registered for an element descriptor.

    Attributes:
        collection: Collection name that was looked up
        content_id: Identifier that was looked up (None if the descriptor had none)
    """

    def __init__(self, collection: str, content_id: int | None = None) -> None:
        self.collection = collection
        self.content_id = content_id
        if content_id is None:
            message = f"No content registered for '{collection}'"
        else:
            message = f"No content registered for '{collection}' with id {content_id}"
        super().__init__(message)


class MalformedElementError(ProjectorFeedError):
    """Raised when a projector element cannot be interpreted."""

    pass


class ProjectionError(ProjectorFeedError):
    """Raised when a projector rejects a project or remove mutation."""

    pass


class ProjectorNotFoundError(ProjectionError):
    """Raised when a projector does not exist.

    Attributes:
        projector_id: Identifier of the missing projector
    """

    def __init__(self, projector_id: int) -> None:
        self.projector_id = projector_id
        super().__init__(f"Projector {projector_id} does not exist")


class ProjectionConflictError(ProjectionError):
    """Raised when a mutation conflicts with the projector's current elements.

    Attributes:
        projector_id: Identifier of the projector
        element_name: Name of the element that caused the conflict
    """

    def __init__(self, projector_id: int, element_name: str, reason: str) -> None:
        self.projector_id = projector_id
        self.element_name = element_name
        super().__init__(f"Cannot change '{element_name}' on projector {projector_id}: {reason}")
