"""
projector-feed: live current agenda item per projector.

For every projector this package resolves which agenda item belongs to the
content currently projected, publishes it as a push-updated channel that
follows each projector change, and toggles the current list of speakers
slide or overlay on a projector.
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
