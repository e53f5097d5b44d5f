"""Slide manifests and element resolution."""

from projector_feed.slides.manager import DEFAULT_SLIDES, SlideManager, SlideManifest

__all__ = ["DEFAULT_SLIDES", "SlideManager", "SlideManifest"]
