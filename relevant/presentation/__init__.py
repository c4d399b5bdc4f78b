"""Render helpers: error containment and text cards."""

from relevant.presentation.boundary import ErrorBoundary
from relevant.presentation.cards import format_duration, render_content_card

__all__ = ["ErrorBoundary", "render_content_card", "format_duration"]
