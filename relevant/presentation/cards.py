"""Plain-text rendering of content views."""

import math

from relevant.models.content import ContentView

MAX_HIGHLIGHTS = 3


def format_duration(seconds: float) -> str:
    """``m:ss`` or ``h:mm:ss``; anything unusable renders as ``0:00``."""
    if not isinstance(seconds, (int, float)) or not math.isfinite(seconds) or seconds < 0:
        return "0:00"
    total = int(seconds)
    minutes, secs = divmod(total, 60)
    hours, minutes = divmod(minutes, 60)
    if hours:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"


def format_relevance(score: float) -> str:
    return f"{round(score * 100)}%"


def render_content_card(view: ContentView) -> str:
    """Render one content card as text.

    Personalized highlights replace the generic ones when present; at most
    three are shown.
    """
    meta = [view.source_channel.name]
    if view.duration:
        meta.append(format_duration(view.duration))

    uc = view.user_content
    if uc is not None:
        meta.append(f"{format_relevance(uc.relevance_score)} relevant")

    lines = [view.title, " · ".join(meta)]

    summary = (uc.personalized_summary if uc else "") or view.summary
    if summary:
        lines.append(summary)

    highlights = (uc.personalized_highlights if uc else []) or view.highlights
    lines.extend(f"  • {h}" for h in highlights[:MAX_HIGHLIGHTS])

    markers = []
    if view.is_liked:
        markers.append("[liked]")
    if view.is_saved:
        markers.append("[saved]")
    if markers:
        lines.append(" ".join(markers))

    if view.url and view.url != "#":
        lines.append(view.url)
    return "\n".join(lines)


__all__ = ["render_content_card", "format_duration", "format_relevance"]
